"""Analytics endpoints; each takes an optional start_date/end_date window."""

from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from airport.api.deps import get_analytics_repo, get_current_user
from airport.contracts.analytics import AnalyticsQuery
from airport.persistence.repositories.analytics_repo import AnalyticsRepository

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/flights")
async def flight_analytics(
    query: Annotated[AnalyticsQuery, Query()],
    user_id: int = Depends(get_current_user),
    repo: AnalyticsRepository = Depends(get_analytics_repo),
) -> dict:
    return await asyncio.to_thread(repo.flights, query)


@router.get("/revenue")
async def revenue_analytics(
    query: Annotated[AnalyticsQuery, Query()],
    user_id: int = Depends(get_current_user),
    repo: AnalyticsRepository = Depends(get_analytics_repo),
) -> dict:
    return await asyncio.to_thread(repo.revenue, query)


@router.get("/passengers")
async def passenger_analytics(
    query: Annotated[AnalyticsQuery, Query()],
    user_id: int = Depends(get_current_user),
    repo: AnalyticsRepository = Depends(get_analytics_repo),
) -> dict:
    return await asyncio.to_thread(repo.passengers, query)


@router.get("/operational")
async def operational_analytics(
    query: Annotated[AnalyticsQuery, Query()],
    user_id: int = Depends(get_current_user),
    repo: AnalyticsRepository = Depends(get_analytics_repo),
) -> dict:
    return await asyncio.to_thread(repo.operational, query)


@router.get("/delays")
async def delay_analytics(
    query: Annotated[AnalyticsQuery, Query()],
    user_id: int = Depends(get_current_user),
    repo: AnalyticsRepository = Depends(get_analytics_repo),
) -> dict:
    return await asyncio.to_thread(repo.delays, query)


@router.get("/dashboard")
async def dashboard(
    query: Annotated[AnalyticsQuery, Query()],
    user_id: int = Depends(get_current_user),
    repo: AnalyticsRepository = Depends(get_analytics_repo),
) -> dict:
    return await asyncio.to_thread(repo.dashboard, query)
