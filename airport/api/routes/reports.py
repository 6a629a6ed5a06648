"""Report endpoints: airport statistics and data integrity."""

from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from airport.api.deps import get_current_user, get_report_repo
from airport.contracts.analytics import AirportReportQuery
from airport.persistence.repositories.report_repo import ReportRepository

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/airport-statistics")
async def airport_statistics_report(
    query: Annotated[AirportReportQuery, Query()],
    user_id: int = Depends(get_current_user),
    repo: ReportRepository = Depends(get_report_repo),
) -> dict:
    return await asyncio.to_thread(repo.airport_statistics, query)


@router.get("/data-integrity")
async def data_integrity_report(
    user_id: int = Depends(get_current_user),
    repo: ReportRepository = Depends(get_report_repo),
) -> dict:
    return await asyncio.to_thread(repo.data_integrity)
