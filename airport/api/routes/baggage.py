"""Baggage handling endpoints."""

from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from airport.api.deps import get_baggage_repo, get_current_user
from airport.contracts.baggage import (
    BaggageCreate,
    BaggageSearch,
    BaggageStatusUpdate,
    BaggageTrackRequest,
    BaggageUpdate,
)
from airport.persistence.repositories.baggage_repo import BaggageRepository

router = APIRouter(prefix="/baggage", tags=["baggage"])


@router.post("", status_code=201)
async def create_baggage(
    bag: BaggageCreate,
    user_id: int = Depends(get_current_user),
    repo: BaggageRepository = Depends(get_baggage_repo),
) -> dict:
    item = await asyncio.to_thread(repo.create, bag.changes(), user_id)
    return item.to_response()


@router.get("")
async def list_baggage(
    query: Annotated[BaggageSearch, Query()],
    repo: BaggageRepository = Depends(get_baggage_repo),
) -> dict:
    page = await asyncio.to_thread(repo.search, query)
    return page.to_response()


@router.get("/statistics")
async def baggage_statistics(repo: BaggageRepository = Depends(get_baggage_repo)) -> dict:
    return await asyncio.to_thread(repo.statistics)


@router.post("/update-status")
async def update_baggage_status(
    update: BaggageStatusUpdate,
    user_id: int = Depends(get_current_user),
    repo: BaggageRepository = Depends(get_baggage_repo),
) -> dict:
    item = await asyncio.to_thread(repo.update_status, update, user_id)
    return item.to_response()


@router.post("/track")
async def track_baggage(
    request: BaggageTrackRequest,
    repo: BaggageRepository = Depends(get_baggage_repo),
) -> dict:
    return await asyncio.to_thread(repo.track, request)


@router.get("/flight/{flight_id}")
async def baggage_by_flight(
    flight_id: int,
    repo: BaggageRepository = Depends(get_baggage_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.by_flight, flight_id)
    return [b.to_response() for b in items]


@router.get("/passenger/{passenger_id}")
async def baggage_by_passenger(
    passenger_id: int,
    repo: BaggageRepository = Depends(get_baggage_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.by_passenger, passenger_id)
    return [b.to_response() for b in items]


@router.get("/tag/{baggage_tag}")
async def get_baggage_by_tag(
    baggage_tag: str,
    repo: BaggageRepository = Depends(get_baggage_repo),
) -> dict:
    item = await asyncio.to_thread(repo.by_tag, baggage_tag)
    if item is None:
        raise HTTPException(status_code=404, detail="Baggage not found")
    return item.to_response()


@router.get("/{baggage_id}")
async def get_baggage(
    baggage_id: int,
    repo: BaggageRepository = Depends(get_baggage_repo),
) -> dict:
    item = await asyncio.to_thread(repo.get, baggage_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Baggage not found")
    return item.to_response()


@router.put("/{baggage_id}")
async def update_baggage(
    baggage_id: int,
    bag: BaggageUpdate,
    user_id: int = Depends(get_current_user),
    repo: BaggageRepository = Depends(get_baggage_repo),
) -> dict:
    item = await asyncio.to_thread(repo.update, baggage_id, bag.changes(), user_id)
    return item.to_response()


@router.delete("/{baggage_id}", status_code=204)
async def delete_baggage(
    baggage_id: int,
    user_id: int = Depends(get_current_user),
    repo: BaggageRepository = Depends(get_baggage_repo),
) -> None:
    await asyncio.to_thread(repo.delete, baggage_id, user_id)
