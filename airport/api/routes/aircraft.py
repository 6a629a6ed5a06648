"""Aircraft fleet endpoints."""

from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from airport.api.deps import get_aircraft_repo, get_current_user
from airport.contracts.fleet import (
    AircraftCreate,
    AircraftSearch,
    AircraftStatusUpdate,
    AircraftUpdate,
    MaintenanceRequest,
)
from airport.persistence.repositories.aircraft_repo import AircraftRepository

router = APIRouter(prefix="/aircraft", tags=["aircraft"])


@router.post("", status_code=201)
async def create_aircraft(
    aircraft: AircraftCreate,
    user_id: int = Depends(get_current_user),
    repo: AircraftRepository = Depends(get_aircraft_repo),
) -> dict:
    item = await asyncio.to_thread(repo.create, aircraft.changes(), user_id)
    return item.to_response()


@router.get("")
async def list_aircraft(
    query: Annotated[AircraftSearch, Query()],
    repo: AircraftRepository = Depends(get_aircraft_repo),
) -> dict:
    page = await asyncio.to_thread(repo.search, query)
    return page.to_response()


@router.get("/statistics")
async def aircraft_statistics(repo: AircraftRepository = Depends(get_aircraft_repo)) -> dict:
    return await asyncio.to_thread(repo.statistics)


@router.get("/efficiency")
async def aircraft_efficiency(repo: AircraftRepository = Depends(get_aircraft_repo)) -> list[dict]:
    return await asyncio.to_thread(repo.efficiency)


@router.get("/maintenance-schedule")
async def maintenance_schedule(
    days: int = Query(30, ge=1, le=365),
    repo: AircraftRepository = Depends(get_aircraft_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.maintenance_schedule, days)
    return [w.to_response() for w in items]


@router.get("/{aircraft_id}")
async def get_aircraft(
    aircraft_id: int,
    repo: AircraftRepository = Depends(get_aircraft_repo),
) -> dict:
    item = await asyncio.to_thread(repo.get, aircraft_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Aircraft not found")
    return item.to_response()


@router.put("/{aircraft_id}")
async def update_aircraft(
    aircraft_id: int,
    aircraft: AircraftUpdate,
    user_id: int = Depends(get_current_user),
    repo: AircraftRepository = Depends(get_aircraft_repo),
) -> dict:
    item = await asyncio.to_thread(repo.update, aircraft_id, aircraft.changes(), user_id)
    return item.to_response()


@router.patch("/{aircraft_id}/status")
async def update_aircraft_status(
    aircraft_id: int,
    update: AircraftStatusUpdate,
    user_id: int = Depends(get_current_user),
    repo: AircraftRepository = Depends(get_aircraft_repo),
) -> dict:
    item = await asyncio.to_thread(repo.update_status, aircraft_id, update.status, user_id)
    return item.to_response()


@router.patch("/{aircraft_id}/maintenance")
async def schedule_maintenance(
    aircraft_id: int,
    request: MaintenanceRequest,
    user_id: int = Depends(get_current_user),
    repo: AircraftRepository = Depends(get_aircraft_repo),
) -> dict:
    item = await asyncio.to_thread(
        repo.schedule_maintenance, aircraft_id, request.next_maintenance, request.notes, user_id
    )
    return item.to_response()


@router.delete("/{aircraft_id}", status_code=204)
async def delete_aircraft(
    aircraft_id: int,
    user_id: int = Depends(get_current_user),
    repo: AircraftRepository = Depends(get_aircraft_repo),
) -> None:
    await asyncio.to_thread(repo.delete, aircraft_id, user_id)
