"""Airport, gate and distance endpoints."""

from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from airport.api.deps import get_airport_repo, get_current_user, get_gate_repo
from airport.contracts.geography import (
    AirportCreate,
    AirportSearch,
    AirportUpdate,
    DistanceRequest,
    GateCreate,
    GateUpdate,
)
from airport.persistence.repositories.airport_repo import AirportRepository
from airport.persistence.repositories.gate_repo import GateRepository

router = APIRouter(prefix="/airports", tags=["airports"])
gates_router = APIRouter(prefix="/gates", tags=["airports"])


@router.post("", status_code=201)
async def create_airport(
    airport: AirportCreate,
    user_id: int = Depends(get_current_user),
    repo: AirportRepository = Depends(get_airport_repo),
) -> dict:
    item = await asyncio.to_thread(repo.create, airport.changes(), user_id)
    return item.to_response()


@router.get("")
async def list_airports(
    query: Annotated[AirportSearch, Query()],
    repo: AirportRepository = Depends(get_airport_repo),
) -> dict:
    page = await asyncio.to_thread(repo.search, query)
    return page.to_response()


@router.get("/statistics")
async def airport_statistics(repo: AirportRepository = Depends(get_airport_repo)) -> dict:
    return await asyncio.to_thread(repo.statistics)


@router.post("/distance")
async def airport_distance(
    request: DistanceRequest,
    repo: AirportRepository = Depends(get_airport_repo),
) -> dict:
    return await asyncio.to_thread(repo.distance, request)


@router.get("/country/{country}")
async def airports_by_country(
    country: str,
    repo: AirportRepository = Depends(get_airport_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.by_country, country)
    return [a.to_response() for a in items]


@router.get("/city/{city_id}")
async def airports_by_city(
    city_id: int,
    repo: AirportRepository = Depends(get_airport_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.by_city, city_id)
    return [a.to_response() for a in items]


@router.get("/iata/{iata_code}")
async def get_airport_by_iata(
    iata_code: str,
    repo: AirportRepository = Depends(get_airport_repo),
) -> dict:
    item = await asyncio.to_thread(repo.by_iata, iata_code)
    if item is None:
        raise HTTPException(status_code=404, detail=f"Airport {iata_code.upper()} not found")
    return item.to_response()


@router.get("/{airport_id}")
async def get_airport(
    airport_id: int,
    repo: AirportRepository = Depends(get_airport_repo),
) -> dict:
    item = await asyncio.to_thread(repo.get, airport_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Airport not found")
    return item.to_response()


@router.patch("/{airport_id}")
async def update_airport(
    airport_id: int,
    airport: AirportUpdate,
    user_id: int = Depends(get_current_user),
    repo: AirportRepository = Depends(get_airport_repo),
) -> dict:
    item = await asyncio.to_thread(repo.update, airport_id, airport.changes(), user_id)
    return item.to_response()


@router.delete("/{airport_id}", status_code=204)
async def delete_airport(
    airport_id: int,
    user_id: int = Depends(get_current_user),
    repo: AirportRepository = Depends(get_airport_repo),
) -> None:
    await asyncio.to_thread(repo.delete, airport_id, user_id)


# ------------------------------------------------------------------
# Gates
# ------------------------------------------------------------------


@router.get("/{airport_id}/gates")
async def list_gates(
    airport_id: int,
    repo: GateRepository = Depends(get_gate_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.by_airport, airport_id)
    return [g.to_response() for g in items]


@router.get("/{airport_id}/gates/available")
async def available_gates(
    airport_id: int,
    terminal: str | None = None,
    repo: GateRepository = Depends(get_gate_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.available, airport_id, terminal)
    return [g.to_response() for g in items]


@router.post("/{airport_id}/gates", status_code=201)
async def create_gate(
    airport_id: int,
    gate: GateCreate,
    user_id: int = Depends(get_current_user),
    repo: GateRepository = Depends(get_gate_repo),
) -> dict:
    item = await asyncio.to_thread(repo.create_for, airport_id, gate.model_dump(), user_id)
    return item.to_response()


@gates_router.get("/statistics")
async def gate_statistics(
    airport_id: int | None = None,
    repo: GateRepository = Depends(get_gate_repo),
) -> list[dict]:
    return await asyncio.to_thread(repo.statistics, airport_id)


@gates_router.get("/{gate_id}")
async def get_gate(
    gate_id: int,
    repo: GateRepository = Depends(get_gate_repo),
) -> dict:
    item = await asyncio.to_thread(repo.get, gate_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Gate not found")
    return item.to_response()


@gates_router.patch("/{gate_id}")
async def update_gate(
    gate_id: int,
    gate: GateUpdate,
    user_id: int = Depends(get_current_user),
    repo: GateRepository = Depends(get_gate_repo),
) -> dict:
    item = await asyncio.to_thread(repo.update, gate_id, gate.changes(), user_id)
    return item.to_response()


@gates_router.post("/{gate_id}/release")
async def release_gate(
    gate_id: int,
    user_id: int = Depends(get_current_user),
    repo: GateRepository = Depends(get_gate_repo),
) -> dict:
    item = await asyncio.to_thread(repo.release, gate_id, user_id)
    return item.to_response()


@gates_router.delete("/{gate_id}", status_code=204)
async def delete_gate(
    gate_id: int,
    user_id: int = Depends(get_current_user),
    repo: GateRepository = Depends(get_gate_repo),
) -> None:
    await asyncio.to_thread(repo.delete, gate_id, user_id)
