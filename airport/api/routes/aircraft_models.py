"""Aircraft model endpoints."""

from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from airport.api.deps import get_aircraft_model_repo, get_current_user
from airport.contracts.fleet import AircraftModelCreate, AircraftModelSearch, AircraftModelUpdate
from airport.persistence.repositories.aircraft_model_repo import AircraftModelRepository

router = APIRouter(prefix="/aircraft-models", tags=["aircraft-models"])


@router.post("", status_code=201)
async def create_model(
    model: AircraftModelCreate,
    user_id: int = Depends(get_current_user),
    repo: AircraftModelRepository = Depends(get_aircraft_model_repo),
) -> dict:
    item = await asyncio.to_thread(repo.create, model.changes(), user_id)
    return item.to_response()


@router.get("")
async def list_models(
    query: Annotated[AircraftModelSearch, Query()],
    repo: AircraftModelRepository = Depends(get_aircraft_model_repo),
) -> dict:
    page = await asyncio.to_thread(repo.search, query)
    return page.to_response()


@router.get("/statistics")
async def model_statistics(repo: AircraftModelRepository = Depends(get_aircraft_model_repo)) -> dict:
    return await asyncio.to_thread(repo.statistics)


@router.get("/popular")
async def popular_models(
    limit: int = Query(10, ge=1, le=100),
    repo: AircraftModelRepository = Depends(get_aircraft_model_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.popular, limit)
    return [m.to_response() for m in items]


@router.get("/manufacturer/{manufacturer}")
async def models_by_manufacturer(
    manufacturer: str,
    repo: AircraftModelRepository = Depends(get_aircraft_model_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.by_manufacturer, manufacturer)
    return [m.to_response() for m in items]


@router.get("/{model_id}")
async def get_model(
    model_id: int,
    repo: AircraftModelRepository = Depends(get_aircraft_model_repo),
) -> dict:
    item = await asyncio.to_thread(repo.get, model_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Aircraft model not found")
    return item.to_response()


@router.put("/{model_id}")
async def update_model(
    model_id: int,
    model: AircraftModelUpdate,
    user_id: int = Depends(get_current_user),
    repo: AircraftModelRepository = Depends(get_aircraft_model_repo),
) -> dict:
    item = await asyncio.to_thread(repo.update, model_id, model.changes(), user_id)
    return item.to_response()


@router.delete("/{model_id}", status_code=204)
async def delete_model(
    model_id: int,
    user_id: int = Depends(get_current_user),
    repo: AircraftModelRepository = Depends(get_aircraft_model_repo),
) -> None:
    await asyncio.to_thread(repo.delete, model_id, user_id)
