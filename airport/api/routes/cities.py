"""City endpoints."""

from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from airport.api.deps import get_city_repo, get_current_user
from airport.contracts.geography import CityCreate, CitySearch, CityUpdate
from airport.persistence.repositories.city_repo import CityRepository

router = APIRouter(prefix="/cities", tags=["cities"])


@router.post("", status_code=201)
async def create_city(
    city: CityCreate,
    user_id: int = Depends(get_current_user),
    repo: CityRepository = Depends(get_city_repo),
) -> dict:
    item = await asyncio.to_thread(repo.create, city.changes(), user_id)
    return item.to_response()


@router.get("")
async def list_cities(
    query: Annotated[CitySearch, Query()],
    repo: CityRepository = Depends(get_city_repo),
) -> dict:
    page = await asyncio.to_thread(repo.search, query)
    return page.to_response()


@router.get("/statistics")
async def city_statistics(repo: CityRepository = Depends(get_city_repo)) -> dict:
    return await asyncio.to_thread(repo.statistics)


@router.get("/with-airports")
async def cities_with_airports(repo: CityRepository = Depends(get_city_repo)) -> list[dict]:
    return await asyncio.to_thread(repo.with_airports)


@router.get("/country/{country}")
async def cities_by_country(
    country: str,
    repo: CityRepository = Depends(get_city_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.by_country, country)
    return [c.to_response() for c in items]


@router.get("/{city_id}")
async def get_city(
    city_id: int,
    repo: CityRepository = Depends(get_city_repo),
) -> dict:
    item = await asyncio.to_thread(repo.get, city_id)
    if item is None:
        raise HTTPException(status_code=404, detail="City not found")
    return item.to_response()


@router.patch("/{city_id}")
async def update_city(
    city_id: int,
    city: CityUpdate,
    user_id: int = Depends(get_current_user),
    repo: CityRepository = Depends(get_city_repo),
) -> dict:
    item = await asyncio.to_thread(repo.update, city_id, city.changes(), user_id)
    return item.to_response()


@router.delete("/{city_id}", status_code=204)
async def delete_city(
    city_id: int,
    user_id: int = Depends(get_current_user),
    repo: CityRepository = Depends(get_city_repo),
) -> None:
    await asyncio.to_thread(repo.delete, city_id, user_id)
