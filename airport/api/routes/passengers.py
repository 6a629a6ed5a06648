"""Passenger endpoints."""

from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from airport.api.deps import get_current_user, get_passenger_repo
from airport.contracts.passenger import (
    FlightRegistration,
    HistoryQuery,
    PassengerCreate,
    PassengerSearch,
    PassengerUpdate,
)
from airport.persistence.repositories.passenger_repo import PassengerRepository

router = APIRouter(prefix="/passengers", tags=["passengers"])


@router.post("", status_code=201)
async def create_passenger(
    passenger: PassengerCreate,
    user_id: int = Depends(get_current_user),
    repo: PassengerRepository = Depends(get_passenger_repo),
) -> dict:
    item = await asyncio.to_thread(repo.create, passenger.changes(), user_id)
    return item.to_response()


@router.get("")
async def list_passengers(
    query: Annotated[PassengerSearch, Query()],
    repo: PassengerRepository = Depends(get_passenger_repo),
) -> dict:
    page = await asyncio.to_thread(repo.search, query)
    return page.to_response()


@router.get("/statistics")
async def passenger_statistics(repo: PassengerRepository = Depends(get_passenger_repo)) -> dict:
    return await asyncio.to_thread(repo.statistics)


@router.post("/register-for-flight", status_code=201)
async def register_for_flight(
    registration: FlightRegistration,
    user_id: int = Depends(get_current_user),
    repo: PassengerRepository = Depends(get_passenger_repo),
) -> dict:
    passenger, ticket = await asyncio.to_thread(repo.register_for_flight, registration, user_id)
    return {"passenger": passenger.to_response(), "ticket": ticket.to_response()}


@router.get("/passport/{passport_number}")
async def get_passenger_by_passport(
    passport_number: str,
    repo: PassengerRepository = Depends(get_passenger_repo),
) -> dict:
    item = await asyncio.to_thread(repo.by_passport, passport_number)
    if item is None:
        raise HTTPException(status_code=404, detail="Passenger not found")
    return item.to_response()


@router.get("/email/{email}")
async def get_passenger_by_email(
    email: str,
    repo: PassengerRepository = Depends(get_passenger_repo),
) -> dict:
    item = await asyncio.to_thread(repo.by_email, email)
    if item is None:
        raise HTTPException(status_code=404, detail="Passenger not found")
    return item.to_response()


@router.get("/{passenger_id}")
async def get_passenger(
    passenger_id: int,
    repo: PassengerRepository = Depends(get_passenger_repo),
) -> dict:
    item = await asyncio.to_thread(repo.get, passenger_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Passenger not found")
    return item.to_response()


@router.get("/{passenger_id}/details")
async def get_passenger_details(
    passenger_id: int,
    repo: PassengerRepository = Depends(get_passenger_repo),
) -> dict:
    item = await asyncio.to_thread(repo.details, passenger_id)
    return item.to_response()


@router.get("/{passenger_id}/history")
async def get_passenger_history(
    passenger_id: int,
    query: Annotated[HistoryQuery, Query()],
    repo: PassengerRepository = Depends(get_passenger_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.history, passenger_id, query)
    return [t.to_response() for t in items]


@router.put("/{passenger_id}")
async def update_passenger(
    passenger_id: int,
    passenger: PassengerUpdate,
    user_id: int = Depends(get_current_user),
    repo: PassengerRepository = Depends(get_passenger_repo),
) -> dict:
    item = await asyncio.to_thread(repo.update, passenger_id, passenger.changes(), user_id)
    return item.to_response()


@router.delete("/{passenger_id}", status_code=204)
async def delete_passenger(
    passenger_id: int,
    user_id: int = Depends(get_current_user),
    repo: PassengerRepository = Depends(get_passenger_repo),
) -> None:
    await asyncio.to_thread(repo.delete, passenger_id, user_id)
