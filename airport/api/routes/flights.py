"""Flight scheduling and operations endpoints."""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from airport.api.deps import get_baggage_repo, get_current_user, get_flight_repo, get_ticket_repo
from airport.contracts.enums import FlightStatus, TicketClass
from airport.contracts.flight import (
    AutoGateAssignment,
    FlightCancellation,
    FlightCreate,
    FlightDelay,
    FlightSearch,
    FlightStatisticsQuery,
    FlightStatusUpdate,
    FlightUpdate,
    GateAssignment,
)
from airport.contracts.ticket import SeatAvailabilityQuery
from airport.persistence.repositories.baggage_repo import BaggageRepository
from airport.persistence.repositories.flight_repo import FlightRepository
from airport.persistence.repositories.ticket_repo import TicketRepository

router = APIRouter(prefix="/flights", tags=["flights"])


@router.post("", status_code=201)
async def create_flight(
    flight: FlightCreate,
    user_id: int = Depends(get_current_user),
    repo: FlightRepository = Depends(get_flight_repo),
) -> dict:
    item = await asyncio.to_thread(repo.create, flight.changes(), user_id)
    return item.to_response()


@router.get("")
async def search_flights(
    query: Annotated[FlightSearch, Query()],
    repo: FlightRepository = Depends(get_flight_repo),
) -> dict:
    page = await asyncio.to_thread(repo.search, query)
    return page.to_response()


@router.post("/search/advanced")
async def advanced_search(
    query: FlightSearch,
    repo: FlightRepository = Depends(get_flight_repo),
) -> dict:
    page = await asyncio.to_thread(repo.advanced_search, query)
    return page.to_response()


@router.get("/statistics")
async def flight_statistics(
    query: Annotated[FlightStatisticsQuery, Query()],
    repo: FlightRepository = Depends(get_flight_repo),
) -> dict:
    return await asyncio.to_thread(repo.statistics, query)


@router.get("/number/{flight_number}")
async def get_flight_by_number(
    flight_number: str,
    repo: FlightRepository = Depends(get_flight_repo),
) -> dict:
    item = await asyncio.to_thread(repo.by_number, flight_number)
    if item is None:
        raise HTTPException(status_code=404, detail=f"Flight {flight_number.upper()} not found")
    return item.to_response()


@router.get("/aircraft/{aircraft_id}")
async def flights_by_aircraft(
    aircraft_id: int,
    repo: FlightRepository = Depends(get_flight_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.by_aircraft, aircraft_id)
    return [f.to_response() for f in items]


@router.get("/route")
async def flights_by_route(
    departure_airport_id: int,
    arrival_airport_id: int,
    repo: FlightRepository = Depends(get_flight_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.by_route, departure_airport_id, arrival_airport_id)
    return [f.to_response() for f in items]


@router.get("/status/{status}")
async def flights_by_status(
    status: FlightStatus,
    repo: FlightRepository = Depends(get_flight_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.by_status, status)
    return [f.to_response() for f in items]


@router.get("/date-range")
async def flights_by_date_range(
    start_date: date,
    end_date: date,
    repo: FlightRepository = Depends(get_flight_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.by_date_range, start_date, end_date)
    return [f.to_response() for f in items]


@router.get("/{flight_id}")
async def get_flight(
    flight_id: int,
    repo: FlightRepository = Depends(get_flight_repo),
) -> dict:
    item = await asyncio.to_thread(repo.get, flight_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Flight not found")
    return item.to_response()


@router.put("/{flight_id}")
async def update_flight(
    flight_id: int,
    flight: FlightUpdate,
    user_id: int = Depends(get_current_user),
    repo: FlightRepository = Depends(get_flight_repo),
) -> dict:
    item = await asyncio.to_thread(repo.update, flight_id, flight.changes(), user_id)
    return item.to_response()


@router.delete("/{flight_id}", status_code=204)
async def delete_flight(
    flight_id: int,
    user_id: int = Depends(get_current_user),
    repo: FlightRepository = Depends(get_flight_repo),
) -> None:
    await asyncio.to_thread(repo.delete, flight_id, user_id)


# ------------------------------------------------------------------
# Operations
# ------------------------------------------------------------------


@router.put("/{flight_id}/status")
async def update_flight_status(
    flight_id: int,
    update: FlightStatusUpdate,
    user_id: int = Depends(get_current_user),
    repo: FlightRepository = Depends(get_flight_repo),
) -> dict:
    item = await asyncio.to_thread(repo.update_status, flight_id, update, user_id)
    return item.to_response()


@router.put("/{flight_id}/gate")
async def assign_gate(
    flight_id: int,
    assignment: GateAssignment,
    user_id: int = Depends(get_current_user),
    repo: FlightRepository = Depends(get_flight_repo),
) -> dict:
    item = await asyncio.to_thread(repo.assign_gate, flight_id, assignment.gate_id, user_id)
    return item.to_response()


@router.post("/{flight_id}/gate/auto")
async def auto_assign_gate(
    flight_id: int,
    request: AutoGateAssignment,
    user_id: int = Depends(get_current_user),
    repo: FlightRepository = Depends(get_flight_repo),
) -> dict:
    item = await asyncio.to_thread(repo.auto_assign_gate, flight_id, request.terminal, user_id)
    return item.to_response()


@router.put("/{flight_id}/delay")
async def delay_flight(
    flight_id: int,
    request: FlightDelay,
    user_id: int = Depends(get_current_user),
    repo: FlightRepository = Depends(get_flight_repo),
) -> dict:
    item = await asyncio.to_thread(repo.delay, flight_id, request, user_id)
    return item.to_response()


@router.put("/{flight_id}/cancel")
async def cancel_flight(
    flight_id: int,
    request: FlightCancellation,
    user_id: int = Depends(get_current_user),
    repo: FlightRepository = Depends(get_flight_repo),
) -> dict:
    item = await asyncio.to_thread(repo.cancel, flight_id, request, user_id)
    return item.to_response()


# ------------------------------------------------------------------
# Seats, load and manifest
# ------------------------------------------------------------------


@router.get("/{flight_id}/seat-availability")
async def flight_seat_availability(
    flight_id: int,
    ticket_class: TicketClass | None = Query(None, alias="class"),
    include_seat_map: bool = False,
    tickets: TicketRepository = Depends(get_ticket_repo),
) -> dict:
    query = SeatAvailabilityQuery(flight_id=flight_id, ticket_class=ticket_class, include_seat_map=include_seat_map)
    return await asyncio.to_thread(tickets.seat_availability, query)


@router.get("/{flight_id}/load")
async def flight_load(
    flight_id: int,
    repo: FlightRepository = Depends(get_flight_repo),
) -> dict:
    load = await asyncio.to_thread(repo.load, flight_id)
    return load.to_response()


@router.get("/{flight_id}/available-seats")
async def available_seats(
    flight_id: int,
    repo: FlightRepository = Depends(get_flight_repo),
) -> dict:
    load = await asyncio.to_thread(repo.load, flight_id)
    return {
        "flight_id": load.flight_id,
        "flight_number": load.flight_number,
        "available_seats": load.available_seats,
    }


@router.get("/{flight_id}/passengers")
async def flight_passengers(
    flight_id: int,
    repo: FlightRepository = Depends(get_flight_repo),
) -> list[dict]:
    return await asyncio.to_thread(repo.passengers, flight_id)


@router.get("/{flight_id}/baggage")
async def flight_baggage(
    flight_id: int,
    repo: FlightRepository = Depends(get_flight_repo),
    baggage: BaggageRepository = Depends(get_baggage_repo),
) -> list[dict]:
    await asyncio.to_thread(repo.require, flight_id)
    items = await asyncio.to_thread(baggage.by_flight, flight_id)
    return [b.to_response() for b in items]
