"""Ticketing endpoints: booking, check-in, seats, cancellation, refunds and pricing."""

from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from airport.api.deps import get_current_user, get_ticket_repo
from airport.contracts.enums import TicketClass
from airport.contracts.ticket import (
    CheckInRequest,
    PricingQuery,
    RefundRequest,
    SeatAvailabilityQuery,
    SeatSelection,
    TicketCancellation,
    TicketCreate,
    TicketSearch,
    TicketUpdate,
)
from airport.persistence.repositories.ticket_repo import TicketRepository

router = APIRouter(prefix="/tickets", tags=["tickets"])


@router.post("", status_code=201)
async def create_ticket(
    ticket: TicketCreate,
    user_id: int = Depends(get_current_user),
    repo: TicketRepository = Depends(get_ticket_repo),
) -> dict:
    item = await asyncio.to_thread(repo.create, ticket.changes(), user_id)
    return item.to_response()


@router.get("")
async def list_tickets(
    query: Annotated[TicketSearch, Query()],
    repo: TicketRepository = Depends(get_ticket_repo),
) -> dict:
    page = await asyncio.to_thread(repo.search, query)
    return page.to_response()


@router.get("/statistics")
async def ticket_statistics(repo: TicketRepository = Depends(get_ticket_repo)) -> dict:
    return await asyncio.to_thread(repo.statistics)


@router.get("/pricing")
async def ticket_pricing(
    query: Annotated[PricingQuery, Query()],
    repo: TicketRepository = Depends(get_ticket_repo),
) -> dict:
    quote = await asyncio.to_thread(repo.pricing, query)
    return quote.to_response()


@router.get("/seat-availability")
async def seat_availability(
    query: Annotated[SeatAvailabilityQuery, Query()],
    repo: TicketRepository = Depends(get_ticket_repo),
) -> dict:
    return await asyncio.to_thread(repo.seat_availability, query)


@router.post("/check-in")
async def check_in(
    request: CheckInRequest,
    user_id: int = Depends(get_current_user),
    repo: TicketRepository = Depends(get_ticket_repo),
) -> dict:
    item = await asyncio.to_thread(repo.check_in, request, user_id)
    return item.to_response()


@router.post("/select-seat")
async def select_seat(
    request: SeatSelection,
    user_id: int = Depends(get_current_user),
    repo: TicketRepository = Depends(get_ticket_repo),
) -> dict:
    item = await asyncio.to_thread(repo.select_seat, request, user_id)
    return item.to_response()


@router.post("/cancel")
async def cancel_ticket(
    request: TicketCancellation,
    user_id: int = Depends(get_current_user),
    repo: TicketRepository = Depends(get_ticket_repo),
) -> dict:
    item = await asyncio.to_thread(repo.cancel, request, user_id)
    return item.to_response()


@router.post("/refund")
async def refund_ticket(
    request: RefundRequest,
    user_id: int = Depends(get_current_user),
    repo: TicketRepository = Depends(get_ticket_repo),
) -> dict:
    item = await asyncio.to_thread(repo.refund, request, user_id)
    return item.to_response()


@router.get("/number/{ticket_number}")
async def get_ticket_by_number(
    ticket_number: str,
    repo: TicketRepository = Depends(get_ticket_repo),
) -> dict:
    item = await asyncio.to_thread(repo.by_number, ticket_number)
    if item is None:
        raise HTTPException(status_code=404, detail="Ticket not found")
    return item.to_response()


@router.get("/passenger/{passenger_id}")
async def tickets_by_passenger(
    passenger_id: int,
    repo: TicketRepository = Depends(get_ticket_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.by_passenger, passenger_id)
    return [t.to_response() for t in items]


@router.get("/{ticket_id}")
async def get_ticket(
    ticket_id: int,
    repo: TicketRepository = Depends(get_ticket_repo),
) -> dict:
    item = await asyncio.to_thread(repo.get, ticket_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Ticket not found")
    return item.to_response()


@router.get("/{ticket_id}/seat-availability")
async def ticket_seat_availability(
    ticket_id: int,
    include_seat_map: bool = False,
    repo: TicketRepository = Depends(get_ticket_repo),
) -> dict:
    """Seat availability on the ticket's flight, for the ticket's class."""
    ticket = await asyncio.to_thread(repo.require, ticket_id)
    query = SeatAvailabilityQuery(
        flight_id=ticket.flight_id,
        ticket_class=TicketClass(ticket.ticket_class),
        include_seat_map=include_seat_map,
    )
    return await asyncio.to_thread(repo.seat_availability, query)


@router.put("/{ticket_id}")
async def update_ticket(
    ticket_id: int,
    ticket: TicketUpdate,
    user_id: int = Depends(get_current_user),
    repo: TicketRepository = Depends(get_ticket_repo),
) -> dict:
    item = await asyncio.to_thread(repo.update, ticket_id, ticket.changes(), user_id)
    return item.to_response()


@router.delete("/{ticket_id}", status_code=204)
async def delete_ticket(
    ticket_id: int,
    user_id: int = Depends(get_current_user),
    repo: TicketRepository = Depends(get_ticket_repo),
) -> None:
    await asyncio.to_thread(repo.delete, ticket_id, user_id)
