"""Passengers.

Stored at: ``passengers`` table.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import Field

from airport.contracts.common import PageRequest, RecordModel
from airport.contracts.enums import TicketClass, TicketStatus

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class PassengerCreate(RecordModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    passport_number: str = Field(..., min_length=5, max_length=20)
    nationality: str | None = Field(default=None, max_length=100)
    date_of_birth: date | None = None
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)
    phone: str | None = Field(default=None, max_length=30)
    city: str | None = Field(default=None, max_length=100)
    country: str | None = Field(default=None, max_length=100)
    frequent_flyer: bool = False


class PassengerUpdate(RecordModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    passport_number: str | None = Field(default=None, min_length=5, max_length=20)
    nationality: str | None = Field(default=None, max_length=100)
    date_of_birth: date | None = None
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)
    phone: str | None = Field(default=None, max_length=30)
    city: str | None = Field(default=None, max_length=100)
    country: str | None = Field(default=None, max_length=100)
    frequent_flyer: bool | None = None


class Passenger(PassengerCreate):
    passenger_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PassengerDetails(Passenger):
    ticket_count: int = 0
    total_spent: float = 0.0


class PassengerSearch(PageRequest):
    search: str | None = Field(default=None, description="Matches first/last name or passport")
    nationality: str | None = None
    email: str | None = None
    frequent_flyer: bool | None = None
    city: str | None = None
    country: str | None = None


class HistoryQuery(RecordModel):
    status: TicketStatus | None = None
    start_date: date | None = None
    end_date: date | None = None


class FlightRegistration(RecordModel):
    """Register a (possibly new) passenger and book a seat in one step."""

    passenger: PassengerCreate
    flight_id: int
    ticket_class: TicketClass = Field(default=TicketClass.ECONOMY, alias="class")
    seat_number: str | None = Field(default=None, max_length=5)
    meal_preference: str | None = None
    special_requests: str | None = None
