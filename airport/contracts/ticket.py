"""Tickets, check-in and pricing.

Stored at: ``tickets`` table. The cabin class column is ``ticket_class``;
the API exposes it as ``class``.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import Field

from airport.contracts.common import PageRequest, RecordModel
from airport.contracts.enums import TicketClass, TicketStatus

SEAT_PATTERN = r"^[A-Z]\d{1,3}$"


class TicketCreate(RecordModel):
    passenger_id: int
    flight_id: int
    ticket_class: TicketClass = Field(default=TicketClass.ECONOMY, alias="class")
    seat_number: str | None = Field(default=None, pattern=SEAT_PATTERN, description="e.g. A12")
    price: float | None = Field(default=None, ge=0, description="Computed from the flight fare when omitted")
    booking_reference: str | None = Field(default=None, max_length=20)
    meal_preference: str | None = Field(default=None, max_length=50)
    special_requests: str | None = None


class TicketUpdate(RecordModel):
    ticket_class: TicketClass | None = Field(default=None, alias="class")
    seat_number: str | None = Field(default=None, pattern=SEAT_PATTERN)
    price: float | None = Field(default=None, ge=0)
    status: TicketStatus | None = None
    booking_reference: str | None = Field(default=None, max_length=20)
    meal_preference: str | None = Field(default=None, max_length=50)
    special_requests: str | None = None


class Ticket(RecordModel):
    ticket_id: int
    ticket_number: str
    passenger_id: int
    flight_id: int
    ticket_class: TicketClass = Field(default=TicketClass.ECONOMY, alias="class")
    seat_number: str | None = None
    price: float
    status: TicketStatus = TicketStatus.ACTIVE
    booking_date: datetime | None = None
    booking_reference: str | None = None
    check_in_time: datetime | None = None
    boarding_pass_number: str | None = None
    meal_preference: str | None = None
    special_requests: str | None = None
    refund_amount: float | None = None

    # Joined columns
    first_name: str | None = None
    last_name: str | None = None
    passport_number: str | None = None
    flight_number: str | None = None
    scheduled_departure: datetime | None = None
    scheduled_arrival: datetime | None = None
    flight_status: str | None = None
    departure_iata: str | None = None
    arrival_iata: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None


class TicketSearch(PageRequest):
    search: str | None = Field(default=None, description="Matches ticket number or passenger name")
    passenger_id: int | None = None
    flight_id: int | None = None
    status: TicketStatus | None = None
    ticket_class: TicketClass | None = Field(default=None, alias="class")
    booking_date_from: date | None = None
    booking_date_to: date | None = None
    booking_reference: str | None = None


class CheckInRequest(RecordModel):
    ticket_id: int
    seat_number: str | None = Field(default=None, pattern=SEAT_PATTERN)
    meal_preference: str | None = Field(default=None, max_length=50)
    special_requests: str | None = None


class SeatSelection(RecordModel):
    ticket_id: int
    seat_number: str = Field(..., pattern=SEAT_PATTERN)
    additional_fee: float = Field(default=0, ge=0)


class TicketCancellation(RecordModel):
    ticket_id: int
    reason: str | None = Field(default=None, max_length=200)


class RefundRequest(RecordModel):
    ticket_id: int
    refund_percentage: float = Field(default=1.0, ge=0, le=1)
    refund_method: str = Field(default="original_payment", max_length=50)
    reason: str | None = Field(default=None, max_length=200)


class PricingQuery(RecordModel):
    flight_id: int
    ticket_class: TicketClass = Field(default=TicketClass.ECONOMY, alias="class")
    passenger_count: int = Field(default=1, ge=1, le=9)
    frequent_flyer: bool = False


class PriceBreakdown(RecordModel):
    base_fare: float
    fuel_surcharge: float
    airport_tax: float
    taxes: float
    fees: float


class PriceQuote(RecordModel):
    """Calculated fare for one booking (never persisted)."""

    base_price: float
    class_multiplier: float
    passenger_count: int
    taxes: float
    fees: float
    discount: float
    total_price: float
    currency: str = "USD"
    breakdown: PriceBreakdown


class SeatAvailabilityQuery(RecordModel):
    flight_id: int
    ticket_class: TicketClass | None = Field(default=None, alias="class")
    include_seat_map: bool = False
