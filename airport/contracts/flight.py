"""Scheduled flights and their operational updates.

Stored at: ``flights`` table. Search results carry joined airport, aircraft
and gate columns plus calculated seat figures.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import Field

from airport.contracts.common import PageRequest, RecordModel
from airport.contracts.enums import FlightStatus, StatisticsPeriod


class FlightCreate(RecordModel):
    flight_number: str = Field(..., pattern=r"^[A-Z0-9]{2,8}$", description="e.g. AF1234")
    aircraft_id: int
    departure_airport_id: int
    arrival_airport_id: int
    gate_id: int | None = None
    scheduled_departure: datetime
    scheduled_arrival: datetime
    price: float = Field(..., ge=0, description="Economy base fare in USD")
    notes: str | None = None


class FlightUpdate(RecordModel):
    flight_number: str | None = Field(default=None, pattern=r"^[A-Z0-9]{2,8}$")
    aircraft_id: int | None = None
    departure_airport_id: int | None = None
    arrival_airport_id: int | None = None
    gate_id: int | None = None
    scheduled_departure: datetime | None = None
    scheduled_arrival: datetime | None = None
    actual_departure: datetime | None = None
    actual_arrival: datetime | None = None
    status: FlightStatus | None = None
    price: float | None = Field(default=None, ge=0)
    notes: str | None = None


class Flight(FlightCreate):
    flight_id: int
    status: FlightStatus = FlightStatus.SCHEDULED
    actual_departure: datetime | None = None
    actual_arrival: datetime | None = None
    delay_reason: str | None = None

    # Joined columns
    departure_iata: str | None = None
    departure_airport_name: str | None = None
    departure_city: str | None = None
    arrival_iata: str | None = None
    arrival_airport_name: str | None = None
    arrival_city: str | None = None
    registration_number: str | None = None
    model_name: str | None = None
    capacity: int | None = None
    gate_number: str | None = None
    terminal: str | None = None

    # Calculated
    booked_seats: int | None = None
    available_seats: int | None = None
    load_percentage: float | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None


class FlightSearch(PageRequest):
    departure_iata: str | None = Field(default=None, pattern=r"^[A-Za-z]{3}$")
    arrival_iata: str | None = Field(default=None, pattern=r"^[A-Za-z]{3}$")
    departure_date: date | None = None
    status: FlightStatus | None = None
    aircraft_id: int | None = None
    gate_id: int | None = None
    max_price: float | None = Field(default=None, ge=0)
    passenger_count: int | None = Field(default=None, ge=1)


class FlightStatusUpdate(RecordModel):
    status: FlightStatus
    actual_departure: datetime | None = None
    actual_arrival: datetime | None = None


class GateAssignment(RecordModel):
    gate_id: int


class AutoGateAssignment(RecordModel):
    terminal: str | None = Field(default=None, max_length=10, description="Restrict the search to one terminal")


class FlightDelay(RecordModel):
    delay_minutes: int = Field(..., ge=1, le=24 * 60)
    reason: str | None = Field(default=None, max_length=200)
    new_departure: datetime | None = None
    new_arrival: datetime | None = None
    notify_passengers: bool = True


class FlightCancellation(RecordModel):
    reason: str | None = Field(default=None, max_length=200)
    notify_passengers: bool = True


class FlightStatisticsQuery(RecordModel):
    start_date: date | None = None
    end_date: date | None = None
    group_by: StatisticsPeriod = StatisticsPeriod.DAY
    airport_id: int | None = None


class FlightLoad(RecordModel):
    """Seat occupancy of one flight (calculated, never persisted)."""

    flight_id: int
    flight_number: str
    capacity: int
    booked_seats: int
    available_seats: int
    load_percentage: float
