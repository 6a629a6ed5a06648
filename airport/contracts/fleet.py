"""Aircraft models and the aircraft fleet.

Stored at: ``aircraft_models`` and ``aircraft`` tables.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import Field

from airport.contracts.common import PageRequest, RecordModel
from airport.contracts.enums import AircraftStatus


class AircraftModelCreate(RecordModel):
    model_name: str = Field(..., min_length=1, max_length=100, description="e.g. A320neo")
    manufacturer: str = Field(..., min_length=1, max_length=100)
    capacity: int = Field(..., gt=0, le=1000, description="Passenger seats")
    max_range: int | None = Field(default=None, gt=0, description="Range in km")


class AircraftModelUpdate(RecordModel):
    model_name: str | None = Field(default=None, min_length=1, max_length=100)
    manufacturer: str | None = Field(default=None, min_length=1, max_length=100)
    capacity: int | None = Field(default=None, gt=0, le=1000)
    max_range: int | None = Field(default=None, gt=0)


class AircraftModel(AircraftModelCreate):
    model_id: int
    aircraft_count: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AircraftCreate(RecordModel):
    registration_number: str = Field(..., pattern=r"^[A-Z0-9-]+$", max_length=20, description="e.g. F-HBCT")
    model_id: int
    status: AircraftStatus = AircraftStatus.ACTIVE
    purchase_date: date | None = None
    last_maintenance: date | None = None
    next_maintenance: date | None = None
    maintenance_notes: str | None = None


class AircraftUpdate(RecordModel):
    registration_number: str | None = Field(default=None, pattern=r"^[A-Z0-9-]+$", max_length=20)
    model_id: int | None = None
    status: AircraftStatus | None = None
    purchase_date: date | None = None
    last_maintenance: date | None = None
    next_maintenance: date | None = None
    maintenance_notes: str | None = None


class Aircraft(AircraftCreate):
    aircraft_id: int
    # Joined from aircraft_models
    model_name: str | None = None
    manufacturer: str | None = None
    capacity: int | None = None
    max_range: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AircraftStatusUpdate(RecordModel):
    status: AircraftStatus


class MaintenanceRequest(RecordModel):
    next_maintenance: date
    notes: str | None = None


class MaintenanceWindow(RecordModel):
    """Upcoming maintenance slot for one aircraft (calculated, never persisted)."""

    aircraft_id: int
    registration_number: str
    model_name: str | None = None
    next_maintenance: date
    days_until: int
    maintenance_type: str
    estimated_hours: int
    priority: str


class AircraftModelSearch(PageRequest):
    model_name: str | None = None
    manufacturer: str | None = None
    min_capacity: int | None = Field(default=None, ge=0)
    max_capacity: int | None = Field(default=None, ge=0)
    min_range: int | None = Field(default=None, ge=0)
    max_range: int | None = Field(default=None, ge=0)


class AircraftSearch(PageRequest):
    registration_number: str | None = None
    manufacturer: str | None = None
    model_name: str | None = None
    status: AircraftStatus | None = None
    model_id: int | None = None
    purchase_date_from: date | None = None
    purchase_date_to: date | None = None
    maintenance_due_from: date | None = None
    maintenance_due_to: date | None = None
