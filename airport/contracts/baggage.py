"""Checked baggage.

Stored at: ``baggage`` table. Each status carries its own timestamp
column (``checked_in_at``, ``loaded_at``, ``unloaded_at``, ``delivered_at``).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, model_validator

from airport.contracts.common import PageRequest, RecordModel
from airport.contracts.enums import BaggageStatus


class BaggageCreate(RecordModel):
    ticket_id: int
    flight_id: int
    passenger_id: int
    baggage_tag: str = Field(..., min_length=4, max_length=20)
    weight: float = Field(..., gt=0, le=100, description="Weight in kg")
    dimensions: str | None = Field(default=None, max_length=50, description="e.g. 55x40x20")
    status: BaggageStatus = BaggageStatus.CHECKED_IN
    special_handling: str | None = Field(default=None, max_length=100)
    notes: str | None = None


class BaggageUpdate(RecordModel):
    baggage_tag: str | None = Field(default=None, min_length=4, max_length=20)
    weight: float | None = Field(default=None, gt=0, le=100)
    dimensions: str | None = Field(default=None, max_length=50)
    special_handling: str | None = Field(default=None, max_length=100)
    notes: str | None = None


class Baggage(BaggageCreate):
    baggage_id: int
    checked_in_at: datetime | None = None
    loaded_at: datetime | None = None
    unloaded_at: datetime | None = None
    delivered_at: datetime | None = None

    # Joined columns
    flight_number: str | None = None
    ticket_number: str | None = None
    first_name: str | None = None
    last_name: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None


class BaggageSearch(PageRequest):
    flight_id: int | None = None
    passenger_id: int | None = None
    status: BaggageStatus | None = None
    baggage_tag: str | None = None


class BaggageStatusUpdate(RecordModel):
    baggage_id: int
    status: BaggageStatus
    notes: str | None = None


class BaggageTrackRequest(RecordModel):
    baggage_tag: str | None = None
    baggage_id: int | None = None

    @model_validator(mode="after")
    def _one_key(self) -> "BaggageTrackRequest":
        if self.baggage_id is None and not self.baggage_tag:
            raise ValueError("baggage_tag or baggage_id is required")
        return self
