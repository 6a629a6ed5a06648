"""Cities, airports and gates.

Stored at: ``cities``, ``airports`` and ``gates`` tables.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator, model_validator

from airport.contracts.common import PageRequest, RecordModel
from airport.contracts.enums import GateStatus


# ------------------------------------------------------------------
# Cities
# ------------------------------------------------------------------


class CityCreate(RecordModel):
    city_name: str = Field(..., min_length=1, max_length=100)
    country: str = Field(..., min_length=1, max_length=100)
    country_code: str | None = Field(default=None, min_length=2, max_length=3)
    region: str | None = Field(default=None, max_length=100)
    timezone: str | None = Field(default=None, max_length=50, description="IANA name, e.g. Europe/Paris")
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)


class CityUpdate(RecordModel):
    city_name: str | None = Field(default=None, min_length=1, max_length=100)
    country: str | None = Field(default=None, min_length=1, max_length=100)
    country_code: str | None = Field(default=None, min_length=2, max_length=3)
    region: str | None = Field(default=None, max_length=100)
    timezone: str | None = Field(default=None, max_length=50)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)


class City(CityCreate):
    city_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ------------------------------------------------------------------
# Airports
# ------------------------------------------------------------------


class AirportCreate(RecordModel):
    name: str = Field(..., min_length=1, max_length=200)
    iata_code: str = Field(..., pattern=r"^[A-Za-z]{3}$", description="e.g. CDG")
    icao_code: str | None = Field(default=None, pattern=r"^[A-Za-z]{4}$", description="e.g. LFPG")
    city_id: int
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    altitude: int | None = Field(default=None, description="Elevation in feet")
    timezone: str | None = Field(default=None, max_length=50)

    @field_validator("iata_code", "icao_code")
    @classmethod
    def _upper(cls, v: str | None) -> str | None:
        return v.upper() if v else v


class AirportUpdate(RecordModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    iata_code: str | None = Field(default=None, pattern=r"^[A-Za-z]{3}$")
    icao_code: str | None = Field(default=None, pattern=r"^[A-Za-z]{4}$")
    city_id: int | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    altitude: int | None = None
    timezone: str | None = Field(default=None, max_length=50)

    @field_validator("iata_code", "icao_code")
    @classmethod
    def _upper(cls, v: str | None) -> str | None:
        return v.upper() if v else v


class Airport(AirportCreate):
    airport_id: int
    # Joined from cities
    city_name: str | None = None
    country: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DistanceRequest(RecordModel):
    """Two airports, each given either by ID or by IATA code."""

    from_airport_id: int | None = None
    to_airport_id: int | None = None
    from_iata: str | None = Field(default=None, pattern=r"^[A-Za-z]{3}$")
    to_iata: str | None = Field(default=None, pattern=r"^[A-Za-z]{3}$")

    @model_validator(mode="after")
    def _both_ends(self) -> "DistanceRequest":
        if self.from_airport_id is None and not self.from_iata:
            raise ValueError("from_airport_id or from_iata is required")
        if self.to_airport_id is None and not self.to_iata:
            raise ValueError("to_airport_id or to_iata is required")
        return self


# ------------------------------------------------------------------
# Gates
# ------------------------------------------------------------------


class GateCreate(RecordModel):
    gate_number: str = Field(..., min_length=1, max_length=10, description="e.g. A12")
    terminal: str | None = Field(default=None, max_length=10)
    status: GateStatus = GateStatus.AVAILABLE


class GateUpdate(RecordModel):
    gate_number: str | None = Field(default=None, min_length=1, max_length=10)
    terminal: str | None = Field(default=None, max_length=10)
    status: GateStatus | None = None


class Gate(GateCreate):
    gate_id: int
    airport_id: int


# ------------------------------------------------------------------
# Search parameters
# ------------------------------------------------------------------


class CitySearch(PageRequest):
    city_name: str | None = None
    country: str | None = None
    region: str | None = None
    timezone: str | None = None


class AirportSearch(PageRequest):
    name: str | None = None
    iata_code: str | None = None
    icao_code: str | None = None
    city_id: int | None = None
    country: str | None = None
