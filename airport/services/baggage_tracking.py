"""Baggage status bookkeeping."""

from __future__ import annotations

from airport.contracts.enums import BaggageStatus

STATUS_TIMESTAMPS: dict[str, str] = {
    BaggageStatus.CHECKED_IN.value: "checked_in_at",
    BaggageStatus.LOADED.value: "loaded_at",
    BaggageStatus.UNLOADED.value: "unloaded_at",
    BaggageStatus.DELIVERED.value: "delivered_at",
}

LOCATIONS: dict[str, str] = {
    BaggageStatus.CHECKED_IN.value: "Check-in counter",
    BaggageStatus.LOADED.value: "On aircraft",
    BaggageStatus.UNLOADED.value: "Baggage handling area",
    BaggageStatus.DELIVERED.value: "Delivered to passenger",
    BaggageStatus.LOST.value: "Unknown - under investigation",
}


def timestamp_column(status: BaggageStatus | str) -> str | None:
    """Column stamped when a bag enters *status* (``lost`` has none)."""
    return STATUS_TIMESTAMPS.get(BaggageStatus(status).value)


def location_for(status: BaggageStatus | str, flight_number: str | None = None) -> str:
    location = LOCATIONS[BaggageStatus(status).value]
    if flight_number and BaggageStatus(status) == BaggageStatus.LOADED:
        return f"{location} ({flight_number})"
    return location
