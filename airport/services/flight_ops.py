"""Flight schedule rules: status resolution, delays, check-in window, notifications."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from airport.contracts.enums import FlightStatus
from airport.services.errors import BusinessRuleError
from airport.services.seating import CHECK_IN_OPENS_HOURS

logger = logging.getLogger(__name__)

ON_TIME_THRESHOLD_MINUTES = 15

# Flights in these states no longer accept bookings.
CLOSED_STATUSES = frozenset({
    FlightStatus.DEPARTED.value,
    FlightStatus.ARRIVED.value,
    FlightStatus.CANCELLED.value,
})

# Status changes passengers are told about.
NOTIFY_STATUSES = frozenset({
    FlightStatus.DEPARTED.value,
    FlightStatus.ARRIVED.value,
    FlightStatus.CANCELLED.value,
    FlightStatus.DELAYED.value,
})


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def validate_schedule(
    departure_airport_id: int,
    arrival_airport_id: int,
    scheduled_departure: datetime,
    scheduled_arrival: datetime,
) -> None:
    if departure_airport_id == arrival_airport_id:
        raise BusinessRuleError("Departure and arrival airports must differ")
    if _naive_utc(scheduled_arrival) <= _naive_utc(scheduled_departure):
        raise BusinessRuleError("Scheduled arrival must be after scheduled departure")


def resolve_status(
    requested: FlightStatus | str,
    actual_departure: datetime | None,
    actual_arrival: datetime | None,
    now: datetime,
) -> str:
    """Effective status implied by actual times.

    An actual arrival means the flight arrived. An actual departure in the
    future means the aircraft is still boarding; otherwise it departed.
    Without actual times the requested status stands.
    """
    if actual_arrival is not None:
        return FlightStatus.ARRIVED.value
    if actual_departure is not None:
        if _naive_utc(actual_departure) > _naive_utc(now):
            return FlightStatus.BOARDING.value
        return FlightStatus.DEPARTED.value
    return FlightStatus(requested).value


def shift_schedule(
    scheduled_departure: datetime,
    scheduled_arrival: datetime,
    delay_minutes: int,
    new_departure: datetime | None = None,
    new_arrival: datetime | None = None,
) -> tuple[datetime, datetime]:
    """New (departure, arrival); explicit times win over the shift."""
    delta = timedelta(minutes=delay_minutes)
    departure = new_departure if new_departure is not None else scheduled_departure + delta
    arrival = new_arrival if new_arrival is not None else scheduled_arrival + delta
    return departure, arrival


def check_in_window(scheduled_departure: datetime, now: datetime) -> None:
    """Check-in opens 24 h before departure and closes at departure."""
    departure = _naive_utc(scheduled_departure)
    current = _naive_utc(now)
    if current < departure - timedelta(hours=CHECK_IN_OPENS_HOURS):
        raise BusinessRuleError("Check-in is not yet available")
    if current >= departure:
        raise BusinessRuleError("Check-in is closed for this flight")


def notify_passengers(flight_number: str, event: str, recipients: list[str], detail: str | None = None) -> int:
    """Send a flight notice to each passenger. Returns the number notified.

    Delivery is a log line per passenger; a mail or SMS gateway plugs in here.
    """
    for email in recipients:
        logger.info("Notify %s: flight %s %s%s", email, flight_number, event, f" ({detail})" if detail else "")
    logger.info("Flight %s %s: %d passenger(s) notified", flight_number, event, len(recipients))
    return len(recipients)
