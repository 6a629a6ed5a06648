"""Maintenance slot classification."""

from __future__ import annotations

from datetime import date

# (max days until due, type, estimated hours, priority)
_TIERS = (
    (7, "Emergency", 24, "high"),
    (30, "Scheduled", 8, "medium"),
)
_ROUTINE = ("Routine", 4, "low")


def classify_maintenance(days_until: int) -> tuple[str, int, str]:
    """``(maintenance_type, estimated_hours, priority)`` for a due date *days_until* away."""
    for max_days, kind, hours, priority in _TIERS:
        if days_until <= max_days:
            return kind, hours, priority
    return _ROUTINE


def days_until(due: date, today: date | None = None) -> int:
    return (due - (today or date.today())).days
