"""Tests for maintenance slot classification."""

from __future__ import annotations

from datetime import date

import pytest

from airport.services.maintenance import classify_maintenance, days_until


@pytest.mark.parametrize(
    "days, expected",
    [
        (-3, ("Emergency", 24, "high")),
        (7, ("Emergency", 24, "high")),
        (8, ("Scheduled", 8, "medium")),
        (30, ("Scheduled", 8, "medium")),
        (31, ("Routine", 4, "low")),
    ],
)
def test_classify_maintenance(days, expected):
    assert classify_maintenance(days) == expected


def test_days_until():
    assert days_until(date(2025, 3, 20), today=date(2025, 3, 10)) == 10
    assert days_until(date(2025, 3, 8), today=date(2025, 3, 10)) == -2
