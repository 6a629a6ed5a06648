"""Tests for great-circle distance."""

from __future__ import annotations

import pytest

from airport.services.geo import distance_summary, estimated_flight_minutes, great_circle_km

CDG = (49.0097, 2.5479)
JFK = (40.6413, -73.7781)


class TestGreatCircle:
    def test_same_point(self):
        assert great_circle_km(*CDG, *CDG) == 0

    def test_cdg_jfk(self):
        assert great_circle_km(*CDG, *JFK) == pytest.approx(5840, abs=40)

    def test_symmetric(self):
        assert great_circle_km(*CDG, *JFK) == pytest.approx(great_circle_km(*JFK, *CDG))

    def test_antipodes(self):
        assert great_circle_km(0, 0, 0, 180) == pytest.approx(3.141592653589793 * 6371)


class TestDistanceSummary:
    def test_flight_time_at_cruise_speed(self):
        assert estimated_flight_minutes(800) == 60
        assert estimated_flight_minutes(1200) == 90

    def test_summary(self):
        summary = distance_summary(*CDG, *JFK)
        assert summary["distance_miles"] == pytest.approx(summary["distance_km"] / 1.609344, abs=0.01)
        assert summary["estimated_flight_time_minutes"] == pytest.approx(summary["distance_km"] / 800 * 60, abs=1)
