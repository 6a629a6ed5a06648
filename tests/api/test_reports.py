"""Tests for the airport statistics and data integrity reports."""

from __future__ import annotations

from datetime import datetime

import pytest

from airport.persistence.repositories.flight_repo import FlightRepository
from tests.factories import make_flight, make_passenger, make_ticket

WINDOW = {"start_date": "2025-03-01", "end_date": "2025-03-31"}


@pytest.fixture
def march(db_manager, network):
    """CDG to JFK: one flight 10 minutes late, one 90 minutes late, one cancelled."""
    early = make_flight(db_manager, network, "AF100", departure=datetime(2025, 3, 10, 8, 0))
    late = make_flight(db_manager, network, "AF200", departure=datetime(2025, 3, 10, 14, 0))
    cancelled = make_flight(db_manager, network, "AF300", departure=datetime(2025, 3, 11, 9, 0))

    jane = make_passenger(db_manager)
    make_ticket(db_manager, jane.passenger_id, early.flight_id)
    make_ticket(db_manager, jane.passenger_id, late.flight_id, ticket_class="business")

    flights = FlightRepository(db_manager)
    flights.update(early.flight_id, {"status": "arrived", "actual_departure": datetime(2025, 3, 10, 8, 10)})
    flights.update(late.flight_id, {"status": "departed", "actual_departure": datetime(2025, 3, 10, 15, 30)})
    flights.update(cancelled.flight_id, {"status": "cancelled"})
    return network


class TestAirportStatisticsReport:
    async def test_per_airport(self, client, march):
        resp = await client.get("/api/reports/airport-statistics", params=WINDOW)
        assert resp.status_code == 200
        body = resp.json()
        assert body["period"] == WINDOW

        airports = {a["iata_code"]: a for a in body["airport_statistics"]}
        cdg = airports["CDG"]
        assert cdg["departures"] == 3
        assert cdg["arrivals"] == 0
        assert cdg["passenger_count"] == 2
        assert cdg["revenue"] == 700.0
        assert cdg["delay_percentage"] == 50.0
        assert cdg["on_time_percentage"] == 50.0
        assert cdg["average_delay_minutes"] == 50.0
        assert cdg["city"] == "Paris"

        jfk = airports["JFK"]
        assert jfk["arrivals"] == 3
        assert jfk["passenger_count"] == 0
        assert jfk["delay_percentage"] == 0.0

    async def test_summary_and_ranking(self, client, march):
        body = (await client.get("/api/reports/airport-statistics", params=WINDOW)).json()
        assert body["summary"] == {
            "total_airports": 2,
            "total_flights": 3,
            "total_passengers": 2,
            "total_revenue": 700.0,
            "airports_with_departures": 1,
        }
        assert [(b["ranking"], b["iata_code"]) for b in body["busiest_airports"]] == [(1, "CDG"), (2, "JFK")]

    async def test_single_airport(self, client, march):
        params = {**WINDOW, "airport_id": march["destination"].airport_id}
        body = (await client.get("/api/reports/airport-statistics", params=params)).json()
        assert [a["iata_code"] for a in body["airport_statistics"]] == ["JFK"]
        assert body["summary"]["total_flights"] == 0

    async def test_window_outside_history(self, client, march):
        params = {"start_date": "2025-04-01", "end_date": "2025-04-30"}
        body = (await client.get("/api/reports/airport-statistics", params=params)).json()
        assert body["summary"]["total_flights"] == 0
        assert body["busiest_airports"] == []

    async def test_reversed_window(self, client):
        params = {"start_date": "2025-04-01", "end_date": "2025-03-01"}
        resp = await client.get("/api/reports/airport-statistics", params=params)
        assert resp.status_code == 422


class TestDataIntegrityReport:
    async def test_empty_database_is_clean(self, client):
        resp = await client.get("/api/reports/data-integrity")
        assert resp.status_code == 200
        body = resp.json()
        assert body["summary"]["failed_checks"] == 0
        assert body["summary"]["integrity_score"] == 100
        assert body["recommendations"] == []
        assert set(body) >= {"flight_integrity", "passenger_integrity", "ticket_integrity", "aircraft_integrity"}

    async def test_detects_broken_rows(self, client, db_manager, network, flight):
        jane = make_passenger(db_manager)
        hans = make_passenger(db_manager, "D5555555", "hans@example.com")
        make_ticket(db_manager, jane.passenger_id, flight.flight_id, seat_number="A1")
        second = make_ticket(db_manager, hans.passenger_id, flight.flight_id, seat_number="A2")
        with db_manager.transaction() as conn:
            conn.execute("UPDATE tickets SET seat_number = 'A1' WHERE ticket_id = ?", (second.ticket_id,))
            conn.execute("UPDATE aircraft_models SET capacity = 1")
            conn.execute("UPDATE passengers SET email = 'not-an-email' WHERE passenger_id = ?", (hans.passenger_id,))
            conn.execute("UPDATE gates SET status = 'occupied' WHERE gate_id = ?", (network["gate"].gate_id,))

        body = (await client.get("/api/reports/data-integrity")).json()
        assert body["flight_integrity"]["capacity_violations"] == 1
        assert body["flight_integrity"]["stale_gate_assignments"] == 1
        assert body["ticket_integrity"]["seat_conflicts"] == 2
        assert body["passenger_integrity"]["invalid_emails"] == 1
        assert body["passenger_integrity"]["missing_phone_numbers"] == 2
        assert body["aircraft_integrity"]["idle_aircraft"] == 0

        assert body["summary"]["total_checks"] == 12
        assert body["summary"]["failed_checks"] == 5
        assert body["summary"]["issues_found"] == 7
        assert body["summary"]["integrity_score"] == 58
        severities = {r["check"]: r["severity"] for r in body["recommendations"]}
        assert severities == {
            "capacity_violations": "critical",
            "stale_gate_assignments": "medium",
            "invalid_emails": "medium",
            "seat_conflicts": "high",
        }

    async def test_requires_authentication(self, anonymous_client):
        resp = await anonymous_client.get("/api/reports/data-integrity")
        assert resp.status_code == 401
