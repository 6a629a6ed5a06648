"""Tests for ticketing API endpoints."""

from __future__ import annotations

from datetime import timedelta

import pytest

from airport.persistence.sql import utcnow
from tests.factories import make_aircraft, make_flight, make_passenger, make_ticket


class TestBookingAPI:
    async def test_book_prices_from_flight_fare(self, client, flight, passenger):
        payload = {"passenger_id": passenger.passenger_id, "flight_id": flight.flight_id, "class": "business"}
        resp = await client.post("/api/tickets", json=payload)
        assert resp.status_code == 201
        data = resp.json()
        assert data["class"] == "business"
        assert data["price"] == 500.0
        assert data["status"] == "active"
        assert data["ticket_number"].startswith("TK")
        assert data["flight_number"] == "AF100"
        assert data["last_name"] == "Doe"

    async def test_book_defaults_to_economy(self, client, flight, passenger):
        payload = {"passenger_id": passenger.passenger_id, "flight_id": flight.flight_id}
        resp = await client.post("/api/tickets", json=payload)
        data = resp.json()
        assert data["class"] == "economy"
        assert data["price"] == 200.0

    async def test_explicit_price_kept(self, client, flight, passenger):
        payload = {"passenger_id": passenger.passenger_id, "flight_id": flight.flight_id, "price": 99.5}
        resp = await client.post("/api/tickets", json=payload)
        assert resp.json()["price"] == 99.5

    async def test_seat_taken_conflicts(self, client, db_manager, flight, ticket):
        other = make_passenger(db_manager, "P7654321", "john@example.com")
        payload = {"passenger_id": other.passenger_id, "flight_id": flight.flight_id, "seat_number": "A1"}
        resp = await client.post("/api/tickets", json=payload)
        assert resp.status_code == 409
        assert resp.json()["detail"] == "Seat is not available"

    async def test_cancelled_seat_can_be_rebooked(self, client, db_manager, flight, ticket):
        await client.post("/api/tickets/cancel", json={"ticket_id": ticket.ticket_id})
        other = make_passenger(db_manager, "P7654321", "john@example.com")
        payload = {"passenger_id": other.passenger_id, "flight_id": flight.flight_id, "seat_number": "A1"}
        resp = await client.post("/api/tickets", json=payload)
        assert resp.status_code == 201

    async def test_cannot_book_cancelled_flight(self, client, flight, passenger):
        await client.put(f"/api/flights/{flight.flight_id}/cancel", json={})
        payload = {"passenger_id": passenger.passenger_id, "flight_id": flight.flight_id}
        resp = await client.post("/api/tickets", json=payload)
        assert resp.status_code == 400

    async def test_unknown_passenger(self, client, flight):
        resp = await client.post("/api/tickets", json={"passenger_id": 999, "flight_id": flight.flight_id})
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Passenger not found"

    async def test_invalid_seat_format(self, client, flight, passenger):
        payload = {"passenger_id": passenger.passenger_id, "flight_id": flight.flight_id, "seat_number": "12"}
        resp = await client.post("/api/tickets", json=payload)
        assert resp.status_code == 422

    async def test_get_by_number_and_passenger(self, client, ticket, passenger):
        resp = await client.get(f"/api/tickets/number/{ticket.ticket_number}")
        assert resp.status_code == 200
        assert resp.json()["ticket_id"] == ticket.ticket_id

        resp = await client.get(f"/api/tickets/passenger/{passenger.passenger_id}")
        assert [t["ticket_id"] for t in resp.json()] == [ticket.ticket_id]

        assert (await client.get("/api/tickets/number/TKNOPE")).status_code == 404
        assert (await client.get("/api/tickets/999")).status_code == 404

    async def test_search(self, client, db_manager, flight, ticket):
        other = make_passenger(db_manager, "P7654321", "john@example.com", first_name="John", last_name="Smith")
        make_ticket(db_manager, other.passenger_id, flight.flight_id, ticket_class="first")

        resp = await client.get("/api/tickets", params={"search": "smith"})
        assert resp.json()["total"] == 1

        resp = await client.get("/api/tickets", params={"class": "first"})
        assert [t["class"] for t in resp.json()["data"]] == ["first"]

        resp = await client.get("/api/tickets", params={"flight_id": flight.flight_id, "sort_by": "price"})
        assert [t["price"] for t in resp.json()["data"]] == [200.0, 1000.0]

    async def test_update_seat_conflict(self, client, db_manager, flight, ticket):
        other = make_passenger(db_manager, "P7654321", "john@example.com")
        second = make_ticket(db_manager, other.passenger_id, flight.flight_id, seat_number="A2")
        resp = await client.put(f"/api/tickets/{second.ticket_id}", json={"seat_number": "A1"})
        assert resp.status_code == 409

        resp = await client.put(f"/api/tickets/{second.ticket_id}", json={"meal_preference": "vegetarian"})
        assert resp.status_code == 200
        assert resp.json()["meal_preference"] == "vegetarian"

    async def test_delete(self, client, ticket):
        resp = await client.delete(f"/api/tickets/{ticket.ticket_id}")
        assert resp.status_code == 204

class TestCapacityAPI:
    @pytest.fixture
    def small_flight(self, db_manager, network):
        """Five seats: four economy, no business, one first."""
        aircraft = make_aircraft(db_manager, "F-HSML", capacity=5, model_name="ATR 42")
        return make_flight(db_manager, {**network, "aircraft": aircraft}, "AF500")

    @staticmethod
    def _passenger(db_manager, n):
        return make_passenger(db_manager, f"S000000{n}", f"traveller{n}@example.com").passenger_id

    async def test_cabin_class_full(self, client, db_manager, small_flight):
        make_ticket(db_manager, self._passenger(db_manager, 1), small_flight.flight_id, ticket_class="first")
        payload = {"passenger_id": self._passenger(db_manager, 2), "flight_id": small_flight.flight_id, "class": "first"}
        resp = await client.post("/api/tickets", json=payload)
        assert resp.status_code == 409
        assert resp.json()["detail"] == "No first class seats available on this flight"

        payload["class"] = "economy"
        resp = await client.post("/api/tickets", json=payload)
        assert resp.status_code == 201

    async def test_flight_fully_booked(self, client, db_manager, small_flight):
        for n in range(4):
            make_ticket(db_manager, self._passenger(db_manager, n), small_flight.flight_id)
        make_ticket(db_manager, self._passenger(db_manager, 4), small_flight.flight_id, ticket_class="first")

        payload = {"passenger_id": self._passenger(db_manager, 5), "flight_id": small_flight.flight_id}
        resp = await client.post("/api/tickets", json=payload)
        assert resp.status_code == 409
        assert resp.json()["detail"] == "Flight is fully booked"

        resp = await client.get(f"/api/flights/{small_flight.flight_id}/load")
        assert resp.json()["available_seats"] == 0
        assert resp.json()["load_percentage"] == 100.0

    async def test_cancelled_ticket_frees_capacity(self, client, db_manager, small_flight):
        first = make_ticket(db_manager, self._passenger(db_manager, 1), small_flight.flight_id, ticket_class="first")
        await client.post("/api/tickets/cancel", json={"ticket_id": first.ticket_id})
        payload = {"passenger_id": self._passenger(db_manager, 2), "flight_id": small_flight.flight_id, "class": "first"}
        resp = await client.post("/api/tickets", json=payload)
        assert resp.status_code == 201

    async def test_registration_on_full_flight(self, client, db_manager, small_flight):
        make_ticket(db_manager, self._passenger(db_manager, 1), small_flight.flight_id, ticket_class="first")
        payload = {
            "passenger": {"first_name": "Ada", "last_name": "Lovelace", "passport_number": "GB998877"},
            "flight_id": small_flight.flight_id,
            "class": "first",
        }
        resp = await client.post("/api/passengers/register-for-flight", json=payload)
        assert resp.status_code == 409

        resp = await client.get("/api/passengers/passport/GB998877")
        assert resp.status_code == 404

    async def test_class_change_checks_capacity(self, client, db_manager, small_flight):
        make_ticket(db_manager, self._passenger(db_manager, 1), small_flight.flight_id, ticket_class="first")
        economy = make_ticket(db_manager, self._passenger(db_manager, 2), small_flight.flight_id)
        resp = await client.put(f"/api/tickets/{economy.ticket_id}", json={"class": "first"})
        assert resp.status_code == 409



class TestCheckInAPI:
    async def test_check_in_issues_boarding_pass(self, client, ticket):
        resp = await client.post(
            "/api/tickets/check-in",
            json={"ticket_id": ticket.ticket_id, "seat_number": "B3", "meal_preference": "kosher"},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["boarding_pass_number"].startswith("BP")
        assert data["check_in_time"] is not None
        assert data["seat_number"] == "B3"
        assert data["meal_preference"] == "kosher"

    async def test_double_check_in_rejected(self, client, ticket):
        await client.post("/api/tickets/check-in", json={"ticket_id": ticket.ticket_id})
        resp = await client.post("/api/tickets/check-in", json={"ticket_id": ticket.ticket_id})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Ticket is already checked in"

    async def test_check_in_not_yet_open(self, client, db_manager, network, passenger):
        later = make_flight(db_manager, network, "AF900", departure=utcnow() + timedelta(days=3))
        ticket = make_ticket(db_manager, passenger.passenger_id, later.flight_id)
        resp = await client.post("/api/tickets/check-in", json={"ticket_id": ticket.ticket_id})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Check-in is not yet available"

    async def test_check_in_cancelled_ticket_rejected(self, client, ticket):
        await client.post("/api/tickets/cancel", json={"ticket_id": ticket.ticket_id})
        resp = await client.post("/api/tickets/check-in", json={"ticket_id": ticket.ticket_id})
        assert resp.status_code == 400

    async def test_check_in_unknown_ticket(self, client):
        resp = await client.post("/api/tickets/check-in", json={"ticket_id": 999})
        assert resp.status_code == 404


class TestSeatsAPI:
    async def test_select_seat_adds_fee(self, client, ticket):
        resp = await client.post(
            "/api/tickets/select-seat",
            json={"ticket_id": ticket.ticket_id, "seat_number": "C4", "additional_fee": 35.5},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["seat_number"] == "C4"
        assert data["price"] == 235.5

    async def test_select_taken_seat(self, client, db_manager, flight, ticket):
        other = make_passenger(db_manager, "P7654321", "john@example.com")
        second = make_ticket(db_manager, other.passenger_id, flight.flight_id)
        resp = await client.post("/api/tickets/select-seat", json={"ticket_id": second.ticket_id, "seat_number": "A1"})
        assert resp.status_code == 409

    async def test_seat_availability_query(self, client, flight, ticket):
        resp = await client.get("/api/tickets/seat-availability", params={"flight_id": flight.flight_id})
        assert resp.status_code == 200
        assert resp.json()["classes"]["economy"]["occupied"] == 1

        resp = await client.get("/api/tickets/seat-availability", params={"flight_id": 999})
        assert resp.status_code == 404

    async def test_ticket_seat_availability(self, client, ticket):
        resp = await client.get(f"/api/tickets/{ticket.ticket_id}/seat-availability")
        assert list(resp.json()["classes"]) == ["economy"]


class TestCancellationAPI:
    async def test_cancel_then_refund(self, client, ticket):
        resp = await client.post("/api/tickets/cancel", json={"ticket_id": ticket.ticket_id, "reason": "Illness"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "cancelled"
        assert "Cancelled: Illness" in data["special_requests"]

        resp = await client.post(
            "/api/tickets/refund",
            json={"ticket_id": ticket.ticket_id, "refund_percentage": 0.8, "refund_method": "voucher"},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "refunded"
        assert data["refund_amount"] == 160.0

    async def test_cancel_twice_rejected(self, client, ticket):
        await client.post("/api/tickets/cancel", json={"ticket_id": ticket.ticket_id})
        resp = await client.post("/api/tickets/cancel", json={"ticket_id": ticket.ticket_id})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Ticket is already cancelled"

    async def test_refund_requires_cancellation(self, client, ticket):
        resp = await client.post("/api/tickets/refund", json={"ticket_id": ticket.ticket_id})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Ticket must be cancelled before refund"

    async def test_refund_percentage_bounds(self, client, ticket):
        resp = await client.post("/api/tickets/refund", json={"ticket_id": ticket.ticket_id, "refund_percentage": 1.5})
        assert resp.status_code == 422

    async def test_refund_is_audited(self, client, ticket):
        await client.post("/api/tickets/cancel", json={"ticket_id": ticket.ticket_id})
        await client.post("/api/tickets/refund", json={"ticket_id": ticket.ticket_id, "reason": "Goodwill"})

        resp = await client.get(f"/api/audit/logs/record/tickets/{ticket.ticket_id}")
        actions = [log["action"] for log in resp.json()]
        assert actions[0] == "refund"
        assert set(actions) == {"create", "cancellation", "refund"}
        refund = resp.json()[0]
        assert refund["new_values"]["refund_amount"] == 200.0
        assert refund["new_values"]["reason"] == "Goodwill"


class TestPricingAPI:
    async def test_quote(self, client, flight):
        resp = await client.get(
            "/api/tickets/pricing",
            params={"flight_id": flight.flight_id, "class": "business", "passenger_count": 2, "frequent_flyer": True},
        )
        assert resp.status_code == 200
        quote = resp.json()
        assert quote["base_price"] == 1000.0
        assert quote["taxes"] == 100.0
        assert quote["fees"] == 50.0
        assert quote["discount"] == 115.0
        assert quote["total_price"] == 1035.0
        assert quote["breakdown"]["fuel_surcharge"] == 20.0

    async def test_quote_unknown_flight(self, client):
        resp = await client.get("/api/tickets/pricing", params={"flight_id": 999})
        assert resp.status_code == 404


class TestTicketStatisticsAPI:
    async def test_statistics(self, client, db_manager, flight, ticket):
        other = make_passenger(db_manager, "P7654321", "john@example.com")
        second = make_ticket(db_manager, other.passenger_id, flight.flight_id)
        await client.post("/api/tickets/cancel", json={"ticket_id": second.ticket_id})
        await client.post("/api/tickets/refund", json={"ticket_id": second.ticket_id, "refund_percentage": 0.5})

        resp = await client.get("/api/tickets/statistics")
        stats = resp.json()
        assert stats["total_tickets"] == 2
        assert stats["sold_tickets"] == 1
        assert stats["refunded_tickets"] == 1
        assert stats["total_revenue"] == 200.0
        assert stats["refunded_amount"] == 100.0
        assert stats["net_revenue"] == 100.0
        assert stats["by_status"] == {"active": 1, "refunded": 1}
