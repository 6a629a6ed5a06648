"""Unit tests for the SQLite repositories (no HTTP layer)."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from airport.contracts.analytics import AnalyticsQuery
from airport.contracts.flight import FlightCancellation, FlightDelay, FlightStatusUpdate
from airport.contracts.passenger import FlightRegistration, PassengerCreate
from airport.contracts.ticket import CheckInRequest
from airport.persistence.repositories.aircraft_repo import AircraftRepository
from airport.persistence.repositories.analytics_repo import AnalyticsRepository
from airport.persistence.repositories.audit_repo import AuditRepository
from airport.persistence.repositories.city_repo import CityRepository
from airport.persistence.repositories.flight_repo import FlightRepository
from airport.persistence.repositories.passenger_repo import PassengerRepository
from airport.persistence.repositories.ticket_repo import TicketRepository
from airport.persistence.repositories.user_repo import UserRepository
from airport.persistence.sql import utcnow
from airport.services.errors import BusinessRuleError, ConflictError, NotFoundError
from tests.factories import make_aircraft, make_city, make_flight, make_network, make_passenger, make_ticket

ACTOR_ID = 42


@pytest.fixture
def network(db_manager):
    return make_network(db_manager)


@pytest.fixture
def flight(db_manager, network):
    return make_flight(db_manager, network)


class TestBaseRepository:
    def test_get_missing_returns_none(self, db_manager):
        assert CityRepository(db_manager).get(1) is None

    def test_require_missing_raises(self, db_manager):
        with pytest.raises(NotFoundError, match="City not found"):
            CityRepository(db_manager).require(1)

    def test_unique_violation(self, db_manager):
        make_city(db_manager)
        with pytest.raises(ConflictError):
            make_city(db_manager)

    def test_update_with_no_values_is_noop(self, db_manager):
        city = make_city(db_manager)
        repo = CityRepository(db_manager)
        assert repo.update(city.city_id, {}) == city
        assert AuditRepository(db_manager).by_record("cities", city.city_id)[0].action == "create"

    def test_update_unique_against_other_rows(self, db_manager):
        make_city(db_manager, "Lyon")
        nice = make_city(db_manager, "Nice")
        repo = CityRepository(db_manager)
        with pytest.raises(ConflictError):
            repo.update(nice.city_id, {"city_name": "Lyon"})
        # Same value on the same row is not a conflict
        assert repo.update(nice.city_id, {"city_name": "Nice"}).city_name == "Nice"

    def test_writes_are_audited_with_actor(self, db_manager):
        repo = CityRepository(db_manager)
        city = repo.create({"city_name": "Lyon", "country": "France"}, actor_id=ACTOR_ID)
        repo.update(city.city_id, {"region": "Rhone"}, actor_id=ACTOR_ID)
        repo.delete(city.city_id, actor_id=ACTOR_ID)

        logs = AuditRepository(db_manager).by_record("cities", city.city_id)
        assert [log.action for log in logs] == ["delete", "update", "create"]
        assert {log.user_id for log in logs} == {ACTOR_ID}

    def test_failed_write_leaves_no_audit(self, db_manager):
        with pytest.raises(NotFoundError):
            AircraftRepository(db_manager).create({"registration_number": "F-HXXX", "model_id": 999})
        assert AuditRepository(db_manager).statistics()["total_logs"] == 0


class TestFlightRepository:
    def test_same_airports_rejected(self, db_manager, network):
        with pytest.raises(BusinessRuleError, match="must differ"):
            make_flight(db_manager, {**network, "destination": network["origin"]})

    def test_arrival_before_departure_rejected(self, db_manager, network):
        with pytest.raises(BusinessRuleError, match="after scheduled departure"):
            make_flight(db_manager, network, duration=timedelta(hours=-1))

    def test_departure_marks_checked_in_tickets_used(self, db_manager, flight):
        tickets = TicketRepository(db_manager)
        boarded = make_ticket(db_manager, make_passenger(db_manager).passenger_id, flight.flight_id)
        no_show = make_ticket(
            db_manager,
            make_passenger(db_manager, "P7654321", "john@example.com").passenger_id,
            flight.flight_id,
        )
        tickets.check_in(CheckInRequest(ticket_id=boarded.ticket_id))

        departed = FlightRepository(db_manager).update_status(
            flight.flight_id, FlightStatusUpdate(status="departed")
        )
        assert departed.status == "departed"
        assert tickets.require(boarded.ticket_id).status == "used"
        assert tickets.require(no_show.ticket_id).status == "active"

    def test_actual_departure_in_future_means_boarding(self, db_manager, flight):
        now = utcnow()
        updated = FlightRepository(db_manager).update_status(
            flight.flight_id,
            FlightStatusUpdate(status="departed", actual_departure=now + timedelta(minutes=30)),
            now=now,
        )
        assert updated.status == "boarding"

    def test_gate_released_on_departure(self, db_manager, network, flight):
        flights = FlightRepository(db_manager)
        gate_id = network["gate"].gate_id
        flights.assign_gate(flight.flight_id, gate_id)
        other = make_flight(db_manager, network, "AF200", departure=utcnow() + timedelta(days=1))
        with pytest.raises(ConflictError, match="Gate is already occupied"):
            flights.assign_gate(other.flight_id, gate_id)

        flights.update_status(flight.flight_id, FlightStatusUpdate(status="departed"))
        assert flights.assign_gate(other.flight_id, gate_id).gate_id == gate_id

    def test_delay_shifts_schedule(self, db_manager, flight):
        delayed = FlightRepository(db_manager).delay(
            flight.flight_id, FlightDelay(delay_minutes=45, reason="Crew")
        )
        assert delayed.status == "delayed"
        assert delayed.delay_reason == "Crew"
        assert delayed.scheduled_departure == flight.scheduled_departure + timedelta(minutes=45)
        assert delayed.scheduled_arrival == flight.scheduled_arrival + timedelta(minutes=45)

    def test_cancel_twice_rejected(self, db_manager, flight):
        flights = FlightRepository(db_manager)
        flights.cancel(flight.flight_id, FlightCancellation(reason="Strike"))
        with pytest.raises(BusinessRuleError, match="already cancelled"):
            flights.cancel(flight.flight_id, FlightCancellation())

    def test_notifies_booked_passengers(self, db_manager, flight, monkeypatch):
        make_ticket(db_manager, make_passenger(db_manager).passenger_id, flight.flight_id)
        sent = []
        monkeypatch.setattr(
            "airport.services.flight_ops.notify_passengers",
            lambda number, event, recipients, detail=None: sent.append((number, event, recipients)),
        )
        FlightRepository(db_manager).cancel(flight.flight_id, FlightCancellation(reason="Strike"))
        assert sent == [("AF100", "cancelled", ["jane.doe@example.com"])]


class TestTicketRepository:
    def test_check_in_closed_after_departure(self, db_manager, flight):
        ticket = make_ticket(db_manager, make_passenger(db_manager).passenger_id, flight.flight_id)
        with pytest.raises(BusinessRuleError, match="Check-in is closed"):
            TicketRepository(db_manager).check_in(
                CheckInRequest(ticket_id=ticket.ticket_id),
                now=flight.scheduled_departure + timedelta(minutes=1),
            )

    def test_booking_on_departed_flight_rejected(self, db_manager, flight):
        FlightRepository(db_manager).update_status(flight.flight_id, FlightStatusUpdate(status="departed"))
        with pytest.raises(BusinessRuleError, match="departed flight"):
            make_ticket(db_manager, make_passenger(db_manager).passenger_id, flight.flight_id)


class TestPassengerRepository:
    def test_register_rolls_back_passenger_on_failed_booking(self, db_manager, flight):
        FlightRepository(db_manager).cancel(flight.flight_id, FlightCancellation())
        registration = FlightRegistration(
            passenger=PassengerCreate(first_name="Ada", last_name="Lovelace", passport_number="GB998877"),
            flight_id=flight.flight_id,
        )
        repo = PassengerRepository(db_manager)
        with pytest.raises(BusinessRuleError):
            repo.register_for_flight(registration)
        assert repo.by_passport("GB998877") is None


class TestAircraftRepository:
    def test_maintenance_schedule_includes_overdue(self, db_manager):
        make_aircraft(db_manager, next_maintenance=date.today() - timedelta(days=2))
        windows = AircraftRepository(db_manager).maintenance_schedule(days=10)
        assert windows[0].days_until == -2
        assert windows[0].priority == "high"


class TestUserRepository:
    def test_password_is_hashed(self, db_manager):
        user = UserRepository(db_manager).create({
            "username": "jdoe", "email": "jdoe@example.com", "password": "s3cret-pass",
            "first_name": "John", "last_name": "Doe",
        })
        with db_manager.transaction() as conn:
            stored = conn.execute("SELECT password_hash FROM users WHERE user_id = ?", (user.user_id,)).fetchone()
        assert stored["password_hash"].startswith("$2")
        assert stored["password_hash"] != "s3cret-pass"

    def test_authenticate(self, db_manager):
        repo = UserRepository(db_manager)
        user = repo.register({
            "username": "jdoe", "email": "jdoe@example.com", "password": "s3cret-pass",
            "first_name": "John", "last_name": "Doe",
        }, "staff")

        found = repo.authenticate("jdoe@example.com", "s3cret-pass")
        assert found.user_id == user.user_id
        assert [r.role_name for r in found.roles] == ["staff"]
        assert repo.authenticate("jdoe@example.com", "wrong-pass") is None
        assert repo.authenticate("nobody@example.com", "s3cret-pass") is None

        repo.remove(user.user_id)
        assert repo.authenticate("jdoe@example.com", "s3cret-pass") is None

    def test_register_is_atomic(self, db_manager):
        repo = UserRepository(db_manager)
        account = {
            "username": "jdoe", "email": "jdoe@example.com", "password": "s3cret-pass",
            "first_name": "John", "last_name": "Doe", "is_active": False,
        }
        user = repo.register(account, "passenger")
        assert user.is_active is True
        assert [r.role_name for r in user.roles] == ["passenger"]

        with pytest.raises(ConflictError, match="Email already exists"):
            repo.register({**account, "username": "jdoe2"}, "passenger")
        assert len(repo.with_roles()) == 1
        assert [log.action for log in AuditRepository(db_manager).by_record("user_roles", user.user_id)] == ["create"]

    def test_register_without_known_role(self, db_manager):
        user = UserRepository(db_manager).register({
            "username": "jdoe", "email": "jdoe@example.com", "password": "s3cret-pass",
            "first_name": "John", "last_name": "Doe",
        }, "pilot")
        assert user.roles == []


class TestAuditRepository:
    def test_cleanup_deletes_logs_older_than_retention(self, db_manager):
        make_city(db_manager)
        repo = AuditRepository(db_manager)
        assert repo.cleanup(30) == 0
        assert repo.cleanup(30, today=date.today() + timedelta(days=60)) == 1
        assert repo.statistics()["total_logs"] == 0


class TestAnalyticsRepository:
    def test_dashboard_today(self, db_manager, network):
        departure = datetime(2025, 3, 10, 8, 0)
        flight = make_flight(db_manager, network, departure=departure)
        make_ticket(db_manager, make_passenger(db_manager).passenger_id, flight.flight_id)

        query = AnalyticsQuery(start_date=date(2025, 3, 1), end_date=date(2025, 3, 31))
        dashboard = AnalyticsRepository(db_manager).dashboard(query, today=date(2025, 3, 10))
        assert dashboard["today"]["date"] == "2025-03-10"
        assert dashboard["today"]["flights"] == 1
        assert dashboard["today"]["revenue"] == 200.0
        assert dashboard["summary"]["tickets_sold"] == 1
