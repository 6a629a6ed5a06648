"""Repository for passengers, their travel history and one-step registration."""

from __future__ import annotations

from typing import Any

from airport.contracts.common import Page
from airport.contracts.passenger import (
    FlightRegistration,
    HistoryQuery,
    Passenger,
    PassengerDetails,
    PassengerSearch,
)
from airport.contracts.ticket import Ticket
from airport.persistence.db_manager import DatabaseManager
from airport.persistence.repositories.base import BaseRepository
from airport.persistence.repositories.ticket_repo import TicketRepository
from airport.persistence.sql import Filters

# Passenger (aliased p) holding more than one active or used ticket.
RETURNING_PASSENGER = (
    "(SELECT COUNT(*) FROM tickets rt WHERE rt.passenger_id = p.passenger_id "
    "AND rt.status IN ('active', 'used')) > 1"
)


class PassengerRepository(BaseRepository[Passenger]):
    table = "passengers"
    key = "passenger_id"
    label = "Passenger"
    alias = "p"
    select_sql = "SELECT p.* FROM passengers p"
    default_order = "p.last_name, p.first_name"
    sort_columns = {
        "last_name": "p.last_name",
        "first_name": "p.first_name",
        "nationality": "p.nationality",
        "created_at": "p.created_at",
    }
    unique = [
        (("passport_number",), "Passenger with this passport number already exists"),
        (("email",), "Passenger with this email already exists"),
    ]
    dependents = [("tickets", "passenger_id", "Passenger has tickets and cannot be deleted")]

    def __init__(self, manager: DatabaseManager):
        super().__init__(Passenger, manager)

    def search(self, query: PassengerSearch) -> Page[dict]:
        filters = (
            Filters()
            .like_any(["p.first_name", "p.last_name", "p.passport_number"], query.search)
            .like("p.nationality", query.nationality)
            .equals("p.email", query.email)
            .equals("p.frequent_flyer", query.frequent_flyer)
            .like("p.city", query.city)
            .like("p.country", query.country)
        )
        return self._page(filters, query)

    def by_passport(self, passport_number: str) -> Passenger | None:
        return self.find_one("passport_number", passport_number)

    def by_email(self, email: str) -> Passenger | None:
        return self.find_one("email", email)

    def details(self, passenger_id: int) -> PassengerDetails:
        with self._manager.transaction() as conn:
            current = self._require(conn, passenger_id)
            totals = conn.execute(
                """
                SELECT COUNT(*) AS ticket_count,
                       ROUND(COALESCE(SUM(CASE WHEN status IN ('active', 'used') THEN price END), 0), 2)
                           AS total_spent
                FROM tickets WHERE passenger_id = ?
                """,
                (passenger_id,),
            ).fetchone()
        return PassengerDetails.model_validate({**current, **dict(totals)})

    def history(self, passenger_id: int, query: HistoryQuery) -> list[Ticket]:
        """Tickets of one passenger, newest departure first."""
        filters = (
            Filters()
            .equals("t.passenger_id", passenger_id)
            .equals("t.status", query.status)
            .date_from("f.scheduled_departure", query.start_date)
            .date_to("f.scheduled_departure", query.end_date)
        )
        tickets = TicketRepository(self._manager)
        with self._manager.transaction() as conn:
            self._require(conn, passenger_id)
            rows = conn.execute(
                f"{tickets.select_sql}{filters.sql()} ORDER BY f.scheduled_departure DESC",
                filters.params,
            ).fetchall()
        return [Ticket.from_row(r) for r in rows]

    def register_for_flight(
        self,
        registration: FlightRegistration,
        actor_id: int | None = None,
    ) -> tuple[Passenger, Ticket]:
        """Create (or reuse, by passport) a passenger and book the flight.

        Both writes share one transaction: a failed booking leaves no new
        passenger behind.
        """
        tickets = TicketRepository(self._manager)
        passenger_values = registration.passenger.changes()
        with self._manager.transaction() as conn:
            row = conn.execute(
                "SELECT passenger_id FROM passengers WHERE passport_number = ?",
                (registration.passenger.passport_number,),
            ).fetchone()
            if row is not None:
                passenger_id = row["passenger_id"]
            else:
                self._check_unique(conn, passenger_values)
                passenger_id = self._insert(conn, passenger_values, actor_id)
            ticket_id = tickets.book(conn, {
                "passenger_id": passenger_id,
                "flight_id": registration.flight_id,
                "ticket_class": registration.ticket_class,
                "seat_number": registration.seat_number,
                "meal_preference": registration.meal_preference,
                "special_requests": registration.special_requests,
            }, actor_id)
        return self.require(passenger_id), tickets.require(ticket_id)

    def statistics(self) -> dict[str, Any]:
        with self._manager.transaction() as conn:
            totals = conn.execute(
                f"""
                SELECT COUNT(*) AS total_passengers,
                       COALESCE(SUM(date(created_at) >= date('now', '-30 days')), 0) AS new_last_30_days,
                       COALESCE(SUM(frequent_flyer), 0) AS frequent_flyers,
                       COALESCE(SUM({RETURNING_PASSENGER}), 0) AS returning_passengers,
                       ROUND(AVG((julianday('now') - julianday(date_of_birth)) / 365.25), 1) AS average_age
                FROM passengers p
                """
            ).fetchone()
            nationalities = conn.execute(
                """
                SELECT nationality, COUNT(*) AS count
                FROM passengers WHERE nationality IS NOT NULL
                GROUP BY nationality
                ORDER BY count DESC, nationality
                LIMIT 10
                """
            ).fetchall()
        return {
            **dict(totals),
            "top_nationalities": [dict(r) for r in nationalities],
        }
