"""Repository for tickets: booking, seats, check-in, cancellation and refunds."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Any

from airport.contracts.common import Page
from airport.contracts.enums import AuditAction, TicketStatus
from airport.contracts.ticket import (
    CheckInRequest,
    PriceQuote,
    PricingQuery,
    RefundRequest,
    SeatAvailabilityQuery,
    SeatSelection,
    Ticket,
    TicketCancellation,
    TicketSearch,
)
from airport.persistence.db_manager import DatabaseManager
from airport.persistence.repositories.base import BaseRepository, record_audit
from airport.persistence.sql import Filters, build_update, parse_timestamp, utcnow
from airport.services import flight_ops, seating
from airport.services.errors import BusinessRuleError, ConflictError, NotFoundError
from airport.services.pricing import class_fare, quote_price

logger = logging.getLogger(__name__)


class TicketRepository(BaseRepository[Ticket]):
    table = "tickets"
    key = "ticket_id"
    label = "Ticket"
    alias = "t"
    select_sql = (
        "SELECT t.*, p.first_name, p.last_name, p.passport_number, "
        "f.flight_number, f.scheduled_departure, f.scheduled_arrival, f.status AS flight_status, "
        "dep.iata_code AS departure_iata, arr.iata_code AS arrival_iata "
        "FROM tickets t "
        "JOIN passengers p ON p.passenger_id = t.passenger_id "
        "JOIN flights f ON f.flight_id = t.flight_id "
        "LEFT JOIN airports dep ON dep.airport_id = f.departure_airport_id "
        "LEFT JOIN airports arr ON arr.airport_id = f.arrival_airport_id"
    )
    default_order = "t.booking_date DESC, t.ticket_id DESC"
    sort_columns = {
        "booking_date": "t.booking_date",
        "ticket_number": "t.ticket_number",
        "price": "t.price",
        "status": "t.status",
        "class": "t.ticket_class",
        "scheduled_departure": "f.scheduled_departure",
    }
    unique = [(("ticket_number",), "Ticket with this number already exists")]
    references = [
        ("passenger_id", "passengers", "passenger_id", "Passenger"),
        ("flight_id", "flights", "flight_id", "Flight"),
    ]
    dependents = [("baggage", "ticket_id", "Ticket has baggage and cannot be deleted")]

    def __init__(self, manager: DatabaseManager):
        super().__init__(Ticket, manager)

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------

    def create(self, values: dict[str, Any], actor_id: int | None = None) -> Ticket:
        """Book a seat on an open flight."""
        with self._manager.transaction() as conn:
            ticket_id = self.book(conn, values, actor_id)
            return self._load(conn, ticket_id)

    def book(self, conn: sqlite3.Connection, values: dict[str, Any], actor_id: int | None = None) -> int:
        """Insert a ticket inside the caller's transaction. Returns its id."""
        self._check_references(conn, values)
        flight = self._open_flight(conn, values["flight_id"])
        self._check_capacity(conn, values["flight_id"], values.get("ticket_class") or "economy")
        if values.get("seat_number"):
            self._check_seat(conn, values["flight_id"], values["seat_number"])

        values = {k: v for k, v in values.items() if v is not None}
        values.setdefault("ticket_class", "economy")
        if "price" not in values:
            values["price"] = class_fare(flight["price"], values["ticket_class"])
        values["ticket_number"] = seating.generate_ticket_number()
        values["status"] = TicketStatus.ACTIVE.value
        ticket_id = self._insert(conn, values, actor_id)
        logger.info("Ticket %s booked on flight %s", values["ticket_number"], flight["flight_number"])
        return ticket_id

    def _open_flight(self, conn: sqlite3.Connection, flight_id: int) -> sqlite3.Row:
        flight = conn.execute("SELECT * FROM flights WHERE flight_id = ?", (flight_id,)).fetchone()
        if flight is None:
            raise NotFoundError("Flight not found")
        if flight["status"] in flight_ops.CLOSED_STATUSES:
            raise BusinessRuleError(f"Cannot book a ticket on a {flight['status']} flight")
        return flight

    def _check_capacity(
        self,
        conn: sqlite3.Connection,
        flight_id: int,
        ticket_class: str,
        whole_flight: bool = True,
    ) -> None:
        """Active tickets must fit the aircraft and the cabin class."""
        row = conn.execute(
            "SELECT m.capacity, "
            "(SELECT COUNT(*) FROM tickets t WHERE t.flight_id = f.flight_id "
            " AND t.status = 'active') AS booked, "
            "(SELECT COUNT(*) FROM tickets t WHERE t.flight_id = f.flight_id "
            " AND t.status = 'active' AND t.ticket_class = ?) AS booked_in_class "
            "FROM flights f "
            "JOIN aircraft a ON a.aircraft_id = f.aircraft_id "
            "JOIN aircraft_models m ON m.model_id = a.model_id "
            "WHERE f.flight_id = ?",
            (ticket_class, flight_id),
        ).fetchone()
        if whole_flight and row["booked"] >= row["capacity"]:
            raise ConflictError("Flight is fully booked")
        if row["booked_in_class"] >= seating.class_capacity(row["capacity"])[ticket_class]:
            raise ConflictError(f"No {ticket_class} seats available on this flight")

    def _check_seat(
        self,
        conn: sqlite3.Connection,
        flight_id: int,
        seat_number: str,
        ticket_id: int | None = None,
    ) -> None:
        taken = conn.execute(
            "SELECT 1 FROM tickets WHERE flight_id = ? AND seat_number = ? "
            "AND status = 'active' AND ticket_id != ?",
            (flight_id, seat_number, ticket_id or 0),
        ).fetchone()
        if taken is not None:
            raise ConflictError("Seat is not available")

    def _validate(self, conn: sqlite3.Connection, values: dict[str, Any], current: dict[str, Any] | None) -> None:
        new_class = values.get("ticket_class")
        if (
            current is not None
            and new_class
            and new_class != current["ticket_class"]
            and current["status"] == TicketStatus.ACTIVE.value
        ):
            self._check_capacity(conn, current["flight_id"], new_class, whole_flight=False)
        if current is not None and values.get("seat_number") and values["seat_number"] != current["seat_number"]:
            self._check_seat(conn, current["flight_id"], values["seat_number"], current["ticket_id"])

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search(self, query: TicketSearch) -> Page[dict]:
        filters = (
            Filters()
            .like_any(["t.ticket_number", "p.first_name", "p.last_name"], query.search)
            .equals("t.passenger_id", query.passenger_id)
            .equals("t.flight_id", query.flight_id)
            .equals("t.status", query.status)
            .equals("t.ticket_class", query.ticket_class)
            .date_from("t.booking_date", query.booking_date_from)
            .date_to("t.booking_date", query.booking_date_to)
            .equals("t.booking_reference", query.booking_reference)
        )
        return self._page(filters, query)

    def by_number(self, ticket_number: str) -> Ticket | None:
        return self.find_one("ticket_number", ticket_number)

    def by_passenger(self, passenger_id: int) -> list[Ticket]:
        with self._manager.transaction() as conn:
            return self._many(conn, "t.passenger_id = ?", (passenger_id,))

    def by_flight(self, flight_id: int) -> list[Ticket]:
        with self._manager.transaction() as conn:
            return self._many(conn, "t.flight_id = ?", (flight_id,), "t.seat_number, t.ticket_id")

    # ------------------------------------------------------------------
    # Check-in and seats
    # ------------------------------------------------------------------

    def check_in(self, request: CheckInRequest, actor_id: int | None = None, now: datetime | None = None) -> Ticket:
        """Check an active ticket in and issue its boarding pass."""
        with self._manager.transaction() as conn:
            current = self._require(conn, request.ticket_id)
            if current["status"] != TicketStatus.ACTIVE.value:
                raise BusinessRuleError(f"Cannot check in a {current['status']} ticket")
            if current["check_in_time"] is not None:
                raise BusinessRuleError("Ticket is already checked in")
            flight = conn.execute(
                "SELECT scheduled_departure FROM flights WHERE flight_id = ?", (current["flight_id"],)
            ).fetchone()
            flight_ops.check_in_window(parse_timestamp(flight["scheduled_departure"]), now or utcnow())

            values: dict[str, Any] = {
                "check_in_time": now or utcnow(),
                "boarding_pass_number": seating.generate_boarding_pass(),
            }
            if request.seat_number and request.seat_number != current["seat_number"]:
                self._check_seat(conn, current["flight_id"], request.seat_number, current["ticket_id"])
                values["seat_number"] = request.seat_number
            if request.meal_preference is not None:
                values["meal_preference"] = request.meal_preference
            if request.special_requests is not None:
                values["special_requests"] = request.special_requests
            self._apply(conn, current, values, actor_id, AuditAction.CHECK_IN)
            ticket = self._load(conn, request.ticket_id)

        logger.info("Ticket %s checked in, boarding pass %s", current["ticket_number"], values["boarding_pass_number"])
        return ticket

    def select_seat(self, request: SeatSelection, actor_id: int | None = None) -> Ticket:
        with self._manager.transaction() as conn:
            current = self._require(conn, request.ticket_id)
            if current["status"] != TicketStatus.ACTIVE.value:
                raise BusinessRuleError(f"Cannot select a seat on a {current['status']} ticket")
            self._check_seat(conn, current["flight_id"], request.seat_number, current["ticket_id"])
            values = {
                "seat_number": request.seat_number,
                "price": round(current["price"] + request.additional_fee, 2),
            }
            self._apply(conn, current, values, actor_id)
            return self._load(conn, request.ticket_id)

    def seat_availability(self, query: SeatAvailabilityQuery) -> dict[str, Any]:
        """Per-class seat counts from active tickets, optionally with a seat map."""
        with self._manager.transaction() as conn:
            flight = conn.execute(
                "SELECT f.flight_id, f.flight_number, m.capacity "
                "FROM flights f JOIN aircraft a ON a.aircraft_id = f.aircraft_id "
                "JOIN aircraft_models m ON m.model_id = a.model_id WHERE f.flight_id = ?",
                (query.flight_id,),
            ).fetchone()
            if flight is None:
                raise NotFoundError("Flight not found")
            rows = conn.execute(
                "SELECT ticket_class, seat_number FROM tickets "
                "WHERE flight_id = ? AND status = 'active' AND seat_number IS NOT NULL",
                (query.flight_id,),
            ).fetchall()

        occupied: dict[str, int] = {}
        for row in rows:
            occupied[row["ticket_class"]] = occupied.get(row["ticket_class"], 0) + 1
        result: dict[str, Any] = {
            "flight_id": flight["flight_id"],
            "flight_number": flight["flight_number"],
            "capacity": flight["capacity"],
            "classes": seating.seat_availability(flight["capacity"], occupied, query.ticket_class),
        }
        if query.include_seat_map:
            result["seat_map"] = seating.seat_map(flight["capacity"], {r["seat_number"] for r in rows})
        return result

    def pricing(self, query: PricingQuery) -> PriceQuote:
        with self._manager.transaction() as conn:
            flight = conn.execute(
                "SELECT price FROM flights WHERE flight_id = ?", (query.flight_id,)
            ).fetchone()
        if flight is None:
            raise NotFoundError("Flight not found")
        return quote_price(flight["price"], query.ticket_class, query.passenger_count, query.frequent_flyer)

    # ------------------------------------------------------------------
    # Cancellation and refund
    # ------------------------------------------------------------------

    def cancel(self, request: TicketCancellation, actor_id: int | None = None) -> Ticket:
        with self._manager.transaction() as conn:
            current = self._require(conn, request.ticket_id)
            if current["status"] != TicketStatus.ACTIVE.value:
                raise BusinessRuleError(f"Ticket is already {current['status']}")
            values: dict[str, Any] = {"status": TicketStatus.CANCELLED.value}
            if request.reason:
                values["special_requests"] = _append_note(current["special_requests"], f"Cancelled: {request.reason}")
            self._apply(conn, current, values, actor_id, AuditAction.CANCELLATION)
            ticket = self._load(conn, request.ticket_id)
        logger.info("Ticket %s cancelled (%s)", current["ticket_number"], request.reason or "no reason given")
        return ticket

    def refund(self, request: RefundRequest, actor_id: int | None = None) -> Ticket:
        with self._manager.transaction() as conn:
            current = self._require(conn, request.ticket_id)
            if current["status"] != TicketStatus.CANCELLED.value:
                raise BusinessRuleError("Ticket must be cancelled before refund")
            amount = round(current["price"] * request.refund_percentage, 2)
            values = {"status": TicketStatus.REFUNDED.value, "refund_amount": amount}
            sql, params = build_update(self.table, self.key, current["ticket_id"], values)
            conn.execute(sql, params)
            record_audit(
                conn, self.table, current["ticket_id"], AuditAction.REFUND,
                {"status": current["status"], "refund_amount": current["refund_amount"]},
                {**values, "refund_method": request.refund_method, "reason": request.reason},
                actor_id,
            )
            ticket = self._load(conn, request.ticket_id)
        logger.info(
            "Ticket %s refunded %.2f via %s", current["ticket_number"], amount, request.refund_method
        )
        return ticket

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def statistics(self) -> dict[str, Any]:
        with self._manager.transaction() as conn:
            totals = conn.execute(
                """
                SELECT COUNT(*) AS total_tickets,
                       COALESCE(SUM(status = 'active'), 0) AS sold_tickets,
                       COALESCE(SUM(status = 'cancelled'), 0) AS cancelled_tickets,
                       COALESCE(SUM(status = 'refunded'), 0) AS refunded_tickets,
                       COALESCE(SUM(status = 'used'), 0) AS used_tickets,
                       ROUND(COALESCE(SUM(CASE WHEN status IN ('active', 'used') THEN price END), 0), 2)
                           AS total_revenue,
                       ROUND(COALESCE(SUM(refund_amount), 0), 2) AS refunded_amount,
                       ROUND(COALESCE(AVG(price), 0), 2) AS average_price,
                       COALESCE(SUM(check_in_time IS NOT NULL), 0) AS checked_in
                FROM tickets
                """
            ).fetchone()
            no_shows = conn.execute(
                """
                SELECT COUNT(*) AS no_shows,
                       (SELECT COUNT(*) FROM tickets t2 JOIN flights f2 ON f2.flight_id = t2.flight_id
                        WHERE f2.status IN ('departed', 'arrived') AND t2.status IN ('active', 'used'))
                           AS flown
                FROM tickets t JOIN flights f ON f.flight_id = t.flight_id
                WHERE f.status IN ('departed', 'arrived')
                  AND t.status = 'active' AND t.check_in_time IS NULL
                """
            ).fetchone()
            by_class = conn.execute(
                """
                SELECT ticket_class AS class, COUNT(*) AS count,
                       ROUND(COALESCE(SUM(CASE WHEN status IN ('active', 'used') THEN price END), 0), 2) AS revenue
                FROM tickets GROUP BY ticket_class ORDER BY ticket_class
                """
            ).fetchall()
            by_status = conn.execute(
                "SELECT status, COUNT(*) AS count FROM tickets GROUP BY status ORDER BY status"
            ).fetchall()

        stats = dict(totals)
        checked_in = stats.pop("checked_in")
        total = stats["total_tickets"]
        stats["net_revenue"] = round(stats["total_revenue"] - stats["refunded_amount"], 2)
        stats["check_in_rate"] = round(checked_in * 100.0 / total, 2) if total else 0.0
        stats["no_show_rate"] = (
            round(no_shows["no_shows"] * 100.0 / no_shows["flown"], 2) if no_shows["flown"] else 0.0
        )
        stats["by_class"] = [dict(r) for r in by_class]
        stats["by_status"] = {r["status"]: r["count"] for r in by_status}
        return stats


def _append_note(existing: str | None, note: str) -> str:
    return f"{existing}\n{note}" if existing else note
