"""Repository for flights: scheduling, operational status and statistics."""

from __future__ import annotations

import logging
import sqlite3
from datetime import date, datetime
from typing import Any

from airport.contracts.common import Page
from airport.contracts.enums import AuditAction, FlightStatus, GateStatus, TicketStatus
from airport.contracts.flight import (
    Flight,
    FlightCancellation,
    FlightDelay,
    FlightLoad,
    FlightSearch,
    FlightStatisticsQuery,
    FlightStatusUpdate,
)
from airport.persistence.db_manager import DatabaseManager
from airport.persistence.repositories.base import BaseRepository
from airport.persistence.sql import (
    Filters,
    minutes_between,
    paginate,
    parse_timestamp,
    period_expr,
    utcnow,
)
from airport.services import flight_ops
from airport.services.errors import BusinessRuleError, ConflictError, NotFoundError

logger = logging.getLogger(__name__)

# Flights joined with airports, aircraft and gate, plus seat figures.
# Exposed as a derived table so every calculated column is filterable.
FLIGHT_VIEW = """
    SELECT fl.*,
           dep.iata_code AS departure_iata, dep.name AS departure_airport_name,
           dc.city_name AS departure_city,
           arr.iata_code AS arrival_iata, arr.name AS arrival_airport_name,
           ac.city_name AS arrival_city,
           a.registration_number, m.model_name, m.capacity,
           g.gate_number, g.terminal,
           COALESCE(bk.booked, 0) AS booked_seats,
           m.capacity - COALESCE(bk.booked, 0) AS available_seats,
           ROUND(COALESCE(bk.booked, 0) * 100.0 / m.capacity, 2) AS load_percentage
    FROM flights fl
    JOIN airports dep ON dep.airport_id = fl.departure_airport_id
    LEFT JOIN cities dc ON dc.city_id = dep.city_id
    JOIN airports arr ON arr.airport_id = fl.arrival_airport_id
    LEFT JOIN cities ac ON ac.city_id = arr.city_id
    JOIN aircraft a ON a.aircraft_id = fl.aircraft_id
    JOIN aircraft_models m ON m.model_id = a.model_id
    LEFT JOIN gates g ON g.gate_id = fl.gate_id
    LEFT JOIN (
        SELECT flight_id, COUNT(*) AS booked
        FROM tickets WHERE status = 'active'
        GROUP BY flight_id
    ) bk ON bk.flight_id = fl.flight_id
"""

DELAY_MINUTES = minutes_between("f.scheduled_departure", "f.actual_departure")


class FlightRepository(BaseRepository[Flight]):
    table = "flights"
    key = "flight_id"
    label = "Flight"
    alias = "f"
    select_sql = f"SELECT f.* FROM ({FLIGHT_VIEW}) f"
    default_order = "f.scheduled_departure"
    sort_columns = {
        "scheduled_departure": "f.scheduled_departure",
        "scheduled_arrival": "f.scheduled_arrival",
        "flight_number": "f.flight_number",
        "price": "f.price",
        "status": "f.status",
        "available_seats": "f.available_seats",
        "load_percentage": "f.load_percentage",
    }
    unique = [(("flight_number",), "Flight with this number already exists")]
    references = [
        ("aircraft_id", "aircraft", "aircraft_id", "Aircraft"),
        ("departure_airport_id", "airports", "airport_id", "Departure airport"),
        ("arrival_airport_id", "airports", "airport_id", "Arrival airport"),
        ("gate_id", "gates", "gate_id", "Gate"),
    ]
    dependents = [
        ("tickets", "flight_id", "Flight has tickets and cannot be deleted"),
        ("baggage", "flight_id", "Flight has baggage and cannot be deleted"),
    ]

    def __init__(self, manager: DatabaseManager):
        super().__init__(Flight, manager)

    # ------------------------------------------------------------------
    # Validation hooks
    # ------------------------------------------------------------------

    def _validate(self, conn: sqlite3.Connection, values: dict[str, Any], current: dict[str, Any] | None) -> None:
        merged = {**(current or {}), **values}
        schedule_keys = ("departure_airport_id", "arrival_airport_id", "scheduled_departure", "scheduled_arrival")
        if any(k in values for k in schedule_keys):
            flight_ops.validate_schedule(
                merged["departure_airport_id"],
                merged["arrival_airport_id"],
                _as_datetime(merged["scheduled_departure"]),
                _as_datetime(merged["scheduled_arrival"]),
            )
        if values.get("gate_id") is not None:
            self._check_gate(conn, values["gate_id"], merged["departure_airport_id"])

    def _check_gate(self, conn: sqlite3.Connection, gate_id: int, airport_id: int) -> sqlite3.Row:
        gate = conn.execute("SELECT * FROM gates WHERE gate_id = ?", (gate_id,)).fetchone()
        if gate is None:
            raise NotFoundError("Gate not found")
        if gate["airport_id"] != airport_id:
            raise BusinessRuleError("Gate does not belong to the departure airport")
        if gate["status"] == GateStatus.MAINTENANCE.value:
            raise BusinessRuleError("Gate is under maintenance")
        return gate

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def _search_filters(self, query: FlightSearch) -> Filters:
        return (
            Filters()
            .equals("f.departure_iata", query.departure_iata.upper() if query.departure_iata else None)
            .equals("f.arrival_iata", query.arrival_iata.upper() if query.arrival_iata else None)
            .equals("date(f.scheduled_departure)", query.departure_date)
            .equals("f.aircraft_id", query.aircraft_id)
            .equals("f.gate_id", query.gate_id)
            .lte("f.price", query.max_price)
            .gte("f.available_seats", query.passenger_count)
        )

    def search(self, query: FlightSearch) -> Page[dict]:
        return self._page(self._search_filters(query).equals("f.status", query.status), query)

    def advanced_search(self, query: FlightSearch) -> Page[dict]:
        """Bookable flights only, soonest first, with room for the whole party."""
        bookable = [FlightStatus.SCHEDULED.value, FlightStatus.BOARDING.value]
        statuses = [query.status] if query.status in bookable else bookable
        query = query.model_copy(update={"passenger_count": query.passenger_count or 1})
        filters = self._search_filters(query).in_("f.status", statuses)
        with self._manager.transaction() as conn:
            rows, total = paginate(
                conn,
                self.select_sql + filters.sql(),
                filters.params,
                query,
                " ORDER BY f.scheduled_departure ASC",
            )
        data = [Flight.from_row(r).to_response() for r in rows]
        return Page.build(data, total, query.page, query.limit)

    def by_number(self, flight_number: str) -> Flight | None:
        return self.find_one("flight_number", flight_number.upper())

    def by_aircraft(self, aircraft_id: int) -> list[Flight]:
        with self._manager.transaction() as conn:
            return self._many(conn, "f.aircraft_id = ?", (aircraft_id,))

    def by_route(self, departure_airport_id: int, arrival_airport_id: int) -> list[Flight]:
        with self._manager.transaction() as conn:
            return self._many(
                conn,
                "f.departure_airport_id = ? AND f.arrival_airport_id = ?",
                (departure_airport_id, arrival_airport_id),
            )

    def by_status(self, status: FlightStatus | str) -> list[Flight]:
        with self._manager.transaction() as conn:
            return self._many(conn, "f.status = ?", (FlightStatus(status).value,))

    def by_date_range(self, start_date: date, end_date: date) -> list[Flight]:
        if start_date > end_date:
            raise BusinessRuleError("start_date must not be after end_date")
        with self._manager.transaction() as conn:
            return self._many(
                conn,
                "date(f.scheduled_departure) BETWEEN ? AND ?",
                (start_date.isoformat(), end_date.isoformat()),
            )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def update_status(
        self,
        flight_id: int,
        update: FlightStatusUpdate,
        actor_id: int | None = None,
        now: datetime | None = None,
    ) -> Flight:
        """Set the operational status, honouring actual times when given."""
        status = flight_ops.resolve_status(
            update.status, update.actual_departure, update.actual_arrival, now or utcnow()
        )
        values: dict[str, Any] = {"status": status}
        if update.actual_departure is not None:
            values["actual_departure"] = update.actual_departure
        if update.actual_arrival is not None:
            values["actual_arrival"] = update.actual_arrival

        with self._manager.transaction() as conn:
            current = self._require(conn, flight_id)
            self._apply(conn, current, values, actor_id, AuditAction.STATUS_CHANGE)
            if status in (FlightStatus.DEPARTED.value, FlightStatus.CANCELLED.value):
                self._release_gate(conn, current["gate_id"])
            if status == FlightStatus.DEPARTED.value:
                # Checked-in passengers boarded
                conn.execute(
                    "UPDATE tickets SET status = ?, updated_at = ? "
                    "WHERE flight_id = ? AND status = ? AND check_in_time IS NOT NULL",
                    (TicketStatus.USED.value, utcnow().isoformat(), flight_id, TicketStatus.ACTIVE.value),
                )
            recipients = self._recipients(conn, flight_id)
            flight = self._load(conn, flight_id)

        logger.info("Flight %s status %s -> %s", current["flight_number"], current["status"], status)
        if status in flight_ops.NOTIFY_STATUSES and status != current["status"]:
            flight_ops.notify_passengers(current["flight_number"], status, recipients)
        return flight

    def assign_gate(self, flight_id: int, gate_id: int, actor_id: int | None = None) -> Flight:
        with self._manager.transaction() as conn:
            current = self._require(conn, flight_id)
            gate = self._assign(conn, current, gate_id, actor_id)
            flight = self._load(conn, flight_id)
        logger.info("Flight %s assigned to gate %s", current["flight_number"], gate["gate_number"])
        return flight

    def auto_assign_gate(self, flight_id: int, terminal: str | None = None, actor_id: int | None = None) -> Flight:
        """Give the flight the first free gate at its departure airport."""
        with self._manager.transaction() as conn:
            current = self._require(conn, flight_id)
            if current["status"] in flight_ops.CLOSED_STATUSES:
                raise BusinessRuleError(f"Cannot assign a gate to a {current['status']} flight")
            sql = """
                SELECT g.gate_id FROM gates g
                WHERE g.airport_id = ? AND g.status = ?
                  AND NOT EXISTS (
                      SELECT 1 FROM flights f
                      WHERE f.gate_id = g.gate_id AND f.flight_id != ? AND f.status IN (?, ?)
                  )
            """
            params: list[Any] = [
                current["departure_airport_id"], GateStatus.AVAILABLE.value, flight_id,
                FlightStatus.SCHEDULED.value, FlightStatus.BOARDING.value,
            ]
            if terminal:
                sql += " AND g.terminal = ?"
                params.append(terminal)
            row = conn.execute(sql + " ORDER BY g.terminal, g.gate_number LIMIT 1", params).fetchone()
            if row is None:
                raise BusinessRuleError("No available gates found for this flight")
            gate = self._assign(conn, current, row["gate_id"], actor_id)
            flight = self._load(conn, flight_id)
        logger.info("Flight %s auto-assigned to gate %s", current["flight_number"], gate["gate_number"])
        return flight

    def _assign(
        self, conn: sqlite3.Connection, current: dict[str, Any], gate_id: int, actor_id: int | None
    ) -> sqlite3.Row:
        if current["status"] in flight_ops.CLOSED_STATUSES:
            raise BusinessRuleError(f"Cannot assign a gate to a {current['status']} flight")
        gate = self._check_gate(conn, gate_id, current["departure_airport_id"])
        if gate["status"] == GateStatus.OCCUPIED.value and current["gate_id"] != gate_id:
            raise ConflictError("Gate is already occupied")
        if current["gate_id"] != gate_id:
            self._release_gate(conn, current["gate_id"])
            conn.execute(
                "UPDATE gates SET status = ? WHERE gate_id = ?",
                (GateStatus.OCCUPIED.value, gate_id),
            )
            self._apply(conn, current, {"gate_id": gate_id}, actor_id)
        return gate

    def delay(self, flight_id: int, request: FlightDelay, actor_id: int | None = None) -> Flight:
        with self._manager.transaction() as conn:
            current = self._require(conn, flight_id)
            if current["status"] in flight_ops.CLOSED_STATUSES:
                raise BusinessRuleError(f"Cannot delay a {current['status']} flight")
            departure, arrival = flight_ops.shift_schedule(
                _as_datetime(current["scheduled_departure"]),
                _as_datetime(current["scheduled_arrival"]),
                request.delay_minutes,
                request.new_departure,
                request.new_arrival,
            )
            flight_ops.validate_schedule(
                current["departure_airport_id"], current["arrival_airport_id"], departure, arrival
            )
            values = {
                "status": FlightStatus.DELAYED.value,
                "scheduled_departure": departure,
                "scheduled_arrival": arrival,
                "delay_reason": request.reason,
            }
            self._apply(conn, current, values, actor_id, AuditAction.STATUS_CHANGE)
            recipients = self._recipients(conn, flight_id) if request.notify_passengers else []
            flight = self._load(conn, flight_id)

        logger.info(
            "Flight %s delayed by %d min (%s)",
            current["flight_number"], request.delay_minutes, request.reason or "no reason given",
        )
        if request.notify_passengers:
            flight_ops.notify_passengers(
                current["flight_number"], "delayed", recipients, f"new departure {departure.isoformat()}"
            )
        return flight

    def cancel(self, flight_id: int, request: FlightCancellation, actor_id: int | None = None) -> Flight:
        with self._manager.transaction() as conn:
            current = self._require(conn, flight_id)
            if current["status"] == FlightStatus.CANCELLED.value:
                raise BusinessRuleError("Flight is already cancelled")
            if current["status"] in (FlightStatus.DEPARTED.value, FlightStatus.ARRIVED.value):
                raise BusinessRuleError("Cannot cancel a flight that has already departed")
            values: dict[str, Any] = {"status": FlightStatus.CANCELLED.value}
            if request.reason:
                values["notes"] = request.reason
            self._apply(conn, current, values, actor_id, AuditAction.CANCELLATION)
            self._release_gate(conn, current["gate_id"])
            recipients = self._recipients(conn, flight_id) if request.notify_passengers else []
            flight = self._load(conn, flight_id)

        logger.info("Flight %s cancelled (%s)", current["flight_number"], request.reason or "no reason given")
        if request.notify_passengers:
            flight_ops.notify_passengers(current["flight_number"], "cancelled", recipients, request.reason)
        return flight

    def _release_gate(self, conn: sqlite3.Connection, gate_id: int | None) -> None:
        if gate_id is not None:
            conn.execute(
                "UPDATE gates SET status = ? WHERE gate_id = ? AND status = ?",
                (GateStatus.AVAILABLE.value, gate_id, GateStatus.OCCUPIED.value),
            )

    def _recipients(self, conn: sqlite3.Connection, flight_id: int) -> list[str]:
        rows = conn.execute(
            """
            SELECT COALESCE(p.email, p.first_name || ' ' || p.last_name) AS contact
            FROM tickets t JOIN passengers p ON p.passenger_id = t.passenger_id
            WHERE t.flight_id = ? AND t.status IN ('active', 'used')
            ORDER BY t.ticket_id
            """,
            (flight_id,),
        ).fetchall()
        return [r["contact"] for r in rows]

    # ------------------------------------------------------------------
    # Load and manifest
    # ------------------------------------------------------------------

    def load(self, flight_id: int) -> FlightLoad:
        flight = self.require(flight_id)
        return FlightLoad(
            flight_id=flight.flight_id,
            flight_number=flight.flight_number,
            capacity=flight.capacity or 0,
            booked_seats=flight.booked_seats or 0,
            available_seats=flight.available_seats or 0,
            load_percentage=flight.load_percentage or 0.0,
        )

    def passengers(self, flight_id: int) -> list[dict[str, Any]]:
        """Passenger manifest: active and used tickets, by seat."""
        with self._manager.transaction() as conn:
            self._require(conn, flight_id)
            rows = conn.execute(
                """
                SELECT p.passenger_id, p.first_name, p.last_name, p.passport_number,
                       p.nationality, p.email,
                       t.ticket_id, t.ticket_number, t.seat_number, t.ticket_class AS class,
                       t.status AS ticket_status, t.check_in_time, t.boarding_pass_number
                FROM tickets t JOIN passengers p ON p.passenger_id = t.passenger_id
                WHERE t.flight_id = ? AND t.status IN ('active', 'used')
                ORDER BY t.seat_number IS NULL, t.seat_number, p.last_name
                """,
                (flight_id,),
            ).fetchall()
        return [dict(r) for r in rows]

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def statistics(self, query: FlightStatisticsQuery) -> dict[str, Any]:
        """Per-period flight counts, delays, revenue, load and punctuality."""
        filters = (
            Filters()
            .date_from("f.scheduled_departure", query.start_date)
            .date_to("f.scheduled_departure", query.end_date)
        )
        if query.airport_id is not None:
            filters.raw(
                "(f.departure_airport_id = ? OR f.arrival_airport_id = ?)",
                query.airport_id, query.airport_id,
            )
        threshold = flight_ops.ON_TIME_THRESHOLD_MINUTES
        punctual_base = "f.status IN ('departed', 'arrived') AND f.actual_departure IS NOT NULL"
        period = period_expr(query.group_by, "f.scheduled_departure")

        with self._manager.transaction() as conn:
            periods = conn.execute(
                f"""
                SELECT {period} AS period,
                       COUNT(*) AS total_flights,
                       COALESCE(SUM(f.status = 'arrived'), 0) AS completed_flights,
                       COALESCE(SUM(f.status = 'cancelled'), 0) AS cancelled_flights,
                       COALESCE(SUM(f.status = 'delayed'
                                    OR (f.actual_departure IS NOT NULL AND {DELAY_MINUTES} > {threshold})), 0)
                           AS delayed_flights,
                       ROUND(COALESCE(AVG(CASE WHEN f.actual_departure IS NOT NULL
                                               THEN MAX({DELAY_MINUTES}, 0) END), 0), 2) AS average_delay_minutes,
                       ROUND(COALESCE(SUM(f.price * f.booked_seats), 0), 2) AS revenue,
                       ROUND(COALESCE(AVG(f.load_percentage), 0), 2) AS average_load_percentage,
                       ROUND(COALESCE(100.0 * SUM({punctual_base} AND {DELAY_MINUTES} <= {threshold})
                                      / NULLIF(SUM({punctual_base}), 0), 0), 2) AS on_time_percentage
                FROM ({FLIGHT_VIEW}) f{filters.sql()}
                GROUP BY period
                ORDER BY period
                """,
                filters.params,
            ).fetchall()
            routes = conn.execute(
                f"""
                SELECT f.departure_iata, f.arrival_iata,
                       COUNT(*) AS flight_count,
                       ROUND(COALESCE(SUM(f.price * f.booked_seats), 0), 2) AS revenue,
                       ROUND(COALESCE(AVG(f.load_percentage), 0), 2) AS average_load_percentage
                FROM ({FLIGHT_VIEW}) f{filters.sql()}
                GROUP BY f.departure_iata, f.arrival_iata
                ORDER BY flight_count DESC, revenue DESC
                LIMIT 5
                """,
                filters.params,
            ).fetchall()

        rows = [dict(r) for r in periods]
        return {
            "group_by": query.group_by,
            "periods": rows,
            "totals": {
                "total_flights": sum(r["total_flights"] for r in rows),
                "completed_flights": sum(r["completed_flights"] for r in rows),
                "cancelled_flights": sum(r["cancelled_flights"] for r in rows),
                "delayed_flights": sum(r["delayed_flights"] for r in rows),
                "revenue": round(sum(r["revenue"] for r in rows), 2),
            },
            "top_routes": [dict(r) for r in routes],
        }


def _as_datetime(value: datetime | str) -> datetime:
    if isinstance(value, datetime):
        return value
    parsed = parse_timestamp(value)
    if parsed is None:
        raise BusinessRuleError("Missing flight schedule time")
    return parsed
