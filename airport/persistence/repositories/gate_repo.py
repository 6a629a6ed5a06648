"""Repository for airport gates: inventory, release and usage statistics."""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

from airport.contracts.enums import FlightStatus, GateStatus
from airport.contracts.geography import Gate
from airport.persistence.db_manager import DatabaseManager
from airport.persistence.repositories.base import BaseRepository
from airport.services.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

# Flights still holding their gate.
GATE_HOLDING = (FlightStatus.SCHEDULED.value, FlightStatus.BOARDING.value)


class GateRepository(BaseRepository[Gate]):
    table = "gates"
    key = "gate_id"
    label = "Gate"
    alias = "g"
    select_sql = "SELECT g.* FROM gates g"
    default_order = "g.terminal, g.gate_number"
    touch = False
    unique = [(("airport_id", "gate_number"), "Gate already exists at this airport")]
    references = [("airport_id", "airports", "airport_id", "Airport")]

    def __init__(self, manager: DatabaseManager):
        super().__init__(Gate, manager)

    def _require_airport(self, conn: sqlite3.Connection, airport_id: int) -> None:
        if conn.execute("SELECT 1 FROM airports WHERE airport_id = ?", (airport_id,)).fetchone() is None:
            raise NotFoundError("Airport not found")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def by_airport(self, airport_id: int) -> list[Gate]:
        with self._manager.transaction() as conn:
            self._require_airport(conn, airport_id)
            return self._many(conn, "g.airport_id = ?", (airport_id,))

    def available(self, airport_id: int, terminal: str | None = None) -> list[Gate]:
        where, params = "g.airport_id = ? AND g.status = ?", [airport_id, GateStatus.AVAILABLE.value]
        if terminal:
            where += " AND g.terminal = ?"
            params.append(terminal)
        with self._manager.transaction() as conn:
            self._require_airport(conn, airport_id)
            return self._many(conn, where, params)

    def statistics(self, airport_id: int | None = None) -> list[dict[str, Any]]:
        """Flights per gate and the share of them that actually left."""
        where, params = "", []
        if airport_id is not None:
            where, params = "WHERE g.airport_id = ?", [airport_id]
        with self._manager.transaction() as conn:
            rows = conn.execute(
                f"""
                SELECT g.gate_id, g.gate_number, g.terminal, ap.iata_code,
                       g.status AS current_status,
                       COUNT(f.flight_id) AS total_flights_assigned,
                       COALESCE(SUM(f.status IN ('departed', 'arrived')), 0) AS completed_flights,
                       COALESCE(SUM(f.status IN ('scheduled', 'boarding')), 0) AS upcoming_flights
                FROM gates g
                JOIN airports ap ON ap.airport_id = g.airport_id
                LEFT JOIN flights f ON f.gate_id = g.gate_id
                {where}
                GROUP BY g.gate_id
                ORDER BY total_flights_assigned DESC, ap.iata_code, g.gate_number
                """,
                params,
            ).fetchall()
        result = []
        for r in rows:
            item = dict(r)
            total = item["total_flights_assigned"]
            item["utilization_rate"] = round(item["completed_flights"] * 100.0 / total, 2) if total else 0.0
            result.append(item)
        return result

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def create_for(self, airport_id: int, values: dict[str, Any], actor_id: int | None = None) -> Gate:
        return self.create({**values, "airport_id": airport_id}, actor_id)

    def release(self, gate_id: int, actor_id: int | None = None) -> Gate:
        """Mark the gate available and detach it from finished flights.

        Flights that are still scheduled or boarding keep the gate.
        """
        with self._manager.transaction() as conn:
            current = self._require(conn, gate_id)
            if current["status"] != GateStatus.AVAILABLE.value:
                self._apply(conn, current, {"status": GateStatus.AVAILABLE.value}, actor_id)
            detached = conn.execute(
                "UPDATE flights SET gate_id = NULL WHERE gate_id = ? AND status IN (?, ?)",
                (gate_id, FlightStatus.ARRIVED.value, FlightStatus.CANCELLED.value),
            ).rowcount
            gate = self._load(conn, gate_id)
        logger.info("Gate %s released (%d finished flight(s) detached)", current["gate_number"], detached)
        return gate

    def _before_delete(self, conn: sqlite3.Connection, current: dict[str, Any]) -> None:
        active = conn.execute(
            "SELECT 1 FROM flights WHERE gate_id = ? AND status IN (?, ?) LIMIT 1",
            (current["gate_id"], *GATE_HOLDING),
        ).fetchone()
        if active is not None:
            raise ConflictError("Cannot delete gate that is assigned to active flights")
