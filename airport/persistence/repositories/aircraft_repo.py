"""Repository for the aircraft fleet."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any

from airport.contracts.common import Page
from airport.contracts.enums import AircraftStatus, AuditAction
from airport.contracts.fleet import Aircraft, AircraftSearch, MaintenanceWindow
from airport.persistence.db_manager import DatabaseManager
from airport.persistence.repositories.base import BaseRepository
from airport.persistence.sql import Filters
from airport.services.errors import BusinessRuleError
from airport.services.maintenance import classify_maintenance, days_until

logger = logging.getLogger(__name__)


class AircraftRepository(BaseRepository[Aircraft]):
    table = "aircraft"
    key = "aircraft_id"
    label = "Aircraft"
    alias = "a"
    select_sql = (
        "SELECT a.*, m.model_name, m.manufacturer, m.capacity, m.max_range "
        "FROM aircraft a LEFT JOIN aircraft_models m ON m.model_id = a.model_id"
    )
    default_order = "a.registration_number"
    sort_columns = {
        "registration_number": "a.registration_number",
        "status": "a.status",
        "purchase_date": "a.purchase_date",
        "next_maintenance": "a.next_maintenance",
        "capacity": "m.capacity",
    }
    unique = [(("registration_number",), "Aircraft with this registration number already exists")]
    references = [("model_id", "aircraft_models", "model_id", "Aircraft model")]
    dependents = [("flights", "aircraft_id", "Aircraft has flights and cannot be deleted")]

    def __init__(self, manager: DatabaseManager):
        super().__init__(Aircraft, manager)

    def search(self, query: AircraftSearch) -> Page[dict]:
        filters = (
            Filters()
            .like("a.registration_number", query.registration_number)
            .like("m.manufacturer", query.manufacturer)
            .like("m.model_name", query.model_name)
            .equals("a.status", query.status)
            .equals("a.model_id", query.model_id)
            .gte("a.purchase_date", query.purchase_date_from)
            .lte("a.purchase_date", query.purchase_date_to)
            .gte("a.next_maintenance", query.maintenance_due_from)
            .lte("a.next_maintenance", query.maintenance_due_to)
        )
        return self._page(filters, query)

    # ------------------------------------------------------------------
    # Status and maintenance
    # ------------------------------------------------------------------

    def update_status(self, aircraft_id: int, status: AircraftStatus | str, actor_id: int | None = None) -> Aircraft:
        status = AircraftStatus(status).value
        with self._manager.transaction() as conn:
            current = self._require(conn, aircraft_id)
            if current["status"] != status:
                self._apply(conn, current, {"status": status}, actor_id, AuditAction.STATUS_CHANGE)
                logger.info("Aircraft %s status %s -> %s", current["registration_number"], current["status"], status)
            return self._load(conn, aircraft_id)

    def schedule_maintenance(
        self,
        aircraft_id: int,
        next_maintenance: date,
        notes: str | None = None,
        actor_id: int | None = None,
    ) -> Aircraft:
        """Record maintenance done today and book the next one."""
        today = date.today()
        if next_maintenance < today:
            raise BusinessRuleError("Next maintenance date cannot be in the past")
        values: dict[str, Any] = {"last_maintenance": today, "next_maintenance": next_maintenance}
        if notes is not None:
            values["maintenance_notes"] = notes
        with self._manager.transaction() as conn:
            current = self._require(conn, aircraft_id)
            self._apply(conn, current, values, actor_id)
            return self._load(conn, aircraft_id)

    def maintenance_schedule(self, days: int = 30) -> list[MaintenanceWindow]:
        """Non-retired aircraft due for maintenance within *days* (overdue included)."""
        today = date.today()
        cutoff = today + timedelta(days=days)
        with self._manager.transaction() as conn:
            rows = conn.execute(
                f"{self.select_sql} WHERE a.next_maintenance IS NOT NULL "
                "AND a.next_maintenance <= ? AND a.status != ? "
                "ORDER BY a.next_maintenance",
                (cutoff.isoformat(), AircraftStatus.RETIRED.value),
            ).fetchall()

        windows = []
        for row in rows:
            due = date.fromisoformat(row["next_maintenance"])
            remaining = days_until(due, today)
            kind, hours, priority = classify_maintenance(remaining)
            windows.append(MaintenanceWindow(
                aircraft_id=row["aircraft_id"],
                registration_number=row["registration_number"],
                model_name=row["model_name"],
                next_maintenance=due,
                days_until=remaining,
                maintenance_type=kind,
                estimated_hours=hours,
                priority=priority,
            ))
        return windows

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def statistics(self) -> dict[str, Any]:
        soon = (date.today() + timedelta(days=30)).isoformat()
        with self._manager.transaction() as conn:
            totals = conn.execute(
                """
                SELECT COUNT(*) AS total_aircraft,
                       COALESCE(SUM(status = 'active'), 0) AS active,
                       COALESCE(SUM(status = 'maintenance'), 0) AS in_maintenance,
                       COALESCE(SUM(status = 'retired'), 0) AS retired,
                       ROUND(AVG((julianday('now') - julianday(purchase_date)) / 365.25), 2) AS average_age_years,
                       COALESCE(SUM(next_maintenance IS NOT NULL AND next_maintenance <= ?), 0) AS maintenance_due_30_days
                FROM aircraft
                """,
                (soon,),
            ).fetchone()
            by_manufacturer = conn.execute(
                """
                SELECT m.manufacturer, COUNT(*) AS aircraft_count,
                       COALESCE(SUM(m.capacity), 0) AS total_seats
                FROM aircraft a JOIN aircraft_models m ON m.model_id = a.model_id
                GROUP BY m.manufacturer
                ORDER BY aircraft_count DESC, m.manufacturer
                """
            ).fetchall()
        return {
            **dict(totals),
            "by_manufacturer": [dict(r) for r in by_manufacturer],
        }

    def efficiency(self) -> list[dict[str, Any]]:
        """Per-aircraft utilisation over all non-cancelled flights."""
        with self._manager.transaction() as conn:
            rows = conn.execute(
                """
                SELECT a.aircraft_id, a.registration_number, m.model_name, m.capacity,
                       COUNT(f.flight_id) AS total_flights,
                       ROUND(COALESCE(SUM((julianday(f.scheduled_arrival) - julianday(f.scheduled_departure)) * 24), 0), 2)
                           AS flight_hours,
                       COALESCE(SUM(fl.passengers), 0) AS passengers_carried,
                       ROUND(COALESCE(AVG(CASE WHEN f.flight_id IS NOT NULL
                                               THEN COALESCE(fl.passengers, 0) * 100.0 / m.capacity END), 0), 2)
                           AS average_load_percentage
                FROM aircraft a
                JOIN aircraft_models m ON m.model_id = a.model_id
                LEFT JOIN flights f ON f.aircraft_id = a.aircraft_id AND f.status != 'cancelled'
                LEFT JOIN (
                    SELECT flight_id, COUNT(*) AS passengers
                    FROM tickets WHERE status IN ('active', 'used')
                    GROUP BY flight_id
                ) fl ON fl.flight_id = f.flight_id
                GROUP BY a.aircraft_id
                ORDER BY average_load_percentage DESC, a.registration_number
                """
            ).fetchall()
        return [dict(r) for r in rows]
