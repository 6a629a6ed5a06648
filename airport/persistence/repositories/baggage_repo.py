"""Repository for checked baggage and its handling history."""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any

from airport.contracts.baggage import Baggage, BaggageSearch, BaggageStatusUpdate, BaggageTrackRequest
from airport.contracts.common import Page
from airport.contracts.enums import AuditAction, BaggageStatus
from airport.persistence.db_manager import DatabaseManager
from airport.persistence.repositories.base import BaseRepository
from airport.persistence.sql import Filters, utcnow
from airport.services.baggage_tracking import location_for, timestamp_column
from airport.services.errors import BusinessRuleError, NotFoundError

logger = logging.getLogger(__name__)


class BaggageRepository(BaseRepository[Baggage]):
    table = "baggage"
    key = "baggage_id"
    label = "Baggage"
    alias = "b"
    select_sql = (
        "SELECT b.*, f.flight_number, t.ticket_number, p.first_name, p.last_name "
        "FROM baggage b "
        "LEFT JOIN flights f ON f.flight_id = b.flight_id "
        "LEFT JOIN tickets t ON t.ticket_id = b.ticket_id "
        "LEFT JOIN passengers p ON p.passenger_id = b.passenger_id"
    )
    default_order = "b.created_at DESC, b.baggage_id DESC"
    sort_columns = {
        "baggage_tag": "b.baggage_tag",
        "weight": "b.weight",
        "status": "b.status",
        "created_at": "b.created_at",
    }
    unique = [(("baggage_tag",), "Baggage with this tag already exists")]
    references = [
        ("ticket_id", "tickets", "ticket_id", "Ticket"),
        ("flight_id", "flights", "flight_id", "Flight"),
        ("passenger_id", "passengers", "passenger_id", "Passenger"),
    ]

    def __init__(self, manager: DatabaseManager):
        super().__init__(Baggage, manager)

    def create(self, values: dict[str, Any], actor_id: int | None = None) -> Baggage:
        values = dict(values)
        status = values.setdefault("status", BaggageStatus.CHECKED_IN.value)
        column = timestamp_column(status)
        if column is not None:
            values[column] = utcnow()
        return super().create(values, actor_id)

    def _before_delete(self, conn: sqlite3.Connection, current: dict[str, Any]) -> None:
        if current["status"] == BaggageStatus.LOADED.value:
            raise BusinessRuleError("Cannot delete loaded baggage")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search(self, query: BaggageSearch) -> Page[dict]:
        filters = (
            Filters()
            .equals("b.flight_id", query.flight_id)
            .equals("b.passenger_id", query.passenger_id)
            .equals("b.status", query.status)
            .like("b.baggage_tag", query.baggage_tag)
        )
        return self._page(filters, query)

    def by_flight(self, flight_id: int) -> list[Baggage]:
        with self._manager.transaction() as conn:
            return self._many(conn, "b.flight_id = ?", (flight_id,), "b.baggage_tag")

    def by_passenger(self, passenger_id: int) -> list[Baggage]:
        with self._manager.transaction() as conn:
            return self._many(conn, "b.passenger_id = ?", (passenger_id,))

    def by_tag(self, baggage_tag: str) -> Baggage | None:
        return self.find_one("baggage_tag", baggage_tag)

    # ------------------------------------------------------------------
    # Handling
    # ------------------------------------------------------------------

    def update_status(self, update: BaggageStatusUpdate, actor_id: int | None = None) -> Baggage:
        """Move a bag to a new status and stamp the matching time column."""
        with self._manager.transaction() as conn:
            current = self._require(conn, update.baggage_id)
            values: dict[str, Any] = {"status": update.status}
            column = timestamp_column(update.status)
            if column is not None:
                values[column] = utcnow()
            if update.notes is not None:
                values["notes"] = update.notes
            self._apply(conn, current, values, actor_id, AuditAction.STATUS_CHANGE)
            bag = self._load(conn, update.baggage_id)
        logger.info("Baggage %s status %s -> %s", current["baggage_tag"], current["status"], update.status)
        return bag

    def track(self, request: BaggageTrackRequest) -> dict[str, Any]:
        bag = self.get(request.baggage_id) if request.baggage_id is not None else self.by_tag(request.baggage_tag)
        if bag is None:
            raise NotFoundError("Baggage not found")
        with self._manager.transaction() as conn:
            rows = conn.execute(
                """
                SELECT action, old_values, new_values, user_id, created_at
                FROM audit_logs
                WHERE table_name = 'baggage' AND record_id = ? AND action IN ('create', 'status_change')
                ORDER BY created_at, log_id
                """,
                (bag.baggage_id,),
            ).fetchall()

        history = []
        for row in rows:
            new_values = json.loads(row["new_values"]) if row["new_values"] else {}
            old_values = json.loads(row["old_values"]) if row["old_values"] else {}
            history.append({
                "status": new_values.get("status"),
                "previous_status": old_values.get("status"),
                "notes": new_values.get("notes"),
                "changed_by": row["user_id"],
                "timestamp": row["created_at"],
            })
        return {
            "baggage": bag.to_response(),
            "current_location": location_for(bag.status, bag.flight_number),
            "history": history,
        }

    def statistics(self) -> dict[str, Any]:
        with self._manager.transaction() as conn:
            totals = conn.execute(
                """
                SELECT COUNT(*) AS total_baggage,
                       ROUND(COALESCE(SUM(weight), 0), 2) AS total_weight,
                       ROUND(COALESCE(AVG(weight), 0), 2) AS average_weight,
                       COALESCE(SUM(status = 'lost'), 0) AS lost
                FROM baggage
                """
            ).fetchone()
            by_status = conn.execute(
                "SELECT status, COUNT(*) AS count FROM baggage GROUP BY status ORDER BY status"
            ).fetchall()
        stats = dict(totals)
        total = stats["total_baggage"]
        stats["lost_percentage"] = round(stats["lost"] * 100.0 / total, 2) if total else 0.0
        stats["by_status"] = {status.value: 0 for status in BaggageStatus}
        stats["by_status"].update({r["status"]: r["count"] for r in by_status})
        return stats
