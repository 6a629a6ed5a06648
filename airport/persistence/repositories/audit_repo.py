"""Read side of the audit trail, plus reporting and retention cleanup.

Rows are written by the other repositories through ``record_audit``.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any

from airport.contracts.audit import AuditLog, AuditReportRequest, AuditSearch
from airport.contracts.common import Page
from airport.persistence.db_manager import DatabaseManager
from airport.persistence.repositories.base import BaseRepository
from airport.persistence.sql import Filters
from airport.services.errors import BusinessRuleError

logger = logging.getLogger(__name__)


class AuditRepository(BaseRepository[AuditLog]):
    table = "audit_logs"
    key = "log_id"
    label = "Audit log"
    alias = "l"
    select_sql = "SELECT l.* FROM audit_logs l"
    default_order = "l.created_at DESC, l.log_id DESC"
    sort_columns = {
        "created_at": "l.created_at",
        "table_name": "l.table_name",
        "action": "l.action",
        "user_id": "l.user_id",
    }

    def __init__(self, manager: DatabaseManager):
        super().__init__(AuditLog, manager)

    def search(self, query: AuditSearch) -> Page[dict]:
        filters = (
            Filters()
            .equals("l.table_name", query.table_name)
            .equals("l.record_id", query.record_id)
            .equals("l.action", query.action)
            .equals("l.user_id", query.user_id)
            .date_from("l.created_at", query.start_date)
            .date_to("l.created_at", query.end_date)
            .like_any(["l.old_values", "l.new_values"], query.search)
        )
        return self._page(filters, query)

    def by_record(self, table_name: str, record_id: int) -> list[AuditLog]:
        with self._manager.transaction() as conn:
            return self._many(conn, "l.table_name = ? AND l.record_id = ?", (table_name, record_id))

    def by_table(self, table_name: str, limit: int = 100) -> list[AuditLog]:
        with self._manager.transaction() as conn:
            return self._many(conn, "l.table_name = ?", (table_name,), f"{self.default_order} LIMIT {int(limit)}")

    def by_user(self, user_id: int, limit: int = 100) -> list[AuditLog]:
        with self._manager.transaction() as conn:
            return self._many(conn, "l.user_id = ?", (user_id,), f"{self.default_order} LIMIT {int(limit)}")

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def statistics(self, filters: Filters | None = None) -> dict[str, Any]:
        filters = filters or Filters()
        where = filters.sql()
        with self._manager.transaction() as conn:
            total = conn.execute(f"SELECT COUNT(*) FROM audit_logs l{where}", filters.params).fetchone()[0]
            by_table = conn.execute(
                f"SELECT l.table_name, COUNT(*) AS count FROM audit_logs l{where} "
                "GROUP BY l.table_name ORDER BY count DESC, l.table_name",
                filters.params,
            ).fetchall()
            by_action = conn.execute(
                f"SELECT l.action, COUNT(*) AS count FROM audit_logs l{where} "
                "GROUP BY l.action ORDER BY count DESC, l.action",
                filters.params,
            ).fetchall()
            users = conn.execute(
                f"SELECT COUNT(DISTINCT l.user_id) FROM audit_logs l{where}", filters.params
            ).fetchone()[0]
        return {
            "total_logs": total,
            "unique_users": users,
            "by_table": {r["table_name"]: r["count"] for r in by_table},
            "by_action": {r["action"]: r["count"] for r in by_action},
        }

    def summary(self, today: date | None = None) -> dict[str, Any]:
        today = today or date.today()
        week_ago = (today - timedelta(days=7)).isoformat()
        month_ago = (today - timedelta(days=30)).isoformat()
        with self._manager.transaction() as conn:
            counts = conn.execute(
                """
                SELECT COUNT(*) AS total_logs,
                       COALESCE(SUM(date(created_at) >= ?), 0) AS last_7_days,
                       COALESCE(SUM(date(created_at) >= ?), 0) AS last_30_days
                FROM audit_logs
                """,
                (week_ago, month_ago),
            ).fetchone()
            tables = conn.execute(
                """
                SELECT table_name, COUNT(*) AS count
                FROM audit_logs WHERE date(created_at) >= ?
                GROUP BY table_name
                ORDER BY count DESC, table_name
                LIMIT 5
                """,
                (month_ago,),
            ).fetchall()
        return {**dict(counts), "most_active_tables": [dict(r) for r in tables]}

    def report(self, request: AuditReportRequest) -> dict[str, Any]:
        """Statistics and daily activity for a date range."""
        if request.start_date > request.end_date:
            raise BusinessRuleError("start_date must not be after end_date")
        filters = (
            Filters()
            .date_from("l.created_at", request.start_date)
            .date_to("l.created_at", request.end_date)
            .equals("l.table_name", request.table_name)
        )
        with self._manager.transaction() as conn:
            daily = conn.execute(
                f"SELECT date(l.created_at) AS day, COUNT(*) AS count FROM audit_logs l{filters.sql()} "
                "GROUP BY day ORDER BY day",
                filters.params,
            ).fetchall()
        return {
            "start_date": request.start_date.isoformat(),
            "end_date": request.end_date.isoformat(),
            "table_name": request.table_name,
            "statistics": self.statistics(filters),
            "daily_activity": [dict(r) for r in daily],
        }

    def cleanup(self, retention_days: int, today: date | None = None) -> int:
        """Delete rows older than *retention_days*. Returns the number deleted."""
        cutoff = ((today or date.today()) - timedelta(days=retention_days)).isoformat()
        with self._manager.transaction() as conn:
            deleted = conn.execute(
                "DELETE FROM audit_logs WHERE date(created_at) < ?", (cutoff,)
            ).rowcount
        logger.info("Audit cleanup: %d row(s) older than %s deleted", deleted, cutoff)
        return deleted
