"""SQL composition helpers: value conversion, WHERE builder, pagination, partial updates.

All user input travels as ``?`` parameters. Column names only ever come
from code (filters are called with literal column names, sort columns are
looked up in per-repository whitelists).
"""

from __future__ import annotations

import json
import sqlite3
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from airport.contracts.common import PageRequest


# ------------------------------------------------------------------
# Values
# ------------------------------------------------------------------


def utcnow() -> datetime:
    """Current UTC time, naive, second precision (the stored form)."""
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


def to_db(value: Any) -> Any:
    """Convert a Python value to its column representation.

    Datetimes become naive UTC ``YYYY-MM-DDTHH:MM:SS`` text so that text
    comparison and SQLite date functions agree.
    """
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value.replace(microsecond=0).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return value


# ------------------------------------------------------------------
# WHERE builder
# ------------------------------------------------------------------


class Filters:
    """Accumulates AND-ed WHERE clauses; ``None`` values are skipped."""

    def __init__(self) -> None:
        self._clauses: list[str] = []
        self.params: list[Any] = []

    def equals(self, column: str, value: Any) -> "Filters":
        if value is not None:
            self._clauses.append(f"{column} = ?")
            self.params.append(to_db(value))
        return self

    def like(self, column: str, value: str | None) -> "Filters":
        """Case-insensitive substring match (SQLite LIKE folds ASCII case)."""
        if value:
            self._clauses.append(f"{column} LIKE ?")
            self.params.append(f"%{value}%")
        return self

    def like_any(self, columns: list[str], value: str | None) -> "Filters":
        if value:
            self._clauses.append("(" + " OR ".join(f"{c} LIKE ?" for c in columns) + ")")
            self.params.extend(f"%{value}%" for _ in columns)
        return self

    def gte(self, column: str, value: Any) -> "Filters":
        if value is not None:
            self._clauses.append(f"{column} >= ?")
            self.params.append(to_db(value))
        return self

    def lte(self, column: str, value: Any) -> "Filters":
        if value is not None:
            self._clauses.append(f"{column} <= ?")
            self.params.append(to_db(value))
        return self

    def date_from(self, column: str, value: date | None) -> "Filters":
        if value is not None:
            self._clauses.append(f"date({column}) >= ?")
            self.params.append(value.isoformat())
        return self

    def date_to(self, column: str, value: date | None) -> "Filters":
        if value is not None:
            self._clauses.append(f"date({column}) <= ?")
            self.params.append(value.isoformat())
        return self

    def in_(self, column: str, values: list[Any] | tuple[Any, ...]) -> "Filters":
        if values:
            self._clauses.append(f"{column} IN ({', '.join('?' for _ in values)})")
            self.params.extend(to_db(v) for v in values)
        return self

    def raw(self, clause: str, *params: Any) -> "Filters":
        self._clauses.append(clause)
        self.params.extend(to_db(p) for p in params)
        return self

    def sql(self) -> str:
        """`` WHERE ...`` (with leading space) or an empty string."""
        if not self._clauses:
            return ""
        return " WHERE " + " AND ".join(self._clauses)

    def __bool__(self) -> bool:
        return bool(self._clauses)


# ------------------------------------------------------------------
# Ordering and pagination
# ------------------------------------------------------------------


def order_clause(
    request: PageRequest,
    allowed: dict[str, str],
    default: str,
) -> str:
    """`` ORDER BY`` for a whitelisted ``sort_by``; falls back to *default*."""
    column = allowed.get(request.sort_by or "")
    if column is None:
        return f" ORDER BY {default}"
    direction = "DESC" if request.sort_order == "desc" else "ASC"
    return f" ORDER BY {column} {direction}"


def paginate(
    conn: sqlite3.Connection,
    base_sql: str,
    params: list[Any],
    request: PageRequest,
    order_by: str,
) -> tuple[list[sqlite3.Row], int]:
    """Run *base_sql* for one page. Returns ``(rows, total)``."""
    total = conn.execute(f"SELECT COUNT(*) FROM ({base_sql})", params).fetchone()[0]
    rows = conn.execute(
        f"{base_sql}{order_by} LIMIT ? OFFSET ?",
        [*params, request.limit, request.offset],
    ).fetchall()
    return rows, total


# ------------------------------------------------------------------
# Writes
# ------------------------------------------------------------------


def insert(conn: sqlite3.Connection, table: str, values: dict[str, Any]) -> int:
    """INSERT one row from a column → value dict. Returns the new rowid."""
    columns = list(values)
    sql = (
        f"INSERT INTO {table} ({', '.join(columns)}) "
        f"VALUES ({', '.join('?' for _ in columns)})"
    )
    cursor = conn.execute(sql, [to_db(values[c]) for c in columns])
    return cursor.lastrowid


def build_update(
    table: str,
    key_column: str,
    key: Any,
    values: dict[str, Any],
    touch: bool = True,
) -> tuple[str, list[Any]] | None:
    """Dynamic partial UPDATE setting only the given columns.

    Returns ``None`` when there is nothing to change. ``updated_at`` is
    refreshed when *touch* is set.
    """
    if not values:
        return None
    assignments = [f"{column} = ?" for column in values]
    params = [to_db(v) for v in values.values()]
    if touch:
        assignments.append("updated_at = ?")
        params.append(to_db(utcnow()))
    params.append(key)
    return f"UPDATE {table} SET {', '.join(assignments)} WHERE {key_column} = ?", params


# ------------------------------------------------------------------
# Time expressions
# ------------------------------------------------------------------

_PERIOD_FORMATS = {
    "day": "%Y-%m-%d",
    "week": "%Y-W%W",
    "month": "%Y-%m",
    "year": "%Y",
}


def minutes_between(start: str, end: str) -> str:
    """SQL expression: whole-second difference ``end - start`` in minutes."""
    return f"((strftime('%s', {end}) - strftime('%s', {start})) / 60.0)"


def hours_between(start: str, end: str) -> str:
    return f"((strftime('%s', {end}) - strftime('%s', {start})) / 3600.0)"


def period_expr(period: str, column: str) -> str:
    """SQL expression bucketing *column* by day, week, month or year."""
    return f"strftime('{_PERIOD_FORMATS[period]}', {column})"


def parse_timestamp(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None
