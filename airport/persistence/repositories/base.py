"""Generic SQLite repository for one table of the airport schema."""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, ClassVar, Generic, Type, TypeVar

from airport.contracts.common import Page, PageRequest, RecordModel
from airport.contracts.enums import AuditAction
from airport.persistence.db_manager import DatabaseManager
from airport.persistence.sql import (
    Filters,
    build_update,
    insert,
    order_clause,
    paginate,
    to_db,
)
from airport.services.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=RecordModel)


def _dump(values: dict[str, Any] | None) -> str | None:
    if values is None:
        return None
    return json.dumps({k: to_db(v) for k, v in values.items()}, default=str)


def record_audit(
    conn: sqlite3.Connection,
    table_name: str,
    record_id: int | None,
    action: AuditAction | str,
    old_values: dict[str, Any] | None = None,
    new_values: dict[str, Any] | None = None,
    actor_id: int | None = None,
) -> int:
    """Append an audit row inside the caller's transaction."""
    return insert(conn, "audit_logs", {
        "table_name": table_name,
        "record_id": record_id,
        "action": action,
        "old_values": _dump(old_values),
        "new_values": _dump(new_values),
        "user_id": actor_id,
    })


class BaseRepository(Generic[T]):
    """CRUD for a single table, declared through class attributes.

    Subclasses set:

    - ``table`` / ``key`` / ``label``: table name, primary key column and
      the human name used in error messages.
    - ``select_sql`` / ``alias``: the read query (joins allowed) and the
      alias of ``table`` inside it.
    - ``unique``: column groups that must be unique, with their 409 message.
    - ``references``: ``(column, table, key, label)`` foreign rows that must
      exist (404 otherwise).
    - ``dependents``: ``(table, column, message)`` rows that block a delete.

    Every write is recorded in ``audit_logs`` in the same transaction.
    """

    table: ClassVar[str]
    key: ClassVar[str]
    label: ClassVar[str]
    select_sql: ClassVar[str]
    alias: ClassVar[str] = ""
    default_order: ClassVar[str] = ""
    sort_columns: ClassVar[dict[str, str]] = {}
    unique: ClassVar[list[tuple[tuple[str, ...], str]]] = []
    references: ClassVar[list[tuple[str, str, str, str]]] = []
    dependents: ClassVar[list[tuple[str, str, str]]] = []
    touch: ClassVar[bool] = True
    # Columns kept out of audit_logs
    redacted: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, model_class: Type[T], manager: DatabaseManager):
        self._model_class = model_class
        self._manager = manager

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def _key_column(self) -> str:
        return f"{self.alias}.{self.key}" if self.alias else self.key

    def _col(self, column: str) -> str:
        return f"{self.alias}.{column}" if self.alias else column

    def _redact(self, values: dict[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in values.items() if k not in self.redacted}

    def _load(self, conn: sqlite3.Connection, record_id: int) -> T | None:
        row = conn.execute(
            f"{self.select_sql} WHERE {self._key_column} = ?", (record_id,)
        ).fetchone()
        return self._model_class.from_row(row) if row is not None else None

    def _require(self, conn: sqlite3.Connection, record_id: int) -> dict[str, Any]:
        """Raw table row, or ``NotFoundError``."""
        row = conn.execute(
            f"SELECT * FROM {self.table} WHERE {self.key} = ?", (record_id,)
        ).fetchone()
        if row is None:
            raise NotFoundError(f"{self.label} not found")
        return dict(row)

    def _many(self, conn: sqlite3.Connection, where: str, params: list[Any] | tuple, order: str | None = None) -> list[T]:
        sql = f"{self.select_sql} WHERE {where} ORDER BY {order or self.default_order}"
        return [self._model_class.from_row(r) for r in conn.execute(sql, params).fetchall()]

    def _page(self, filters: Filters, request: PageRequest) -> Page[dict]:
        with self._manager.transaction() as conn:
            rows, total = paginate(
                conn,
                self.select_sql + filters.sql(),
                filters.params,
                request,
                order_clause(request, self.sort_columns, self.default_order),
            )
        data = [self._model_class.from_row(r).to_response() for r in rows]
        return Page.build(data, total, request.page, request.limit)

    def _check_unique(
        self,
        conn: sqlite3.Connection,
        values: dict[str, Any],
        current: dict[str, Any] | None = None,
    ) -> None:
        for columns, message in self.unique:
            if not any(c in values for c in columns):
                continue
            merged = {c: values.get(c, (current or {}).get(c)) for c in columns}
            if any(v is None for v in merged.values()):
                continue
            sql = f"SELECT 1 FROM {self.table} WHERE " + " AND ".join(f"{c} = ?" for c in columns)
            params: list[Any] = list(merged.values())
            if current is not None:
                sql += f" AND {self.key} != ?"
                params.append(current[self.key])
            if conn.execute(sql, params).fetchone() is not None:
                raise ConflictError(message)

    def _check_references(self, conn: sqlite3.Connection, values: dict[str, Any]) -> None:
        for column, ref_table, ref_key, label in self.references:
            value = values.get(column)
            if value is None:
                continue
            found = conn.execute(
                f"SELECT 1 FROM {ref_table} WHERE {ref_key} = ?", (value,)
            ).fetchone()
            if found is None:
                raise NotFoundError(f"{label} not found")

    def _check_dependents(self, conn: sqlite3.Connection, record_id: int) -> None:
        for dep_table, column, message in self.dependents:
            found = conn.execute(
                f"SELECT 1 FROM {dep_table} WHERE {column} = ? LIMIT 1", (record_id,)
            ).fetchone()
            if found is not None:
                raise ConflictError(message)

    def _insert(
        self,
        conn: sqlite3.Connection,
        values: dict[str, Any],
        actor_id: int | None = None,
    ) -> int:
        try:
            record_id = insert(conn, self.table, values)
        except sqlite3.IntegrityError as exc:
            raise ConflictError(f"{self.label} violates a database constraint: {exc}") from exc
        record_audit(conn, self.table, record_id, AuditAction.CREATE, None, self._redact(values), actor_id)
        return record_id

    def _apply(
        self,
        conn: sqlite3.Connection,
        current: dict[str, Any],
        values: dict[str, Any],
        actor_id: int | None = None,
        action: AuditAction = AuditAction.UPDATE,
    ) -> None:
        """UPDATE the given columns of *current* and audit old → new."""
        statement = build_update(self.table, self.key, current[self.key], values, touch=self.touch)
        if statement is None:
            return
        sql, params = statement
        try:
            conn.execute(sql, params)
        except sqlite3.IntegrityError as exc:
            raise ConflictError(f"{self.label} violates a database constraint: {exc}") from exc
        record_audit(
            conn,
            self.table,
            current[self.key],
            action,
            self._redact({c: current.get(c) for c in values}),
            self._redact(values),
            actor_id,
        )

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get(self, record_id: int) -> T | None:
        """Fetch a single record by ID. Returns *None* if missing."""
        with self._manager.transaction() as conn:
            return self._load(conn, record_id)

    def require(self, record_id: int) -> T:
        item = self.get(record_id)
        if item is None:
            raise NotFoundError(f"{self.label} not found")
        return item

    def find_one(self, column: str, value: Any) -> T | None:
        """First record whose *column* equals *value* (column comes from code)."""
        with self._manager.transaction() as conn:
            row = conn.execute(
                f"{self.select_sql} WHERE {self._col(column)} = ? LIMIT 1", (value,)
            ).fetchone()
        return self._model_class.from_row(row) if row is not None else None

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def create(self, values: dict[str, Any], actor_id: int | None = None) -> T:
        """Insert a row after uniqueness and reference checks."""
        with self._manager.transaction() as conn:
            self._check_unique(conn, values)
            self._check_references(conn, values)
            self._validate(conn, values, None)
            record_id = self._insert(conn, values, actor_id)
            return self._load(conn, record_id)

    def update(self, record_id: int, values: dict[str, Any], actor_id: int | None = None) -> T:
        """Partial update; only the given columns change.

        With an empty *values* the record is returned unchanged.
        """
        with self._manager.transaction() as conn:
            current = self._require(conn, record_id)
            if values:
                self._check_unique(conn, values, current)
                self._check_references(conn, values)
                self._validate(conn, values, current)
                self._apply(conn, current, values, actor_id)
            return self._load(conn, record_id)

    def delete(self, record_id: int, actor_id: int | None = None) -> None:
        """Delete a record unless dependent rows still reference it."""
        with self._manager.transaction() as conn:
            current = self._require(conn, record_id)
            self._check_dependents(conn, record_id)
            self._before_delete(conn, current)
            conn.execute(f"DELETE FROM {self.table} WHERE {self.key} = ?", (record_id,))
            record_audit(conn, self.table, record_id, AuditAction.DELETE, self._redact(current), None, actor_id)
        logger.info("Deleted %s %s", self.table, record_id)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _validate(
        self,
        conn: sqlite3.Connection,
        values: dict[str, Any],
        current: dict[str, Any] | None,
    ) -> None:
        """Extra per-table checks on create (*current* is None) and update."""

    def _before_delete(self, conn: sqlite3.Connection, current: dict[str, Any]) -> None:
        """Extra per-table checks before a delete."""

