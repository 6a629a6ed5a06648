"""SQLite database manager: creates the schema and serves per-call connections."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from airport.persistence.errors import DatabaseNotReadyError

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("schema.sql")

TABLES = (
    "cities",
    "airports",
    "gates",
    "aircraft_models",
    "aircraft",
    "flights",
    "passengers",
    "tickets",
    "baggage",
    "users",
    "roles",
    "user_roles",
    "audit_logs",
)


class DatabaseManager:
    """Manages the airport database lifecycle.

    - Creates a database file with the full schema (or uses an existing one).
    - Opens a fresh connection per call with foreign keys enforced.
    - Thread-safe: each caller gets its own connection, so blocking work can
      run in ``asyncio.to_thread`` workers.
    """

    def __init__(self, timeout: float = 10.0):
        self._timeout = timeout
        self._db_path: Path | None = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def db_path(self) -> Path | None:
        return self._db_path

    @property
    def is_ready(self) -> bool:
        return self._db_path is not None and self._db_path.exists()

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def use_local(self, path: Path) -> None:
        """Use an existing database file."""
        if not path.exists():
            raise FileNotFoundError(f"Airport DB not found: {path}")
        self._db_path = path

    def create(self, path: Path) -> Path:
        """Create (or upgrade) a database file and apply the schema.

        Every statement in the schema is idempotent, so running this on an
        existing file only adds what is missing.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(path), timeout=self._timeout)
        try:
            conn.executescript(SCHEMA_PATH.read_text(encoding="utf-8"))
            conn.commit()
        finally:
            conn.close()
        self._db_path = path
        logger.info("Airport DB schema applied: %s", path)
        return path

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def get_connection(self) -> sqlite3.Connection:
        """Open a new connection with ``sqlite3.Row`` rows and FK checks on.

        Each call returns a fresh connection. The caller is responsible
        for closing it (prefer ``transaction()``).
        """
        if not self.is_ready:
            raise DatabaseNotReadyError(
                "Airport database not available. Call create() or use_local() first."
            )

        conn = sqlite3.connect(str(self._db_path), timeout=self._timeout)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection; commit on success, roll back on error, always close."""
        conn = self.get_connection()
        try:
            yield conn
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    def table_counts(self) -> dict[str, int]:
        """Row count per table (health check)."""
        with self.transaction() as conn:
            return {
                table: conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
                for table in TABLES
            }
