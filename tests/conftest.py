"""Fixtures shared by all test packages."""

from __future__ import annotations

from pathlib import Path

import pytest

from airport.persistence.db_manager import DatabaseManager


@pytest.fixture
def db_manager(tmp_path: Path) -> DatabaseManager:
    """Fresh SQLite database with the full schema and default roles."""
    manager = DatabaseManager()
    manager.create(tmp_path / "airport.db")
    return manager
