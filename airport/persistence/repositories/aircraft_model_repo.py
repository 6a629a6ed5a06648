"""Repository for aircraft models."""

from __future__ import annotations

from typing import Any

from airport.contracts.common import Page
from airport.contracts.fleet import AircraftModel, AircraftModelSearch
from airport.persistence.db_manager import DatabaseManager
from airport.persistence.repositories.base import BaseRepository
from airport.persistence.sql import Filters


class AircraftModelRepository(BaseRepository[AircraftModel]):
    table = "aircraft_models"
    key = "model_id"
    label = "Aircraft model"
    alias = "m"
    select_sql = (
        "SELECT m.*, "
        "(SELECT COUNT(*) FROM aircraft a WHERE a.model_id = m.model_id) AS aircraft_count "
        "FROM aircraft_models m"
    )
    default_order = "m.manufacturer, m.model_name"
    sort_columns = {
        "model_name": "m.model_name",
        "manufacturer": "m.manufacturer",
        "capacity": "m.capacity",
        "max_range": "m.max_range",
    }
    unique = [(("model_name", "manufacturer"), "Aircraft model already exists for this manufacturer")]
    dependents = [("aircraft", "model_id", "Aircraft model is in use and cannot be deleted")]

    def __init__(self, manager: DatabaseManager):
        super().__init__(AircraftModel, manager)

    def search(self, query: AircraftModelSearch) -> Page[dict]:
        filters = (
            Filters()
            .like("m.model_name", query.model_name)
            .like("m.manufacturer", query.manufacturer)
            .gte("m.capacity", query.min_capacity)
            .lte("m.capacity", query.max_capacity)
            .gte("m.max_range", query.min_range)
            .lte("m.max_range", query.max_range)
        )
        return self._page(filters, query)

    def by_manufacturer(self, manufacturer: str) -> list[AircraftModel]:
        with self._manager.transaction() as conn:
            return self._many(conn, "m.manufacturer LIKE ?", (manufacturer,), "m.model_name")

    def popular(self, limit: int = 10) -> list[AircraftModel]:
        """Models ordered by the number of aircraft built on them."""
        with self._manager.transaction() as conn:
            rows = conn.execute(
                f"{self.select_sql} ORDER BY aircraft_count DESC, m.model_name LIMIT ?",
                (limit,),
            ).fetchall()
        return [AircraftModel.from_row(r) for r in rows]

    def statistics(self) -> dict[str, Any]:
        with self._manager.transaction() as conn:
            totals = conn.execute(
                """
                SELECT COUNT(*) AS total_models,
                       COUNT(DISTINCT manufacturer) AS total_manufacturers,
                       ROUND(AVG(capacity), 2) AS average_capacity,
                       ROUND(AVG(max_range), 2) AS average_range,
                       MAX(capacity) AS max_capacity,
                       MIN(capacity) AS min_capacity
                FROM aircraft_models
                """
            ).fetchone()
            by_manufacturer = conn.execute(
                """
                SELECT m.manufacturer,
                       COUNT(DISTINCT m.model_id) AS model_count,
                       COUNT(a.aircraft_id) AS aircraft_count,
                       ROUND(AVG(m.capacity), 2) AS average_capacity
                FROM aircraft_models m
                LEFT JOIN aircraft a ON a.model_id = m.model_id
                GROUP BY m.manufacturer
                ORDER BY model_count DESC, m.manufacturer
                """
            ).fetchall()
        return {
            **dict(totals),
            "by_manufacturer": [dict(r) for r in by_manufacturer],
        }
