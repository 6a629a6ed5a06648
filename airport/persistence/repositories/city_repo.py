"""Repository for cities."""

from __future__ import annotations

from typing import Any

from airport.contracts.common import Page
from airport.contracts.geography import City, CitySearch
from airport.persistence.db_manager import DatabaseManager
from airport.persistence.repositories.base import BaseRepository
from airport.persistence.sql import Filters


class CityRepository(BaseRepository[City]):
    table = "cities"
    key = "city_id"
    label = "City"
    alias = "c"
    select_sql = "SELECT c.* FROM cities c"
    default_order = "c.country, c.city_name"
    sort_columns = {
        "city_name": "c.city_name",
        "country": "c.country",
        "region": "c.region",
        "created_at": "c.created_at",
    }
    unique = [(("city_name", "country"), "City already exists in this country")]
    dependents = [("airports", "city_id", "City has airports and cannot be deleted")]

    def __init__(self, manager: DatabaseManager):
        super().__init__(City, manager)

    def search(self, query: CitySearch) -> Page[dict]:
        filters = (
            Filters()
            .like("c.city_name", query.city_name)
            .like("c.country", query.country)
            .like("c.region", query.region)
            .equals("c.timezone", query.timezone)
        )
        return self._page(filters, query)

    def by_country(self, country: str) -> list[City]:
        with self._manager.transaction() as conn:
            return self._many(conn, "c.country LIKE ?", (country,), "c.city_name")

    def with_airports(self) -> list[dict[str, Any]]:
        """Cities that have at least one airport, busiest first."""
        with self._manager.transaction() as conn:
            rows = conn.execute(
                """
                SELECT c.*, COUNT(a.airport_id) AS airport_count,
                       GROUP_CONCAT(a.iata_code) AS iata_codes
                FROM cities c
                JOIN airports a ON a.city_id = c.city_id
                GROUP BY c.city_id
                ORDER BY airport_count DESC, c.city_name
                """
            ).fetchall()
        results = []
        for row in rows:
            data = City.from_row(row).to_response()
            data["airport_count"] = row["airport_count"]
            data["iata_codes"] = sorted((row["iata_codes"] or "").split(","))
            results.append(data)
        return results

    def statistics(self) -> dict[str, Any]:
        with self._manager.transaction() as conn:
            totals = conn.execute(
                """
                SELECT COUNT(*) AS total_cities,
                       COUNT(DISTINCT country) AS total_countries,
                       (SELECT COUNT(DISTINCT city_id) FROM airports) AS cities_with_airports
                FROM cities
                """
            ).fetchone()
            by_country = conn.execute(
                """
                SELECT country, COUNT(*) AS city_count
                FROM cities
                GROUP BY country
                ORDER BY city_count DESC, country
                """
            ).fetchall()
        return {
            **dict(totals),
            "by_country": [dict(r) for r in by_country],
        }
