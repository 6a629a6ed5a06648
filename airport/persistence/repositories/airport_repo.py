"""Repository for airports."""

from __future__ import annotations

from typing import Any

from airport.contracts.common import Page
from airport.contracts.geography import Airport, AirportSearch, DistanceRequest
from airport.persistence.db_manager import DatabaseManager
from airport.persistence.repositories.base import BaseRepository
from airport.persistence.sql import Filters
from airport.services.errors import BusinessRuleError, NotFoundError
from airport.services.geo import distance_summary


class AirportRepository(BaseRepository[Airport]):
    table = "airports"
    key = "airport_id"
    label = "Airport"
    alias = "a"
    select_sql = (
        "SELECT a.*, c.city_name, c.country "
        "FROM airports a LEFT JOIN cities c ON c.city_id = a.city_id"
    )
    default_order = "a.name"
    sort_columns = {
        "name": "a.name",
        "iata_code": "a.iata_code",
        "country": "c.country",
        "created_at": "a.created_at",
    }
    unique = [
        (("iata_code",), "Airport with this IATA code already exists"),
        (("icao_code",), "Airport with this ICAO code already exists"),
    ]
    references = [("city_id", "cities", "city_id", "City")]
    dependents = [
        ("flights", "departure_airport_id", "Airport is used by flights and cannot be deleted"),
        ("flights", "arrival_airport_id", "Airport is used by flights and cannot be deleted"),
    ]

    def __init__(self, manager: DatabaseManager):
        super().__init__(Airport, manager)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search(self, query: AirportSearch) -> Page[dict]:
        filters = (
            Filters()
            .like("a.name", query.name)
            .equals("a.iata_code", query.iata_code.upper() if query.iata_code else None)
            .equals("a.icao_code", query.icao_code.upper() if query.icao_code else None)
            .equals("a.city_id", query.city_id)
            .like("c.country", query.country)
        )
        return self._page(filters, query)

    def by_iata(self, iata_code: str) -> Airport | None:
        return self.find_one("iata_code", iata_code.upper())

    def by_country(self, country: str) -> list[Airport]:
        with self._manager.transaction() as conn:
            return self._many(conn, "c.country LIKE ?", (country,))

    def by_city(self, city_id: int) -> list[Airport]:
        with self._manager.transaction() as conn:
            return self._many(conn, "a.city_id = ?", (city_id,))

    def statistics(self) -> dict[str, Any]:
        with self._manager.transaction() as conn:
            totals = conn.execute(
                """
                SELECT COUNT(*) AS total_airports,
                       COUNT(DISTINCT c.country) AS total_countries,
                       COUNT(DISTINCT a.city_id) AS total_cities
                FROM airports a LEFT JOIN cities c ON c.city_id = a.city_id
                """
            ).fetchone()
            by_country = conn.execute(
                """
                SELECT c.country, COUNT(*) AS airport_count
                FROM airports a JOIN cities c ON c.city_id = a.city_id
                GROUP BY c.country
                ORDER BY airport_count DESC, c.country
                """
            ).fetchall()
            busiest = conn.execute(
                """
                SELECT a.airport_id, a.iata_code, a.name,
                       (SELECT COUNT(*) FROM flights f WHERE f.departure_airport_id = a.airport_id) AS departures,
                       (SELECT COUNT(*) FROM flights f WHERE f.arrival_airport_id = a.airport_id) AS arrivals
                FROM airports a
                ORDER BY departures + arrivals DESC, a.iata_code
                LIMIT 10
                """
            ).fetchall()
        return {
            **dict(totals),
            "by_country": [dict(r) for r in by_country],
            "busiest_airports": [
                {**dict(r), "total_flights": r["departures"] + r["arrivals"]} for r in busiest
            ],
        }

    def distance(self, request: DistanceRequest) -> dict[str, Any]:
        """Great-circle distance between two airports with known coordinates."""
        origin = self._resolve(request.from_airport_id, request.from_iata)
        destination = self._resolve(request.to_airport_id, request.to_iata)
        for ap in (origin, destination):
            if ap.latitude is None or ap.longitude is None:
                raise BusinessRuleError(f"Airport {ap.iata_code} has no coordinates")
        return {
            "from_airport": {"airport_id": origin.airport_id, "iata_code": origin.iata_code, "name": origin.name},
            "to_airport": {"airport_id": destination.airport_id, "iata_code": destination.iata_code, "name": destination.name},
            **distance_summary(origin.latitude, origin.longitude, destination.latitude, destination.longitude),
        }

    def _resolve(self, airport_id: int | None, iata_code: str | None) -> Airport:
        found = self.get(airport_id) if airport_id is not None else self.by_iata(iata_code or "")
        if found is None:
            raise NotFoundError("Airport not found")
        return found
