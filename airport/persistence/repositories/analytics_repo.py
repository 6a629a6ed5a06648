"""Read-only analytics over flights, tickets and passengers for a date window."""

from __future__ import annotations

from datetime import date
from typing import Any

from airport.contracts.analytics import AnalyticsQuery
from airport.persistence.db_manager import DatabaseManager
from airport.persistence.repositories.flight_repo import FLIGHT_VIEW
from airport.persistence.repositories.passenger_repo import RETURNING_PASSENGER
from airport.persistence.sql import hours_between, minutes_between
from airport.services.flight_ops import ON_TIME_THRESHOLD_MINUTES

DELAY = minutes_between("f.scheduled_departure", "f.actual_departure")
IN_WINDOW = "date(f.scheduled_departure) BETWEEN ? AND ?"

# Delay buckets, upper bounds in minutes
MINOR_DELAY_MINUTES = 60
MODERATE_DELAY_MINUTES = 180


class AnalyticsRepository:
    """Aggregations only; every query is bounded by the window of the request."""

    def __init__(self, manager: DatabaseManager):
        self._manager = manager

    @staticmethod
    def _window(query: AnalyticsQuery) -> tuple[str, str]:
        return query.start_date.isoformat(), query.end_date.isoformat()

    def _rows(self, sql: str, params: tuple | list) -> list[dict[str, Any]]:
        with self._manager.transaction() as conn:
            return [dict(r) for r in conn.execute(sql, params).fetchall()]

    def _one(self, sql: str, params: tuple | list) -> dict[str, Any]:
        return self._rows(sql, params)[0]

    # ------------------------------------------------------------------
    # Flights
    # ------------------------------------------------------------------

    def flights(self, query: AnalyticsQuery) -> dict[str, Any]:
        window = self._window(query)
        summary = self._one(
            f"""
            SELECT COUNT(*) AS total_flights,
                   COALESCE(SUM(f.status = 'arrived'), 0) AS completed_flights,
                   COALESCE(SUM(f.status = 'cancelled'), 0) AS cancelled_flights,
                   COALESCE(SUM(f.status = 'delayed'
                                OR (f.actual_departure IS NOT NULL AND {DELAY} > {ON_TIME_THRESHOLD_MINUTES})), 0)
                       AS delayed_flights,
                   ROUND(COALESCE(AVG(CASE WHEN f.actual_departure IS NOT NULL THEN MAX({DELAY}, 0) END), 0), 2)
                       AS average_delay_minutes,
                   ROUND(COALESCE(AVG(f.load_percentage), 0), 2) AS average_load_percentage
            FROM ({FLIGHT_VIEW}) f WHERE {IN_WINDOW}
            """,
            window,
        )
        by_class = self._rows(
            f"""
            SELECT t.ticket_class AS class, COUNT(*) AS tickets,
                   ROUND(COALESCE(SUM(t.price), 0), 2) AS revenue
            FROM tickets t JOIN flights f ON f.flight_id = t.flight_id
            WHERE t.status IN ('active', 'used') AND {IN_WINDOW}
            GROUP BY t.ticket_class ORDER BY tickets DESC
            """,
            window,
        )
        routes = self._rows(
            f"""
            SELECT f.departure_iata, f.arrival_iata, COUNT(*) AS flight_count,
                   ROUND(COALESCE(AVG(f.load_percentage), 0), 2) AS average_load_percentage
            FROM ({FLIGHT_VIEW}) f WHERE {IN_WINDOW}
            GROUP BY f.departure_iata, f.arrival_iata
            ORDER BY flight_count DESC, f.departure_iata
            LIMIT 10
            """,
            window,
        )
        trend = self._rows(
            f"""
            SELECT date(f.scheduled_departure) AS day, COUNT(*) AS flights,
                   COALESCE(SUM(f.status = 'cancelled'), 0) AS cancelled,
                   COALESCE(SUM(f.booked_seats), 0) AS passengers
            FROM ({FLIGHT_VIEW}) f WHERE {IN_WINDOW}
            GROUP BY day ORDER BY day
            """,
            window,
        )
        return {
            "period": _period(query),
            "summary": summary,
            "by_class": by_class,
            "top_routes": routes,
            "daily_trend": trend,
        }

    # ------------------------------------------------------------------
    # Revenue
    # ------------------------------------------------------------------

    def revenue(self, query: AnalyticsQuery) -> dict[str, Any]:
        window = self._window(query)
        sold = (
            "FROM tickets t JOIN flights f ON f.flight_id = t.flight_id "
            f"WHERE t.status IN ('active', 'used') AND {IN_WINDOW}"
        )
        total = self._one(
            f"""
            SELECT ROUND(COALESCE(SUM(t.price), 0), 2) AS total_revenue,
                   COUNT(*) AS tickets_sold,
                   ROUND(COALESCE(AVG(t.price), 0), 2) AS average_ticket_price
            {sold}
            """,
            window,
        )
        refunded = self._one(
            f"""
            SELECT ROUND(COALESCE(SUM(t.refund_amount), 0), 2) AS refunded_amount
            FROM tickets t JOIN flights f ON f.flight_id = t.flight_id
            WHERE t.status = 'refunded' AND {IN_WINDOW}
            """,
            window,
        )
        by_class = self._rows(
            f"SELECT t.ticket_class AS class, ROUND(SUM(t.price), 2) AS revenue, COUNT(*) AS tickets "
            f"{sold} GROUP BY t.ticket_class ORDER BY revenue DESC",
            window,
        )
        by_route = self._rows(
            f"""
            SELECT dep.iata_code AS departure_iata, arr.iata_code AS arrival_iata,
                   ROUND(SUM(t.price), 2) AS revenue, COUNT(*) AS tickets
            FROM tickets t JOIN flights f ON f.flight_id = t.flight_id
            JOIN airports dep ON dep.airport_id = f.departure_airport_id
            JOIN airports arr ON arr.airport_id = f.arrival_airport_id
            WHERE t.status IN ('active', 'used') AND {IN_WINDOW}
            GROUP BY dep.iata_code, arr.iata_code
            ORDER BY revenue DESC
            LIMIT 10
            """,
            window,
        )
        by_aircraft = self._rows(
            f"""
            SELECT a.registration_number, m.model_name,
                   ROUND(SUM(t.price), 2) AS revenue, COUNT(*) AS tickets
            FROM tickets t JOIN flights f ON f.flight_id = t.flight_id
            JOIN aircraft a ON a.aircraft_id = f.aircraft_id
            JOIN aircraft_models m ON m.model_id = a.model_id
            WHERE t.status IN ('active', 'used') AND {IN_WINDOW}
            GROUP BY a.aircraft_id
            ORDER BY revenue DESC
            """,
            window,
        )
        monthly = self._rows(
            f"SELECT strftime('%Y-%m', f.scheduled_departure) AS month, ROUND(SUM(t.price), 2) AS revenue "
            f"{sold} GROUP BY month ORDER BY month",
            window,
        )
        daily = self._rows(
            f"SELECT date(f.scheduled_departure) AS day, ROUND(SUM(t.price), 2) AS revenue "
            f"{sold} GROUP BY day ORDER BY day",
            window,
        )
        return {
            "period": _period(query),
            "summary": {
                **total,
                **refunded,
                "net_revenue": round(total["total_revenue"] - refunded["refunded_amount"], 2),
            },
            "by_class": by_class,
            "by_route": by_route,
            "by_aircraft": by_aircraft,
            "monthly": monthly,
            "daily": daily,
        }

    # ------------------------------------------------------------------
    # Passengers
    # ------------------------------------------------------------------

    def passengers(self, query: AnalyticsQuery) -> dict[str, Any]:
        window = self._window(query)
        travelled = (
            "SELECT DISTINCT t.passenger_id FROM tickets t JOIN flights f ON f.flight_id = t.flight_id "
            f"WHERE t.status IN ('active', 'used') AND {IN_WINDOW}"
        )
        summary = self._one(
            f"""
            SELECT COUNT(*) AS total_passengers,
                   COALESCE(SUM(date(p.created_at) BETWEEN ? AND ?), 0) AS new_passengers,
                   COALESCE(SUM(p.frequent_flyer), 0) AS frequent_flyers,
                   COALESCE(SUM({RETURNING_PASSENGER}), 0) AS returning_passengers,
                   ROUND(AVG((julianday('now') - julianday(p.date_of_birth)) / 365.25), 1) AS average_age
            FROM passengers p WHERE p.passenger_id IN ({travelled})
            """,
            (*window, *window),
        )
        by_nationality = self._rows(
            f"""
            SELECT COALESCE(p.nationality, 'Unknown') AS nationality, COUNT(*) AS passengers
            FROM passengers p WHERE p.passenger_id IN ({travelled})
            GROUP BY p.nationality ORDER BY passengers DESC LIMIT 10
            """,
            window,
        )
        by_country = self._rows(
            f"""
            SELECT COALESCE(p.country, 'Unknown') AS country, COUNT(*) AS passengers
            FROM passengers p WHERE p.passenger_id IN ({travelled})
            GROUP BY p.country ORDER BY passengers DESC LIMIT 10
            """,
            window,
        )
        destinations = self._rows(
            f"""
            SELECT arr.iata_code, arr.name, c.city_name, COUNT(*) AS passengers
            FROM tickets t JOIN flights f ON f.flight_id = t.flight_id
            JOIN airports arr ON arr.airport_id = f.arrival_airport_id
            LEFT JOIN cities c ON c.city_id = arr.city_id
            WHERE t.status IN ('active', 'used') AND {IN_WINDOW}
            GROUP BY arr.airport_id ORDER BY passengers DESC LIMIT 10
            """,
            window,
        )
        return {
            "period": _period(query),
            "summary": summary,
            "by_nationality": by_nationality,
            "by_country": by_country,
            "top_destinations": destinations,
        }

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def operational(self, query: AnalyticsQuery) -> dict[str, Any]:
        window = self._window(query)
        hours = hours_between("f.scheduled_departure", "f.scheduled_arrival")
        utilization = self._rows(
            f"""
            SELECT a.aircraft_id, a.registration_number, m.model_name,
                   COUNT(f.flight_id) AS flights,
                   ROUND(COALESCE(SUM({hours}), 0), 2) AS flight_hours
            FROM aircraft a
            JOIN aircraft_models m ON m.model_id = a.model_id
            LEFT JOIN flights f ON f.aircraft_id = a.aircraft_id
                 AND f.status != 'cancelled' AND {IN_WINDOW}
            GROUP BY a.aircraft_id
            ORDER BY flight_hours DESC, a.registration_number
            """,
            window,
        )
        gates = self._rows(
            f"""
            SELECT g.gate_id, g.gate_number, g.terminal, ap.iata_code, g.status,
                   COUNT(f.flight_id) AS flights
            FROM gates g
            JOIN airports ap ON ap.airport_id = g.airport_id
            LEFT JOIN flights f ON f.gate_id = g.gate_id AND {IN_WINDOW}
            GROUP BY g.gate_id
            ORDER BY flights DESC, ap.iata_code, g.gate_number
            """,
            window,
        )
        return {
            "period": _period(query),
            "aircraft_utilization": utilization,
            "gate_usage": gates,
            "on_time_performance": self._on_time(window),
        }

    def _on_time(self, window: tuple[str, str]) -> dict[str, Any]:
        row = self._one(
            f"""
            SELECT COUNT(*) AS measured_flights,
                   COALESCE(SUM({DELAY} <= {ON_TIME_THRESHOLD_MINUTES}), 0) AS on_time_flights
            FROM flights f
            WHERE f.status IN ('departed', 'arrived') AND f.actual_departure IS NOT NULL AND {IN_WINDOW}
            """,
            window,
        )
        measured = row["measured_flights"]
        row["on_time_percentage"] = round(row["on_time_flights"] * 100.0 / measured, 2) if measured else 0.0
        return row

    def delays(self, query: AnalyticsQuery) -> dict[str, Any]:
        window = self._window(query)
        delayed = f"f.actual_departure IS NOT NULL AND {IN_WINDOW}"
        categories = self._one(
            f"""
            SELECT COALESCE(SUM({DELAY} <= {ON_TIME_THRESHOLD_MINUTES}), 0) AS on_time,
                   COALESCE(SUM({DELAY} > {ON_TIME_THRESHOLD_MINUTES} AND {DELAY} <= {MINOR_DELAY_MINUTES}), 0) AS minor,
                   COALESCE(SUM({DELAY} > {MINOR_DELAY_MINUTES} AND {DELAY} <= {MODERATE_DELAY_MINUTES}), 0) AS moderate,
                   COALESCE(SUM({DELAY} > {MODERATE_DELAY_MINUTES}), 0) AS major
            FROM flights f WHERE {delayed}
            """,
            window,
        )
        by_reason = self._rows(
            f"""
            SELECT COALESCE(f.delay_reason, 'Unspecified') AS reason, COUNT(*) AS flights
            FROM flights f
            WHERE (f.status = 'delayed' OR f.delay_reason IS NOT NULL) AND {IN_WINDOW}
            GROUP BY reason ORDER BY flights DESC, reason
            """,
            window,
        )
        by_airport = self._rows(
            f"""
            SELECT ap.iata_code, ap.name, COUNT(*) AS flights,
                   ROUND(AVG(MAX({DELAY}, 0)), 2) AS average_delay_minutes
            FROM flights f JOIN airports ap ON ap.airport_id = f.departure_airport_id
            WHERE {delayed}
            GROUP BY ap.airport_id ORDER BY average_delay_minutes DESC, ap.iata_code
            """,
            window,
        )
        by_hour = self._rows(
            f"""
            SELECT CAST(strftime('%H', f.scheduled_departure) AS INTEGER) AS hour, COUNT(*) AS flights,
                   ROUND(AVG(MAX({DELAY}, 0)), 2) AS average_delay_minutes
            FROM flights f WHERE {delayed}
            GROUP BY hour ORDER BY hour
            """,
            window,
        )
        return {
            "period": _period(query),
            "categories": categories,
            "by_reason": by_reason,
            "by_airport": by_airport,
            "by_hour": by_hour,
        }

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def dashboard(self, query: AnalyticsQuery, today: date | None = None) -> dict[str, Any]:
        day = (today or date.today()).isoformat()
        flights = self.flights(query)["summary"]
        revenue = self.revenue(query)["summary"]
        today_row = self._one(
            """
            SELECT COUNT(*) AS flights,
                   COALESCE(SUM(f.status IN ('departed', 'arrived')), 0) AS departures,
                   COALESCE(SUM(f.status = 'arrived'), 0) AS arrivals,
                   COALESCE(SUM(f.status = 'delayed'), 0) AS delayed,
                   COALESCE(SUM(f.status = 'cancelled'), 0) AS cancelled
            FROM flights f WHERE date(f.scheduled_departure) = ?
            """,
            (day,),
        )
        today_row.update(self._one(
            """
            SELECT ROUND(COALESCE(SUM(t.price), 0), 2) AS revenue
            FROM tickets t JOIN flights f ON f.flight_id = t.flight_id
            WHERE t.status IN ('active', 'used') AND date(f.scheduled_departure) = ?
            """,
            (day,),
        ))
        return {
            "period": _period(query),
            "summary": {
                **flights,
                "total_revenue": revenue["total_revenue"],
                "tickets_sold": revenue["tickets_sold"],
            },
            "today": {"date": day, **today_row},
        }


def _period(query: AnalyticsQuery) -> dict[str, str]:
    return {"start_date": query.start_date.isoformat(), "end_date": query.end_date.isoformat()}
