"""Operational reports: per-airport statistics and data integrity checks."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any

from airport.contracts.analytics import AirportReportQuery
from airport.persistence.db_manager import DatabaseManager
from airport.persistence.sql import minutes_between, utcnow
from airport.services.flight_ops import ON_TIME_THRESHOLD_MINUTES

logger = logging.getLogger(__name__)

DELAY = minutes_between("f.scheduled_departure", "f.actual_departure")
IN_WINDOW = "date(f.scheduled_departure) BETWEEN :start AND :end"
SOLD = "t.status IN ('active', 'used')"
BUSIEST_LIMIT = 10
IDLE_AIRCRAFT_DAYS = 30

# (section, check, SQL returning a single count)
INTEGRITY_CHECKS: list[tuple[str, str, str]] = [
    ("flight_integrity", "invalid_schedules",
     "SELECT COUNT(*) FROM flights WHERE scheduled_arrival <= scheduled_departure"),
    ("flight_integrity", "capacity_violations",
     """
     SELECT COUNT(*) FROM flights f
     JOIN aircraft a ON a.aircraft_id = f.aircraft_id
     JOIN aircraft_models m ON m.model_id = a.model_id
     WHERE (SELECT COUNT(*) FROM tickets t WHERE t.flight_id = f.flight_id AND t.status IN ('active', 'used'))
           > m.capacity
     """),
    ("flight_integrity", "stale_gate_assignments",
     """
     SELECT COUNT(*) FROM gates g
     WHERE g.status = 'occupied' AND NOT EXISTS (
         SELECT 1 FROM flights f
         WHERE f.gate_id = g.gate_id AND f.status IN ('scheduled', 'boarding', 'delayed')
     )
     """),
    ("passenger_integrity", "invalid_emails",
     "SELECT COUNT(*) FROM passengers WHERE email IS NOT NULL AND email NOT LIKE '%_@_%._%'"),
    ("passenger_integrity", "missing_phone_numbers",
     "SELECT COUNT(*) FROM passengers WHERE phone IS NULL OR TRIM(phone) = ''"),
    ("passenger_integrity", "invalid_dates_of_birth",
     "SELECT COUNT(*) FROM passengers WHERE date_of_birth > :today"),
    ("passenger_integrity", "duplicate_passengers",
     """
     SELECT COALESCE(SUM(n - 1), 0) FROM (
         SELECT COUNT(*) AS n FROM passengers
         WHERE date_of_birth IS NOT NULL
         GROUP BY LOWER(first_name), LOWER(last_name), date_of_birth
         HAVING COUNT(*) > 1
     )
     """),
    ("ticket_integrity", "free_tickets",
     "SELECT COUNT(*) FROM tickets WHERE price <= 0 AND status IN ('active', 'used')"),
    ("ticket_integrity", "seat_conflicts",
     """
     SELECT COUNT(*) FROM tickets t
     WHERE t.status = 'active' AND t.seat_number IS NOT NULL AND EXISTS (
         SELECT 1 FROM tickets t2
         WHERE t2.flight_id = t.flight_id AND t2.seat_number = t.seat_number
           AND t2.ticket_id != t.ticket_id AND t2.status = 'active'
     )
     """),
    ("ticket_integrity", "active_on_cancelled_flights",
     """
     SELECT COUNT(*) FROM tickets t JOIN flights f ON f.flight_id = t.flight_id
     WHERE t.status = 'active' AND f.status = 'cancelled'
     """),
    ("aircraft_integrity", "maintenance_violations",
     """
     SELECT COUNT(*) FROM aircraft
     WHERE next_maintenance IS NOT NULL AND last_maintenance IS NOT NULL
       AND next_maintenance < last_maintenance
     """),
    ("aircraft_integrity", "idle_aircraft",
     """
     SELECT COUNT(*) FROM aircraft a
     WHERE a.status = 'active' AND NOT EXISTS (
         SELECT 1 FROM flights f
         WHERE f.aircraft_id = a.aircraft_id AND date(f.scheduled_departure) >= :idle_since
     )
     """),
]

# check -> (severity, issue, suggested action)
RECOMMENDATIONS = {
    "capacity_violations": ("critical", "Overbooked flights",
                            "Review overbooked flights and rebook passengers"),
    "seat_conflicts": ("high", "Seat conflicts", "Reassign seats so each is held by one ticket"),
    "active_on_cancelled_flights": ("high", "Active tickets on cancelled flights",
                                    "Cancel or rebook the tickets of cancelled flights"),
    "invalid_schedules": ("high", "Invalid schedules", "Correct scheduled departure and arrival times"),
    "stale_gate_assignments": ("medium", "Occupied gates without flights", "Release the gates"),
    "invalid_emails": ("medium", "Invalid email addresses", "Update passenger email addresses"),
    "duplicate_passengers": ("medium", "Duplicate passengers", "Merge duplicate passenger records"),
    "maintenance_violations": ("medium", "Maintenance dates out of order",
                               "Reschedule the next maintenance"),
}


class ReportRepository:
    def __init__(self, manager: DatabaseManager):
        self._manager = manager

    # ------------------------------------------------------------------
    # Airport statistics
    # ------------------------------------------------------------------

    def airport_statistics(self, query: AirportReportQuery) -> dict[str, Any]:
        """Traffic, passengers, revenue and punctuality per airport for the window.

        Passengers and revenue are counted on departures.
        """
        params = {
            "start": query.start_date.isoformat(),
            "end": query.end_date.isoformat(),
            "airport_id": query.airport_id,
        }
        departing = f"FROM flights f WHERE f.departure_airport_id = ap.airport_id AND {IN_WINDOW}"
        sold = (
            "FROM tickets t JOIN flights f ON f.flight_id = t.flight_id "
            f"WHERE f.departure_airport_id = ap.airport_id AND {SOLD} AND {IN_WINDOW}"
        )
        measured = f"{departing} AND f.actual_departure IS NOT NULL"
        with self._manager.transaction() as conn:
            rows = conn.execute(
                f"""
                SELECT ap.airport_id, ap.name AS airport_name, ap.iata_code,
                       c.city_name AS city, c.country,
                       (SELECT COUNT(*) {departing}) AS departures,
                       (SELECT COUNT(*) FROM flights f
                        WHERE f.arrival_airport_id = ap.airport_id AND {IN_WINDOW}) AS arrivals,
                       (SELECT COUNT(*) {sold}) AS passenger_count,
                       (SELECT ROUND(COALESCE(SUM(t.price), 0), 2) {sold}) AS revenue,
                       (SELECT COUNT(*) {measured}) AS measured_departures,
                       (SELECT COALESCE(SUM({DELAY} > {ON_TIME_THRESHOLD_MINUTES}), 0) {measured}) AS delayed_departures,
                       (SELECT ROUND(COALESCE(AVG({DELAY}), 0), 2) {measured}) AS average_delay_minutes
                FROM airports ap LEFT JOIN cities c ON c.city_id = ap.city_id
                WHERE :airport_id IS NULL OR ap.airport_id = :airport_id
                ORDER BY ap.iata_code
                """,
                params,
            ).fetchall()

        airports = []
        for r in rows:
            item = dict(r)
            item["flight_count"] = item["departures"] + item["arrivals"]
            measured_count = item.pop("measured_departures")
            delayed = item.pop("delayed_departures")
            item["delay_percentage"] = round(delayed * 100.0 / measured_count, 2) if measured_count else 0.0
            item["on_time_percentage"] = (
                round((measured_count - delayed) * 100.0 / measured_count, 2) if measured_count else 0.0
            )
            airports.append(item)

        busiest = sorted(
            (a for a in airports if a["flight_count"]),
            key=lambda a: (-a["flight_count"], -a["passenger_count"], a["iata_code"]),
        )[:BUSIEST_LIMIT]
        return {
            "period": {"start_date": params["start"], "end_date": params["end"]},
            "summary": {
                "total_airports": len(airports),
                "total_flights": sum(a["departures"] for a in airports),
                "total_passengers": sum(a["passenger_count"] for a in airports),
                "total_revenue": round(sum(a["revenue"] for a in airports), 2),
                "airports_with_departures": sum(1 for a in airports if a["departures"]),
            },
            "airport_statistics": airports,
            "busiest_airports": [
                {
                    "ranking": rank,
                    "airport_id": a["airport_id"],
                    "airport_name": a["airport_name"],
                    "iata_code": a["iata_code"],
                    "flight_count": a["flight_count"],
                    "passenger_count": a["passenger_count"],
                }
                for rank, a in enumerate(busiest, start=1)
            ],
        }

    # ------------------------------------------------------------------
    # Data integrity
    # ------------------------------------------------------------------

    def data_integrity(self, today: date | None = None) -> dict[str, Any]:
        """Run every consistency check and score the share that came back clean."""
        today = today or utcnow().date()
        params = {
            "today": today.isoformat(),
            "idle_since": (today - timedelta(days=IDLE_AIRCRAFT_DAYS)).isoformat(),
        }
        sections: dict[str, dict[str, int]] = {}
        with self._manager.transaction() as conn:
            for section, check, sql in INTEGRITY_CHECKS:
                sections.setdefault(section, {})[check] = conn.execute(sql, params).fetchone()[0]

        findings = {check: count for checks in sections.values() for check, count in checks.items() if count}
        recommendations = []
        for check, count in findings.items():
            if check not in RECOMMENDATIONS:
                continue
            severity, issue, action = RECOMMENDATIONS[check]
            recommendations.append({
                "check": check,
                "issue": issue,
                "severity": severity,
                "count": count,
                "suggested_action": action,
            })

        total = len(INTEGRITY_CHECKS)
        failed = len(findings)
        if failed:
            logger.warning("Data integrity: %d of %d checks failed (%s)", failed, total, ", ".join(findings))
        return {
            "generated_at": utcnow().isoformat(),
            "summary": {
                "total_checks": total,
                "passed_checks": total - failed,
                "failed_checks": failed,
                "issues_found": sum(findings.values()),
                "integrity_score": round((total - failed) * 100.0 / total),
            },
            **sections,
            "recommendations": recommendations,
        }
