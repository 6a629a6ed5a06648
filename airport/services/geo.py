"""Great-circle distance between airports."""

from __future__ import annotations

import math

EARTH_RADIUS_KM = 6371.0
KM_PER_MILE = 1.609344
CRUISE_SPEED_KMH = 800.0


def great_circle_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in kilometers."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def estimated_flight_minutes(distance_km: float) -> int:
    """Block time at an average 800 km/h."""
    return round(distance_km / CRUISE_SPEED_KMH * 60)


def distance_summary(lat1: float, lon1: float, lat2: float, lon2: float) -> dict[str, float | int]:
    km = great_circle_km(lat1, lon1, lat2, lon2)
    return {
        "distance_km": round(km, 2),
        "distance_miles": round(km / KM_PER_MILE, 2),
        "estimated_flight_time_minutes": estimated_flight_minutes(km),
    }
