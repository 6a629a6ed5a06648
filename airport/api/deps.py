"""FastAPI dependency injection wiring."""

from __future__ import annotations

from fastapi import Depends, Request

from airport.api.auth import UserClaims, verify_access_token
from airport.persistence.db_manager import DatabaseManager
from airport.persistence.repositories.aircraft_model_repo import AircraftModelRepository
from airport.persistence.repositories.aircraft_repo import AircraftRepository
from airport.persistence.repositories.airport_repo import AirportRepository
from airport.persistence.repositories.analytics_repo import AnalyticsRepository
from airport.persistence.repositories.audit_repo import AuditRepository
from airport.persistence.repositories.baggage_repo import BaggageRepository
from airport.persistence.repositories.city_repo import CityRepository
from airport.persistence.repositories.flight_repo import FlightRepository
from airport.persistence.repositories.gate_repo import GateRepository
from airport.persistence.repositories.passenger_repo import PassengerRepository
from airport.persistence.repositories.report_repo import ReportRepository
from airport.persistence.repositories.ticket_repo import TicketRepository
from airport.persistence.repositories.user_repo import UserRepository


# ------------------------------------------------------------------
# Current user
# ------------------------------------------------------------------


def get_current_user(
    claims: UserClaims = Depends(verify_access_token),
) -> int:
    """Return the authenticated user ID."""
    return claims.user_id


# ------------------------------------------------------------------
# Database (singleton from app.state)
# ------------------------------------------------------------------


def get_db_manager(request: Request) -> DatabaseManager:
    return request.app.state.db_manager


# ------------------------------------------------------------------
# Repositories (stateless, new instance per request)
# ------------------------------------------------------------------


def get_city_repo(manager: DatabaseManager = Depends(get_db_manager)) -> CityRepository:
    return CityRepository(manager)


def get_airport_repo(manager: DatabaseManager = Depends(get_db_manager)) -> AirportRepository:
    return AirportRepository(manager)


def get_aircraft_model_repo(manager: DatabaseManager = Depends(get_db_manager)) -> AircraftModelRepository:
    return AircraftModelRepository(manager)


def get_aircraft_repo(manager: DatabaseManager = Depends(get_db_manager)) -> AircraftRepository:
    return AircraftRepository(manager)


def get_flight_repo(manager: DatabaseManager = Depends(get_db_manager)) -> FlightRepository:
    return FlightRepository(manager)


def get_passenger_repo(manager: DatabaseManager = Depends(get_db_manager)) -> PassengerRepository:
    return PassengerRepository(manager)


def get_ticket_repo(manager: DatabaseManager = Depends(get_db_manager)) -> TicketRepository:
    return TicketRepository(manager)


def get_baggage_repo(manager: DatabaseManager = Depends(get_db_manager)) -> BaggageRepository:
    return BaggageRepository(manager)


def get_user_repo(manager: DatabaseManager = Depends(get_db_manager)) -> UserRepository:
    return UserRepository(manager)


def get_audit_repo(manager: DatabaseManager = Depends(get_db_manager)) -> AuditRepository:
    return AuditRepository(manager)


def get_gate_repo(manager: DatabaseManager = Depends(get_db_manager)) -> GateRepository:
    return GateRepository(manager)


def get_analytics_repo(manager: DatabaseManager = Depends(get_db_manager)) -> AnalyticsRepository:
    return AnalyticsRepository(manager)


def get_report_repo(manager: DatabaseManager = Depends(get_db_manager)) -> ReportRepository:
    return ReportRepository(manager)
