"""Seed helpers building a small airport network through the repositories."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from airport.contracts.fleet import Aircraft
from airport.contracts.flight import Flight
from airport.contracts.geography import Airport, City, Gate
from airport.contracts.passenger import Passenger
from airport.contracts.ticket import Ticket
from airport.persistence.db_manager import DatabaseManager
from airport.persistence.repositories.aircraft_model_repo import AircraftModelRepository
from airport.persistence.repositories.aircraft_repo import AircraftRepository
from airport.persistence.repositories.airport_repo import AirportRepository
from airport.persistence.repositories.city_repo import CityRepository
from airport.persistence.repositories.flight_repo import FlightRepository
from airport.persistence.repositories.gate_repo import GateRepository
from airport.persistence.repositories.passenger_repo import PassengerRepository
from airport.persistence.repositories.ticket_repo import TicketRepository
from airport.persistence.sql import utcnow

# Paris CDG and New York JFK
CDG = {"name": "Paris Charles de Gaulle", "iata_code": "CDG", "icao_code": "LFPG",
       "latitude": 49.0097, "longitude": 2.5479}
JFK = {"name": "John F. Kennedy International", "iata_code": "JFK", "icao_code": "KJFK",
       "latitude": 40.6413, "longitude": -73.7781}


def make_city(manager: DatabaseManager, city_name: str = "Paris", country: str = "France", **extra: Any) -> City:
    return CityRepository(manager).create({"city_name": city_name, "country": country, **extra})


def make_airport(manager: DatabaseManager, city_id: int, **values: Any) -> Airport:
    return AirportRepository(manager).create({**CDG, "city_id": city_id, **values})


def make_gate(manager: DatabaseManager, airport_id: int, gate_number: str = "A1", terminal: str = "2E") -> Gate:
    return GateRepository(manager).create_for(
        airport_id, {"gate_number": gate_number, "terminal": terminal, "status": "available"}
    )


def make_aircraft(
    manager: DatabaseManager,
    registration_number: str = "F-HTST",
    capacity: int = 20,
    model_name: str = "A320neo",
    **extra: Any,
) -> Aircraft:
    models = AircraftModelRepository(manager)
    model = models.find_one("model_name", model_name) or models.create(
        {"model_name": model_name, "manufacturer": "Airbus", "capacity": capacity, "max_range": 6300}
    )
    return AircraftRepository(manager).create(
        {"registration_number": registration_number, "model_id": model.model_id, **extra}
    )


def make_network(manager: DatabaseManager) -> dict[str, Any]:
    """Two airports in two cities, one aircraft and one gate at the origin."""
    paris = make_city(manager, "Paris", "France", country_code="FR")
    new_york = make_city(manager, "New York", "United States", country_code="US")
    origin = make_airport(manager, paris.city_id)
    destination = make_airport(manager, new_york.city_id, **JFK)
    return {
        "origin": origin,
        "destination": destination,
        "aircraft": make_aircraft(manager),
        "gate": make_gate(manager, origin.airport_id),
    }


def make_flight(
    manager: DatabaseManager,
    network: dict[str, Any],
    flight_number: str = "AF100",
    departure: datetime | None = None,
    duration: timedelta = timedelta(hours=8),
    price: float = 200.0,
    **extra: Any,
) -> Flight:
    """Flight from origin to destination, departing in two hours by default."""
    departure = departure or utcnow() + timedelta(hours=2)
    return FlightRepository(manager).create({
        "flight_number": flight_number,
        "aircraft_id": network["aircraft"].aircraft_id,
        "departure_airport_id": network["origin"].airport_id,
        "arrival_airport_id": network["destination"].airport_id,
        "scheduled_departure": departure,
        "scheduled_arrival": departure + duration,
        "price": price,
        **extra,
    })


def make_passenger(
    manager: DatabaseManager,
    passport_number: str = "P1234567",
    email: str | None = "jane.doe@example.com",
    **extra: Any,
) -> Passenger:
    return PassengerRepository(manager).create({
        "first_name": "Jane",
        "last_name": "Doe",
        "passport_number": passport_number,
        "email": email,
        "nationality": "French",
        **extra,
    })


def make_ticket(manager: DatabaseManager, passenger_id: int, flight_id: int, **extra: Any) -> Ticket:
    return TicketRepository(manager).create({"passenger_id": passenger_id, "flight_id": flight_id, **extra})
