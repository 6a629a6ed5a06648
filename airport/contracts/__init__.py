"""Airport data contracts. Pydantic v2 models for the airport management API.

Data authority
--------------

**SQLite** (single source of truth, one table per entity):
- ``City``: ``cities``
- ``Airport`` / ``Gate``: ``airports`` / ``gates``
- ``AircraftModel`` / ``Aircraft``: ``aircraft_models`` / ``aircraft``
- ``Flight``: ``flights``
- ``Passenger``: ``passengers``
- ``Ticket``: ``tickets``
- ``Baggage``: ``baggage``
- ``User`` / ``Role``: ``users`` / ``roles`` / ``user_roles``
- ``AuditLog``: ``audit_logs``

Calculated (never persisted)
----------------------------
- ``PriceQuote``: fare with taxes, fees and discounts
- ``FlightLoad``: seat occupancy of a flight
- ``MaintenanceWindow``: upcoming maintenance classification
- ``Page``: one page of any list endpoint
"""

from airport.contracts.enums import (
    AircraftStatus,
    AuditAction,
    BaggageStatus,
    FlightStatus,
    GateStatus,
    SortOrder,
    StatisticsPeriod,
    TicketClass,
    TicketStatus,
    UserStatus,
)
from airport.contracts.common import Page, PageRequest, RecordModel
from airport.contracts.geography import (
    Airport,
    AirportCreate,
    AirportUpdate,
    City,
    CityCreate,
    CityUpdate,
    AirportSearch,
    CitySearch,
    DistanceRequest,
    Gate,
    GateCreate,
    GateUpdate,
)
from airport.contracts.fleet import (
    Aircraft,
    AircraftCreate,
    AircraftModel,
    AircraftModelCreate,
    AircraftModelSearch,
    AircraftModelUpdate,
    AircraftSearch,
    AircraftStatusUpdate,
    AircraftUpdate,
    MaintenanceRequest,
    MaintenanceWindow,
)
from airport.contracts.flight import (
    Flight,
    FlightCancellation,
    FlightCreate,
    FlightDelay,
    FlightLoad,
    FlightSearch,
    FlightStatisticsQuery,
    FlightStatusUpdate,
    FlightUpdate,
    AutoGateAssignment,
    GateAssignment,
)
from airport.contracts.passenger import (
    FlightRegistration,
    HistoryQuery,
    Passenger,
    PassengerCreate,
    PassengerDetails,
    PassengerSearch,
    PassengerUpdate,
)
from airport.contracts.ticket import (
    CheckInRequest,
    PriceBreakdown,
    PriceQuote,
    PricingQuery,
    RefundRequest,
    SeatAvailabilityQuery,
    SeatSelection,
    Ticket,
    TicketCancellation,
    TicketCreate,
    TicketSearch,
    TicketUpdate,
)
from airport.contracts.baggage import (
    Baggage,
    BaggageCreate,
    BaggageSearch,
    BaggageStatusUpdate,
    BaggageTrackRequest,
    BaggageUpdate,
)
from airport.contracts.user import (
    AuthResponse,
    LoginRequest,
    Role,
    RoleAssignment,
    User,
    UserCreate,
    UserSearch,
    UserUpdate,
)
from airport.contracts.audit import (
    AuditCleanupRequest,
    AuditLog,
    AuditReportRequest,
    AuditSearch,
)
from airport.contracts.analytics import AirportReportQuery, AnalyticsQuery

__all__ = [
    # Enums
    "AircraftStatus",
    "AuditAction",
    "BaggageStatus",
    "FlightStatus",
    "GateStatus",
    "SortOrder",
    "StatisticsPeriod",
    "TicketClass",
    "TicketStatus",
    "UserStatus",
    # Common
    "Page",
    "PageRequest",
    "RecordModel",
    # Geography
    "Airport",
    "AirportCreate",
    "AirportUpdate",
    "City",
    "CityCreate",
    "CityUpdate",
    "CitySearch",
    "AirportSearch",
    "DistanceRequest",
    "Gate",
    "GateCreate",
    "GateUpdate",
    # Fleet
    "Aircraft",
    "AircraftCreate",
    "AircraftModel",
    "AircraftModelCreate",
    "AircraftModelUpdate",
    "AircraftModelSearch",
    "AircraftSearch",
    "AircraftStatusUpdate",
    "AircraftUpdate",
    "MaintenanceRequest",
    "MaintenanceWindow",
    # Flights
    "Flight",
    "FlightCancellation",
    "FlightCreate",
    "FlightDelay",
    "FlightLoad",
    "FlightSearch",
    "FlightStatisticsQuery",
    "FlightStatusUpdate",
    "FlightUpdate",
    "AutoGateAssignment",
    "GateAssignment",
    # Passengers
    "FlightRegistration",
    "HistoryQuery",
    "Passenger",
    "PassengerCreate",
    "PassengerDetails",
    "PassengerSearch",
    "PassengerUpdate",
    # Tickets
    "CheckInRequest",
    "PriceBreakdown",
    "PriceQuote",
    "PricingQuery",
    "RefundRequest",
    "SeatAvailabilityQuery",
    "SeatSelection",
    "Ticket",
    "TicketCancellation",
    "TicketCreate",
    "TicketSearch",
    "TicketUpdate",
    # Baggage
    "Baggage",
    "BaggageCreate",
    "BaggageSearch",
    "BaggageStatusUpdate",
    "BaggageTrackRequest",
    "BaggageUpdate",
    # Users
    "AuthResponse",
    "LoginRequest",
    "Role",
    "RoleAssignment",
    "User",
    "UserCreate",
    "UserSearch",
    "UserUpdate",
    # Audit
    "AuditCleanupRequest",
    "AuditLog",
    "AuditReportRequest",
    "AuditSearch",
    # Analytics
    "AirportReportQuery",
    "AnalyticsQuery",
]
