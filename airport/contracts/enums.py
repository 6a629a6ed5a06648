"""Enumerations shared across all airport contracts."""

from enum import Enum


class FlightStatus(str, Enum):
    """Lifecycle of a scheduled flight."""
    SCHEDULED = "scheduled"
    BOARDING = "boarding"
    DEPARTED = "departed"
    ARRIVED = "arrived"
    CANCELLED = "cancelled"
    DELAYED = "delayed"


class AircraftStatus(str, Enum):
    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    RETIRED = "retired"


class TicketClass(str, Enum):
    """Cabin class of a ticket."""
    ECONOMY = "economy"
    BUSINESS = "business"
    FIRST = "first"


class TicketStatus(str, Enum):
    """Lifecycle of a ticket: active → cancelled → refunded, or active → used."""
    ACTIVE = "active"
    CANCELLED = "cancelled"
    USED = "used"
    REFUNDED = "refunded"


class BaggageStatus(str, Enum):
    """Handling stage of a checked bag."""
    CHECKED_IN = "checked_in"
    LOADED = "loaded"
    UNLOADED = "unloaded"
    DELIVERED = "delivered"
    LOST = "lost"


class GateStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class AuditAction(str, Enum):
    """Kind of change recorded in the audit log."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    STATUS_CHANGE = "status_change"
    CANCELLATION = "cancellation"
    REFUND = "refund"
    CHECK_IN = "check_in"


class StatisticsPeriod(str, Enum):
    """Bucket size for time-grouped statistics."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
