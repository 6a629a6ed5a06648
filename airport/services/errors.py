"""Domain exceptions raised by repositories and services.

Each carries the HTTP status the API layer answers with; the message is
returned verbatim as ``detail``.
"""


class AirportError(Exception):
    """Base exception for all domain errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(AirportError):
    """Raised when a referenced record does not exist."""

    status_code = 404


class ConflictError(AirportError):
    """Raised on uniqueness violations and on deletes blocked by references."""

    status_code = 409


class BusinessRuleError(AirportError):
    """Raised when a status transition or operation is not allowed."""

    status_code = 400


class AuthenticationError(AirportError):
    status_code = 401
