"""Staff and customer accounts, roles and authentication payloads.

Stored at: ``users``, ``roles`` and ``user_roles`` tables. ``password_hash``
never leaves the persistence layer.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import Field, field_validator

from airport.contracts.common import PageRequest, RecordModel, parse_json_column
from airport.contracts.passenger import EMAIL_PATTERN


PASSWORD_MAX_BYTES = 72


def _check_password_bytes(value: str | None) -> str | None:
    # bcrypt only accepts 72 bytes of UTF-8
    if value is not None and len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"password must be at most {PASSWORD_MAX_BYTES} bytes in UTF-8")
    return value


class UserRegistration(RecordModel):
    """Self-service sign-up. Accounts always start active."""

    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(..., min_length=6, max_length=72)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: str | None = Field(default=None, max_length=30)
    date_of_birth: date | None = None
    passport_number: str | None = Field(default=None, max_length=20)

    @field_validator("password")
    @classmethod
    def _password_bytes(cls, v: str | None) -> str | None:
        return _check_password_bytes(v)


class UserCreate(UserRegistration):
    is_active: bool = True


class UserUpdate(RecordModel):
    username: str | None = Field(default=None, min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)
    password: str | None = Field(default=None, min_length=6, max_length=72)
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    phone: str | None = Field(default=None, max_length=30)
    date_of_birth: date | None = None
    passport_number: str | None = Field(default=None, max_length=20)
    is_active: bool | None = None

    @field_validator("password")
    @classmethod
    def _password_bytes(cls, v: str | None) -> str | None:
        return _check_password_bytes(v)


class Role(RecordModel):
    role_id: int
    role_name: str
    description: str | None = None
    permissions: dict[str, list[str]] = Field(default_factory=dict)
    created_at: datetime | None = None

    @field_validator("permissions", mode="before")
    @classmethod
    def _decode(cls, v: Any) -> Any:
        return parse_json_column(v) or {}


class User(RecordModel):
    user_id: int
    username: str
    email: str
    first_name: str
    last_name: str
    phone: str | None = None
    date_of_birth: date | None = None
    passport_number: str | None = None
    is_active: bool = True
    roles: list[Role] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserSearch(PageRequest):
    q: str | None = Field(default=None, description="Matches username, email, first or last name")
    is_active: bool | None = None


class RoleAssignment(RecordModel):
    role_id: int


class LoginRequest(RecordModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=6)


class AuthResponse(RecordModel):
    user: User
    roles: list[Role]
    access_token: str
    token_type: str = "bearer"
