"""Base classes and shared types for airport contracts.

Conventions (all contracts and API responses):
- **Datetimes**: UTC, ISO 8601 in serialized form
- **Dates**: ISO 8601 ``YYYY-MM-DD``
- **Money**: USD, rounded to 2 decimals
- **Distances**: kilometers: suffix ``_km``
- **Coordinates**: WGS84 decimal degrees

Identifiers are SQLite integer primary keys named ``<entity>_id``.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from airport.contracts.enums import SortOrder

T = TypeVar("T")


class RecordModel(BaseModel):
    """Base model for rows of the relational schema.

    - Enums serialize as string values (columns store strings).
    - ``to_response()`` produces a JSON-safe dict for the API layer.
    - ``from_row()`` hydrates from a ``sqlite3.Row`` or plain mapping;
      joined columns that the model does not declare are ignored.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        protected_namespaces=(),
    )

    def to_response(self) -> dict[str, Any]:
        """Dump to a JSON-compatible dict (datetimes as ISO 8601)."""
        return self.model_dump(mode="json", by_alias=True)

    def changes(self) -> dict[str, Any]:
        """Fields explicitly provided by the caller, keyed by column name."""
        return self.model_dump(exclude_unset=True)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]):
        """Create model instance from a database row."""
        return cls.model_validate(dict(row))


def parse_json_column(value: Any) -> Any:
    """Decode a JSON text column; pass through already-decoded values."""
    if isinstance(value, (str, bytes)):
        return json.loads(value) if value else None
    return value


class PageRequest(BaseModel):
    """Pagination and ordering parameters shared by every list endpoint."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)
    sort_by: str | None = None
    sort_order: SortOrder = SortOrder.ASC

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True, protected_namespaces=())

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class Page(BaseModel, Generic[T]):
    """One page of results plus navigation metadata."""

    data: list[T]
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total_pages: int = Field(..., alias="totalPages")
    has_next: bool = Field(..., alias="hasNext")
    has_prev: bool = Field(..., alias="hasPrev")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def build(cls, data: list[T], total: int, page: int, limit: int) -> "Page[T]":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            data=data,
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )

    def to_response(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
