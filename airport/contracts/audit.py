"""Audit trail entries.

Stored at: ``audit_logs`` table; ``old_values``/``new_values`` are JSON text.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import Field, field_validator

from airport.contracts.common import PageRequest, RecordModel, parse_json_column
from airport.contracts.enums import AuditAction


class AuditLog(RecordModel):
    log_id: int
    table_name: str
    record_id: int | None = None
    action: AuditAction
    old_values: dict[str, Any] | None = None
    new_values: dict[str, Any] | None = None
    user_id: int | None = None
    ip_address: str | None = None
    created_at: datetime | None = None

    @field_validator("old_values", "new_values", mode="before")
    @classmethod
    def _decode(cls, v: Any) -> Any:
        return parse_json_column(v)


class AuditSearch(PageRequest):
    table_name: str | None = None
    record_id: int | None = None
    action: AuditAction | None = None
    user_id: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    search: str | None = Field(default=None, description="Substring of old or new values")


class AuditReportRequest(RecordModel):
    start_date: date
    end_date: date
    table_name: str | None = None


class AuditCleanupRequest(RecordModel):
    retention_days: int = Field(default=365, ge=1)
