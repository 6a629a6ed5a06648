"""Analytics query window."""

from __future__ import annotations

from datetime import date, timedelta

from pydantic import model_validator

from airport.contracts.common import RecordModel

DEFAULT_WINDOW_DAYS = 30


class AnalyticsQuery(RecordModel):
    """Inclusive date window; defaults to the last 30 days ending today."""

    start_date: date | None = None
    end_date: date | None = None

    @model_validator(mode="after")
    def _fill_defaults(self) -> "AnalyticsQuery":
        if self.end_date is None:
            self.end_date = date.today()
        if self.start_date is None:
            self.start_date = self.end_date - timedelta(days=DEFAULT_WINDOW_DAYS)
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class AirportReportQuery(AnalyticsQuery):
    airport_id: int | None = None
