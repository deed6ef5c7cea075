"""
Period filters for the analytics views.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional


class Period(str, Enum):
    ALL = "all"
    LAST_7_DAYS = "7days"
    LAST_30_DAYS = "30days"
    LAST_90_DAYS = "90days"

    @property
    def days(self) -> Optional[int]:
        return _PERIOD_DAYS[self]

    @property
    def label(self) -> str:
        return _PERIOD_LABELS[self]

    @classmethod
    def parse(cls, value: str | Period) -> Period:
        if isinstance(value, Period):
            return value
        try:
            return cls(value)
        except ValueError as exc:
            allowed = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown period '{value}' (expected one of: {allowed})") from exc


_PERIOD_DAYS = {
    Period.ALL: None,
    Period.LAST_7_DAYS: 7,
    Period.LAST_30_DAYS: 30,
    Period.LAST_90_DAYS: 90,
}

_PERIOD_LABELS = {
    Period.ALL: "All Time",
    Period.LAST_7_DAYS: "Last 7 Days",
    Period.LAST_30_DAYS: "Last 30 Days",
    Period.LAST_90_DAYS: "Last 90 Days",
}


def period_label(value: str) -> str:
    """Display label for a period key; unknown keys are shown as given."""
    try:
        return Period(value).label
    except ValueError:
        return value


@dataclass
class PeriodWindow:
    """
    Day-granular window resolved against a reference instant.

    `start` is None for the unbounded period. Dates are compared as calendar
    days, so a summary dated exactly N days ago is still inside the window.
    """

    period: Period
    now: datetime

    @property
    def start(self) -> Optional[date]:
        days = self.period.days
        if days is None:
            return None
        return self.now.date() - timedelta(days=days)

    def contains(self, iso_day: str) -> bool:
        start = self.start
        if start is None:
            return True
        return date.fromisoformat(iso_day) >= start
