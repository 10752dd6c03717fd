"""Utility functions for working with dates and times.

The store returns dates as ``YYYY-MM-DD`` strings, clock times as
``HH:MM[:SS]`` and timestamps as ISO-8601. Parsers here are lenient: a value
that cannot be read becomes ``None`` and the caller decides how to show it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Optional, Tuple

from ..config import DEFAULT_EVENT_DURATION_HOURS

__all__ = [
    "parse_date",
    "parse_time",
    "parse_datetime",
    "week_range",
    "end_time",
    "Countdown",
    "countdown",
]


def parse_date(value: Any) -> Optional[date]:
    """Return the calendar date part of *value* or ``None``.

    Accepts ``date``/``datetime`` objects and strings such as ``2025-03-01``,
    ``2025-03-01 18:00`` or ``2025-03-01T18:00:00``.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def parse_time(value: Any) -> Optional[time]:
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value
    try:
        return time.fromisoformat(str(value).strip())
    except ValueError:
        return None


def parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip().replace(" ", "T", 1)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def week_range(today: date, offset: int = 0) -> Tuple[date, date]:
    """Return the Monday and Sunday of the week *offset* weeks from *today*."""
    anchor = today + timedelta(weeks=offset)
    monday = anchor - timedelta(days=anchor.weekday())
    return monday, monday + timedelta(days=6)


def end_time(start: Optional[time]) -> time:
    """Return the assumed end of an event starting at *start* (wraps past midnight)."""
    if start is None:
        start = time(0, 0)
    return time((start.hour + DEFAULT_EVENT_DURATION_HOURS) % 24, start.minute)


@dataclass(slots=True, frozen=True)
class Countdown:
    days: int
    hours: int
    minutes: int

    def __str__(self) -> str:
        return f"{self.days:02d}:{self.hours:02d}:{self.minutes:02d}"


def countdown(deadline: Optional[date], now: datetime) -> Optional[Countdown]:
    """Time left until the end of the *deadline* day, or ``None`` once closed.

    *now* is compared naively; pass a local wall-clock datetime.
    """
    if deadline is None:
        return None
    closes_at = datetime.combine(deadline + timedelta(days=1), time.min)
    remaining = closes_at - now.replace(tzinfo=None)
    if remaining <= timedelta(0):
        return None
    minutes_total = int(remaining.total_seconds()) // 60
    return Countdown(
        days=remaining.days,
        hours=(minutes_total // 60) % 24,
        minutes=minutes_total % 60,
    )
