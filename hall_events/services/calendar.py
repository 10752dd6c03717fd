"""Weekly calendar view and dashboard statistics."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import List, Optional

from ..clients.gateway import Filter, Gateway, Order
from ..config import ATTENDANCE_TABLE, EVENT_COLUMNS, EVENTS_TABLE
from ..models.event import Event
from ..utils.datetime_utils import end_time, parse_datetime, week_range
from .catalog import normalize_rows

logger = logging.getLogger(__name__)

_CALENDAR_ORDER = (Order("Date", ascending=True), Order("Time", ascending=True))


@dataclass(slots=True)
class CalendarEntry:
    """An event placed on the weekly calendar."""

    event: Event
    start: time
    end: time
    all_day: bool = False
    attendance_id: Optional[int] = None
    registered_at: Optional[datetime] = None

    @property
    def is_user_registered(self) -> bool:
        return self.attendance_id is not None

    @property
    def time_label(self) -> str:
        if self.all_day:
            return "All day"
        return f"{self.start:%H:%M} - {self.end:%H:%M}"


@dataclass(slots=True, frozen=True)
class CalendarStats:
    today_events: int
    week_events: int
    user_registrations: int


def _entry(event: Event) -> CalendarEntry:
    start = event.time or time(0, 0)
    return CalendarEntry(event=event, start=start, end=end_time(start), all_day=event.time is None)


def _week_filters(today: date, offset: int) -> List[Filter]:
    monday, sunday = week_range(today, offset)
    return [Filter("Date", "gte", monday.isoformat()), Filter("Date", "lte", sunday.isoformat())]


def get_week_events(gateway: Gateway, today: date, offset: int = 0) -> List[CalendarEntry]:
    """All events in the Monday-Sunday week *offset* weeks from *today*."""
    rows = gateway.query(EVENTS_TABLE, _week_filters(today, offset), _CALENDAR_ORDER, columns=EVENT_COLUMNS)
    logger.info("Calendar week %+d: %d events", offset, len(rows))
    return [_entry(event) for event in normalize_rows(rows)]


def get_user_week_events(gateway: Gateway, user_id: Optional[str], today: date, offset: int = 0) -> List[CalendarEntry]:
    """Events *user_id* registered for in that week, with their attendance ids."""
    if not user_id:
        return []
    attendance = gateway.query(
        ATTENDANCE_TABLE, [Filter("user", "eq", user_id)], columns="id,event,created_at"
    )
    if not attendance:
        return []
    by_event = {int(row["event"]): row for row in attendance}
    filters = [Filter("id", "in", sorted(by_event))] + _week_filters(today, offset)
    rows = gateway.query(EVENTS_TABLE, filters, _CALENDAR_ORDER, columns=EVENT_COLUMNS)

    entries: List[CalendarEntry] = []
    for event in normalize_rows(rows):
        entry = _entry(event)
        record = by_event.get(event.id)
        if record is not None:
            entry.attendance_id = int(record["id"])
            entry.registered_at = parse_datetime(record.get("created_at"))
        entries.append(entry)
    logger.info("User %s has %d events in week %+d", user_id, len(entries), offset)
    return entries


def calendar_stats(gateway: Gateway, today: date, user_id: Optional[str] = None) -> CalendarStats:
    """Counts for the dashboard: events today, this week, and the user's sign-ups."""
    today_count = gateway.count(EVENTS_TABLE, [Filter("Date", "eq", today.isoformat())])
    week_count = gateway.count(EVENTS_TABLE, _week_filters(today, 0))
    registrations = gateway.count(ATTENDANCE_TABLE, [Filter("user", "eq", user_id)]) if user_id else 0
    return CalendarStats(today_count, week_count, registrations)

__all__ = [
    "CalendarEntry",
    "CalendarStats",
    "get_week_events",
    "get_user_week_events",
    "calendar_stats",
]
