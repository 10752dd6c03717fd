"""Event catalog: fetch and normalise events for the list and browse views."""

from __future__ import annotations

import enum
import logging
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence

from ..clients.gateway import Filter, Gateway, Order
from ..config import ATTENDANCE_TABLE, EVENT_COLUMNS, EVENTS_TABLE
from ..errors import GatewayError
from ..models.event import Event
from ..utils.text_utils import contains_ci, ilike_pattern

logger = logging.getLogger(__name__)

_ONLINE_PATTERN = ilike_pattern("online")
_DATE_ORDER = (Order("Date", ascending=True), Order("Time", ascending=True, nulls_first=True))


class FilterOption(str, enum.Enum):
    """Filter bar choices on the event home screen."""

    ALL = "All"
    MY_EVENTS = "My Events"
    UPCOMING = "Upcoming"
    PAST = "Past"
    ONLINE = "Online"
    IN_PERSON = "In-person"
    WORKSHOP = "Workshop"
    ACADEMIC = "Academic"
    SPORTS = "Sports"
    CULTURAL = "Cultural"
    WELFARE = "Welfare"
    FOC = "FOC"
    RESIDENTIAL_AFFAIRS = "Residential Affairs"

    @property
    def is_tag(self) -> bool:
        return self in _TAG_OPTIONS


_TAG_OPTIONS = frozenset(
    {
        FilterOption.WORKSHOP,
        FilterOption.ACADEMIC,
        FilterOption.SPORTS,
        FilterOption.CULTURAL,
        FilterOption.WELFARE,
        FilterOption.FOC,
        FilterOption.RESIDENTIAL_AFFAIRS,
    }
)


def _as_date(now: date | datetime) -> date:
    return now.date() if isinstance(now, datetime) else now


def normalize_rows(rows: Iterable[dict]) -> List[Event]:
    """Convert raw ``Events`` rows, skipping (and logging) malformed ones."""
    events: List[Event] = []
    for row in rows:
        try:
            events.append(Event.from_row(row))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping malformed event row %r: %s", row.get("id"), exc)
    return events


def sort_by_date(events: Iterable[Event]) -> List[Event]:
    """Stable ascending sort by date; undated events go last."""
    return sorted(events, key=lambda e: (e.date is None, e.date or date.min))


def matches_search(event: Event, query: str) -> bool:
    """Case-insensitive match of *query* against title or location."""
    query = query.strip()
    if not query:
        return True
    return contains_ci(event.title, query) or contains_ci(event.location, query)


def fetch_upcoming(gateway: Gateway, now: date | datetime) -> List[Event]:
    """Return events dated today or later, ascending by date.

    A failed query is logged and yields an empty list; nothing is retried.
    """
    today = _as_date(now)
    try:
        rows = gateway.query(EVENTS_TABLE, columns=EVENT_COLUMNS)
    except GatewayError as exc:
        logger.error("Error fetching upcoming events: %s", exc.message)
        return []
    upcoming = [event for event in normalize_rows(rows) if event.is_upcoming(today)]
    logger.info("Loaded %d upcoming events (of %d)", len(upcoming), len(rows))
    return sort_by_date(upcoming)


def fetch_events(
    gateway: Gateway,
    option: FilterOption,
    today: date,
    my_event_ids: Optional[Sequence[int]] = None,
) -> List[Event]:
    """Fetch events for a filter bar *option*, ordered by date then time.

    ``My Events`` keeps only ids in *my_event_ids*; like the other options a
    failed query yields an empty list.
    """
    filters: List[Filter] = []
    if option is FilterOption.UPCOMING:
        filters.append(Filter("Date", "gte", today.isoformat()))
    elif option is FilterOption.PAST:
        filters.append(Filter("Date", "lt", today.isoformat()))
    elif option is FilterOption.ONLINE:
        filters.append(Filter("Location", "ilike", _ONLINE_PATTERN))
    elif option is FilterOption.IN_PERSON:
        filters.append(Filter("Location", "not_ilike", _ONLINE_PATTERN))
    elif option.is_tag:
        filters.append(Filter("Tags", "ilike", ilike_pattern(option.value)))

    try:
        rows = gateway.query(EVENTS_TABLE, filters, _DATE_ORDER, columns=EVENT_COLUMNS)
    except GatewayError as exc:
        logger.error("Error fetching events for filter %s: %s", option.value, exc.message)
        return []

    events = normalize_rows(rows)
    if option is FilterOption.MY_EVENTS:
        wanted = set(my_event_ids or ())
        events = [event for event in events if event.id in wanted]
    logger.info("Loaded %d events for filter %s", len(events), option.value)
    return events


def fetch_event(gateway: Gateway, event_id: int) -> Optional[Event]:
    """Fetch one event by id; raises :class:`GatewayError` on store failure."""
    row = gateway.fetch_one(EVENTS_TABLE, event_id, columns=EVENT_COLUMNS)
    if row is None:
        logger.info("Event %s not found", event_id)
        return None
    return Event.from_row(row)


def fetch_user_event_ids(gateway: Gateway, user_id: str) -> List[int]:
    """Return ids of events *user_id* is registered for."""
    rows = gateway.query(ATTENDANCE_TABLE, [Filter("user", "eq", user_id)], columns="event")
    return [int(row["event"]) for row in rows]

__all__ = [
    "FilterOption",
    "normalize_rows",
    "sort_by_date",
    "matches_search",
    "fetch_upcoming",
    "fetch_events",
    "fetch_event",
    "fetch_user_event_ids",
]
