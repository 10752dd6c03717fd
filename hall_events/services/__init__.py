"""Service layer modules grouping business logic by concern.

This module provides convenience re-exports so that callers can simply do for
example `from hall_events.services import fetch_upcoming` without having to
know which underlying module provides the symbol.
"""

from .catalog import FilterOption, fetch_event, fetch_events, fetch_upcoming, fetch_user_event_ids  # noqa: F401
from .capacity import CapacityStatus, display_percentage, percentage, status  # noqa: F401
from .announcements import fetch_announcements, group_by_recency, post_announcement  # noqa: F401
from .admin import EventForm, create_event, list_signups, update_event  # noqa: F401
from .calendar import calendar_stats, get_user_week_events, get_week_events  # noqa: F401

__all__ = [
    "FilterOption",
    "fetch_event",
    "fetch_events",
    "fetch_upcoming",
    "fetch_user_event_ids",
    "CapacityStatus",
    "display_percentage",
    "percentage",
    "status",
    "fetch_announcements",
    "group_by_recency",
    "post_announcement",
    "EventForm",
    "create_event",
    "list_signups",
    "update_event",
    "calendar_stats",
    "get_user_week_events",
    "get_week_events",
]
