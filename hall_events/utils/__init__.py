"""Utility functions for the hall_events project.

Re-exports the date/time and text helpers so that imports like
`from ..utils import parse_date` work as expected.
"""

from .datetime_utils import (  # noqa: F401
    countdown,
    end_time,
    parse_date,
    parse_datetime,
    parse_time,
    week_range,
)
from .text_utils import contains_ci, ilike_pattern, join_tags, split_tags  # noqa: F401

__all__ = [
    "countdown",
    "end_time",
    "parse_date",
    "parse_datetime",
    "parse_time",
    "week_range",
    "contains_ci",
    "ilike_pattern",
    "join_tags",
    "split_tags",
]
