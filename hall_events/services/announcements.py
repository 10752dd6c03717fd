"""Announcements: fetching, posting and grouping by recency."""

from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Dict, Iterable, List

from ..clients.gateway import Gateway, Order
from ..config import ANNOUNCEMENTS_TABLE
from ..errors import ValidationError
from ..models.announcement import Announcement

logger = logging.getLogger(__name__)

TODAY = "Today"
YESTERDAY = "Yesterday"
THIS_WEEK = "This Week"
EARLIER_THIS_MONTH = "Earlier This Month"
EARLIER_THIS_YEAR = "Earlier This Year"


def fetch_announcements(gateway: Gateway) -> List[Announcement]:
    """Return all announcements, newest first. Raises :class:`GatewayError`."""
    rows = gateway.query(
        ANNOUNCEMENTS_TABLE,
        ordering=[Order("created_at", ascending=False)],
        columns="id,created_at,title,message",
    )
    logger.info("Fetched %d announcements", len(rows))
    return [Announcement.from_row(row) for row in rows]


def post_announcement(gateway: Gateway, title: str, message: str) -> Announcement:
    """Publish an announcement; both fields are required."""
    title, message = (title or "").strip(), (message or "").strip()
    if not title or not message:
        raise ValidationError("Please fill in both fields.", field="title" if not title else "message")
    row = gateway.insert(ANNOUNCEMENTS_TABLE, {"title": title, "message": message})
    logger.info("Posted announcement %r", title)
    return Announcement.from_row(row)


def recency_bucket(created_at: datetime, now: datetime) -> str:
    """Classify *created_at* relative to *now*.

    Buckets are calendar based: Today, Yesterday, This Week (Monday onward),
    Earlier This Month, Earlier This Year, then the four-digit year. Aware
    timestamps are converted to *now*'s timezone first.
    """
    if created_at.tzinfo is not None and now.tzinfo is not None:
        created_at = created_at.astimezone(now.tzinfo)
    day = created_at.date()
    today = now.date()
    if day >= today:
        return TODAY
    if day == today - timedelta(days=1):
        return YESTERDAY
    if day >= today - timedelta(days=today.weekday()):
        return THIS_WEEK
    if (day.year, day.month) == (today.year, today.month):
        return EARLIER_THIS_MONTH
    if day.year == today.year:
        return EARLIER_THIS_YEAR
    return str(day.year)


def group_by_recency(announcements: Iterable[Announcement], now: datetime) -> Dict[str, List[Announcement]]:
    """Group announcements by :func:`recency_bucket`, preserving input order."""
    groups: Dict[str, List[Announcement]] = OrderedDict()
    for item in announcements:
        if item.created_at is None:
            continue
        groups.setdefault(recency_bucket(item.created_at, now), []).append(item)
    return groups

__all__ = [
    "fetch_announcements",
    "post_announcement",
    "recency_bucket",
    "group_by_recency",
]
