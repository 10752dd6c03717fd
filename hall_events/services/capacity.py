"""Sign-up progress derived from an event's participant counts."""

from __future__ import annotations

import enum
from typing import Optional

from ..config import CAPACITY_FULL_PERCENT, CAPACITY_WARNING_PERCENT
from ..models.event import Event


class CapacityStatus(str, enum.Enum):
    OK = "ok"
    WARNING = "warning"
    FULL = "full"


def percentage(event: Event) -> float:
    """Return ``100 * current / maximum``, or 0 for events without a limit."""
    if not event.max_participants:
        return 0.0
    return 100.0 * event.current_participants / event.max_participants


def display_percentage(event: Event) -> float:
    """:func:`percentage` clamped to ``[0, 100]`` for progress bars."""
    return max(0.0, min(percentage(event), 100.0))


def status(event: Event) -> CapacityStatus:
    pct = percentage(event)
    if pct >= CAPACITY_FULL_PERCENT:
        return CapacityStatus.FULL
    if pct >= CAPACITY_WARNING_PERCENT:
        return CapacityStatus.WARNING
    return CapacityStatus.OK


def spots_left(event: Event) -> Optional[int]:
    if event.max_participants is None:
        return None
    return max(event.max_participants - event.current_participants, 0)


def signup_label(event: Event) -> str:
    maximum = "∞" if event.max_participants is None else str(event.max_participants)
    return f"{event.current_participants}/{maximum}"

__all__ = [
    "CapacityStatus",
    "percentage",
    "display_percentage",
    "status",
    "spots_left",
    "signup_label",
]
