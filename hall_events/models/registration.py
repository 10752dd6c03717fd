"""Attendance records linking a user to an event."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..utils.datetime_utils import parse_datetime


@dataclass(slots=True, frozen=True)
class Registration:
    """One row of the ``attendance`` table."""

    id: int
    event_id: int
    user_id: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Registration":
        return cls(
            id=int(row["id"]),
            event_id=int(row["event"]),
            user_id=str(row["user"]),
            created_at=parse_datetime(row.get("created_at")),
        )

__all__ = ["Registration"]
