"""Hall announcements posted by administrators."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..utils.datetime_utils import parse_datetime


@dataclass(slots=True, frozen=True)
class Announcement:
    id: int
    title: str
    message: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Announcement":
        return cls(
            id=int(row["id"]),
            title=row.get("title") or "",
            message=row.get("message") or "",
            created_at=parse_datetime(row.get("created_at")),
        )

__all__ = ["Announcement"]
