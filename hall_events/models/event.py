"""Definition of the `Event` dataclass used throughout the project."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Dict, FrozenSet, Optional

from ..utils.datetime_utils import parse_date, parse_datetime, parse_time
from ..utils.text_utils import join_tags, split_tags


@dataclass(slots=True)
class Event:
    """A hall event as stored in the ``Events`` table."""

    id: int
    title: str = ""
    description: str = ""
    date: Optional[date] = None
    time: Optional[time] = None
    location: str = ""
    image_url: Optional[str] = None
    tags: FrozenSet[str] = field(default_factory=frozenset)
    deadline: Optional[date] = None
    max_participants: Optional[int] = None
    current_participants: int = 0
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Event":
        """Normalise a raw ``Events`` row (capitalised column names) into an Event."""
        maximum = row.get("MaximumParticipants")
        return cls(
            id=int(row["id"]),
            title=row.get("Title") or "",
            description=row.get("Description") or "",
            date=parse_date(row.get("Date")),
            time=parse_time(row.get("Time")),
            location=row.get("Location") or "",
            image_url=row.get("image_url") or None,
            tags=split_tags(row.get("Tags")),
            deadline=parse_date(row.get("Deadline")),
            max_participants=int(maximum) if maximum is not None else None,
            current_participants=int(row.get("CurrentParticipants") or 0),
            created_at=parse_datetime(row.get("created_at")),
        )

    def to_row(self) -> Dict[str, Any]:
        """Return the writable columns in the store's naming, without ``id``."""
        return {
            "Title": self.title,
            "Description": self.description,
            "Date": self.date.isoformat() if self.date else None,
            "Time": self.time.strftime("%H:%M") if self.time else None,
            "Location": self.location or None,
            "image_url": self.image_url,
            "Deadline": self.deadline.isoformat() if self.deadline else None,
            "Tags": join_tags(self.tags),
            "MaximumParticipants": self.max_participants,
        }

    def is_upcoming(self, today: date) -> bool:
        """Return ``True`` if the event takes place today or later."""
        return self.date is not None and self.date >= today

__all__ = ["Event"]
