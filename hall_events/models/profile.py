"""Session identity and user profile records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from ..config import ADMIN_ROLE, USER_ROLE


@dataclass(slots=True, frozen=True)
class Identity:
    """The signed-in user as reported by the auth backend."""

    id: str
    email: str = ""


@dataclass(slots=True)
class Profile:
    """A row of the ``profiles`` table."""

    id: str
    role: str = USER_ROLE
    username: str = ""
    school: str = ""
    course: str = ""
    avatar_url: str = ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Profile":
        return cls(
            id=str(row["id"]),
            role=row.get("role") or USER_ROLE,
            username=row.get("username") or "",
            school=row.get("school") or "",
            course=row.get("course") or "",
            avatar_url=row.get("avatar_url") or "",
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role,
            "username": self.username,
            "school": self.school,
            "course": self.course,
            "avatar_url": self.avatar_url,
        }

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

__all__ = ["Identity", "Profile"]
