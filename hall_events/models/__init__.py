"""Domain models used across the project."""

from .announcement import Announcement  # noqa: F401
from .event import Event  # noqa: F401
from .profile import Identity, Profile  # noqa: F401
from .registration import Registration  # noqa: F401

__all__ = ["Announcement", "Event", "Identity", "Profile", "Registration"]
