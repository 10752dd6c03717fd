"""Stateful workflows driven by user actions: registration, card browsing, session."""

from .registration import (  # noqa: F401
    CancelStatus,
    JoinStatus,
    RegistrationController,
    RegistrationState,
    is_deadline_passed,
    is_full,
)
from .card_browser import CardBrowser, Direction  # noqa: F401
from .session import BrowserSession  # noqa: F401

__all__ = [
    "CancelStatus",
    "JoinStatus",
    "RegistrationController",
    "RegistrationState",
    "is_deadline_passed",
    "is_full",
    "CardBrowser",
    "Direction",
    "BrowserSession",
]
