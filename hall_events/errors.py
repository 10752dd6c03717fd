"""Exception hierarchy for hall_events.

Every failure of the remote store is raised as :class:`GatewayError`.
Constraint violations get their own subclass so callers can map them to
expected outcomes (event full, already registered) instead of generic errors.
"""

from __future__ import annotations

import enum
from typing import Any, Dict, Optional

from .config import CAPACITY_ERROR_CODE, DUPLICATE_ERROR_CODE


class HallEventsError(Exception):
    """Base exception for all hall_events errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "HALL_EVENTS_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class GatewayError(HallEventsError):
    """A call to the remote store failed (network, auth or database)."""

    def __init__(self, message: str, store_code: Optional[str] = None, **kwargs: Any):
        self.store_code = store_code
        super().__init__(message, error_code="GATEWAY_ERROR", **kwargs)


class ConstraintKind(str, enum.Enum):
    CAPACITY_FULL = "capacity_full"
    DUPLICATE = "duplicate"
    OTHER = "other"

    @classmethod
    def from_store_code(cls, code: Optional[str]) -> Optional["ConstraintKind"]:
        """Return the kind for a Postgres SQLSTATE, or ``None`` if it is no constraint."""
        if code == CAPACITY_ERROR_CODE:
            return cls.CAPACITY_FULL
        if code == DUPLICATE_ERROR_CODE:
            return cls.DUPLICATE
        if code and code.startswith("23"):
            return cls.OTHER
        return None


class ConstraintViolation(GatewayError):
    """The store rejected a write because of an integrity constraint."""

    def __init__(self, message: str, kind: ConstraintKind, store_code: Optional[str] = None):
        super().__init__(message, store_code=store_code, details={"kind": kind.value})
        self.kind = kind
        self.error_code = "CONSTRAINT_VIOLATION"


class NotAuthenticated(HallEventsError):
    """The operation needs a signed-in user and there is none."""

    def __init__(self, message: str = "No active session"):
        super().__init__(message, error_code="NOT_AUTHENTICATED")


class ValidationError(HallEventsError):
    """User supplied data failed validation before reaching the store."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, error_code="VALIDATION_ERROR", details={"field": field})
        self.field = field


__all__ = [
    "HallEventsError",
    "GatewayError",
    "ConstraintKind",
    "ConstraintViolation",
    "NotAuthenticated",
    "ValidationError",
]
