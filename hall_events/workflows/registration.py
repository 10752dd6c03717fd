"""Join / cancel workflow for a single event.

The controller is a thin client over the ``attendance`` table. It keeps at
most one record per (user, event) by checking before inserting, and leaves
capacity enforcement to the store: a capacity rejection comes back as a
:class:`ConstraintViolation` and is reported as ``EVENT_FULL``.

The participant counter is never adjusted locally. After a successful join
or cancel the caller re-fetches the event to get the authoritative count
(see ``needs_refresh`` on the results).
"""

from __future__ import annotations

import enum
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Iterator, Optional

from ..clients.gateway import Filter, Gateway
from ..config import ATTENDANCE_TABLE
from ..errors import ConstraintKind, ConstraintViolation, GatewayError
from ..models.event import Event
from ..models.profile import Identity
from ..models.registration import Registration

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def is_full(event: Event) -> bool:
    """``True`` iff the event has a maximum and current participants reached it."""
    return event.max_participants is not None and event.current_participants >= event.max_participants


def is_deadline_passed(event: Event, now: date | datetime) -> bool:
    """``True`` iff the registration deadline is strictly before *now*'s day."""
    if event.deadline is None:
        return False
    today = now.date() if isinstance(now, datetime) else now
    return event.deadline < today


# ---------------------------------------------------------------------------
# States and results
# ---------------------------------------------------------------------------

class RegistrationState(str, enum.Enum):
    UNREGISTERED = "unregistered"
    REGISTERING = "registering"
    REGISTERED = "registered"
    CANCELLING = "cancelling"

    @property
    def is_transient(self) -> bool:
        return self in (RegistrationState.REGISTERING, RegistrationState.CANCELLING)


class JoinStatus(str, enum.Enum):
    JOINED = "joined"
    ALREADY_REGISTERED = "already_registered"
    EVENT_FULL = "event_full"
    REGISTRATION_CLOSED = "registration_closed"
    NOT_AUTHENTICATED = "not_authenticated"
    FAILED = "failed"
    BUSY = "busy"


class CancelStatus(str, enum.Enum):
    CANCELLED = "cancelled"
    ABORTED = "aborted"
    NOT_FOUND = "not_found"
    NOT_AUTHENTICATED = "not_authenticated"
    FAILED = "failed"
    BUSY = "busy"


@dataclass(slots=True, frozen=True)
class JoinResult:
    status: JoinStatus
    registration: Optional[Registration] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is JoinStatus.JOINED

    @property
    def needs_refresh(self) -> bool:
        """Whether the caller should re-fetch the event's participant count."""
        return self.status in (JoinStatus.JOINED, JoinStatus.EVENT_FULL)


@dataclass(slots=True, frozen=True)
class CancelResult:
    status: CancelStatus
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is CancelStatus.CANCELLED

    @property
    def needs_refresh(self) -> bool:
        return self.status in (CancelStatus.CANCELLED, CancelStatus.NOT_FOUND)


# ---------------------------------------------------------------------------
# Single-flight guard
# ---------------------------------------------------------------------------

class ActionGuard:
    """At most one run of a named action at a time; extra triggers are dropped."""

    def __init__(self, name: str):
        self.name = name
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    @contextmanager
    def attempt(self) -> Iterator[bool]:
        """Yield ``True`` if the action may run, ``False`` if one is in flight."""
        if self._busy:
            logger.debug("Ignoring %s: already in flight", self.name)
            yield False
            return
        self._busy = True
        try:
            yield True
        finally:
            self._busy = False


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

class RegistrationController:
    """Registration state for one event and the signed-in user.

    State machine::

        UNREGISTERED -> REGISTERING -> REGISTERED | UNREGISTERED (error)
        REGISTERED   -> CANCELLING  -> UNREGISTERED | REGISTERED (error)

    While in a transient state the triggering control must be disabled;
    calls that arrive anyway return ``BUSY`` without touching the store.
    """

    def __init__(self, gateway: Gateway, event_id: int):
        self.gateway = gateway
        self.event_id = event_id
        self.state = RegistrationState.UNREGISTERED
        self.registration: Optional[Registration] = None
        self.last_error: Optional[str] = None

    def controls_enabled(self, identity: Optional[Identity]) -> bool:
        return identity is not None and not self.state.is_transient

    def _find(self, identity: Identity, event_id: int) -> list[Registration]:
        rows = self.gateway.query(
            ATTENDANCE_TABLE,
            [Filter("event", "eq", event_id), Filter("user", "eq", identity.id)],
        )
        return [Registration.from_row(row) for row in rows]

    def _settle(self, state: RegistrationState, registration: Optional[Registration]) -> None:
        self.state = state
        self.registration = registration

    def refresh(self, identity: Optional[Identity]) -> Optional[Registration]:
        """Reload whether *identity* is registered for this event."""
        if self.state.is_transient:
            return self.registration
        if identity is None:
            self._settle(RegistrationState.UNREGISTERED, None)
            return None
        try:
            existing = self._find(identity, self.event_id)
        except GatewayError as exc:
            self.last_error = exc.message
            logger.error("Error checking registration for event %s: %s", self.event_id, exc.message)
            return self.registration
        if existing:
            self._settle(RegistrationState.REGISTERED, existing[0])
        else:
            self._settle(RegistrationState.UNREGISTERED, None)
        return self.registration

    def join(self, event: Event, identity: Optional[Identity], now: Optional[datetime] = None) -> JoinResult:
        """Register *identity* for *event*."""
        if event.id != self.event_id:
            raise ValueError(f"Controller for event {self.event_id} cannot join event {event.id}")
        if self.state.is_transient:
            return JoinResult(JoinStatus.BUSY)
        if identity is None:
            return JoinResult(JoinStatus.NOT_AUTHENTICATED, message="Sign in to register")
        # A known registration wins over the full and closed checks.
        if self.state is RegistrationState.REGISTERED and self.registration is not None:
            return JoinResult(JoinStatus.ALREADY_REGISTERED, self.registration, "You have already registered for this event")
        if is_full(event):
            logger.info("Event %s is at capacity (%s/%s)", event.id, event.current_participants, event.max_participants)
            return JoinResult(JoinStatus.EVENT_FULL, message="This event has reached its maximum participants")
        if is_deadline_passed(event, now or datetime.now()):
            return JoinResult(JoinStatus.REGISTRATION_CLOSED, message="Registration deadline has passed")

        previous_state = self.state
        self.state = RegistrationState.REGISTERING
        self.last_error = None

        try:
            existing = self._find(identity, event.id)
        except GatewayError as exc:
            return self._join_failed(previous_state, exc, "Could not check if you have already registered")
        if existing:
            logger.info("User %s already registered for event %s", identity.id, event.id)
            self._settle(RegistrationState.REGISTERED, existing[0])
            return JoinResult(JoinStatus.ALREADY_REGISTERED, existing[0], "You have already registered for this event")

        try:
            row = self.gateway.insert(ATTENDANCE_TABLE, {"user": identity.id, "event": event.id})
        except ConstraintViolation as exc:
            return self._join_rejected(identity, event, exc)
        except GatewayError as exc:
            return self._join_failed(RegistrationState.UNREGISTERED, exc, exc.message)

        registration = Registration.from_row(row)
        self._settle(RegistrationState.REGISTERED, registration)
        logger.info("User %s joined event %s (attendance id=%s)", identity.id, event.id, registration.id)
        return JoinResult(JoinStatus.JOINED, registration)

    def _join_failed(self, state: RegistrationState, exc: GatewayError, message: str) -> JoinResult:
        self.state = state
        self.last_error = message
        logger.error("Error joining event %s: %s", self.event_id, exc.message)
        return JoinResult(JoinStatus.FAILED, message=message)

    def _join_rejected(self, identity: Identity, event: Event, exc: ConstraintViolation) -> JoinResult:
        if exc.kind is ConstraintKind.CAPACITY_FULL:
            self._settle(RegistrationState.UNREGISTERED, None)
            self.last_error = "Event full"
            logger.info("Store rejected join for event %s: capacity reached", event.id)
            return JoinResult(JoinStatus.EVENT_FULL, message="This event has reached its maximum participants")
        if exc.kind is ConstraintKind.DUPLICATE:
            # Another device registered between our check and insert.
            try:
                existing = self._find(identity, event.id)
            except GatewayError as lookup_exc:
                return self._join_failed(RegistrationState.UNREGISTERED, lookup_exc, lookup_exc.message)
            if existing:
                self._settle(RegistrationState.REGISTERED, existing[0])
                return JoinResult(JoinStatus.ALREADY_REGISTERED, existing[0], "You have already registered for this event")
        return self._join_failed(RegistrationState.UNREGISTERED, exc, exc.message)

    def cancel(
        self,
        registration: Optional[Registration],
        identity: Optional[Identity],
        confirm: Optional[Callable[[], bool]] = None,
    ) -> CancelResult:
        """Delete *registration* after *confirm* returns ``True``.

        ``confirm=None`` means the caller has already asked the user. The
        state only becomes ``UNREGISTERED`` once the delete succeeds; any
        failure rolls it back to ``REGISTERED``.
        """
        if self.state.is_transient:
            return CancelResult(CancelStatus.BUSY)
        if identity is None:
            return CancelResult(CancelStatus.NOT_AUTHENTICATED, "Sign in to manage registrations")
        registration = registration or self.registration
        if registration is None:
            return CancelResult(CancelStatus.NOT_FOUND, "Could not find your registration")
        if confirm is not None and not confirm():
            logger.debug("Cancellation of attendance %s declined", registration.id)
            return CancelResult(CancelStatus.ABORTED)

        self.state = RegistrationState.CANCELLING
        self.last_error = None
        try:
            removed = self.gateway.delete(ATTENDANCE_TABLE, registration.id)
        except GatewayError as exc:
            self._settle(RegistrationState.REGISTERED, registration)
            self.last_error = exc.message
            logger.error("Error cancelling attendance %s: %s", registration.id, exc.message)
            return CancelResult(CancelStatus.FAILED, "Could not cancel your registration. Please try again.")

        if removed == 0:
            self._settle(RegistrationState.REGISTERED, registration)
            self.last_error = "Registration no longer exists"
            logger.warning("Attendance %s was already gone on the server", registration.id)
            return CancelResult(CancelStatus.NOT_FOUND, self.last_error)

        self._settle(RegistrationState.UNREGISTERED, None)
        logger.info("Cancelled attendance %s for event %s", registration.id, self.event_id)
        return CancelResult(CancelStatus.CANCELLED)

__all__ = [
    "is_full",
    "is_deadline_passed",
    "RegistrationState",
    "JoinStatus",
    "CancelStatus",
    "JoinResult",
    "CancelResult",
    "ActionGuard",
    "RegistrationController",
]
