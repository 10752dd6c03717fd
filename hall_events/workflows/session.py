"""Per-session state shared by the screens: identity, card browser, registrations.

The browser position lives here instead of in a module-level global, and is
reset explicitly whenever the signed-in user changes.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from ..clients.gateway import Gateway
from ..config import USER_ROLE
from ..errors import GatewayError
from ..models.event import Event
from ..models.profile import Identity, Profile
from ..services import catalog, profiles
from .card_browser import CardBrowser
from .registration import ActionGuard, CancelResult, JoinResult, RegistrationController

logger = logging.getLogger(__name__)


class BrowserSession:
    """Everything one signed-in (or anonymous) user sees across screens."""

    def __init__(self, gateway: Gateway, browser: Optional[CardBrowser] = None):
        self.gateway = gateway
        self.browser = browser or CardBrowser()
        self.identity: Optional[Identity] = None
        self.profile: Optional[Profile] = None
        self.events: List[Event] = []
        self.search_query = ""
        self._controllers: Dict[int, RegistrationController] = {}
        self._fetch_guard = ActionGuard("fetch events")

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def restore(self) -> Optional[Identity]:
        """Pick up an existing auth session, if any."""
        try:
            identity = self.gateway.current_identity()
        except GatewayError as exc:
            logger.error("Error fetching current user: %s", exc.message)
            identity = None
        self._set_identity(identity)
        return identity

    def sign_in(self, email: str, password: str, role: str = USER_ROLE) -> Profile:
        identity, profile = profiles.sign_in(self.gateway, email, password, role)
        self._set_identity(identity)
        self.profile = profile
        return profile

    def sign_out(self) -> None:
        self.gateway.sign_out()
        self._set_identity(None)

    def _set_identity(self, identity: Optional[Identity]) -> None:
        previous = self.identity.id if self.identity else None
        current = identity.id if identity else None
        self.identity = identity
        if previous != current:
            self.profile = None
            self._controllers.clear()
            self.browser.reset()
            logger.info("Session user changed from %s to %s", previous, current)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def refresh_events(self, now: Optional[datetime] = None) -> bool:
        """Reload upcoming events into the browser. ``False`` if a fetch is already running."""
        with self._fetch_guard.attempt() as allowed:
            if not allowed:
                return False
            moment = now or datetime.now()
            self.events = catalog.fetch_upcoming(self.gateway, moment)
            self.browser.set_events(self.events, self.search_query, moment)
            return True

    def search(self, query: str, now: Optional[datetime] = None) -> None:
        self.search_query = query
        self.browser.set_events(self.events, query, now or datetime.now())

    def _replace_event(self, event_id: int) -> Optional[Event]:
        try:
            fresh = catalog.fetch_event(self.gateway, event_id)
        except GatewayError as exc:
            logger.error("Error refreshing event %s: %s", event_id, exc.message)
            return None
        if fresh is not None:
            self.events = [fresh if event.id == event_id else event for event in self.events]
            self.browser.filtered_events = [
                fresh if event.id == event_id else event for event in self.browser.filtered_events
            ]
        return fresh

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def controller_for(self, event_id: int) -> RegistrationController:
        controller = self._controllers.get(event_id)
        if controller is None:
            controller = RegistrationController(self.gateway, event_id)
            controller.refresh(self.identity)
            self._controllers[event_id] = controller
        return controller

    def join(self, event: Event, now: Optional[datetime] = None) -> JoinResult:
        """Join *event* and re-fetch it so counts come from the store."""
        result = self.controller_for(event.id).join(event, self.identity, now)
        if result.needs_refresh:
            self._replace_event(event.id)
        return result

    def cancel(self, event_id: int, confirm: Optional[Callable[[], bool]] = None) -> CancelResult:
        controller = self.controller_for(event_id)
        result = controller.cancel(controller.registration, self.identity, confirm)
        if result.needs_refresh:
            self._replace_event(event_id)
            if not result.ok:
                controller.refresh(self.identity)
        return result

__all__ = ["BrowserSession"]
