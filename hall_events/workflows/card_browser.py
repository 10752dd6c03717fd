"""Single-card event browser with swipe navigation.

The browser is a pure state object: it owns the filtered, date-sorted event
list, the current position and the visual state of the top card. It does
not animate anything itself. ``next()``/``previous()`` and gesture releases
return a :class:`Transition` carrying an :class:`AnimationPlan`; the UI runs
the animation and calls :meth:`CardBrowser.complete_transition` when done.
Listeners registered with :meth:`CardBrowser.subscribe` receive a
:class:`BrowserEvent` for every discrete change.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, FrozenSet, Iterable, List, Optional, Union

from ..config import (
    CARD_WIDTH_PX,
    ENTRY_START_SCALE,
    EXIT_ANIMATION_MS,
    MAX_DRAG_ROTATION_DEG,
    SPRING_DAMPING,
    SPRING_STIFFNESS,
    SWIPE_THRESHOLD_PX,
)
from ..models.event import Event
from ..services.catalog import matches_search, sort_by_date

logger = logging.getLogger(__name__)


class Direction(str, enum.Enum):
    NEXT = "next"
    PREVIOUS = "previous"


@dataclass(slots=True, frozen=True)
class CardVisuals:
    offset_x: float = 0.0
    rotation: float = 0.0
    scale: float = 1.0
    opacity: float = 1.0


REST = CardVisuals()


class AnimationKind(str, enum.Enum):
    TIMING = "timing"
    SPRING = "spring"


@dataclass(slots=True, frozen=True)
class AnimationPlan:
    """What the rendering layer should animate.

    ``exit_to`` is the target of the outgoing card, ``enter_from`` the start
    of the incoming one (which always ends at rest). A spring plan only moves
    the current card back to rest.
    """

    kind: AnimationKind
    exit_to: CardVisuals = REST
    enter_from: CardVisuals = REST
    duration_ms: int = 0
    damping: float = SPRING_DAMPING
    stiffness: float = SPRING_STIFFNESS


@dataclass(slots=True, frozen=True)
class Transition:
    direction: Direction
    from_position: int
    to_position: int
    plan: AnimationPlan


class BrowserEventKind(str, enum.Enum):
    TRANSITION_STARTED = "transition_started"
    TRANSITION_COMPLETED = "transition_completed"
    SPRING_BACK = "spring_back"
    POSITION_RESET = "position_reset"


@dataclass(slots=True, frozen=True)
class BrowserEvent:
    kind: BrowserEventKind
    position: int
    transition: Optional[Transition] = None


Listener = Callable[[BrowserEvent], None]


class CardBrowser:
    """Position over the upcoming, search-filtered events, one card at a time."""

    def __init__(self, card_width: float = CARD_WIDTH_PX, swipe_threshold: float = SWIPE_THRESHOLD_PX):
        self.card_width = card_width
        self.swipe_threshold = swipe_threshold
        self.filtered_events: List[Event] = []
        self.position = 0
        self.visuals = REST
        self.in_flight: Optional[Transition] = None
        self.dragging = False
        self._last_membership: FrozenSet[int] = frozenset()
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, kind: BrowserEventKind, transition: Optional[Transition] = None) -> None:
        event = BrowserEvent(kind, self.position, transition)
        for listener in list(self._listeners):
            listener(event)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def count(self) -> int:
        return len(self.filtered_events)

    @property
    def is_empty(self) -> bool:
        return not self.filtered_events

    @property
    def current(self) -> Optional[Event]:
        if self.is_empty:
            return None
        return self.filtered_events[self.position]

    @property
    def can_go_next(self) -> bool:
        return self.position < self.count - 1

    @property
    def can_go_previous(self) -> bool:
        return not self.is_empty and self.position > 0

    # ------------------------------------------------------------------
    # Position changes
    # ------------------------------------------------------------------

    def _move_to(self, position: int) -> None:
        # Visuals go back to rest before the new card is shown.
        self.visuals = REST
        self.dragging = False
        self.in_flight = None
        self.position = position

    def reset(self) -> None:
        """Jump back to the first card, dropping any transition or drag."""
        self._move_to(0)
        logger.debug("Card browser reset to position 0")
        self._emit(BrowserEventKind.POSITION_RESET)

    def set_events(self, events: Iterable[Event], search_query: str = "", now: date | datetime | None = None) -> None:
        """Recompute the visible list: upcoming events matching *search_query*, by date."""
        moment = now or datetime.now()
        today = moment.date() if isinstance(moment, datetime) else moment
        was_empty = self.is_empty
        self.filtered_events = sort_by_date(
            event for event in events if event.is_upcoming(today) and matches_search(event, search_query)
        )
        membership = frozenset(event.id for event in self.filtered_events)

        if self.in_flight is not None or self.dragging:
            self._move_to(self.position)

        if self.is_empty:
            if self.position != 0:
                self.reset()
        elif self.position >= self.count:
            self.reset()
        elif was_empty and membership and membership != self._last_membership:
            self.reset()

        if membership:
            self._last_membership = membership
        logger.debug("Card browser holds %d events, position %d", self.count, self.position)

    # ------------------------------------------------------------------
    # Button navigation
    # ------------------------------------------------------------------

    def _plan_for(self, direction: Direction) -> AnimationPlan:
        sign = -1.0 if direction is Direction.NEXT else 1.0
        return AnimationPlan(
            kind=AnimationKind.TIMING,
            exit_to=CardVisuals(
                offset_x=sign * self.card_width,
                rotation=sign * MAX_DRAG_ROTATION_DEG,
                scale=1.0,
                opacity=0.0,
            ),
            enter_from=CardVisuals(scale=ENTRY_START_SCALE, opacity=0.0),
            duration_ms=EXIT_ANIMATION_MS,
        )

    def _start(self, direction: Direction) -> Optional[Transition]:
        if self.is_empty or self.in_flight is not None:
            return None
        allowed = self.can_go_next if direction is Direction.NEXT else self.can_go_previous
        if not allowed:
            return None
        step = 1 if direction is Direction.NEXT else -1
        transition = Transition(direction, self.position, self.position + step, self._plan_for(direction))
        self.in_flight = transition
        self.dragging = False
        self._emit(BrowserEventKind.TRANSITION_STARTED, transition)
        return transition

    def next(self) -> Optional[Transition]:
        """Start moving to the next card; ``None`` if there is none or one is in flight."""
        return self._start(Direction.NEXT)

    def previous(self) -> Optional[Transition]:
        return self._start(Direction.PREVIOUS)

    def complete_transition(self) -> int:
        """Finish the in-flight transition and return the new position."""
        transition = self.in_flight
        if transition is None:
            return self.position
        self._move_to(transition.to_position)
        self._emit(BrowserEventKind.TRANSITION_COMPLETED, transition)
        return self.position

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------

    def begin_drag(self) -> bool:
        """Start tracking a press-drag; refused while empty or animating."""
        if self.is_empty or self.in_flight is not None:
            return False
        self.dragging = True
        return True

    def drag_visuals(self, dx: float) -> CardVisuals:
        """Visual state of the top card for a horizontal drag of *dx* pixels."""
        ratio = max(-1.0, min(dx / self.card_width, 1.0)) if self.card_width else 0.0
        return CardVisuals(
            offset_x=dx,
            rotation=ratio * MAX_DRAG_ROTATION_DEG,
            scale=1.0,
            opacity=1.0 - 0.5 * abs(ratio),
        )

    def drag(self, dx: float, dy: float = 0.0) -> CardVisuals:
        if not self.dragging:
            return self.visuals
        self.visuals = self.drag_visuals(dx)
        return self.visuals

    def release(self, dx: float, dy: float = 0.0) -> Union[Transition, AnimationPlan, None]:
        """End the drag.

        Returns a :class:`Transition` when the swipe commits, a spring
        :class:`AnimationPlan` back to rest otherwise, or ``None`` if no drag
        was active. A left swipe (negative *dx*) goes to the next card.
        """
        if not self.dragging:
            return None
        self.dragging = False
        if abs(dx) > self.swipe_threshold and abs(dx) > abs(dy):
            direction = Direction.NEXT if dx < 0 else Direction.PREVIOUS
            transition = self._start(direction)
            if transition is not None:
                return transition
        self.visuals = REST
        self._emit(BrowserEventKind.SPRING_BACK)
        return AnimationPlan(kind=AnimationKind.SPRING)

__all__ = [
    "Direction",
    "CardVisuals",
    "REST",
    "AnimationKind",
    "AnimationPlan",
    "Transition",
    "BrowserEventKind",
    "BrowserEvent",
    "CardBrowser",
]
