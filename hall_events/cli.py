"""Command-line interface for hall events.

Usage examples:

    # List upcoming events, optionally filtered by title/location
    python -m hall_events upcoming --search lounge

    # Flip through upcoming events one card at a time (n / p / q)
    python -m hall_events browse

    # Register for / cancel event 12 (prompts for the password)
    python -m hall_events join 12 --email me@example.com
    python -m hall_events cancel 12 --email me@example.com

    # Announcements grouped by recency, this week's calendar, dashboard counts
    python -m hall_events announcements
    python -m hall_events week --offset 1
    python -m hall_events stats
"""

from __future__ import annotations

import argparse
import getpass
import logging
import os
import sys
from datetime import date, datetime
from typing import Callable, List, Optional

from .logging_config import logging as _  # noqa: F401  # ensure config applied early
from .clients.gateway import Gateway
from .errors import HallEventsError
from .models.event import Event
from .services import announcements, calendar, capacity, catalog
from .utils.datetime_utils import countdown
from .workflows.registration import CancelStatus, JoinStatus, is_deadline_passed
from .workflows.session import BrowserSession

logger = logging.getLogger(__name__)


def _describe(event: Event) -> str:
    when = event.date.strftime("%a, %d %b %Y") if event.date else "Date TBA"
    if event.time:
        when += f" · {event.time:%H:%M}"
    spots = capacity.signup_label(event)
    return f"[{event.id}] {event.title} | {when} | {event.location or '-'} | {spots} ({capacity.status(event).value})"


def _card(event: Event, position: int, total: int, now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    left = countdown(event.deadline, now)
    if is_deadline_passed(event, now):
        deadline_line = "Registration Closed"
    else:
        deadline_line = f"Register by: {left}" if left else ""
    lines = [
        f"--- {position + 1}/{total} ---",
        _describe(event),
        event.description or "",
        f"Tags: {', '.join(sorted(event.tags))}" if event.tags else "",
        deadline_line,
    ]
    return "\n".join(line for line in lines if line)


def _ask(prompt: str) -> Callable[[], bool]:
    def confirm() -> bool:
        return input(f"{prompt} [y/N] ").strip().lower() in ("y", "yes")

    return confirm


def _signed_in_session(gateway: Gateway, args: argparse.Namespace) -> BrowserSession:
    session = BrowserSession(gateway)
    if args.email:
        password = os.getenv("HALL_EVENTS_PASSWORD") or getpass.getpass("Password: ")
        session.sign_in(args.email, password)
    else:
        session.restore()
    return session


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_upcoming(gateway: Gateway, args: argparse.Namespace) -> int:
    events = catalog.fetch_upcoming(gateway, datetime.now())
    shown = [event for event in events if catalog.matches_search(event, args.search or "")]
    if not shown:
        print("No events found")
    for event in shown:
        print(_describe(event))
    return 0


def cmd_browse(gateway: Gateway, args: argparse.Namespace) -> int:
    session = BrowserSession(gateway)
    session.search_query = args.search or ""
    session.refresh_events()
    browser = session.browser
    while True:
        if browser.is_empty:
            print("No events")
            return 0
        print(_card(browser.current, browser.position, browser.count))
        choice = input("[n]ext, [p]revious, [q]uit: ").strip().lower()
        if choice == "q":
            return 0
        transition = browser.next() if choice == "n" else browser.previous() if choice == "p" else None
        if transition is None:
            print("No more events in that direction")
            continue
        browser.complete_transition()


def cmd_join(gateway: Gateway, args: argparse.Namespace) -> int:
    session = _signed_in_session(gateway, args)
    event = catalog.fetch_event(gateway, args.event_id)
    if event is None:
        print("Event not found")
        return 1
    result = session.join(event)
    messages = {
        JoinStatus.JOINED: "You have successfully registered for this event!",
        JoinStatus.ALREADY_REGISTERED: "You have already registered for this event.",
        JoinStatus.EVENT_FULL: "Sorry, this event has reached its maximum number of participants.",
    }
    print(messages.get(result.status, result.message or result.status.value))
    return 0 if result.status in messages else 1


def cmd_cancel(gateway: Gateway, args: argparse.Namespace) -> int:
    session = _signed_in_session(gateway, args)
    confirm = None if args.yes else _ask("Are you sure you want to cancel your registration for this event?")
    result = session.cancel(args.event_id, confirm)
    if result.status is CancelStatus.CANCELLED:
        print("Your registration has been canceled.")
        return 0
    if result.status is CancelStatus.ABORTED:
        return 0
    print(result.message or result.status.value)
    return 1


def cmd_announcements(gateway: Gateway, args: argparse.Namespace) -> int:
    items = announcements.fetch_announcements(gateway)
    if not items:
        print("No announcements yet")
    for bucket, group in announcements.group_by_recency(items, datetime.now().astimezone()).items():
        print(f"== {bucket} ==")
        for item in group:
            print(f"* {item.title}\n  {item.message}")
    return 0


def cmd_week(gateway: Gateway, args: argparse.Namespace) -> int:
    if args.mine:
        session = _signed_in_session(gateway, args)
        user_id = session.identity.id if session.identity else None
        entries = calendar.get_user_week_events(gateway, user_id, date.today(), args.offset)
    else:
        entries = calendar.get_week_events(gateway, date.today(), args.offset)
    for entry in entries:
        day = entry.event.date.strftime("%a %d %b") if entry.event.date else "?"
        print(f"{day}  {entry.time_label:<13}  {entry.event.title}")
    return 0


def cmd_stats(gateway: Gateway, args: argparse.Namespace) -> int:
    session = _signed_in_session(gateway, args)
    user_id = session.identity.id if session.identity else None
    stats = calendar.calendar_stats(gateway, date.today(), user_id)
    print(f"Today: {stats.today_events}  This week: {stats.week_events}  My registrations: {stats.user_registrations}")
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hall_events", description="Browse and register for hall events")
    sub = parser.add_subparsers(dest="command", required=True)

    upcoming = sub.add_parser("upcoming", help="List upcoming events")
    upcoming.add_argument("--search", help="Match title or location")
    upcoming.set_defaults(func=cmd_upcoming)

    browse = sub.add_parser("browse", help="Flip through upcoming events one at a time")
    browse.add_argument("--search", help="Match title or location")
    browse.set_defaults(func=cmd_browse)

    for name, func, help_text in (
        ("join", cmd_join, "Register for an event"),
        ("cancel", cmd_cancel, "Cancel a registration"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("event_id", type=int)
        cmd.add_argument("--email", help="Sign in with this account first")
        cmd.set_defaults(func=func)
        if name == "cancel":
            cmd.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")

    ann = sub.add_parser("announcements", help="Show announcements grouped by recency")
    ann.set_defaults(func=cmd_announcements)

    week = sub.add_parser("week", help="Show a calendar week")
    week.add_argument("--offset", type=int, default=0, help="Weeks from the current one")
    week.add_argument("--mine", action="store_true", help="Only events I registered for")
    week.add_argument("--email", help="Sign in with this account first")
    week.set_defaults(func=cmd_week)

    stats = sub.add_parser("stats", help="Dashboard counts")
    stats.add_argument("--email", help="Sign in with this account first")
    stats.set_defaults(func=cmd_stats)
    return parser


def main(argv: Optional[List[str]] = None, gateway: Optional[Gateway] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(gateway or Gateway(), args)
    except HallEventsError as exc:
        logger.error("%s failed: %s", args.command, exc.message)
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1

__all__ = ["build_parser", "main"]
