"""Administrator event management: validation, create/update, images, sign-ups."""

from __future__ import annotations

import logging
import mimetypes
import re
import secrets
import time
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import List, Optional

from ..clients.gateway import Filter, Gateway, Order
from ..clients.http_client import get_http_session
from ..config import ATTENDANCE_TABLE, EVENT_IMAGES_BUCKET, EVENTS_TABLE
from ..errors import GatewayError, ValidationError
from ..models.event import Event
from ..models.registration import Registration
from ..utils.datetime_utils import parse_date, parse_time
from ..utils.text_utils import split_tags

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


@dataclass(slots=True)
class EventForm:
    """Raw text fields of the create/edit event form."""

    title: str = ""
    date: str = ""
    time: str = ""
    details: str = ""
    location: str = ""
    deadline: str = ""
    tags: str = ""
    maximum: str = ""


def validate_event_form(form: EventForm) -> Event:
    """Check *form* and return an unsaved :class:`Event` (``id`` 0).

    Raises :class:`ValidationError` naming the first offending field.
    """
    if not form.title.strip() or not form.date.strip() or not form.time.strip() or not form.details.strip():
        raise ValidationError("Please fill in all required fields.")
    if not _DATE_RE.match(form.date.strip()) or parse_date(form.date) is None:
        raise ValidationError("Date must be in YYYY-MM-DD format.", field="date")
    if not _TIME_RE.match(form.time.strip()):
        raise ValidationError("Time must be in HH:MM (24hr) format.", field="time")

    deadline: Optional[date] = None
    if form.deadline.strip():
        if not _DATE_RE.match(form.deadline.strip()) or parse_date(form.deadline) is None:
            raise ValidationError("Deadline must be in YYYY-MM-DD format.", field="deadline")
        deadline = parse_date(form.deadline)

    maximum: Optional[int] = None
    if form.maximum.strip():
        try:
            maximum = int(form.maximum.strip())
        except ValueError:
            maximum = 0
        if maximum <= 0:
            raise ValidationError("Maximum must be a positive number.", field="maximum")

    return Event(
        id=0,
        title=form.title.strip(),
        description=form.details.strip(),
        date=parse_date(form.date),
        time=parse_time(form.time.strip()),
        location=form.location.strip(),
        tags=split_tags(form.tags),
        deadline=deadline,
        max_participants=maximum,
    )


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

def _read_image(source: str) -> bytes:
    if source.startswith(("http://", "https://")):
        response = get_http_session().get(source, timeout=30)
        if response.status_code != 200:
            logger.error("Error downloading image %s: %s", source, response.status_code)
            raise GatewayError(f"download {source}: HTTP {response.status_code}")
        return response.content
    return Path(source).read_bytes()


def image_file_name(source: str) -> str:
    """Unique storage name ``<millis>-<random>.<ext>`` keeping the source extension."""
    ext = Path(source.split("?", 1)[0]).suffix.lstrip(".").lower() or "jpg"
    return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}.{ext}"


def upload_event_image(gateway: Gateway, source: str) -> str:
    """Upload a local file or remote URL to the event image bucket; return its public URL."""
    name = image_file_name(source)
    content_type = mimetypes.guess_type(name)[0] or f"image/{name.rsplit('.', 1)[-1]}"
    try:
        data = _read_image(source)
    except OSError as exc:
        logger.error("Could not read image %s: %s", source, exc)
        raise GatewayError(f"read {source}: {exc}") from exc
    return gateway.upload_file(EVENT_IMAGES_BUCKET, name, data, content_type)


def is_hosted_image(url: Optional[str]) -> bool:
    return bool(url) and "supabase" in url and f"/{EVENT_IMAGES_BUCKET}/" in url


def remove_event_image(gateway: Gateway, url: Optional[str]) -> None:
    """Delete a previously uploaded image. Failures are logged, not raised."""
    if not is_hosted_image(url):
        return
    name = url.rstrip("/").rsplit("/", 1)[-1]
    try:
        gateway.remove_files(EVENT_IMAGES_BUCKET, [name])
    except GatewayError as exc:
        logger.warning("Old image %s was not removed: %s", name, exc.message)


# ---------------------------------------------------------------------------
# Create / update
# ---------------------------------------------------------------------------

def create_event(gateway: Gateway, form: EventForm, image_source: Optional[str] = None) -> Event:
    """Validate *form*, upload the optional image and insert the event.

    ``CurrentParticipants`` always starts at 0.
    """
    event = validate_event_form(form)
    if image_source:
        event.image_url = upload_event_image(gateway, image_source)
    payload = event.to_row()
    payload["CurrentParticipants"] = 0
    row = gateway.insert(EVENTS_TABLE, payload)
    created = Event.from_row(row)
    logger.info("Created event %s: %s", created.id, created.title)
    return created


def update_event(
    gateway: Gateway,
    event_id: int,
    form: EventForm,
    image_source: Optional[str] = None,
    old_image_url: Optional[str] = None,
) -> Event:
    """Validate *form* and update event *event_id*.

    A new *image_source* replaces *old_image_url*, which is then removed from
    storage. Participant counts are never written here.
    """
    event = validate_event_form(form)
    event.id = event_id
    event.image_url = old_image_url
    new_image = bool(image_source) and image_source != old_image_url
    if new_image:
        event.image_url = upload_event_image(gateway, image_source)
    changed = gateway.update(EVENTS_TABLE, event_id, event.to_row())
    if changed == 0:
        raise GatewayError(f"update event {event_id}: no such event")
    if new_image:
        remove_event_image(gateway, old_image_url)
    logger.info("Updated event %s", event_id)
    return event


def list_signups(gateway: Gateway, event_id: int) -> List[Registration]:
    """Attendance records for *event_id*, oldest first."""
    rows = gateway.query(
        ATTENDANCE_TABLE,
        [Filter("event", "eq", event_id)],
        [Order("created_at", ascending=True)],
    )
    logger.info("Event %s has %d sign-ups", event_id, len(rows))
    return [Registration.from_row(row) for row in rows]

__all__ = [
    "EventForm",
    "validate_event_form",
    "image_file_name",
    "upload_event_image",
    "is_hosted_image",
    "remove_event_image",
    "create_event",
    "update_event",
    "list_signups",
]
