"""Centralised configuration for hall_events.

Environment variables are loaded once and all related constants are
grouped by concern for easier maintenance.
"""

from __future__ import annotations

import os
from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Load environment variables from `.env` (if present)
# ---------------------------------------------------------------------------
load_dotenv()

# ---------------------------------------------------------------------------
# Core credentials (from environment)
# ---------------------------------------------------------------------------
SUPABASE_URL: str | None = os.getenv("SUPABASE_URL")
SUPABASE_ANON_KEY: str | None = os.getenv("SUPABASE_ANON_KEY")

# ---------------------------------------------------------------------------
# Backend schema
# Table names are case-sensitive on the hosted store.
# ---------------------------------------------------------------------------
EVENTS_TABLE: str = "Events"
ATTENDANCE_TABLE: str = "attendance"
PROFILES_TABLE: str = "profiles"
ANNOUNCEMENTS_TABLE: str = "Announcements"
EVENT_IMAGES_BUCKET: str = "event-images"

EVENT_COLUMNS: str = (
    "id,created_at,Title,Description,Date,Time,Location,image_url,"
    "Deadline,Tags,MaximumParticipants,CurrentParticipants"
)

# Postgres error codes surfaced by the store
CAPACITY_ERROR_CODE: str = "23514"  # check_violation raised by the capacity trigger
DUPLICATE_ERROR_CODE: str = "23505"  # unique_violation on (user, event)

# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------
USER_ROLE: str = "User"
ADMIN_ROLE: str = "Admin"

# ---------------------------------------------------------------------------
# Capacity display
# ---------------------------------------------------------------------------
CAPACITY_WARNING_PERCENT: float = 75.0
CAPACITY_FULL_PERCENT: float = 100.0

# ---------------------------------------------------------------------------
# Card browser gestures and animation
# ---------------------------------------------------------------------------
SWIPE_THRESHOLD_PX: float = 50.0
CARD_WIDTH_PX: float = float(os.getenv("HALL_EVENTS_CARD_WIDTH", "400"))
EXIT_ANIMATION_MS: int = 90
ENTRY_START_SCALE: float = 0.9
MAX_DRAG_ROTATION_DEG: float = 15.0
SPRING_DAMPING: float = 15.0
SPRING_STIFFNESS: float = 150.0

# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------
DEFAULT_EVENT_DURATION_HOURS: int = 2

# ---------------------------------------------------------------------------
# Re-exported names
# ---------------------------------------------------------------------------
__all__ = [
    # credentials
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    # schema
    "EVENTS_TABLE",
    "ATTENDANCE_TABLE",
    "PROFILES_TABLE",
    "ANNOUNCEMENTS_TABLE",
    "EVENT_IMAGES_BUCKET",
    "EVENT_COLUMNS",
    "CAPACITY_ERROR_CODE",
    "DUPLICATE_ERROR_CODE",
    # roles
    "USER_ROLE",
    "ADMIN_ROLE",
    # capacity
    "CAPACITY_WARNING_PERCENT",
    "CAPACITY_FULL_PERCENT",
    # browser
    "SWIPE_THRESHOLD_PX",
    "CARD_WIDTH_PX",
    "EXIT_ANIMATION_MS",
    "ENTRY_START_SCALE",
    "MAX_DRAG_ROTATION_DEG",
    "SPRING_DAMPING",
    "SPRING_STIFFNESS",
    # calendar
    "DEFAULT_EVENT_DURATION_HOURS",
]
