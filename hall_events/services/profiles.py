"""User profiles, roles and sign-in/sign-up rules."""

from __future__ import annotations

import logging
from typing import Optional

from ..clients.gateway import Gateway
from ..config import ADMIN_ROLE, PROFILES_TABLE, USER_ROLE
from ..errors import GatewayError, NotAuthenticated, ValidationError
from ..models.profile import Identity, Profile

logger = logging.getLogger(__name__)


def fetch_profile(gateway: Gateway, identity: Optional[Identity]) -> Profile:
    """Return the profile of *identity*, creating a blank ``User`` row if missing."""
    if identity is None:
        raise NotAuthenticated("Please log in first.")
    row = gateway.fetch_one(PROFILES_TABLE, identity.id)
    if row is not None:
        return Profile.from_row(row)
    logger.info("No profile for %s, creating one", identity.id)
    profile = Profile(id=identity.id, role=USER_ROLE)
    gateway.insert(PROFILES_TABLE, profile.to_row())
    return profile


def update_profile(
    gateway: Gateway,
    identity: Optional[Identity],
    username: str,
    school: str,
    course: str,
    avatar_url: Optional[str] = None,
) -> Profile:
    """Save the editable profile fields. The role is never changed here."""
    profile = fetch_profile(gateway, identity)
    profile.username = username.strip()
    profile.school = school.strip()
    profile.course = course.strip()
    if avatar_url is not None:
        profile.avatar_url = avatar_url
    partial = {
        "username": profile.username,
        "school": profile.school,
        "course": profile.course,
        "avatar_url": profile.avatar_url,
    }
    gateway.update(PROFILES_TABLE, profile.id, partial)
    logger.info("Updated profile %s", profile.id)
    return profile


def sign_up(gateway: Gateway, email: str, password: str, role: str = USER_ROLE) -> Identity:
    """Create a student account and its ``User`` profile.

    Administrator accounts are provisioned out of band and cannot sign up.
    """
    if role == ADMIN_ROLE:
        raise ValidationError("Admins cannot sign up. Use the official hall admin account.", field="role")
    if not email.strip() or not password:
        raise ValidationError("Please enter both email and password.")
    identity = gateway.sign_up(email.strip(), password)
    try:
        gateway.insert(PROFILES_TABLE, Profile(id=identity.id, role=USER_ROLE).to_row())
    except GatewayError as exc:
        # The account exists even if the profile row failed; fetch_profile recreates it.
        logger.warning("Profile row for %s not created: %s", identity.id, exc.message)
    return identity


def sign_in(gateway: Gateway, email: str, password: str, role: str = USER_ROLE) -> tuple[Identity, Profile]:
    """Sign in and check that the stored role matches the one selected.

    A mismatch signs the session out again and raises :class:`NotAuthenticated`.
    """
    if not email.strip() or not password:
        raise ValidationError("Please enter both email and password.")
    identity = gateway.sign_in(email.strip(), password)
    profile = fetch_profile(gateway, identity)
    if profile.role != role:
        logger.warning("Role mismatch for %s: selected %s, stored %s", email, role, profile.role)
        gateway.sign_out()
        raise NotAuthenticated(f"This account is not registered as {role}.")
    return identity, profile

__all__ = ["fetch_profile", "update_profile", "sign_up", "sign_in"]
