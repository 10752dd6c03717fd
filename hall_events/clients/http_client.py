"""Shared HTTP session for downloading remote image files."""

from __future__ import annotations

import requests

_session: requests.Session | None = None


def get_http_session() -> requests.Session:
    """Return a singleton :class:`requests.Session`."""
    global _session
    if _session is None:
        _session = requests.Session()
    return _session

__all__ = ["get_http_session"]
