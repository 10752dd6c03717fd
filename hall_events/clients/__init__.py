"""Convenience re-exports for singleton SDK accessors and the data gateway."""

from .supabase_client import get_supabase  # noqa: F401
from .http_client import get_http_session  # noqa: F401
from .gateway import Filter, Gateway, Order  # noqa: F401

__all__ = [
    "get_supabase",
    "get_http_session",
    "Filter",
    "Gateway",
    "Order",
]
