"""Shared string helpers: tag lists and search matching."""

from __future__ import annotations

from typing import FrozenSet, Iterable, Optional

TAG_SEPARATOR = ","


def split_tags(raw: Optional[str]) -> FrozenSet[str]:
    """Split the store's delimited ``Tags`` string into a set of tags.

    Blank entries are dropped and surrounding whitespace removed, so
    ``"Sports, FOC,,Sports"`` becomes ``{"Sports", "FOC"}``.
    """
    if not raw:
        return frozenset()
    return frozenset(tag.strip() for tag in raw.split(TAG_SEPARATOR) if tag.strip())


def join_tags(tags: Iterable[str]) -> Optional[str]:
    """Inverse of :func:`split_tags`; ``None`` when there are no tags."""
    cleaned = sorted({tag.strip() for tag in tags if tag and tag.strip()})
    return f"{TAG_SEPARATOR} ".join(cleaned) if cleaned else None


def contains_ci(haystack: Optional[str], needle: str) -> bool:
    """Case-insensitive substring test that tolerates a missing haystack."""
    return needle.casefold() in (haystack or "").casefold()


def ilike_pattern(term: str) -> str:
    """Wrap *term* for a ``contains`` ILIKE query."""
    return f"%{term}%"

__all__ = ["split_tags", "join_tags", "contains_ci", "ilike_pattern"]
