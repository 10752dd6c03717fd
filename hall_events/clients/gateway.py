"""Remote data gateway over the Supabase SDK.

This is the only module that talks to the hosted store. It exposes a small
generic capability (query / insert / update / delete, session identity,
object storage) and turns every SDK failure into :class:`GatewayError`, or
:class:`ConstraintViolation` when the store reports an integrity code.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from supabase import Client, PostgrestAPIError

from ..errors import ConstraintKind, ConstraintViolation, GatewayError
from ..models.profile import Identity
from .supabase_client import get_supabase

logger = logging.getLogger(__name__)

_OPERATORS = frozenset({"eq", "neq", "gt", "gte", "lt", "lte", "in", "ilike", "not_ilike"})


@dataclass(slots=True, frozen=True)
class Filter:
    """A single column predicate, e.g. ``Filter("Date", "gte", "2025-01-01")``."""

    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in _OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op}")


@dataclass(slots=True, frozen=True)
class Order:
    field: str
    ascending: bool = True
    nulls_first: Optional[bool] = None


def _apply_filter(builder: Any, flt: Filter) -> Any:
    if flt.op == "in":
        return builder.in_(flt.field, list(flt.value))
    if flt.op == "not_ilike":
        return builder.not_.ilike(flt.field, flt.value)
    return getattr(builder, flt.op)(flt.field, flt.value)


def _translate(exc: PostgrestAPIError, action: str) -> GatewayError:
    code = getattr(exc, "code", None)
    message = getattr(exc, "message", None) or str(exc)
    kind = ConstraintKind.from_store_code(code)
    if kind is not None:
        return ConstraintViolation(f"{action}: {message}", kind=kind, store_code=code)
    return GatewayError(f"{action}: {message}", store_code=code)


class Gateway:
    """Generic access to the hosted tables, auth session and storage."""

    def __init__(self, client: Client | None = None):
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_supabase()
        return self._client

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def _execute(self, builder: Any, action: str) -> Any:
        try:
            return builder.execute()
        except PostgrestAPIError as exc:
            error = _translate(exc, action)
            logger.error("%s failed (code=%s): %s", action, error.store_code, error.message)
            raise error from exc
        except Exception as exc:
            logger.error("%s failed: %s", action, exc)
            raise GatewayError(f"{action}: {exc}") from exc

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        ordering: Sequence[Order] = (),
        columns: str = "*",
    ) -> List[Dict[str, Any]]:
        """Return every row of *collection* matching all *filters*, in *ordering*."""
        builder = self.client.table(collection).select(columns)
        for flt in filters:
            builder = _apply_filter(builder, flt)
        for order in ordering:
            kwargs: Dict[str, Any] = {"desc": not order.ascending}
            if order.nulls_first is not None:
                kwargs["nullsfirst"] = order.nulls_first
            builder = builder.order(order.field, **kwargs)
        response = self._execute(builder, f"query {collection}")
        rows = response.data or []
        logger.debug("query %s returned %d rows", collection, len(rows))
        return rows

    def fetch_one(self, collection: str, record_id: Any, columns: str = "*") -> Optional[Dict[str, Any]]:
        rows = self.query(collection, [Filter("id", "eq", record_id)], columns=columns)
        return rows[0] if rows else None

    def count(self, collection: str, filters: Sequence[Filter] = ()) -> int:
        builder = self.client.table(collection).select("id", count="exact")
        for flt in filters:
            builder = _apply_filter(builder, flt)
        response = self._execute(builder, f"count {collection}")
        return int(response.count or 0)

    def insert(self, collection: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """Insert *record* and return the stored row."""
        builder = self.client.table(collection).insert(record)
        response = self._execute(builder, f"insert into {collection}")
        rows = response.data or []
        if not rows:
            raise GatewayError(f"insert into {collection}: store returned no row")
        logger.info("Inserted row into %s with id=%s", collection, rows[0].get("id"))
        return rows[0]

    def update(self, collection: str, record_id: Any, partial: Dict[str, Any]) -> int:
        """Update one row by id and return the number of rows changed."""
        builder = self.client.table(collection).update(partial).eq("id", record_id)
        response = self._execute(builder, f"update {collection}")
        changed = len(response.data or [])
        logger.info("Updated %d row(s) in %s for id=%s", changed, collection, record_id)
        return changed

    def delete(self, collection: str, record_id: Any) -> int:
        """Delete one row by id and return the number of rows removed."""
        builder = self.client.table(collection).delete().eq("id", record_id)
        response = self._execute(builder, f"delete from {collection}")
        removed = len(response.data or [])
        logger.info("Deleted %d row(s) from %s for id=%s", removed, collection, record_id)
        return removed

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def current_identity(self) -> Optional[Identity]:
        """Return the signed-in user, or ``None`` when there is no session."""
        try:
            session = self.client.auth.get_session()
        except Exception as exc:
            logger.error("Could not read auth session: %s", exc)
            raise GatewayError(f"read session: {exc}") from exc
        user = getattr(session, "user", None) if session else None
        if user is None:
            return None
        return Identity(id=str(user.id), email=user.email or "")

    def sign_in(self, email: str, password: str) -> Identity:
        try:
            response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as exc:
            logger.error("Sign-in failed for %s: %s", email, exc)
            raise GatewayError(f"sign in: {exc}") from exc
        user = response.user
        if user is None:
            raise GatewayError("sign in: no user returned")
        logger.info("Signed in as %s", email)
        return Identity(id=str(user.id), email=user.email or email)

    def sign_up(self, email: str, password: str) -> Identity:
        try:
            response = self.client.auth.sign_up({"email": email, "password": password})
        except Exception as exc:
            logger.error("Sign-up failed for %s: %s", email, exc)
            raise GatewayError(f"sign up: {exc}") from exc
        user = response.user
        if user is None:
            raise GatewayError("sign up: no user returned")
        logger.info("Signed up %s", email)
        return Identity(id=str(user.id), email=user.email or email)

    def sign_out(self) -> None:
        try:
            self.client.auth.sign_out()
        except Exception as exc:
            logger.error("Sign-out failed: %s", exc)
            raise GatewayError(f"sign out: {exc}") from exc
        logger.info("Signed out")

    # ------------------------------------------------------------------
    # Object storage
    # ------------------------------------------------------------------

    def upload_file(self, bucket: str, name: str, data: bytes, content_type: str) -> str:
        """Upload *data* as *name* into *bucket* and return its public URL."""
        store = self.client.storage.from_(bucket)
        try:
            store.upload(path=name, file=data, file_options={"content-type": content_type})
            url = store.get_public_url(name)
        except Exception as exc:
            logger.error("Upload of %s to %s failed: %s", name, bucket, exc)
            raise GatewayError(f"upload {name}: {exc}") from exc
        logger.info("Uploaded %s (%d bytes) to %s", name, len(data), bucket)
        return url

    def remove_files(self, bucket: str, names: Iterable[str]) -> None:
        names = list(names)
        try:
            self.client.storage.from_(bucket).remove(names)
        except Exception as exc:
            logger.error("Removing %s from %s failed: %s", names, bucket, exc)
            raise GatewayError(f"remove {names}: {exc}") from exc
        logger.info("Removed %s from %s", names, bucket)

__all__ = ["Filter", "Order", "Gateway"]
