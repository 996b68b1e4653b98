"""
Generic list-management workflow: fetch -> enrich -> edit draft -> save/delete -> refetch.

Why:
    Users, courses and videos screens share one cycle. The concrete screens
    (see `backoffice.screens`) only provide the gateway calls, the blank draft
    and the editable field set; state handling and error strings live here.

Behavior:
    - `fetch_all()` replaces the whole list on success. On failure it sets a
      page-level error and keeps the previous list.
    - `save()` checks presence of required fields, inserts or updates, then
      closes the overlay and refetches. Failures stay in the overlay scope.
    - `delete(id, confirmed)` does nothing unless confirmed. Failures set the
      page-level error and leave the list untouched.
    - Every remote result is dropped once the bound `ViewLifetime` is
      cancelled, so a late response never mutates a view that is gone.
"""

from __future__ import annotations

from dataclasses import dataclass, fields as dc_fields, replace
from enum import Enum
import logging
from typing import Any, Generic, Mapping, Optional, Sequence, TypeVar

from .ports import ConnectionFailure, GatewayError


logger = logging.getLogger("dailylessons.backoffice.workflow")

E = TypeVar("E")


class EditMode(str, Enum):
    CREATE = "create"
    UPDATE = "update"


@dataclass
class EditSession(Generic[E]):
    """Open overlay state: a detached draft plus mode, saving flag and error."""

    draft: E
    mode: EditMode
    saving: bool = False
    error: Optional[str] = None


class ViewLifetime:
    """Cancellation token for one rendered view."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


def error_text(exc: GatewayError, prefix: str) -> str:
    """Human-readable message for the UI; transport failures stay generic."""
    if isinstance(exc, ConnectionFailure):
        return exc.message
    return f"{prefix}: {exc.message}"


class ListWorkflow(Generic[E]):
    """Base class for one list-management screen.

    Subclasses set `label` (plural noun used in messages), `editable_fields`
    and `required_fields`, and implement the `_load/_insert/_update/_remove`
    hooks plus `_blank()`.
    """

    label = "items"
    editable_fields: Sequence[str] = ()
    required_fields: Sequence[str] = ()

    def __init__(self, gateway: Any, *, lifetime: Optional[ViewLifetime] = None) -> None:
        self.gateway = gateway
        self.lifetime = lifetime or ViewLifetime()
        self.items: list[E] = []
        self.error: Optional[str] = None
        self.editing: Optional[EditSession[E]] = None
        self.loading = False

    # --- Hooks -------------------------------------------------------------------

    async def _load(self) -> list[E]:
        raise NotImplementedError

    def _blank(self) -> E:
        raise NotImplementedError

    async def _insert(self, values: Mapping[str, object]) -> None:
        raise NotImplementedError

    async def _update(self, entity_id: str, values: Mapping[str, object]) -> None:
        raise NotImplementedError

    async def _remove(self, entity_id: str) -> None:
        raise NotImplementedError

    # --- Reads -------------------------------------------------------------------

    @property
    def alive(self) -> bool:
        return not self.lifetime.cancelled

    async def fetch_all(self) -> list[E]:
        if not self.alive:
            return self.items
        self.loading = True
        try:
            items = await self._load()
        except GatewayError as exc:
            if self.alive:
                logger.warning("Fetching %s failed: %s", self.label, exc.__class__.__name__)
                self.error = error_text(exc, f"Error fetching {self.label}")
            return self.items
        finally:
            self.loading = False
        if self.alive:
            self.items = items
        return self.items

    def find(self, entity_id: str) -> Optional[E]:
        for item in self.items:
            if str(getattr(item, "id", "")) == str(entity_id):
                return item
        return None

    # --- Draft lifecycle ---------------------------------------------------------

    def begin_create(self) -> EditSession[E]:
        self.editing = EditSession(draft=self._blank(), mode=EditMode.CREATE)
        return self.editing

    def begin_edit(self, entity: E) -> EditSession[E]:
        # Shallow copy: changes to the draft never reach `self.items`
        self.editing = EditSession(draft=replace(entity), mode=EditMode.UPDATE)
        return self.editing

    def apply_changes(self, changes: Mapping[str, object]) -> None:
        """Copy submitted values onto the draft (editable fields only)."""
        if self.editing is None:
            return
        known = {f.name for f in dc_fields(self.editing.draft)}
        updates = {k: v for k, v in changes.items() if k in self.editable_fields and k in known}
        if updates:
            self.editing.draft = replace(self.editing.draft, **updates)

    def cancel(self) -> None:
        self.editing = None

    def missing_fields(self, draft: E) -> list[str]:
        missing = []
        for name in self.required_fields:
            value = getattr(draft, name, None)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        return missing

    def draft_values(self, draft: E) -> dict[str, object]:
        return {name: getattr(draft, name) for name in self.editable_fields}

    # --- Writes ------------------------------------------------------------------

    async def save(self) -> bool:
        """Persist the open draft. Returns True when the overlay closed."""
        session = self.editing
        if session is None:
            return False
        missing = self.missing_fields(session.draft)
        if missing:
            session.error = "Please fill in the required fields: " + ", ".join(missing)
            return False
        session.saving = True
        session.error = None
        try:
            values = self.draft_values(session.draft)
            if session.mode is EditMode.CREATE:
                await self._insert(values)
            else:
                await self._update(str(getattr(session.draft, "id")), values)
        except GatewayError as exc:
            if self.alive:
                logger.warning("Saving %s failed: %s", self.label, exc.__class__.__name__)
                prefix = "Error while creating" if session.mode is EditMode.CREATE else "Error while saving"
                session.error = error_text(exc, prefix)
            return False
        finally:
            session.saving = False
        if not self.alive:
            return False
        self.editing = None
        await self.fetch_all()
        return True

    async def delete(self, entity_id: str, *, confirmed: bool) -> bool:
        if not confirmed:
            return False
        try:
            await self._remove(entity_id)
        except GatewayError as exc:
            if self.alive:
                logger.warning("Deleting from %s failed: %s", self.label, exc.__class__.__name__)
                self.error = error_text(exc, "Error while deleting")
            return False
        if not self.alive:
            return False
        await self.fetch_all()
        return True


__all__ = [
    "EditMode",
    "EditSession",
    "ViewLifetime",
    "ListWorkflow",
    "error_text",
]
