"""
Supabase-backed data gateway for the back-office tables.

This gateway implements DataGatewayProtocol on top of two async Supabase
clients:

- `client`: standard privilege (anon key + the signed-in user's JWT). Every
  table query goes through it so Row Level Security applies.
- `elevated`: optional service-role client, used only for the auth admin
  user listing.

The clients are duck-typed (anything exposing `.table(name)` query builders
with an awaitable `.execute()`, and `.auth.admin.list_users()`), which keeps
tests free of network access.

Errors:
    Transport problems become `ConnectionFailure`; any other client exception
    becomes `QueryError` carrying the backend message. Keyed updates/deletes
    that match no row raise `NotFoundError`.
"""
from __future__ import annotations

from collections import defaultdict
import logging
from typing import Any, Mapping, Optional, Sequence

import httpx

from .ports import (
    ConnectionFailure,
    ContentCounts,
    Course,
    NotConfiguredError,
    NotFoundError,
    QueryError,
    Role,
    Section,
    User,
    Video,
)
from . import rows


logger = logging.getLogger("dailylessons.backoffice.gateway")

_USER_SELECT = "id, user_id, role_id, email, roles:role_id(id, role)"
_SECTION_SELECT = "id, titre, lesson_id, created_at, lesson:lesson_id(id, titre)"
_VIDEO_SELECT = "*, section:section_id(id, titre, lesson:lesson_id(id, titre))"
_COUNTS_SELECT = "id, lesson_id, Videos(count)"


class SupabaseGateway:
    """Data gateway using a supabase AsyncClient for all table operations."""

    def __init__(self, client: Any, elevated: Any | None = None):
        self._client = client
        self._elevated = elevated

    # --- Helpers -----------------------------------------------------------------

    def _table(self, name: str) -> Any:
        return self._client.table(name)

    async def _execute(self, query: Any, *, what: str) -> Any:
        try:
            response = await query.execute()
        except httpx.TransportError as exc:
            logger.warning("Supabase %s unreachable: %s", what, exc.__class__.__name__)
            raise ConnectionFailure() from exc
        except Exception as exc:
            message = getattr(exc, "message", None) or str(exc) or exc.__class__.__name__
            logger.warning("Supabase %s failed: %s: %s", what, exc.__class__.__name__, message)
            raise QueryError(str(message)) from exc
        return response

    @staticmethod
    def _data(response: Any) -> list[Mapping[str, Any]]:
        data = getattr(response, "data", None)
        if isinstance(data, list):
            return [row for row in data if isinstance(row, Mapping)]
        if isinstance(data, Mapping):
            return [data]
        return []

    async def _select(self, table: str, columns: str, *, order: str, desc: bool = False) -> list[Mapping[str, Any]]:
        query = self._table(table).select(columns).order(order, desc=desc)
        return self._data(await self._execute(query, what=f"select {table}"))

    async def _insert(self, table: str, values: Mapping[str, object]) -> None:
        await self._execute(self._table(table).insert(dict(values)), what=f"insert {table}")

    async def _update(self, table: str, row_id: str, values: Mapping[str, object]) -> None:
        query = self._table(table).update(dict(values)).eq("id", row_id)
        response = await self._execute(query, what=f"update {table}")
        if not self._data(response):
            raise NotFoundError(f"No row with id {row_id} in {table}")

    async def _delete(self, table: str, row_id: str) -> None:
        query = self._table(table).delete().eq("id", row_id)
        response = await self._execute(query, what=f"delete {table}")
        if not self._data(response):
            raise NotFoundError(f"No row with id {row_id} in {table}")

    # --- Users & roles -----------------------------------------------------------

    async def list_users(self) -> list[User]:
        data = await self._select(rows.TABLE_USERS, _USER_SELECT, order="id")
        return [rows.user_from_row(row) for row in data]

    async def list_roles(self) -> list[Role]:
        data = await self._select(rows.TABLE_ROLES, "id, role", order="id")
        return [rows.role_from_row(row) for row in data]

    async def insert_user(self, fields: Mapping[str, object]) -> None:
        await self._insert(rows.TABLE_USERS, rows.to_columns(fields, rows.USER_COLUMNS))

    async def update_user(self, user_id: str, fields: Mapping[str, object]) -> None:
        await self._update(rows.TABLE_USERS, user_id, rows.to_columns(fields, rows.USER_COLUMNS))

    async def delete_user(self, user_id: str) -> None:
        await self._delete(rows.TABLE_USERS, user_id)

    async def list_auth_accounts(self) -> dict[str, Optional[str]]:
        """List auth-provider accounts via the service-role client.

        Permissions:
            Requires the elevated client; raises NotConfiguredError otherwise.
        """
        if self._elevated is None:
            raise NotConfiguredError("Elevated client is not configured")
        try:
            accounts = await self._elevated.auth.admin.list_users()
        except httpx.TransportError as exc:
            logger.warning("Supabase auth admin unreachable: %s", exc.__class__.__name__)
            raise ConnectionFailure() from exc
        except Exception as exc:
            message = getattr(exc, "message", None) or str(exc) or exc.__class__.__name__
            logger.warning("Supabase auth admin listing failed: %s", exc.__class__.__name__)
            raise QueryError(str(message)) from exc
        result: dict[str, Optional[str]] = {}
        for account in accounts or []:
            account_id = getattr(account, "id", None)
            if not account_id:
                continue
            last = getattr(account, "last_sign_in_at", None)
            if last is not None and hasattr(last, "isoformat"):
                last = last.isoformat()
            result[str(account_id)] = str(last) if last is not None else None
        return result

    # --- Courses -----------------------------------------------------------------

    async def list_courses(self) -> list[Course]:
        data = await self._select(rows.TABLE_COURSES, "*", order="created_at", desc=True)
        return [rows.course_from_row(row) for row in data]

    async def count_course_contents(self, course_ids: Sequence[str]) -> dict[str, ContentCounts]:
        """Return section and video counts for many courses with one query.

        Behavior:
            Selects the sections of all given courses with an embedded
            `Videos(count)` aggregate and folds them per course. Courses
            without sections are reported with zero counts.
        """
        counts: dict[str, ContentCounts] = {cid: ContentCounts() for cid in course_ids}
        if not course_ids:
            return counts
        query = self._table(rows.TABLE_SECTIONS).select(_COUNTS_SELECT).in_("lesson_id", list(course_ids))
        data = self._data(await self._execute(query, what="count course contents"))
        folded: dict[str, ContentCounts] = defaultdict(ContentCounts)
        for row in data:
            course_id = str(row.get("lesson_id"))
            folded[course_id].sections += 1
            folded[course_id].videos += rows.embedded_count(row.get("Videos"))
        counts.update({cid: folded[cid] for cid in course_ids if cid in folded})
        return counts

    async def insert_course(self, fields: Mapping[str, object]) -> None:
        await self._insert(rows.TABLE_COURSES, rows.to_columns(fields, rows.COURSE_COLUMNS))

    async def update_course(self, course_id: str, fields: Mapping[str, object]) -> None:
        await self._update(rows.TABLE_COURSES, course_id, rows.to_columns(fields, rows.COURSE_COLUMNS))

    async def delete_course(self, course_id: str) -> None:
        await self._delete(rows.TABLE_COURSES, course_id)

    # --- Sections & videos -------------------------------------------------------

    async def list_sections(self, *, newest_first: bool = False) -> list[Section]:
        if newest_first:
            data = await self._select(rows.TABLE_SECTIONS, _SECTION_SELECT, order="created_at", desc=True)
        else:
            data = await self._select(rows.TABLE_SECTIONS, _SECTION_SELECT, order="titre")
        return [rows.section_from_row(row) for row in data]

    async def list_videos(self) -> list[Video]:
        data = await self._select(rows.TABLE_VIDEOS, _VIDEO_SELECT, order="created_at", desc=True)
        return [rows.video_from_row(row) for row in data]

    async def insert_video(self, fields: Mapping[str, object]) -> None:
        await self._insert(rows.TABLE_VIDEOS, rows.to_columns(fields, rows.VIDEO_COLUMNS))

    async def update_video(self, video_id: str, fields: Mapping[str, object]) -> None:
        await self._update(rows.TABLE_VIDEOS, video_id, rows.to_columns(fields, rows.VIDEO_COLUMNS))

    async def delete_video(self, video_id: str) -> None:
        await self._delete(rows.TABLE_VIDEOS, video_id)


__all__ = ["SupabaseGateway"]
