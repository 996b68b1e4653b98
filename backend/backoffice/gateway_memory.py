"""
In-memory data gateway with the same contract as the Supabase gateway.

Stores rows with backend column names so the row mapping helpers are shared.
Used for tests and for the offline demo backend (`ADMIN_DATA_BACKEND=memory`).
"""

from __future__ import annotations

from datetime import datetime, timezone
import itertools
from typing import Mapping, Optional, Sequence

from .ports import (
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


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class InMemoryGateway:
    """Dict-backed gateway. Not thread-safe; one event loop only."""

    def __init__(self, *, auth_accounts: Optional[Mapping[str, Optional[str]]] = None) -> None:
        self.tables: dict[str, dict[str, dict]] = {
            rows.TABLE_USERS: {},
            rows.TABLE_ROLES: {},
            rows.TABLE_COURSES: {},
            rows.TABLE_SECTIONS: {},
            rows.TABLE_VIDEOS: {},
        }
        self._ids = itertools.count(1)
        # None means "no elevated client configured"
        self.auth_accounts = dict(auth_accounts) if auth_accounts is not None else None
        # Maps operation name -> exception raised by the next call (test hook)
        self.failures: dict[str, Exception] = {}

    # --- Seeding -----------------------------------------------------------------

    def add_row(self, table: str, row: Mapping[str, object]) -> str:
        """Insert a raw row (backend column names) and return its id."""
        data = dict(row)
        row_id = str(data.get("id") or self._next_id(table))
        data["id"] = row_id
        data.setdefault("created_at", _now_iso())
        self.tables[table][row_id] = data
        return row_id

    def add_role(self, name: str, *, role_id: Optional[str] = None) -> str:
        return self.add_row(rows.TABLE_ROLES, {"id": role_id, "role": name})

    def add_user(self, email: str, role_id: str, *, auth_id: str = "", user_id: Optional[str] = None) -> str:
        return self.add_row(rows.TABLE_USERS, {"id": user_id, "email": email, "role_id": role_id, "user_id": auth_id})

    def add_course(self, title: str, *, difficulty: int = 1, description: str = "", creator_id: str = "", created_at: Optional[str] = None) -> str:
        row = {"titre": title, "description": description, "difficulty": difficulty, "creator_id": creator_id}
        if created_at:
            row["created_at"] = created_at
        return self.add_row(rows.TABLE_COURSES, row)

    def add_section(self, title: str, course_id: str, *, created_at: Optional[str] = None) -> str:
        row = {"titre": title, "lesson_id": course_id}
        if created_at:
            row["created_at"] = created_at
        return self.add_row(rows.TABLE_SECTIONS, row)

    def add_video(self, title: str, url: str, section_id: str, *, created_at: Optional[str] = None) -> str:
        row = {"titre": title, "url": url, "section_id": section_id}
        if created_at:
            row["created_at"] = created_at
        return self.add_row(rows.TABLE_VIDEOS, row)

    # --- Helpers -----------------------------------------------------------------

    def _next_id(self, table: str) -> str:
        # Skip ids taken by explicitly seeded rows
        while True:
            candidate = str(next(self._ids))
            if candidate not in self.tables[table]:
                return candidate

    def _check(self, operation: str) -> None:
        exc = self.failures.pop(operation, None)
        if exc is not None:
            raise exc

    def _rows(self, table: str) -> list[dict]:
        return list(self.tables[table].values())

    @staticmethod
    def _newest_first(items: list[dict]) -> list[dict]:
        return sorted(items, key=lambda r: str(r.get("created_at") or ""), reverse=True)

    def _insert(self, table: str, values: Mapping[str, object]) -> None:
        if not values:
            raise QueryError("Nothing to insert")
        self.add_row(table, {k: v for k, v in values.items() if k not in ("id", "created_at")})

    def _update(self, table: str, row_id: str, values: Mapping[str, object]) -> None:
        row = self.tables[table].get(str(row_id))
        if row is None:
            raise NotFoundError(f"No row with id {row_id} in {table}")
        row.update(values)

    def _delete(self, table: str, row_id: str) -> None:
        if self.tables[table].pop(str(row_id), None) is None:
            raise NotFoundError(f"No row with id {row_id} in {table}")

    # --- Users & roles -----------------------------------------------------------

    async def list_users(self) -> list[User]:
        self._check("list_users")
        roles = self.tables[rows.TABLE_ROLES]
        result = []
        for row in sorted(self._rows(rows.TABLE_USERS), key=lambda r: _id_key(r["id"])):
            role_row = roles.get(str(row.get("role_id")))
            role = rows.role_from_row(role_row) if role_row else None
            result.append(rows.user_from_row(row, role=role))
        return result

    async def list_roles(self) -> list[Role]:
        self._check("list_roles")
        ordered = sorted(self._rows(rows.TABLE_ROLES), key=lambda r: _id_key(r["id"]))
        return [rows.role_from_row(row) for row in ordered]

    async def insert_user(self, fields: Mapping[str, object]) -> None:
        self._check("insert_user")
        self._insert(rows.TABLE_USERS, rows.to_columns(fields, rows.USER_COLUMNS))

    async def update_user(self, user_id: str, fields: Mapping[str, object]) -> None:
        self._check("update_user")
        self._update(rows.TABLE_USERS, user_id, rows.to_columns(fields, rows.USER_COLUMNS))

    async def delete_user(self, user_id: str) -> None:
        self._check("delete_user")
        self._delete(rows.TABLE_USERS, user_id)

    async def list_auth_accounts(self) -> dict[str, Optional[str]]:
        self._check("list_auth_accounts")
        if self.auth_accounts is None:
            raise NotConfiguredError("Elevated client is not configured")
        return dict(self.auth_accounts)

    # --- Courses -----------------------------------------------------------------

    async def list_courses(self) -> list[Course]:
        self._check("list_courses")
        return [rows.course_from_row(row) for row in self._newest_first(self._rows(rows.TABLE_COURSES))]

    async def count_course_contents(self, course_ids: Sequence[str]) -> dict[str, ContentCounts]:
        self._check("count_course_contents")
        counts = {cid: ContentCounts() for cid in course_ids}
        videos = self._rows(rows.TABLE_VIDEOS)
        for section in self._rows(rows.TABLE_SECTIONS):
            course_id = str(section.get("lesson_id"))
            if course_id not in counts:
                continue
            counts[course_id].sections += 1
            counts[course_id].videos += sum(1 for v in videos if str(v.get("section_id")) == section["id"])
        return counts

    async def insert_course(self, fields: Mapping[str, object]) -> None:
        self._check("insert_course")
        self._insert(rows.TABLE_COURSES, rows.to_columns(fields, rows.COURSE_COLUMNS))

    async def update_course(self, course_id: str, fields: Mapping[str, object]) -> None:
        self._check("update_course")
        self._update(rows.TABLE_COURSES, course_id, rows.to_columns(fields, rows.COURSE_COLUMNS))

    async def delete_course(self, course_id: str) -> None:
        self._check("delete_course")
        self._delete(rows.TABLE_COURSES, course_id)

    # --- Sections & videos -------------------------------------------------------

    def _with_course(self, section: dict) -> dict:
        course = self.tables[rows.TABLE_COURSES].get(str(section.get("lesson_id")))
        return {**section, "lesson": course}

    async def list_sections(self, *, newest_first: bool = False) -> list[Section]:
        self._check("list_sections")
        items = self._rows(rows.TABLE_SECTIONS)
        if newest_first:
            items = self._newest_first(items)
        else:
            items = sorted(items, key=lambda r: str(r.get("titre") or ""))
        return [rows.section_from_row(self._with_course(row)) for row in items]

    async def list_videos(self) -> list[Video]:
        self._check("list_videos")
        sections = self.tables[rows.TABLE_SECTIONS]
        result = []
        for row in self._newest_first(self._rows(rows.TABLE_VIDEOS)):
            section = sections.get(str(row.get("section_id")))
            expanded = {**row, "section": self._with_course(section) if section else None}
            result.append(rows.video_from_row(expanded))
        return result

    async def insert_video(self, fields: Mapping[str, object]) -> None:
        self._check("insert_video")
        self._insert(rows.TABLE_VIDEOS, rows.to_columns(fields, rows.VIDEO_COLUMNS))

    async def update_video(self, video_id: str, fields: Mapping[str, object]) -> None:
        self._check("update_video")
        self._update(rows.TABLE_VIDEOS, video_id, rows.to_columns(fields, rows.VIDEO_COLUMNS))

    async def delete_video(self, video_id: str) -> None:
        self._check("delete_video")
        self._delete(rows.TABLE_VIDEOS, video_id)


def _id_key(value: str) -> tuple[int, str]:
    # Numeric ids sort numerically, others lexically after them
    return (0, f"{int(value):020d}") if str(value).isdigit() else (1, str(value))


__all__ = ["InMemoryGateway"]
