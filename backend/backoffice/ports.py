"""
Ports for the back-office: entity types, the data gateway protocol, and errors.

Intent:
    Provide framework-agnostic contracts between the list-management workflows
    and the concrete gateways (Supabase, in-memory). Keeping these definitions
    in one module avoids circular imports and keeps the web layer independent
    of the Supabase client.

Design:
    - Entity dataclasses: Role, User, Course, Section, Video
    - Protocol: DataGatewayProtocol (async; one method per remote operation)
    - Error taxonomy: backend error payload vs. transport failure

Notes:
    Field names are the Python-facing names. Gateways translate them to the
    backend columns (e.g. `title` <-> `titre`, `auth_id` <-> `user_id`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Protocol, Sequence


# ----------------------------- Entities ---------------------------------------


@dataclass
class Role:
    id: str
    name: str


@dataclass
class User:
    """A row of `Users` with its role resolved once at the gateway boundary.

    `role` is None when `role_id` is dangling (no matching `Roles` row).
    """

    id: str
    auth_id: str
    email: str
    role_id: str
    role: Optional[Role] = None
    last_sign_in_at: Optional[str] = None


@dataclass
class Course:
    id: str
    title: str
    description: str
    difficulty: int
    creator_id: str
    created_at: str
    sections_count: int = 0
    videos_count: int = 0


@dataclass
class Section:
    id: str
    title: str
    course_id: str
    created_at: Optional[str] = None
    course_title: Optional[str] = None


@dataclass
class Video:
    id: str
    title: str
    url: str
    section_id: str
    created_at: str
    section_title: Optional[str] = None
    course_title: Optional[str] = None


@dataclass
class ContentCounts:
    sections: int = 0
    videos: int = 0


# ----------------------------- Errors -----------------------------------------


class GatewayError(Exception):
    """Base class for failures reported by a data gateway.

    `message` is always human-readable and safe to show in the UI.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class QueryError(GatewayError):
    """The backend answered with an error payload (RLS denial, bad column, ...)."""


class NotFoundError(QueryError):
    """A keyed update/delete matched no row."""


class ConnectionFailure(GatewayError):
    """The backend could not be reached (DNS, TLS, timeout, refused)."""

    def __init__(self, message: str = "Connection error") -> None:
        super().__init__(message)


class NotConfiguredError(GatewayError):
    """An operation needs the elevated client, which is not configured."""


# ----------------------------- Protocol ---------------------------------------


class DataGatewayProtocol(Protocol):
    # Users & roles
    async def list_users(self) -> list[User]:
        ...

    async def list_roles(self) -> list[Role]:
        ...

    async def insert_user(self, fields: Mapping[str, object]) -> None:
        ...

    async def update_user(self, user_id: str, fields: Mapping[str, object]) -> None:
        ...

    async def delete_user(self, user_id: str) -> None:
        ...

    async def list_auth_accounts(self) -> dict[str, Optional[str]]:
        """Return {auth_id: last_sign_in_at} using the elevated client."""
        ...

    # Courses
    async def list_courses(self) -> list[Course]:
        ...

    async def count_course_contents(self, course_ids: Sequence[str]) -> dict[str, ContentCounts]:
        ...

    async def insert_course(self, fields: Mapping[str, object]) -> None:
        ...

    async def update_course(self, course_id: str, fields: Mapping[str, object]) -> None:
        ...

    async def delete_course(self, course_id: str) -> None:
        ...

    # Sections & videos
    async def list_sections(self, *, newest_first: bool = False) -> list[Section]:
        ...

    async def list_videos(self) -> list[Video]:
        ...

    async def insert_video(self, fields: Mapping[str, object]) -> None:
        ...

    async def update_video(self, video_id: str, fields: Mapping[str, object]) -> None:
        ...

    async def delete_video(self, video_id: str) -> None:
        ...


__all__ = [
    "Role",
    "User",
    "Course",
    "Section",
    "Video",
    "ContentCounts",
    "GatewayError",
    "QueryError",
    "NotFoundError",
    "ConnectionFailure",
    "NotConfiguredError",
    "DataGatewayProtocol",
]
