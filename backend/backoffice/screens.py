"""
Concrete list-management screens: users, courses, videos.

Each screen binds `ListWorkflow` to one set of gateway calls and adds its
enrichment step and page statistics.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import Mapping, Optional

from . import labels
from .ports import Course, GatewayError, NotConfiguredError, Role, Section, User, Video
from .workflow import ListWorkflow


logger = logging.getLogger("dailylessons.backoffice.screens")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# --- Users ----------------------------------------------------------------------


class UsersWorkflow(ListWorkflow[User]):
    label = "users"
    editable_fields = ("auth_id", "email", "role_id")
    required_fields = ("email", "role_id")

    def __init__(self, gateway, **kwargs) -> None:
        super().__init__(gateway, **kwargs)
        self.roles: list[Role] = []

    async def _load(self) -> list[User]:
        users = await self.gateway.list_users()
        roles = await self.gateway.list_roles()
        if self.alive:
            self.roles = roles
        last_sign_in = await self._auth_accounts()
        for user in users:
            user.last_sign_in_at = last_sign_in.get(user.auth_id)
        return users

    async def _auth_accounts(self) -> dict[str, Optional[str]]:
        try:
            return await self.gateway.list_auth_accounts()
        except NotConfiguredError:
            return {}
        except GatewayError as exc:
            logger.warning("Auth account listing failed: %s", exc.__class__.__name__)
            return {}

    def _blank(self) -> User:
        return User(id="", auth_id="", email="", role_id="")

    async def _insert(self, values: Mapping[str, object]) -> None:
        await self.gateway.insert_user(values)

    async def _update(self, entity_id: str, values: Mapping[str, object]) -> None:
        await self.gateway.update_user(entity_id, values)

    async def _remove(self, entity_id: str) -> None:
        await self.gateway.delete_user(entity_id)

    def role_counts(self) -> dict[str, int]:
        return count_roles(self.items)


def count_roles(users: list[User]) -> dict[str, int]:
    """Partition users by known role; unmatched roles are not counted."""
    counts = {name: 0 for name in labels.KNOWN_ROLES}
    for user in users:
        key = labels.role_key(user.role.name if user.role else None)
        if key is not None:
            counts[key] += 1
    return counts


# --- Courses --------------------------------------------------------------------


@dataclass
class CourseStats:
    total: int
    beginner: int
    advanced: int
    videos: int


class CoursesWorkflow(ListWorkflow[Course]):
    label = "courses"
    editable_fields = ("title", "description", "difficulty", "creator_id")
    required_fields = ("title",)

    async def _load(self) -> list[Course]:
        courses = await self.gateway.list_courses()
        if not courses:
            return courses
        try:
            counts = await self.gateway.count_course_contents([c.id for c in courses])
        except GatewayError as exc:
            # Counts degrade to zero; the list itself is still shown
            logger.warning("Counting course contents failed: %s", exc.__class__.__name__)
            counts = {}
        for course in courses:
            found = counts.get(course.id)
            if found is not None:
                course.sections_count = found.sections
                course.videos_count = found.videos
        return courses

    def _blank(self) -> Course:
        return Course(id="", title="", description="", difficulty=1, creator_id="", created_at=_now_iso())

    def apply_changes(self, changes: Mapping[str, object]) -> None:
        values = dict(changes)
        if "difficulty" in values:
            values["difficulty"] = _parse_difficulty(values["difficulty"])
        super().apply_changes(values)

    async def _insert(self, values: Mapping[str, object]) -> None:
        await self.gateway.insert_course(values)

    async def _update(self, entity_id: str, values: Mapping[str, object]) -> None:
        await self.gateway.update_course(entity_id, values)

    async def _remove(self, entity_id: str) -> None:
        await self.gateway.delete_course(entity_id)

    def stats(self) -> CourseStats:
        return CourseStats(
            total=len(self.items),
            beginner=sum(1 for c in self.items if c.difficulty == 1),
            advanced=sum(1 for c in self.items if c.difficulty == 3),
            videos=sum(c.videos_count for c in self.items),
        )


def _parse_difficulty(value: object) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return 1


# --- Videos ---------------------------------------------------------------------


@dataclass
class VideoStats:
    total: int
    youtube: int
    added_today: int


UNKNOWN_SECTION = "Unknown section"
UNKNOWN_COURSE = "Unknown course"


def section_option_label(section: Section) -> str:
    return f"{section.course_title or UNKNOWN_COURSE} - {section.title}"


class VideosWorkflow(ListWorkflow[Video]):
    label = "videos"
    editable_fields = ("title", "url", "section_id")
    required_fields = ("title", "url", "section_id")

    def __init__(self, gateway, **kwargs) -> None:
        super().__init__(gateway, **kwargs)
        self.sections: list[Section] = []

    async def _load(self) -> list[Video]:
        return await self.gateway.list_videos()

    async def fetch_sections(self) -> list[Section]:
        """Load the section selector; failure only logs."""
        try:
            sections = await self.gateway.list_sections()
        except GatewayError as exc:
            logger.warning("Fetching sections failed: %s", exc.__class__.__name__)
            return self.sections
        if self.alive:
            self.sections = sections
        return self.sections

    def _blank(self) -> Video:
        return Video(id="", title="", url="", section_id="", created_at=_now_iso())

    async def _insert(self, values: Mapping[str, object]) -> None:
        await self.gateway.insert_video(values)

    async def _update(self, entity_id: str, values: Mapping[str, object]) -> None:
        await self.gateway.update_video(entity_id, values)

    async def _remove(self, entity_id: str) -> None:
        await self.gateway.delete_video(entity_id)

    def stats(self, *, now: Optional[datetime] = None) -> VideoStats:
        return VideoStats(
            total=len(self.items),
            youtube=sum(1 for v in self.items if labels.is_youtube_url(v.url)),
            added_today=sum(1 for v in self.items if labels.is_same_day(v.created_at, now=now)),
        )


__all__ = [
    "UsersWorkflow",
    "CoursesWorkflow",
    "VideosWorkflow",
    "CourseStats",
    "VideoStats",
    "count_roles",
    "section_option_label",
    "UNKNOWN_SECTION",
    "UNKNOWN_COURSE",
]
