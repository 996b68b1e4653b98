"""
Dashboard aggregation: totals, role counts and a short recent-activity feed.

Behavior:
    Four independent reads (users with joined role, courses, sections, videos)
    run concurrently. The join is all-or-nothing: any failure aborts the
    aggregation and surfaces one `DashboardError`. There is no partial render.

Activity:
    At most one entry per source table (latest course, latest video, latest
    section), sorted by timestamp descending and capped at five. Relative
    labels are computed at render time via `labels.time_ago`.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from typing import Any, Optional

from . import labels
from .ports import ConnectionFailure, GatewayError
from .screens import count_roles
from .workflow import ViewLifetime


logger = logging.getLogger("dailylessons.backoffice.dashboard")

MAX_ACTIVITY = 5


class DashboardError(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class ActivityEntry:
    kind: str
    message: str
    timestamp: str
    icon: str
    color: str

    def time_label(self, *, now: Optional[datetime] = None) -> str:
        return labels.time_ago(self.timestamp, now=now)


@dataclass
class DashboardSnapshot:
    users: int = 0
    courses: int = 0
    sections: int = 0
    videos: int = 0
    administrators: int = 0
    teachers: int = 0
    learners: int = 0
    activity: list[ActivityEntry] = field(default_factory=list)


def _sort_key(entry: ActivityEntry) -> datetime:
    parsed = labels.parse_timestamp(entry.timestamp)
    return parsed or datetime.min.replace(tzinfo=timezone.utc)


def build_activity(courses: list, videos: list, sections: list) -> list[ActivityEntry]:
    """Latest row of each source (inputs are newest first), merged and capped."""
    entries: list[ActivityEntry] = []
    if courses:
        entries.append(ActivityEntry(
            kind="course",
            message=f'New course created: "{courses[0].title}"',
            timestamp=courses[0].created_at or "",
            icon="fa-graduation-cap",
            color="blue",
        ))
    if videos:
        entries.append(ActivityEntry(
            kind="video",
            message=f'New video added: "{videos[0].title}"',
            timestamp=videos[0].created_at or "",
            icon="fa-video",
            color="purple",
        ))
    if sections:
        entries.append(ActivityEntry(
            kind="section",
            message=f'New section created: "{sections[0].title}"',
            timestamp=sections[0].created_at or "",
            icon="fa-list-alt",
            color="green",
        ))
    entries.sort(key=_sort_key, reverse=True)
    return entries[:MAX_ACTIVITY]


class DashboardAggregator:
    def __init__(self, gateway: Any, *, lifetime: Optional[ViewLifetime] = None) -> None:
        self.gateway = gateway
        self.lifetime = lifetime or ViewLifetime()

    async def load(self) -> Optional[DashboardSnapshot]:
        """Run the four reads and aggregate.

        Returns None when the view lifetime was cancelled while waiting.
        Raises DashboardError when any read fails.
        """
        try:
            users, courses, sections, videos = await asyncio.gather(
                self.gateway.list_users(),
                self.gateway.list_courses(),
                self.gateway.list_sections(newest_first=True),
                self.gateway.list_videos(),
            )
        except GatewayError as exc:
            if self.lifetime.cancelled:
                return None
            logger.warning("Dashboard aggregation failed: %s", exc.__class__.__name__)
            if isinstance(exc, ConnectionFailure):
                raise DashboardError(exc.message) from exc
            raise DashboardError(f"Error loading statistics: {exc.message}") from exc
        if self.lifetime.cancelled:
            return None
        roles = count_roles(users)
        return DashboardSnapshot(
            users=len(users),
            courses=len(courses),
            sections=len(sections),
            videos=len(videos),
            administrators=roles[labels.ADMINISTRATOR],
            teachers=roles[labels.TEACHER],
            learners=roles[labels.LEARNER],
            activity=build_activity(courses, videos, sections),
        )


__all__ = [
    "ActivityEntry",
    "DashboardAggregator",
    "DashboardError",
    "DashboardSnapshot",
    "build_activity",
    "MAX_ACTIVITY",
]
