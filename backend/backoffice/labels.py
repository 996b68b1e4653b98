"""
Derived display labels for back-office rows.

Why:
    Difficulty badges, role badges, video thumbnails and "time ago" strings are
    pure functions of stored values. Keeping them here (not in components)
    lets the dashboard counters and the tables share one matching rule.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import re
from typing import Optional


# --- Difficulty -----------------------------------------------------------------

DIFFICULTY_LABELS = {
    1: "Beginner",
    2: "Intermediate",
    3: "Advanced",
    4: "Expert",
}

DIFFICULTY_COLORS = {
    1: "green",
    2: "yellow",
    3: "orange",
    4: "red",
}

UNKNOWN_LABEL = "Unknown"
NEUTRAL_COLOR = "gray"


def difficulty_label(difficulty: object) -> str:
    return DIFFICULTY_LABELS.get(_as_int(difficulty), UNKNOWN_LABEL)


def difficulty_color(difficulty: object) -> str:
    return DIFFICULTY_COLORS.get(_as_int(difficulty), NEUTRAL_COLOR)


def _as_int(value: object) -> Optional[int]:
    # bool is an int subclass; True must not read as Beginner
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    return None


# --- Roles ----------------------------------------------------------------------

ADMINISTRATOR = "administrator"
TEACHER = "teacher"
LEARNER = "learner"
KNOWN_ROLES = (ADMINISTRATOR, TEACHER, LEARNER)


@dataclass(frozen=True)
class RoleBadgeStyle:
    label: str
    color: str
    icon: str


_ROLE_STYLES = {
    ADMINISTRATOR: ("red", "fa-crown"),
    TEACHER: ("purple", "fa-chalkboard-teacher"),
    LEARNER: ("green", "fa-graduation-cap"),
}
_GENERIC_ROLE_ICON = "fa-user"


def role_key(name: Optional[str]) -> Optional[str]:
    """Return the known role a stored name matches (case-insensitive), else None.

    Matching is exact after lowercasing; surrounding whitespace is not trimmed.
    """
    if not name:
        return None
    lowered = name.lower()
    return lowered if lowered in _ROLE_STYLES else None


def role_badge(name: Optional[str]) -> RoleBadgeStyle:
    """Badge for a role name: known roles get their color/icon, others a generic one.

    The label is the stored name as-is, or "Unknown" when there is none.
    """
    label = name if name else UNKNOWN_LABEL
    key = role_key(name)
    if key is None:
        return RoleBadgeStyle(label=label, color=NEUTRAL_COLOR, icon=_GENERIC_ROLE_ICON)
    color, icon = _ROLE_STYLES[key]
    return RoleBadgeStyle(label=label, color=color, icon=icon)


# --- Videos ---------------------------------------------------------------------

_YOUTUBE_ID = re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/)([^&\n?#]+)")


def video_thumbnail(url: Optional[str]) -> Optional[str]:
    """Return the YouTube thumbnail URL for known link shapes, else None.

    No network call is made; unknown hosts render a placeholder.
    """
    match = _YOUTUBE_ID.search(url or "")
    if not match:
        return None
    return f"https://img.youtube.com/vi/{match.group(1)}/mqdefault.jpg"


def is_youtube_url(url: Optional[str]) -> bool:
    value = url or ""
    return "youtube.com" in value or "youtu.be" in value


# --- Timestamps -----------------------------------------------------------------


_FRACTION = re.compile(r"(\d{2}:\d{2}:\d{2})\.(\d+)")


def _six_digit_fraction(match: re.Match) -> str:
    return f"{match.group(1)}.{match.group(2)[:6].ljust(6, '0')}"


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a backend timestamp (ISO 8601, optional `Z`) into an aware datetime.

    Postgres trims trailing zeros from fractional seconds (`.12345`, `.1`);
    the fraction is normalized to microseconds before `fromisoformat`, which
    only accepts 3 or 6 digits before Python 3.11.
    """
    if not value:
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(_six_digit_fraction, text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_date(value: Optional[str]) -> str:
    parsed = parse_timestamp(value)
    return parsed.strftime("%d/%m/%Y") if parsed else ""


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count > 1 else ''} ago"


def time_ago(value: Optional[str], *, now: Optional[datetime] = None) -> str:
    """Relative label for a stored timestamp.

    Thresholds: under a minute "just now", then minutes (< 60), hours (< 24),
    days (< 30); older timestamps fall back to the absolute date. Invalid
    timestamps yield an empty string.
    """
    parsed = parse_timestamp(value)
    if parsed is None:
        return ""
    current = now or datetime.now(timezone.utc)
    minutes = int((current - parsed).total_seconds() // 60)
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return _plural(minutes, "minute")
    hours = minutes // 60
    if hours < 24:
        return _plural(hours, "hour")
    days = hours // 24
    if days < 30:
        return _plural(days, "day")
    return parsed.strftime("%d/%m/%Y")


def is_same_day(value: Optional[str], *, now: Optional[datetime] = None) -> bool:
    """True when `value` falls on the calendar day of `now`, in `now`'s timezone.

    Without `now` the day is the current UTC date; the server does not know the
    admin's timezone.
    """
    parsed = parse_timestamp(value)
    if parsed is None:
        return False
    current = now or datetime.now(timezone.utc)
    return parsed.astimezone(current.tzinfo or timezone.utc).date() == current.date()


def truncate_id(value: Optional[str], length: int = 12) -> str:
    text = value or ""
    return text[:length] + "..." if len(text) > length else text


__all__ = [
    "DIFFICULTY_LABELS",
    "difficulty_label",
    "difficulty_color",
    "KNOWN_ROLES",
    "role_key",
    "role_badge",
    "video_thumbnail",
    "is_youtube_url",
    "parse_timestamp",
    "format_date",
    "time_ago",
    "is_same_day",
    "truncate_id",
]
