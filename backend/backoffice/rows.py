"""
Row <-> entity mapping for the DailyLessons tables.

The backend keeps French column names (`titre`) and nests relations in two
shapes (object or single-item list, depending on the foreign-key direction
PostgREST infers). Both gateways map rows through these helpers so the rest
of the code only ever sees normalized entities.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .ports import Course, Role, Section, User, Video


TABLE_USERS = "Users"
TABLE_ROLES = "Roles"
TABLE_COURSES = "Lessons"
TABLE_SECTIONS = "Sections"
TABLE_VIDEOS = "Videos"

# Editable fields only; identity and timestamps are assigned by the backend.
USER_COLUMNS = {"auth_id": "user_id", "email": "email", "role_id": "role_id"}
COURSE_COLUMNS = {
    "title": "titre",
    "description": "description",
    "difficulty": "difficulty",
    "creator_id": "creator_id",
}
VIDEO_COLUMNS = {"title": "titre", "url": "url", "section_id": "section_id"}


def to_columns(fields: Mapping[str, object], mapping: Mapping[str, str]) -> dict[str, object]:
    return {column: fields[name] for name, column in mapping.items() if name in fields}


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _optional_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def single_relation(value: Any) -> Optional[Mapping[str, Any]]:
    """Collapse an embedded relation to one mapping (or None).

    PostgREST may return the related row as an object, a list with one item,
    an empty list, or null.
    """
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, Mapping):
        return value
    return None


def role_from_row(row: Mapping[str, Any]) -> Role:
    return Role(id=_text(row.get("id")), name=_text(row.get("role")))


def user_from_row(row: Mapping[str, Any], role: Optional[Role] = None) -> User:
    if role is None:
        embedded = single_relation(row.get("roles"))
        role = role_from_row(embedded) if embedded else None
    return User(
        id=_text(row.get("id")),
        auth_id=_text(row.get("user_id")),
        email=_text(row.get("email")),
        role_id=_text(row.get("role_id")),
        role=role,
    )


def course_from_row(row: Mapping[str, Any]) -> Course:
    difficulty = row.get("difficulty")
    if isinstance(difficulty, bool) or not isinstance(difficulty, int):
        try:
            difficulty = int(difficulty)  # numeric strings from loose schemas
        except (TypeError, ValueError):
            difficulty = 0
    return Course(
        id=_text(row.get("id")),
        title=_text(row.get("titre")),
        description=_text(row.get("description")),
        difficulty=difficulty,
        creator_id=_text(row.get("creator_id")),
        created_at=_text(row.get("created_at")),
    )


def section_from_row(row: Mapping[str, Any]) -> Section:
    course = single_relation(row.get("lesson"))
    return Section(
        id=_text(row.get("id")),
        title=_text(row.get("titre")),
        course_id=_text(row.get("lesson_id")),
        created_at=_optional_text(row.get("created_at")),
        course_title=_optional_text(course.get("titre")) if course else None,
    )


def video_from_row(row: Mapping[str, Any]) -> Video:
    section = single_relation(row.get("section"))
    course = single_relation(section.get("lesson")) if section else None
    return Video(
        id=_text(row.get("id")),
        title=_text(row.get("titre")),
        url=_text(row.get("url")),
        section_id=_text(row.get("section_id")),
        created_at=_text(row.get("created_at")),
        section_title=_optional_text(section.get("titre")) if section else None,
        course_title=_optional_text(course.get("titre")) if course else None,
    )


def embedded_count(value: Any) -> int:
    """Read `Videos(count)` style aggregates: [{"count": n}] or {"count": n}."""
    agg = single_relation(value)
    if not agg:
        return 0
    try:
        return int(agg.get("count") or 0)
    except (TypeError, ValueError):
        return 0
