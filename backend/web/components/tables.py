"""
List tables for users, courses and videos.

Row actions are plain links: edit opens the overlay page, delete opens the
confirmation page. No row is ever removed client-side.
"""

from typing import Sequence

from backoffice import labels
from backoffice.ports import Course, User, Video
from backoffice.screens import UNKNOWN_COURSE, UNKNOWN_SECTION
from .badges import DifficultyBadge, RoleBadge
from .base import Component


class DataTable(Component):
    """Generic table shell: heading with count, header row and body rows."""

    empty_message = "Nothing here yet."

    def __init__(self, title: str, headers: Sequence[str], rows: Sequence[str], *, testid: str):
        self.title = title
        self.headers = headers
        self.rows = rows
        self.testid = testid

    def render(self) -> str:
        head = "".join(f'<th scope="col">{self.escape(h)}</th>' for h in self.headers)
        if self.rows:
            body = "".join(self.rows)
        else:
            body = f'<tr><td colspan="{len(self.headers)}" class="table-empty">{self.escape(self.empty_message)}</td></tr>'
        return f"""
        <section class="card table-card" data-testid="{self.escape(self.testid)}">
            <h2 class="table-card__title">{self.escape(self.title)} ({len(self.rows)})</h2>
            <div class="table-scroll">
                <table class="data-table">
                    <thead><tr>{head}</tr></thead>
                    <tbody>{body}</tbody>
                </table>
            </div>
        </section>"""


def _actions(base: str, entity_id: str) -> str:
    eid = Component.escape(entity_id)
    return (
        f'<td class="row-actions">'
        f'<a href="{base}/{eid}/edit" class="btn btn-small" aria-label="Edit">{Component.icon("fa-edit")} Edit</a>'
        f'<a href="{base}/{eid}/delete" class="btn btn-small btn-danger" aria-label="Delete">{Component.icon("fa-trash")} Delete</a>'
        "</td>"
    )


class UsersTable(Component):
    def __init__(self, users: Sequence[User]):
        self.users = users

    def _row(self, user: User) -> str:
        role_name = user.role.name if user.role else None
        last = labels.time_ago(user.last_sign_in_at) if user.last_sign_in_at else "-"
        return (
            f'<tr data-id="{self.escape(user.id)}">'
            f"<td>{self.escape(user.id)}</td>"
            f'<td><code title="{self.escape(user.auth_id)}">{self.escape(labels.truncate_id(user.auth_id))}</code></td>'
            f"<td>{self.escape(user.email)}</td>"
            f"<td>{RoleBadge(role_name).render()}</td>"
            f"<td>{self.escape(last)}</td>"
            f"{_actions('/users', user.id)}"
            "</tr>"
        )

    def render(self) -> str:
        rows = [self._row(u) for u in self.users]
        table = DataTable("Users", ["ID", "Auth ID", "Email", "Role", "Last sign-in", "Actions"], rows, testid="users-table")
        table.empty_message = "No users found."
        return table.render()


class CoursesTable(Component):
    def __init__(self, courses: Sequence[Course]):
        self.courses = courses

    def _row(self, course: Course) -> str:
        return (
            f'<tr data-id="{self.escape(course.id)}">'
            f'<td><strong>{self.escape(course.title)}</strong>'
            f'<p class="text-muted">{self.escape(course.description)}</p></td>'
            f"<td>{DifficultyBadge(course.difficulty).render()}</td>"
            f'<td data-col="sections">{course.sections_count}</td>'
            f'<td data-col="videos">{course.videos_count}</td>'
            f"<td>{self.escape(labels.format_date(course.created_at))}</td>"
            f"{_actions('/cours', course.id)}"
            "</tr>"
        )

    def render(self) -> str:
        rows = [self._row(c) for c in self.courses]
        table = DataTable("Courses", ["Course", "Difficulty", "Sections", "Videos", "Created", "Actions"], rows, testid="courses-table")
        table.empty_message = "No courses yet. Create the first one."
        return table.render()


class VideosTable(Component):
    def __init__(self, videos: Sequence[Video]):
        self.videos = videos

    def _thumbnail(self, video: Video) -> str:
        thumb = labels.video_thumbnail(video.url)
        if thumb:
            return f'<img src="{self.escape(thumb)}" alt="" class="video-thumb" loading="lazy">'
        return f'<span class="video-thumb video-thumb--placeholder" data-testid="thumb-placeholder">{self.icon("fa-video")}</span>'

    def _link(self, url: str) -> str:
        # Stored URLs are unvalidated; only http(s) becomes a clickable link
        if url.lower().startswith(("http://", "https://")):
            return f'<a href="{self.escape(url)}" target="_blank" rel="noopener noreferrer" class="text-muted">{self.escape(url)}</a>'
        return f'<span class="text-muted">{self.escape(url)}</span>'

    def _row(self, video: Video) -> str:
        return (
            f'<tr data-id="{self.escape(video.id)}">'
            f"<td>{self._thumbnail(video)}</td>"
            f'<td><strong>{self.escape(video.title)}</strong>'
            f"<p>{self._link(video.url)}</p></td>"
            f"<td>{self.escape(video.section_title or UNKNOWN_SECTION)}</td>"
            f"<td>{self.escape(video.course_title or UNKNOWN_COURSE)}</td>"
            f"<td>{self.escape(labels.format_date(video.created_at))}</td>"
            f"{_actions('/video', video.id)}"
            "</tr>"
        )

    def render(self) -> str:
        rows = [self._row(v) for v in self.videos]
        table = DataTable("Videos", ["", "Video", "Section", "Course", "Added", "Actions"], rows, testid="videos-table")
        table.empty_message = "No videos yet. Add the first one."
        return table.render()
