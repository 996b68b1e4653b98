"""
Dashboard page: totals, role counters, quick summary and recent activity.

Behavior:
    The aggregation is all-or-nothing. On failure the page shows one error
    with a "Retry" link back to /dashboard; no partial counters are rendered.
"""
from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from backoffice.dashboard import DashboardAggregator, DashboardError, DashboardSnapshot
from components import Component, ErrorBanner, StatCard, StatGrid
from routes.views import gateway_for, layout_response, view_lifetime


dashboard_router = APIRouter(tags=["Dashboard"])

TITLE = "Dashboard"


def _activity(snapshot: DashboardSnapshot) -> str:
    if not snapshot.activity:
        return '<p class="text-muted" data-testid="activity-empty">No recent activity</p>'
    items = []
    for entry in snapshot.activity:
        items.append(
            f'<li class="activity-item activity-item--{Component.escape(entry.color)}" data-kind="{Component.escape(entry.kind)}">'
            f"{Component.icon(entry.icon)}"
            f'<span class="activity-item__message">{Component.escape(entry.message)}</span>'
            f'<span class="activity-item__time">{Component.escape(entry.time_label())}</span>'
            "</li>"
        )
    return f'<ul class="activity-list" data-testid="activity">{"".join(items)}</ul>'


def _summary(snapshot: DashboardSnapshot) -> str:
    lines = [
        f"{snapshot.courses} courses available",
        f"{snapshot.sections} sections created",
        f"{snapshot.videos} videos online",
        f"{snapshot.learners} learners enrolled",
        f"{snapshot.teachers} active teachers",
        f"{snapshot.administrators} administrators",
    ]
    items = "".join(f"<li>{Component.escape(line)}</li>" for line in lines)
    return f'<ul class="summary-list" data-testid="summary">{items}</ul>'


def _page(snapshot: DashboardSnapshot) -> str:
    totals = StatGrid([
        StatCard("Users", snapshot.users, icon="fa-users", key="users"),
        StatCard("Courses", snapshot.courses, icon="fa-book", color="green", key="courses"),
        StatCard("Sections", snapshot.sections, icon="fa-list-alt", color="orange", key="sections"),
        StatCard("Videos", snapshot.videos, icon="fa-video", color="purple", key="videos"),
    ])
    roles = StatGrid([
        StatCard("Administrators", snapshot.administrators, icon="fa-crown", color="red", key="administrators"),
        StatCard("Teachers", snapshot.teachers, icon="fa-chalkboard-teacher", color="purple", key="teachers"),
        StatCard("Learners", snapshot.learners, icon="fa-graduation-cap", color="green", key="learners"),
    ])
    return f"""
        <div class="page-head">
            <p class="text-muted">Overview of the DailyLessons platform</p>
            <a href="/dashboard" class="btn btn-secondary" data-testid="refresh-link">Refresh</a>
        </div>
        {totals.render()}
        {roles.render()}
        <div class="dashboard-columns">
            <section class="card" aria-labelledby="activity-heading">
                <h2 id="activity-heading">Recent activity</h2>
                {_activity(snapshot)}
            </section>
            <section class="card" aria-labelledby="summary-heading">
                <h2 id="summary-heading">Quick summary</h2>
                {_summary(snapshot)}
            </section>
        </div>
    """


@dashboard_router.get("/dashboard", response_class=HTMLResponse)
async def dashboard_index(request: Request):
    async with view_lifetime(request) as lifetime:
        aggregator = DashboardAggregator(await gateway_for(request), lifetime=lifetime)
        try:
            snapshot = await aggregator.load()
        except DashboardError as exc:
            content = ErrorBanner(exc.message, retry_href="/dashboard").render()
            return layout_response(request, TITLE, content)
        if snapshot is None:
            # Session ended while the reads were in flight
            return RedirectResponse(url="/login", status_code=303)
        return layout_response(request, TITLE, _page(snapshot))
