"""
Courses screen (`/cours`): list with section/video counts, create/edit
overlays and delete confirmation.

Why:
    Counts come from one grouped query per page load. When that query fails
    the list still renders with zero counts.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from backoffice.screens import CoursesWorkflow
from components import ConfirmDialog, CourseForm, CoursesTable, ErrorBanner, Overlay, StatCard, StatGrid
from routes.views import checked_form, csrf_error, gateway_for, layout_response, session_record, view_lifetime


courses_router = APIRouter(tags=["Courses"])

TITLE = "Course management"


def _page(wf: CoursesWorkflow, overlay_html: str = "") -> str:
    stats = wf.stats()
    grid = StatGrid([
        StatCard("Total courses", stats.total, icon="fa-book", key="courses"),
        StatCard("Beginner", stats.beginner, icon="fa-star", color="green", key="beginner"),
        StatCard("Advanced", stats.advanced, icon="fa-fire", color="orange", key="advanced"),
        StatCard("Total videos", stats.videos, icon="fa-video", color="purple", key="videos"),
    ])
    error_html = ErrorBanner(wf.error).render() if wf.error else ""
    return f"""
        <div class="page-head">
            <p class="text-muted">Create and organise the course catalogue</p>
            <a href="/cours/new" class="btn btn-primary">New course</a>
        </div>
        {error_html}
        {CoursesTable(wf.items).render()}
        {grid.render()}
        {overlay_html}
    """


def _form_overlay(request: Request, wf: CoursesWorkflow, action: str) -> str:
    session = wf.editing
    title = "New course" if action.endswith("/new") else "Edit course"
    form = CourseForm(session.draft, action=action, csrf_token=session_record(request).csrf_token, error=session.error)
    return Overlay(title, form.render(), close_href="/cours").render()


@courses_router.get("/cours", response_class=HTMLResponse)
async def courses_index(request: Request):
    async with view_lifetime(request) as lifetime:
        wf = CoursesWorkflow(await gateway_for(request), lifetime=lifetime)
        await wf.fetch_all()
        return layout_response(request, TITLE, _page(wf))


@courses_router.get("/cours/new", response_class=HTMLResponse)
async def courses_new(request: Request):
    async with view_lifetime(request) as lifetime:
        wf = CoursesWorkflow(await gateway_for(request), lifetime=lifetime)
        await wf.fetch_all()
        wf.begin_create()
        return layout_response(request, TITLE, _page(wf, _form_overlay(request, wf, "/cours/new")))


@courses_router.post("/cours/new", response_class=HTMLResponse)
async def courses_create(request: Request):
    form = await checked_form(request)
    if form is None:
        return csrf_error()
    async with view_lifetime(request) as lifetime:
        wf = CoursesWorkflow(await gateway_for(request), lifetime=lifetime)
        wf.begin_create()
        wf.apply_changes(form)
        if await wf.save():
            return RedirectResponse(url="/cours", status_code=303)
        await wf.fetch_all()
        return layout_response(request, TITLE, _page(wf, _form_overlay(request, wf, "/cours/new")), status_code=400)


async def _load_for_edit(request: Request, wf: CoursesWorkflow, course_id: str) -> Optional[HTMLResponse]:
    await wf.fetch_all()
    course = wf.find(course_id)
    if course is None:
        if not wf.error:
            wf.error = "Course not found"
        return layout_response(request, TITLE, _page(wf), status_code=404)
    wf.begin_edit(course)
    return None


@courses_router.get("/cours/{course_id}/edit", response_class=HTMLResponse)
async def courses_edit(request: Request, course_id: str):
    async with view_lifetime(request) as lifetime:
        wf = CoursesWorkflow(await gateway_for(request), lifetime=lifetime)
        missing = await _load_for_edit(request, wf, course_id)
        if missing is not None:
            return missing
        return layout_response(request, TITLE, _page(wf, _form_overlay(request, wf, f"/cours/{course_id}/edit")))


@courses_router.post("/cours/{course_id}/edit", response_class=HTMLResponse)
async def courses_update(request: Request, course_id: str):
    form = await checked_form(request)
    if form is None:
        return csrf_error()
    async with view_lifetime(request) as lifetime:
        wf = CoursesWorkflow(await gateway_for(request), lifetime=lifetime)
        missing = await _load_for_edit(request, wf, course_id)
        if missing is not None:
            return missing
        wf.apply_changes(form)
        if await wf.save():
            return RedirectResponse(url="/cours", status_code=303)
        return layout_response(request, TITLE, _page(wf, _form_overlay(request, wf, f"/cours/{course_id}/edit")), status_code=400)


@courses_router.get("/cours/{course_id}/delete", response_class=HTMLResponse)
async def courses_delete_confirm(request: Request, course_id: str):
    async with view_lifetime(request) as lifetime:
        wf = CoursesWorkflow(await gateway_for(request), lifetime=lifetime)
        await wf.fetch_all()
        course = wf.find(course_id)
        label = f'"{course.title}"' if course else f"#{course_id}"
        dialog = ConfirmDialog(
            f"Are you sure you want to delete the course {label}?",
            action=f"/cours/{course_id}/delete",
            cancel_href="/cours",
            csrf_token=session_record(request).csrf_token,
        )
        return layout_response(request, TITLE, _page(wf, dialog.render()))


@courses_router.post("/cours/{course_id}/delete", response_class=HTMLResponse)
async def courses_delete(request: Request, course_id: str):
    form = await checked_form(request)
    if form is None:
        return csrf_error()
    async with view_lifetime(request) as lifetime:
        wf = CoursesWorkflow(await gateway_for(request), lifetime=lifetime)
        confirmed = form.get("confirm") == "yes"
        if await wf.delete(course_id, confirmed=confirmed) or not confirmed:
            return RedirectResponse(url="/cours", status_code=303)
        await wf.fetch_all()
        return layout_response(request, TITLE, _page(wf), status_code=400)
