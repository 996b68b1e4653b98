"""
Users screen: list, edit overlay, create overlay and delete confirmation.

Permissions:
    Any signed-in staff member (the guard middleware enforces a session).
    Row-level restrictions are applied by the backend's RLS policies.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from backoffice.screens import UsersWorkflow
from components import ConfirmDialog, ErrorBanner, Overlay, StatCard, StatGrid, UserForm, UsersTable
from routes.views import checked_form, csrf_error, gateway_for, layout_response, session_record, view_lifetime


users_router = APIRouter(tags=["Users"])

TITLE = "User management"
HINTS = (
    "The Users and Roles tables exist in the backend",
    "Row level security policies allow this account to read them",
    "Users.role_id references Roles.id",
)


def _page(wf: UsersWorkflow, overlay_html: str = "") -> str:
    counts = wf.role_counts()
    stats = StatGrid([
        StatCard("Total users", len(wf.items), icon="fa-users", key="users"),
        StatCard("Administrators", counts["administrator"], icon="fa-crown", color="red", key="administrators"),
        StatCard("Teachers", counts["teacher"], icon="fa-chalkboard-teacher", color="purple", key="teachers"),
        StatCard("Learners", counts["learner"], icon="fa-graduation-cap", color="green", key="learners"),
    ])
    error_html = ErrorBanner(wf.error, hints=HINTS).render() if wf.error else ""
    return f"""
        <div class="page-head">
            <p class="text-muted">Manage platform accounts and their roles</p>
            <a href="/users/new" class="btn btn-primary">Add user</a>
        </div>
        {error_html}
        {stats.render()}
        {UsersTable(wf.items).render()}
        {overlay_html}
    """


def _form_overlay(request: Request, wf: UsersWorkflow, action: str) -> str:
    session = wf.editing
    title = "New user" if action.endswith("/new") else "Edit user"
    form = UserForm(session.draft, wf.roles, action=action, csrf_token=session_record(request).csrf_token, error=session.error)
    return Overlay(title, form.render(), close_href="/users").render()


@users_router.get("/users", response_class=HTMLResponse)
async def users_index(request: Request):
    async with view_lifetime(request) as lifetime:
        wf = UsersWorkflow(await gateway_for(request), lifetime=lifetime)
        await wf.fetch_all()
        return layout_response(request, TITLE, _page(wf))


@users_router.get("/users/new", response_class=HTMLResponse)
async def users_new(request: Request):
    async with view_lifetime(request) as lifetime:
        wf = UsersWorkflow(await gateway_for(request), lifetime=lifetime)
        await wf.fetch_all()
        wf.begin_create()
        return layout_response(request, TITLE, _page(wf, _form_overlay(request, wf, "/users/new")))


@users_router.post("/users/new", response_class=HTMLResponse)
async def users_create(request: Request):
    form = await checked_form(request)
    if form is None:
        return csrf_error()
    async with view_lifetime(request) as lifetime:
        wf = UsersWorkflow(await gateway_for(request), lifetime=lifetime)
        wf.begin_create()
        wf.apply_changes(form)
        if await wf.save():
            return RedirectResponse(url="/users", status_code=303)
        await wf.fetch_all()
        return layout_response(request, TITLE, _page(wf, _form_overlay(request, wf, "/users/new")), status_code=400)


async def _load_for_edit(request: Request, wf: UsersWorkflow, user_id: str) -> Optional[HTMLResponse]:
    await wf.fetch_all()
    user = wf.find(user_id)
    if user is None:
        if not wf.error:
            wf.error = "User not found"
        return layout_response(request, TITLE, _page(wf), status_code=404)
    wf.begin_edit(user)
    return None


@users_router.get("/users/{user_id}/edit", response_class=HTMLResponse)
async def users_edit(request: Request, user_id: str):
    async with view_lifetime(request) as lifetime:
        wf = UsersWorkflow(await gateway_for(request), lifetime=lifetime)
        missing = await _load_for_edit(request, wf, user_id)
        if missing is not None:
            return missing
        return layout_response(request, TITLE, _page(wf, _form_overlay(request, wf, f"/users/{user_id}/edit")))


@users_router.post("/users/{user_id}/edit", response_class=HTMLResponse)
async def users_update(request: Request, user_id: str):
    form = await checked_form(request)
    if form is None:
        return csrf_error()
    async with view_lifetime(request) as lifetime:
        wf = UsersWorkflow(await gateway_for(request), lifetime=lifetime)
        missing = await _load_for_edit(request, wf, user_id)
        if missing is not None:
            return missing
        wf.apply_changes(form)
        if await wf.save():
            return RedirectResponse(url="/users", status_code=303)
        return layout_response(request, TITLE, _page(wf, _form_overlay(request, wf, f"/users/{user_id}/edit")), status_code=400)


@users_router.get("/users/{user_id}/delete", response_class=HTMLResponse)
async def users_delete_confirm(request: Request, user_id: str):
    async with view_lifetime(request) as lifetime:
        wf = UsersWorkflow(await gateway_for(request), lifetime=lifetime)
        await wf.fetch_all()
        user = wf.find(user_id)
        label = user.email if user else f"#{user_id}"
        dialog = ConfirmDialog(
            f"Are you sure you want to delete the user {label}?",
            action=f"/users/{user_id}/delete",
            cancel_href="/users",
            csrf_token=session_record(request).csrf_token,
        )
        return layout_response(request, TITLE, _page(wf, dialog.render()))


@users_router.post("/users/{user_id}/delete", response_class=HTMLResponse)
async def users_delete(request: Request, user_id: str):
    form = await checked_form(request)
    if form is None:
        return csrf_error()
    async with view_lifetime(request) as lifetime:
        wf = UsersWorkflow(await gateway_for(request), lifetime=lifetime)
        confirmed = form.get("confirm") == "yes"
        if await wf.delete(user_id, confirmed=confirmed) or not confirmed:
            return RedirectResponse(url="/users", status_code=303)
        await wf.fetch_all()
        return layout_response(request, TITLE, _page(wf), status_code=400)
