"""
Videos screen (`/video`): list with section/course titles and thumbnails,
create/edit overlays with a section selector, delete confirmation.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from backoffice.screens import VideosWorkflow
from components import ConfirmDialog, ErrorBanner, Overlay, StatCard, StatGrid, VideoForm, VideosTable
from routes.views import checked_form, csrf_error, gateway_for, layout_response, session_record, view_lifetime


videos_router = APIRouter(tags=["Videos"])

TITLE = "Video management"


def _page(wf: VideosWorkflow, overlay_html: str = "") -> str:
    stats = wf.stats()
    grid = StatGrid([
        StatCard("Total videos", stats.total, icon="fa-video", key="videos"),
        StatCard("YouTube", stats.youtube, icon="fa-play-circle", color="red", key="youtube"),
        StatCard("Added today", stats.added_today, icon="fa-calendar-day", color="green", key="today"),
    ])
    error_html = ErrorBanner(wf.error).render() if wf.error else ""
    return f"""
        <div class="page-head">
            <p class="text-muted">Manage the videos attached to course sections</p>
            <a href="/video/new" class="btn btn-primary">New video</a>
        </div>
        {error_html}
        {VideosTable(wf.items).render()}
        {grid.render()}
        {overlay_html}
    """


async def _form_overlay(request: Request, wf: VideosWorkflow, action: str) -> str:
    await wf.fetch_sections()
    session = wf.editing
    title = "New video" if action.endswith("/new") else "Edit video"
    form = VideoForm(session.draft, wf.sections, action=action, csrf_token=session_record(request).csrf_token, error=session.error)
    return Overlay(title, form.render(), close_href="/video").render()


@videos_router.get("/video", response_class=HTMLResponse)
async def videos_index(request: Request):
    async with view_lifetime(request) as lifetime:
        wf = VideosWorkflow(await gateway_for(request), lifetime=lifetime)
        await wf.fetch_all()
        return layout_response(request, TITLE, _page(wf))


@videos_router.get("/video/new", response_class=HTMLResponse)
async def videos_new(request: Request):
    async with view_lifetime(request) as lifetime:
        wf = VideosWorkflow(await gateway_for(request), lifetime=lifetime)
        await wf.fetch_all()
        wf.begin_create()
        overlay = await _form_overlay(request, wf, "/video/new")
        return layout_response(request, TITLE, _page(wf, overlay))


@videos_router.post("/video/new", response_class=HTMLResponse)
async def videos_create(request: Request):
    form = await checked_form(request)
    if form is None:
        return csrf_error()
    async with view_lifetime(request) as lifetime:
        wf = VideosWorkflow(await gateway_for(request), lifetime=lifetime)
        wf.begin_create()
        wf.apply_changes(form)
        if await wf.save():
            return RedirectResponse(url="/video", status_code=303)
        await wf.fetch_all()
        overlay = await _form_overlay(request, wf, "/video/new")
        return layout_response(request, TITLE, _page(wf, overlay), status_code=400)


async def _load_for_edit(request: Request, wf: VideosWorkflow, video_id: str) -> Optional[HTMLResponse]:
    await wf.fetch_all()
    video = wf.find(video_id)
    if video is None:
        if not wf.error:
            wf.error = "Video not found"
        return layout_response(request, TITLE, _page(wf), status_code=404)
    wf.begin_edit(video)
    return None


@videos_router.get("/video/{video_id}/edit", response_class=HTMLResponse)
async def videos_edit(request: Request, video_id: str):
    async with view_lifetime(request) as lifetime:
        wf = VideosWorkflow(await gateway_for(request), lifetime=lifetime)
        missing = await _load_for_edit(request, wf, video_id)
        if missing is not None:
            return missing
        overlay = await _form_overlay(request, wf, f"/video/{video_id}/edit")
        return layout_response(request, TITLE, _page(wf, overlay))


@videos_router.post("/video/{video_id}/edit", response_class=HTMLResponse)
async def videos_update(request: Request, video_id: str):
    form = await checked_form(request)
    if form is None:
        return csrf_error()
    async with view_lifetime(request) as lifetime:
        wf = VideosWorkflow(await gateway_for(request), lifetime=lifetime)
        missing = await _load_for_edit(request, wf, video_id)
        if missing is not None:
            return missing
        wf.apply_changes(form)
        if await wf.save():
            return RedirectResponse(url="/video", status_code=303)
        overlay = await _form_overlay(request, wf, f"/video/{video_id}/edit")
        return layout_response(request, TITLE, _page(wf, overlay), status_code=400)


@videos_router.get("/video/{video_id}/delete", response_class=HTMLResponse)
async def videos_delete_confirm(request: Request, video_id: str):
    async with view_lifetime(request) as lifetime:
        wf = VideosWorkflow(await gateway_for(request), lifetime=lifetime)
        await wf.fetch_all()
        video = wf.find(video_id)
        label = f'"{video.title}"' if video else f"#{video_id}"
        dialog = ConfirmDialog(
            f"Are you sure you want to delete the video {label}?",
            action=f"/video/{video_id}/delete",
            cancel_href="/video",
            csrf_token=session_record(request).csrf_token,
        )
        return layout_response(request, TITLE, _page(wf, dialog.render()))


@videos_router.post("/video/{video_id}/delete", response_class=HTMLResponse)
async def videos_delete(request: Request, video_id: str):
    form = await checked_form(request)
    if form is None:
        return csrf_error()
    async with view_lifetime(request) as lifetime:
        wf = VideosWorkflow(await gateway_for(request), lifetime=lifetime)
        confirmed = form.get("confirm") == "yes"
        if await wf.delete(video_id, confirmed=confirmed) or not confirmed:
            return RedirectResponse(url="/video", status_code=303)
        await wf.fetch_all()
        return layout_response(request, TITLE, _page(wf), status_code=400)
