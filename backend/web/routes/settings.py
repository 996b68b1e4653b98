"""
Settings page: static account and application panels.
"""
from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from components import Component
from components.layout import DEFAULT_ADMIN_EMAIL
import config
from routes.views import layout_response, session_record


settings_router = APIRouter(tags=["Settings"])


@settings_router.get("/settings", response_class=HTMLResponse)
async def settings_index(request: Request):
    email = session_record(request).email or DEFAULT_ADMIN_EMAIL
    backend = "In-memory demo" if config.data_backend() == "memory" else "Supabase"
    content = f"""
        <div class="settings-grid">
            <section class="card" aria-labelledby="account-heading">
                <h2 id="account-heading">{Component.icon("fa-user-cog")} Account</h2>
                <dl class="settings-list">
                    <dt>Email</dt><dd>{Component.escape(email)}</dd>
                    <dt>Access</dt><dd>Staff</dd>
                </dl>
            </section>
            <section class="card" aria-labelledby="app-heading">
                <h2 id="app-heading">{Component.icon("fa-cogs")} Application</h2>
                <dl class="settings-list">
                    <dt>Name</dt><dd>DailyLessons Admin</dd>
                    <dt>Data backend</dt><dd>{Component.escape(backend)}</dd>
                    <dt>Language</dt><dd>English</dd>
                </dl>
            </section>
        </div>
    """
    return layout_response(request, "Settings", content)
