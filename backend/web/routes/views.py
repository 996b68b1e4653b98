"""
Shared helpers for the server-rendered admin pages.

Why:
    Every screen repeats the same steps: resolve the session record placed on
    `request.state` by the guard middleware, bind a view lifetime, obtain the
    session's gateway, check CSRF on POST, and wrap content in the Layout.
    Keeping them here keeps the screen routers short and uniform.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import Any, AsyncIterator, Optional

from fastapi import Request
from fastapi.responses import HTMLResponse

from backoffice.workflow import ViewLifetime
from components import Layout
from identity_access.stores import SessionRecord
from routes.security import _is_same_origin, tokens_match
import wiring


logger = logging.getLogger("dailylessons.web.views")

NO_STORE = {"Cache-Control": "private, no-store"}


def session_record(request: Request) -> SessionRecord:
    """Return the record the guard middleware attached to this request."""
    return request.state.session


def layout_response(request: Request, title: str, content: str, *, status_code: int = 200) -> HTMLResponse:
    """Render content inside the authenticated Layout.

    Behavior:
        - Header shows the principal's email (Layout falls back when empty).
        - Sign-out form carries the session's CSRF token.
        - Personalized pages are never cached.
    """
    rec: Optional[SessionRecord] = getattr(request.state, "session", None)
    layout = Layout(
        title=title,
        content=content,
        email=rec.email if rec else None,
        csrf_token=rec.csrf_token if rec else "",
        current_path=request.url.path,
    )
    return HTMLResponse(content=layout.render(), status_code=status_code, headers=dict(NO_STORE))


@asynccontextmanager
async def view_lifetime(request: Request) -> AsyncIterator[ViewLifetime]:
    """Lifetime token for one page render.

    Cancelled when the handler finishes, or earlier when the session context
    loses its principal (provider sign-out) while remote calls are in flight.
    """
    lifetime = ViewLifetime()
    rec = session_record(request)

    def _on_session_change(principal: Any) -> None:
        if principal is None:
            lifetime.cancel()

    unsubscribe = rec.context.subscribe(_on_session_change)
    try:
        yield lifetime
    finally:
        unsubscribe()
        lifetime.cancel()


async def gateway_for(request: Request) -> Any:
    return await wiring.gateway_for(session_record(request).context)


async def checked_form(request: Request) -> Optional[dict]:
    """Parse a POSTed form and verify origin plus CSRF token.

    Returns the form as a plain dict, or None when the request must be
    rejected with 403.
    """
    if not _is_same_origin(request):
        logger.warning("Rejected cross-origin POST to %s", request.url.path)
        return None
    form = await request.form()
    if not tokens_match(session_record(request).csrf_token, form.get("csrf_token")):
        logger.warning("Rejected POST to %s: CSRF token mismatch", request.url.path)
        return None
    return {key: value for key, value in form.items() if isinstance(value, str)}


def csrf_error() -> HTMLResponse:
    return HTMLResponse("CSRF Error", status_code=403, headers=dict(NO_STORE))
