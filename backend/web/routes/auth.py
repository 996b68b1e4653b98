"""
Authentication routes: password sign-in and sign-out.

Why:
    Sign-in is delegated to the backend's auth provider through a fresh
    Session Context per browser session. The browser only receives an opaque
    session cookie.

Notes:
    - This module imports from `main` inside functions to reuse the shared
      session store and cookie helpers without an import cycle.
    - Before a session exists, the login form is protected by a double-submit
      token: a short-lived cookie that must match the hidden form field.
"""

from __future__ import annotations

import logging
import secrets

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from auth_utils import cookie_opts, safe_next_path
from components import Layout, LoginForm
import config
from routes.security import _is_same_origin, tokens_match
import wiring


auth_router = APIRouter(tags=["Auth"])
logger = logging.getLogger("dailylessons.web.auth")

LOGIN_CSRF_COOKIE = "dailylessons_login_csrf"
LOGIN_CSRF_TTL_SECONDS = 900


def _login_page(token: str, *, email: str = "", error: str | None = None, next_path: str = "", status_code: int = 200) -> HTMLResponse:
    form = LoginForm(csrf_token=token, email=email, error=error, next_path=next_path)
    layout = Layout(title="Sign in", content=form.render(), show_nav=False)
    response = HTMLResponse(content=layout.render(), status_code=status_code)
    response.headers["Cache-Control"] = "private, no-store"
    opts = cookie_opts(_environment())
    response.set_cookie(
        key=LOGIN_CSRF_COOKIE,
        value=token,
        httponly=True,
        secure=opts["secure"],
        samesite=opts["samesite"],
        path="/login",
        max_age=LOGIN_CSRF_TTL_SECONDS,
    )
    return response


def _environment() -> str:
    import main

    return main.SETTINGS.environment


def _current_record(request: Request):
    import main

    sid = request.cookies.get(main.SESSION_COOKIE_NAME)
    if not sid:
        return None
    rec = main.SESSION_STORE.get(sid)
    if rec is None or rec.context.principal is None:
        return None
    return rec


@auth_router.get("/login", response_class=HTMLResponse)
async def login_form(request: Request):
    """Render the sign-in form; signed-in visitors go straight to the dashboard."""
    if _current_record(request) is not None:
        return RedirectResponse(url="/dashboard", status_code=303)
    next_path = safe_next_path(request.query_params.get("next"), default="")
    return _login_page(secrets.token_urlsafe(24), next_path=next_path)


@auth_router.post("/login", response_class=HTMLResponse)
async def login_submit(request: Request):
    """Authenticate with email/password and start a server-side session.

    Behavior:
        - Valid credentials: new session record, cookie set, 303 to the
          requested in-app path (default /dashboard).
        - Invalid credentials: the form is re-rendered (400) with a
          human-readable error and the email kept; no redirect.
        - Cross-origin or token mismatch: 403.
    """
    import main

    form = await request.form()
    if not _is_same_origin(request) or not tokens_match(request.cookies.get(LOGIN_CSRF_COOKIE), form.get("csrf_token")):
        logger.warning("Rejected login POST: CSRF check failed")
        return HTMLResponse("CSRF Error", status_code=403)

    email = str(form.get("email") or "").strip()
    password = str(form.get("password") or "")
    next_path = safe_next_path(str(form.get("next") or ""))

    context = wiring.create_session_context()
    result = await context.sign_in(email, password)
    if not result.ok:
        context.close()
        return _login_page(
            secrets.token_urlsafe(24),
            email=email,
            error=result.error,
            next_path=next_path if next_path != "/dashboard" else "",
            status_code=400,
        )

    # Rotate: never reuse a pre-login session id
    old_sid = request.cookies.get(main.SESSION_COOKIE_NAME)
    if old_sid:
        main.SESSION_STORE.delete(old_sid)
    rec = main.SESSION_STORE.create(context=context, ttl_seconds=config.session_ttl_seconds())
    logger.info("Signed in: session created")
    response = RedirectResponse(url=next_path, status_code=303)
    main._set_session_cookie(response, rec.session_id, max_age=config.session_ttl_seconds())
    response.delete_cookie(LOGIN_CSRF_COOKIE, path="/login")
    return response


async def _end_session(request: Request) -> Response:
    import main

    sid = request.cookies.get(main.SESSION_COOKIE_NAME)
    rec = main.SESSION_STORE.get(sid) if sid else None
    if rec is not None:
        await rec.context.sign_out()
        main.SESSION_STORE.delete(sid)
    response = RedirectResponse(url="/login", status_code=303)
    main._clear_session_cookie(response)
    return response


@auth_router.post("/logout")
async def logout_submit(request: Request):
    """Sign out (form POST from the header); requires the session's CSRF token."""
    import main

    sid = request.cookies.get(main.SESSION_COOKIE_NAME)
    rec = main.SESSION_STORE.get(sid) if sid else None
    if rec is not None:
        form = await request.form()
        if not _is_same_origin(request) or not tokens_match(rec.csrf_token, form.get("csrf_token")):
            return HTMLResponse("CSRF Error", status_code=403)
    return await _end_session(request)


@auth_router.get("/logout")
async def logout_link(request: Request):
    """Plain-link sign-out; same effect as the POST form."""
    return await _end_session(request)
