"DailyLessons admin"
from __future__ import annotations

from pathlib import Path
import logging
import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from fastapi.staticfiles import StaticFiles

from components import Layout, LoadingPlaceholder
from identity_access.guard import GuardDecision, guard
from identity_access.stores import SessionRecord, SessionStore

try:
    from .auth_utils import cookie_opts
except ImportError:
    from auth_utils import cookie_opts


def _should_load_dotenv() -> bool:
    """Decide if we should load a local .env file.

    - Never load under pytest to avoid contaminating test env.
    - Allow explicit opt-out/opt-in via ADMIN_ENABLE_DOTENV (default true
      outside pytest).
    """
    import sys
    if "pytest" in sys.modules or os.getenv("PYTEST_CURRENT_TEST"):
        return False
    flag = (os.getenv("ADMIN_ENABLE_DOTENV", "true") or "").strip().lower()
    return flag in ("1", "true", "yes")


from dotenv import load_dotenv

if _should_load_dotenv():
    load_dotenv()

import config

# Fail fast on insecure production configuration
config.ensure_secure_config_on_startup()

# --- App & Settings Setup -------------------------------------------------------

class AuthSettings:
    def __init__(self) -> None:
        self._env_override: str | None = None

    @property
    def environment(self) -> str:
        if self._env_override is not None:
            return self._env_override
        return os.getenv("ADMIN_ENV", "dev").lower()

    def override_environment(self, env: str | None) -> None:
        """Override environment for tests (e.g., "prod"), or reset with None."""
        self._env_override = env


logger = logging.getLogger("dailylessons.web")
SETTINGS = AuthSettings()
SESSION_COOKIE_NAME = "dailylessons_admin_session"
SESSION_STORE = SessionStore()

app = FastAPI(title="DailyLessons Admin", description="Back-office for the DailyLessons e-learning platform", version="0.1.0")

# --- Static Files & Routers -----------------------------------------------------

static_dir = Path(__file__).parent / "static"
app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

from routes.auth import auth_router
from routes.dashboard import dashboard_router
from routes.users import users_router
from routes.courses import courses_router
from routes.videos import videos_router
from routes.settings import settings_router

# --- Session Cookie Helpers -----------------------------------------------------

def _session_cookie_options() -> dict:
    return cookie_opts(SETTINGS.environment)


def _set_session_cookie(response: Response, value: str, *, max_age: int | None = None) -> None:
    opts = _session_cookie_options()
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=value,
        httponly=True,
        secure=opts["secure"],
        samesite=opts["samesite"],
        path="/",
        max_age=max_age,
    )


def _clear_session_cookie(response: Response) -> None:
    opts = _session_cookie_options()
    response.delete_cookie(
        SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=opts["secure"],
        samesite=opts["samesite"],
    )

# --- Auth Middleware ------------------------------------------------------------

def _is_public_path(path: str) -> bool:
    return path.startswith("/static/") or path in ("/login", "/logout", "/health", "/favicon.ico")


def _login_redirect(*, clear_cookie: bool) -> Response:
    response = RedirectResponse(url="/login", status_code=302)
    if clear_cookie:
        _clear_session_cookie(response)
    return response


def _loading_response() -> HTMLResponse:
    layout = Layout(title="Loading", content=LoadingPlaceholder("Checking your session...").render(), show_nav=False)
    return HTMLResponse(content=layout.render(), status_code=200, headers={"Cache-Control": "private, no-store"})


@app.middleware("http")
async def auth_enforcement(request: Request, call_next):
    """Resolve the Session Context from the cookie and apply the route guard.

    Behavior:
        - Public paths pass through untouched.
        - No/unknown/expired session id: redirect to /login.
        - LOADING (initial session probe still running): loading placeholder.
        - REDIRECT_LOGIN (principal gone, e.g. provider sign-out): the record
          is dropped and the browser is sent to /login.
        - ALLOW: the record is exposed as `request.state.session`.
    """
    path = request.url.path
    if _is_public_path(path):
        return await call_next(request)

    sid = request.cookies.get(SESSION_COOKIE_NAME)
    rec: Optional[SessionRecord] = SESSION_STORE.get(sid) if sid else None
    if rec is None:
        return _login_redirect(clear_cookie=bool(sid))

    decision = guard(rec.context.principal, rec.context.loading)
    if decision is GuardDecision.LOADING:
        return _loading_response()
    if decision is GuardDecision.REDIRECT_LOGIN:
        SESSION_STORE.delete(sid)
        return _login_redirect(clear_cookie=True)

    request.state.session = rec
    return await call_next(request)

# --- Security Headers Middleware ----------------------------------------------

_CSP_TEMPLATE = (
    "default-src 'self'; script-src 'self'; style-src {style_src}; "
    "img-src 'self' data: https://img.youtube.com; font-src 'self' data:; "
    "connect-src 'self'; form-action 'self'; frame-ancestors 'none';"
)

@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    # No inline styles in production
    style_src = "'self'" if SETTINGS.environment == "prod" else "'self' 'unsafe-inline'"
    response.headers.setdefault("Content-Security-Policy", _CSP_TEMPLATE.format(style_src=style_src))
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
    # HSTS: always on (dev = prod)
    response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
    return response

# --- Routes ---------------------------------------------------------------------

app.include_router(auth_router)
app.include_router(dashboard_router)
app.include_router(users_router)
app.include_router(courses_router)
app.include_router(videos_router)
app.include_router(settings_router)


@app.get("/health")
async def health():
    return JSONResponse({"status": "healthy"})


@app.get("/")
async def index():
    return RedirectResponse(url="/dashboard", status_code=302)


@app.api_route("/{unknown_path:path}", methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def unknown_route(unknown_path: str):
    """Any unmapped path leads to the sign-in page."""
    return RedirectResponse(url="/login", status_code=302)
