"""
Sign-in and sign-out through the server-rendered pages.

Behavior under test:
- GET /login renders the form and issues the login CSRF cookie.
- Valid credentials create a server-side session and redirect (303).
- Invalid credentials re-render the form with a readable error (no redirect).
- Token mismatch is rejected with 403.
- Sign-out ends the session and returns to /login.
"""
from __future__ import annotations

import re

import pytest

import main  # type: ignore
import wiring  # type: ignore
from routes.auth import LOGIN_CSRF_COOKIE  # type: ignore
from utils.admin_session import ADMIN_EMAIL, ADMIN_PASSWORD, client_for, form, make_provider, signed_in_record


pytestmark = pytest.mark.anyio("asyncio")

_TOKEN = re.compile(r'name="csrf_token" value="([^"]+)"')


async def _login_token(client) -> str:
    resp = await client.get("/login")
    assert resp.status_code == 200
    token = _TOKEN.search(resp.text).group(1)
    assert LOGIN_CSRF_COOKIE in resp.headers.get("set-cookie", "")
    client.cookies.set(LOGIN_CSRF_COOKIE, token)
    return token


@pytest.mark.anyio
async def test_login_page_renders_form_without_navigation():
    async with client_for(main) as client:
        resp = await client.get("/login")
    assert resp.status_code == 200
    assert 'action="/login"' in resp.text
    assert 'name="password"' in resp.text
    assert 'class="sidebar"' not in resp.text
    assert resp.headers.get("Cache-Control") == "private, no-store"


@pytest.mark.anyio
async def test_valid_credentials_create_session_and_redirect():
    wiring.set_auth_provider_factory(make_provider)
    async with client_for(main) as client:
        token = await _login_token(client)
        resp = await client.post(
            "/login",
            data={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD, "csrf_token": token},
        )
    assert resp.status_code == 303
    assert resp.headers["location"] == "/dashboard"
    set_cookie = resp.headers.get("set-cookie", "")
    assert main.SESSION_COOKIE_NAME in set_cookie
    assert "HttpOnly" in set_cookie and "Secure" in set_cookie
    assert len(main.SESSION_STORE) == 1


@pytest.mark.anyio
async def test_login_honours_in_app_next_path_only():
    wiring.set_auth_provider_factory(make_provider)
    async with client_for(main) as client:
        token = await _login_token(client)
        ok = await client.post(
            "/login",
            data={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD, "csrf_token": token, "next": "/cours"},
        )
        token = await _login_token(client)
        evil = await client.post(
            "/login",
            data={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD, "csrf_token": token, "next": "//evil.example"},
        )
    assert ok.headers["location"] == "/cours"
    assert evil.headers["location"] == "/dashboard"


@pytest.mark.anyio
async def test_invalid_credentials_show_error_and_keep_email():
    wiring.set_auth_provider_factory(make_provider)
    async with client_for(main) as client:
        token = await _login_token(client)
        resp = await client.post(
            "/login",
            data={"email": ADMIN_EMAIL, "password": "wrong", "csrf_token": token},
        )
    assert resp.status_code == 400
    assert 'data-testid="login-error"' in resp.text
    assert "Invalid login credentials" in resp.text
    assert f'value="{ADMIN_EMAIL}"' in resp.text
    assert "wrong" not in resp.text
    assert len(main.SESSION_STORE) == 0


@pytest.mark.anyio
async def test_empty_fields_are_rejected_before_the_provider():
    wiring.set_auth_provider_factory(make_provider)
    async with client_for(main) as client:
        token = await _login_token(client)
        resp = await client.post("/login", data={"email": "", "password": "", "csrf_token": token})
    assert resp.status_code == 400
    assert "Email and password are required." in resp.text


@pytest.mark.anyio
async def test_login_without_matching_csrf_token_is_forbidden():
    wiring.set_auth_provider_factory(make_provider)
    async with client_for(main) as client:
        await _login_token(client)
        resp = await client.post(
            "/login",
            data={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD, "csrf_token": "forged"},
        )
    assert resp.status_code == 403
    assert len(main.SESSION_STORE) == 0


@pytest.mark.anyio
async def test_cross_origin_login_is_forbidden():
    wiring.set_auth_provider_factory(make_provider)
    async with client_for(main) as client:
        token = await _login_token(client)
        resp = await client.post(
            "/login",
            data={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD, "csrf_token": token},
            headers={"Origin": "https://evil.example"},
        )
    assert resp.status_code == 403


@pytest.mark.anyio
async def test_signed_in_visitor_skips_login_page():
    rec = await signed_in_record(main)
    async with client_for(main, rec) as client:
        resp = await client.get("/login")
    assert resp.status_code == 303
    assert resp.headers["location"] == "/dashboard"


@pytest.mark.anyio
async def test_demo_backend_accepts_demo_account(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ADMIN_DATA_BACKEND", "memory")
    async with client_for(main) as client:
        token = await _login_token(client)
        resp = await client.post(
            "/login",
            data={"email": wiring.DEMO_EMAIL, "password": "admin", "csrf_token": token},
        )
    assert resp.status_code == 303


@pytest.mark.anyio
async def test_logout_ends_session_and_signs_out_provider():
    provider = make_provider()
    rec = await signed_in_record(main, provider=provider)
    async with client_for(main, rec) as client:
        resp = await client.post("/logout", data=form(rec))
    assert resp.status_code == 303
    assert resp.headers["location"] == "/login"
    assert main.SESSION_STORE.get(rec.session_id) is None
    assert await provider.current_session() is None


@pytest.mark.anyio
async def test_logout_post_requires_session_csrf_token():
    rec = await signed_in_record(main)
    async with client_for(main, rec) as client:
        resp = await client.post("/logout", data={"csrf_token": "nope"})
    assert resp.status_code == 403
    assert main.SESSION_STORE.get(rec.session_id) is rec


@pytest.mark.anyio
async def test_logout_link_without_session_goes_to_login():
    async with client_for(main) as client:
        resp = await client.get("/logout")
    assert resp.status_code == 303
    assert resp.headers["location"] == "/login"
