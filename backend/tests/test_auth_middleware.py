"""
Guard middleware: unauthenticated redirects, loading state, provider-driven
sign-out, and the public/catch-all routes.
"""
from __future__ import annotations

import pytest

import main  # type: ignore
from utils.admin_session import client_for, make_provider, signed_in_record


pytestmark = pytest.mark.anyio("asyncio")


@pytest.mark.anyio
@pytest.mark.parametrize("path", ["/dashboard", "/users", "/cours", "/video", "/settings", "/cours/new"])
async def test_protected_pages_redirect_to_login_without_session(path):
    async with client_for(main) as client:
        resp = await client.get(path)
    assert resp.status_code == 302
    assert resp.headers["location"] == "/login"


@pytest.mark.anyio
async def test_unknown_session_id_is_cleared():
    async with client_for(main) as client:
        client.cookies.set(main.SESSION_COOKIE_NAME, "stale-id")
        resp = await client.get("/dashboard")
    assert resp.status_code == 302
    assert main.SESSION_COOKIE_NAME in resp.headers.get("set-cookie", "")


@pytest.mark.anyio
async def test_loading_session_renders_placeholder():
    rec = await signed_in_record(main)
    rec.context.loading = True
    async with client_for(main, rec) as client:
        resp = await client.get("/users")
    assert resp.status_code == 200
    assert 'data-testid="loading"' in resp.text
    assert 'data-testid="users-table"' not in resp.text


@pytest.mark.anyio
async def test_provider_sign_out_redirects_next_request(admin_gateway):
    provider = make_provider()
    rec = await signed_in_record(main, provider=provider)
    async with client_for(main, rec) as client:
        first = await client.get("/dashboard")
        provider.expire()
        second = await client.get("/dashboard")
    assert first.status_code == 200
    assert second.status_code == 302
    assert second.headers["location"] == "/login"
    assert main.SESSION_STORE.get(rec.session_id) is None


@pytest.mark.anyio
async def test_root_redirects_to_dashboard_when_signed_in():
    rec = await signed_in_record(main)
    async with client_for(main, rec) as client:
        resp = await client.get("/")
    assert resp.status_code == 302
    assert resp.headers["location"] == "/dashboard"


@pytest.mark.anyio
@pytest.mark.parametrize("signed_in", [False, True])
async def test_unknown_paths_lead_to_login(signed_in):
    rec = await signed_in_record(main) if signed_in else None
    async with client_for(main, rec) as client:
        resp = await client.get("/does/not/exist")
    assert resp.status_code == 302
    assert resp.headers["location"] == "/login"


@pytest.mark.anyio
async def test_health_is_public():
    async with client_for(main) as client:
        resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy"}


@pytest.mark.anyio
@pytest.mark.parametrize("method", ["POST", "PUT", "DELETE"])
async def test_unknown_paths_redirect_for_any_method_when_signed_in(method):
    rec = await signed_in_record(main)
    async with client_for(main, rec) as client:
        resp = await client.request(method, "/does/not/exist")
    assert resp.status_code == 302
    assert resp.headers["location"] == "/login"
