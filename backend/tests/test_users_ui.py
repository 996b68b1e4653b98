"""
Users screen (SSR): list with role badges and counters, create/edit overlays,
delete confirmation, and page-level errors with troubleshooting hints.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
import re

import pytest

import main  # type: ignore
from backoffice.ports import QueryError
from utils.admin_session import ADMIN_EMAIL, client_for, form, signed_in_record


pytestmark = pytest.mark.anyio("asyncio")


def _stat(html: str, key: str) -> int:
    match = re.search(rf'data-stat="{key}".*?stat-card__value">(\d+)<', html, re.S)
    assert match, f"stat card {key} missing"
    return int(match.group(1))


def _seed(gw) -> dict:
    ids = {
        "admin": gw.add_user("root@dailylessons.com", "1", auth_id="auth-root-0123456789"),
        "teacher": gw.add_user("teach@dailylessons.com", "2", auth_id="auth-teacher"),
        "learner": gw.add_user("learn@dailylessons.com", "3", auth_id="auth-learner"),
        "dangling": gw.add_user("lost@dailylessons.com", "42"),
    }
    return ids


@pytest.mark.anyio
async def test_users_list_shows_rows_badges_and_counters(admin_gateway):
    _seed(admin_gateway)
    rec = await signed_in_record(main)
    async with client_for(main, rec) as client:
        resp = await client.get("/users")

    assert resp.status_code == 200
    html = resp.text
    assert 'data-testid="users-table"' in html
    for email in ("root@dailylessons.com", "teach@dailylessons.com", "learn@dailylessons.com", "lost@dailylessons.com"):
        assert email in html
    assert "auth-root-01..." in html
    assert "badge--red" in html and "badge--purple" in html
    assert " Unknown</span>" in html
    assert _stat(html, "users") == 4
    assert (_stat(html, "administrators"), _stat(html, "teachers"), _stat(html, "learners")) == (1, 1, 1)
    assert f'data-testid="header-email">{ADMIN_EMAIL}<' in html


@pytest.mark.anyio
async def test_last_sign_in_column_uses_auth_accounts(admin_gateway):
    _seed(admin_gateway)
    two_hours_ago = (datetime.now(timezone.utc) - timedelta(hours=2, minutes=1)).isoformat()
    admin_gateway.auth_accounts = {"auth-teacher": two_hours_ago}
    rec = await signed_in_record(main)
    async with client_for(main, rec) as client:
        resp = await client.get("/users")
    assert "2 hours ago" in resp.text


@pytest.mark.anyio
async def test_fetch_failure_shows_error_with_hints(admin_gateway):
    admin_gateway.failures["list_users"] = QueryError('relation "Users" does not exist')
    rec = await signed_in_record(main)
    async with client_for(main, rec) as client:
        resp = await client.get("/users")
    assert resp.status_code == 200
    assert 'data-testid="page-error"' in resp.text
    assert "Error fetching users: relation &quot;Users&quot; does not exist" in resp.text
    assert "Things to check:" in resp.text


@pytest.mark.anyio
async def test_create_overlay_lists_roles(admin_gateway):
    rec = await signed_in_record(main)
    async with client_for(main, rec) as client:
        resp = await client.get("/users/new")
    assert resp.status_code == 200
    assert 'data-testid="overlay"' in resp.text
    assert 'action="/users/new"' in resp.text
    assert ">administrator</option>" in resp.text
    assert ">learner</option>" in resp.text


@pytest.mark.anyio
async def test_create_user_redirects_and_persists(admin_gateway):
    rec = await signed_in_record(main)
    async with client_for(main, rec) as client:
        resp = await client.post(
            "/users/new",
            data=form(rec, email="new@dailylessons.com", role_id="3", auth_id="auth-new"),
        )
    assert resp.status_code == 303
    assert resp.headers["location"] == "/users"
    emails = [row["email"] for row in admin_gateway.tables["Users"].values()]
    assert emails == ["new@dailylessons.com"]


@pytest.mark.anyio
async def test_create_user_with_missing_fields_keeps_overlay_open(admin_gateway):
    rec = await signed_in_record(main)
    async with client_for(main, rec) as client:
        resp = await client.post("/users/new", data=form(rec, email="", role_id="2"))
    assert resp.status_code == 400
    assert 'data-testid="overlay-error"' in resp.text
    assert "Please fill in the required fields: email" in resp.text
    assert admin_gateway.tables["Users"] == {}


@pytest.mark.anyio
async def test_create_user_without_csrf_is_forbidden(admin_gateway):
    rec = await signed_in_record(main)
    async with client_for(main, rec) as client:
        resp = await client.post("/users/new", data={"email": "x@y.z", "role_id": "1"})
    assert resp.status_code == 403
    assert admin_gateway.tables["Users"] == {}


@pytest.mark.anyio
async def test_edit_overlay_is_prefilled_and_update_persists(admin_gateway):
    ids = _seed(admin_gateway)
    rec = await signed_in_record(main)
    async with client_for(main, rec) as client:
        page = await client.get(f"/users/{ids['teacher']}/edit")
        resp = await client.post(
            f"/users/{ids['teacher']}/edit",
            data=form(rec, email="head@dailylessons.com", role_id="1", auth_id="auth-teacher"),
        )
    assert page.status_code == 200
    assert 'value="teach@dailylessons.com"' in page.text
    assert resp.status_code == 303
    row = admin_gateway.tables["Users"][ids["teacher"]]
    assert (row["email"], row["role_id"]) == ("head@dailylessons.com", "1")


@pytest.mark.anyio
async def test_edit_unknown_user_is_404(admin_gateway):
    rec = await signed_in_record(main)
    async with client_for(main, rec) as client:
        resp = await client.get("/users/999/edit")
    assert resp.status_code == 404
    assert "User not found" in resp.text


@pytest.mark.anyio
async def test_update_failure_is_shown_inside_overlay(admin_gateway):
    ids = _seed(admin_gateway)
    admin_gateway.failures["update_user"] = QueryError("new row violates row-level security policy")
    rec = await signed_in_record(main)
    async with client_for(main, rec) as client:
        resp = await client.post(
            f"/users/{ids['learner']}/edit",
            data=form(rec, email="learn@dailylessons.com", role_id="2"),
        )
    assert resp.status_code == 400
    assert "Error while saving: new row violates row-level security policy" in resp.text
    assert admin_gateway.tables["Users"][ids["learner"]]["role_id"] == "3"


@pytest.mark.anyio
async def test_delete_requires_confirmation(admin_gateway):
    ids = _seed(admin_gateway)
    rec = await signed_in_record(main)
    async with client_for(main, rec) as client:
        confirm_page = await client.get(f"/users/{ids['learner']}/delete")
        unconfirmed = await client.post(f"/users/{ids['learner']}/delete", data=form(rec))
        assert ids["learner"] in admin_gateway.tables["Users"]
        confirmed = await client.post(f"/users/{ids['learner']}/delete", data=form(rec, confirm="yes"))

    assert confirm_page.status_code == 200
    assert "Confirm deletion" in confirm_page.text
    assert 'name="confirm" value="yes"' in confirm_page.text
    assert unconfirmed.status_code == 303
    assert confirmed.status_code == 303
    assert ids["learner"] not in admin_gateway.tables["Users"]


@pytest.mark.anyio
async def test_delete_failure_keeps_row_and_shows_error(admin_gateway):
    ids = _seed(admin_gateway)
    admin_gateway.failures["delete_user"] = QueryError("permission denied for table Users")
    rec = await signed_in_record(main)
    async with client_for(main, rec) as client:
        resp = await client.post(f"/users/{ids['admin']}/delete", data=form(rec, confirm="yes"))
    assert resp.status_code == 400
    assert "Error while deleting: permission denied for table Users" in resp.text
    assert "root@dailylessons.com" in resp.text
