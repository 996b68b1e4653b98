"""
Route guard decisions and the server-side session store.
"""
from __future__ import annotations

import pytest

from identity_access.guard import GuardDecision, guard
from identity_access.providers import InMemoryAuthProvider
from identity_access.session import Principal, SessionContext
from identity_access.stores import SessionStore


pytestmark = pytest.mark.anyio("asyncio")


def test_guard_decisions():
    principal = Principal(user_id="u", email="u@x.io")
    assert guard(None, True) is GuardDecision.LOADING
    assert guard(principal, True) is GuardDecision.LOADING
    assert guard(None, False) is GuardDecision.REDIRECT_LOGIN
    assert guard(principal, False) is GuardDecision.ALLOW


def test_store_issues_distinct_ids_and_csrf_tokens():
    store = SessionStore()
    a = store.create(context=SessionContext(InMemoryAuthProvider({})))
    b = store.create(context=SessionContext(InMemoryAuthProvider({})))
    assert a.session_id != b.session_id
    assert a.csrf_token and a.csrf_token != b.csrf_token
    assert store.get(a.session_id) is a
    assert len(store) == 2
    assert a.email == ""


def test_expired_records_are_dropped_on_access():
    store = SessionStore()
    rec = store.create(context=SessionContext(InMemoryAuthProvider({})), ttl_seconds=-5)
    assert store.get(rec.session_id) is None
    assert len(store) == 0


@pytest.mark.anyio
async def test_delete_closes_the_context():
    provider = InMemoryAuthProvider({"s@x.io": "pw"})
    ctx = SessionContext(provider)
    await ctx.sign_in("s@x.io", "pw")
    store = SessionStore()
    rec = store.create(context=ctx)
    assert rec.email == "s@x.io"

    store.delete(rec.session_id)
    provider.expire()

    assert store.get(rec.session_id) is None
    assert ctx.principal is not None


def test_creating_a_session_sweeps_expired_records():
    store = SessionStore()
    for _ in range(50):
        store.create(context=SessionContext(InMemoryAuthProvider({})), ttl_seconds=-10)
    fresh = store.create(context=SessionContext(InMemoryAuthProvider({})))

    assert len(store) == 1
    assert store.get(fresh.session_id) is fresh
