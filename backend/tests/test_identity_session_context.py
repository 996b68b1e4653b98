"""
Session Context behavior over the in-memory and Supabase auth providers.

Why:
    Pages read auth state only through an injected context. These tests pin
    the probe-once initialization, provider-pushed changes, sign-in error
    messages and the unsubscribe-on-close contract.
"""
from __future__ import annotations

import httpx
import pytest

from identity_access.providers import InMemoryAuthProvider
from identity_access.session import (
    GENERIC_SIGN_IN_ERROR,
    AuthError,
    Principal,
    SessionContext,
    SupabaseAuthProvider,
    principal_from_session,
)
from utils.fake_supabase import APIError, FakeSupabaseClient, auth_session


pytestmark = pytest.mark.anyio("asyncio")


def _provider() -> InMemoryAuthProvider:
    return InMemoryAuthProvider({"staff@x.io": "pw"}, user_ids={"staff@x.io": "auth-staff"})


@pytest.mark.anyio
async def test_initialize_probes_once_and_ends_not_loading():
    ctx = SessionContext(_provider())
    seen = []
    ctx.subscribe(seen.append)

    await ctx.initialize()
    await ctx.initialize()

    assert ctx.loading is False
    assert ctx.principal is None
    assert seen == [None]


class _BrokenProbe(InMemoryAuthProvider):
    async def current_session(self):
        raise RuntimeError("network down")


@pytest.mark.anyio
async def test_failed_probe_means_no_session():
    ctx = SessionContext(_BrokenProbe({}))
    await ctx.initialize()
    assert ctx.principal is None
    assert ctx.loading is False


@pytest.mark.anyio
async def test_sign_in_success_notifies_subscribers():
    ctx = SessionContext(_provider())
    seen = []
    ctx.subscribe(seen.append)

    result = await ctx.sign_in("staff@x.io", "pw")

    assert result.ok
    assert ctx.authenticated
    assert ctx.principal.user_id == "auth-staff"
    assert seen[-1] == ctx.principal


@pytest.mark.anyio
@pytest.mark.parametrize(
    "email,password,message",
    [
        ("", "pw", "Email and password are required."),
        ("staff@x.io", "", "Email and password are required."),
        ("staff@x.io", "wrong", "Invalid login credentials"),
        ("unknown@x.io", "pw", "Invalid login credentials"),
    ],
)
async def test_sign_in_failures_surface_readable_messages(email, password, message):
    ctx = SessionContext(_provider())
    result = await ctx.sign_in(email, password)
    assert not result.ok
    assert result.error == message
    assert ctx.principal is None


class _ExplodingProvider(InMemoryAuthProvider):
    async def sign_in(self, email, password):
        raise RuntimeError("socket closed")


@pytest.mark.anyio
async def test_unexpected_sign_in_error_is_generic():
    ctx = SessionContext(_ExplodingProvider({"staff@x.io": "pw"}))
    result = await ctx.sign_in("staff@x.io", "pw")
    assert result.error == GENERIC_SIGN_IN_ERROR


@pytest.mark.anyio
async def test_provider_sign_out_event_clears_principal():
    provider = _provider()
    ctx = SessionContext(provider)
    await ctx.sign_in("staff@x.io", "pw")
    seen = []
    ctx.subscribe(seen.append)

    provider.expire()

    assert ctx.principal is None
    assert seen == [None]


@pytest.mark.anyio
async def test_unsubscribe_and_close_stop_notifications():
    provider = _provider()
    ctx = SessionContext(provider)
    await ctx.sign_in("staff@x.io", "pw")
    seen = []
    unsubscribe = ctx.subscribe(seen.append)
    unsubscribe()
    unsubscribe()

    ctx.close()
    provider.expire()

    assert seen == []
    assert ctx.principal is not None


class _FailingSignOut(InMemoryAuthProvider):
    async def sign_out(self):
        raise RuntimeError("already revoked")


@pytest.mark.anyio
async def test_sign_out_clears_principal_even_when_provider_fails():
    ctx = SessionContext(_FailingSignOut({"staff@x.io": "pw"}))
    await ctx.sign_in("staff@x.io", "pw")
    await ctx.sign_out()
    assert ctx.principal is None


# --- Supabase provider ------------------------------------------------------------


def _supabase_provider(client: FakeSupabaseClient):
    calls = []

    async def factory():
        calls.append(1)
        return client

    return SupabaseAuthProvider(factory), calls


@pytest.mark.anyio
async def test_supabase_sign_in_maps_session_to_principal():
    client = FakeSupabaseClient()
    client.auth.sign_in_result = type("Resp", (), {"session": auth_session("uid-1", "staff@x.io", "jwt-1")})()
    provider, calls = _supabase_provider(client)

    principal = await provider.sign_in("staff@x.io", "pw")
    await provider.current_session()

    assert principal == Principal(user_id="uid-1", email="staff@x.io", access_token="jwt-1")
    assert len(calls) == 1


@pytest.mark.anyio
async def test_supabase_rejection_carries_backend_message():
    client = FakeSupabaseClient()
    client.auth.sign_in_result = APIError("Email not confirmed")
    provider, _ = _supabase_provider(client)
    with pytest.raises(AuthError) as excinfo:
        await provider.sign_in("staff@x.io", "pw")
    assert excinfo.value.message == "Email not confirmed"


@pytest.mark.anyio
async def test_supabase_missing_session_is_invalid_credentials():
    client = FakeSupabaseClient()
    client.auth.sign_in_result = type("Resp", (), {"session": None})()
    ctx = SessionContext(_supabase_provider(client)[0])
    result = await ctx.sign_in("staff@x.io", "pw")
    assert result.error == "Invalid login credentials"


@pytest.mark.anyio
async def test_supabase_transport_error_yields_generic_message():
    client = FakeSupabaseClient()
    client.auth.sign_in_result = httpx.ConnectError("refused")
    ctx = SessionContext(_supabase_provider(client)[0])
    result = await ctx.sign_in("staff@x.io", "pw")
    assert result.error == GENERIC_SIGN_IN_ERROR


@pytest.mark.anyio
async def test_supabase_auth_events_update_the_context():
    client = FakeSupabaseClient()
    client.auth.session = auth_session("uid-1", "staff@x.io")
    ctx = SessionContext(_supabase_provider(client)[0])
    await ctx.initialize()
    assert ctx.principal.user_id == "uid-1"

    for listener in list(client.auth.listeners):
        listener("SIGNED_OUT", None)
    assert ctx.principal is None

    ctx.close()
    assert client.auth.listeners == []


def test_principal_from_session_requires_a_user_id():
    assert principal_from_session(None) is None
    assert principal_from_session(auth_session("", "x@y.z")) is None
