"""
Wiring decisions: which auth provider and data gateway a session gets.
"""
from __future__ import annotations

import pytest

import wiring  # type: ignore
from backoffice.gateway_memory import InMemoryGateway
from backoffice.gateway_supabase import SupabaseGateway
from backoffice.ports import NotConfiguredError
from identity_access.providers import InMemoryAuthProvider
from identity_access.session import SessionContext, SupabaseAuthProvider
from utils.fake_supabase import FakeSupabaseClient


pytestmark = pytest.mark.anyio("asyncio")


def test_default_provider_is_supabase_and_lazy():
    provider = wiring.create_auth_provider()
    assert isinstance(provider, SupabaseAuthProvider)


def test_demo_backend_uses_in_memory_provider(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ADMIN_DATA_BACKEND", "memory")
    monkeypatch.setenv("ADMIN_DEMO_EMAIL", "demo@x.io")
    assert isinstance(wiring.create_auth_provider(), InMemoryAuthProvider)


@pytest.mark.anyio
async def test_demo_account_credentials_come_from_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ADMIN_DATA_BACKEND", "memory")
    monkeypatch.setenv("ADMIN_DEMO_EMAIL", "demo@x.io")
    monkeypatch.setenv("ADMIN_DEMO_PASSWORD", "letmein")
    ctx = wiring.create_session_context()
    assert (await ctx.sign_in("demo@x.io", "letmein")).ok


@pytest.mark.anyio
async def test_override_wins_over_backend_selection():
    gw = InMemoryGateway()
    wiring.set_gateway_override(gw)
    ctx = SessionContext(InMemoryAuthProvider({}))
    assert await wiring.gateway_for(ctx) is gw


@pytest.mark.anyio
async def test_demo_gateway_is_shared_and_seeded(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ADMIN_DATA_BACKEND", "memory")
    ctx = SessionContext(InMemoryAuthProvider({}))
    first = await wiring.gateway_for(ctx)
    second = await wiring.gateway_for(ctx)
    assert first is second
    assert [r.name for r in await first.list_roles()] == ["administrator", "teacher", "learner"]


@pytest.mark.anyio
async def test_supabase_backend_binds_session_client_without_elevated_key():
    client = FakeSupabaseClient()

    async def factory():
        return client

    ctx = SessionContext(SupabaseAuthProvider(factory))
    gateway = await wiring.gateway_for(ctx)
    assert isinstance(gateway, SupabaseGateway)
    with pytest.raises(NotConfiguredError):
        await gateway.list_auth_accounts()


@pytest.mark.anyio
async def test_supabase_backend_rejects_foreign_provider():
    ctx = SessionContext(InMemoryAuthProvider({}))
    with pytest.raises(RuntimeError):
        await wiring.gateway_for(ctx)
