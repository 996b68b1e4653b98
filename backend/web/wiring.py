"""
Wiring for auth providers and data gateways.

Why:
    Routes should not know whether they talk to Supabase or to the offline
    demo backend. This module decides once per session (auth provider) and
    once per request (gateway), and lets tests inject fakes without touching
    environment variables.

Behavior:
    - `create_auth_provider()` returns a fresh provider for a new browser
      session (test factory > memory demo > Supabase anon client).
    - `gateway_for(context)` returns the data gateway bound to that session's
      standard client plus the shared elevated client when configured.
    - The elevated client is created lazily and cached. Failures are logged and
      leave it unset, which only disables the auth-account annotations.

Security:
    The service-role key never reaches the browser; it is only used for the
    server-side auth admin listing.
"""
from __future__ import annotations

import logging
import os
from typing import Any, Callable, Optional

import config
from backoffice.gateway_memory import InMemoryGateway
from backoffice.gateway_supabase import SupabaseGateway
from identity_access.providers import InMemoryAuthProvider
from identity_access.session import AuthProvider, SessionContext, SupabaseAuthProvider


logger = logging.getLogger("dailylessons.web.wiring")

_GATEWAY_OVERRIDE: Any = None
_AUTH_PROVIDER_FACTORY: Optional[Callable[[], AuthProvider]] = None
_DEMO_GATEWAY: Optional[InMemoryGateway] = None
_ELEVATED_CLIENT: Any = None

DEMO_EMAIL = "admin@dailylessons.com"


def set_gateway_override(gateway: Any) -> None:
    """Force every request onto `gateway` (tests); pass None to reset."""
    global _GATEWAY_OVERRIDE
    _GATEWAY_OVERRIDE = gateway


def set_auth_provider_factory(factory: Optional[Callable[[], AuthProvider]]) -> None:
    """Use `factory` for new sessions (tests); pass None to reset."""
    global _AUTH_PROVIDER_FACTORY
    _AUTH_PROVIDER_FACTORY = factory


def reset() -> None:
    global _GATEWAY_OVERRIDE, _AUTH_PROVIDER_FACTORY, _DEMO_GATEWAY, _ELEVATED_CLIENT
    _GATEWAY_OVERRIDE = None
    _AUTH_PROVIDER_FACTORY = None
    _DEMO_GATEWAY = None
    _ELEVATED_CLIENT = None


# --- Auth ----------------------------------------------------------------------


def create_auth_provider() -> AuthProvider:
    if _AUTH_PROVIDER_FACTORY is not None:
        return _AUTH_PROVIDER_FACTORY()
    if config.data_backend() == "memory":
        email = (os.getenv("ADMIN_DEMO_EMAIL") or DEMO_EMAIL).strip()
        password = os.getenv("ADMIN_DEMO_PASSWORD") or "admin"
        return InMemoryAuthProvider({email: password}, user_ids={email: "demo-admin"})
    settings = config.load_supabase_settings()

    async def _client_factory() -> Any:
        from supabase import acreate_client

        return await acreate_client(settings.url, settings.anon_key)

    return SupabaseAuthProvider(_client_factory)


def create_session_context() -> SessionContext:
    return SessionContext(create_auth_provider())


# --- Data ----------------------------------------------------------------------


def demo_gateway() -> InMemoryGateway:
    """Process-wide in-memory gateway seeded with a small sample dataset."""
    global _DEMO_GATEWAY
    if _DEMO_GATEWAY is None:
        gw = InMemoryGateway(auth_accounts={})
        admin = gw.add_role("administrator")
        teacher = gw.add_role("teacher")
        learner = gw.add_role("learner")
        gw.add_user(DEMO_EMAIL, admin, auth_id="demo-admin")
        gw.add_user("teacher@dailylessons.com", teacher, auth_id="demo-teacher")
        gw.add_user("learner@dailylessons.com", learner, auth_id="demo-learner")
        course = gw.add_course("Algebra I", description="Intro", difficulty=1, creator_id="demo-teacher")
        section = gw.add_section("Linear equations", course)
        gw.add_video("Solving for x", "https://www.youtube.com/watch?v=dQw4w9WgXcQ", section)
        _DEMO_GATEWAY = gw
    return _DEMO_GATEWAY


async def _elevated_client() -> Any:
    global _ELEVATED_CLIENT
    if _ELEVATED_CLIENT is not None:
        return _ELEVATED_CLIENT
    settings = config.load_supabase_settings()
    if not settings.elevated_configured:
        return None
    try:
        from supabase import acreate_client

        _ELEVATED_CLIENT = await acreate_client(settings.service_role_url, settings.service_role_key)
    except Exception as exc:
        logger.warning("Elevated client unavailable: %s", exc.__class__.__name__)
        return None
    return _ELEVATED_CLIENT


async def gateway_for(context: SessionContext) -> Any:
    if _GATEWAY_OVERRIDE is not None:
        return _GATEWAY_OVERRIDE
    if config.data_backend() == "memory":
        return demo_gateway()
    provider = context.provider
    if not isinstance(provider, SupabaseAuthProvider):
        raise RuntimeError("Supabase data backend requires a Supabase auth provider")
    client = await provider.client()
    return SupabaseGateway(client, await _elevated_client())


__all__ = [
    "set_gateway_override",
    "set_auth_provider_factory",
    "reset",
    "create_auth_provider",
    "create_session_context",
    "demo_gateway",
    "gateway_for",
]
