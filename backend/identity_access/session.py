"""
Session Context: the injected, per-browser-session authentication service.

Why:
    The web layer must never read ambient global auth state. Each browser
    session owns one `SessionContext` bound to an `AuthProvider`; routes and
    the guard middleware receive it through the session store.

Behavior:
    - `initialize()` probes the provider's current session once (loading flag
      true only during the probe), then follows provider-pushed session-change
      events for the rest of the context lifetime.
    - Each event synchronously replaces the held principal and notifies
      subscribers.
    - A failed probe is treated as "no session"; there is no retry.

Security:
    Tokens stay server-side inside the provider/principal. Error messages
    returned to the UI never include provider internals beyond the provider's
    own human-readable message.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Callable, Optional, Protocol

import httpx


logger = logging.getLogger("dailylessons.identity.session")

GENERIC_SIGN_IN_ERROR = "Unable to sign in right now."
MISSING_CREDENTIALS_ERROR = "Email and password are required."
INVALID_CREDENTIALS_ERROR = "Invalid login credentials"


@dataclass(frozen=True)
class Principal:
    user_id: str
    email: str
    access_token: Optional[str] = None


@dataclass(frozen=True)
class AuthResult:
    principal: Optional[Principal] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.principal is not None and not self.error


class AuthError(Exception):
    """Credentials rejected by the provider; `message` is user-facing."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


SessionListener = Callable[[Optional[Principal]], None]
ProviderListener = Callable[[str, Optional[Principal]], None]


class AuthProvider(Protocol):
    async def current_session(self) -> Optional[Principal]:
        ...

    async def sign_in(self, email: str, password: str) -> Principal:
        """Return the new principal or raise AuthError."""
        ...

    async def sign_out(self) -> None:
        ...

    def on_session_change(self, listener: ProviderListener) -> Callable[[], None]:
        """Register for provider events; returns an unsubscribe callable."""
        ...


# --- Supabase provider ---------------------------------------------------------


def principal_from_session(session: Any) -> Optional[Principal]:
    """Map a supabase auth session object to a Principal (None when absent)."""
    user = getattr(session, "user", None) if session is not None else None
    user_id = getattr(user, "id", None)
    if not user_id:
        return None
    return Principal(
        user_id=str(user_id),
        email=str(getattr(user, "email", "") or ""),
        access_token=getattr(session, "access_token", None),
    )


class SupabaseAuthProvider:
    """AuthProvider over a supabase AsyncClient (standard privilege).

    The client is created lazily through `client_factory` (an async callable)
    so that constructing a session context never touches the network.
    """

    def __init__(self, client_factory: Callable[[], Any]) -> None:
        self._client_factory = client_factory
        self._client: Any = None

    async def client(self) -> Any:
        if self._client is None:
            self._client = await self._client_factory()
        return self._client

    async def current_session(self) -> Optional[Principal]:
        client = await self.client()
        return principal_from_session(await client.auth.get_session())

    async def sign_in(self, email: str, password: str) -> Principal:
        client = await self.client()
        try:
            response = await client.auth.sign_in_with_password({"email": email, "password": password})
        except httpx.TransportError:
            raise
        except Exception as exc:
            message = getattr(exc, "message", None)
            if message:
                raise AuthError(str(message)) from exc
            raise
        principal = principal_from_session(getattr(response, "session", None))
        if principal is None:
            raise AuthError(INVALID_CREDENTIALS_ERROR)
        return principal

    async def sign_out(self) -> None:
        if self._client is None:
            return
        await self._client.auth.sign_out()

    def on_session_change(self, listener: ProviderListener) -> Callable[[], None]:
        if self._client is None:
            return lambda: None

        def _forward(event: Any, session: Any) -> None:
            listener(str(event), principal_from_session(session))

        subscription = self._client.auth.on_auth_state_change(_forward)
        return getattr(subscription, "unsubscribe", lambda: None)


# --- Session context ------------------------------------------------------------


class SessionContext:
    """Current principal, loading flag, sign-in/out and change subscription."""

    def __init__(self, provider: AuthProvider) -> None:
        self.provider = provider
        self.principal: Optional[Principal] = None
        self.loading = False
        self._initialized = False
        self._listeners: list[SessionListener] = []
        self._provider_unsubscribe: Optional[Callable[[], None]] = None

    @property
    def authenticated(self) -> bool:
        return self.principal is not None

    async def initialize(self) -> None:
        if self._initialized:
            return
        self._initialized = True
        self.loading = True
        try:
            self.principal = await self.provider.current_session()
        except Exception as exc:
            logger.warning("Session probe failed: %s", exc.__class__.__name__)
            self.principal = None
        finally:
            self.loading = False
        self._provider_unsubscribe = self.provider.on_session_change(self._on_provider_event)
        self._notify()

    def _on_provider_event(self, event: str, principal: Optional[Principal]) -> None:
        logger.debug("Session change event: %s", event)
        self.principal = principal
        self._notify()

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.principal)

    async def sign_in(self, email: str, password: str) -> AuthResult:
        if not email or not password:
            return AuthResult(error=MISSING_CREDENTIALS_ERROR)
        await self.initialize()
        try:
            principal = await self.provider.sign_in(email, password)
        except AuthError as exc:
            return AuthResult(error=exc.message or INVALID_CREDENTIALS_ERROR)
        except Exception as exc:
            logger.warning("Sign-in failed: %s", exc.__class__.__name__)
            return AuthResult(error=GENERIC_SIGN_IN_ERROR)
        self.principal = principal
        self._notify()
        return AuthResult(principal=principal)

    async def sign_out(self) -> None:
        try:
            await self.provider.sign_out()
        except Exception as exc:
            logger.warning("Provider sign-out failed: %s", exc.__class__.__name__)
        self.principal = None
        self._notify()

    def close(self) -> None:
        """Stop following provider events (session discarded)."""
        if self._provider_unsubscribe is not None:
            self._provider_unsubscribe()
            self._provider_unsubscribe = None
        self._listeners.clear()


__all__ = [
    "Principal",
    "AuthResult",
    "AuthError",
    "AuthProvider",
    "SupabaseAuthProvider",
    "SessionContext",
    "principal_from_session",
    "GENERIC_SIGN_IN_ERROR",
]
