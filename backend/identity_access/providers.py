"""
In-memory AuthProvider for the offline demo backend and tests.

Each provider instance represents one browser session's view of the auth
backend: accounts are shared (passed in), the current session is not.
"""
from __future__ import annotations

from typing import Callable, Mapping, Optional
import secrets

from .session import AuthError, INVALID_CREDENTIALS_ERROR, Principal, ProviderListener


class InMemoryAuthProvider:
    def __init__(self, accounts: Mapping[str, str], *, user_ids: Optional[Mapping[str, str]] = None) -> None:
        self._accounts = dict(accounts)
        self._user_ids = dict(user_ids or {})
        self._current: Optional[Principal] = None
        self._listeners: list[ProviderListener] = []

    async def current_session(self) -> Optional[Principal]:
        return self._current

    async def sign_in(self, email: str, password: str) -> Principal:
        expected = self._accounts.get(email)
        if expected is None or not secrets.compare_digest(expected, password):
            raise AuthError(INVALID_CREDENTIALS_ERROR)
        user_id = self._user_ids.get(email) or f"local-{email}"
        self._current = Principal(user_id=user_id, email=email, access_token=secrets.token_urlsafe(16))
        self._emit("SIGNED_IN")
        return self._current

    async def sign_out(self) -> None:
        self._current = None
        self._emit("SIGNED_OUT")

    def on_session_change(self, listener: ProviderListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def expire(self) -> None:
        """Simulate a provider-side session end (token revoked/expired)."""
        self._current = None
        self._emit("SIGNED_OUT")

    def _emit(self, event: str) -> None:
        for listener in list(self._listeners):
            listener(event, self._current)


__all__ = ["InMemoryAuthProvider"]
