"""
In-memory session store: opaque cookie id -> Session Context + CSRF token.

Why: Keep auth state server-side. The browser only carries an opaque id;
the Session Context (and the provider tokens it holds) never leave the server.

Security: ids and CSRF tokens come from `secrets.token_urlsafe`. Expired
records are dropped on access and swept whenever a new session is created;
their context stops following provider events.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional
import secrets
import time

from .session import SessionContext


def _now() -> int:
    return int(time.time())


@dataclass
class SessionRecord:
    session_id: str
    context: SessionContext
    csrf_token: str = field(default_factory=lambda: secrets.token_urlsafe(24))
    expires_at: Optional[int] = None

    @property
    def email(self) -> str:
        principal = self.context.principal
        return principal.email if principal else ""


class SessionStore:
    def __init__(self):
        self._data: Dict[str, SessionRecord] = {}

    def create(self, *, context: SessionContext, ttl_seconds: int = 3600) -> SessionRecord:
        self._purge_expired()
        sid = secrets.token_urlsafe(24)
        rec = SessionRecord(session_id=sid, context=context, expires_at=_now() + ttl_seconds)
        self._data[sid] = rec
        return rec

    def get(self, session_id: str) -> Optional[SessionRecord]:
        rec = self._data.get(session_id)
        if not rec:
            return None
        if rec.expires_at and rec.expires_at < _now():
            self.delete(session_id)
            return None
        return rec

    def _purge_expired(self) -> None:
        now = _now()
        for sid in [s for s, r in self._data.items() if r.expires_at and r.expires_at < now]:
            self.delete(sid)

    def delete(self, session_id: str) -> None:
        rec = self._data.pop(session_id, None)
        if rec is not None:
            rec.context.close()

    def __len__(self) -> int:
        return len(self._data)
