"""
Shared authentication utilities.

Why:
    The session cookie is set by the login route and cleared by the logout
    route and the guard middleware. A single helper keeps the cookie policy
    identical across those places.

Design:
    The helpers are framework-agnostic and pure: they accept an environment
    string (or a URL) and return values. Callers decide where the input comes
    from (e.g., settings object, request query).
"""

from __future__ import annotations


def cookie_opts(environment: str) -> dict:
    """Return hardened cookie flags (dev = prod).

    Returns a mapping with keys:
      - secure: True
      - samesite: "lax"
    """
    # Lax keeps the cookie on top-level navigations such as the post-login redirect.
    return {"secure": True, "samesite": "lax"}


def safe_next_path(value: str | None, default: str = "/dashboard") -> str:
    """Accept only in-app absolute paths as post-login targets.

    Rejects scheme-relative (`//host`), backslash tricks and absolute URLs.
    """
    candidate = (value or "").strip()
    if not candidate.startswith("/") or candidate.startswith("//") or "\\" in candidate:
        return default
    if candidate.startswith("/login") or candidate.startswith("/logout"):
        return default
    return candidate
