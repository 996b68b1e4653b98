"""
Configuration and startup security checks for the DailyLessons admin.

Why: The dashboard talks to the backend with two key pairs, one of them
privileged (service role). Local development ships literal fallbacks so the
app starts without a `.env`; production must never run on those.

Permissions: The caller needs no special privileges. The loaders only read
environment variables; the startup guard raises `SystemExit` on fatal
misconfiguration.
"""
from __future__ import annotations

from dataclasses import dataclass
import os


# Local `supabase start` defaults; never valid outside development.
LOCAL_SUPABASE_URL = "http://127.0.0.1:54321"
DUMMY_ANON_KEY = "DUMMY_ANON_KEY"
DUMMY_SERVICE_ROLE_KEY = "DUMMY_DO_NOT_USE"

DATA_BACKENDS = ("supabase", "memory")


def _is_prod_like(env: str) -> bool:
    env_l = (env or "").lower()
    return env_l in {"prod", "production", "stage", "staging"}


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


@dataclass(frozen=True)
class SupabaseSettings:
    url: str
    anon_key: str
    service_role_url: str
    service_role_key: str

    @property
    def elevated_configured(self) -> bool:
        return bool(self.service_role_key) and self.service_role_key.upper() != DUMMY_SERVICE_ROLE_KEY


def load_supabase_settings() -> SupabaseSettings:
    url = _env("SUPABASE_URL", LOCAL_SUPABASE_URL)
    return SupabaseSettings(
        url=url,
        anon_key=_env("SUPABASE_ANON_KEY", DUMMY_ANON_KEY),
        service_role_url=_env("SUPABASE_SERVICE_ROLE_URL", url),
        service_role_key=_env("SUPABASE_SERVICE_ROLE_KEY", DUMMY_SERVICE_ROLE_KEY),
    )


def data_backend() -> str:
    """Selected data backend: `supabase` (default) or `memory` (offline demo)."""
    value = _env("ADMIN_DATA_BACKEND", "supabase").lower()
    return value if value in DATA_BACKENDS else "supabase"


def session_ttl_seconds() -> int:
    try:
        value = int(_env("ADMIN_SESSION_TTL_SECONDS", "3600"))
    except ValueError:
        return 3600
    return value if value > 0 else 3600


def ensure_secure_config_on_startup() -> None:
    """Fail fast on insecure production configuration.

    Intent: Abort process startup when obviously insecure settings are detected
    in production/staging. Development remains permissive for convenience.

    Checks:
    - The in-memory demo backend is not allowed.
    - Anon and service-role keys must be set and not dummy placeholders.
    - Both backend URLs must use https.
    """

    env = os.getenv("ADMIN_ENV", "dev")
    if not _is_prod_like(env):
        return  # dev/test remain permissive

    # 1) Demo backend keeps data in process memory only
    if data_backend() == "memory":
        raise SystemExit(
            "Refusing to start: ADMIN_DATA_BACKEND=memory is not allowed in production/staging."
        )

    # 2) Keys
    anon = _env("SUPABASE_ANON_KEY")
    if not anon or anon.upper() == DUMMY_ANON_KEY:
        raise SystemExit(
            "Refusing to start: SUPABASE_ANON_KEY is unset or a dummy placeholder in production."
        )
    srole = _env("SUPABASE_SERVICE_ROLE_KEY")
    if not srole or srole.upper() == DUMMY_SERVICE_ROLE_KEY:
        raise SystemExit(
            "Refusing to start: SUPABASE_SERVICE_ROLE_KEY is unset or a dummy placeholder in production."
        )

    # 3) Endpoints must use HTTPS in production-like environments
    def _must_be_https(url_value: str, var_name: str) -> None:
        if not url_value:
            raise SystemExit(f"Refusing to start: {var_name} is unset in production.")
        if not url_value.strip().lower().startswith("https://"):
            raise SystemExit(
                f"Refusing to start: {var_name} must use https in production."
            )

    url = _env("SUPABASE_URL")
    _must_be_https(url, "SUPABASE_URL")
    _must_be_https(_env("SUPABASE_SERVICE_ROLE_URL", url), "SUPABASE_SERVICE_ROLE_URL")
