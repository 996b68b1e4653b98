"""
Pytest configuration for backend tests.

Why: Force AnyIO to use the asyncio backend to avoid sandbox restrictions
that can affect the Trio backend (e.g., socketpair permission errors).
"""
import os
import importlib
import sys
from pathlib import Path
import pytest

# Ensure modules in backend/ and backend/web are importable across tests
REPO_ROOT = Path(__file__).resolve().parents[2]
BACKEND_DIR = REPO_ROOT / "backend"
WEB_DIR = BACKEND_DIR / "web"
TESTS_DIR = BACKEND_DIR / "tests"
for p in (str(REPO_ROOT), str(BACKEND_DIR), str(WEB_DIR), str(TESTS_DIR)):
    if p not in sys.path:
        sys.path.insert(0, p)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_environment_toggles(monkeypatch: pytest.MonkeyPatch):
    """Start every test from a dev environment with no opt-in toggles.

    Why:
        Config guard and CSRF tests set ADMIN_ENV/ADMIN_TRUST_PROXY and the
        data backend selector. Leftovers would change cookie, header and
        wiring decisions in unrelated tests of a full run.
    """
    for var in (
        "ADMIN_ENV",
        "ADMIN_DATA_BACKEND",
        "ADMIN_TRUST_PROXY",
        "ADMIN_SESSION_TTL_SECONDS",
        "ADMIN_DEMO_EMAIL",
        "ADMIN_DEMO_PASSWORD",
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
        "SUPABASE_SERVICE_ROLE_URL",
        "SUPABASE_SERVICE_ROLE_KEY",
    ):
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture(autouse=True)
def _reset_session_store_and_wiring(monkeypatch: pytest.MonkeyPatch):
    """Fresh SESSION_STORE and default wiring per test.

    Why:
        UI tests inject gateways and auth provider factories through `wiring`
        and create sessions in the shared store. Without a reset those leak
        across tests and produce confusing 302s or stale rows.
    """
    try:
        import main  # type: ignore
        import wiring  # type: ignore
        from identity_access.stores import SessionStore  # type: ignore
    except Exception:
        yield
        return

    monkeypatch.setattr(main, "SESSION_STORE", SessionStore(), raising=False)
    main.SETTINGS.override_environment(None)
    wiring.reset()
    yield
    wiring.reset()
    main.SETTINGS.override_environment(None)


@pytest.fixture
def admin_gateway():
    """In-memory gateway seeded with roles only; tests add their own rows."""
    from backoffice.gateway_memory import InMemoryGateway

    gw = InMemoryGateway(auth_accounts={})
    gw.add_role("administrator", role_id="1")
    gw.add_role("teacher", role_id="2")
    gw.add_role("learner", role_id="3")
    import wiring  # type: ignore

    wiring.set_gateway_override(gw)
    return gw


def _reload(module_name: str):
    mod = sys.modules.get(module_name)
    if mod is None:
        return importlib.import_module(module_name)
    return importlib.reload(mod)


@pytest.fixture
def fresh_config():
    """Re-import `config` so module-level reads pick up monkeypatched env."""
    return _reload("config")


if os.getenv("RUN_E2E", "0") == "1":  # pragma: no cover
    from dotenv import load_dotenv

    load_dotenv()
