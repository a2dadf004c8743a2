"""Readiness checks. Config and packages must pass; Postgres and Redis are optional here."""
import pytest

from adventure_api.readiness import check_config, is_ready, run_all_checks, run_all_checks_async
from adventure_api.settings import get_config_store


@pytest.fixture
def memory_backends():
    store = get_config_store()
    store.update({"store_backend": "memory", "cache_backend": "memory"})
    yield
    store.clear_overrides()


def test_is_ready_summarizes_failures():
    ready, summary = is_ready({"config": (True, "ok"), "database": (False, "connection refused")})

    assert not ready
    assert summary == {"config": "ok", "database": "connection refused"}


def test_unknown_backend_fails_config_check():
    store = get_config_store()
    store.update({"cache_backend": "memcached"})
    try:
        ok, message = check_config()
    finally:
        store.clear_overrides()

    assert not ok
    assert "memcached" in message


async def test_memory_backends_skip_service_checks(memory_backends):
    checks = await run_all_checks_async()

    assert checks["database"] == (True, "skipped (store_backend=memory)")
    assert checks["redis"] == (True, "skipped (cache_backend=memory)")
    assert is_ready(checks)[0]


@pytest.mark.integration
def test_readiness_all_checks_pass():
    """Config and packages must pass; database/redis may be unavailable (e.g. sandbox)."""
    checks = run_all_checks()
    for name in ("config", "packages"):
        ok, msg = checks.get(name, (False, "missing"))
        assert ok, f"readiness {name}: {msg}"
