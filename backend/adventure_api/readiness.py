"""Readiness checks: config, packages, database, redis."""
import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

logger = logging.getLogger(__name__)

# Result: (passed: bool, message: str)
CheckResult = tuple[bool, str]
ChecksDict = dict[str, CheckResult]

SKIPPED_MEMORY_STORE = "skipped (store_backend=memory)"
SKIPPED_MEMORY_CACHE = "skipped (cache_backend=memory)"


def check_config() -> CheckResult:
    """Load settings and read the backend selection."""
    try:
        from adventure_api.settings import get_settings
        s = get_settings()
        if s.store_backend.strip().lower() not in ("postgres", "memory"):
            return False, f"unknown store_backend {s.store_backend!r}"
        if s.cache_backend.strip().lower() not in ("memory", "redis"):
            return False, f"unknown cache_backend {s.cache_backend!r}"
        return True, "ok"
    except Exception as e:
        return False, str(e)


def check_packages() -> CheckResult:
    """Import critical modules: uvicorn, sqlalchemy, redis, boto3, adventure_api.main."""
    missing = []
    try:
        import uvicorn  # noqa: F401
    except ImportError:
        missing.append("uvicorn")
    try:
        import sqlalchemy  # noqa: F401
    except ImportError:
        missing.append("sqlalchemy")
    try:
        import redis  # noqa: F401
    except ImportError:
        missing.append("redis")
    try:
        import boto3  # noqa: F401
    except ImportError:
        missing.append("boto3")
    try:
        import adventure_api.main  # noqa: F401
    except ImportError as e:
        missing.append(f"adventure_api.main ({e})")
    if missing:
        return False, f"missing: {', '.join(missing)}"
    return True, "ok"


async def _check_database_async(database_url: str) -> CheckResult:
    """Run a trivial query against the database."""
    from adventure_api.infra.db.base import (
        async_pg_connect_args,
        async_pg_url_without_sslmode,
        normalize_async_pg_url,
    )
    try:
        url = normalize_async_pg_url(database_url)
        engine = create_async_engine(
            async_pg_url_without_sslmode(url),
            connect_args=async_pg_connect_args(url),
            pool_pre_ping=True,
        )
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        await engine.dispose()
        return True, "ok"
    except Exception as e:
        return False, str(e)


async def _check_redis_async(redis_url: str) -> CheckResult:
    try:
        import redis.asyncio as redis
        client = redis.from_url(redis_url)
        await client.ping()
        await client.aclose()
        return True, "ok"
    except Exception as e:
        return False, str(e)


async def run_all_checks_async() -> ChecksDict:
    """Run all readiness checks. Backends that are not selected are skipped."""
    from adventure_api.settings import get_settings
    s = get_settings()
    if s.uses_memory_store:
        db_result: CheckResult = (True, SKIPPED_MEMORY_STORE)
    else:
        db_result = await _check_database_async(s.database_url)
    if s.cache_backend.strip().lower() == "redis":
        redis_result = await _check_redis_async(s.redis_url)
    else:
        redis_result = (True, SKIPPED_MEMORY_CACHE)
    return {
        "config": check_config(),
        "packages": check_packages(),
        "database": db_result,
        "redis": redis_result,
    }


def run_all_checks() -> ChecksDict:
    """Synchronous wrapper (not for use inside a running loop)."""
    return asyncio.run(run_all_checks_async())


def is_ready(checks: ChecksDict | None = None) -> tuple[bool, dict[str, str]]:
    """
    True if all checks pass.
    Returns (ready: bool, checks_summary: dict of name -> "ok" | "skipped (...)" | error message).
    """
    if checks is None:
        checks = run_all_checks()
    summary: dict[str, str] = {name: msg for name, (_, msg) in checks.items()}
    for name, (passed, msg) in checks.items():
        if not passed:
            logger.warning("Readiness check %s failed: %s", name, msg)
    return all(passed for passed, _ in checks.values()), summary
