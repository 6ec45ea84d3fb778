"""Console entry points: a live smoke check of the cache store, and the test suite."""

import asyncio
import json
import sys
import time

from chatcache.core.config import get_settings
from chatcache.core.exceptions import CacheServiceError
from chatcache.core.logging import get_logger, setup_logging
from chatcache.services.cache import CacheService

logger = get_logger(__name__)

SMOKE_USER_ID = "test123"
SMOKE_RATE_KEY = "test:rate:limit"


class SmokeCheckFailed(Exception):
    pass


async def run_smoke_check(cache: CacheService) -> dict[str, int | bool]:
    """Exercise session caching, rate counting, stats and flush against a live store."""
    await cache.connect()
    try:
        session = {"userId": SMOKE_USER_ID, "role": "user", "timestamp": int(time.time() * 1000)}
        await cache.set_user_session(SMOKE_USER_ID, session)
        if await cache.get_user_session(SMOKE_USER_ID) != session:
            raise SmokeCheckFailed("session cache round trip failed")

        messages = {"success": True, "data": {"messages": [{"id": "1", "content": "Test"}]}}
        await cache.set_messages_cache("test:key", messages)
        if await cache.get_messages_cache("test:key") != messages:
            raise SmokeCheckFailed("messages cache round trip failed")

        first = await cache.increment_rate_limit(SMOKE_RATE_KEY, 60000)
        second = await cache.increment_rate_limit_window(SMOKE_RATE_KEY, 60000)
        if (first, second.count) != (1, 2):
            raise SmokeCheckFailed(f"rate limit counted {first}, {second.count} instead of 1, 2")
        if not 0 < second.reset_after_ms <= 60000:
            raise SmokeCheckFailed(f"rate limit window reports {second.reset_after_ms}ms left")

        stats = await cache.get_cache_stats()
        if not stats.connected or stats.keys <= 0:
            raise SmokeCheckFailed(f"unexpected stats {stats.to_dict()}")

        await cache.clear_all()
        if await cache.get_user_session(SMOKE_USER_ID) is not None:
            raise SmokeCheckFailed("session still cached after clear_all")

        return stats.to_dict()
    finally:
        await cache.disconnect()


def check() -> None:
    setup_logging()
    cache = CacheService(get_settings())
    try:
        stats = asyncio.run(run_smoke_check(cache))
    except (CacheServiceError, SmokeCheckFailed) as e:
        logger.error("Cache smoke check failed", error=str(e))
        sys.exit(1)

    ttls = {ns.value: ttl for ns, ttl in cache.policy.items()}
    print(json.dumps({"ok": True, "stats": stats, "ttls": ttls}, indent=2))


def pytest() -> None:
    import pytest

    sys.exit(pytest.main(["-x", "tests"]))
