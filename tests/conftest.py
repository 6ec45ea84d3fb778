"""Test configuration and fixtures.

Provides:
- An in-memory stand-in for the Upstash asyncio client
- Settings pointing at a fake endpoint
- CacheService instances wired to the fake, connected or not
- The transport error the real client raises when the store is unreachable
"""

import fnmatch
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest
import pytest_asyncio

from chatcache.core.config import Settings
from chatcache.services.cache import RATE_LIMIT_SCRIPT, CacheService


class FakeRedis:
    """Just enough of ``upstash_redis.asyncio.Redis`` for the cache service.

    Expiry is recorded, not enforced: ``ttls`` holds the seconds passed to
    SET and ``pttls`` the milliseconds passed to PEXPIRE.
    """

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.pttls: dict[str, int] = {}
        self.ping_calls = 0
        self.close_calls = 0
        self.eval_calls = 0

    async def ping(self, message: str | None = None) -> str:
        self.ping_calls += 1
        return "PONG"

    async def close(self) -> None:
        self.close_calls += 1

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.data[key] = value
        if ex is not None:
            self.ttls[key] = ex
        else:
            self.ttls.pop(key, None)
        return True

    async def delete(self, *keys: str) -> int:
        deleted = 0
        for key in keys:
            if key in self.data:
                del self.data[key]
                deleted += 1
            self.ttls.pop(key, None)
            self.pttls.pop(key, None)
        return deleted

    async def scan(self, cursor: int, match: str | None = None, count: int | None = None) -> tuple[int, list[str]]:
        keys = sorted(self.data)
        if match:
            keys = [k for k in keys if fnmatch.fnmatchcase(k, match)]
        step = count or 10
        page = keys[cursor:cursor + step]
        next_cursor = cursor + step if cursor + step < len(keys) else 0
        return next_cursor, page

    async def eval(self, script: str, keys: list[str] | None = None, args: list[Any] | None = None) -> list[int]:
        assert script == RATE_LIMIT_SCRIPT, "only the rate limit script is emulated"
        self.eval_calls += 1
        key = (keys or [])[0]
        count = int(self.data.get(key, "0")) + 1
        self.data[key] = str(count)
        if count == 1:
            self.pttls[key] = int((args or [])[0])
        return [count, self.pttls.get(key, -1)]

    async def flushdb(self) -> bool:
        self.data.clear()
        self.ttls.clear()
        self.pttls.clear()
        return True

    async def dbsize(self) -> int:
        return len(self.data)


TEST_ENDPOINT = "https://fake.upstash.io"


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "upstash_redis_rest_url": TEST_ENDPOINT,
        "upstash_redis_rest_token": "tok",
        "cache_operation_timeout": 0.5,
        "cache_reconnect_interval": 0,
        "rate_limit_enabled": True,
        "_env_file": None,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def test_settings() -> Settings:
    """Settings pointing at a fake store with safe defaults."""
    return make_settings()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def cache(test_settings: Settings, fake_redis: FakeRedis) -> CacheService:
    """A CacheService wired to the fake store, not yet connected."""
    return CacheService(test_settings, client_factory=lambda _settings: fake_redis)


@pytest.fixture
def make_cache(fake_redis: FakeRedis):
    """Build a CacheService over the shared fake with settings overrides."""

    def _make(client: Any = None, **overrides: Any) -> CacheService:
        store = client if client is not None else fake_redis
        return CacheService(make_settings(**overrides), client_factory=lambda _settings: store)

    return _make


@pytest.fixture
def settings_factory():
    return make_settings


@pytest_asyncio.fixture
async def connected_cache(cache: CacheService) -> AsyncGenerator[CacheService, None]:
    await cache.connect()
    yield cache
    await cache.disconnect()


@pytest.fixture
def connect_error() -> httpx.ConnectError:
    """What the Upstash client raises when the REST endpoint cannot be reached."""
    return httpx.ConnectError("All connection attempts failed")
