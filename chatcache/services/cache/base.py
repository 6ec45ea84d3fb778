"""Base cache operations - connection lifecycle and low-level Redis primitives."""

import asyncio
import time
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, TypeVar

import httpx
from upstash_redis.asyncio import Redis

from chatcache.core.config import Settings, get_settings
from chatcache.core.exceptions import CacheConnectionError
from chatcache.core.logging import get_logger
from chatcache.core.tasks import create_background_task
from chatcache.services.cache.constants import CacheNamespace, NamespacePolicy

logger = get_logger(__name__)

T = TypeVar("T")

ClientFactory = Callable[[Settings], Redis]


class ConnectionState(str, Enum):
    """Lifecycle of the single store client."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class StoreUnavailableError(Exception):
    """No usable client: never connected, torn down, or reconnect throttled."""


def create_redis_client(settings: Settings) -> Redis:
    """Build the Upstash asyncio client from settings."""
    return Redis(
        url=settings.upstash_redis_rest_url,
        token=settings.upstash_redis_rest_token,
        # Bounded by cache_operation_timeout instead; the client sleeps between retries
        rest_retries=0,
    )


def _describe(exc: BaseException) -> str:
    # TimeoutError and friends carry no message
    return str(exc) or type(exc).__name__


class BaseCacheOperations:
    """Owns the store client and exposes low-level Redis operations.

    Every store call is bounded by ``cache_operation_timeout``. Primitives
    raise; the fail-open or fail-closed policy is applied by the callers
    built on top of them.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        """Initialize the cache service. No I/O happens until ``connect()``."""
        self._settings = settings or get_settings()
        self._client_factory = client_factory or create_redis_client
        self._policy = NamespacePolicy.from_settings(self._settings)
        self._timeout = self._settings.cache_operation_timeout
        self._reconnect_interval = self._settings.cache_reconnect_interval

        self._client: Redis | None = None
        self._state = ConnectionState.DISCONNECTED
        self._connect_lock = asyncio.Lock()
        # Only set after a successful connect(), cleared by disconnect()
        self._reconnect_allowed = False
        self._last_reconnect_attempt = float("-inf")

        if not self._settings.cache_enabled:
            logger.info("Cache disabled by configuration")
        elif not self._settings.redis_available:
            logger.info("Redis cache not configured, caching disabled")

    @property
    def policy(self) -> NamespacePolicy:
        """Namespace TTL table, fixed at construction."""
        return self._policy

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        """Last known transport state. No round trip to the store."""
        return self._state is ConnectionState.CONNECTED

    # ========== Connection lifecycle ==========

    async def connect(self) -> None:
        """Connect to the store and verify it with a PING.

        Idempotent. Raises ``CacheConnectionError`` on failure and leaves the
        service disconnected; retrying is up to the caller.
        """
        if self.is_connected:
            return

        async with self._connect_lock:
            if self.is_connected:
                return

            settings = self._settings
            endpoint = settings.upstash_redis_rest_url
            if not settings.cache_enabled:
                raise CacheConnectionError("Cache disabled by configuration")
            if not settings.redis_available:
                raise CacheConnectionError("Cache store not configured")

            self._state = ConnectionState.CONNECTING
            client: Redis | None = None
            try:
                client = self._client_factory(settings)
                await asyncio.wait_for(client.ping(), timeout=self._timeout)
            except Exception as e:
                self._state = ConnectionState.DISCONNECTED
                await self._close_client(client)
                logger.error("Redis connection failed", endpoint=endpoint, error=_describe(e))
                raise CacheConnectionError(
                    f"Could not connect to cache store: {_describe(e)}",
                    endpoint=endpoint,
                ) from e

            self._client = client
            self._state = ConnectionState.CONNECTED
            self._reconnect_allowed = True
            logger.info("Redis cache connected", endpoint=endpoint)

    async def disconnect(self) -> None:
        """Close the client. Safe to call when already disconnected.

        Waits for an in-flight ``connect()`` so its client is torn down too.
        """
        async with self._connect_lock:
            self._reconnect_allowed = False
            client, self._client = self._client, None
            self._state = ConnectionState.DISCONNECTED

        if client is None:
            return

        await self._close_client(client)
        logger.info("Redis cache disconnected")

    async def _close_client(self, client: Redis | None) -> None:
        if client is None:
            return
        try:
            await client.close()
        except Exception as e:
            logger.debug("Redis client close failed", error=_describe(e))

    def _mark_transport_failure(self, error: BaseException) -> None:
        """Drop to disconnected after the transport itself failed."""
        if self._state is ConnectionState.DISCONNECTED:
            return
        logger.warning("Redis transport failed, marking cache disconnected", error=_describe(error))
        self._state = ConnectionState.DISCONNECTED
        client, self._client = self._client, None
        if client is not None:
            # Release the HTTP session without blocking the failing call
            create_background_task(self._close_client(client), name="redis-close")

    async def _ensure_client(self) -> Redis:
        """Return the live client, reconnecting lazily after a transport failure."""
        if self._state is ConnectionState.CONNECTED and self._client is not None:
            return self._client

        if not self._reconnect_allowed:
            raise StoreUnavailableError("Cache not connected")

        now = time.monotonic()
        if now - self._last_reconnect_attempt < self._reconnect_interval:
            raise StoreUnavailableError("Cache reconnect throttled")
        self._last_reconnect_attempt = now

        logger.info("Attempting Redis reconnect")
        try:
            await self.connect()
        except CacheConnectionError as e:
            raise StoreUnavailableError("Cache reconnect failed") from e
        if self._client is None:
            raise StoreUnavailableError("Cache disconnected during reconnect")
        return self._client

    async def _execute(
        self,
        command: str,
        call: Callable[[Redis], Awaitable[T]],
        **context: Any,
    ) -> T:
        """Run one store command with the operation timeout applied."""
        client = await self._ensure_client()
        try:
            return await asyncio.wait_for(call(client), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.debug("Redis command timed out", command=command, timeout=self._timeout, **context)
            raise
        except httpx.TimeoutException:
            # slow, not gone
            raise
        except (OSError, httpx.TransportError) as e:
            self._mark_transport_failure(e)
            raise

    # ========== Keys ==========

    def _make_key(self, namespace: CacheNamespace | str, logical_id: str | int) -> str:
        """Compose ``<namespace>:<id>``. Unknown namespaces raise ``ValueError``."""
        return f"{CacheNamespace(namespace).value}:{logical_id}"

    # ========== String operations ==========

    async def get_raw(self, key: str) -> str | None:
        """GET a string value."""
        result = await self._execute("GET", lambda c: c.get(key), key=key)
        return result if isinstance(result, str) else None

    async def set_raw(self, key: str, value: str, ttl: int) -> None:
        """SET a string value with an expiry in seconds."""
        await self._execute("SET", lambda c: c.set(key, value, ex=ttl), key=key)

    async def delete_keys(self, *keys: str) -> int:
        """DEL the given keys, returning how many existed."""
        if not keys:
            return 0
        result = await self._execute("DEL", lambda c: c.delete(*keys), keys=len(keys))
        return int(result or 0)

    async def delete_pattern(self, pattern: str, batch_size: int = 100) -> int:
        """Delete all keys matching a glob pattern using SCAN."""
        deleted = 0
        cursor = 0
        while True:
            cursor, keys = await self._execute(
                "SCAN",
                lambda c, cur=cursor: c.scan(cur, match=pattern, count=batch_size),
                pattern=pattern,
            )
            if keys:
                deleted += await self.delete_keys(*keys)
            if int(cursor) == 0:
                return deleted

    # ========== Counters ==========

    async def eval_script(self, script: str, keys: list[str], args: list[Any]) -> Any:
        """EVAL a Lua script atomically on the store."""
        return await self._execute(
            "EVAL",
            lambda c: c.eval(script, keys=keys, args=args),
            keys=keys,
        )

    # ========== Database ==========

    async def flush(self) -> None:
        """FLUSHDB the service's database."""
        await self._execute("FLUSHDB", lambda c: c.flushdb())

    async def count_keys(self) -> int:
        """DBSIZE as reported by the store."""
        return int(await self._execute("DBSIZE", lambda c: c.dbsize()))

    # ========== Health check ==========

    async def check_health(self) -> bool:
        """Ping the store. Never raises."""
        try:
            result = await self._execute("PING", lambda c: c.ping())
            return bool(result)
        except StoreUnavailableError as e:
            logger.debug("Redis health check skipped", reason=str(e))
            return False
        except asyncio.TimeoutError:
            logger.error("Redis health check timed out", timeout=self._timeout)
            return False
        except Exception as e:
            logger.error("Redis health check failed", error=_describe(e))
            return False
