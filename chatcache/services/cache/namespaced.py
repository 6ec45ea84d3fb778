"""Namespaced JSON cache operations (cache-aside, fail-open)."""

import asyncio
import json
from typing import Any

from chatcache.core.logging import get_logger
from chatcache.services.cache.base import BaseCacheOperations, StoreUnavailableError
from chatcache.services.cache.constants import CacheNamespace

logger = get_logger(__name__)


class NamespacedCacheMixin(BaseCacheOperations):
    """get/set/invalidate over the five cache namespaces.

    Nothing here raises for store trouble: a miss, a malformed payload, a
    timeout and a dead store all read as ``None``, and writes report
    ``False``. Callers fall back to the source of truth either way.
    """

    async def get(self, namespace: CacheNamespace | str, logical_id: str | int) -> Any | None:
        """Read and deserialize the value cached under ``namespace:id``."""
        key = self._make_key(namespace, logical_id)
        try:
            data = await self.get_raw(key)
        except StoreUnavailableError as e:
            logger.debug("Cache unavailable, get skipped", key=key, reason=str(e))
            return None
        except asyncio.TimeoutError:
            logger.debug("Cache get timed out", key=key)
            return None
        except Exception as e:
            logger.debug("Cache get failed", key=key, error=str(e))
            return None

        if data is None:
            return None
        try:
            return json.loads(data)
        except json.JSONDecodeError:
            logger.debug("Cache JSON decode failed", key=key)
            return None

    async def set(
        self,
        namespace: CacheNamespace | str,
        logical_id: str | int,
        value: Any,
    ) -> bool:
        """Serialize ``value`` and store it with the namespace TTL.

        Replaces whatever was there and resets its expiry. Returns ``False``
        instead of raising when the write did not happen.
        """
        key = self._make_key(namespace, logical_id)
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.warning("Cache value not JSON serializable", key=key, error=str(e))
            return False

        ttl = self._policy.ttl(namespace)
        try:
            await self.set_raw(key, payload, ttl)
            return True
        except StoreUnavailableError as e:
            logger.debug("Cache unavailable, set skipped", key=key, reason=str(e))
            return False
        except asyncio.TimeoutError:
            logger.debug("Cache set timed out", key=key)
            return False
        except Exception as e:
            logger.debug("Cache set failed", key=key, error=str(e))
            return False

    async def invalidate(self, namespace: CacheNamespace | str, logical_id: str | int) -> bool:
        """Delete one cached entry."""
        key = self._make_key(namespace, logical_id)
        try:
            await self.delete_keys(key)
            return True
        except StoreUnavailableError as e:
            logger.debug("Cache unavailable, delete skipped", key=key, reason=str(e))
            return False
        except Exception as e:
            logger.debug("Cache delete failed", key=key, error=str(e) or type(e).__name__)
            return False

    async def invalidate_namespace(self, namespace: CacheNamespace | str) -> int:
        """Delete every entry of one namespace, returning how many went."""
        pattern = f"{CacheNamespace(namespace).value}:*"
        try:
            deleted = await self.delete_pattern(pattern)
        except StoreUnavailableError as e:
            logger.debug("Cache unavailable, delete pattern skipped", pattern=pattern, reason=str(e))
            return 0
        except Exception as e:
            logger.debug("Cache delete pattern failed", pattern=pattern, error=str(e) or type(e).__name__)
            return 0

        logger.debug("Cache namespace invalidated", namespace=CacheNamespace(namespace).value, deleted=deleted)
        return deleted

    async def clear_all(self) -> bool:
        """Flush the whole cache keyspace. Maintenance only."""
        try:
            await self.flush()
        except StoreUnavailableError as e:
            logger.debug("Cache unavailable, flush skipped", reason=str(e))
            return False
        except Exception as e:
            logger.warning("Cache flush failed", error=str(e) or type(e).__name__)
            return False

        logger.info("Cache cleared")
        return True
