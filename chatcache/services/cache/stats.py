"""Connection and keyspace stats for health endpoints."""

from dataclasses import dataclass
from typing import Any

from chatcache.core.logging import get_logger
from chatcache.services.cache.base import BaseCacheOperations, StoreUnavailableError

logger = get_logger(__name__)


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of the cache for diagnostics. Not for control flow."""

    connected: bool
    keys: int  # store-reported, approximate

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"connected": self.connected, "keys": self.keys}


class StatsMixin(BaseCacheOperations):

    async def get_cache_stats(self) -> CacheStats:
        """Report liveness and the store's DBSIZE."""
        if not self.is_connected:
            return CacheStats(connected=False, keys=0)

        try:
            keys = await self.count_keys()
        except StoreUnavailableError as e:
            logger.debug("Cache unavailable, key count skipped", reason=str(e))
            keys = 0
        except Exception as e:
            logger.debug("Cache dbsize failed", error=str(e) or type(e).__name__)
            keys = 0

        return CacheStats(connected=self.is_connected, keys=keys)
