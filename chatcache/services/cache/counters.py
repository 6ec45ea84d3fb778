"""Fixed-window rate-limit counters (fail-closed)."""

import asyncio
from dataclasses import dataclass

from chatcache.core.exceptions import RateLimitStoreError
from chatcache.core.logging import get_logger
from chatcache.services.cache.base import BaseCacheOperations, StoreUnavailableError
from chatcache.services.cache.constants import RATE_LIMIT_SCRIPT

logger = get_logger(__name__)


@dataclass(frozen=True)
class RateLimitWindow:
    """Counter state right after one hit."""

    count: int
    reset_after_ms: int  # time left until the store drops the counter


class RateLimitCounterMixin(BaseCacheOperations):
    """Atomic counters for rate limiting. Counting only, no thresholds."""

    async def increment_rate_limit(self, key: str, window_ms: int) -> int:
        """Count one hit against ``key`` and return the new count.

        The first hit of a window creates the counter with an expiry of
        ``window_ms`` milliseconds; later hits never move that expiry. Both
        steps run as one script on the store, so concurrent first hits cannot
        each start a fresh window.

        Raises:
            ValueError: ``window_ms`` is not a positive integer.
            RateLimitStoreError: the store could not count the hit.
        """
        window = await self.increment_rate_limit_window(key, window_ms)
        return window.count

    async def increment_rate_limit_window(self, key: str, window_ms: int) -> RateLimitWindow:
        """Same as ``increment_rate_limit`` but also reports when the window ends."""
        if isinstance(window_ms, bool) or not isinstance(window_ms, int) or window_ms <= 0:
            raise ValueError(f"window_ms must be a positive integer, got {window_ms!r}")

        try:
            result = await self.eval_script(RATE_LIMIT_SCRIPT, keys=[key], args=[window_ms])
        except StoreUnavailableError as e:
            logger.warning("Rate limit counter unavailable", key=key, error=str(e))
            raise RateLimitStoreError(key, "Rate limit store not connected") from e
        except asyncio.TimeoutError as e:
            logger.warning("Rate limit increment timed out", key=key, timeout=self._timeout)
            raise RateLimitStoreError(key, "Rate limit store timed out") from e
        except Exception as e:
            logger.warning("Rate limit increment failed", key=key, error=str(e))
            raise RateLimitStoreError(key, f"Rate limit store error: {e}") from e

        try:
            if not isinstance(result, (list, tuple)) or len(result) != 2:
                raise TypeError(f"expected [count, pttl], got {type(result).__name__}")
            count, pttl = int(result[0]), int(result[1])
        except (TypeError, ValueError) as e:
            logger.warning("Rate limit counter returned an unexpected reply", key=key, result=repr(result))
            raise RateLimitStoreError(key, "Rate limit store returned an invalid count") from e

        # PTTL is negative for a counter with no expiry; treat it as a fresh window
        return RateLimitWindow(count=count, reset_after_ms=pttl if pttl >= 0 else window_ms)
