"""Main CacheService combining all cache operations."""

from typing import Any, TypeVar

from chatcache.services.cache.constants import CacheNamespace
from chatcache.services.cache.counters import RateLimitCounterMixin
from chatcache.services.cache.stats import StatsMixin
from chatcache.services.cache.typed import TypedCache
from chatcache.services.cache.user import FeedCacheMixin, UserCacheMixin

T = TypeVar("T")


class CacheService(UserCacheMixin, FeedCacheMixin, RateLimitCounterMixin, StatsMixin):
    """Async Redis caching and rate-limit counting with graceful degradation.

    Combines all cache operations through multiple inheritance:
    - BaseCacheOperations: connection lifecycle and low-level Redis primitives
    - NamespacedCacheMixin: fail-open get/set/invalidate per namespace
    - UserCacheMixin: sessions, profiles and per-user stats
    - FeedCacheMixin: message lists and leaderboards
    - RateLimitCounterMixin: fail-closed fixed-window counters
    - StatsMixin: connection and keyspace stats

    Construct one per process, ``connect()`` it at startup, hand the same
    instance to every consumer and ``disconnect()`` it at shutdown.
    """

    def typed(self, namespace: CacheNamespace | str, payload_type: type[T] | Any) -> TypedCache[T]:
        """Return a view of ``namespace`` that validates reads as ``payload_type``."""
        return TypedCache(self, namespace, payload_type)
