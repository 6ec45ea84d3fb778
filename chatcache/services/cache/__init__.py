"""Async Redis caching and rate-limit counting service using Upstash.

Provides one namespaced cache over a single store client:
- String (SET EX/GET): JSON payloads per namespace with per-namespace TTLs
- Lua (EVAL INCR + PEXPIRE): fixed-window rate-limit counters in one round trip
- DBSIZE/FLUSHDB: stats and maintenance

Features:
- Explicit connect/disconnect lifecycle with lazy reconnect after transport failures
- Cache-aside reads and writes that fail open
- Rate-limit counting that fails closed
- Typed namespace views validated with pydantic
"""

from chatcache.services.cache.base import ConnectionState, create_redis_client
from chatcache.services.cache.constants import (
    DEFAULT_TTLS,
    RATE_LIMIT_SCRIPT,
    TTL_LEADERBOARD,
    TTL_MESSAGES,
    TTL_PROFILE,
    TTL_SESSION,
    TTL_STATS,
    CacheNamespace,
    NamespacePolicy,
)
from chatcache.services.cache.counters import RateLimitWindow
from chatcache.services.cache.service import CacheService
from chatcache.services.cache.stats import CacheStats
from chatcache.services.cache.typed import SessionPayload, TypedCache

__all__ = [
    # TTL constants
    "TTL_SESSION",
    "TTL_MESSAGES",
    "TTL_LEADERBOARD",
    "TTL_PROFILE",
    "TTL_STATS",
    "DEFAULT_TTLS",
    "RATE_LIMIT_SCRIPT",
    # Namespaces
    "CacheNamespace",
    "NamespacePolicy",
    # Service
    "CacheService",
    "CacheStats",
    "RateLimitWindow",
    "ConnectionState",
    "SessionPayload",
    "TypedCache",
    "create_redis_client",
]
