"""Services module exports."""

from chatcache.services.cache import CacheNamespace, CacheService, CacheStats
from chatcache.services.rate_limit import RateLimitDecision, RateLimitPolicy, RateLimitService

__all__ = [
    "CacheNamespace",
    "CacheService",
    "CacheStats",
    "RateLimitDecision",
    "RateLimitPolicy",
    "RateLimitService",
]
