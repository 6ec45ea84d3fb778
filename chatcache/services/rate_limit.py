"""Rate limiting policies on top of the cache's fixed-window counters.

The counter (``CacheService.increment_rate_limit_window``) only counts. This module
holds the thresholds and decides what to do when the store cannot count:
login/registration fails closed, everything else fails open.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from chatcache.core.config import Settings, get_settings
from chatcache.core.exceptions import RateLimitExceededError, RateLimitStoreError
from chatcache.core.logging import get_logger
from chatcache.services.cache import CacheService

logger = get_logger(__name__)

POLICY_API = "api"
POLICY_AUTH = "auth"
POLICY_MESSAGE = "message"


@dataclass(frozen=True)
class RateLimitPolicy:
    """Threshold and window for one class of requests."""

    name: str
    limit: int
    window_ms: int
    fail_closed: bool = False

    @property
    def window_seconds(self) -> int:
        return math.ceil(self.window_ms / 1000)


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one rate limit check."""

    allowed: bool
    limit: int
    remaining: int  # -1 when unknown (disabled or store down)
    retry_after: int = 0
    degraded: bool = False  # decided without a count from the store
    reset_after_ms: int = -1  # -1 when unknown
    reset_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "allowed": self.allowed,
            "limit": self.limit,
            "remaining": self.remaining,
            "retry_after": self.retry_after,
            "degraded": self.degraded,
            "reset_after_ms": self.reset_after_ms,
            "reset_at": self.reset_at.isoformat() if self.reset_at else None,
        }


class RateLimitService:
    """Fixed-window rate limiting per caller identity and policy."""

    def __init__(self, cache: CacheService, settings: Settings | None = None) -> None:
        """Initialize rate limit service."""
        settings = settings or get_settings()
        self._cache = cache
        self._enabled = settings.rate_limit_enabled
        self._policies = {
            POLICY_API: RateLimitPolicy(
                POLICY_API,
                settings.rate_limit_api_requests,
                settings.rate_limit_api_window_ms,
            ),
            # Brute-force protection: deny when the counter is unavailable
            POLICY_AUTH: RateLimitPolicy(
                POLICY_AUTH,
                settings.rate_limit_auth_requests,
                settings.rate_limit_auth_window_ms,
                fail_closed=True,
            ),
            POLICY_MESSAGE: RateLimitPolicy(
                POLICY_MESSAGE,
                settings.rate_limit_message_requests,
                settings.rate_limit_message_window_ms,
            ),
        }

        if self._enabled:
            logger.info(
                "Rate limiting initialized",
                **{name: f"{p.limit}/{p.window_ms}ms" for name, p in self._policies.items()},
            )
        else:
            logger.info("Rate limiting disabled")

    @property
    def is_enabled(self) -> bool:
        """Check if rate limiting is enabled."""
        return self._enabled

    def policy(self, name: str) -> RateLimitPolicy:
        try:
            return self._policies[name]
        except KeyError:
            raise ValueError(f"Unknown rate limit policy: {name}") from None

    @staticmethod
    def make_key(policy: RateLimitPolicy, identifier: str) -> str:
        return f"rate:{identifier}:{policy.name}"

    async def check(self, policy_name: str, identifier: str) -> RateLimitDecision:
        """Count one request for ``identifier`` and decide whether it may proceed.

        Args:
            policy_name: One of ``api``, ``auth``, ``message``
            identifier: Unique caller identity (user ID or client IP)

        Returns:
            The decision; never raises for store trouble
        """
        policy = self.policy(policy_name)
        if not self._enabled:
            return RateLimitDecision(allowed=True, limit=policy.limit, remaining=-1)

        key = self.make_key(policy, identifier)
        try:
            window = await self._cache.increment_rate_limit_window(key, policy.window_ms)
        except RateLimitStoreError as e:
            logger.warning(
                "Rate limit check failed",
                key=key,
                policy=policy.name,
                fail_closed=policy.fail_closed,
                error=e.message,
            )
            if policy.fail_closed:
                return RateLimitDecision(
                    allowed=False,
                    limit=policy.limit,
                    remaining=0,
                    retry_after=policy.window_seconds,
                    degraded=True,
                )
            return RateLimitDecision(allowed=True, limit=policy.limit, remaining=-1, degraded=True)

        allowed = window.count <= policy.limit
        if not allowed:
            logger.info(
                "Rate limit exceeded",
                key=key,
                policy=policy.name,
                count=window.count,
                limit=policy.limit,
                reset_after_ms=window.reset_after_ms,
            )

        return RateLimitDecision(
            allowed=allowed,
            limit=policy.limit,
            remaining=max(0, policy.limit - window.count),
            retry_after=0 if allowed else max(1, math.ceil(window.reset_after_ms / 1000)),
            reset_after_ms=window.reset_after_ms,
            reset_at=datetime.now(timezone.utc) + timedelta(milliseconds=window.reset_after_ms),
        )

    async def enforce(self, policy_name: str, identifier: str) -> RateLimitDecision:
        """Like ``check`` but raises ``RateLimitExceededError`` on rejection."""
        decision = await self.check(policy_name, identifier)
        if not decision.allowed:
            raise RateLimitExceededError(retry_after=decision.retry_after, policy=policy_name)
        return decision

    async def check_api_limit(self, identifier: str) -> RateLimitDecision:
        """General API limit (fail-open)."""
        return await self.check(POLICY_API, identifier)

    async def check_auth_limit(self, identifier: str) -> RateLimitDecision:
        """Login/registration limit (fail-closed)."""
        return await self.check(POLICY_AUTH, identifier)

    async def check_message_limit(self, identifier: str) -> RateLimitDecision:
        """Message sending limit (fail-open)."""
        return await self.check(POLICY_MESSAGE, identifier)
