"""User, message-list and leaderboard cache operations."""

from typing import Any

from chatcache.core.logging import get_logger
from chatcache.services.cache.base import StoreUnavailableError
from chatcache.services.cache.constants import CacheNamespace
from chatcache.services.cache.namespaced import NamespacedCacheMixin

logger = get_logger(__name__)


class UserCacheMixin(NamespacedCacheMixin):
    """Per-user session, profile and stats caching."""

    # ========== Sessions ==========

    async def get_user_session(self, user_id: str) -> dict[str, Any] | None:
        data = await self.get(CacheNamespace.SESSION, user_id)
        return data if isinstance(data, dict) else None

    async def set_user_session(self, user_id: str, session_data: dict[str, Any]) -> bool:
        return await self.set(CacheNamespace.SESSION, user_id, session_data)

    async def delete_user_session(self, user_id: str) -> bool:
        return await self.invalidate(CacheNamespace.SESSION, user_id)

    # ========== Profiles and stats ==========

    async def get_user_profile_cache(self, user_id: str) -> dict[str, Any] | None:
        data = await self.get(CacheNamespace.PROFILE, user_id)
        return data if isinstance(data, dict) else None

    async def set_user_profile_cache(self, user_id: str, profile: dict[str, Any]) -> bool:
        return await self.set(CacheNamespace.PROFILE, user_id, profile)

    async def get_user_stats_cache(self, user_id: str) -> dict[str, Any] | None:
        data = await self.get(CacheNamespace.STATS, user_id)
        return data if isinstance(data, dict) else None

    async def set_user_stats_cache(self, user_id: str, stats: dict[str, Any]) -> bool:
        return await self.set(CacheNamespace.STATS, user_id, stats)

    async def invalidate_user_cache(self, user_id: str) -> bool:
        """Drop a user's profile and stats after their data changed.

        The session entry is left alone; it is owned by the auth flow.
        """
        keys = [
            self._make_key(CacheNamespace.PROFILE, user_id),
            self._make_key(CacheNamespace.STATS, user_id),
        ]
        try:
            await self.delete_keys(*keys)
            return True
        except StoreUnavailableError as e:
            logger.debug("Cache unavailable, user invalidation skipped", user_id=user_id, reason=str(e))
            return False
        except Exception as e:
            logger.debug("Cache user invalidation failed", user_id=user_id, error=str(e) or type(e).__name__)
            return False


class FeedCacheMixin(NamespacedCacheMixin):
    """Message-list and leaderboard caching."""

    async def get_messages_cache(self, query_key: str) -> Any | None:
        """Get a cached message-list response keyed by its query fingerprint."""
        return await self.get(CacheNamespace.MESSAGES, query_key)

    async def set_messages_cache(self, query_key: str, messages: Any) -> bool:
        return await self.set(CacheNamespace.MESSAGES, query_key, messages)

    async def invalidate_messages_cache(self) -> int:
        """Drop every cached message list, e.g. after a message was sent."""
        return await self.invalidate_namespace(CacheNamespace.MESSAGES)

    async def get_leaderboard_cache(self, limit: int) -> Any | None:
        return await self.get(CacheNamespace.LEADERBOARD, limit)

    async def set_leaderboard_cache(self, limit: int, leaderboard: Any) -> bool:
        return await self.set(CacheNamespace.LEADERBOARD, limit, leaderboard)

    async def invalidate_leaderboard_cache(self) -> int:
        """Drop every cached leaderboard page after XP changed."""
        return await self.invalidate_namespace(CacheNamespace.LEADERBOARD)
