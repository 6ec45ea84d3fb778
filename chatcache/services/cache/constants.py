"""Cache namespaces, TTL defaults and the namespace policy table."""

from collections.abc import Iterator, Mapping
from enum import Enum

from chatcache.core.config import Settings


class CacheNamespace(str, Enum):
    """Logical partitions of the cache keyspace, used as key prefixes."""

    SESSION = "session"  # session:{user_id}
    MESSAGES = "messages"  # messages:{query fingerprint}
    LEADERBOARD = "leaderboard"  # leaderboard:{limit}
    PROFILE = "profile"  # profile:{user_id}
    STATS = "stats"  # stats:{user_id}


# Default TTLs (in seconds)
TTL_SESSION = 604800  # 7 days
TTL_MESSAGES = 300  # 5 minutes - list changes with every sent message
TTL_LEADERBOARD = 600  # 10 minutes
TTL_PROFILE = 900  # 15 minutes
TTL_STATS = 1800  # 30 minutes - aggregate stats are expensive to compute

DEFAULT_TTLS: dict[CacheNamespace, int] = {
    CacheNamespace.SESSION: TTL_SESSION,
    CacheNamespace.MESSAGES: TTL_MESSAGES,
    CacheNamespace.LEADERBOARD: TTL_LEADERBOARD,
    CacheNamespace.PROFILE: TTL_PROFILE,
    CacheNamespace.STATS: TTL_STATS,
}

# INCR then PEXPIRE only when the counter was just created, in one round trip.
# Later hits in the window leave the expiry alone (fixed window). Replies with
# the count and the milliseconds left in the window.
RATE_LIMIT_SCRIPT = """
local count = redis.call('INCR', KEYS[1])
if count == 1 then
    redis.call('PEXPIRE', KEYS[1], ARGV[1])
end
return {count, redis.call('PTTL', KEYS[1])}
"""


class NamespacePolicy(Mapping[CacheNamespace, int]):
    """Read-only namespace -> TTL table, fixed for the life of the service."""

    def __init__(self, ttls: Mapping[CacheNamespace, int]) -> None:
        missing = set(CacheNamespace) - set(ttls)
        if missing:
            raise ValueError(f"No TTL configured for: {sorted(ns.value for ns in missing)}")
        for namespace, ttl in ttls.items():
            if ttl <= 0:
                raise ValueError(f"TTL for {namespace.value} must be positive, got {ttl}")
        self._ttls = dict(ttls)

    @classmethod
    def from_settings(cls, settings: Settings) -> "NamespacePolicy":
        """Build the policy table from configured TTL overrides."""
        return cls({
            CacheNamespace.SESSION: settings.session_ttl,
            CacheNamespace.MESSAGES: settings.messages_ttl,
            CacheNamespace.LEADERBOARD: settings.leaderboard_ttl,
            CacheNamespace.PROFILE: settings.profile_ttl,
            CacheNamespace.STATS: settings.stats_ttl,
        })

    def ttl(self, namespace: CacheNamespace | str) -> int:
        return self._ttls[CacheNamespace(namespace)]

    def __getitem__(self, namespace: CacheNamespace) -> int:
        return self._ttls[namespace]

    def __iter__(self) -> Iterator[CacheNamespace]:
        return iter(self._ttls)

    def __len__(self) -> int:
        return len(self._ttls)

    def __repr__(self) -> str:
        table = ", ".join(f"{ns.value}={ttl}" for ns, ttl in self._ttls.items())
        return f"NamespacePolicy({table})"
