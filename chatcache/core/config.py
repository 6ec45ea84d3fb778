"""Service configuration using pydantic-settings.

Provides type-safe, validated configuration from environment variables
with sensible defaults for development.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ========== Store (Upstash Redis) ==========
    upstash_redis_rest_url: str = Field(default="", description="Upstash Redis REST URL")
    upstash_redis_rest_token: str = Field(default="", description="Upstash Redis REST Token")
    cache_enabled: bool = Field(default=True, description="Master switch for the cache")
    cache_operation_timeout: float = Field(
        default=2.0,
        gt=0,
        le=30,
        description="Seconds allowed for a single store call",
    )
    cache_reconnect_interval: float = Field(
        default=5.0,
        ge=0,
        description="Minimum seconds between lazy reconnect attempts",
    )

    # ========== Namespace TTLs (seconds) ==========
    session_ttl: int = Field(default=604800, gt=0, alias="REDIS_SESSION_TTL")  # 7 days
    messages_ttl: int = Field(default=300, gt=0, alias="REDIS_MESSAGES_TTL")  # 5 minutes
    leaderboard_ttl: int = Field(default=600, gt=0, alias="REDIS_LEADERBOARD_TTL")  # 10 minutes
    profile_ttl: int = Field(default=900, gt=0, alias="REDIS_PROFILE_TTL")  # 15 minutes
    stats_ttl: int = Field(default=1800, gt=0, alias="REDIS_STATS_TTL")  # 30 minutes

    # ========== Rate Limiting ==========
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_api_requests: int = Field(default=100, ge=1)
    rate_limit_api_window_ms: int = Field(default=15 * 60 * 1000, ge=1)
    rate_limit_auth_requests: int = Field(default=5, ge=1)
    rate_limit_auth_window_ms: int = Field(default=15 * 60 * 1000, ge=1)
    rate_limit_message_requests: int = Field(default=10, ge=1)
    rate_limit_message_window_ms: int = Field(default=60 * 1000, ge=1)

    # ========== Application ==========
    app_name: str = "chatcache"
    app_version: str = "1.0.0"
    debug: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # ========== Computed Properties ==========
    @computed_field
    @property
    def redis_available(self) -> bool:
        """Check if Redis credentials are configured."""
        return bool(self.upstash_redis_rest_url and self.upstash_redis_rest_token)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
