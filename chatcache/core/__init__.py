"""Core module exports."""

from chatcache.core.config import Settings, get_settings
from chatcache.core.exceptions import (
    CacheConnectionError,
    CacheServiceError,
    RateLimitExceededError,
    RateLimitStoreError,
)
from chatcache.core.logging import get_logger, setup_logging

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Logging
    "get_logger",
    "setup_logging",
    # Exceptions
    "CacheConnectionError",
    "CacheServiceError",
    "RateLimitExceededError",
    "RateLimitStoreError",
]
