"""Custom exception classes for the cache and rate-limit service."""

from http import HTTPStatus
from typing import Any


class CacheServiceError(Exception):
    """Base cache service exception."""

    def __init__(
        self,
        message: str,
        status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = int(status_code)
        self.details = details or {}
        super().__init__(message)


class CacheConnectionError(CacheServiceError, ConnectionError):
    """Connecting to the key-value store failed.

    Raised by ``CacheService.connect()`` only. Fatal to that call, not to the
    process: the caller decides whether and when to retry.
    """

    def __init__(self, message: str = "Could not connect to cache store", endpoint: str = ""):
        super().__init__(
            message,
            HTTPStatus.SERVICE_UNAVAILABLE,
            {"endpoint": endpoint} if endpoint else None,
        )


class RateLimitStoreError(CacheServiceError):
    """The store could not count a rate-limit hit."""

    def __init__(self, key: str, message: str = "Rate limit store unavailable"):
        super().__init__(message, HTTPStatus.SERVICE_UNAVAILABLE, {"key": key})
        self.key = key


class RateLimitExceededError(CacheServiceError):
    """Rate limit exceeded."""

    def __init__(self, retry_after: int = 60, policy: str = ""):
        super().__init__(
            "Rate limit exceeded. Please try again later.",
            HTTPStatus.TOO_MANY_REQUESTS,
            {"retry_after": retry_after, "policy": policy},
        )
        self.retry_after = retry_after
