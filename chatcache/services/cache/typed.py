"""Typed views over a single cache namespace.

The wire format stays JSON; a view validates what comes back against the
payload type and treats anything that does not fit as a miss.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from chatcache.core.logging import get_logger
from chatcache.services.cache.constants import CacheNamespace
from chatcache.services.cache.namespaced import NamespacedCacheMixin

logger = get_logger(__name__)

T = TypeVar("T")


class SessionPayload(BaseModel):
    """Session entry written at login and read by the auth middleware."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    user_id: str = Field(alias="userId")
    role: str = "user"
    timestamp: int


class TypedCache(Generic[T]):
    """Cache operations bound to one namespace and one payload type."""

    def __init__(
        self,
        cache: NamespacedCacheMixin,
        namespace: CacheNamespace | str,
        payload_type: type[T] | Any,
    ) -> None:
        self._cache = cache
        self.namespace = CacheNamespace(namespace)
        self._adapter: TypeAdapter[T] = TypeAdapter(payload_type)

    async def get(self, logical_id: str | int) -> T | None:
        data = await self._cache.get(self.namespace, logical_id)
        if data is None:
            return None
        try:
            return self._adapter.validate_python(data)
        except ValidationError as e:
            logger.debug(
                "Cached payload failed validation",
                namespace=self.namespace.value,
                logical_id=str(logical_id),
                errors=e.error_count(),
            )
            return None

    async def set(self, logical_id: str | int, value: T) -> bool:
        try:
            payload = self._adapter.dump_python(value, mode="json", by_alias=True)
        except (PydanticSerializationError, TypeError, ValueError) as e:
            logger.warning(
                "Cache payload serialization failed",
                namespace=self.namespace.value,
                error=str(e),
            )
            return False
        return await self._cache.set(self.namespace, logical_id, payload)

    async def invalidate(self, logical_id: str | int) -> bool:
        return await self._cache.invalidate(self.namespace, logical_id)
