from __future__ import annotations

from typing import Optional

from django.conf import settings
from django.core.cache import BaseCache, caches

from apps.common import get_logger

logger = get_logger(__name__).bind(component="common", layer="storage")


class CacheKeyValueStorage:
    """Durable device-local key/value slots backed by a Django cache alias.

    Entries are written without expiry; the configured backend decides how
    durable they are (file based on devices, in-memory under tests).
    """

    def __init__(self, cache: Optional[BaseCache] = None, alias: Optional[str] = None):
        self.alias = alias or settings.LOCAL_STORAGE_CACHE_ALIAS
        self.cache = cache if cache is not None else caches[self.alias]
        self.logger = logger.bind(storage="CacheKeyValueStorage", alias=self.alias)

    async def get(self, key: str) -> Optional[str]:
        value = await self.cache.aget(key)
        if value is not None and not isinstance(value, str):
            self.logger.warning(
                "Ignoring non-text value in local storage",
                key=key,
                value_type=type(value).__name__,
            )
            return None
        return value

    async def set(self, key: str, value: str) -> None:
        self.logger.debug("Writing local storage slot", key=key, size=len(value))
        await self.cache.aset(key, value, timeout=None)

    async def delete(self, key: str) -> None:
        self.logger.debug("Deleting local storage slot", key=key)
        await self.cache.adelete(key)
