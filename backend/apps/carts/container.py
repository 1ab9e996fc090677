from __future__ import annotations

from typing import Optional

from apps.common.protocols import KeyValueStorageProtocol
from apps.common.storage import CacheKeyValueStorage

from .services import CartStore


def build_cart_store(storage: Optional[KeyValueStorageProtocol] = None) -> CartStore:
    return CartStore(storage=storage if storage is not None else CacheKeyValueStorage())
