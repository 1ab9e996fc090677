from __future__ import annotations

from typing import List, Optional, Protocol

from apps.common.protocols import DocumentSnapshot


class ProductRepositoryProtocol(Protocol):
    async def list(self, category: Optional[str] = None) -> List[DocumentSnapshot]:
        ...

    async def get(self, product_id: str) -> Optional[DocumentSnapshot]:
        ...

    async def list_all(self) -> List[DocumentSnapshot]:
        ...
