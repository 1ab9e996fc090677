from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence


@dataclass(frozen=True)
class DocumentSnapshot:
    id: str
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FieldFilter:
    field_path: str
    op: str
    value: Any


class DocumentStoreProtocol(Protocol):
    async def get_document(
        self, collection: str, document_id: str
    ) -> Optional[DocumentSnapshot]:
        ...

    async def set_document(
        self, collection: str, document_id: str, data: Dict[str, Any]
    ) -> None:
        ...

    async def query_collection(
        self,
        collection: str,
        filters: Sequence[FieldFilter] = (),
        order_by: Optional[str] = None,
    ) -> List[DocumentSnapshot]:
        ...


class KeyValueStorageProtocol(Protocol):
    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...
