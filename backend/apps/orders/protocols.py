from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Tuple, TYPE_CHECKING

from apps.common.protocols import DocumentSnapshot

if TYPE_CHECKING:
    from apps.auth.dtos import Identity
    from apps.carts.dtos import CartLineItemDTO


class OrderRepositoryProtocol(Protocol):
    async def create(self, order_id: str, data: Dict[str, Any]) -> None: ...

    async def get(self, order_id: str) -> Optional[DocumentSnapshot]: ...

    async def list_for_user(self, user_id: str) -> List[DocumentSnapshot]: ...


class CartProtocol(Protocol):
    @property
    def items(self) -> Tuple["CartLineItemDTO", ...]: ...

    async def clear_cart(self) -> None: ...


class SessionProtocol(Protocol):
    @property
    def identity(self) -> Optional["Identity"]: ...
