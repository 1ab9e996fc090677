from __future__ import annotations

from apps.common.protocols import DocumentStoreProtocol

from .protocols import CartProtocol, SessionProtocol
from .repositories import OrderRepository
from .services import OrderService


def build_order_service(
    documents: DocumentStoreProtocol,
    cart: CartProtocol,
    session: SessionProtocol,
) -> OrderService:
    return OrderService(orders=OrderRepository(documents), cart=cart, session=session)
