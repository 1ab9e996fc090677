from __future__ import annotations

import uuid
from decimal import Decimal
from typing import List, Optional

from django.utils import timezone

from apps.common import get_logger
from .dtos import OrderDTO, OrderStatus
from .mappers import OrderMapper
from .protocols import CartProtocol, OrderRepositoryProtocol, SessionProtocol

logger = get_logger(__name__).bind(component="orders", layer="service")


class OrderNotAllowedError(Exception):
    """Raised when an order is placed without a signed-in identity."""


class EmptyCartError(Exception):
    """Raised when an order is placed from an empty cart."""


class OrderService:
    def __init__(
        self,
        orders: OrderRepositoryProtocol,
        cart: CartProtocol,
        session: SessionProtocol,
    ):
        self.orders = orders
        self.cart = cart
        self.session = session
        self.logger = logger.bind(service="OrderService")

    async def place_order(self) -> OrderDTO:
        """Write the current cart as a pending order, then clear the cart.

        Line prices are the snapshot prices held by the cart. A failed write
        propagates and leaves the cart untouched.
        """
        identity = self.session.identity
        if identity is None:
            self.logger.warning("Order placement without identity")
            raise OrderNotAllowedError("Sign in to place an order")
        items = list(self.cart.items)
        if not items:
            self.logger.info("Order placement with empty cart", uid=identity.uid)
            raise EmptyCartError("Cart is empty")
        now = timezone.now().isoformat()
        order = OrderDTO(
            id=str(uuid.uuid4()),
            user_id=identity.uid,
            items=items,
            total_price=sum((item.line_total for item in items), Decimal("0")),
            status=OrderStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        try:
            await self.orders.create(order.id, OrderMapper.to_document(order))
        except Exception:
            self.logger.exception("Error placing order", uid=identity.uid, order_id=order.id)
            raise
        self.logger.info(
            "Order placed",
            uid=identity.uid,
            order_id=order.id,
            line_items=len(items),
            total_price=str(order.total_price),
        )
        await self.cart.clear_cart()
        return order

    async def list_orders(self) -> List[OrderDTO]:
        identity = self.session.identity
        if identity is None:
            return []
        self.logger.debug("Listing orders", uid=identity.uid)
        documents = await self.orders.list_for_user(identity.uid)
        return OrderMapper.many_from_documents(documents)

    async def get_order(self, order_id: str) -> Optional[OrderDTO]:
        self.logger.debug("Fetching order", order_id=order_id)
        document = await self.orders.get(order_id)
        if document is None:
            self.logger.info("Order not found", order_id=order_id)
            return None
        return OrderMapper.from_document(document)
