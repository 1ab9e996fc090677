from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping

from apps.carts.dtos import CartLineItemDTO
from apps.carts.mappers import CartLineItemMapper
from apps.catalog.mappers import ProductMapper, to_timestamp
from apps.common.protocols import DocumentSnapshot

from .dtos import OrderDTO, OrderStatus


def _line_item_from_data(raw: Mapping[str, Any]) -> CartLineItemDTO:
    product = ProductMapper.from_data(raw.get("product") or {})
    try:
        quantity = int(raw.get("quantity", 0))
    except (TypeError, ValueError):
        quantity = 0
    return CartLineItemDTO(
        product_id=str(raw.get("productId") or product.id),
        quantity=quantity,
        product=product,
    )


class OrderMapper:
    @staticmethod
    def to_document(order: OrderDTO) -> Dict[str, Any]:
        return {
            "userId": order.user_id,
            "items": CartLineItemMapper.many_to_data(order.items),
            "totalPrice": float(order.total_price),
            "status": order.status.value,
            "createdAt": order.created_at,
            "updatedAt": order.updated_at,
        }

    @staticmethod
    def from_document(snapshot: DocumentSnapshot) -> OrderDTO:
        data = snapshot.data
        try:
            total = Decimal(str(data.get("totalPrice", 0)))
        except (InvalidOperation, ValueError):
            total = Decimal("0")
        try:
            status = OrderStatus(data.get("status"))
        except ValueError:
            status = OrderStatus.PENDING
        return OrderDTO(
            id=snapshot.id,
            user_id=str(data.get("userId") or ""),
            items=[_line_item_from_data(i) for i in data.get("items") or [] if isinstance(i, Mapping)],
            total_price=total,
            status=status,
            created_at=to_timestamp(data.get("createdAt")),
            updated_at=to_timestamp(data.get("updatedAt")),
        )

    @staticmethod
    def many_from_documents(snapshots: Iterable[DocumentSnapshot]) -> List[OrderDTO]:
        return [OrderMapper.from_document(s) for s in snapshots]
