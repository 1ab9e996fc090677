"""Conversion between in-memory cart line items and the persisted snapshot.

The snapshot is a bare JSON array of ``{productId, quantity, product}``
objects with no version tag, so readers written against older builds keep
working. Prices are written as decimal strings so they reload exactly;
numeric prices from older snapshots are still accepted.
"""
import json
from typing import Any, Dict, Iterable, List, Tuple

from rest_framework.exceptions import ValidationError

from apps.catalog.mappers import ProductMapper

from .dtos import CartLineItemDTO
from .serializers import CartLineItemSerializer


class CartSnapshotError(ValueError):
    """Raised when a persisted cart snapshot cannot be decoded."""


class CartLineItemMapper:
    @staticmethod
    def to_data(item: CartLineItemDTO) -> Dict[str, Any]:
        return {
            "productId": item.product_id,
            "quantity": item.quantity,
            "product": ProductMapper.to_data(item.product),
        }

    @staticmethod
    def from_validated(data: Dict[str, Any]) -> CartLineItemDTO:
        return CartLineItemDTO(
            product_id=data["productId"],
            quantity=data["quantity"],
            product=ProductMapper.from_data(data["product"]),
        )

    @staticmethod
    def many_to_data(items: Iterable[CartLineItemDTO]) -> List[Dict[str, Any]]:
        return [CartLineItemMapper.to_data(i) for i in items]


class CartSnapshotMapper:
    @staticmethod
    def dumps(items: Iterable[CartLineItemDTO]) -> str:
        rows = []
        for item in items:
            row = CartLineItemMapper.to_data(item)
            row["product"]["price"] = str(item.product.price)
            rows.append(row)
        return json.dumps(rows)

    @staticmethod
    def loads(raw: str) -> Tuple[CartLineItemDTO, ...]:
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise CartSnapshotError(f"Cart snapshot is not valid JSON: {exc}") from exc
        if not isinstance(payload, list):
            raise CartSnapshotError("Cart snapshot must be a JSON array")
        serializer = CartLineItemSerializer(data=payload, many=True)
        try:
            serializer.is_valid(raise_exception=True)
        except ValidationError as exc:
            raise CartSnapshotError(f"Cart snapshot failed validation: {exc.detail}") from exc
        return CartSnapshotMapper._merge_duplicates(
            CartLineItemMapper.from_validated(row) for row in serializer.validated_data
        )

    @staticmethod
    def _merge_duplicates(items: Iterable[CartLineItemDTO]) -> Tuple[CartLineItemDTO, ...]:
        # Keep one line per product: first snapshot wins, quantities add up.
        merged: Dict[str, CartLineItemDTO] = {}
        for item in items:
            existing = merged.get(item.product_id)
            if existing is None:
                merged[item.product_id] = item
            else:
                merged[item.product_id] = CartLineItemDTO(
                    product_id=existing.product_id,
                    quantity=existing.quantity + item.quantity,
                    product=existing.product,
                )
        return tuple(merged.values())
