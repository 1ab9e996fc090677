from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional

from apps.common.protocols import DocumentSnapshot

from .dtos import ProductDTO


def _to_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def to_timestamp(value: Any) -> str:
    """Firestore hands back datetimes, persisted snapshots carry ISO strings."""
    if value is None:
        return ""
    isoformat = getattr(value, "isoformat", None)
    if callable(isoformat):
        return isoformat()
    return str(value)


class ProductMapper:
    @staticmethod
    def from_data(data: Mapping[str, Any], product_id: Optional[str] = None) -> ProductDTO:
        return ProductDTO(
            id=str(product_id if product_id is not None else data.get("id", "")),
            name=str(data.get("name") or ""),
            price=_to_decimal(data.get("price")),
            description=str(data.get("description") or ""),
            image_url=str(data.get("imageURL") or ""),
            stock=_to_int(data.get("stock")),
            category=str(data.get("category") or ""),
            created_at=to_timestamp(data.get("createdAt")),
            updated_at=to_timestamp(data.get("updatedAt")),
        )

    @staticmethod
    def from_document(snapshot: DocumentSnapshot) -> ProductDTO:
        # The document id wins over any stale "id" field stored in the body.
        return ProductMapper.from_data(snapshot.data, product_id=snapshot.id)

    @staticmethod
    def many_from_documents(snapshots: Iterable[DocumentSnapshot]) -> List[ProductDTO]:
        return [ProductMapper.from_document(s) for s in snapshots]

    @staticmethod
    def to_data(product: ProductDTO) -> Dict[str, Any]:
        # Document stores take doubles; the local cart snapshot keeps exact strings.
        return {
            "id": product.id,
            "name": product.name,
            "description": product.description,
            "price": float(product.price),
            "imageURL": product.image_url,
            "stock": product.stock,
            "category": product.category,
            "createdAt": product.created_at,
            "updatedAt": product.updated_at,
        }
