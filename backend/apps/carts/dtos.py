from dataclasses import dataclass
from decimal import Decimal

from apps.catalog.dtos import ProductDTO


@dataclass(frozen=True)
class CartLineItemDTO:
    product_id: str
    quantity: int
    product: ProductDTO

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity
