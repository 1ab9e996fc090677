"""DTO dataclasses only. Mapping logic lives in mappers.py."""
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class ProductDTO:
    id: str
    name: str
    price: Decimal
    description: str = ""
    image_url: str = ""
    stock: int = 0
    category: str = ""
    created_at: str = ""
    updated_at: str = ""

    @property
    def in_stock(self) -> bool:
        return self.stock > 0
