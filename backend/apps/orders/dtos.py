from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List

from apps.carts.dtos import CartLineItemDTO


class OrderStatus(str, Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    COMPLETED = "Completed"


@dataclass(frozen=True)
class OrderDTO:
    id: str
    user_id: str
    total_price: Decimal
    status: OrderStatus
    created_at: str
    updated_at: str
    items: List[CartLineItemDTO] = field(default_factory=list)
