from __future__ import annotations

from decimal import Decimal
from typing import Callable, List, Optional, Tuple

from django.conf import settings

from apps.catalog.dtos import ProductDTO
from apps.common import get_logger
from apps.common.protocols import KeyValueStorageProtocol
from .dtos import CartLineItemDTO
from .mappers import CartSnapshotError, CartSnapshotMapper

logger = get_logger(__name__).bind(component="carts", layer="service")

CartListener = Callable[[Tuple[CartLineItemDTO, ...]], None]


class InvalidQuantityError(ValueError):
    """Raised when a cart quantity is not a whole number of units."""


def _require_int(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityError(f"Quantity must be an integer, got {quantity!r}")
    return quantity


class CartStore:
    """Client-local shopping cart mirrored to durable key/value storage.

    Each mutation computes the new line items synchronously, publishes them
    in memory, and only then awaits the storage write. In-memory state is
    authoritative for the running process; a persistence failure is logged
    and the mirror catches up on the next successful write.

    Stock is not checked here; callers may add more units than a product has
    available.
    """

    def __init__(
        self,
        storage: KeyValueStorageProtocol,
        storage_key: Optional[str] = None,
    ):
        self.storage = storage
        self.storage_key = storage_key or settings.CART_STORAGE_KEY
        self._items: Tuple[CartLineItemDTO, ...] = ()
        self._listeners: List[CartListener] = []
        self.logger = logger.bind(service="CartStore", storage_key=self.storage_key)

    # --- derived state ---
    @property
    def items(self) -> Tuple[CartLineItemDTO, ...]:
        return self._items

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self._items)

    @property
    def total_price(self) -> Decimal:
        # Snapshot prices captured when each line was added, not live catalog prices.
        return sum((item.line_total for item in self._items), Decimal("0"))

    def get_item(self, product_id: str) -> Optional[CartLineItemDTO]:
        for item in self._items:
            if item.product_id == product_id:
                return item
        return None

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- lifecycle ---
    async def load(self) -> None:
        """Hydrate from storage; anything unreadable leaves the cart empty."""
        try:
            raw = await self.storage.get(self.storage_key)
        except Exception:
            self.logger.exception("Error loading cart")
            return
        if raw is None:
            self.logger.debug("No persisted cart found")
            return
        try:
            items = CartSnapshotMapper.loads(raw)
        except CartSnapshotError as exc:
            self.logger.warning("Discarding unreadable cart snapshot", error=str(exc))
            return
        self._set_items(items)
        self.logger.info(
            "Cart hydrated", line_items=len(items), total_items=self.total_items
        )

    # --- intents ---
    async def add_to_cart(self, product: ProductDTO, quantity: int = 1) -> None:
        quantity = _require_int(quantity)
        if quantity < 1:
            raise InvalidQuantityError(f"Quantity must be at least 1, got {quantity}")
        existing = self.get_item(product.id)
        if existing is not None:
            updated = tuple(
                CartLineItemDTO(
                    product_id=item.product_id,
                    quantity=item.quantity + quantity,
                    product=item.product,
                )
                if item.product_id == product.id
                else item
                for item in self._items
            )
        else:
            updated = self._items + (
                CartLineItemDTO(product_id=product.id, quantity=quantity, product=product),
            )
        self.logger.debug(
            "Adding to cart",
            product_id=product.id,
            quantity=quantity,
            merged=existing is not None,
        )
        self._set_items(updated)
        await self._save(updated)

    async def remove_from_cart(self, product_id: str) -> None:
        updated = tuple(item for item in self._items if item.product_id != product_id)
        self.logger.debug(
            "Removing from cart",
            product_id=product_id,
            removed=len(updated) != len(self._items),
        )
        self._set_items(updated)
        await self._save(updated)

    async def update_quantity(self, product_id: str, quantity: int) -> None:
        quantity = _require_int(quantity)
        if quantity < 1:
            await self.remove_from_cart(product_id)
            return
        updated = tuple(
            CartLineItemDTO(product_id=item.product_id, quantity=quantity, product=item.product)
            if item.product_id == product_id
            else item
            for item in self._items
        )
        self.logger.debug("Updating cart quantity", product_id=product_id, quantity=quantity)
        self._set_items(updated)
        await self._save(updated)

    async def clear_cart(self) -> None:
        self.logger.debug("Clearing cart", line_items=len(self._items))
        self._set_items(())
        try:
            await self.storage.delete(self.storage_key)
        except Exception:
            self.logger.exception("Error clearing persisted cart")

    # --- internals ---
    def _set_items(self, items: Tuple[CartLineItemDTO, ...]) -> None:
        self._items = items
        for listener in list(self._listeners):
            try:
                listener(items)
            except Exception:
                self.logger.exception("Cart listener failed")

    async def _save(self, items: Tuple[CartLineItemDTO, ...]) -> None:
        try:
            await self.storage.set(self.storage_key, CartSnapshotMapper.dumps(items))
        except Exception:
            self.logger.exception("Error saving cart", line_items=len(items))
