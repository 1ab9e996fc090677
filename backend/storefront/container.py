"""Application container: builds every store once and hands them out by reference."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from apps.auth.container import build_auth_provider, build_session_store
from apps.auth.protocols import AuthProviderProtocol
from apps.auth.services import SessionStore
from apps.carts.container import build_cart_store
from apps.carts.services import CartStore
from apps.catalog.container import build_catalog_service
from apps.catalog.services import CatalogService
from apps.common import get_logger
from apps.common.protocols import DocumentStoreProtocol, KeyValueStorageProtocol
from apps.common.storage import CacheKeyValueStorage
from apps.orders.container import build_order_service
from apps.orders.services import OrderService

logger = get_logger(__name__).bind(component="storefront", layer="container")


@dataclass
class StorefrontContainer:
    auth: AuthProviderProtocol
    catalog: CatalogService
    cart: CartStore
    session: SessionStore
    orders: OrderService
    started: bool = False

    async def start(self) -> None:
        """Hydrate the cart, then start the session store around the saved sign-in restore."""
        if self.started:
            return
        await self.cart.load()
        await self.session.start(restore=getattr(self.auth, "restore", None))
        self.started = True
        logger.info(
            "Storefront started",
            cart_items=self.cart.total_items,
            authenticated=self.session.is_authenticated,
        )

    def stop(self) -> None:
        self.session.stop()
        self.started = False


def build_container(
    *,
    documents: Optional[DocumentStoreProtocol] = None,
    storage: Optional[KeyValueStorageProtocol] = None,
    auth: Optional[AuthProviderProtocol] = None,
) -> StorefrontContainer:
    if documents is None:
        from apps.common.documents import FirestoreDocumentStore

        documents = FirestoreDocumentStore()
    if storage is None:
        storage = CacheKeyValueStorage()
    if auth is None:
        auth = build_auth_provider(storage)
    cart = build_cart_store(storage)
    session = build_session_store(auth, documents)
    return StorefrontContainer(
        auth=auth,
        catalog=build_catalog_service(documents),
        cart=cart,
        session=session,
        orders=build_order_service(documents, cart, session),
    )
