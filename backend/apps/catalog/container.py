from __future__ import annotations

from typing import Optional

from apps.common.protocols import DocumentStoreProtocol

from .repositories import ProductRepository
from .services import CatalogService


def build_catalog_service(documents: Optional[DocumentStoreProtocol] = None) -> CatalogService:
    if documents is None:
        from apps.common.documents import FirestoreDocumentStore

        documents = FirestoreDocumentStore()
    return CatalogService(products=ProductRepository(documents))
