from __future__ import annotations

from typing import List, Optional

from apps.common import get_logger
from .dtos import ProductDTO
from .mappers import ProductMapper
from .protocols import ProductRepositoryProtocol

logger = get_logger(__name__).bind(component="catalog", layer="service")


class CatalogService:
    """Read-only gateway over the remote product catalog.

    Nothing is cached; every call hits the document store once and any store
    error is logged and re-raised unchanged.
    """

    def __init__(self, products: ProductRepositoryProtocol):
        self.products = products
        self.logger = logger.bind(service="CatalogService")

    async def list_products(self, category: Optional[str] = None) -> List[ProductDTO]:
        self.logger.debug("Listing products", category=category)
        try:
            documents = await self.products.list(category=category)
        except Exception:
            self.logger.exception("Error fetching products", category=category)
            raise
        return ProductMapper.many_from_documents(documents)

    async def get_product(self, product_id: str) -> Optional[ProductDTO]:
        self.logger.debug("Fetching product", product_id=product_id)
        try:
            document = await self.products.get(product_id)
        except Exception:
            self.logger.exception("Error fetching product", product_id=product_id)
            raise
        if document is None:
            self.logger.info("Product not found", product_id=product_id)
            return None
        return ProductMapper.from_document(document)

    async def list_categories(self) -> List[str]:
        self.logger.debug("Listing categories")
        try:
            documents = await self.products.list_all()
        except Exception:
            self.logger.exception("Error fetching categories")
            raise
        categories = {
            str(document.data["category"])
            for document in documents
            if document.data.get("category")
        }
        return sorted(categories)
