from typing import List, Optional

from django.conf import settings

from apps.common.protocols import DocumentSnapshot, DocumentStoreProtocol, FieldFilter


class ProductRepository:
    def __init__(self, documents: DocumentStoreProtocol, collection: Optional[str] = None):
        self.documents = documents
        self.collection = collection or settings.PRODUCTS_COLLECTION

    async def list(self, category: Optional[str] = None) -> List[DocumentSnapshot]:
        """Products ordered by name, optionally narrowed to one exact category tag."""
        filters = [FieldFilter("category", "==", category)] if category else []
        return await self.documents.query_collection(
            self.collection, filters=filters, order_by="name"
        )

    async def get(self, product_id: str) -> Optional[DocumentSnapshot]:
        return await self.documents.get_document(self.collection, product_id)

    async def list_all(self) -> List[DocumentSnapshot]:
        return await self.documents.query_collection(self.collection)
