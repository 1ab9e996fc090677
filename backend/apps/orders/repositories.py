from typing import Any, Dict, List, Optional

from django.conf import settings

from apps.common.protocols import DocumentSnapshot, DocumentStoreProtocol, FieldFilter


class OrderRepository:
    def __init__(self, documents: DocumentStoreProtocol, collection: Optional[str] = None):
        self.documents = documents
        self.collection = collection or settings.ORDERS_COLLECTION

    async def create(self, order_id: str, data: Dict[str, Any]) -> None:
        await self.documents.set_document(self.collection, order_id, data)

    async def get(self, order_id: str) -> Optional[DocumentSnapshot]:
        return await self.documents.get_document(self.collection, order_id)

    async def list_for_user(self, user_id: str) -> List[DocumentSnapshot]:
        return await self.documents.query_collection(
            self.collection,
            filters=[FieldFilter("userId", "==", user_id)],
            order_by="createdAt",
        )
