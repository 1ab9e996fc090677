from typing import Any, Dict, Optional

from django.conf import settings

from apps.common.protocols import DocumentSnapshot, DocumentStoreProtocol


class UserProfileRepository:
    """Profile documents keyed by the identity provider's uid."""

    def __init__(self, documents: DocumentStoreProtocol, collection: Optional[str] = None):
        self.documents = documents
        self.collection = collection or settings.USERS_COLLECTION

    async def get(self, uid: str) -> Optional[DocumentSnapshot]:
        return await self.documents.get_document(self.collection, uid)

    async def create(self, uid: str, data: Dict[str, Any]) -> None:
        await self.documents.set_document(self.collection, uid, data)
