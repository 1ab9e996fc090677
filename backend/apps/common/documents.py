from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from firebase_admin import firestore_async
from google.cloud.firestore_v1.base_query import FieldFilter as FirestoreFieldFilter

from apps.common import get_logger
from .firebase import get_firebase_app
from .protocols import DocumentSnapshot, FieldFilter

logger = get_logger(__name__).bind(component="common", layer="documents")


class FirestoreDocumentStore:
    """Document store adapter over the async Firestore client.

    Every call is attempted once; client errors propagate to the caller.
    """

    def __init__(self, client: Any = None):
        self._client = client
        self.logger = logger.bind(store="FirestoreDocumentStore")

    @property
    def client(self):
        if self._client is None:
            self._client = firestore_async.client(get_firebase_app())
        return self._client

    async def get_document(
        self, collection: str, document_id: str
    ) -> Optional[DocumentSnapshot]:
        self.logger.debug("Fetching document", collection=collection, document_id=document_id)
        snapshot = await self.client.collection(collection).document(document_id).get()
        if not snapshot.exists:
            return None
        return DocumentSnapshot(id=snapshot.id, data=snapshot.to_dict() or {})

    async def set_document(
        self, collection: str, document_id: str, data: Dict[str, Any]
    ) -> None:
        self.logger.debug("Writing document", collection=collection, document_id=document_id)
        await self.client.collection(collection).document(document_id).set(data)

    async def query_collection(
        self,
        collection: str,
        filters: Sequence[FieldFilter] = (),
        order_by: Optional[str] = None,
    ) -> List[DocumentSnapshot]:
        self.logger.debug(
            "Querying collection",
            collection=collection,
            filters=[(f.field_path, f.op, f.value) for f in filters],
            order_by=order_by,
        )
        query = self.client.collection(collection)
        for flt in filters:
            query = query.where(filter=FirestoreFieldFilter(flt.field_path, flt.op, flt.value))
        if order_by:
            query = query.order_by(order_by)
        return [
            DocumentSnapshot(id=snapshot.id, data=snapshot.to_dict() or {})
            async for snapshot in query.stream()
        ]
