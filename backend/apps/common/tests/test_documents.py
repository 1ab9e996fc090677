import unittest

from apps.common.documents import FirestoreDocumentStore
from apps.common.protocols import DocumentSnapshot, FieldFilter


class StubSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data
        self.exists = data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class StubDocumentRef:
    def __init__(self, collection, doc_id):
        self.collection = collection
        self.doc_id = doc_id

    async def get(self):
        return StubSnapshot(self.doc_id, self.collection.docs.get(self.doc_id))

    async def set(self, data):
        self.collection.docs[self.doc_id] = dict(data)


class StubQuery:
    def __init__(self, collection, filters=(), order_by=None):
        self.collection = collection
        self.filters = list(filters)
        self.order_field = order_by

    def where(self, *, filter):
        return StubQuery(self.collection, self.filters + [filter], self.order_field)

    def order_by(self, field_path):
        return StubQuery(self.collection, self.filters, field_path)

    async def stream(self):
        self.collection.client.executed.append(self)
        for doc_id, data in self.collection.docs.items():
            yield StubSnapshot(doc_id, data)


class StubCollection(StubQuery):
    def __init__(self, client, name):
        self.client = client
        self.name = name
        self.docs = client.data.setdefault(name, {})
        super().__init__(self)

    def document(self, doc_id):
        return StubDocumentRef(self, doc_id)


class StubFirestoreClient:
    def __init__(self, data=None):
        self.data = data or {}
        self.executed = []

    def collection(self, name):
        return StubCollection(self, name)


class FirestoreDocumentStoreTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.client = StubFirestoreClient(
            {"Products": {"p1": {"name": "Rotor", "category": "brakes"}}}
        )
        self.store = FirestoreDocumentStore(client=self.client)

    async def test_get_document_returns_snapshot(self):
        snapshot = await self.store.get_document("Products", "p1")
        self.assertEqual(snapshot, DocumentSnapshot("p1", {"name": "Rotor", "category": "brakes"}))

    async def test_get_document_missing_returns_none(self):
        self.assertIsNone(await self.store.get_document("Products", "nope"))

    async def test_set_document_writes_data(self):
        await self.store.set_document("Users", "uid-1", {"role": "mechanic"})
        self.assertEqual(self.client.data["Users"]["uid-1"], {"role": "mechanic"})

    async def test_query_collection_applies_filters_and_order(self):
        results = await self.store.query_collection(
            "Products", filters=[FieldFilter("category", "==", "brakes")], order_by="name"
        )
        self.assertEqual([r.id for r in results], ["p1"])
        query = self.client.executed[-1]
        self.assertEqual(query.order_field, "name")
        (native,) = query.filters
        self.assertEqual(native.field_path, "category")
        self.assertEqual(native.op_string, "==")
        self.assertEqual(native.value, "brakes")

    async def test_query_collection_without_filters(self):
        await self.store.query_collection("Products")
        query = self.client.executed[-1]
        self.assertEqual(query.filters, [])
        self.assertIsNone(query.order_field)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
