import unittest
from decimal import Decimal

from apps.catalog.repositories import ProductRepository
from apps.catalog.services import CatalogService
from apps.common.protocols import DocumentSnapshot


class FakeDocumentStore:
    def __init__(self, collections=None):
        self.collections = {name: dict(docs) for name, docs in (collections or {}).items()}
        self.queries = []
        self.error = None

    async def get_document(self, collection, document_id):
        if self.error:
            raise self.error
        data = self.collections.get(collection, {}).get(document_id)
        return DocumentSnapshot(document_id, dict(data)) if data is not None else None

    async def set_document(self, collection, document_id, data):
        self.collections.setdefault(collection, {})[document_id] = dict(data)

    async def query_collection(self, collection, filters=(), order_by=None):
        if self.error:
            raise self.error
        self.queries.append((collection, list(filters), order_by))
        docs = [
            DocumentSnapshot(doc_id, dict(data))
            for doc_id, data in self.collections.get(collection, {}).items()
        ]
        for flt in filters:
            assert flt.op == "=="
            docs = [d for d in docs if d.data.get(flt.field_path) == flt.value]
        if order_by:
            docs.sort(key=lambda d: d.data.get(order_by))
        return docs


PRODUCTS = {
    "p-rotor": {"name": "Rotor", "price": 45.5, "stock": 2, "category": "brakes"},
    "p-filter": {"name": "Air filter", "price": 12, "stock": 0, "category": "filters"},
    "p-pad": {"name": "Brake pad", "price": 9.99, "stock": 8, "category": "brakes",
              "imageURL": "pad.png", "createdAt": "2024-01-01T00:00:00Z"},
    "p-misc": {"name": "Zip ties", "price": 1, "stock": 50},
}


class CatalogServiceTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.documents = FakeDocumentStore({"Products": PRODUCTS})
        self.service = CatalogService(products=ProductRepository(self.documents, "Products"))

    async def test_list_products_orders_by_name(self):
        products = await self.service.list_products()
        self.assertEqual(
            [p.name for p in products], ["Air filter", "Brake pad", "Rotor", "Zip ties"]
        )
        self.assertEqual(self.documents.queries[-1], ("Products", [], "name"))

    async def test_list_products_filters_by_exact_category(self):
        products = await self.service.list_products(category="brakes")
        self.assertEqual([p.id for p in products], ["p-pad", "p-rotor"])
        _, filters, order_by = self.documents.queries[-1]
        self.assertEqual([(f.field_path, f.op, f.value) for f in filters], [("category", "==", "brakes")])
        self.assertEqual(order_by, "name")
        self.assertEqual(await self.service.list_products(category="Brakes"), [])

    async def test_get_product_maps_document(self):
        product = await self.service.get_product("p-pad")
        self.assertEqual(product.id, "p-pad")
        self.assertEqual(product.price, Decimal("9.99"))
        self.assertEqual(product.image_url, "pad.png")
        self.assertEqual(product.created_at, "2024-01-01T00:00:00Z")
        self.assertTrue(product.in_stock)

    async def test_get_product_returns_none_when_absent(self):
        self.assertIsNone(await self.service.get_product("missing"))

    async def test_list_categories_sorted_and_distinct(self):
        self.assertEqual(await self.service.list_categories(), ["brakes", "filters"])
        self.assertEqual(self.documents.queries[-1], ("Products", [], None))

    async def test_store_errors_are_logged_and_reraised(self):
        error = RuntimeError("firestore unavailable")
        self.documents.error = error
        with self.assertLogs("apps.catalog.services", level="ERROR"):
            with self.assertRaises(RuntimeError) as ctx:
                await self.service.list_products()
        self.assertIs(ctx.exception, error)
        with self.assertLogs("apps.catalog.services", level="ERROR"):
            with self.assertRaises(RuntimeError):
                await self.service.get_product("p-pad")
        with self.assertLogs("apps.catalog.services", level="ERROR"):
            with self.assertRaises(RuntimeError):
                await self.service.list_categories()


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
