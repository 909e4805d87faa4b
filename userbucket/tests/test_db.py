import asyncio
import unittest
from unittest.mock import AsyncMock, MagicMock

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import ServerSelectionTimeoutError

from userbucket.db import InMemoryUserStore, MongoUserStore
from userbucket.errors import StoreError


class InMemoryUserStoreTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryUserStore()

    def test_created_id_is_usable_for_lookup(self):
        created = asyncio.run(self.store.create({"nome": "Ana", "email": "ana@x.com"}))
        fetched = asyncio.run(self.store.find_by_id(created.id))
        self.assertEqual(fetched, created)

    def test_delete_reports_count(self):
        created = asyncio.run(self.store.create({"nome": "Ana"}))
        self.assertEqual(asyncio.run(self.store.delete_by_id(created.id)), 1)
        self.assertEqual(asyncio.run(self.store.delete_by_id(created.id)), 0)

    def test_malformed_id_raises_store_error(self):
        with self.assertRaises(StoreError):
            asyncio.run(self.store.find_by_id("123"))

    def test_reset(self):
        asyncio.run(self.store.create({"nome": "Ana"}))
        self.store.reset()
        self.assertIsNone(asyncio.run(self.store.probe()))


class MongoUserStoreTests(unittest.TestCase):
    def setUp(self):
        self.store = MongoUserStore("mongodb://localhost:27017/app")
        self.collection = MagicMock()
        self.store._collection = self.collection

    def test_malformed_id_fails_before_touching_the_server(self):
        store = MongoUserStore("mongodb://localhost:27017/app")
        with self.assertRaises(StoreError):
            asyncio.run(store.find_by_id("not-an-id"))
        self.assertIsNone(store._client)

    def test_create_returns_assigned_id(self):
        oid = ObjectId()
        self.collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=oid))
        record = asyncio.run(self.store.create({"nome": "Ana", "extra": 1}))
        self.assertEqual(record.id, str(oid))
        self.collection.insert_one.assert_awaited_once_with(
            {"nome": "Ana", "_id": oid}
        )

    def test_update_sets_only_supplied_fields(self):
        oid = ObjectId()
        self.collection.find_one_and_update = AsyncMock(
            return_value={"_id": oid, "nome": "Ana", "email": "new@x.com"}
        )
        record = asyncio.run(self.store.update_by_id(str(oid), {"email": "new@x.com"}))
        self.assertEqual(record.email, "new@x.com")
        self.collection.find_one_and_update.assert_awaited_once_with(
            {"_id": oid},
            {"$set": {"email": "new@x.com"}},
            return_document=ReturnDocument.AFTER,
        )

    def test_update_with_empty_body_reads_the_document(self):
        oid = ObjectId()
        self.collection.find_one = AsyncMock(return_value=None)
        self.collection.find_one_and_update = AsyncMock()
        self.assertIsNone(asyncio.run(self.store.update_by_id(str(oid), {})))
        self.collection.find_one_and_update.assert_not_awaited()

    def test_delete_returns_deleted_count(self):
        self.collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=0))
        self.assertEqual(asyncio.run(self.store.delete_by_id(str(ObjectId()))), 0)

    def test_driver_errors_become_store_errors(self):
        self.collection.find_one = AsyncMock(
            side_effect=ServerSelectionTimeoutError("no servers")
        )
        with self.assertRaises(StoreError) as ctx:
            asyncio.run(self.store.probe())
        self.assertIsInstance(ctx.exception.__cause__, ServerSelectionTimeoutError)

    def test_connect_logs_failure_without_raising(self):
        self.store._client = MagicMock()
        self.store._client.admin.command = AsyncMock(
            side_effect=ServerSelectionTimeoutError("no servers")
        )
        with self.assertLogs("userbucket.events", level="ERROR") as logs:
            asyncio.run(self.store.connect())
        self.assertIn("Erro ao conectar MongoDB", "\n".join(logs.output))


if __name__ == "__main__":
    unittest.main()
