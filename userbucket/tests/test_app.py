import unittest
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError

from userbucket.app import create_app
from userbucket.config import Settings
from userbucket.db import MongoUserStore
from userbucket.storage import InMemoryStorageClient


def unreachable_mongo_store():
    store = MongoUserStore("mongodb://db.internal:27017/app")
    store._client = MagicMock()
    store._client.admin.command = AsyncMock(
        side_effect=ServerSelectionTimeoutError("no servers")
    )
    store._collection = MagicMock()
    store._collection.find = MagicMock(
        side_effect=ServerSelectionTimeoutError("no servers")
    )
    store.close = AsyncMock()
    return store


class AppLifespanTests(unittest.TestCase):
    def test_startup_failure_is_logged_and_server_keeps_answering(self):
        store = unreachable_mongo_store()
        storage = InMemoryStorageClient()
        storage.close = AsyncMock()
        app = create_app(
            Settings(_env_file=None), user_store=store, storage_client=storage
        )

        with self.assertLogs("userbucket.events", level="ERROR") as logs:
            with TestClient(app) as client:
                response = client.get("/usuarios")
                self.assertEqual(response.status_code, 500)
                self.assertEqual(response.json(), {"error": "Erro ao listar usuários."})

        output = "\n".join(logs.output)
        self.assertIn("Erro ao conectar MongoDB", output)
        self.assertIn("GET /usuarios", output)
        store.close.assert_awaited_once()
        storage.close.assert_awaited_once()


if __name__ == "__main__":
    unittest.main()
