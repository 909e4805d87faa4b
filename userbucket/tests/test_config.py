import os
import unittest
from unittest.mock import patch

from userbucket.config import Settings
from userbucket.db import InMemoryUserStore, MongoUserStore
from userbucket.dependencies import build_storage_client, build_user_store
from userbucket.storage import InMemoryStorageClient, S3StorageClient


class SettingsTests(unittest.TestCase):
    @patch.dict(
        os.environ,
        {
            "MONGO_URI": "mongodb://db.internal:27017/app",
            "REGION": "sa-east-1",
            "ACCESS_KEY_ID": "AKIAEXAMPLE",
            "SECRET_ACCESS_KEY": "secret",
        },
        clear=True,
    )
    def test_reads_environment(self):
        settings = Settings(_env_file=None)
        self.assertEqual(settings.mongo_uri, "mongodb://db.internal:27017/app")
        self.assertEqual(settings.region, "sa-east-1")
        self.assertEqual(settings.port, 3000)
        self.assertIsNone(settings.max_upload_bytes)

        self.assertIsInstance(build_user_store(settings), MongoUserStore)
        storage = build_storage_client(settings)
        self.assertIsInstance(storage, S3StorageClient)
        self.assertEqual(storage.region, "sa-east-1")

    @patch.dict(os.environ, {}, clear=True)
    def test_missing_mongo_uri_falls_back_to_memory(self):
        settings = Settings(_env_file=None)
        with self.assertLogs("userbucket.dependencies", level="WARNING"):
            store = build_user_store(settings)
        self.assertIsInstance(store, InMemoryUserStore)

    def test_in_memory_toggle(self):
        settings = Settings(_env_file=None, use_in_memory_backends=True)
        self.assertIsInstance(build_user_store(settings), InMemoryUserStore)
        self.assertIsInstance(build_storage_client(settings), InMemoryStorageClient)


if __name__ == "__main__":
    unittest.main()
