"""
Dependency wiring for the FastAPI app.

Clients are built once by ``create_app`` and kept on ``app.state``; the
getters below hand them to the route handlers, so tests can inject
doubles by passing them to ``create_app``.
"""

from __future__ import annotations

import logging

from fastapi import Request

from userbucket.config import Settings
from userbucket.db import InMemoryUserStore, MongoUserStore, UserStore
from userbucket.storage import InMemoryStorageClient, S3StorageClient, StorageClient

logger = logging.getLogger(__name__)


def build_user_store(settings: Settings) -> UserStore:
    if settings.use_in_memory_backends:
        return InMemoryUserStore()
    if not settings.mongo_uri:
        logger.warning("MONGO_URI not set; using the in-memory user store")
        return InMemoryUserStore()
    return MongoUserStore(
        settings.mongo_uri,
        database=settings.mongo_database,
        collection=settings.mongo_collection,
    )


def build_storage_client(settings: Settings) -> StorageClient:
    if settings.use_in_memory_backends:
        return InMemoryStorageClient()
    return S3StorageClient(
        region=settings.region,
        access_key_id=settings.access_key_id,
        secret_access_key=settings.secret_access_key,
        endpoint_url=settings.s3_endpoint_url,
    )


def get_settings_from_app(request: Request) -> Settings:
    return request.app.state.settings


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store


def get_storage_client(request: Request) -> StorageClient:
    return request.app.state.storage_client
