"""
FastAPI application entry point.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from userbucket.config import Settings, get_settings
from userbucket.db import UserStore
from userbucket.dependencies import build_storage_client, build_user_store
from userbucket.errors import register_exception_handlers
from userbucket.logger import configure_logging
from userbucket.routes import OPENAPI_TAGS, router
from userbucket.storage import StorageClient


@asynccontextmanager
async def lifespan(app: FastAPI):
    # connect() logs a failure instead of raising; requests fail one by one.
    await app.state.user_store.connect()
    try:
        yield
    finally:
        await app.state.user_store.close()
        await app.state.storage_client.close()


def create_app(
    settings: Optional[Settings] = None,
    user_store: Optional[UserStore] = None,
    storage_client: Optional[StorageClient] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Userbucket API",
        version="0.1.0",
        description="CRUD de usuários no MongoDB e operações com buckets S3.",
        openapi_tags=OPENAPI_TAGS,
        docs_url=settings.docs_url,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.user_store = (
        user_store if user_store is not None else build_user_store(settings)
    )
    app.state.storage_client = (
        storage_client
        if storage_client is not None
        else build_storage_client(settings)
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(router)
    return app
