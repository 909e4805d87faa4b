"""
Configuration and settings for the service.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # HTTP server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)
    docs_url: str = Field(default="/api-docs")
    log_level: str = Field(default="INFO")

    # Document store (MongoDB)
    mongo_uri: Optional[str] = Field(default=None)
    mongo_database: Optional[str] = Field(default=None)
    mongo_collection: str = Field(default="usuarios")

    # Object store (S3 or S3-compatible)
    region: Optional[str] = Field(default=None)
    access_key_id: Optional[str] = Field(default=None)
    secret_access_key: Optional[str] = Field(default=None)
    s3_endpoint_url: Optional[str] = Field(default=None)

    # Uploads are buffered in memory; None means no limit.
    max_upload_bytes: Optional[int] = Field(default=None, gt=0)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
