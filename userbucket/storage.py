"""
Object storage abstraction for S3 (or S3-compatible services) and in-memory testing.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Protocol
from urllib.parse import quote

import anyio
import boto3
from botocore.exceptions import BotoCoreError, ClientError

from userbucket.errors import StoreError

STORAGE_FAILURE = "Falha no armazenamento de objetos."
DEFAULT_CONTENT_TYPE = "application/octet-stream"


class StorageClient(Protocol):
    """Defines the operations the API needs from object storage."""

    async def list_buckets(self) -> list[dict]:
        ...

    async def list_objects(self, bucket: str) -> list[dict]:
        ...

    async def put_object(
        self, bucket: str, key: str, body: bytes, content_type: str
    ) -> dict:
        ...

    async def delete_object(self, bucket: str, key: str) -> None:
        ...

    async def close(self) -> None:
        ...


async def _run_sync(fn, *args, **kwargs):
    return await anyio.to_thread.run_sync(lambda: fn(*args, **kwargs))


def _etag(body: bytes) -> str:
    return f'"{hashlib.md5(body).hexdigest()}"'


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    base_url: str = "https://example.test/storage"
    buckets: dict = None

    def __post_init__(self):
        if self.buckets is None:
            self.buckets = {}
        self.created_at: dict[str, datetime] = {
            name: datetime.now(timezone.utc) for name in self.buckets
        }

    def create_bucket(self, name: str) -> None:
        self.buckets.setdefault(name, {})
        self.created_at.setdefault(name, datetime.now(timezone.utc))

    def _bucket(self, name: str) -> dict:
        try:
            return self.buckets[name]
        except KeyError as exc:
            raise StoreError(STORAGE_FAILURE) from exc

    async def list_buckets(self) -> list[dict]:
        return [
            {"Name": name, "CreationDate": self.created_at[name]}
            for name in self.buckets
        ]

    async def list_objects(self, bucket: str) -> list[dict]:
        return [
            {
                "Key": key,
                "LastModified": obj["LastModified"],
                "ETag": obj["ETag"],
                "Size": len(obj["Body"]),
                "StorageClass": "STANDARD",
            }
            for key, obj in sorted(self._bucket(bucket).items())
        ]

    async def put_object(
        self, bucket: str, key: str, body: bytes, content_type: str
    ) -> dict:
        objects = self._bucket(bucket)
        objects[key] = {
            "Body": body,
            "ContentType": content_type,
            "ETag": _etag(body),
            "LastModified": datetime.now(timezone.utc),
        }
        return {
            "Location": f"{self.base_url}/{bucket}/{quote(key)}",
            "ETag": objects[key]["ETag"],
            "Bucket": bucket,
            "Key": key,
        }

    async def delete_object(self, bucket: str, key: str) -> None:
        self._bucket(bucket).pop(key, None)

    async def close(self) -> None:
        return None


@dataclass
class S3StorageClient:
    """
    boto3-backed storage client.

    boto3 is blocking, so every call is pushed to a worker thread to keep
    the event loop serving other requests.
    """

    region: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    endpoint_url: Optional[str] = None

    def __post_init__(self):
        self._client = boto3.client(
            "s3",
            region_name=self.region,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            endpoint_url=self.endpoint_url,
        )

    async def _call(self, method: str, **params) -> dict:
        try:
            return await _run_sync(getattr(self._client, method), **params)
        except (BotoCoreError, ClientError) as exc:
            raise StoreError(STORAGE_FAILURE) from exc

    async def list_buckets(self) -> list[dict]:
        response = await self._call("list_buckets")
        return response.get("Buckets", [])

    async def list_objects(self, bucket: str) -> list[dict]:
        # Only the first page (up to 1000 keys) is returned.
        response = await self._call("list_objects_v2", Bucket=bucket)
        return response.get("Contents", [])

    async def put_object(
        self, bucket: str, key: str, body: bytes, content_type: str
    ) -> dict:
        response = await self._call(
            "put_object",
            Bucket=bucket,
            Key=key,
            Body=body,
            ContentType=content_type or DEFAULT_CONTENT_TYPE,
        )
        endpoint = self._client.meta.endpoint_url.rstrip("/")
        return {
            "Location": f"{endpoint}/{bucket}/{quote(key)}",
            "ETag": response.get("ETag"),
            "Bucket": bucket,
            "Key": key,
        }

    async def delete_object(self, bucket: str, key: str) -> None:
        await self._call("delete_object", Bucket=bucket, Key=key)

    async def close(self) -> None:
        await _run_sync(self._client.close)
