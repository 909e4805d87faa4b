"""
Document store abstraction for MongoDB and an in-memory test implementation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import AsyncMongoClient, ReturnDocument
from pymongo.errors import PyMongoError

from userbucket.errors import StoreError
from userbucket.logger import log_error, log_info

USER_FIELDS = ("nome", "email")
DB_FAILURE = "Falha no banco de dados."


class UserStore(Protocol):
    """Interface for user document access."""

    async def connect(self) -> None:
        ...

    async def close(self) -> None:
        ...

    async def create(self, fields: dict) -> "UserRecord":
        ...

    async def find_all(self) -> list["UserRecord"]:
        ...

    async def find_by_id(self, user_id: str) -> Optional["UserRecord"]:
        ...

    async def update_by_id(self, user_id: str, fields: dict) -> Optional["UserRecord"]:
        ...

    async def delete_by_id(self, user_id: str) -> int:
        ...

    async def probe(self) -> Optional["UserRecord"]:
        ...


@dataclass
class UserRecord:
    id: str
    nome: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "UserRecord":
        return cls(id=str(doc["_id"]), nome=doc.get("nome"), email=doc.get("email"))

    def as_dict(self) -> dict:
        return {
            "_id": self.id,
            "id": self.id,
            "nome": self.nome,
            "email": self.email,
        }


def _object_id(user_id: str) -> ObjectId:
    try:
        return ObjectId(user_id)
    except (InvalidId, TypeError) as exc:
        raise StoreError(f"Identificador inválido: {user_id!r}") from exc


def _known_fields(fields: dict) -> dict:
    return {key: fields[key] for key in USER_FIELDS if key in fields}


class InMemoryUserStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.documents: Dict[ObjectId, dict] = {}

    async def connect(self) -> None:
        log_info("MongoDB em memória pronto")

    async def close(self) -> None:
        return None

    async def create(self, fields: dict) -> UserRecord:
        doc = {"_id": ObjectId(), **_known_fields(fields)}
        self.documents[doc["_id"]] = doc
        return UserRecord.from_document(doc)

    async def find_all(self) -> list[UserRecord]:
        return [UserRecord.from_document(doc) for doc in self.documents.values()]

    async def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        doc = self.documents.get(_object_id(user_id))
        return UserRecord.from_document(doc) if doc else None

    async def update_by_id(self, user_id: str, fields: dict) -> Optional[UserRecord]:
        doc = self.documents.get(_object_id(user_id))
        if doc is None:
            return None
        doc.update(_known_fields(fields))
        return UserRecord.from_document(doc)

    async def delete_by_id(self, user_id: str) -> int:
        removed = self.documents.pop(_object_id(user_id), None)
        return 0 if removed is None else 1

    async def probe(self) -> Optional[UserRecord]:
        for doc in self.documents.values():
            return UserRecord.from_document(doc)
        return None

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.documents.clear()


class MongoUserStore:
    """
    MongoDB-backed store using pymongo's asyncio client.

    The client is created on first use so a bad URI or an unreachable
    server surfaces as a per-request ``StoreError`` instead of stopping
    the process at import or startup.
    """

    def __init__(
        self,
        uri: str,
        database: Optional[str] = None,
        collection: str = "usuarios",
    ):
        self.uri = uri
        self.database = database
        self.collection_name = collection
        self._client: Optional[AsyncMongoClient] = None
        self._collection = None

    def _get_collection(self):
        if self._collection is not None:
            return self._collection
        try:
            self._client = AsyncMongoClient(self.uri)
            if self.database:
                db = self._client[self.database]
            else:
                db = self._client.get_default_database(default="test")
        except PyMongoError as exc:
            raise StoreError(DB_FAILURE) from exc
        self._collection = db[self.collection_name]
        return self._collection

    async def connect(self) -> None:
        """Ping the server once; failures are logged, never raised."""
        try:
            self._get_collection()
            await self._client.admin.command("ping")
        except (PyMongoError, StoreError) as exc:
            log_error("Erro ao conectar MongoDB", None, exc.__cause__ or exc)
            return
        log_info("MongoDB conectado")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
            self._collection = None

    async def create(self, fields: dict) -> UserRecord:
        doc = _known_fields(fields)
        collection = self._get_collection()
        try:
            result = await collection.insert_one(doc)
        except PyMongoError as exc:
            raise StoreError(DB_FAILURE) from exc
        doc["_id"] = result.inserted_id
        return UserRecord.from_document(doc)

    async def find_all(self) -> list[UserRecord]:
        collection = self._get_collection()
        try:
            return [UserRecord.from_document(doc) async for doc in collection.find()]
        except PyMongoError as exc:
            raise StoreError(DB_FAILURE) from exc

    async def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        oid = _object_id(user_id)
        collection = self._get_collection()
        try:
            doc = await collection.find_one({"_id": oid})
        except PyMongoError as exc:
            raise StoreError(DB_FAILURE) from exc
        return UserRecord.from_document(doc) if doc else None

    async def update_by_id(self, user_id: str, fields: dict) -> Optional[UserRecord]:
        oid = _object_id(user_id)
        changes = _known_fields(fields)
        collection = self._get_collection()
        try:
            if not changes:
                # MongoDB rejects an empty $set.
                doc = await collection.find_one({"_id": oid})
            else:
                doc = await collection.find_one_and_update(
                    {"_id": oid},
                    {"$set": changes},
                    return_document=ReturnDocument.AFTER,
                )
        except PyMongoError as exc:
            raise StoreError(DB_FAILURE) from exc
        return UserRecord.from_document(doc) if doc else None

    async def delete_by_id(self, user_id: str) -> int:
        oid = _object_id(user_id)
        collection = self._get_collection()
        try:
            result = await collection.delete_one({"_id": oid})
        except PyMongoError as exc:
            raise StoreError(DB_FAILURE) from exc
        return result.deleted_count

    async def probe(self) -> Optional[UserRecord]:
        collection = self._get_collection()
        try:
            doc = await collection.find_one()
        except PyMongoError as exc:
            raise StoreError(DB_FAILURE) from exc
        return UserRecord.from_document(doc) if doc else None
