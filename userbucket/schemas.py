"""
Pydantic schemas for the request and response bodies.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    # Unknown keys are dropped; numbers are stored as text.
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    nome: Optional[str] = None
    email: Optional[str] = None


class UserUpdate(UserCreate):
    """Partial update: only the fields present in the body are written."""


class UserResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    mongo_id: str = Field(alias="_id")
    id: str
    nome: Optional[str] = None
    email: Optional[str] = None


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str


class BucketDescriptor(BaseModel):
    Name: str
    CreationDate: Optional[datetime] = None


class ObjectDescriptor(BaseModel):
    Key: str
    LastModified: Optional[datetime] = None
    ETag: Optional[str] = None
    Size: Optional[int] = None
    StorageClass: Optional[str] = None


class UploadResult(BaseModel):
    Location: Optional[str] = None
    ETag: Optional[str] = None
    Bucket: str
    Key: str


class UploadResponse(BaseModel):
    message: str
    data: UploadResult
