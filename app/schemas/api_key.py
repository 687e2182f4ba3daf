"""Pydantic schemas for API key endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class APIKeyCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    expiry_days: int | None = Field(default=None, ge=1, le=3650)


class APIKeyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    key_prefix: str
    expires_at: datetime | None
    is_revoked: bool
    created_at: datetime


class APIKeyCreateResponse(BaseModel):
    """Creation response. ``key`` is the only time the raw key is ever returned."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    key: str
    key_prefix: str
    expires_at: datetime | None
    created_at: datetime


class ExternalProfileResponse(BaseModel):
    user_id: int
    email: str
    language: str | None
