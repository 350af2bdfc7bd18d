from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TenantCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=100)
    domain: str | None = Field(default=None, max_length=255)
    allow_public_read: bool = True
    default_locale: Literal["el", "en"] = "el"
    theme: dict[str, Any] | None = None
    settings: dict[str, Any] | None = None
    # Starter content applied after creation
    template: str | None = None


class TenantUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=100)
    domain: str | None = Field(default=None, max_length=255)
    allow_public_read: bool | None = None
    default_locale: Literal["el", "en"] | None = None
    theme: dict[str, Any] | None = None
    settings: dict[str, Any] | None = None


class TenantRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str
    domain: str | None
    allow_public_read: bool
    default_locale: str
    theme: dict[str, Any] | None
    settings: dict[str, Any] | None
    created_at: datetime
    updated_at: datetime
