from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .page import PageStatus


class PostCreate(BaseModel):
    tenant_id: UUID | None = None
    title: str = Field(min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255)
    status: PageStatus = "draft"
    excerpt: dict[str, Any] | None = None
    content: dict[str, Any] | None = None
    published_at: datetime | None = None


class PostUpdate(BaseModel):
    tenant_id: UUID | None = None
    title: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255)
    status: PageStatus | None = None
    excerpt: dict[str, Any] | None = None
    content: dict[str, Any] | None = None
    published_at: datetime | None = None


class PostRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID
    title: str
    slug: str
    status: str
    excerpt: dict[str, Any] | None
    content: dict[str, Any] | None
    published_at: datetime | None
    created_at: datetime
    updated_at: datetime
