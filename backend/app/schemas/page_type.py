from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PageTypeCreate(BaseModel):
    tenant_id: UUID | None = None
    name: str = Field(min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255)
    description: str | None = None
    fields: list[dict[str, Any]] | dict[str, Any] | None = None
    is_default: bool = False


class PageTypeUpdate(BaseModel):
    # Accepted but never applied: tenant is fixed at creation
    tenant_id: UUID | None = None
    name: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255)
    description: str | None = None
    fields: list[dict[str, Any]] | dict[str, Any] | None = None
    is_default: bool | None = None


class PageTypeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID
    name: str
    slug: str
    description: str | None
    fields: list[dict[str, Any]] | dict[str, Any] | None
    is_default: bool
    created_at: datetime
    updated_at: datetime
