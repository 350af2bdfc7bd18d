from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

PageStatus = Literal["draft", "published"]


class PageCreate(BaseModel):
    tenant_id: UUID | None = None
    page_type_id: UUID
    title: str = Field(min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255)
    status: PageStatus = "draft"
    summary: dict[str, Any] | None = None
    content: dict[str, Any] | None = None


class PageUpdate(BaseModel):
    tenant_id: UUID | None = None
    page_type_id: UUID | None = None
    title: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255)
    status: PageStatus | None = None
    summary: dict[str, Any] | None = None
    content: dict[str, Any] | None = None


class PageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID
    page_type_id: UUID
    title: str
    slug: str
    status: str
    summary: dict[str, Any] | None
    content: dict[str, Any] | None
    created_at: datetime
    updated_at: datetime
