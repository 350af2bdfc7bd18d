from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class MediaCreate(BaseModel):
    tenant_id: UUID | None = None
    filename: str = Field(min_length=1, max_length=255)
    alt: str | None = None
    mime_type: str | None = Field(default=None, max_length=100)
    url: str | None = None
    filesize: int | None = Field(default=None, ge=0)


class MediaUpdate(BaseModel):
    tenant_id: UUID | None = None
    filename: str | None = Field(default=None, min_length=1, max_length=255)
    alt: str | None = None
    mime_type: str | None = Field(default=None, max_length=100)
    url: str | None = None
    filesize: int | None = Field(default=None, ge=0)


class MediaRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID
    filename: str
    alt: str | None
    mime_type: str | None
    url: str | None
    filesize: int | None
    created_at: datetime
    updated_at: datetime
