from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class MembershipIn(BaseModel):
    tenant_id: UUID
    roles: list[str] = Field(default_factory=list)


class MembershipRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tenant_id: UUID
    roles: list[str] | None


class UserCreate(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=8, max_length=128)
    roles: list[str] | None = None
    tenants: list[MembershipIn] = Field(default_factory=list)


class UserUpdate(BaseModel):
    email: str | None = Field(default=None, min_length=3, max_length=255)
    password: str | None = Field(default=None, min_length=8, max_length=128)
    roles: list[str] | None = None
    tenants: list[MembershipIn] | None = None


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    roles: list[str] | None
    tenants: list[MembershipRead]
    created_at: datetime
    updated_at: datetime
