from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Literal

from ..errors import NotFoundError
from . import policies
from .policies import AccessArgs
from .where import AccessResult

Operation = Literal["read", "create", "update", "delete"]
Policy = Callable[[AccessArgs], Awaitable[AccessResult]]


@dataclass(frozen=True)
class CollectionAccess:
    read: Policy
    create: Policy
    update: Policy
    delete: Policy

    def policy_for(self, operation: Operation) -> Policy:
        return getattr(self, operation)


_TENANT_OWNED = CollectionAccess(
    read=policies.tenant_scoped_read,
    create=policies.tenant_admin_mutation,
    update=policies.tenant_admin_mutation,
    delete=policies.tenant_admin_mutation,
)

COLLECTION_ACCESS: dict[str, CollectionAccess] = {
    "pages": _TENANT_OWNED,
    "posts": _TENANT_OWNED,
    "media": _TENANT_OWNED,
    "page-types": CollectionAccess(
        read=policies.page_type_read,
        create=policies.tenant_admin_mutation,
        update=policies.tenant_admin_mutation,
        delete=policies.tenant_admin_mutation,
    ),
    "tenants": CollectionAccess(
        read=policies.tenant_read,
        create=policies.tenant_create,
        update=policies.tenant_update_delete,
        delete=policies.tenant_update_delete,
    ),
    "users": CollectionAccess(
        read=policies.user_read,
        create=policies.user_create,
        update=policies.user_update,
        delete=policies.user_delete,
    ),
}

TENANT_OWNED_COLLECTIONS = frozenset({"pages", "posts", "media", "page-types"})


def get_collection_access(collection: str) -> CollectionAccess:
    access = COLLECTION_ACCESS.get(collection)
    if access is None:
        raise NotFoundError(f"Unknown collection '{collection}'")
    return access
