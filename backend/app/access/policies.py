"""
Access policy engine.

Every policy is an async callable taking ``AccessArgs`` and returning an
``AccessResult``: ``True`` (allow), ``False`` (deny) or a ``Where`` filter the
query layer must conjoin with the caller's own filter. Policies never raise
for a denial; the caller checks the result before touching the store.

Tenant scoping rules:
- Anonymous reads are scoped to the tenant named by the public header and are
  denied when it cannot be resolved.
- ``super-admin`` is allowed everywhere.
- Other users are scoped to their memberships; mutations additionally need
  the ``tenant-admin`` role on the tenant concerned.
- Update and delete by id always return a membership filter, so a record in
  another tenant is reported as not found rather than forbidden.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..auth.identity import get_user_tenant_ids, is_super_admin
from ..auth.roles_contract import TENANT_ADMIN
from ..tenancy.resolver import TenantResolver
from ..utils.references import Id, contains_id, extract_id, same_id
from .context import AccessContext
from .where import AccessResult, equals, in_, or_

logger = logging.getLogger("tenantcms.access")


@dataclass(frozen=True)
class AccessArgs:
    ctx: AccessContext
    resolver: TenantResolver
    id: Any = None
    data: Mapping[str, Any] | None = None


def declared_tenant(data: Mapping[str, Any] | None) -> Id | None:
    """Tenant named by a write payload, whether as ``tenant_id`` or an expanded ``tenant``."""
    if not data:
        return None
    tenant_id = extract_id(data.get("tenant_id"))
    if tenant_id is None:
        tenant_id = extract_id(data.get("tenant"))
    return tenant_id


def _membership_scope(args: AccessArgs, field: str) -> AccessResult:
    tenant_ids = args.resolver.admin_scope(args.ctx.user, args.ctx.cookies)
    if not tenant_ids:
        return False
    return in_(field, tenant_ids)


async def tenant_scoped_read(args: AccessArgs) -> AccessResult:
    """Read access for pages, posts and media."""
    user = args.ctx.user
    if user is None:
        tenant = await args.resolver.resolve_public(args.ctx.headers)
        if tenant is None:
            return False
        if not tenant.allow_public_read:
            logger.info("public_read_denied reason=tenant_not_public tenant=%s", tenant.slug)
            return False
        return equals("tenant_id", tenant.id)

    if is_super_admin(user):
        return True

    return _membership_scope(args, "tenant_id")


async def tenant_admin_mutation(args: AccessArgs) -> AccessResult:
    """Create, update and delete access for tenant-owned documents."""
    user = args.ctx.user
    if user is None:
        return False
    if is_super_admin(user):
        return True

    admin_tenant_ids = get_user_tenant_ids(user, TENANT_ADMIN)
    if not admin_tenant_ids:
        return False

    if args.id is not None:
        return in_("tenant_id", admin_tenant_ids)

    tenant_id = declared_tenant(args.data)
    if tenant_id is None:
        # Assigned before the write from the request context or memberships
        return True
    return contains_id(admin_tenant_ids, tenant_id)


async def page_type_read(args: AccessArgs) -> AccessResult:
    """Page types are admin-facing schema; the public path never sees them."""
    user = args.ctx.user
    if user is None:
        return False
    if is_super_admin(user):
        return True
    return _membership_scope(args, "tenant_id")


async def tenant_read(args: AccessArgs) -> AccessResult:
    user = args.ctx.user
    if user is None:
        return equals("allow_public_read", True)
    if is_super_admin(user):
        return True

    # The full membership list, so the admin UI can offer every tenant
    tenant_ids = get_user_tenant_ids(user)
    if not tenant_ids:
        return False
    return in_("id", tenant_ids)


async def tenant_create(args: AccessArgs) -> AccessResult:
    return is_super_admin(args.ctx.user)


async def tenant_update_delete(args: AccessArgs) -> AccessResult:
    user = args.ctx.user
    if user is None:
        return False
    if is_super_admin(user):
        return True

    admin_tenant_ids = get_user_tenant_ids(user, TENANT_ADMIN)
    if not admin_tenant_ids:
        return False
    return in_("id", admin_tenant_ids)


async def user_read(args: AccessArgs) -> AccessResult:
    user = args.ctx.user
    if user is None:
        return False
    if is_super_admin(user):
        return True
    if args.id is not None and same_id(args.id, user):
        return True

    admin_tenant_ids = get_user_tenant_ids(user, TENANT_ADMIN)
    selected = args.resolver.selected_tenant(user, args.ctx.cookies)
    if selected is not None and contains_id(admin_tenant_ids, selected):
        return equals("tenants.tenant_id", selected)

    if not admin_tenant_ids:
        return equals("id", extract_id(user))
    return or_(
        equals("id", extract_id(user)),
        in_("tenants.tenant_id", admin_tenant_ids),
    )


async def user_create(args: AccessArgs) -> AccessResult:
    """Membership grants are checked separately before the write."""
    user = args.ctx.user
    if user is None:
        return False
    if is_super_admin(user):
        return True
    return bool(get_user_tenant_ids(user, TENANT_ADMIN))


async def user_update(args: AccessArgs) -> AccessResult:
    user = args.ctx.user
    if user is None:
        return False
    if is_super_admin(user):
        return True

    admin_tenant_ids = get_user_tenant_ids(user, TENANT_ADMIN)
    if not admin_tenant_ids:
        return equals("id", extract_id(user))
    return or_(
        equals("id", extract_id(user)),
        in_("tenants.tenant_id", admin_tenant_ids),
    )


async def user_delete(args: AccessArgs) -> AccessResult:
    user = args.ctx.user
    if user is None:
        return False
    if is_super_admin(user):
        return True

    admin_tenant_ids = get_user_tenant_ids(user, TENANT_ADMIN)
    if not admin_tenant_ids:
        return False
    return in_("tenants.tenant_id", admin_tenant_ids)
