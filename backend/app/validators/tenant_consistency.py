"""
Tenant consistency hooks for tenant-owned documents.

- ``assign_tenant`` keeps the stored tenant on update and fills a missing
  tenant on create.
- ``ensure_page_type_matches_tenant`` requires a page and its page type to
  live in the same tenant.
- ``ensure_tenant_administered`` is the last check: the final tenant must be
  set and, for anyone but a super-admin, be one the actor administers.
"""
from __future__ import annotations

import logging

from ..auth.identity import get_user_tenant_ids, is_super_admin
from ..auth.roles_contract import TENANT_ADMIN
from ..errors import AuthorizationDenied, ValidationError
from ..utils.references import contains_id, extract_id, same_id
from .base import WriteArgs

logger = logging.getLogger("tenantcms.validators.tenant")


async def assign_tenant(args: WriteArgs) -> None:
    data = args.data

    if not args.is_create:
        stored_tenant_id = extract_id(args.original_value("tenant_id"))
        supplied = extract_id(data.get("tenant_id"))
        if supplied is not None and not same_id(supplied, stored_tenant_id):
            logger.warning(
                "tenant_change_ignored collection=%s id=%s actor=%s",
                args.collection,
                extract_id(args.original),
                args.ctx.actor_id,
            )
        data.pop("tenant", None)
        data["tenant_id"] = stored_tenant_id
        return

    tenant_ref = data.pop("tenant", None)
    tenant_id = extract_id(data.get("tenant_id"))
    if tenant_id is None:
        tenant_id = extract_id(tenant_ref)
    if tenant_id is not None:
        data["tenant_id"] = tenant_id
        return

    if args.ctx.context_tenant_id is not None:
        data["tenant_id"] = args.ctx.context_tenant_id
        return

    user = args.ctx.user
    if user is None or is_super_admin(user):
        # Left for the page type or the required-tenant check
        return

    admin_tenant_ids = get_user_tenant_ids(user, TENANT_ADMIN)
    if len(admin_tenant_ids) == 1:
        data["tenant_id"] = admin_tenant_ids[0]
    elif len(admin_tenant_ids) > 1:
        if args.settings.multi_tenant_create_fallback == "reject":
            raise ValidationError(
                "Select the tenant this document belongs to", path="tenant_id"
            )
        data["tenant_id"] = admin_tenant_ids[0]
        logger.info(
            "tenant_assigned_first collection=%s actor=%s tenant=%s candidates=%d",
            args.collection,
            args.ctx.actor_id,
            admin_tenant_ids[0],
            len(admin_tenant_ids),
        )


async def ensure_page_type_matches_tenant(args: WriteArgs) -> None:
    data = args.data
    if not args.is_create and "page_type_id" not in data:
        return

    page_type_id = extract_id(data.get("page_type_id"))
    if page_type_id is None:
        raise ValidationError("A page type is required", path="page_type_id")

    page_type = await args.store.find_by_id("page-types", page_type_id)
    if page_type is None:
        raise ValidationError("Selected page type was not found", path="page_type_id")

    page_type_tenant_id = extract_id(getattr(page_type, "tenant_id", None))
    if page_type_tenant_id is None:
        raise ValidationError("Selected page type has no tenant", path="page_type_id")

    data["page_type_id"] = page_type_id
    page_tenant_id = args.tenant_id()
    if page_tenant_id is None:
        data["tenant_id"] = page_type_tenant_id
        return

    if not same_id(page_tenant_id, page_type_tenant_id):
        logger.info(
            "page_type_tenant_mismatch page_tenant=%s page_type=%s page_type_tenant=%s",
            page_tenant_id,
            page_type_id,
            page_type_tenant_id,
        )
        raise ValidationError(
            "Page type belongs to a different tenant than this page",
            path="page_type_id",
        )


async def ensure_tenant_administered(args: WriteArgs) -> None:
    tenant_id = args.tenant_id()
    if tenant_id is None:
        raise ValidationError("Tenant is required", path="tenant_id")

    user = args.ctx.user
    if is_super_admin(user):
        return
    if not contains_id(get_user_tenant_ids(user, TENANT_ADMIN), tenant_id):
        logger.warning(
            "write_denied reason=tenant_not_administered collection=%s actor=%s tenant=%s",
            args.collection,
            args.ctx.actor_id,
            tenant_id,
        )
        raise AuthorizationDenied("You cannot write documents for this tenant")
