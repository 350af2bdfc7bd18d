"""
Slug normalisation and scoped uniqueness.

The check is a friendly pre-commit lookup, not the guarantee: two concurrent
writes can both pass it, and the database unique constraints decide.
"""
from __future__ import annotations

import logging

from ..access.where import and_, equals
from ..auth.identity import get_user_tenant_ids, is_super_admin
from ..errors import ValidationError
from ..utils.references import extract_id
from ..utils.slugs import slugify
from .base import Hook, WriteArgs

logger = logging.getLogger("tenantcms.validators.slug")


def _normalise_slug(args: WriteArgs, *source_fields: str) -> str | None:
    """Slugify the payload slug, deriving it from a title field on create when absent."""
    data = args.data
    if "slug" in data and data["slug"] is not None:
        raw_value = str(data["slug"])
    elif args.is_create:
        raw_value = next(
            (str(data[name]) for name in source_fields if data.get(name)), ""
        )
    else:
        return None

    slug = slugify(raw_value)
    if not slug:
        raise ValidationError("Slug is required", path="slug")
    data["slug"] = slug
    return slug


def _discloses_tenant(args: WriteArgs) -> bool:
    user = args.ctx.user
    return is_super_admin(user) or len(get_user_tenant_ids(user)) > 1


async def _tenant_label(args: WriteArgs, tenant_id) -> str:
    tenant = await args.store.find_by_id("tenants", tenant_id)
    if tenant is None:
        return str(tenant_id)
    return getattr(tenant, "slug", None) or str(tenant_id)


def unique_slug(noun: str, *source_fields: str, disclose_tenant: bool = True) -> Hook:
    """Build a hook enforcing ``(tenant_id, slug)`` uniqueness within one collection."""

    async def ensure_unique_slug(args: WriteArgs) -> None:
        slug = _normalise_slug(args, *source_fields)
        if slug is None:
            return
        if not args.is_create and slug == args.original_value("slug"):
            return

        tenant_id = args.tenant_id()
        clauses = [equals("slug", slug), equals("tenant_id", tenant_id)]
        if not args.is_create:
            clauses.append({"id": {"not_equals": extract_id(args.original)}})

        result = await args.store.find(args.collection, and_(*clauses), limit=1)
        if not result.docs:
            return

        logger.info(
            "duplicate_slug collection=%s tenant=%s slug=%s", args.collection, tenant_id, slug
        )
        if disclose_tenant and _discloses_tenant(args):
            label = await _tenant_label(args, tenant_id)
            message = f'A {noun} with slug "{slug}" already exists for tenant "{label}"'
        else:
            message = f'A {noun} with slug "{slug}" already exists for this tenant'
        raise ValidationError(message, path="slug")

    return ensure_unique_slug


async def ensure_unique_tenant_slug(args: WriteArgs) -> None:
    """Tenant slugs are global: they are what the public header resolves."""
    slug = _normalise_slug(args, "name")
    if slug is None:
        return
    if not args.is_create and slug == args.original_value("slug"):
        return

    clauses = [equals("slug", slug)]
    if not args.is_create:
        clauses.append({"id": {"not_equals": extract_id(args.original)}})
    result = await args.store.find("tenants", and_(*clauses), limit=1)
    if result.docs:
        raise ValidationError(f'A tenant with slug "{slug}" already exists', path="slug")
