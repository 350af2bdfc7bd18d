"""
Template seeding for new tenants.

Page types and pages are created through ``ContentService`` like any other
write, so the same access checks and validators apply. A page that fails is
logged and skipped; the rest of the template is still created.
"""
from __future__ import annotations

import logging
from typing import Any

from ..access.context import AccessContext
from ..errors import AppError
from ..utils.references import extract_id
from .definitions import get_template

logger = logging.getLogger("tenantcms.templates")


def replace_placeholders(value: Any, replacements: dict[str, str]) -> Any:
    if isinstance(value, str):
        for placeholder, replacement in replacements.items():
            value = value.replace(placeholder, replacement)
        return value
    if isinstance(value, dict):
        return {key: replace_placeholders(item, replacements) for key, item in value.items()}
    if isinstance(value, list):
        return [replace_placeholders(item, replacements) for item in value]
    return value


async def populate_tenant_pages(
    service: Any,
    ctx: AccessContext,
    tenant: Any,
    template_name: str,
) -> dict[str, int]:
    """Create the template's page types, then its pages, for ``tenant``.

    Returns:
        Counts of created and skipped documents
    """
    template = get_template(template_name)

    # Plain values: a failed write rolls back and expires loaded objects
    tenant_id = extract_id(tenant)
    tenant_name = getattr(tenant, "name", None) or ""
    tenant_slug = getattr(tenant, "slug", None) or ""
    replacements = {"{{tenant-name}}": tenant_name, "{{tenant-slug}}": tenant_slug}

    page_type_ids: dict[str, Any] = {}
    created = 0
    skipped = 0

    for page_type in template.page_types:
        data = {
            "tenant_id": tenant_id,
            "name": replace_placeholders(page_type.name, replacements),
            "slug": page_type.slug,
            "description": replace_placeholders(page_type.description, replacements),
            "fields": page_type.fields,
            "is_default": page_type.is_default,
        }
        try:
            doc = await service.create("page-types", ctx, data)
        except AppError as exc:
            skipped += 1
            logger.warning(
                "template_page_type_skipped tenant=%s template=%s slug=%s error=%s",
                tenant_slug,
                template.name,
                page_type.slug,
                exc.message,
            )
            continue
        page_type_ids[page_type.slug] = extract_id(doc)
        created += 1

    for page in template.pages:
        page_type_id = page_type_ids.get(page.page_type)
        if page_type_id is None:
            skipped += 1
            logger.warning(
                "template_page_skipped tenant=%s template=%s slug=%s reason=missing_page_type",
                tenant_slug,
                template.name,
                page.slug,
            )
            continue

        data = {
            "tenant_id": tenant_id,
            "page_type_id": page_type_id,
            "title": replace_placeholders(page.title, replacements),
            "slug": page.slug,
            "status": page.status,
            "summary": replace_placeholders(page.summary, replacements),
            "content": replace_placeholders(page.content, replacements),
        }
        try:
            await service.create("pages", ctx, data)
        except AppError as exc:
            skipped += 1
            logger.warning(
                "template_page_skipped tenant=%s template=%s slug=%s error=%s",
                tenant_slug,
                template.name,
                page.slug,
                exc.message,
            )
            continue
        created += 1

    logger.info(
        "template_applied tenant=%s template=%s created=%d skipped=%d",
        tenant_slug,
        template.name,
        created,
        skipped,
    )
    return {"created": created, "skipped": skipped}
