from __future__ import annotations

import logging
from typing import Any

from ..access.context import AccessContext
from ..templates import get_template, populate_tenant_pages
from ..utils.references import extract_id
from .content_service import ContentService

logger = logging.getLogger("tenantcms.tenants")


class TenantService:
    """Tenant creation with optional starter content."""

    def __init__(self, content: ContentService):
        self.content = content

    async def create_tenant(
        self, ctx: AccessContext, data: dict[str, Any], *, template: str | None = None
    ) -> Any:
        if template is not None:
            # Unknown templates are rejected before the tenant exists
            get_template(template)

        tenant = await self.content.create("tenants", ctx, data)
        if template is None:
            return tenant

        tenant_id = extract_id(tenant)
        await populate_tenant_pages(self.content, ctx, tenant, template)
        return await self.content.find_by_id("tenants", ctx, tenant_id)
