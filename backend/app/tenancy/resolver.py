"""
Tenant resolution for both trust boundaries.

Public (anonymous) requests name their tenant only through an explicit header.
Resolution fails closed: a missing or empty header, an unknown slug, or a
store error all yield ``None`` and callers must treat that as deny. There is
no fallback to "all tenants".

Authenticated requests derive scope from the user's memberships, optionally
narrowed by the admin UI's tenant selector cookie.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from ..access.where import equals
from ..auth.identity import get_user_tenant_ids
from ..config import Settings
from ..domain.ports.documents import DocumentStore
from ..utils.references import Id, extract_id, field_value, same_id

logger = logging.getLogger("tenantcms.tenancy")


@dataclass(frozen=True)
class ResolvedTenant:
    id: Id
    slug: str
    allow_public_read: bool = True


def extract_tenant_slug(
    headers: Mapping[str, str] | Iterable[tuple[str, str]],
    header_names: Iterable[str],
) -> str | None:
    """Return the first non-empty tenant header value, matching names case-insensitively."""
    wanted = {name.lower() for name in header_names}
    items = headers.items() if isinstance(headers, Mapping) else headers
    for name, value in items:
        if name.lower() not in wanted or not isinstance(value, str):
            continue
        value = value.strip()
        if value:
            return value
    return None


class TenantResolver:
    def __init__(self, store: DocumentStore, settings: Settings):
        self.store = store
        self.settings = settings

    async def resolve_public(
        self, headers: Mapping[str, str] | Iterable[tuple[str, str]]
    ) -> ResolvedTenant | None:
        slug = extract_tenant_slug(headers, self.settings.tenant_header_names)
        if slug is None:
            logger.info("tenant_resolution_failed reason=missing_header")
            return None

        try:
            result = await self.store.find("tenants", equals("slug", slug), limit=1)
        except SQLAlchemyError as exc:
            logger.error(
                "tenant_resolution_failed reason=lookup_error slug=%s error=%s", slug, exc
            )
            return None

        if not result.docs:
            logger.info("tenant_resolution_failed reason=unknown_slug slug=%s", slug)
            return None

        doc = result.docs[0]
        tenant_id = extract_id(doc)
        if tenant_id is None:
            logger.warning("tenant_resolution_failed reason=missing_id slug=%s", slug)
            return None

        allow_public_read = field_value(doc, "allow_public_read")
        return ResolvedTenant(
            id=tenant_id,
            slug=field_value(doc, "slug") or slug,
            allow_public_read=True if allow_public_read is None else bool(allow_public_read),
        )

    def selected_tenant(self, user: Any, cookies: Mapping[str, str]) -> Id | None:
        """Tenant chosen in the admin UI, if the user actually belongs to it."""
        if user is None:
            return None
        raw_value = cookies.get(self.settings.tenant_cookie_name)
        if not raw_value:
            return None
        for tenant_id in get_user_tenant_ids(user):
            if same_id(tenant_id, raw_value):
                return tenant_id
        logger.info("tenant_selector_ignored cookie_value=%s", raw_value)
        return None

    def admin_scope(self, user: Any, cookies: Mapping[str, str]) -> list[Id]:
        selected = self.selected_tenant(user, cookies)
        if selected is not None:
            return [selected]
        return get_user_tenant_ids(user)
