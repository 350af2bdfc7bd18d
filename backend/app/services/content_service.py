"""
Content service: the single read/write path for every collection.

Reads: policy decision, public filter rewrite, then the caller's filter and
the policy filter are conjoined and handed to the store.

Writes: policy decision, then the collection's pre-commit hooks (tenant
assignment, consistency and uniqueness checks) and finally the store write
and commit. Any failure after the decision rolls the whole write back.
"""
from __future__ import annotations

import logging
from typing import Any

from ..access.collections import Operation, get_collection_access
from ..access.context import AccessContext
from ..access.filter_rewriter import rewrite_public_filter
from ..access.policies import AccessArgs
from ..access.where import AccessResult, Where, combine_where, validate_where
from ..config import Settings
from ..domain.ports.documents import DocumentStore, FindResult
from ..errors import AuthorizationDenied, NotFoundError
from ..tenancy.resolver import TenantResolver
from ..validators.base import Hook, WriteArgs
from ..validators.memberships import (
    ensure_user_manageable,
    prepare_credentials,
    validate_global_roles,
    validate_memberships,
)
from ..validators.tenant_consistency import (
    assign_tenant,
    ensure_page_type_matches_tenant,
    ensure_tenant_administered,
)
from ..validators.required_fields import reject_required_nulls
from ..validators.unique_slug import ensure_unique_tenant_slug, unique_slug

logger = logging.getLogger("tenantcms.content")

BEFORE_CHANGE_HOOKS: dict[str, tuple[Hook, ...]] = {
    "pages": (
        assign_tenant,
        ensure_page_type_matches_tenant,
        ensure_tenant_administered,
        unique_slug("page", "title"),
    ),
    "posts": (
        assign_tenant,
        ensure_tenant_administered,
        unique_slug("post", "title"),
    ),
    "media": (
        assign_tenant,
        ensure_tenant_administered,
    ),
    "page-types": (
        assign_tenant,
        ensure_tenant_administered,
        unique_slug("page type", "name", disclose_tenant=False),
    ),
    "tenants": (ensure_unique_tenant_slug,),
    "users": (
        prepare_credentials,
        ensure_user_manageable,
        validate_global_roles,
        validate_memberships,
    ),
}

BEFORE_DELETE_HOOKS: dict[str, tuple[Hook, ...]] = {
    "users": (ensure_user_manageable,),
}


def _policy_filter(result: AccessResult) -> Where | None:
    return None if result is True else result


class ContentService:
    def __init__(self, store: DocumentStore, resolver: TenantResolver, settings: Settings):
        self.store = store
        self.resolver = resolver
        self.settings = settings

    async def _check_access(
        self,
        collection: str,
        operation: Operation,
        ctx: AccessContext,
        *,
        doc_id: Any = None,
        data: dict[str, Any] | None = None,
    ) -> AccessResult:
        policy = get_collection_access(collection).policy_for(operation)
        result = await policy(AccessArgs(ctx=ctx, resolver=self.resolver, id=doc_id, data=data))
        if result is False:
            logger.info(
                "access_denied collection=%s operation=%s actor=%s",
                collection,
                operation,
                ctx.actor_id,
            )
            raise AuthorizationDenied()
        return result

    async def _run_hooks(self, args: WriteArgs) -> None:
        if args.operation == "delete":
            hooks = BEFORE_DELETE_HOOKS.get(args.collection, ())
        else:
            hooks = (*BEFORE_CHANGE_HOOKS.get(args.collection, ()), reject_required_nulls)
        for hook in hooks:
            await hook(args)

    async def find(
        self,
        collection: str,
        ctx: AccessContext,
        where: Where | None = None,
        *,
        limit: int = 10,
        page: int = 1,
        depth: int = 0,
    ) -> FindResult:
        if where is not None:
            validate_where(where)
        access = await self._check_access(collection, "read", ctx)
        caller_filter = rewrite_public_filter(
            ctx, where, self.settings.public_forbidden_filter_paths
        )
        combined = combine_where(caller_filter, _policy_filter(access))
        return await self.store.find(collection, combined, limit=limit, page=page, depth=depth)

    async def find_by_id(
        self, collection: str, ctx: AccessContext, doc_id: Any, *, depth: int = 0
    ) -> Any:
        access = await self._check_access(collection, "read", ctx, doc_id=doc_id)
        doc = await self.store.find_by_id(
            collection, doc_id, where=_policy_filter(access), depth=depth
        )
        if doc is None:
            raise NotFoundError()
        return doc

    async def create(self, collection: str, ctx: AccessContext, data: dict[str, Any]) -> Any:
        data = dict(data)
        await self._check_access(collection, "create", ctx, data=data)

        args = WriteArgs(
            collection=collection,
            operation="create",
            data=data,
            ctx=ctx,
            store=self.store,
            settings=self.settings,
        )
        try:
            await self._run_hooks(args)
            doc = await self.store.create(collection, args.data)
            await self.store.commit()
        except Exception:
            await self.store.rollback()
            raise

        logger.info(
            "document_created collection=%s id=%s actor=%s",
            collection,
            getattr(doc, "id", None),
            ctx.actor_id,
        )
        return doc

    async def update(
        self, collection: str, ctx: AccessContext, doc_id: Any, data: dict[str, Any]
    ) -> Any:
        data = dict(data)
        access = await self._check_access(collection, "update", ctx, doc_id=doc_id, data=data)
        original = await self.store.find_by_id(collection, doc_id, where=_policy_filter(access))
        if original is None:
            raise NotFoundError()

        args = WriteArgs(
            collection=collection,
            operation="update",
            data=data,
            ctx=ctx,
            store=self.store,
            settings=self.settings,
            original=original,
        )
        try:
            await self._run_hooks(args)
            doc = await self.store.update(collection, original, args.data)
            await self.store.commit()
        except Exception:
            await self.store.rollback()
            raise

        logger.info(
            "document_updated collection=%s id=%s actor=%s", collection, doc_id, ctx.actor_id
        )
        return doc

    async def delete(self, collection: str, ctx: AccessContext, doc_id: Any) -> Any:
        access = await self._check_access(collection, "delete", ctx, doc_id=doc_id)
        doc = await self.store.find_by_id(collection, doc_id, where=_policy_filter(access))
        if doc is None:
            raise NotFoundError()

        args = WriteArgs(
            collection=collection,
            operation="delete",
            data={},
            ctx=ctx,
            store=self.store,
            settings=self.settings,
            original=doc,
        )
        try:
            await self._run_hooks(args)
            await self.store.delete(collection, doc)
            await self.store.commit()
        except Exception:
            await self.store.rollback()
            raise

        logger.info(
            "document_deleted collection=%s id=%s actor=%s", collection, doc_id, ctx.actor_id
        )
        return doc
