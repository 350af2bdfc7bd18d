"""
Generic REST surface for a collection.

Every endpoint goes through ``ContentService``; nothing here makes an access
decision of its own.
"""
import json
import uuid

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from ..access.context import AccessContext
from ..access.where import Where, validate_where
from ..dependencies import get_access_context, get_content_service
from ..errors import ValidationError
from ..schemas.common import DocumentList
from ..services.content_service import ContentService


def parse_where(raw_value: str | None) -> Where | None:
    if raw_value is None or not raw_value.strip():
        return None
    try:
        parsed = json.loads(raw_value)
    except json.JSONDecodeError:
        raise ValidationError("Filter must be valid JSON", path="where") from None
    return validate_where(parsed)


def build_collection_router(
    collection: str,
    *,
    read_schema: type[BaseModel],
    create_schema: type[BaseModel],
    update_schema: type[BaseModel],
    include_create: bool = True,
) -> APIRouter:
    router = APIRouter(prefix=f"/{collection}", tags=[collection])
    list_schema = DocumentList[read_schema]

    @router.get("", response_model=list_schema)
    async def list_documents(
        where: str | None = Query(default=None),
        limit: int = Query(default=10, ge=1, le=100),
        page: int = Query(default=1, ge=1),
        depth: int = Query(default=0, ge=0, le=2),
        ctx: AccessContext = Depends(get_access_context),
        service: ContentService = Depends(get_content_service),
    ):
        result = await service.find(
            collection, ctx, parse_where(where), limit=limit, page=page, depth=depth
        )
        return list_schema(
            docs=[read_schema.model_validate(doc) for doc in result.docs],
            total_docs=result.total_docs,
            limit=result.limit,
            page=result.page,
        )

    @router.get("/{doc_id}", response_model=read_schema)
    async def get_document(
        doc_id: uuid.UUID,
        depth: int = Query(default=0, ge=0, le=2),
        ctx: AccessContext = Depends(get_access_context),
        service: ContentService = Depends(get_content_service),
    ):
        doc = await service.find_by_id(collection, ctx, doc_id, depth=depth)
        return read_schema.model_validate(doc)

    if include_create:

        @router.post("", response_model=read_schema, status_code=status.HTTP_201_CREATED)
        async def create_document(
            payload: create_schema,
            ctx: AccessContext = Depends(get_access_context),
            service: ContentService = Depends(get_content_service),
        ):
            doc = await service.create(collection, ctx, payload.model_dump())
            return read_schema.model_validate(doc)

    @router.patch("/{doc_id}", response_model=read_schema)
    async def update_document(
        doc_id: uuid.UUID,
        payload: update_schema,
        ctx: AccessContext = Depends(get_access_context),
        service: ContentService = Depends(get_content_service),
    ):
        doc = await service.update(
            collection, ctx, doc_id, payload.model_dump(exclude_unset=True)
        )
        return read_schema.model_validate(doc)

    @router.delete("/{doc_id}", response_model=read_schema)
    async def delete_document(
        doc_id: uuid.UUID,
        ctx: AccessContext = Depends(get_access_context),
        service: ContentService = Depends(get_content_service),
    ):
        doc = await service.delete(collection, ctx, doc_id)
        return read_schema.model_validate(doc)

    return router
