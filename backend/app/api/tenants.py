from fastapi import Depends, status

from ..access.context import AccessContext
from ..dependencies import get_access_context, get_tenant_service
from ..schemas.tenant import TenantCreate, TenantRead, TenantUpdate
from ..services.tenant_service import TenantService
from .collections import build_collection_router

router = build_collection_router(
    "tenants",
    read_schema=TenantRead,
    create_schema=TenantCreate,
    update_schema=TenantUpdate,
    include_create=False,
)


@router.post("", response_model=TenantRead, status_code=status.HTTP_201_CREATED)
async def create_tenant(
    payload: TenantCreate,
    ctx: AccessContext = Depends(get_access_context),
    service: TenantService = Depends(get_tenant_service),
) -> TenantRead:
    data = payload.model_dump(exclude={"template"})
    tenant = await service.create_tenant(ctx, data, template=payload.template)
    return TenantRead.model_validate(tenant)
