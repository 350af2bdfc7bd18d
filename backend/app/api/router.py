from fastapi import APIRouter

from ..schemas.media import MediaCreate, MediaRead, MediaUpdate
from ..schemas.page import PageCreate, PageRead, PageUpdate
from ..schemas.page_type import PageTypeCreate, PageTypeRead, PageTypeUpdate
from ..schemas.post import PostCreate, PostRead, PostUpdate
from ..schemas.user import UserCreate, UserRead, UserUpdate
from . import tenants
from .collections import build_collection_router

router = APIRouter(prefix="/api")

_collection_routers = [
    tenants.router,
    build_collection_router(
        "users", read_schema=UserRead, create_schema=UserCreate, update_schema=UserUpdate
    ),
    build_collection_router(
        "page-types",
        read_schema=PageTypeRead,
        create_schema=PageTypeCreate,
        update_schema=PageTypeUpdate,
    ),
    build_collection_router(
        "pages", read_schema=PageRead, create_schema=PageCreate, update_schema=PageUpdate
    ),
    build_collection_router(
        "posts", read_schema=PostRead, create_schema=PostCreate, update_schema=PostUpdate
    ),
    build_collection_router(
        "media", read_schema=MediaRead, create_schema=MediaCreate, update_schema=MediaUpdate
    ),
]

for _router in _collection_routers:
    router.include_router(_router)
