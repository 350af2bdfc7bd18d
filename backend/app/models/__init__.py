from .base import Base
from .tenant import Tenant
from .user import User, UserTenant
from .page_type import PageType
from .page import Page
from .post import Post
from .media import Media

# Collection slug -> model, shared by the document store and access registry
COLLECTION_MODELS: dict[str, type[Base]] = {
    "tenants": Tenant,
    "users": User,
    "page-types": PageType,
    "pages": Page,
    "posts": Post,
    "media": Media,
}

__all__ = [
    "Base",
    "Tenant",
    "User",
    "UserTenant",
    "PageType",
    "Page",
    "Post",
    "Media",
    "COLLECTION_MODELS",
]
