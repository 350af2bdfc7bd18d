import uuid
from collections.abc import AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .access.context import AccessContext
from .config import Settings, get_settings
from .crud.documents import SqlAlchemyDocumentStore
from .database import get_session
from .domain.ports.documents import DocumentStore
from .models.user import User
from .security.token_inspection import ExpiredTokenError, InvalidTokenError, validate_access_token
from .services.content_service import ContentService
from .services.tenant_service import TenantService
from .tenancy.resolver import TenantResolver

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


def get_document_store(db: AsyncSession = Depends(get_db)) -> DocumentStore:
    return SqlAlchemyDocumentStore(db)


def get_tenant_resolver(
    store: DocumentStore = Depends(get_document_store),
    settings: Settings = Depends(get_settings),
) -> TenantResolver:
    return TenantResolver(store, settings)


def get_content_service(
    store: DocumentStore = Depends(get_document_store),
    resolver: TenantResolver = Depends(get_tenant_resolver),
    settings: Settings = Depends(get_settings),
) -> ContentService:
    return ContentService(store, resolver, settings)


def get_tenant_service(
    content: ContentService = Depends(get_content_service),
) -> TenantService:
    return TenantService(content)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated"
        )

    token = credentials.credentials
    try:
        payload = validate_access_token(token)
    except ExpiredTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has expired"
        ) from None
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token"
        ) from None

    subject = payload.get("sub")
    if subject is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload"
        )

    try:
        if not isinstance(subject, str):
            raise ValueError("invalid-subject-type")
        user_id = uuid.UUID(subject)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload"
        ) from None

    # Memberships are needed by every access decision
    result = await db.execute(
        select(User).where(User.id == user_id).options(selectinload(User.tenants))
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found"
        )

    return user


async def get_current_user_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    if credentials is None:
        return None
    return await get_current_user(credentials=credentials, db=db)


def get_access_context(
    request: Request,
    user: User | None = Depends(get_current_user_optional),
    resolver: TenantResolver = Depends(get_tenant_resolver),
) -> AccessContext:
    return AccessContext(
        user=user,
        headers=request.headers,
        cookies=request.cookies,
        context_tenant_id=resolver.selected_tenant(user, request.cookies),
    )
