"""
Write path against a real ``AsyncSession`` (SQLite in memory).

A rejected write rolls the session back, which expires every loaded instance,
the acting user included. The request must keep working afterwards: template
seeding skips the failed document and carries on, and an admin can retry with
a valid payload on the same session.
"""
import uuid

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.orm import selectinload
from sqlalchemy.pool import StaticPool

from app.access.context import AccessContext
from app.crud.documents import SqlAlchemyDocumentStore
from app.errors import ValidationError
from app.models import Base, Page, PageType, Tenant, User, UserTenant
from app.services.content_service import ContentService
from app.templates import populate_tenant_pages
from app.tenancy.resolver import TenantResolver
from tests.store_helpers import make_settings


@pytest.fixture
async def session(anyio_backend):
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
async def alpha(session):
    """Tenant ``alpha`` that already owns a ``standard`` page type and an ``about`` page."""
    tenant = Tenant(id=uuid.uuid4(), name="Alpha", slug="alpha")
    page_type = PageType(id=uuid.uuid4(), tenant_id=tenant.id, name="Standard", slug="standard")
    page = Page(
        id=uuid.uuid4(),
        tenant_id=tenant.id,
        page_type_id=page_type.id,
        title="About",
        slug="about",
    )
    session.add_all([tenant, page_type, page])
    await session.commit()
    return {"tenant_id": tenant.id, "page_type_id": page_type.id, "tenant": tenant}


async def _load_user(session, *, roles, memberships=()) -> User:
    user = User(
        id=uuid.uuid4(),
        email=f"user-{uuid.uuid4().hex[:8]}@example.com",
        password_hash="not-a-real-hash",
        roles=roles,
        tenants=[
            UserTenant(tenant_id=tenant_id, roles=list(tenant_roles))
            for tenant_id, tenant_roles in memberships
        ],
    )
    session.add(user)
    await session.commit()

    result = await session.execute(
        select(User).where(User.id == user.id).options(selectinload(User.tenants))
    )
    return result.scalar_one()


def _service(session) -> ContentService:
    store = SqlAlchemyDocumentStore(session)
    settings = make_settings()
    return ContentService(store, TenantResolver(store, settings), settings)


async def _slugs(session, model, tenant_id) -> set[str]:
    result = await session.execute(select(model.slug).where(model.tenant_id == tenant_id))
    return set(result.scalars())


class TestSeedingAfterFailedWrite:
    @pytest.mark.anyio
    async def test_seeding_skips_existing_and_continues(self, session, alpha):
        user = await _load_user(session, roles=["super-admin"])
        ctx = AccessContext(user=user)

        counts = await populate_tenant_pages(_service(session), ctx, alpha["tenant"], "basic")

        # standard exists already, so home and about lose their page type
        assert counts == {"created": 2, "skipped": 3}
        assert await _slugs(session, PageType, alpha["tenant_id"]) == {"standard", "contact"}
        assert await _slugs(session, Page, alpha["tenant_id"]) == {"about", "contact"}


class TestRetryAfterRejectedWrite:
    @pytest.mark.anyio
    async def test_duplicate_slug_then_valid_create(self, session, alpha):
        admin = await _load_user(
            session, roles=["user"], memberships=[(alpha["tenant_id"], ["tenant-admin"])]
        )
        ctx = AccessContext(user=admin)
        service = _service(session)
        data = {"page_type_id": alpha["page_type_id"], "title": "About"}

        with pytest.raises(ValidationError) as exc_info:
            await service.create("pages", ctx, data)
        assert exc_info.value.path == "slug"

        page = await service.create("pages", ctx, {**data, "title": "Team"})

        assert page.tenant_id == alpha["tenant_id"]
        assert await _slugs(session, Page, alpha["tenant_id"]) == {"about", "team"}

    @pytest.mark.anyio
    async def test_null_title_then_valid_update(self, session, alpha):
        admin = await _load_user(
            session, roles=["user"], memberships=[(alpha["tenant_id"], ["tenant-admin"])]
        )
        ctx = AccessContext(user=admin)
        service = _service(session)
        page_id = (
            await session.execute(select(Page.id).where(Page.slug == "about"))
        ).scalar_one()

        with pytest.raises(ValidationError) as exc_info:
            await service.update("pages", ctx, page_id, {"title": None})
        assert exc_info.value.path == "title"

        page = await service.update("pages", ctx, page_id, {"title": "About us"})

        assert page.title == "About us"
        assert page.tenant_id == alpha["tenant_id"]
