"""
Tests for the access policy engine.

Policies return True, False or a filter. Filters are asserted structurally
since the query layer is what applies them.
"""
import pytest

from app.access import policies
from app.access.context import AccessContext
from app.access.collections import COLLECTION_ACCESS, get_collection_access
from app.access.policies import AccessArgs
from app.errors import NotFoundError
from tests.store_helpers import (
    InMemoryDocumentStore,
    acting_as,
    anonymous,
    make_resolver,
    make_super_admin,
    make_tenant,
    make_tenant_admin,
    make_user,
)


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def tenants(store):
    return make_tenant(store, "alpha"), make_tenant(store, "beta")


def _args(store, ctx, **kwargs) -> AccessArgs:
    return AccessArgs(ctx=ctx, resolver=make_resolver(store), **kwargs)


class TestTenantScopedRead:
    @pytest.mark.anyio
    async def test_anonymous_without_header_denied(self, store, tenants):
        assert await policies.tenant_scoped_read(_args(store, anonymous())) is False

    @pytest.mark.anyio
    async def test_anonymous_with_unknown_slug_denied(self, store, tenants):
        assert await policies.tenant_scoped_read(_args(store, anonymous("ghost"))) is False

    @pytest.mark.anyio
    async def test_anonymous_scoped_to_resolved_tenant(self, store, tenants):
        alpha, _ = tenants

        result = await policies.tenant_scoped_read(_args(store, anonymous("alpha")))

        assert result == {"tenant_id": {"equals": alpha.id}}

    @pytest.mark.anyio
    async def test_anonymous_denied_for_private_tenant(self, store):
        make_tenant(store, "closed", allow_public_read=False)

        assert await policies.tenant_scoped_read(_args(store, anonymous("closed"))) is False

    @pytest.mark.anyio
    async def test_anonymous_lookup_failure_denied(self, store, tenants):
        store.failing_collections.add("tenants")

        assert await policies.tenant_scoped_read(_args(store, anonymous("alpha"))) is False

    @pytest.mark.anyio
    async def test_super_admin_unconditional(self, store, tenants):
        ctx = acting_as(make_super_admin())

        assert await policies.tenant_scoped_read(_args(store, ctx)) is True

    @pytest.mark.anyio
    async def test_user_without_memberships_denied(self, store, tenants):
        ctx = acting_as(make_user())

        assert await policies.tenant_scoped_read(_args(store, ctx)) is False

    @pytest.mark.anyio
    async def test_member_scoped_to_memberships(self, store, tenants):
        alpha, beta = tenants
        user = make_user(memberships=[(alpha, ["tenant-member"]), (beta, ["tenant-admin"])])

        result = await policies.tenant_scoped_read(_args(store, acting_as(user)))

        assert result == {"tenant_id": {"in": [alpha.id, beta.id]}}

    @pytest.mark.anyio
    async def test_header_ignored_for_authenticated_users(self, store, tenants):
        alpha, beta = tenants
        user = make_tenant_admin(alpha)
        ctx = AccessContext(user=user, headers={"x-tenant-slug": "beta"})

        result = await policies.tenant_scoped_read(_args(store, ctx))

        assert result == {"tenant_id": {"in": [alpha.id]}}


class TestTenantAdminMutation:
    @pytest.mark.anyio
    async def test_anonymous_denied(self, store, tenants):
        assert await policies.tenant_admin_mutation(_args(store, anonymous("alpha"))) is False

    @pytest.mark.anyio
    async def test_super_admin_allowed(self, store, tenants):
        alpha, _ = tenants
        ctx = acting_as(make_super_admin())

        assert await policies.tenant_admin_mutation(_args(store, ctx, data={"tenant_id": alpha.id})) is True
        assert await policies.tenant_admin_mutation(_args(store, ctx, id="any")) is True

    @pytest.mark.anyio
    async def test_member_without_admin_role_denied(self, store, tenants):
        alpha, _ = tenants
        ctx = acting_as(make_user(memberships=[(alpha, ["tenant-member"])]))

        assert await policies.tenant_admin_mutation(_args(store, ctx, data={"tenant_id": alpha.id})) is False

    @pytest.mark.anyio
    async def test_create_for_administered_tenant(self, store, tenants):
        alpha, _ = tenants
        ctx = acting_as(make_tenant_admin(alpha))

        assert await policies.tenant_admin_mutation(_args(store, ctx, data={"tenant_id": str(alpha.id)})) is True

    @pytest.mark.anyio
    async def test_create_for_foreign_tenant_denied(self, store, tenants):
        alpha, beta = tenants
        ctx = acting_as(make_tenant_admin(alpha))

        assert await policies.tenant_admin_mutation(_args(store, ctx, data={"tenant_id": beta.id})) is False

    @pytest.mark.anyio
    async def test_create_without_tenant_allowed(self, store, tenants):
        alpha, _ = tenants
        ctx = acting_as(make_tenant_admin(alpha))

        assert await policies.tenant_admin_mutation(_args(store, ctx, data={"title": "x"})) is True

    @pytest.mark.anyio
    async def test_update_by_id_returns_admin_filter(self, store, tenants):
        """Even a payload naming an administered tenant cannot lift the filter."""
        alpha, beta = tenants
        user = make_user(memberships=[(alpha, ["tenant-admin"]), (beta, ["tenant-member"])])
        ctx = acting_as(user)

        result = await policies.tenant_admin_mutation(
            _args(store, ctx, id="doc-1", data={"tenant_id": alpha.id})
        )

        assert result == {"tenant_id": {"in": [alpha.id]}}


class TestTenantCollection:
    @pytest.mark.anyio
    async def test_anonymous_reads_public_tenants_only(self, store):
        assert await policies.tenant_read(_args(store, anonymous())) == {
            "allow_public_read": {"equals": True}
        }

    @pytest.mark.anyio
    async def test_member_reads_own_tenants(self, store, tenants):
        alpha, _ = tenants
        ctx = acting_as(make_user(memberships=[(alpha, ["tenant-member"])]))

        assert await policies.tenant_read(_args(store, ctx)) == {"id": {"in": [alpha.id]}}

    @pytest.mark.anyio
    async def test_only_super_admin_creates(self, store, tenants):
        alpha, _ = tenants

        assert await policies.tenant_create(_args(store, acting_as(make_super_admin()))) is True
        assert await policies.tenant_create(_args(store, acting_as(make_tenant_admin(alpha)))) is False
        assert await policies.tenant_create(_args(store, anonymous())) is False

    @pytest.mark.anyio
    async def test_tenant_admin_updates_own_tenant_only(self, store, tenants):
        alpha, _ = tenants
        ctx = acting_as(make_tenant_admin(alpha))

        result = await policies.tenant_update_delete(_args(store, ctx, id=alpha.id))

        assert result == {"id": {"in": [alpha.id]}}

    @pytest.mark.anyio
    async def test_member_cannot_update_tenant(self, store, tenants):
        alpha, _ = tenants
        ctx = acting_as(make_user(memberships=[(alpha, ["tenant-member"])]))

        assert await policies.tenant_update_delete(_args(store, ctx, id=alpha.id)) is False


class TestPageTypeRead:
    @pytest.mark.anyio
    async def test_anonymous_denied_even_with_header(self, store, tenants):
        assert await policies.page_type_read(_args(store, anonymous("alpha"))) is False

    @pytest.mark.anyio
    async def test_member_scoped(self, store, tenants):
        alpha, _ = tenants
        ctx = acting_as(make_tenant_admin(alpha))

        assert await policies.page_type_read(_args(store, ctx)) == {"tenant_id": {"in": [alpha.id]}}


class TestUserCollection:
    @pytest.mark.anyio
    async def test_anonymous_denied(self, store):
        assert await policies.user_read(_args(store, anonymous("alpha"))) is False

    @pytest.mark.anyio
    async def test_self_by_id_allowed(self, store):
        user = make_user()

        assert await policies.user_read(_args(store, acting_as(user), id=str(user.id))) is True

    @pytest.mark.anyio
    async def test_plain_user_sees_only_self(self, store):
        user = make_user()

        assert await policies.user_read(_args(store, acting_as(user))) == {"id": {"equals": user.id}}

    @pytest.mark.anyio
    async def test_tenant_admin_sees_self_and_tenant_users(self, store, tenants):
        alpha, _ = tenants
        user = make_tenant_admin(alpha)

        result = await policies.user_read(_args(store, acting_as(user)))

        assert result == {
            "or": [
                {"id": {"equals": user.id}},
                {"tenants.tenant_id": {"in": [alpha.id]}},
            ]
        }

    @pytest.mark.anyio
    async def test_selected_tenant_narrows_user_list(self, store, tenants):
        alpha, beta = tenants
        user = make_tenant_admin(alpha, beta)
        ctx = acting_as(user, cookies={"cms-tenant": str(beta.id)})

        assert await policies.user_read(_args(store, ctx)) == {"tenants.tenant_id": {"equals": beta.id}}

    @pytest.mark.anyio
    async def test_user_create_requires_admin_role(self, store, tenants):
        alpha, _ = tenants

        assert await policies.user_create(_args(store, acting_as(make_tenant_admin(alpha)))) is True
        assert await policies.user_create(_args(store, acting_as(make_user()))) is False

    @pytest.mark.anyio
    async def test_user_delete_filtered_to_admin_tenants(self, store, tenants):
        alpha, _ = tenants
        ctx = acting_as(make_tenant_admin(alpha))

        assert await policies.user_delete(_args(store, ctx, id="x")) == {
            "tenants.tenant_id": {"in": [alpha.id]}
        }


class TestCollectionRegistry:
    def test_every_collection_has_policies(self):
        assert set(COLLECTION_ACCESS) == {"tenants", "users", "page-types", "pages", "posts", "media"}

    def test_media_is_tenant_scoped(self):
        assert get_collection_access("media").read is policies.tenant_scoped_read

    def test_unknown_collection(self):
        with pytest.raises(NotFoundError):
            get_collection_access("comments")
