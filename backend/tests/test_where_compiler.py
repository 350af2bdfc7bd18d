"""
Tests for compiling structured predicates to SQL.

Compiled against the PostgreSQL dialect without a database; assertions look
at the rendered SQL text.
"""
import uuid

import pytest
from sqlalchemy.dialects import postgresql

from app.crud.documents import compile_where, resolve_model
from app.errors import NotFoundError, ValidationError
from app.models import Page, Tenant, User


def _sql(model, where) -> str:
    return str(compile_where(model, where).compile(dialect=postgresql.dialect()))


class TestCompileWhere:
    def test_equality_on_column(self):
        sql = _sql(Page, {"slug": {"equals": "about"}})

        assert "pages.slug = " in sql

    def test_membership_on_tenant(self):
        sql = _sql(Page, {"tenant_id": {"in": [str(uuid.uuid4()), uuid.uuid4()]}})

        assert "pages.tenant_id IN" in sql

    def test_relationship_name_compares_foreign_key(self):
        sql = _sql(Page, {"tenant": {"equals": uuid.uuid4()}})

        assert "pages.tenant_id = " in sql

    def test_dotted_path_uses_exists(self):
        sql = _sql(Page, {"tenant.slug": {"equals": "alpha"}})

        assert "EXISTS" in sql
        assert "tenants.slug = " in sql

    def test_collection_path_on_memberships(self):
        sql = _sql(User, {"tenants.tenant_id": {"in": [uuid.uuid4()]}})

        assert "EXISTS" in sql
        assert "user_tenants.tenant_id IN" in sql

    def test_or_and_nesting(self):
        sql = _sql(
            Page,
            {
                "and": [
                    {"or": [{"slug": {"equals": "a"}}, {"status": {"equals": "published"}}]},
                    {"tenant_id": {"equals": uuid.uuid4()}},
                ]
            },
        )

        assert " OR " in sql
        assert " AND " in sql

    def test_equals_none_is_null_check(self):
        assert "pages.summary IS NULL" in _sql(Page, {"summary": {"equals": None}})

    def test_empty_combinators_compile_to_true(self):
        assert _sql(Tenant, {"and": [], "or": []}) == "true"

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError, match="Unknown filter field 'nope'"):
            compile_where(Page, {"nope": {"equals": 1}})

    def test_unknown_relationship_path_rejected(self):
        with pytest.raises(ValidationError, match="Unknown filter field"):
            compile_where(Page, {"author.name": {"equals": "x"}})

    def test_malformed_uuid_rejected(self):
        with pytest.raises(ValidationError, match="not a valid id"):
            compile_where(Page, {"tenant_id": {"equals": "not-a-uuid"}})


class TestResolveModel:
    def test_known_collection(self):
        assert resolve_model("pages") is Page

    def test_unknown_collection(self):
        with pytest.raises(NotFoundError):
            resolve_model("comments")
