import logging

from app.access.filter_rewriter import rewrite_public_filter, strip_forbidden_paths
from tests.store_helpers import acting_as, anonymous, make_user

FORBIDDEN = ["tenant.slug", "tenant.domain"]


class TestStripForbiddenPaths:
    def test_top_level_clause_removed(self):
        where = {"tenant.slug": {"equals": "beta"}, "slug": {"equals": "about"}}

        rewritten, stripped = strip_forbidden_paths(where, FORBIDDEN)

        assert rewritten == {"slug": {"equals": "about"}}
        assert stripped == ["tenant.slug"]

    def test_nested_clauses_removed(self):
        where = {
            "and": [
                {"or": [{"tenant.domain": {"equals": "beta.example"}}, {"status": {"equals": "published"}}]},
                {"tenant.slug": {"in": ["beta"]}},
            ]
        }

        rewritten, stripped = strip_forbidden_paths(where, FORBIDDEN)

        assert rewritten == {"and": [{"or": [{"status": {"equals": "published"}}]}]}
        assert sorted(stripped) == ["tenant.domain", "tenant.slug"]

    def test_deeper_paths_under_forbidden_prefix(self):
        rewritten, stripped = strip_forbidden_paths({"tenant.slug.raw": {"equals": "x"}}, FORBIDDEN)

        assert rewritten is None
        assert stripped == ["tenant.slug.raw"]

    def test_paths_through_other_relations_removed(self):
        where = {
            "page_type.tenant.slug": {"equals": "beta"},
            "or": [{"page_type.tenant.domain": {"equals": "beta.example"}}],
            "page_type.slug": {"equals": "standard"},
        }

        rewritten, stripped = strip_forbidden_paths(where, FORBIDDEN)

        assert rewritten == {"page_type.slug": {"equals": "standard"}}
        assert sorted(stripped) == ["page_type.tenant.domain", "page_type.tenant.slug"]

    def test_similar_names_kept(self):
        where = {"tenant.slugs": {"equals": "x"}, "tenant_id": {"equals": "t1"}}

        rewritten, stripped = strip_forbidden_paths(where, FORBIDDEN)

        assert rewritten == where
        assert stripped == []


class TestRewritePublicFilter:
    def test_anonymous_filters_rewritten_and_logged(self, caplog):
        where = {"tenant.slug": {"equals": "beta"}}

        with caplog.at_level(logging.WARNING, logger="tenantcms.access.filters"):
            result = rewrite_public_filter(anonymous("alpha"), where, FORBIDDEN)

        assert result is None
        assert "public_filter_stripped paths=tenant.slug" in caplog.text

    def test_authenticated_filters_untouched(self):
        where = {"tenant.slug": {"equals": "beta"}}

        assert rewrite_public_filter(acting_as(make_user()), where, FORBIDDEN) is where

    def test_none_passes_through(self):
        assert rewrite_public_filter(anonymous("alpha"), None, FORBIDDEN) is None
