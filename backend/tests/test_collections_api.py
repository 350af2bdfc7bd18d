"""
HTTP surface tests: the collection routes wired to an in-memory store.
"""
import json

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from app.config import get_settings
from app.dependencies import get_current_user_optional, get_document_store
from app.main import app
from app.security.passwords import hash_password
from tests.store_helpers import (
    InMemoryDocumentStore,
    make_page,
    make_page_type,
    make_settings,
    make_super_admin,
    make_tenant,
    make_tenant_admin,
    make_user,
)


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def site(store):
    alpha = make_tenant(store, "alpha")
    beta = make_tenant(store, "beta")
    alpha_type = make_page_type(store, alpha)
    beta_type = make_page_type(store, beta)
    return {
        "alpha": alpha,
        "beta": beta,
        "alpha_type": alpha_type,
        "alpha_page": make_page(store, alpha, alpha_type, "about"),
        "beta_page": make_page(store, beta, beta_type, "about"),
    }


@pytest.fixture
def client_for(store):
    """Build a client acting as the given user (``None`` for anonymous)."""

    def build(user=None) -> TestClient:
        app.dependency_overrides[get_document_store] = lambda: store
        app.dependency_overrides[get_settings] = lambda: make_settings()
        app.dependency_overrides[get_current_user_optional] = lambda: user
        return TestClient(app)

    yield build
    app.dependency_overrides.clear()


class TestPublicReads:
    def test_missing_tenant_header_forbidden(self, client_for, site):
        response = client_for().get("/api/pages")

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error"]["code"] == "PERMISSION_DENIED"

    def test_reads_scoped_to_header(self, client_for, site):
        response = client_for().get("/api/pages", headers={"X-Tenant-Slug": "alpha"})

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["total_docs"] == 1
        assert body["docs"][0]["id"] == str(site["alpha_page"].id)

    def test_tenant_filter_stripped(self, client_for, site):
        where = json.dumps({"tenant.slug": {"equals": "beta"}})

        response = client_for().get(
            "/api/pages", params={"where": where}, headers={"X-Tenant-Slug": "alpha"}
        )

        assert [doc["tenant_id"] for doc in response.json()["docs"]] == [str(site["alpha"].id)]

    def test_malformed_filter(self, client_for, site):
        response = client_for().get(
            "/api/pages", params={"where": "{not json"}, headers={"X-Tenant-Slug": "alpha"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["details"] == {
            "errors": [{"message": "Filter must be valid JSON", "path": "where"}]
        }


class TestAdminWrites:
    def test_create_page_in_own_tenant(self, client_for, site):
        client = client_for(make_tenant_admin(site["alpha"]))

        response = client.post(
            "/api/pages",
            json={"page_type_id": str(site["alpha_type"].id), "title": "Team"},
        )

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["tenant_id"] == str(site["alpha"].id)
        assert body["slug"] == "team"

    def test_duplicate_slug_reports_path(self, client_for, site):
        client = client_for(make_tenant_admin(site["alpha"]))

        response = client.post(
            "/api/pages",
            json={"page_type_id": str(site["alpha_type"].id), "title": "About"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        [error] = response.json()["error"]["details"]["errors"]
        assert error["path"] == "slug"

    def test_foreign_page_is_not_found(self, client_for, site):
        client = client_for(make_tenant_admin(site["alpha"]))

        response = client.patch(f"/api/pages/{site['beta_page'].id}", json={"title": "Mine"})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_null_slug_reports_path(self, client_for, site):
        client = client_for(make_tenant_admin(site["alpha"]))

        response = client.patch(f"/api/pages/{site['alpha_page'].id}", json={"slug": None})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        [error] = response.json()["error"]["details"]["errors"]
        assert error["path"] == "slug"
        assert site["alpha_page"].slug == "about"

    def test_tenant_admin_cannot_delete_super_admin(self, client_for, store, site):
        root = make_super_admin(memberships=[(site["alpha"], ["tenant-member"])], store=store)
        client = client_for(make_tenant_admin(site["alpha"]))

        response = client.delete(f"/api/users/{root.id}")

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert root in store.all("users")

    def test_delete_own_page(self, client_for, store, site):
        client = client_for(make_tenant_admin(site["alpha"]))

        response = client.delete(f"/api/pages/{site['alpha_page'].id}")

        assert response.status_code == status.HTTP_200_OK
        assert site["alpha_page"] not in store.all("pages")

    def test_create_tenant_with_template(self, client_for, store):
        client = client_for(make_super_admin())

        response = client.post("/api/tenants", json={"name": "Gamma", "template": "basic"})

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["slug"] == "gamma"
        assert {page.slug for page in store.all("pages")} == {"home", "about", "contact"}

    def test_tenant_admin_cannot_create_tenant(self, client_for, site):
        client = client_for(make_tenant_admin(site["alpha"]))

        response = client.post("/api/tenants", json={"name": "Gamma"})

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestAuthRoutes:
    def test_login(self, client_for, store):
        user = make_user(store=store, email="editor@example.com")
        user.password_hash = hash_password("correct-horse")

        response = client_for().post(
            "/auth/login", json={"email": "editor@example.com", "password": "correct-horse"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["access_token"]

    def test_me_requires_token(self, client_for):
        response = client_for().get("/auth/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_cors_preflight_allows_tenant_header() -> None:
    client = TestClient(app)

    response = client.options(
        "/api/pages",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "x-tenant-slug",
        },
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert response.headers["access-control-allow-credentials"] == "true"
