from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from services.storefront.app.services.backend_mock import MockStorefrontBackend


@pytest.fixture()
def backend() -> MockStorefrontBackend:
    return MockStorefrontBackend()


@pytest.fixture()
def client(tmp_path, monkeypatch: pytest.MonkeyPatch, backend: MockStorefrontBackend) -> TestClient:
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{tmp_path / 'catalog.db'}")

    from services.storefront.app.main import app
    from services.storefront.app.routers.deps import storefront_backend

    app.dependency_overrides[storefront_backend] = lambda: backend

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


def test_list_products(client: TestClient) -> None:
    resp = client.get("/v1/products")
    assert resp.status_code == 200
    products = resp.json()
    assert [p["slug"] for p in products][:1] == ["farm-fresh-yellow-kernels"]
    assert products[0]["ratingCount"] == 214

    limited = client.get("/v1/products", params={"limit": 2}).json()
    assert len(limited) == 2


def test_featured_and_categories(client: TestClient) -> None:
    featured = client.get("/v1/products/featured").json()
    assert {p["id"] for p in featured} == {"1", "2"}

    categories = client.get("/v1/products/categories").json()
    assert [c["key"] for c in categories] == ["kernels", "seasonings"]


def test_search_normalizes_term(client: TestClient) -> None:
    resp = client.get("/v1/products/search", params={"q": "  CARAMEL "})
    assert resp.status_code == 200
    assert [p["slug"] for p in resp.json()] == ["caramel-drizzle-pack"]


def test_blank_search_skips_backend(
    client: TestClient, backend: MockStorefrontBackend, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _fail(term: str) -> list:
        raise AssertionError("backend should not be searched")

    monkeypatch.setattr(backend, "search_products", _fail)

    resp = client.get("/v1/products/search", params={"q": "   "})
    assert resp.status_code == 200
    assert resp.json() == []


def test_get_product(client: TestClient) -> None:
    resp = client.get("/v1/products/white-butterfly-popcorn")
    assert resp.status_code == 200
    assert resp.json()["price"] == 6.49

    missing = client.get("/v1/products/nope")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Product not found"


def test_backend_outage_is_503(
    client: TestClient, backend: MockStorefrontBackend, monkeypatch: pytest.MonkeyPatch
) -> None:
    from services.storefront.app.services.backend_base import BackendUnavailableError

    def _down(limit=None) -> list:
        raise BackendUnavailableError("ConnectError: refused")

    monkeypatch.setattr(backend, "list_products", _down)

    resp = client.get("/v1/products")
    assert resp.status_code == 503
    assert "unavailable" in resp.json()["detail"]
