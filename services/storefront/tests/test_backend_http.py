from __future__ import annotations

import json

import httpx
import pytest
from services.storefront.app.models.order import PurchaseItem, PurchaseRequest
from services.storefront.app.services.backend_base import BackendError, BackendUnavailableError
from services.storefront.app.services.backend_http import HttpStorefrontBackend


def _backend(handler) -> HttpStorefrontBackend:
    return HttpStorefrontBackend(
        "http://shop.test/api", transport=httpx.MockTransport(handler)
    )


def _request() -> PurchaseRequest:
    return PurchaseRequest(items=[PurchaseItem(product_id="1", quantity=2)])


def test_purchase_posts_minimal_payload_with_bearer_token() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200, json={"order": {"id": "o1", "total": 11.98, "status": "completed", "items": []}}
        )

    response = _backend(handler).purchase("tok-1", _request())

    assert response.status_code == 200
    assert response.body["order"]["id"] == "o1"

    sent = seen[0]
    assert sent.method == "POST"
    assert sent.url.path == "/api/orders/purchase"
    assert sent.headers["authorization"] == "Bearer tok-1"
    assert sent.headers["content-type"] == "application/json"
    assert json.loads(sent.content) == {"items": [{"productId": "1", "quantity": 2}]}


def test_purchase_returns_rate_limit_response_unchanged() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            429,
            json={"error": "Too Many Requests", "message": "wait", "retryAfter": 60},
            headers={"Retry-After": "60"},
        )

    response = _backend(handler).purchase("tok-1", _request())

    assert response.status_code == 429
    assert response.body["retryAfter"] == 60
    assert response.headers["retry-after"] == "60"


def test_transport_failure_raises_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(BackendUnavailableError):
        _backend(handler).purchase("tok-1", _request())


def test_error_message_prefers_error_field() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "Invalid credentials", "message": "nope"})

    with pytest.raises(BackendError) as excinfo:
        _backend(handler).login("demo@bobscorn.com", "popcorn")

    assert excinfo.value.status_code == 401
    assert excinfo.value.message == "Invalid credentials"


def test_error_message_falls_back_to_reason_phrase() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="")

    with pytest.raises(BackendError) as excinfo:
        _backend(handler).get_product("nope")

    assert excinfo.value.message == "Not Found"


def test_login_parses_user_and_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert json.loads(request.content) == {"email": "demo@bobscorn.com", "password": "popcorn"}
        return httpx.Response(
            200,
            json={"user": {"id": "u1", "name": "Demo", "email": "demo@bobscorn.com"}, "token": "t"},
        )

    result = _backend(handler).login("demo@bobscorn.com", "popcorn")

    assert result.token == "t"
    assert result.user.name == "Demo"


def test_catalog_queries() -> None:
    product = {"id": "1", "slug": "farm-fresh-yellow-kernels", "title": "Kernels", "price": 5.99}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/products/search":
            assert request.url.params["q"] == "kernel"
            return httpx.Response(200, json=[product])
        if request.url.path == "/api/products":
            assert request.url.params["limit"] == "2"
            return httpx.Response(200, json=[product, product])
        return httpx.Response(404, json={"error": "Not found"})

    backend = _backend(handler)

    assert [p.slug for p in backend.search_products("kernel")] == ["farm-fresh-yellow-kernels"]
    assert len(backend.list_products(limit=2)) == 2


def test_orders_are_fetched_with_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["authorization"] == "Bearer tok-1"
        return httpx.Response(
            200,
            json=[
                {
                    "id": "o1",
                    "total": 5.99,
                    "status": "paid",
                    "items": [{"productId": "1", "title": "Kernels", "price": 5.99, "quantity": 1}],
                }
            ],
        )

    orders = _backend(handler).list_orders("tok-1")

    assert orders[0].id == "o1"
    assert orders[0].items[0].product_id == "1"
