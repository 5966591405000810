from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from services.storefront.app.services.backend_mock import MockStorefrontBackend
from services.storefront.app.services.store import InMemoryStore
from services.storefront.app.services.submissions import SubmissionTracker


@pytest.fixture()
def backend() -> MockStorefrontBackend:
    return MockStorefrontBackend(clock=lambda: 1000.0)


@pytest.fixture()
def state() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def client(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    backend: MockStorefrontBackend,
    state: InMemoryStore,
) -> TestClient:
    db_path = tmp_path / "storefront_checkout.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("STOREFRONT_DB_AUTO_CREATE", "true")

    from services.storefront.app.main import app
    from services.storefront.app.routers.deps import storefront_backend
    from services.storefront.app.services.store import get_store

    app.dependency_overrides[storefront_backend] = lambda: backend
    app.dependency_overrides[get_store] = lambda: state

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


def _login(client: TestClient, client_id: str = "c-1") -> None:
    resp = client.post(
        "/v1/auth/login",
        json={"client_id": client_id, "email": "demo@bobscorn.com", "password": "popcorn"},
    )
    assert resp.status_code == 200


def _add(client: TestClient, product_id: str = "1", quantity: int = 2) -> dict:
    resp = client.post(
        "/v1/cart/items",
        json={
            "client_id": "c-1",
            "product_id": product_id,
            "title": "Farm-fresh Yellow Kernels",
            "unit_price": "5.99",
            "quantity": quantity,
            "options": {"size": "1lb"},
        },
    )
    assert resp.status_code == 200
    return resp.json()


def _checkout(client: TestClient, **extra: object) -> dict:
    resp = client.post("/v1/checkout", json={"client_id": "c-1", **extra})
    assert resp.status_code == 200
    return resp.json()


def test_checkout_without_login_redirects_and_keeps_cart(client: TestClient) -> None:
    cart_before = _add(client)

    data = _checkout(client, return_to="/product/caramel-drizzle-pack")

    assert data["outcome"] == "UNAUTHENTICATED"
    assert data["redirect_to"] == "/login?next=%2Fproduct%2Fcaramel-drizzle-pack"
    assert data["notice"]["severity"] == "info"
    assert data["cart"]["lines"] == cart_before["lines"]


def test_checkout_success_clears_cart_and_records_order(client: TestClient) -> None:
    _login(client)
    _add(client)

    data = _checkout(client)

    assert data["outcome"] == "SUCCESS"
    assert data["notice"] == {"severity": "success", "message": "Order placed successfully!"}
    assert data["redirect_to"] == "/orders"
    assert data["order"]["total"] == 11.98
    assert data["order"]["items"][0]["productId"] == "1"
    assert data["cart"]["lines"] == []
    assert client.get("/v1/cart", params={"client_id": "c-1"}).json()["count"] == 0

    orders = client.get("/v1/orders", params={"client_id": "c-1"})
    assert orders.status_code == 200
    assert [o["id"] for o in orders.json()] == [data["order"]["id"]]

    detail = client.get(f"/v1/orders/{data['order']['id']}", params={"client_id": "c-1"})
    assert detail.status_code == 200
    assert detail.json()["status"] == "completed"


def test_second_purchase_within_a_minute_is_rate_limited(client: TestClient) -> None:
    _login(client)
    _add(client)
    assert _checkout(client)["outcome"] == "SUCCESS"

    cart_before = _add(client, quantity=3)
    data = _checkout(client)

    assert data["outcome"] == "RATE_LIMITED"
    assert data["retry_after_seconds"] == 60
    assert data["notice"]["severity"] == "warning"
    assert "1 corn per minute" in data["notice"]["message"]
    assert data["cart"] == cart_before

    status = client.get("/v1/checkout/status", params={"client_id": "c-1"}).json()
    assert status["in_progress"] is False
    assert 0 < status["cooldown_remaining_seconds"] <= 60
    assert status["can_submit"] is False

    # Resubmission is refused locally while cooling down.
    blocked = client.post("/v1/checkout", json={"client_id": "c-1"})
    assert blocked.status_code == 429
    assert "Retry-After" in blocked.headers


def test_expired_session_is_invalidated(client: TestClient, backend: MockStorefrontBackend) -> None:
    _login(client)
    _add(client)

    from services.storefront.app.db.database import db_session
    from services.storefront.app.services.sessions import SessionStore

    db = db_session()
    try:
        token = SessionStore(db).token("c-1")
    finally:
        db.close()
    assert token
    backend.logout(token)

    data = _checkout(client)

    assert data["outcome"] == "UNAUTHENTICATED"
    assert data["redirect_to"].startswith("/login?next=")
    assert data["cart"]["count"] == 2

    me = client.get("/v1/auth/me", params={"client_id": "c-1"})
    assert me.status_code == 401


def test_backend_rejection_is_a_failure_notice(client: TestClient) -> None:
    _login(client)
    cart_before = _add(client, product_id="99")

    data = _checkout(client)

    assert data["outcome"] == "FAILURE"
    assert data["notice"] == {"severity": "error", "message": "Unknown product: 99"}
    assert data["cart"] == cart_before


def test_empty_cart_is_rejected(client: TestClient) -> None:
    _login(client)

    resp = client.post("/v1/checkout", json={"client_id": "c-1"})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Cart is empty"


def test_submission_in_flight_is_rejected(client: TestClient, state: InMemoryStore) -> None:
    _login(client)
    _add(client)
    state.submissions.begin("c-1")

    resp = client.post("/v1/checkout", json={"client_id": "c-1"})
    assert resp.status_code == 409

    status = client.get("/v1/checkout/status", params={"client_id": "c-1"}).json()
    assert status["in_progress"] is True
    assert status["can_submit"] is False


def test_orders_require_login(client: TestClient) -> None:
    resp = client.get("/v1/orders", params={"client_id": "c-1"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Not logged in"


class _ReleaseRecorder(SubmissionTracker):
    """Captures what a racing request would see once the gate opens."""

    def __init__(self, state: InMemoryStore) -> None:
        super().__init__()
        self._state = state
        self.on_release: list[tuple[int, int]] = []

    def end(self, client_id: str) -> None:
        self.on_release.append(
            (self.cooldown_remaining(client_id), self._state.cart(client_id).count)
        )
        super().end(client_id)


def test_gate_opens_only_after_outcome_is_applied(
    client: TestClient, state: InMemoryStore
) -> None:
    recorder = _ReleaseRecorder(state)
    state.submissions = recorder
    _login(client)

    _add(client)
    assert _checkout(client)["outcome"] == "SUCCESS"
    # Success: the cart was already empty when the next request could get in.
    assert recorder.on_release[-1] == (0, 0)

    _add(client, quantity=3)
    assert _checkout(client)["outcome"] == "RATE_LIMITED"
    cooldown, count = recorder.on_release[-1]
    assert cooldown > 0
    assert count == 3
