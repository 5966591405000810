from __future__ import annotations

import json
import logging
from http import HTTPStatus
from typing import Any
from urllib.parse import quote

import httpx
from packages.shared.schemas.order_v1 import OrderV1
from packages.shared.schemas.product_v1 import CategoryV1, ProductV1

from services.storefront.app.models.auth import UserOut
from services.storefront.app.models.order import PurchaseRequest
from services.storefront.app.services.backend_base import (
    AuthResult,
    BackendError,
    BackendResponse,
    BackendUnavailableError,
    error_message,
)

logger = logging.getLogger(__name__)


class HttpStorefrontBackend:
    """Shop backend reached over its REST API.

    Env vars:
    - STOREFRONT_BACKEND=http
    - STOREFRONT_API_BASE (default: http://localhost:4000/api)

    Requests use httpx's default timeout. Nothing is retried.
    """

    vendor = "HTTP"

    def __init__(self, base_url: str, *, transport: httpx.BaseTransport | None = None) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(base_url=self._base_url, transport=transport)

    def close(self) -> None:
        self._client.close()

    # --- orders ---

    def purchase(self, token: str, request: PurchaseRequest) -> BackendResponse:
        return self._send("POST", "/orders/purchase", token=token, body=request.to_wire())

    def list_orders(self, token: str) -> list[OrderV1]:
        data = self._call("GET", "/orders", token=token)
        return [OrderV1.model_validate(o) for o in data or []]

    def get_order(self, token: str, order_id: str) -> OrderV1:
        data = self._call("GET", f"/orders/{quote(order_id, safe='')}", token=token)
        return OrderV1.model_validate(data)

    # --- catalog ---

    def list_products(self, limit: int | None = None) -> list[ProductV1]:
        params = {"limit": limit} if limit is not None else None
        data = self._call("GET", "/products", params=params)
        return [ProductV1.model_validate(p) for p in data or []]

    def get_product(self, slug: str) -> ProductV1:
        data = self._call("GET", f"/products/{quote(slug, safe='')}")
        return ProductV1.model_validate(data)

    def search_products(self, term: str) -> list[ProductV1]:
        data = self._call("GET", "/products/search", params={"q": term})
        return [ProductV1.model_validate(p) for p in data or []]

    def featured_products(self) -> list[ProductV1]:
        data = self._call("GET", "/products/featured")
        return [ProductV1.model_validate(p) for p in data or []]

    def categories(self) -> list[CategoryV1]:
        data = self._call("GET", "/products/categories")
        return [CategoryV1.model_validate(c) for c in data or []]

    # --- auth ---

    def login(self, email: str, password: str) -> AuthResult:
        data = self._call("POST", "/auth/login", body={"email": email, "password": password})
        return _auth_result(data)

    def signup(self, name: str | None, email: str, password: str) -> AuthResult:
        body: dict[str, Any] = {"email": email, "password": password}
        if name:
            body["name"] = name
        data = self._call("POST", "/auth/signup", body=body)
        return _auth_result(data)

    def logout(self, token: str) -> None:
        self._call("POST", "/auth/logout", token=token, body={})

    def me(self, token: str) -> UserOut:
        data = self._call("GET", "/auth/me", token=token)
        return UserOut.model_validate(data)

    # --- transport ---

    def _call(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        response = self._send(method, path, token=token, body=body, params=params)
        if not response.ok:
            fallback = _reason_phrase(response.status_code)
            raise BackendError(
                status_code=response.status_code,
                message=error_message(response.body, fallback),
                data=response.body,
            )
        return response.body

    def _send(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> BackendResponse:
        headers: dict[str, str] = {}
        content: bytes | None = None
        if body is not None:
            headers["Content-Type"] = "application/json"
            content = json.dumps(body).encode("utf-8")
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            r = self._client.request(method, path, headers=headers, content=content, params=params)
        except httpx.TransportError as e:
            logger.warning("%s %s failed: %s", method, path, type(e).__name__)
            raise BackendUnavailableError(f"{type(e).__name__}: {e}") from e

        logger.debug("%s %s -> %s", method, path, r.status_code)
        return BackendResponse(
            status_code=r.status_code,
            body=_parse_body(r.text),
            headers=dict(r.headers),
        )


def _parse_body(text: str) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def _reason_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return f"HTTP {status_code}"


def _auth_result(data: Any) -> AuthResult:
    if not isinstance(data, dict) or "token" not in data or "user" not in data:
        raise BackendError(status_code=502, message="Malformed auth response", data=data)
    return AuthResult(user=UserOut.model_validate(data["user"]), token=str(data["token"]))
