from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from packages.shared.schemas.order_v1 import OrderV1
from packages.shared.schemas.product_v1 import CategoryV1, ProductV1
from services.storefront.app.models.auth import UserOut
from services.storefront.app.models.order import PurchaseRequest


class BackendError(Exception):
    """A non-2xx answer from the shop backend."""

    def __init__(self, status_code: int, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.data = data


class BackendUnavailableError(BackendError):
    """The backend could not be reached (DNS, connect, timeout)."""

    def __init__(self, reason: str) -> None:
        super().__init__(status_code=503, message=f"Shop backend unavailable: {reason}")


@dataclass(frozen=True, slots=True)
class BackendResponse:
    status_code: int
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass(frozen=True, slots=True)
class AuthResult:
    user: UserOut
    token: str


def error_message(body: Any, fallback: str) -> str:
    if isinstance(body, dict):
        for key in ("error", "message"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return fallback


class StorefrontBackend(Protocol):
    vendor: str

    def purchase(self, token: str, request: PurchaseRequest) -> BackendResponse: ...

    def list_products(self, limit: int | None = None) -> list[ProductV1]: ...

    def get_product(self, slug: str) -> ProductV1: ...

    def search_products(self, term: str) -> list[ProductV1]: ...

    def featured_products(self) -> list[ProductV1]: ...

    def categories(self) -> list[CategoryV1]: ...

    def login(self, email: str, password: str) -> AuthResult: ...

    def signup(self, name: str | None, email: str, password: str) -> AuthResult: ...

    def logout(self, token: str) -> None: ...

    def me(self, token: str) -> UserOut: ...

    def list_orders(self, token: str) -> list[OrderV1]: ...

    def get_order(self, token: str, order_id: str) -> OrderV1: ...
