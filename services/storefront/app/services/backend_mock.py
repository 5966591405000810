from __future__ import annotations

import threading
import time
from collections.abc import Callable
from decimal import Decimal
from uuid import uuid4

from packages.shared.schemas.order_v1 import OrderItemV1, OrderV1
from packages.shared.schemas.product_v1 import CategoryV1, ProductV1

from services.storefront.app.constants import RATE_LIMIT_MAX_PURCHASES, RATE_LIMIT_WINDOW_SECONDS
from services.storefront.app.models.auth import UserOut
from services.storefront.app.models.order import PurchaseRequest
from services.storefront.app.services.backend_base import (
    AuthResult,
    BackendError,
    BackendResponse,
)
from services.storefront.app.services.cart import round_money

_PRODUCTS = [
    {
        "id": "1",
        "slug": "farm-fresh-yellow-kernels",
        "title": "Farm-fresh Yellow Kernels",
        "subtitle": "Classic movie-night perfection",
        "price": 5.99,
        "rating": 4.5,
        "ratingCount": 214,
        "tags": ["Best Seller"],
        "images": ["/images/kernels-yellow-1.jpg", "/images/kernels-yellow-2.jpg"],
        "options": [
            {
                "id": "size",
                "name": "Size",
                "values": [
                    {"id": "1lb", "label": "1 lb"},
                    {"id": "2lb", "label": "2 lb"},
                    {"id": "5lb", "label": "5 lb"},
                ],
            }
        ],
        "description": "Bright, fluffy kernels packaged at peak freshness.",
        "badges": ["Non-GMO", "Gluten-Free", "Small-Batch"],
        "category": "kernels",
        "featured": True,
    },
    {
        "id": "2",
        "slug": "white-butterfly-popcorn",
        "title": "White Butterfly Popcorn",
        "subtitle": "Tender & light for extra crunch",
        "price": 6.49,
        "rating": 4.0,
        "ratingCount": 134,
        "tags": ["New"],
        "images": ["/images/kernels-white-1.jpg"],
        "description": "A delicate pop, perfect for seasonings and sweet coatings.",
        "badges": ["Vegan", "Air-pop friendly"],
        "category": "kernels",
        "featured": True,
    },
    {
        "id": "3",
        "slug": "caramel-drizzle-pack",
        "title": "Caramel Drizzle Pack",
        "subtitle": "Sweet, glossy, irresistible",
        "price": 12.99,
        "rating": 4.5,
        "ratingCount": 89,
        "tags": ["Limited"],
        "images": ["/images/caramel-1.jpg"],
        "description": "Everything you need for a quick caramel upgrade at home.",
        "category": "seasonings",
        "featured": False,
    },
]

_CATEGORIES = [
    {"key": "kernels", "title": "Kernels", "subtitle": "Yellow, white & heirloom"},
    {"key": "seasonings", "title": "Seasonings", "subtitle": "Sweet & savory toppings"},
]


class MockStorefrontBackend:
    """Deterministic in-process shop backend for tests and local dev.

    Mirrors the real backend's contract, including the one-purchase-per-minute limit
    per customer (answered with 429 and a ``retryAfter`` hint).
    """

    vendor = "MOCK"

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._products = [ProductV1.model_validate(p) for p in _PRODUCTS]
        self._users: dict[str, dict[str, str]] = {}
        self._tokens: dict[str, str] = {}
        self._orders: dict[str, list[OrderV1]] = {}
        self._purchase_times: dict[str, list[float]] = {}

        self._add_user(name="Demo Customer", email="demo@bobscorn.com", password="popcorn")

    # --- orders ---

    def purchase(self, token: str, request: PurchaseRequest) -> BackendResponse:
        with self._lock:
            email = self._tokens.get(token)
            if email is None:
                return BackendResponse(
                    status_code=401,
                    body={"error": "Unauthorized", "message": "Invalid or expired session"},
                )

            now = self._clock()
            recent = [
                t for t in self._purchase_times.get(email, []) if now - t < RATE_LIMIT_WINDOW_SECONDS
            ]
            self._purchase_times[email] = recent
            if len(recent) >= RATE_LIMIT_MAX_PURCHASES:
                retry_after = int(RATE_LIMIT_WINDOW_SECONDS - (now - recent[0])) or 1
                return BackendResponse(
                    status_code=429,
                    body={
                        "error": "Too Many Requests",
                        "message": "You can only buy 1 corn per minute. "
                        "Please wait before purchasing again.",
                        "retryAfter": retry_after,
                    },
                    headers={"Retry-After": str(retry_after)},
                )

            by_id = {p.id: p for p in self._products}
            items: list[OrderItemV1] = []
            total = Decimal("0")
            for item in request.items:
                product = by_id.get(item.product_id)
                if product is None:
                    return BackendResponse(
                        status_code=400,
                        body={
                            "error": "Bad Request",
                            "message": f"Unknown product: {item.product_id}",
                        },
                    )
                total += Decimal(str(product.price)) * item.quantity
                items.append(
                    OrderItemV1(
                        product_id=product.id,
                        slug=product.slug,
                        title=product.title,
                        price=product.price,
                        quantity=item.quantity,
                    )
                )

            order = OrderV1(
                id=f"ord_{uuid4().hex[:10]}",
                total=float(round_money(total)),
                status="completed",
                shipping_address=request.shipping_address,
                items=items,
            )
            self._orders.setdefault(email, []).insert(0, order)
            recent.append(now)

        return BackendResponse(status_code=200, body={"order": order.model_dump(by_alias=True)})

    def list_orders(self, token: str) -> list[OrderV1]:
        with self._lock:
            email = self._require_email(token)
            return list(self._orders.get(email, []))

    def get_order(self, token: str, order_id: str) -> OrderV1:
        with self._lock:
            email = self._require_email(token)
            for order in self._orders.get(email, []):
                if order.id == order_id:
                    return order
        raise BackendError(status_code=404, message="Order not found")

    # --- catalog ---

    def list_products(self, limit: int | None = None) -> list[ProductV1]:
        products = list(self._products)
        return products[:limit] if limit is not None else products

    def get_product(self, slug: str) -> ProductV1:
        for product in self._products:
            if product.slug == slug:
                return product
        raise BackendError(status_code=404, message="Product not found")

    def search_products(self, term: str) -> list[ProductV1]:
        q = term.strip().lower()
        return [
            p
            for p in self._products
            if q in p.title.lower() or q in p.description.lower() or q in p.slug
        ]

    def featured_products(self) -> list[ProductV1]:
        return [p for p in self._products if getattr(p, "featured", False)]

    def categories(self) -> list[CategoryV1]:
        return [CategoryV1.model_validate(c) for c in _CATEGORIES]

    # --- auth ---

    def login(self, email: str, password: str) -> AuthResult:
        with self._lock:
            user = self._users.get(email.lower())
            if user is None or user["password"] != password:
                raise BackendError(status_code=401, message="Invalid email or password")
            return self._issue_token(user)

    def signup(self, name: str | None, email: str, password: str) -> AuthResult:
        with self._lock:
            if email.lower() in self._users:
                raise BackendError(status_code=409, message="Email already registered")
            user = self._add_user(name=name or email.split("@")[0], email=email, password=password)
            return self._issue_token(user)

    def logout(self, token: str) -> None:
        with self._lock:
            self._tokens.pop(token, None)

    def me(self, token: str) -> UserOut:
        with self._lock:
            email = self._require_email(token)
            return _user_out(self._users[email])

    # --- helpers ---

    def _add_user(self, *, name: str, email: str, password: str) -> dict[str, str]:
        user = {"id": uuid4().hex[:8], "name": name, "email": email.lower(), "password": password}
        self._users[user["email"]] = user
        return user

    def _issue_token(self, user: dict[str, str]) -> AuthResult:
        token = uuid4().hex
        self._tokens[token] = user["email"]
        return AuthResult(user=_user_out(user), token=token)

    def _require_email(self, token: str) -> str:
        # Callers hold self._lock.
        email = self._tokens.get(token)
        if email is None:
            raise BackendError(status_code=401, message="Unauthorized")
        return email


def _user_out(user: dict[str, str]) -> UserOut:
    return UserOut(id=user["id"], name=user["name"], email=user["email"])
