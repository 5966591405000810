"""Purchase submission flow.

``submit_purchase`` is the single entry point the storefront uses to turn a cart
snapshot into an order. It never raises for backend answers: every attempt is
classified into one of four outcomes at this boundary.

The shop backend enforces one purchase per customer per minute and answers 429 when
the limit is hit. That answer is surfaced as ``RateLimited`` and is never retried
here; the wait is meant to be human-paced.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Union

from packages.shared.schemas.order_v1 import OrderV1
from pydantic import ValidationError

from services.storefront.app.constants import MSG_ORDER_FAILED
from services.storefront.app.models.order import PurchaseItem, PurchaseRequest
from services.storefront.app.services.backend_base import (
    BackendResponse,
    BackendUnavailableError,
    StorefrontBackend,
)
from services.storefront.app.services.cart import CartLine

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Success:
    order_id: str
    total: Decimal
    status: str
    order: OrderV1


@dataclass(frozen=True, slots=True)
class Unauthenticated:
    pass


@dataclass(frozen=True, slots=True)
class RateLimited:
    retry_after_seconds: int | None = None


@dataclass(frozen=True, slots=True)
class Failure:
    message: str


PurchaseOutcome = Union[Success, Unauthenticated, RateLimited, Failure]


def build_purchase_request(
    cart: Sequence[CartLine],
    *,
    shipping_address: Mapping[str, Any] | None = None,
    save_address: bool | None = None,
) -> PurchaseRequest:
    return PurchaseRequest(
        items=[PurchaseItem(product_id=line.product_id, quantity=line.quantity) for line in cart],
        shipping_address=dict(shipping_address) if shipping_address is not None else None,
        save_address=save_address,
    )


def submit_purchase(
    cart: Sequence[CartLine],
    session_token: str | None,
    *,
    backend: StorefrontBackend,
    on_unauthenticated: Callable[[], object] | None = None,
    shipping_address: Mapping[str, Any] | None = None,
    save_address: bool | None = None,
) -> PurchaseOutcome | None:
    """Submit the cart snapshot as a purchase.

    Returns ``None`` for an empty cart (nothing is sent). Returns ``Unauthenticated``
    without a network call when there is no session token. Otherwise exactly one
    request is sent and its response classified.

    ``on_unauthenticated`` runs when the backend rejects the token with 401. It is the
    only side effect besides the request itself; clearing the cart on ``Success`` is
    left to the caller.
    """

    if not cart:
        return None

    if not session_token:
        return Unauthenticated()

    request = build_purchase_request(
        cart, shipping_address=shipping_address, save_address=save_address
    )

    try:
        response = backend.purchase(session_token, request)
    except BackendUnavailableError as e:
        logger.warning("purchase request failed in transport: %s", e)
        return Failure(MSG_ORDER_FAILED)

    outcome = classify_purchase_response(response)

    if isinstance(outcome, Unauthenticated) and on_unauthenticated is not None:
        on_unauthenticated()

    logger.info(
        "purchase classified status=%s outcome=%s lines=%d",
        response.status_code,
        type(outcome).__name__,
        len(request.items),
    )
    return outcome


def classify_purchase_response(response: BackendResponse) -> PurchaseOutcome:
    status = response.status_code
    body = response.body if isinstance(response.body, dict) else {}

    if response.ok:
        return _success_from_body(body)

    if status == 401:
        return Unauthenticated()

    if status == 429:
        retry_after = _parse_retry_after(body.get("retryAfter"))
        if retry_after is None:
            retry_after = _parse_retry_after(_header(response.headers, "retry-after"))
        return RateLimited(retry_after_seconds=retry_after)

    return Failure(_failure_message(body))


def _success_from_body(body: dict[str, Any]) -> PurchaseOutcome:
    raw_order = body.get("order")
    if not isinstance(raw_order, dict):
        logger.warning("purchase succeeded without an order payload")
        return Failure(MSG_ORDER_FAILED)

    try:
        order = OrderV1.model_validate(raw_order)
        total = Decimal(str(order.total))
    except (ValidationError, InvalidOperation) as e:
        logger.warning("purchase succeeded with an unreadable order payload: %s", e)
        return Failure(MSG_ORDER_FAILED)

    return Success(order_id=order.id, total=total, status=order.status, order=order)


def _failure_message(body: dict[str, Any]) -> str:
    for key in ("message", "error"):
        value = body.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return MSG_ORDER_FAILED


def _parse_retry_after(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        seconds = int(float(str(value).strip()))
    except (ValueError, OverflowError):
        return None
    return seconds if seconds >= 0 else None


def _header(headers: Mapping[str, str], name: str) -> str | None:
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None
