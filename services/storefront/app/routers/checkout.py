from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException
from packages.shared.schemas.notice_v1 import CheckoutOutcomeV1, NoticeSeverityV1, NoticeV1

from services.storefront.app.constants import (
    LOGIN_PATH,
    MSG_LOGIN_REQUIRED,
    MSG_ORDER_PLACED,
    MSG_RATE_LIMITED,
    ORDERS_PATH,
)
from services.storefront.app.models.auth import safe_return_to
from services.storefront.app.models.cart import cart_view
from services.storefront.app.models.order import CheckoutRequest, CheckoutResponse, CheckoutStatus
from services.storefront.app.routers.deps import get_sessions, storefront_backend
from services.storefront.app.services.backend_base import StorefrontBackend
from services.storefront.app.services.purchase import (
    Failure,
    PurchaseOutcome,
    RateLimited,
    Success,
    Unauthenticated,
    submit_purchase,
)
from services.storefront.app.services.sessions import SessionStore
from services.storefront.app.services.store import InMemoryStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/v1/checkout/status", response_model=CheckoutStatus)
def checkout_status(client_id: str, state: InMemoryStore = Depends(get_store)) -> CheckoutStatus:
    in_progress = state.submissions.in_progress(client_id)
    remaining = state.submissions.cooldown_remaining(client_id)
    return CheckoutStatus(
        in_progress=in_progress,
        cooldown_remaining_seconds=remaining,
        can_submit=not in_progress and remaining == 0 and not state.cart(client_id).is_empty,
    )


@router.post("/v1/checkout", response_model=CheckoutResponse)
def checkout(
    payload: CheckoutRequest,
    backend: StorefrontBackend = Depends(storefront_backend),
    sessions: SessionStore = Depends(get_sessions),
    state: InMemoryStore = Depends(get_store),
) -> CheckoutResponse:
    client_id = payload.client_id
    cart = state.cart(client_id)

    if cart.is_empty:
        raise HTTPException(status_code=400, detail="Cart is empty")

    remaining = state.submissions.cooldown_remaining(client_id)
    if remaining > 0:
        raise HTTPException(
            status_code=429, detail=MSG_RATE_LIMITED, headers={"Retry-After": str(remaining)}
        )

    if not state.submissions.begin(client_id):
        raise HTTPException(status_code=409, detail="A purchase is already in progress")

    # The gate stays closed until the cooldown is set or the cart is cleared.
    try:
        outcome = submit_purchase(
            cart.lines(),
            sessions.token(client_id),
            backend=backend,
            on_unauthenticated=lambda: sessions.invalidate(client_id),
            shipping_address=payload.shipping_address,
            save_address=payload.save_address,
        )
        assert outcome is not None  # cart was checked above
        return _respond(payload, outcome, state)
    finally:
        state.submissions.end(client_id)


def _respond(
    payload: CheckoutRequest, outcome: PurchaseOutcome, state: InMemoryStore
) -> CheckoutResponse:
    client_id = payload.client_id
    cart = state.cart(client_id)

    if isinstance(outcome, Success):
        cart.clear()
        logger.info("order placed client_id=%s order_id=%s", client_id, outcome.order_id)
        return CheckoutResponse(
            outcome=CheckoutOutcomeV1.SUCCESS,
            notice=NoticeV1(severity=NoticeSeverityV1.SUCCESS, message=MSG_ORDER_PLACED),
            order=outcome.order,
            redirect_to=ORDERS_PATH,
            cart=cart_view(client_id, cart),
        )

    if isinstance(outcome, Unauthenticated):
        next_target = quote(safe_return_to(payload.return_to), safe="")
        return CheckoutResponse(
            outcome=CheckoutOutcomeV1.UNAUTHENTICATED,
            notice=NoticeV1(severity=NoticeSeverityV1.INFO, message=MSG_LOGIN_REQUIRED),
            redirect_to=f"{LOGIN_PATH}?next={next_target}",
            cart=cart_view(client_id, cart),
        )

    if isinstance(outcome, RateLimited):
        cooldown = state.submissions.start_cooldown(client_id, outcome.retry_after_seconds)
        logger.info("purchase rate limited client_id=%s cooldown=%ss", client_id, cooldown)
        return CheckoutResponse(
            outcome=CheckoutOutcomeV1.RATE_LIMITED,
            notice=NoticeV1(severity=NoticeSeverityV1.WARNING, message=MSG_RATE_LIMITED),
            retry_after_seconds=outcome.retry_after_seconds,
            cart=cart_view(client_id, cart),
        )

    assert isinstance(outcome, Failure)
    return CheckoutResponse(
        outcome=CheckoutOutcomeV1.FAILURE,
        notice=NoticeV1(severity=NoticeSeverityV1.ERROR, message=outcome.message),
        cart=cart_view(client_id, cart),
    )
