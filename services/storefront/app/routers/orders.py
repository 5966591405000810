from __future__ import annotations

from fastapi import APIRouter, Depends
from packages.shared.schemas.order_v1 import OrderV1

from services.storefront.app.routers.deps import get_sessions, require_token, storefront_backend
from services.storefront.app.routers.errors import raise_backend_http_error
from services.storefront.app.services.backend_base import StorefrontBackend
from services.storefront.app.services.sessions import SessionStore

router = APIRouter()


@router.get("/v1/orders", response_model=list[OrderV1])
def list_orders(
    client_id: str,
    backend: StorefrontBackend = Depends(storefront_backend),
    sessions: SessionStore = Depends(get_sessions),
) -> list[OrderV1]:
    token = require_token(sessions, client_id)
    try:
        return backend.list_orders(token)
    except Exception as e:
        raise_backend_http_error(e, sessions=sessions, client_id=client_id)


@router.get("/v1/orders/{order_id}", response_model=OrderV1)
def get_order(
    order_id: str,
    client_id: str,
    backend: StorefrontBackend = Depends(storefront_backend),
    sessions: SessionStore = Depends(get_sessions),
) -> OrderV1:
    token = require_token(sessions, client_id)
    try:
        return backend.get_order(token, order_id)
    except Exception as e:
        raise_backend_http_error(e, sessions=sessions, client_id=client_id)
