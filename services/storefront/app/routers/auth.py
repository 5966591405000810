from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from services.storefront.app.models.auth import (
    AuthResponse,
    LoginRequest,
    LogoutRequest,
    SignupRequest,
    UserOut,
    safe_return_to,
)
from services.storefront.app.routers.deps import get_sessions, require_token, storefront_backend
from services.storefront.app.routers.errors import raise_backend_http_error
from services.storefront.app.services.backend_base import BackendError, StorefrontBackend
from services.storefront.app.services.sessions import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/v1/auth/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    backend: StorefrontBackend = Depends(storefront_backend),
    sessions: SessionStore = Depends(get_sessions),
) -> AuthResponse:
    try:
        result = backend.login(payload.email, payload.password)
    except Exception as e:
        raise_backend_http_error(e, sessions=sessions, client_id=payload.client_id)

    sessions.login(payload.client_id, result.user, result.token)
    return AuthResponse(user=result.user, redirect_to=safe_return_to(payload.next))


@router.post("/v1/auth/signup", response_model=AuthResponse)
def signup(
    payload: SignupRequest,
    backend: StorefrontBackend = Depends(storefront_backend),
    sessions: SessionStore = Depends(get_sessions),
) -> AuthResponse:
    try:
        result = backend.signup(payload.name, payload.email, payload.password)
    except Exception as e:
        raise_backend_http_error(e, sessions=sessions, client_id=payload.client_id)

    # Signing up logs the customer in right away.
    sessions.login(payload.client_id, result.user, result.token)
    return AuthResponse(user=result.user, redirect_to=safe_return_to(payload.next))


@router.post("/v1/auth/logout")
def logout(
    payload: LogoutRequest,
    backend: StorefrontBackend = Depends(storefront_backend),
    sessions: SessionStore = Depends(get_sessions),
) -> dict:
    token = sessions.token(payload.client_id)
    if token:
        try:
            backend.logout(token)
        except BackendError as e:
            # The local session is cleared regardless.
            logger.warning("backend logout failed status=%s: %s", e.status_code, e.message)

    sessions.logout(payload.client_id)
    return {"success": True}


@router.get("/v1/auth/me", response_model=UserOut)
def me(
    client_id: str,
    backend: StorefrontBackend = Depends(storefront_backend),
    sessions: SessionStore = Depends(get_sessions),
) -> UserOut:
    token = require_token(sessions, client_id)
    try:
        return backend.me(token)
    except Exception as e:
        raise_backend_http_error(e, sessions=sessions, client_id=client_id)
