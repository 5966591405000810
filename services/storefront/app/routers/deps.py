from __future__ import annotations

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from services.storefront.app.db.deps import get_db
from services.storefront.app.services.backend_base import StorefrontBackend
from services.storefront.app.services.backend_factory import get_backend
from services.storefront.app.services.sessions import SessionStore


def storefront_backend() -> StorefrontBackend:
    try:
        return get_backend()
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e


def get_sessions(db: Session = Depends(get_db)) -> SessionStore:
    return SessionStore(db)


def require_token(sessions: SessionStore, client_id: str) -> str:
    token = sessions.token(client_id)
    if not token:
        raise HTTPException(status_code=401, detail="Not logged in")
    return token
