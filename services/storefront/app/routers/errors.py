from __future__ import annotations

import logging
from typing import NoReturn

from fastapi import HTTPException

from services.storefront.app.services.backend_base import BackendError, BackendUnavailableError
from services.storefront.app.services.sessions import SessionStore

logger = logging.getLogger(__name__)


def raise_backend_http_error(
    e: Exception,
    *,
    sessions: SessionStore | None = None,
    client_id: str | None = None,
) -> NoReturn:
    if isinstance(e, BackendUnavailableError):
        raise HTTPException(status_code=503, detail=e.message) from e

    if isinstance(e, BackendError):
        if e.status_code == 401 and sessions is not None and client_id:
            sessions.invalidate(client_id)

        # Backend 5xx are upstream failures from the storefront's point of view.
        status = e.status_code if 400 <= e.status_code < 500 else 502
        raise HTTPException(status_code=status, detail=e.message) from e

    logger.exception("unexpected backend failure")
    raise HTTPException(status_code=500, detail="Internal Server Error") from e
