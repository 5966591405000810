from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from services.storefront.app.db.models import AuthSession
from services.storefront.app.models.auth import UserOut

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StoredSession:
    user: UserOut
    token: str


class SessionStore:
    """Auth sessions per storefront client, backed by the ``auth_sessions`` table."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def get(self, client_id: str) -> StoredSession | None:
        row = self._db.get(AuthSession, client_id)
        if row is None:
            return None
        return StoredSession(user=UserOut.model_validate(row.user_json), token=row.token)

    def token(self, client_id: str) -> str | None:
        session = self.get(client_id)
        return session.token if session else None

    def login(self, client_id: str, user: UserOut, token: str) -> StoredSession:
        user_json = user.model_dump(mode="json", by_alias=True)
        row = self._db.get(AuthSession, client_id)
        if row is None:
            self._db.add(AuthSession(client_id=client_id, user_json=user_json, token=token))
        else:
            row.user_json = user_json
            row.token = token
        self._db.commit()
        return StoredSession(user=user, token=token)

    def logout(self, client_id: str) -> None:
        self.invalidate(client_id)

    def invalidate(self, client_id: str) -> bool:
        """Drop the client's session. Returns False when there was nothing to drop."""
        row = self._db.get(AuthSession, client_id)
        if row is None:
            return False
        self._db.delete(row)
        self._db.commit()
        logger.info("session invalidated client_id=%s", client_id)
        return True
