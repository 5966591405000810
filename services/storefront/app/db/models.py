from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class AuthSession(Base):
    """The signed-in customer for one storefront client (browser session)."""

    __tablename__ = "auth_sessions"

    client_id: Mapped[str] = mapped_column(String, primary_key=True)
    user_json: Mapped[dict] = mapped_column(JSON, nullable=False)
    token: Mapped[str] = mapped_column(String, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )
