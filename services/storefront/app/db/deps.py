from __future__ import annotations

from collections.abc import Generator

from sqlalchemy.orm import Session

from services.storefront.app.db.database import db_session


def get_db() -> Generator[Session, None, None]:
    db = db_session()
    try:
        yield db
    finally:
        db.close()
