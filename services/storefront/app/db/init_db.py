from __future__ import annotations

import logging
import os

from services.storefront.app.db.database import get_engine
from services.storefront.app.db.models import Base

logger = logging.getLogger(__name__)


def init_db() -> None:
    flag = os.getenv("STOREFRONT_DB_AUTO_CREATE", "true").strip().lower()
    if flag not in {"1", "true", "yes", "y"}:
        logger.info("skipping table creation (STOREFRONT_DB_AUTO_CREATE=%s)", flag)
        return

    engine = get_engine()
    Base.metadata.create_all(bind=engine)
