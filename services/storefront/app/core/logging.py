from __future__ import annotations

import json
import logging
import os

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_logging(level: str | None = None, fmt: str | None = None) -> logging.Handler:
    """Route storefront and uvicorn logs through a single stderr handler.

    ``LOG_LEVEL`` (default INFO) and ``LOG_FORMAT`` (``text`` or ``json``) apply when
    the arguments are omitted. Calling it again replaces the previous handler.
    """
    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    use_json = (fmt or os.getenv("LOG_FORMAT") or "text").lower() == "json"

    handler = logging.StreamHandler()
    handler.setFormatter(JsonLineFormatter() if use_json else logging.Formatter(TEXT_FORMAT))

    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(numeric_level)

    for name in ("uvicorn", "uvicorn.access"):
        logging.getLogger(name).handlers = [handler]
    return handler
