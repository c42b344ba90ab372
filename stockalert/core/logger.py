"""Process-wide logging setup.

Manager links carry the shared key in the query string, so every handler
installed here masks ``key=`` values before a line is written.
"""
from __future__ import annotations

import json
import logging
import re
import sys
from typing import Any

from stockalert.core.config import BaseAppSettings, settings

PLAIN_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}
_SECRET_QUERY = re.compile(r"([?&](?:key|password)=)[^&\s\"']+", re.IGNORECASE)


def redact(text: str) -> str:
    return _SECRET_QUERY.sub(r"\1***", text)


class RedactSecretsFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        rendered = record.getMessage()
        masked = redact(rendered)
        if masked != rendered:
            record.msg = masked
            record.args = None
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line; ``extra=`` fields are nested under ``extra``."""

    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - formatting logic
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        extra = {
            key: value
            for key, value in record.__dict__.items()
            if not key.startswith("_") and key not in _STANDARD_ATTRS and key not in payload
        }
        if extra:
            payload["extra"] = extra
        return json.dumps(payload, default=str)


def init_logging(app_settings: BaseAppSettings | None = None, level: int | None = None) -> None:
    root = logging.getLogger()
    if root.handlers:
        return
    app_settings = app_settings or settings
    handler = logging.StreamHandler(sys.stdout)
    if app_settings.LOG_FORMAT.lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    handler.addFilter(RedactSecretsFilter())
    root.setLevel(level or getattr(logging, app_settings.LOG_LEVEL.upper(), logging.INFO))
    root.addHandler(handler)
    # uvicorn's access log prints full request lines, query string included
    logging.getLogger("uvicorn.access").addFilter(RedactSecretsFilter())
