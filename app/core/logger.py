from __future__ import annotations

import json
import logging
import sys
from typing import Any

from app.core.config import settings

# Attributes every LogRecord carries; anything else came in through `extra=`.
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()) | {"message", "asctime"}

# Receipt context the pipeline attaches through `extra=`; promoted to top-level JSON keys.
RECEIPT_FIELDS = ("transaction_id", "pipeline_state", "failure_kind")

PLAIN_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | tx=%(transaction_id)s | %(message)s"


class ReceiptContextFilter(logging.Filter):
    """Give every record the receipt fields so format strings never KeyError."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name in RECEIPT_FIELDS:
            if not hasattr(record, name):
                setattr(record, name, None)
        if record.transaction_id is None:
            record.transaction_id = "-"
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in RECEIPT_FIELDS:
            value = getattr(record, name, None)
            if value not in (None, "-"):
                payload[name] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key.startswith("_") or key in _RESERVED_ATTRS or key in RECEIPT_FIELDS or key in payload:
                continue
            payload.setdefault("extra", {})[key] = value
        return json.dumps(payload, default=str)


def build_handler(log_format: str | None = None) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if (log_format or settings.LOG_FORMAT).lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    handler.addFilter(ReceiptContextFilter())
    return handler


def init_logging(level: int | None = None) -> None:
    if logging.getLogger().handlers:
        return
    effective_level = level or getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(effective_level)
    root.addHandler(build_handler())
