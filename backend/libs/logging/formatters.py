"""
JSON formatter for structured logging.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, UTC
from typing import Any

from libs.logging.context import CONTEXT_FIELDS

# Attributes every LogRecord carries; anything else came in via extra={...}
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    """
    Render log records as one JSON object per line.

    Fields: timestamp, level, logger, message, the non-empty context IDs,
    exception details and any extra fields passed by the caller.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value:
                log_data[name] = value

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            log_data["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": self.formatException(record.exc_info),
            }

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in CONTEXT_FIELDS or key.startswith("_"):
                continue
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        return json.dumps(log_data, ensure_ascii=False)
