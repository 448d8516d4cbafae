"""Logging configuration helpers."""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict

# Never written to the log stream, even when passed through ``extra``.
REDACTED_FIELDS = frozenset({"api_secret", "secret", "signature", "key", "nonce"})


class JsonFormatter(logging.Formatter):
    """Emit one JSON object per record with the ``extra`` fields inlined."""

    _record_attrs = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 - logging interface name
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in self._record_attrs:
                continue
            payload[key] = "***" if key in REDACTED_FIELDS else value
        return json.dumps(payload, default=str)


def configure_logging(default_level: str = "INFO", stream=None) -> None:
    """Route the root logger to stdout as JSON, honouring ``LOG_LEVEL``."""

    level_name = os.getenv("LOG_LEVEL", default_level)
    level = getattr(logging, level_name.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(stream=stream or sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)

    # websockets logs every frame at DEBUG
    logging.getLogger("websockets").setLevel(max(level, logging.INFO))
