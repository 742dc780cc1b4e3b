from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from ..settings import settings


class JsonFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        # extra= attributes set by the provider clients
        for key in ("provider", "uri", "status_code", "elapsed_ms"):
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        return json.dumps(payload, separators=(",", ":"))


def configure_logging(fmt: str | None = None, level: str | None = None) -> None:
    """Configure the root logger with plain text or JSON output.

    Args:
        fmt: 'json' or 'text'. Defaults to ``settings.LOG_FORMAT``.
        level: log level name. Defaults to ``settings.LOG_LEVEL``.
    """

    fmt = (fmt or settings.LOG_FORMAT).lower()
    root = logging.getLogger()
    root.setLevel((level or settings.LOG_LEVEL).upper())

    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s")
        )
    root.addHandler(handler)
