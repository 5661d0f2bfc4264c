"""Logging set-up for the ``stockledger`` logger hierarchy.

Modules log through ``logging.getLogger(__name__)``; this module only
decides where those records go and how they look.  Structured fields are
passed with ``extra=`` and show up as keys in JSON output.
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

_LOGGER_PREFIX = "stockledger"

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}

_TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, val in vars(record).items():
            if key not in _STDLIB_KEYS and key not in payload:
                payload[key] = val
        if record.exc_info and record.exc_info[1] is not None:
            payload["exc_type"] = type(record.exc_info[1]).__name__
            payload["traceback"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_json_default)


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (Decimal, datetime)):
        return str(obj)
    return repr(obj)


class _StderrHandler(logging.StreamHandler):
    """Writes to whatever ``sys.stderr`` is when the record is emitted."""

    def __init__(self) -> None:
        logging.Handler.__init__(self)

    @property
    def stream(self):
        return sys.stderr


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.WARNING,
    fmt: str = "text",
    stream: Any = None,
) -> None:
    """Attach one handler to the ``stockledger`` logger (idempotent)."""
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    handler = logging.StreamHandler(stream) if stream is not None else _StderrHandler()
    if fmt == "json":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))

    root_logger = logging.getLogger(_LOGGER_PREFIX)
    root_logger.setLevel(level)
    root_logger.propagate = False
    root_logger.addHandler(handler)


def reset_logging() -> None:
    """Reset logging configuration. FOR TESTING ONLY."""
    global _configured
    with _lock:
        _configured = False
    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
