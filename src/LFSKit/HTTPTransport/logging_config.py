"""
Structured Logging Utilities

Helpers for the transport's loggers: masking credentials before request
metadata is logged, rendering records as JSON lines, and installing a single
managed handler on the package logger.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import IO, Dict, Mapping, Optional

__all__ = ["LOGGER_NAME", "JSONFormatter", "mask_sensitive_data", "setup_logging"]

LOGGER_NAME = "LFSKit.HTTPTransport"

_SENSITIVE_KEYS = {"authorization", "proxy-authorization", "cookie", "password", "token"}

# LogRecord attributes that are not user supplied ``extra`` fields.
_RESERVED_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


def mask_sensitive_data(payload: Mapping[str, object]) -> Dict[str, object]:
    """Return a copy of ``payload`` with credential-bearing values masked.

    Examples:
        >>> mask_sensitive_data({"Authorization": "Basic abc", "status": 200})
        {'Authorization': '***masked***', 'status': 200}
    """
    masked: Dict[str, object] = {}
    for key, value in payload.items():
        if key.lower() in _SENSITIVE_KEYS:
            masked[key] = "***masked***"
        elif isinstance(value, Mapping):
            masked[key] = mask_sensitive_data(value)
        else:
            masked[key] = value
    return masked


class JSONFormatter(logging.Formatter):
    """Formatter emitting one JSON object per record, ``extra`` fields included."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, object] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_obj[key] = value
        if record.exc_info:
            log_obj["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(mask_sensitive_data(log_obj), default=str)


def setup_logging(level: Optional[str] = None, stream: Optional[IO[str]] = None) -> logging.Logger:
    """Attach a JSON stream handler to the package logger.

    Calling this again replaces the handler installed by the previous call.

    Args:
        level: Level name; defaults to ``LFSKIT_LOG_LEVEL`` or ``INFO``.
        stream: Destination stream, ``sys.stderr`` by default.

    Returns:
        The configured ``LFSKit.HTTPTransport`` logger.
    """
    level = level or os.environ.get("LFSKIT_LOG_LEVEL", "INFO")
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(logger.handlers):
        if getattr(handler, "_lfskit_managed", False):
            logger.removeHandler(handler)
            handler.close()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JSONFormatter())
    handler._lfskit_managed = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.propagate = True
    return logger
