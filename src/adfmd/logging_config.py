"""Opt-in log output for applications embedding adfmd.

Modules log through ``logging.getLogger(__name__)`` under the ``adfmd``
package logger, which only carries a ``NullHandler``. Nothing here runs at
import time; call :func:`configure_logging` to get correlated, redacted
output on a stream.
"""
from __future__ import annotations

import json
import logging
import os
import sys
import uuid
from datetime import datetime, timezone
from typing import IO, Any, Mapping

PACKAGE_LOGGER = "adfmd"

_CORRELATION_ID = os.getenv("ADFMD_CORR_ID") or str(uuid.uuid4())

REDACTED = "***REDACTED***"
_SENSITIVE_MARKERS = ("token", "secret", "password", "authorization", "cookie")

# Rendered documents can be large; string fields are clipped to this length.
_MAX_FIELD_LENGTH = 200

# Attributes every LogRecord carries; everything else arrived through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "correlation_id",
}


def get_correlation_id() -> str:
    """Return the run-scoped correlation identifier."""

    return _CORRELATION_ID


def _is_sensitive(text: str) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in _SENSITIVE_MARKERS)


def _sanitize(value: Any) -> Any:
    if isinstance(value, str):
        if _is_sensitive(value):
            return REDACTED
        if len(value) > _MAX_FIELD_LENGTH:
            return f"{value[:_MAX_FIELD_LENGTH]}... ({len(value)} chars)"
        return value
    if isinstance(value, Mapping):
        return {
            key: REDACTED if isinstance(key, str) and _is_sensitive(key) else _sanitize(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(_sanitize(item) for item in value)
    return value


def _extra_fields(record: logging.LogRecord) -> dict:
    return {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}


class _ContextFilter(logging.Filter):
    """Stamp the correlation id and scrub caller-supplied fields."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", None):
            record.correlation_id = _CORRELATION_ID
        for key, value in _extra_fields(record).items():
            setattr(record, key, REDACTED if _is_sensitive(key) else _sanitize(value))
        if isinstance(record.msg, str) and _is_sensitive(record.msg):
            record.msg = REDACTED
            record.args = None
        elif isinstance(record.args, tuple):
            record.args = tuple(_sanitize(arg) for arg in record.args)
        return True


class _JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, "correlation_id", _CORRELATION_ID),
        }
        for key, value in _extra_fields(record).items():
            payload.setdefault(key, value)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class _TextFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)sZ %(levelname)s %(name)s [corr=%(correlation_id)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: N802
        moment = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return moment.strftime(datefmt or self.datefmt or "%Y-%m-%dT%H:%M:%S")


class _AdfmdHandler(logging.StreamHandler):
    """Marker type so repeated configuration replaces rather than stacks handlers."""


def configure_logging(
    level: str | None = None,
    *,
    json_output: bool | None = None,
    stream: IO[str] | None = None,
    logger_name: str = PACKAGE_LOGGER,
) -> logging.Handler:
    """Attach a correlated, redacting stream handler to ``logger_name``.

    ``level`` and ``json_output`` default to ``ADFMD_LOG_LEVEL`` and
    ``ADFMD_LOG_JSON``. Handlers installed by earlier calls are replaced;
    every other handler, including those on the root logger, is left alone.
    """

    if level is None:
        level = os.getenv("ADFMD_LOG_LEVEL", "INFO")
    if json_output is None:
        json_output = os.getenv("ADFMD_LOG_JSON", "false").lower() == "true"

    logger = logging.getLogger(logger_name)
    for existing in [h for h in logger.handlers if isinstance(h, _AdfmdHandler)]:
        logger.removeHandler(existing)

    handler = _AdfmdHandler(stream=stream or sys.stdout)
    handler.addFilter(_ContextFilter())
    handler.setFormatter(_JsonFormatter() if json_output else _TextFormatter())
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler


__all__ = ["PACKAGE_LOGGER", "REDACTED", "configure_logging", "get_correlation_id"]
