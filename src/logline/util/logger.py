"""Structured JSON log lines: one record, one line, one write."""

from __future__ import annotations

import json
import logging
import sys
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, TextIO

FIXED_FIELDS = ("timestamp", "level", "message")


def format_timestamp(dt: Optional[datetime] = None) -> str:
    """Render an instant as ISO-8601 UTC with milliseconds, e.g. 2024-05-01T12:00:00.123Z."""
    if dt is None:
        dt = datetime.now(timezone.utc)
    elif dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_record(
    level: str,
    message: str,
    details: Optional[Mapping[str, Any]] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Build a log record. Fixed fields always win over same-named detail keys."""
    record: Dict[str, Any] = {
        "timestamp": format_timestamp(now),
        "level": str(level).upper(),
        "message": message,
    }
    for key, value in (details or {}).items():
        if key not in FIXED_FIELDS:
            record[key] = value
    return record


class LogEntryFormatter:
    """Writes structured records as JSON lines to a stream (stdout by default)."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream
        self._lock = threading.Lock()

    @property
    def stream(self) -> TextIO:
        # Resolved per call so redirected stdout is honoured
        return self._stream if self._stream is not None else sys.stdout

    def format(
        self,
        level: str,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> str:
        return json.dumps(build_record(level, message, details), ensure_ascii=False, allow_nan=False)

    def emit(
        self,
        level: str,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Write one record as a single line.

        Serialization errors (TypeError, or ValueError for NaN and infinities)
        and sink errors (OSError, ValueError on a closed stream) propagate to
        the caller. Nothing is written when serialization fails.
        """
        line = self.format(level, message, details) + "\n"
        stream = self.stream
        with self._lock:
            stream.write(line)
            stream.flush()


_default = LogEntryFormatter()


def emit(level: str, message: str, details: Optional[Mapping[str, Any]] = None) -> None:
    """Emit a structured log line to stdout."""
    _default.emit(level, message, details)


class JSONFormatter(logging.Formatter):
    """JSON formatter for stdlib logging, same record shape as emit()."""
    def format(self, record):
        details: Dict[str, Any] = {"name": record.name}
        extra = getattr(record, "details", None)
        if isinstance(extra, Mapping):
            details.update(extra)
        if isinstance(record.msg, dict):
            details.update(record.msg)
            message = record.msg.get("message", record.msg.get("event", ""))
        else:
            message = record.getMessage()
        if record.exc_info:
            details["exc_info"] = self.formatException(record.exc_info)
        now = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return json.dumps(build_record(record.levelname, message, details, now=now), ensure_ascii=False, allow_nan=False)


def get_logger(name: str = "logline", stream: Optional[TextIO] = None) -> logging.Logger:
    """Get a logger with JSON formatting for structured logging."""
    logger = logging.getLogger(name)
    if not any(getattr(h, "_logline", False) for h in logger.handlers):
        handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
        handler.setFormatter(JSONFormatter())
        handler._logline = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger
