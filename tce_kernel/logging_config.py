"""
tce_kernel.logging_config -- JSON-lines logging for the cost engines.

Every engine logs an event name as the message and its figures as
``extra`` fields.  ``StructuredFormatter`` turns each record into one JSON
object; Decimals are written as strings so no figure passes through float.

Context:
    ``log_context(**fields)`` adds fields to every record emitted inside
    the ``with`` block, including records from nested engines.  The
    composer binds the schedule identity this way; callers bind their own
    request identifiers around a ``compose`` call.

Usage:
    from tce_kernel.logging_config import configure_logging, log_context

    configure_logging()
    with log_context(correlation_id="payroll-run-42"):
        breakdown = composer.compose(compensation)
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, TextIO

__all__ = [
    "StructuredFormatter",
    "configure_logging",
    "current_log_context",
    "get_logger",
    "log_context",
    "reset_logging",
]

ROOT_LOGGER_NAME = "tce"

_context: ContextVar[Mapping[str, Any]] = ContextVar("tce_log_context", default={})


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Bind fields to every record logged in this block; None values are skipped."""
    merged = {**_context.get(), **{k: v for k, v in fields.items() if v is not None}}
    token = _context.set(merged)
    try:
        yield
    finally:
        _context.reset(token)


def current_log_context() -> dict[str, Any]:
    return dict(_context.get())


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return str(value)


# Attributes every LogRecord carries; anything else came in through extra=
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: envelope, bound context, extras, exception."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context.get(),
        }
        entry.update(
            (key, value) for key, value in vars(record).items()
            if key not in _RECORD_ATTRS
        )
        if record.exc_info and record.exc_info[1] is not None:
            entry.update(self._exception_fields(record))
        return json.dumps(entry, default=_json_default)

    def _exception_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        exc = record.exc_info[1]
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
            "traceback": self.formatException(record.exc_info),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        # TceError subclasses keep their data as public attributes
        for name, value in vars(exc).items():
            if not name.startswith("_"):
                fields[f"exc_{name}"] = value
        return fields


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``tce`` namespace, e.g. ``get_logger("engines.gross_up")``."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: TextIO | None = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach a JSON handler to the ``tce`` logger; later calls are no-ops."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if any(isinstance(h.formatter, StructuredFormatter) for h in root.handlers):
        return
    target = handler or logging.StreamHandler(stream or sys.stderr)
    target.setFormatter(StructuredFormatter())
    root.addHandler(target)
    root.setLevel(level)
    root.propagate = False


def reset_logging() -> None:
    """Drop handlers and restore propagation. FOR TESTING ONLY."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(logging.WARNING)
    root.propagate = True
