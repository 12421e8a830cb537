"""
Structured JSON logging for the workshop kernel.

Every record is one JSON line.  Request-scoped fields (who is acting, for
which tenant, on which order) are bound once at the service boundary with
``LogContext.bind`` and appear on every record emitted inside the block:

    with LogContext.bind(**context.log_fields(), order_id=str(order_id)):
        logger.info("order_updated", extra={"stock_changes": 2})

produces

    {"ts": "...", "level": "INFO", "logger": "workshop_kernel.modules...",
     "message": "order_updated", "actor_id": "...", "tenant_id": "...",
     "order_id": "...", "stock_changes": 2}
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

_LOGGER_PREFIX = "workshop_kernel"

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

_bound: ContextVar[Mapping[str, str]] = ContextVar("workshop_log_context", default={})


class LogContext:
    """Request-scoped log fields, safe across threads and async tasks."""

    FIELDS = (
        "correlation_id",
        "actor_id",
        "tenant_id",
        "order_id",
        "producer",
        "trace_id",
    )

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_bound.get())

    @classmethod
    def clear(cls) -> None:
        _bound.set({})

    @classmethod
    @contextmanager
    def bind(cls, **fields: Any) -> Iterator[type["LogContext"]]:
        """
        Bind fields for the duration of the block, restoring the outer values
        on exit.  ``None`` values are skipped; unknown names raise ``TypeError``.
        """
        unknown = set(fields) - set(cls.FIELDS)
        if unknown:
            raise TypeError(f"unknown log context fields: {sorted(unknown)}")
        merged = dict(_bound.get())
        merged.update({k: str(v) for k, v in fields.items() if v is not None})
        token = _bound.set(merged)
        try:
            yield cls
        finally:
            _bound.reset(token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


def _json_default(obj: Any) -> Any:
    """UUID and Decimal become strings, dates ISO strings, enums their value."""
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    return str(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    """Type, message, ``code`` and structured attributes of a WorkshopError."""
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for key, value in vars(exc).items():
        if not key.startswith("_"):
            fields[f"exc_{key}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_bound.get())

        for key, val in vars(record).items():
            if key not in _STDLIB_KEYS and key not in payload:
                payload[key] = val

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


# ---------------------------------------------------------------------------
# Logger factory and initialization
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the workshop_kernel namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Configure the workshop_kernel logger hierarchy (idempotent).

    ``level`` may be a level name such as ``config.logging.level``.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    root_logger = logging.getLogger(_LOGGER_PREFIX)
    root_logger.setLevel(level.upper() if isinstance(level, str) else level)
    root_logger.propagate = False

    h = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    h.setFormatter(StructuredFormatter())
    root_logger.addHandler(h)


def reset_logging() -> None:
    """Reset logging configuration. FOR TESTING ONLY."""
    global _configured
    with _lock:
        _configured = False
    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)
