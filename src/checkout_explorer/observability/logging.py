"""Structured JSON logging correlated by trace and checkout."""

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

from checkout_explorer.observability.tracing import get_current_span_id, get_current_trace_id

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime"}

# Lifted out of ``extra`` to the top level of each JSON line
_CORRELATION_FIELDS = ("checkout_id", "order_id", "request_id")

_current_checkout_id: ContextVar[str | None] = ContextVar("checkout_id", default=None)


@contextmanager
def checkout_context(checkout_id: str) -> Iterator[None]:
    """Tag every record logged inside the block with ``checkout_id``."""
    token = _current_checkout_id.set(checkout_id)
    try:
        yield
    finally:
        _current_checkout_id.reset(token)


def get_current_checkout_id() -> str | None:
    return _current_checkout_id.get()


class CheckoutContextFilter(logging.Filter):
    """Fill ``checkout_id`` from the running flow when the caller did not pass one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "checkout_id", None) is None:
            checkout_id = get_current_checkout_id()
            if checkout_id is not None:
                record.checkout_id = checkout_id
        return True


class StructuredLogFormatter(logging.Formatter):
    """
    One JSON object per line.

    Top-level keys: timestamp, level, logger, message, trace/span IDs when a
    span is active, and the correlation IDs (checkout_id, order_id,
    request_id) when present. Other ``extra=`` fields go under ``extra``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        trace_id = get_current_trace_id()
        if trace_id:
            entry["trace_id"] = trace_id
            entry["span_id"] = get_current_span_id()

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        for key in _CORRELATION_FIELDS:
            if key in extra:
                entry[key] = extra.pop(key)
        if extra:
            entry["extra"] = extra

        entry["location"] = f"{record.module}:{record.funcName}:{record.lineno}"

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    module_levels: dict[str, str] | None = None,
) -> None:
    """
    Configure root logging for the service.

    Args:
        level: Default log level.
        json_format: JSON lines when True, plain text otherwise.
        module_levels: Per-module overrides (e.g., {"checkout_explorer.flow": "DEBUG"}).
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CheckoutContextFilter())
    if json_format:
        handler.setFormatter(StructuredLogFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    root_logger.addHandler(handler)

    # httpx logs every request at INFO
    for noisy in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    for module, mod_level in (module_levels or {}).items():
        logging.getLogger(module).setLevel(getattr(logging, mod_level.upper()))

    logging.getLogger(__name__).info(
        "Logging configured: level=%s, json=%s, module_levels=%s",
        level,
        json_format,
        module_levels or {},
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name (typically ``__name__``)."""
    return logging.getLogger(name)
