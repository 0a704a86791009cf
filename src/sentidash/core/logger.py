from __future__ import annotations

import json
import logging
import os
import sys
import uuid
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Optional

from rich.logging import RichHandler

# Correlation ID shared by all records of one analysis batch
_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

# Extra record attributes copied into JSON output
STRUCTURED_FIELDS = ("batch_size", "export_format", "path", "error", "error_type")

# Fields attached by the innermost active LogContext
_context_fields: ContextVar[dict[str, Any]] = ContextVar("log_context_fields", default={})


def get_correlation_id() -> str:
    """Get the current correlation ID."""
    return _correlation_id.get()


def set_correlation_id(cid: Optional[str] = None) -> str:
    """Set a correlation ID for batch tracing.

    Args:
        cid: Correlation ID to set. If None, generates a new UUID.

    Returns:
        The correlation ID that was set.
    """
    if cid is None:
        cid = str(uuid.uuid4())[:8]
    _correlation_id.set(cid)
    return cid


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        cid = getattr(record, "correlation_id", "")
        if cid:
            log_data["correlation_id"] = cid

        for key in STRUCTURED_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Route all records to a single handler.

    Rich console output by default; one JSON object per line when
    ``json_output`` is set or LOG_JSON is truthy. Calling it again
    replaces the handler.
    """
    if os.getenv("LOG_JSON", "").lower() in ("1", "true", "yes"):
        json_output = True

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = []

    if json_output:
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(StructuredFormatter())
    else:
        handler = RichHandler(rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("fpdf").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger by name (e.g. "gemini", "export")."""
    return logging.getLogger(name)


class LogContext:
    """Attach fields to every record created inside the block.

    Fields live in a ContextVar, so a block active in one thread or task
    never tags records from another. Nested blocks merge, inner wins.

    Example:
        with LogContext(batch_size=12):
            log.info("Analyzing batch")  # record carries batch_size
    """

    def __init__(self, **fields: Any):
        self.fields = fields
        self._token: Optional[Token] = None

    def __enter__(self) -> "LogContext":
        self._token = _context_fields.set({**_context_fields.get(), **self.fields})
        return self

    def __exit__(self, *args) -> None:
        if self._token is not None:
            _context_fields.reset(self._token)
            self._token = None


_base_factory = logging.getLogRecordFactory()


def _record_factory(*args, **kwargs) -> logging.LogRecord:
    record = _base_factory(*args, **kwargs)
    record.correlation_id = get_correlation_id()
    for key, value in _context_fields.get().items():
        setattr(record, key, value)
    return record


logging.setLogRecordFactory(_record_factory)


def log_error_with_context(
    logger: logging.Logger,
    message: str,
    error: Exception,
    **context: Any,
) -> None:
    """Log an error with additional context.

    Args:
        logger: Logger instance
        message: Error message
        error: Exception that occurred
        **context: Additional context fields
    """
    extra = {"error": str(error), "error_type": type(error).__name__}
    extra.update(context)

    record = logger.makeRecord(
        logger.name,
        logging.ERROR,
        "(error)",
        0,
        f"{message}: {error}",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)

    logger.handle(record)
