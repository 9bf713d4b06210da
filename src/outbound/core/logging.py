"""
Logging utilities for the outbound package.

Provides structured logging with request context support for tracing
a call across resolution, middleware and dispatch.
"""

import json
import logging
import sys
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional


CONTEXT_FIELDS = ("request_id", "connector", "request", "method", "url", "status", "pool_key")


class StructuredFormatter(logging.Formatter):
    """
    Formatter that outputs JSON-structured log lines.

    Each log line includes:
    - Standard log fields (timestamp, level, message, logger)
    - Request context fields if present (request_id, method, url, status)
    """

    def __init__(self, include_timestamp: bool = True):
        super().__init__()
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as JSON."""
        log_entry = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_timestamp:
            log_entry["timestamp"] = datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat()

        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Formatter that outputs human-readable log lines with request context.

    Format: TIMESTAMP - LOGGER - LEVEL - MESSAGE [request_id=X method=Y url=Z]
    """

    def __init__(self, include_timestamp: bool = True):
        if include_timestamp:
            fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            fmt = "%(name)s - %(levelname)s - %(message)s"
        super().__init__(fmt)

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with request context."""
        base = super().format(record)

        context_parts = []
        for field in ("request_id", "method", "url", "status"):
            value = getattr(record, field, None)
            if value is not None:
                context_parts.append(f"{field}={value}")

        if context_parts:
            return f"{base} [{' '.join(context_parts)}]"
        return base


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a logger instance for the outbound package.

    Args:
        name: Logger name (typically __name__ of the calling module)
        level: Optional logging level override

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if level is not None:
        logger.setLevel(level)

    return logger


def configure_logging(
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    include_timestamp: bool = True,
    structured: bool = False,
) -> None:
    """
    Configure logging for the outbound package.

    Attaches a stdout handler to the "outbound" logger. Applications that
    already configure logging should leave this alone.

    Args:
        level: Logging level (default: INFO)
        format_string: Custom format string (optional, ignored if structured=True)
        include_timestamp: Whether to include timestamp in log messages
        structured: If True, output JSON-structured logs; if False, human-readable

    Example:
        >>> from outbound.core.logging import configure_logging
        >>> configure_logging(level=logging.DEBUG, structured=True)
    """
    package_logger = logging.getLogger("outbound")
    package_logger.setLevel(level)

    # Only add handler if none exist (avoid duplicate handlers)
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)

        if structured:
            formatter = StructuredFormatter(include_timestamp=include_timestamp)
        elif format_string:
            formatter = logging.Formatter(format_string)
        else:
            formatter = HumanReadableFormatter(include_timestamp=include_timestamp)

        handler.setFormatter(formatter)
        package_logger.addHandler(handler)


class RequestLogContext:
    """
    Context manager for adding request fields to log records.

    The context is per thread, so pool workers never see each other.

    Example:
        >>> with RequestLogContext(request_id="abc", connector="GitHub"):
        ...     log_with_context(logger, logging.INFO, "Sending")
    """

    _local = threading.local()

    def __init__(
        self,
        request_id: Optional[str] = None,
        connector: Optional[str] = None,
        request: Optional[str] = None,
        **extra: Any,
    ):
        self.context = {
            "request_id": request_id,
            "connector": connector,
            "request": request,
            **extra,
        }
        self.context = {k: v for k, v in self.context.items() if v is not None}
        self._previous: Optional["RequestLogContext"] = None

    def __enter__(self) -> "RequestLogContext":
        self._previous = getattr(RequestLogContext._local, "current", None)
        RequestLogContext._local.current = self
        return self

    def __exit__(self, *args) -> None:
        RequestLogContext._local.current = self._previous

    @classmethod
    def get_current(cls) -> Dict[str, Any]:
        """Get the current request context."""
        current = getattr(cls._local, "current", None)
        if current is None:
            return {}
        return current.context.copy()


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **extra: Any,
) -> None:
    """
    Log a message with request context.

    Merges the current RequestLogContext with any extra fields provided.
    """
    context = RequestLogContext.get_current()
    context.update(extra)
    logger.log(level, message, extra=context)
