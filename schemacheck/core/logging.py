"""Structured logging configuration for schemacheck.

This module configures structlog for consistent, machine-readable logging
across the CLI, the validation pipeline and the HTTP service.
"""

import logging
import sys
import time
from typing import Any
import uuid

import structlog
from structlog.typing import EventDict


def add_app_context(
    _logger: Any, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Add application-specific context to log events."""
    event_dict["service"] = "schemacheck"
    event_dict["component"] = event_dict.get("logger", "unknown")
    return event_dict


def configure_logging(
    environment: str = "development", log_level: str = "INFO", json_logs: bool = False
) -> None:
    """Configure structured logging for the application.

    Args:
        environment: Application environment (development/production)
        log_level: Logging level (DEBUG/INFO/WARNING/ERROR)
        json_logs: Whether to output JSON format logs
    """
    # Logs go to stderr so that machine-readable CLI output on stdout stays clean
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper()),
    )

    if environment == "production":
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    if json_logs or environment == "production":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        add_app_context,
        structlog.processors.format_exc_info,
        renderer,
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a configured structured logger.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context variables (e.g. correlation_id, schema tag) to later log events."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


class StructlogMiddleware:
    """FastAPI middleware for request logging and context management."""

    def __init__(self, app: Any, logger_name: str = "schemacheck.api.requests"):
        self.app = app
        self.logger = get_logger(logger_name)

    async def __call__(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        """Process request with logging context."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        correlation_id = str(uuid.uuid4())[:8]
        bind_context(
            correlation_id=correlation_id,
            method=scope["method"],
            path=scope["path"],
        )
        self.logger.info("Request started")

        try:
            await self.app(scope, receive, send)
            self.logger.info("Request completed")
        except Exception as e:
            self.logger.error(
                "Request failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise
        finally:
            clear_context()


class OperationTimer:
    """Logs the duration and outcome of a pipeline stage."""

    def __init__(self, logger: structlog.stdlib.BoundLogger, operation: str):
        self.logger = logger
        self.operation = operation
        self.start_time: float | None = None

    def __enter__(self) -> "OperationTimer":
        self.start_time = time.perf_counter()
        self.logger.debug("Operation started", operation=self.operation)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self.start_time is None:
            return

        duration_ms = round((time.perf_counter() - self.start_time) * 1000, 2)
        if exc_type is None:
            self.logger.debug(
                "Operation completed",
                operation=self.operation,
                duration_ms=duration_ms,
            )
        else:
            self.logger.warning(
                "Operation failed",
                operation=self.operation,
                duration_ms=duration_ms,
                error=str(exc_val),
                error_type=exc_type.__name__,
            )

    def log_progress(self, message: str, **kwargs: Any) -> None:
        """Log operation progress with context."""
        self.logger.debug(message, operation=self.operation, **kwargs)
