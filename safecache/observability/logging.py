"""Structured logging configuration for safecache.

This module provides structured logging using structlog. Logs are output as
JSON in production for easy parsing by log aggregators, and as colored
console lines in development.

Configuration:
    Set via environment variables:
    - LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    - LOG_FORMAT: json, console (default: json in production, console in dev)
    - ENVIRONMENT: development, production (affects format default)

Usage:
    >>> from safecache.observability.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.warning("cache_operation_failed", operation="get", key="user:1")

Standard Events:
    Lifecycle:
        - cache_disabled: DISABLE_REDIS set, no connection attempted
        - cache_connecting: Connect attempt started
        - cache_connected: Connect attempt succeeded
        - cache_connect_failed: Connect attempt failed or timed out
        - cache_proceeding_without_cache: Application continues uncached
        - cache_closed: Handle released on shutdown
        - cache_close_failed: Error while releasing the handle

    Transport:
        - cache_ready: Handle finished its handshake
        - cache_reconnecting: Backoff before a reconnect attempt
        - cache_error: Transport reported an error
        - cache_connection_ended: Transport closed

    Operations:
        - cache_unavailable: Operation skipped, no live handle
        - cache_operation_failed: Operation raised, result degraded
"""

import logging
import os
import sys
from typing import Any

import structlog
from structlog.types import Processor

# Module-level flag to track initialization
_configured = False


def configure_logging(
    level: str | None = None,
    log_format: str | None = None,
    is_production: bool | None = None,
) -> None:
    """Configure structured logging for the application.

    Should be called once at application startup. Safe to call multiple times
    (subsequent calls are no-ops).

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Default from LOG_LEVEL env.
        log_format: Output format (json, console). Default based on environment.
        is_production: Override production detection. Default from ENVIRONMENT env.
    """
    global _configured
    if _configured:
        return

    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()

    if is_production is None:
        is_production = os.getenv("ENVIRONMENT", "development").lower() == "production"

    if log_format is None:
        log_format = os.getenv("LOG_FORMAT", "json" if is_production else "console")

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level, logging.INFO),
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Auto-configures logging on first call if not already configured.

    Args:
        name: Logger name (typically __name__). If None, returns root logger.

    Returns:
        Configured structlog BoundLogger instance.
    """
    if not _configured:
        configure_logging()

    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger


def bind_context(**kwargs: Any) -> None:
    """Bind context variables to all subsequent log calls in this context.

    Example:
        >>> bind_context(request_id="abc123")
        >>> logger.info("cache_unavailable")  # Includes request_id
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


class LogEvents:
    """Standard event names for structured logging.

    Use these constants for consistent event naming across the codebase.
    """

    # Lifecycle events
    CACHE_DISABLED = "cache_disabled"
    CACHE_CONNECTING = "cache_connecting"
    CACHE_CONNECTED = "cache_connected"
    CACHE_CONNECT_FAILED = "cache_connect_failed"
    CACHE_PROCEEDING_WITHOUT_CACHE = "cache_proceeding_without_cache"
    CACHE_DISCARD_FAILED = "cache_discard_failed"
    CACHE_ALREADY_STARTED = "cache_already_started"
    CACHE_CLOSED = "cache_closed"
    CACHE_CLOSE_FAILED = "cache_close_failed"

    # Transport events
    CACHE_READY = "cache_ready"
    CACHE_RECONNECTING = "cache_reconnecting"
    CACHE_ERROR = "cache_error"
    CACHE_CONNECTION_ENDED = "cache_connection_ended"

    # Operation events
    CACHE_UNAVAILABLE = "cache_unavailable"
    CACHE_OPERATION_FAILED = "cache_operation_failed"
