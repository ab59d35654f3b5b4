"""Tests for structured logging configuration.

Tests cover:
- Renderer selection from arguments and environment
- Idempotent configuration
- Context binding
- Event name constants
"""

import logging
from unittest.mock import patch

import pytest
import structlog

from safecache.observability import logging as safecache_logging
from safecache.observability.logging import (
    LogEvents,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


@pytest.fixture
def unconfigured(monkeypatch):
    """Pretend logging has not been configured and capture the configuration."""
    monkeypatch.setattr(safecache_logging, "_configured", False)
    with patch("safecache.observability.logging.structlog.configure") as mock_configure, patch(
        "safecache.observability.logging.logging.basicConfig"
    ) as mock_basic:
        yield mock_configure, mock_basic


def renderer_of(mock_configure):
    return mock_configure.call_args.kwargs["processors"][-1]


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_format(self, unconfigured):
        mock_configure, _ = unconfigured

        configure_logging(level="INFO", log_format="json")

        assert isinstance(renderer_of(mock_configure), structlog.processors.JSONRenderer)

    def test_console_format(self, unconfigured):
        mock_configure, _ = unconfigured

        configure_logging(level="INFO", log_format="console")

        assert isinstance(renderer_of(mock_configure), structlog.dev.ConsoleRenderer)

    def test_production_defaults_to_json(self, unconfigured, monkeypatch):
        mock_configure, _ = unconfigured
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "production")

        configure_logging()

        assert isinstance(renderer_of(mock_configure), structlog.processors.JSONRenderer)

    def test_level_from_environment(self, unconfigured, monkeypatch):
        _, mock_basic = unconfigured
        monkeypatch.setenv("LOG_LEVEL", "debug")

        configure_logging()

        assert mock_basic.call_args.kwargs["level"] == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self, unconfigured):
        _, mock_basic = unconfigured

        configure_logging(level="LOUD")

        assert mock_basic.call_args.kwargs["level"] == logging.INFO

    def test_second_call_is_noop(self, unconfigured):
        mock_configure, _ = unconfigured

        configure_logging(log_format="json")
        configure_logging(log_format="console")

        assert mock_configure.call_count == 1


class TestGetLogger:
    def test_returns_logger(self):
        logger = get_logger("safecache.test")

        assert logger is not None
        logger.info(LogEvents.CACHE_READY, redis_url="redis://localhost:6379")

    def test_events_reach_stdlib_logging(self, caplog):
        caplog.set_level(logging.WARNING)
        logger = get_logger("safecache.test")

        logger.warning(LogEvents.CACHE_OPERATION_FAILED, operation="get", key="k")

        assert "cache_operation_failed" in caplog.text


class TestContext:
    def test_bind_and_clear_context(self):
        bind_context(request_id="abc123")
        assert structlog.contextvars.get_contextvars()["request_id"] == "abc123"

        clear_context()
        assert "request_id" not in structlog.contextvars.get_contextvars()


class TestLogEvents:
    def test_event_names_are_unique(self):
        names = [
            value
            for key, value in vars(LogEvents).items()
            if key.isupper() and isinstance(value, str)
        ]

        assert len(names) == len(set(names))
        assert all(name.startswith("cache_") for name in names)
