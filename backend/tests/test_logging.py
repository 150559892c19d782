"""Tests for logging configuration module."""

import logging
import sys
from collections.abc import Generator
from io import StringIO
from unittest.mock import MagicMock, patch

import pytest
import structlog
from opentelemetry import trace
from subway.core.logging import _add_otel_context, configure_logging


@pytest.fixture(autouse=True)
def restore_root_logger() -> Generator[None]:
    """Put the root logger back the way pytest configured it."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level

    yield

    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_logging_sets_log_level(self) -> None:
        """Test that configure_logging sets the root logger level."""
        configure_logging(log_level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG

        configure_logging(log_level="ERROR")
        assert logging.getLogger().level == logging.ERROR

    def test_configure_logging_default_level_is_info(self) -> None:
        """Test that default log level is INFO."""
        configure_logging()
        assert logging.getLogger().level == logging.INFO

    def test_configure_logging_case_insensitive(self) -> None:
        """Test that log level is case insensitive."""
        configure_logging(log_level="Debug")
        assert logging.getLogger().level == logging.DEBUG

    def test_configure_logging_sets_noisy_loggers_to_warning(self) -> None:
        """Test that noisy third-party loggers stay at WARNING when root is DEBUG."""
        configure_logging(log_level="DEBUG")

        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert logging.getLogger("urllib3").level == logging.WARNING
        assert logging.getLogger("opentelemetry.exporter.otlp.proto.http").level == logging.WARNING

    def test_configure_logging_replaces_existing_handlers(self) -> None:
        """Test that configure_logging leaves exactly one stdout handler."""
        root_logger = logging.getLogger()
        dummy_handler = logging.StreamHandler()
        root_logger.addHandler(dummy_handler)

        configure_logging()

        assert dummy_handler not in root_logger.handlers
        assert len(root_logger.handlers) == 1
        handler = root_logger.handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        assert handler.stream == sys.stdout

    def test_structlog_event_rendered(self) -> None:
        """Test that structlog events reach stdout with their fields."""
        with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            configure_logging(log_level="INFO")
            structlog.get_logger("subway.test").info("segment_added", line="Line 2")

            output = mock_stdout.getvalue()

        assert "segment_added" in output
        assert "Line 2" in output

    def test_debug_level_renders_json(self) -> None:
        """Test that DEBUG output is one JSON object per event."""
        with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            configure_logging(log_level="DEBUG")
            structlog.get_logger("subway.test").debug("station_removed", station="B")

            output = mock_stdout.getvalue()

        assert '"event": "station_removed"' in output
        assert '"station": "B"' in output

    def test_stdlib_logger_routed_through_structlog(self) -> None:
        """Test that stdlib loggers are formatted by the same formatter."""
        with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            configure_logging(log_level="INFO")
            logging.getLogger("stdlib_test").info("stdlib message")

            output = mock_stdout.getvalue()

        assert "stdlib message" in output


class TestAddOtelContext:
    """Tests for _add_otel_context processor."""

    def test_adds_trace_and_span_ids_with_active_span(self) -> None:
        """Test that trace_id and span_id are added when there is an active span."""
        mock_span_context = MagicMock()
        mock_span_context.trace_id = 0x1234567890ABCDEF1234567890ABCDEF
        mock_span_context.span_id = 0x1234567890ABCDEF

        mock_span = MagicMock()
        mock_span.is_recording.return_value = True
        mock_span.get_span_context.return_value = mock_span_context

        with patch.object(trace, "get_current_span", return_value=mock_span):
            result = _add_otel_context(logging.getLogger(), "info", {"event": "fare_calculated"})

        assert result["trace_id"] == "1234567890abcdef1234567890abcdef"
        assert result["span_id"] == "1234567890abcdef"
        assert result["event"] == "fare_calculated"

    def test_no_trace_ids_without_active_span(self) -> None:
        """Test that nothing is added outside a recording span."""
        mock_span = MagicMock()
        mock_span.is_recording.return_value = False

        with patch.object(trace, "get_current_span", return_value=mock_span):
            result = _add_otel_context(logging.getLogger(), "info", {"event": "fare_calculated"})

        assert "trace_id" not in result
        assert "span_id" not in result
