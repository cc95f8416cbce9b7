"""
Unit tests for utils.logging

Tests JSON and console formatting, the context logger and
environment-based configuration.
"""

import json
import logging
import sys
from unittest.mock import patch

from utils.logging import (
    ConsoleFormatter,
    ContextLogger,
    JSONFormatter,
    configure_from_env,
    setup_logging,
    shutdown_logging,
)


def make_record(msg="Test message", level=logging.INFO, exc_info=None, **extra):
    record = logging.LogRecord(
        name="forkreduce.pool",
        level=level,
        pathname="/path/to/pool.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    record.threadName = "forkreduce-pool-1-worker-2"
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Test JSONFormatter class"""

    def test_init_with_defaults(self):
        """Test initialization with default parameters"""
        formatter = JSONFormatter()

        assert formatter.include_timestamp is True
        assert formatter.include_hostname is True
        assert formatter.app_name == "forkreduce"
        assert formatter.hostname is not None

    def test_format_basic_log_record(self):
        """Test formatting a basic log record"""
        # Arrange
        formatter = JSONFormatter()

        # Act
        data = json.loads(formatter.format(make_record()))

        # Assert
        assert data["level"] == "INFO"
        assert data["logger"] == "forkreduce.pool"
        assert data["message"] == "Test message"
        assert data["app"] == "forkreduce"
        assert data["thread"] == "forkreduce-pool-1-worker-2"
        assert data["source"] == {
            "file": "/path/to/pool.py",
            "line": 42,
            "function": None,
        }
        assert "timestamp" in data
        assert "hostname" in data

    def test_format_without_timestamp_and_hostname(self):
        """Test optional fields can be turned off"""
        formatter = JSONFormatter(include_timestamp=False, include_hostname=False)

        data = json.loads(formatter.format(make_record()))

        assert "timestamp" not in data
        assert "hostname" not in data

    def test_format_with_exception_info(self):
        """Test formatting with exception information"""
        # Arrange
        formatter = JSONFormatter()
        try:
            raise ValueError("bad element")
        except ValueError:
            exc_info = sys.exc_info()

        # Act
        data = json.loads(formatter.format(make_record(level=logging.ERROR, exc_info=exc_info)))

        # Assert
        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "bad element"
        assert isinstance(data["exception"]["traceback"], list)

    def test_format_with_extra_context(self):
        """Test extra fields land in the context object"""
        formatter = JSONFormatter()

        data = json.loads(formatter.format(make_record(command="primes", attempt=2)))

        assert data["context"] == {"command": "primes", "attempt": 2}

    def test_format_without_extra_context(self):
        """Test no context object is emitted without extra fields"""
        data = json.loads(JSONFormatter().format(make_record()))

        assert "context" not in data


class TestConsoleFormatter:
    """Test ConsoleFormatter class"""

    def test_format_without_colors(self):
        """Test formatting without colors"""
        formatter = ConsoleFormatter(use_colors=False)

        result = formatter.format(make_record())

        assert "[INFO]" in result
        assert "forkreduce-pool-1-worker-2" in result
        assert "forkreduce.pool: Test message" in result

    @patch('sys.stderr.isatty', return_value=True)
    def test_format_with_colors_restores_levelname(self, mock_isatty):
        """Test colored output leaves the record's level name untouched"""
        # Arrange
        formatter = ConsoleFormatter(use_colors=True)
        record = make_record(level=logging.WARNING)

        # Act
        result = formatter.format(record)

        # Assert
        assert ConsoleFormatter.COLORS["WARNING"] in result
        assert record.levelname == "WARNING"

    def test_format_with_extra_context(self):
        """Test extra fields are appended as key=value pairs"""
        formatter = ConsoleFormatter(use_colors=False)

        result = formatter.format(make_record(command="sum", pool_size=4))

        assert result.endswith("[command=sum, pool_size=4]")


class TestContextLogger:
    """Test ContextLogger class"""

    def test_context_is_attached(self, caplog):
        """Test bound context appears on every record"""
        log = ContextLogger("forkreduce.test", command="primes")

        with caplog.at_level(logging.INFO, logger="forkreduce.test"):
            log.info("Run finished", attempt=1)

        record = caplog.records[-1]
        assert record.command == "primes"
        assert record.attempt == 1

    def test_call_keywords_override_context(self, caplog):
        """Test per-call keywords win over bound context"""
        log = ContextLogger("forkreduce.test", mode="first")

        with caplog.at_level(logging.WARNING, logger="forkreduce.test"):
            log.warning("Switching", mode="any")

        assert caplog.records[-1].mode == "any"
        assert log.context == {"mode": "first"}

    def test_update_context(self):
        """Test update_context mutates in place"""
        log = ContextLogger("forkreduce.test")

        log.update_context(pool_size=8)

        assert log.context == {"pool_size": 8}

    def test_error_with_exc_info(self, caplog):
        """Test error logging keeps exception info"""
        log = ContextLogger("forkreduce.test")

        with caplog.at_level(logging.ERROR, logger="forkreduce.test"):
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                log.error("Reduction failed", exc_info=True)

        assert caplog.records[-1].exc_info is not None


class TestSetupLogging:
    """Test setup_logging function"""

    def teardown_method(self):
        """Clean up logging handlers after each test"""
        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            handler.close()
            root_logger.removeHandler(handler)
        root_logger.setLevel(logging.WARNING)

    def test_setup_logging_with_defaults(self):
        """Test setup with default parameters"""
        setup_logging()

        root_logger = logging.getLogger()
        assert root_logger.level == logging.INFO
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, ConsoleFormatter)

    def test_setup_logging_invalid_level_defaults_to_info(self):
        """Test that invalid level defaults to INFO"""
        setup_logging(level="INVALID")

        assert logging.getLogger().level == logging.INFO

    def test_setup_logging_json(self):
        """Test JSON format applies to the console handler"""
        setup_logging(level="debug", json_format=True, app_name="demo")

        formatter = logging.getLogger().handlers[0].formatter
        assert isinstance(formatter, JSONFormatter)
        assert formatter.app_name == "demo"
        assert logging.getLogger().level == logging.DEBUG

    def test_setup_logging_with_file(self, tmp_path):
        """Test file logging creates the directory and writes records"""
        # Arrange
        log_file = tmp_path / "logs" / "forkreduce.log"

        # Act
        setup_logging(level="INFO", log_file=str(log_file), console_output=False)
        logging.getLogger("forkreduce.test").info("written to file")
        for handler in logging.getLogger().handlers:
            handler.flush()

        # Assert
        assert len(logging.getLogger().handlers) == 1
        content = log_file.read_text()
        assert "[INFO]" in content
        assert "written to file" in content

    def test_setup_logging_replaces_handlers(self):
        """Test calling setup twice does not stack handlers"""
        setup_logging()
        setup_logging()

        assert len(logging.getLogger().handlers) == 1

    def test_setup_logging_quiets_exporter_loggers(self):
        """Test OpenTelemetry and gRPC loggers are capped at WARNING"""
        setup_logging(level="DEBUG")

        assert logging.getLogger("opentelemetry").level == logging.WARNING
        assert logging.getLogger("grpc").level == logging.WARNING

    def test_configure_from_env(self, monkeypatch):
        """Test environment variables drive the configuration"""
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        monkeypatch.setenv("LOG_JSON", "yes")
        monkeypatch.setenv("LOG_CONSOLE", "true")

        configure_from_env()

        root_logger = logging.getLogger()
        assert root_logger.level == logging.ERROR
        assert isinstance(root_logger.handlers[0].formatter, JSONFormatter)

    def test_shutdown_logging_removes_handlers(self):
        """Test shutdown releases every handler"""
        setup_logging()

        shutdown_logging()

        assert logging.getLogger().handlers == []
