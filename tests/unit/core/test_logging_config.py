"""
Tests for logging infrastructure.
"""

import logging
import json

import pytest

from cloudtable.core.logging_config import (
    setup_logging,
    log_with_context,
    JSONFormatter,
    SensitiveDataFilter,
    TextFormatter,
)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Restore the package logger after each test."""
    package_logger = logging.getLogger("cloudtable")
    level = package_logger.level
    handlers = list(package_logger.handlers)
    yield
    package_logger.setLevel(level)
    package_logger.handlers[:] = handlers


def make_record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("cloudtable.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLoggingSetup:
    """Test suite for logging setup."""

    def test_setup_logging_defaults(self):
        """Test setting up logging with defaults."""
        setup_logging()

        package_logger = logging.getLogger("cloudtable")
        assert package_logger.level == logging.INFO
        assert len(package_logger.handlers) == 1
        assert isinstance(package_logger.handlers[0].formatter, TextFormatter)

    def test_setup_logging_json(self):
        """Test JSON format selects the JSON formatter."""
        setup_logging(level="DEBUG", format_type="json")

        package_logger = logging.getLogger("cloudtable")
        assert package_logger.level == logging.DEBUG
        assert isinstance(package_logger.handlers[0].formatter, JSONFormatter)

    def test_setup_logging_with_file(self, tmp_path):
        """Test setting up logging with file output."""
        log_file = tmp_path / "logs" / "cloudtable.log"
        setup_logging(log_file=str(log_file))

        logging.getLogger("cloudtable.table").info("Test message sig=secret")
        for handler in logging.getLogger("cloudtable").handlers:
            handler.flush()

        content = log_file.read_text()
        assert "Test message" in content
        assert "secret" not in content

    def test_setup_is_idempotent(self):
        """Test repeated setup does not stack handlers."""
        setup_logging()
        setup_logging()

        assert len(logging.getLogger("cloudtable").handlers) == 1


class TestSensitiveDataFilter:
    """Test secret redaction."""

    @pytest.mark.parametrize(
        "message, secret",
        [
            ("GET /mytable?sv=2012-02-12&sig=abc%3D&sp=r", "abc%3D"),
            ("DefaultEndpointsProtocol=https;AccountKey=c2VjcmV0;", "c2VjcmV0"),
            ("SharedAccessSignature=sv=2012&sig=x", "sv=2012"),
            ('{"account_key": "c2VjcmV0"}', "c2VjcmV0"),
        ],
    )
    def test_redacts(self, message, secret):
        """Test secrets are replaced in messages."""
        record = make_record(message)

        assert SensitiveDataFilter().filter(record) is True
        assert secret not in record.msg
        assert "***REDACTED***" in record.msg

    def test_plain_message_unchanged(self):
        """Test ordinary messages pass through."""
        record = make_record("Table client created")
        SensitiveDataFilter().filter(record)
        assert record.msg == "Table client created"


class TestJSONFormatter:
    """Test structured output."""

    def test_format(self):
        """Test records are rendered as JSON."""
        data = json.loads(JSONFormatter().format(make_record("hello")))

        assert data["level"] == "INFO"
        assert data["module"] == "cloudtable.test"
        assert data["message"] == "hello"
        assert "timestamp" in data

    def test_context(self):
        """Test context from log_with_context is included."""
        data = json.loads(JSONFormatter().format(make_record("hello", context={"table": "orders"})))
        assert data["context"] == {"table": "orders"}


def test_log_with_context(caplog):
    """Test context is attached to the record."""
    caplog.set_level(logging.INFO, logger="cloudtable.test")
    log_with_context(logging.getLogger("cloudtable.test"), logging.INFO, "done", table="orders")

    assert caplog.records[-1].context == {"table": "orders"}
