"""Tests for logging configuration and formatters."""

import json
import logging

import pytest

from jobportal.logging import ComponentLoggerAdapter, get_logger
from jobportal.logging.config import (
    ContextualFilter,
    JSONFormatter,
    KeyValueFormatter,
    configure_logging,
)
from jobportal.logging.context import log_context


@pytest.fixture
def logger():
    """Create a test logger with no handlers."""
    test_logger = logging.getLogger("test_logger")
    test_logger.setLevel(logging.DEBUG)
    test_logger.handlers.clear()
    yield test_logger
    test_logger.handlers.clear()


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def make_record(logger, message="Test message", extra=None):
    return logger.makeRecord("test", logging.INFO, "test.py", 1, message, (), None, extra=extra)


def test_json_formatter_basic(logger):
    log_obj = json.loads(JSONFormatter().format(make_record(logger)))

    assert log_obj["level"] == "INFO"
    assert log_obj["message"] == "Test message"
    assert log_obj["logger"] == "test"
    assert log_obj["timestamp"].endswith("Z")
    assert len(log_obj["timestamp"]) == 24


def test_json_formatter_with_extra_fields(logger):
    record = make_record(
        logger, extra={"event": "notifier.fanout.completed", "notifications_created": 3}
    )

    log_obj = json.loads(JSONFormatter().format(record))

    assert log_obj["event"] == "notifier.fanout.completed"
    assert log_obj["notifications_created"] == 3
    assert "name" not in log_obj


def test_contextual_filter_adds_static_and_context_fields(logger):
    filter = ContextualFilter(service="job-portal", environment="test")

    with log_context(fanout_id="abc123", job_id=5):
        record = make_record(logger)
        filter.filter(record)

    assert record.service == "job-portal"
    assert record.environment == "test"
    assert record.fanout_id == "abc123"
    assert record.job_id == 5


def test_explicit_extra_wins_over_context(logger):
    filter = ContextualFilter()

    with log_context(job_id=1):
        record = make_record(logger, extra={"job_id": 2})
        filter.filter(record)

    assert record.job_id == 2


def test_key_value_formatter(logger):
    formatter = KeyValueFormatter("[%(levelname)s] %(message)s")
    record = make_record(
        logger, extra={"event": "sweeper.expired_tokens.completed", "deleted": 4, "note": "a b"}
    )
    record.service = "job-portal"

    output = formatter.format(record)

    assert output.startswith("[INFO] Test message")
    assert "deleted=4" in output
    assert "event=sweeper.expired_tokens.completed" in output
    assert 'note="a b"' in output
    assert "service=" not in output


def test_component_logger_adapter_merges_extra(caplog):
    adapter = get_logger("jobportal.test", component="notifier")

    with caplog.at_level(logging.INFO, logger="jobportal.test"):
        adapter.info("hello", extra={"event": "x"})

    assert isinstance(adapter, ComponentLoggerAdapter)
    assert caplog.records[0].component == "notifier"
    assert caplog.records[0].event == "x"


def test_get_logger_without_component():
    assert isinstance(get_logger("jobportal.plain"), logging.Logger)


def test_configure_logging_invalid_level():
    with pytest.raises(ValueError, match="Invalid log level"):
        configure_logging(level="INVALID")


def test_configure_logging_invalid_format():
    with pytest.raises(ValueError, match="Invalid log format"):
        configure_logging(format_type="xml")


@pytest.mark.parametrize("format_type,formatter_class", [
    ("json", JSONFormatter),
    ("key-value", KeyValueFormatter),
])
def test_configure_logging_installs_formatter(restore_root_logger, format_type, formatter_class):
    configure_logging(level="DEBUG", format_type=format_type, environment="test")

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, formatter_class)
    assert logging.getLogger("apscheduler").level == logging.WARNING
