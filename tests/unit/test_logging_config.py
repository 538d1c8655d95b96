"""Unit tests for logging configuration."""

import json
import logging

import pytest

from stemhub.logging_config import (
    JsonFormatter,
    LogContextFilter,
    configure_logging,
    log_context,
    request_id_var,
    user_id_var,
)


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="stemhub.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Collaborator invited",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def request_context():
    """A request id and acting user bound for the duration of the test."""
    request_token = request_id_var.set("req-123")
    user_token = user_id_var.set("user-42")
    yield
    user_id_var.reset(user_token)
    request_id_var.reset(request_token)


class TestLogContextFilter:
    """Tests for LogContextFilter."""

    def test_stamps_request_and_user(self, request_context):
        record = make_record()
        assert LogContextFilter().filter(record) is True
        assert record.request_id == "req-123"
        assert record.user_id == "user-42"

    def test_explicit_extra_user_is_kept(self, request_context):
        record = make_record(user_id="owner-1")
        LogContextFilter().filter(record)
        assert record.user_id == "owner-1"
        assert record.request_id == "req-123"

    def test_placeholders_outside_request(self):
        assert log_context() == {"request_id": "-", "user_id": "-"}
        record = make_record()
        LogContextFilter().filter(record)
        assert record.request_id == "-"
        assert record.user_id == "-"


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_includes_context_and_extra_fields(self):
        record = make_record(project_id="p-1", role="VIEWER", request_id="req-9", user_id="u-1")
        data = json.loads(JsonFormatter().format(record))

        assert data["message"] == "Collaborator invited"
        assert data["level"] == "INFO"
        assert data["project_id"] == "p-1"
        assert data["role"] == "VIEWER"
        assert data["request_id"] == "req-9"
        assert data["user_id"] == "u-1"
        assert "lineno" not in data

    def test_placeholder_context_is_omitted(self):
        record = make_record(request_id="-", user_id="-")
        data = json.loads(JsonFormatter().format(record))
        assert "request_id" not in data
        assert "user_id" not in data

    def test_unserialisable_extra_is_stringified(self):
        record = make_record(payload={1, 2})
        data = json.loads(JsonFormatter().format(record))
        assert isinstance(data["payload"], str)


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_repeated_calls_keep_one_handler(self):
        root = logging.getLogger()
        level = root.level
        try:
            configure_logging(environment="production")
            configure_logging(environment="production", debug=True)

            ours = [
                handler for handler in root.handlers
                if any(isinstance(f, LogContextFilter) for f in handler.filters)
            ]
            assert len(ours) == 1
            assert isinstance(ours[0].formatter, JsonFormatter)
            assert root.level == logging.DEBUG
        finally:
            for handler in root.handlers[:]:
                if any(isinstance(f, LogContextFilter) for f in handler.filters):
                    root.removeHandler(handler)
            root.setLevel(level)
