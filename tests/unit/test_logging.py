"""
Unit tests for logging utilities.
"""

import json
import logging
import threading

from outbound.core.logging import (
    HumanReadableFormatter,
    RequestLogContext,
    StructuredFormatter,
    log_with_context,
)


def make_record(**extra):
    record = logging.LogRecord("outbound.test", logging.INFO, __file__, 1, "Sending", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFormatters:
    """Tests for the log formatters."""

    def test_structured_formatter(self):
        """Test JSON output includes context fields."""
        formatter = StructuredFormatter(include_timestamp=False)

        entry = json.loads(formatter.format(make_record(method="GET", url="https://x", pool_key=3)))

        assert entry == {
            "level": "INFO",
            "logger": "outbound.test",
            "message": "Sending",
            "method": "GET",
            "url": "https://x",
            "pool_key": 3,
        }

    def test_structured_formatter_timestamp(self):
        """Test a timestamp is added by default."""
        entry = json.loads(StructuredFormatter().format(make_record()))

        assert "timestamp" in entry

    def test_human_readable_formatter(self):
        """Test context fields are appended in brackets."""
        formatter = HumanReadableFormatter(include_timestamp=False)

        line = formatter.format(make_record(method="POST", status=201))

        assert line == "outbound.test - INFO - Sending [method=POST status=201]"

    def test_human_readable_without_context(self):
        """Test no brackets are added without context."""
        line = HumanReadableFormatter(include_timestamp=False).format(make_record())

        assert line == "outbound.test - INFO - Sending"


class TestRequestLogContext:
    """Tests for RequestLogContext."""

    def test_context_nesting(self):
        """Test nested contexts restore the outer one on exit."""
        with RequestLogContext(request_id="outer"):
            with RequestLogContext(request_id="inner", method="GET"):
                assert RequestLogContext.get_current() == {"request_id": "inner", "method": "GET"}
            assert RequestLogContext.get_current() == {"request_id": "outer"}

        assert RequestLogContext.get_current() == {}

    def test_context_is_per_thread(self):
        """Test other threads do not see the current context."""
        seen = []

        with RequestLogContext(request_id="main"):
            worker = threading.Thread(target=lambda: seen.append(RequestLogContext.get_current()))
            worker.start()
            worker.join()

        assert seen == [{}]

    def test_log_with_context(self, caplog):
        """Test log records carry context and extra fields."""
        logger = logging.getLogger("outbound.test")

        with caplog.at_level(logging.INFO, logger="outbound.test"):
            with RequestLogContext(connector="UsersConnector"):
                log_with_context(logger, logging.INFO, "Sent", status=200)

        record = caplog.records[-1]
        assert record.connector == "UsersConnector"
        assert record.status == 200
