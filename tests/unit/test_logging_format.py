"""Tests for the service log format.

Target format: 2026-01-06T14:05:52Z [source] LEVEL message
"""

from __future__ import annotations

import io
import logging
import re
import sys
from datetime import UTC, datetime
from unittest.mock import patch

from archiving.logging_config import TRACE, ISO8601Formatter, configure_logging, level_from_env


def _record(msg: str, level: int = logging.INFO, args: tuple = ()) -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=args,
        exc_info=None,
    )


class TestISO8601Formatter:
    def test_line_layout(self):
        output = ISO8601Formatter(source="test").format(_record("Test message"))

        pattern = r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z \[test\] INFO Test message$"
        assert re.match(pattern, output), f"Output '{output}' doesn't match expected format"

    def test_timestamp_is_record_creation_time_in_utc(self):
        record = _record("Test")
        record.created = datetime(2026, 1, 6, 14, 5, 52, tzinfo=UTC).timestamp()

        output = ISO8601Formatter(source="mgmt").format(record)

        assert output.startswith("2026-01-06T14:05:52Z [mgmt] ")

    def test_level_names(self):
        formatter = ISO8601Formatter(source="test")

        for level, level_name in [
            (TRACE, "TRACE"),
            (logging.DEBUG, "DEBUG"),
            (logging.INFO, "INFO"),
            (logging.WARNING, "WARNING"),
            (logging.ERROR, "ERROR"),
        ]:
            output = formatter.format(_record("Message", level=level))
            assert f"] {level_name} " in output, f"Level {level_name} not found in output"

    def test_message_args_are_interpolated(self):
        output = ISO8601Formatter(source="test").format(
            _record("Archiving pv %s with period %s", args=("SRC", 0.1))
        )

        assert "Archiving pv SRC with period 0.1" in output

    def test_exception_text_appended(self):
        try:
            raise ValueError("engine down")
        except ValueError:
            record = _record("Exception archiving PV SRC")
            record.exc_info = sys.exc_info()

        output = ISO8601Formatter(source="test").format(record)

        assert "Exception archiving PV SRC\nTraceback" in output
        assert "ValueError: engine down" in output


class TestLevelFromEnv:
    def test_unset_uses_default(self):
        with patch.dict("os.environ", {}, clear=True):
            assert level_from_env() == logging.INFO

    def test_case_insensitive(self):
        with patch.dict("os.environ", {"LOG_LEVEL": " trace "}):
            assert level_from_env() == TRACE

    def test_unknown_name_uses_default(self):
        with patch.dict("os.environ", {"LOG_LEVEL": "chatty"}):
            assert level_from_env(default=logging.WARNING) == logging.WARNING


class TestConfigureLogging:
    def test_explicit_level_wins(self):
        with patch.dict("os.environ", {"LOG_LEVEL": "TRACE"}):
            assert configure_logging(source="test", level=logging.DEBUG).level == logging.DEBUG

    def test_level_from_env(self):
        with patch.dict("os.environ", {"LOG_LEVEL": "DEBUG"}):
            assert configure_logging(source="test").level == logging.DEBUG

    def test_uvicorn_loggers_share_root_handler(self):
        root = configure_logging(source="test")

        access = logging.getLogger("uvicorn.access")
        assert access.handlers == root.handlers
        assert access.propagate is False

    def test_http_client_loggers_quieted(self):
        configure_logging(source="test", level=TRACE)

        assert logging.getLogger("httpx").level == logging.WARNING

    def test_repeated_calls_keep_one_handler(self):
        configure_logging(source="test")
        root = configure_logging(source="test")

        assert len(root.handlers) == 1

    def test_end_to_end_log_output(self):
        configure_logging(source="integration_test", level=logging.INFO)
        stream = io.StringIO()
        logging.getLogger().handlers[0].setStream(stream)

        logging.getLogger("archiving.test").info("Test integration message")

        pattern = r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z \[integration_test\] INFO Test integration message\n$"
        assert re.match(pattern, stream.getvalue())
