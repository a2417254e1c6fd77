"""Tests for structured logging."""

import json
import logging
import sys

from hotelbot.logging_config import QUIET_LOGGERS, JSONFormatter, build_logging_config


def make_record(**extra):
    record = logging.LogRecord(
        name="hotelbot.dialogs.engine",
        level=logging.ERROR,
        pathname=__file__,
        lineno=42,
        msg="Dialog step failed for %s",
        args=("user1",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_basic_fields(self):
        """Test the fixed fields of every line."""
        entry = json.loads(JSONFormatter().format(make_record()))

        assert entry["level"] == "ERROR"
        assert entry["logger"] == "hotelbot.dialogs.engine"
        assert entry["message"] == "Dialog step failed for user1"
        assert entry["line"] == 42
        assert "address" not in entry
        assert "context" not in entry

    def test_turn_fields_and_context(self):
        """Test that address and dialog are lifted, the rest nested."""
        record = make_record(
            address="user1",
            dialog="SearchHotels",
            context={"stack": ["SearchHotels"]},
        )

        entry = json.loads(JSONFormatter().format(record))

        assert entry["address"] == "user1"
        assert entry["dialog"] == "SearchHotels"
        assert entry["context"] == {"stack": ["SearchHotels"]}

    def test_exception_included(self):
        """Test that tracebacks are serialized."""
        try:
            raise ValueError("boom")
        except ValueError:
            record = make_record()
            record.exc_info = sys.exc_info()

        entry = json.loads(JSONFormatter().format(record))

        assert "ValueError: boom" in entry["exception"]


class TestLoggingConfig:
    """Tests for the dictConfig builder."""

    def test_console_only(self):
        """Test that no file handler is configured without a file."""
        config = build_logging_config("debug", None)

        assert list(config["handlers"]) == ["console"]
        assert config["root"] == {"level": "DEBUG", "handlers": ["console"]}

    def test_file_handler(self, tmp_path):
        """Test the rotating file handler."""
        log_file = str(tmp_path / "app.log")

        config = build_logging_config("INFO", log_file)

        assert config["handlers"]["file"]["filename"] == log_file
        assert config["root"]["handlers"] == ["console", "file"]

    def test_third_party_loggers_quiet(self):
        """Test that HTTP and SQL client loggers are held at WARNING."""
        config = build_logging_config("DEBUG", None)

        for name in QUIET_LOGGERS:
            assert config["loggers"][name] == {"level": "WARNING"}
