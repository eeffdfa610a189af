# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Tests for logging setup."""

import json
import logging
import sys
import tempfile
from pathlib import Path

import pytest

from relationship_catalog.catalog import load_catalog
from relationship_catalog.logging_setup import StructuredFormatter, entry_context, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Put the root logger back the way the test found it."""
    root_logger = logging.getLogger()
    saved_handlers = list(root_logger.handlers)
    saved_level = root_logger.level
    yield
    for handler in root_logger.handlers:
        if handler not in saved_handlers:
            handler.close()
    root_logger.handlers[:] = saved_handlers
    root_logger.setLevel(saved_level)


def test_setup_logging_creates_directory():
    """Test that setup_logging creates the log directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        log_dir = Path(tmpdir) / "nested" / ".relationship_catalog_logs"
        assert not log_dir.exists()

        setup_logging(log_dir=log_dir, console_output=False)

        assert log_dir.is_dir()


def test_setup_logging_returns_log_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        log_dir = Path(tmpdir)

        log_file = setup_logging(log_dir=log_dir, console_output=False)

        assert log_file.parent == log_dir
        assert log_file.name.startswith("relationship_catalog_")
        assert list(log_dir.glob("*.log")) == [log_file]


def test_logging_produces_json():
    """Test that logs are written in JSON format."""
    with tempfile.TemporaryDirectory() as tmpdir:
        log_file = setup_logging(
            log_dir=Path(tmpdir), log_level=logging.INFO, console_output=False
        )

        logging.getLogger("test_logger").info("Test message")

        log_lines = [line for line in log_file.read_text().splitlines() if line]
        # Startup message + test message
        assert len(log_lines) >= 2
        for line in log_lines:
            log_entry = json.loads(line)
            assert "timestamp" in log_entry
            assert "level" in log_entry
            assert "logger" in log_entry
            assert "message" in log_entry
        assert json.loads(log_lines[-1])["message"] == "Test message"


def test_logging_levels():
    """Test that different log levels work correctly."""
    with tempfile.TemporaryDirectory() as tmpdir:
        log_file = setup_logging(
            log_dir=Path(tmpdir), log_level=logging.WARNING, console_output=False
        )

        logger = logging.getLogger("test_logger")
        logger.info("Info message")
        logger.warning("Warning message")

        messages = [json.loads(line)["message"] for line in log_file.read_text().splitlines()]
        assert "Warning message" in messages
        assert "Info message" not in messages


def test_console_output_goes_to_stderr():
    with tempfile.TemporaryDirectory() as tmpdir:
        setup_logging(log_dir=Path(tmpdir), console_output=True)

        stream_handlers = [
            h
            for h in logging.getLogger().handlers
            if type(h) is logging.StreamHandler  # FileHandler subclasses StreamHandler
        ]
        assert len(stream_handlers) == 1
        assert stream_handlers[0].stream is sys.stderr


def test_structured_formatter_with_exception():
    """Test that exceptions are formatted correctly."""
    formatter = StructuredFormatter()

    try:
        raise ValueError("Test exception")
    except ValueError:
        record = logging.LogRecord(
            name="test",
            level=logging.ERROR,
            pathname="test.py",
            lineno=1,
            msg="Error occurred",
            args=(),
            exc_info=sys.exc_info(),
        )

    log_entry = json.loads(formatter.format(record))
    assert log_entry["message"] == "Error occurred"
    assert "ValueError: Test exception" in log_entry["exception"]
    assert log_entry["timestamp"].endswith("Z")


def test_structured_formatter_extra_fields():
    formatter = StructuredFormatter()
    record = logging.LogRecord("test", logging.INFO, "test.py", 1, "Rendered", (), None)
    record.extra_fields = {"example_id": 4}

    assert json.loads(formatter.format(record))["example_id"] == 4


def test_structured_formatter_uses_record_time_and_source():
    formatter = StructuredFormatter()
    record = logging.LogRecord("test", logging.INFO, "/src/catalog.py", 42, "Loaded", (), None)
    record.created = 1_000_000_000

    log_entry = json.loads(formatter.format(record))

    assert log_entry["timestamp"] == "2001-09-09T01:46:40Z"
    assert log_entry["source"] == "catalog:42"


def test_entry_context_tags_records():
    example = load_catalog().get_by_kind("composition")
    formatter = StructuredFormatter()
    record = logging.makeLogRecord({"msg": "Skipping", **entry_context(example)})

    log_entry = json.loads(formatter.format(record))

    assert log_entry["example_id"] == 4
    assert log_entry["kind"] == "composition"


def test_setup_logging_twice_closes_previous_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        setup_logging(log_dir=Path(tmpdir) / "first", console_output=False)
        (first_handler,) = logging.getLogger().handlers

        setup_logging(log_dir=Path(tmpdir) / "second", console_output=False)

        assert first_handler not in logging.getLogger().handlers
        assert first_handler.stream is None
