"""Tests for log formatting."""

import logging

import orjson

from utils.logging import JsonFormatter, TextFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("apps.assessor", logging.WARNING, __file__, 10, "Fetching page %d", (3,), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields():
    line = JsonFormatter().format(_record(page=3, request="GET /patients"))
    entry = orjson.loads(line)

    assert entry["message"] == "Fetching page 3"
    assert entry["level"] == "WARNING"
    assert entry["logger"] == "apps.assessor"
    assert entry["page"] == 3
    assert entry["request"] == "GET /patients"
    assert "ts" in entry


def test_json_formatter_serializes_unknown_types():
    entry = orjson.loads(JsonFormatter().format(_record(ids={"DEMO001"})))
    assert entry["ids"] == "{'DEMO001'}"


def test_text_formatter_appends_extra_fields():
    line = TextFormatter().format(_record(attempt=2))

    assert "WARNING" in line
    assert "Fetching page 3" in line
    assert line.endswith("| attempt=2")


def test_setup_logging_installs_single_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging(level="DEBUG", format_type="json")
        setup_logging(level="DEBUG", format_type="text")

        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, TextFormatter)
        assert root.level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
