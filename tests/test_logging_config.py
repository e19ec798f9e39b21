"""Tests for JSON and text log formatters and setup_logging."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from bolddesk.logging_config import JSONFormatter, TextFormatter, setup_logging
from bolddesk.services.request_context import request_scope


def _make_record(msg: str = "hello", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="bolddesk.sdk.fetcher",
        level=level,
        pathname="fetcher.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


@pytest.fixture
def sdk_logger():
    logger = logging.getLogger("bolddesk")
    saved = (logger.level, list(logger.handlers))
    yield logger
    logger.setLevel(saved[0])
    logger.handlers[:] = saved[1]


def test_json_output_structure():
    data = json.loads(JSONFormatter().format(_make_record("GET /tickets")))
    assert data["level"] == "INFO"
    assert data["logger"] == "bolddesk.sdk.fetcher"
    assert data["message"] == "GET /tickets"
    assert "timestamp" in data
    assert "request_id" not in data


def test_json_includes_request_id():
    with request_scope("abc123def456"):
        data = json.loads(JSONFormatter().format(_make_record()))
    assert data["request_id"] == "abc123def456"


def test_json_includes_extra_fields():
    record = _make_record()
    record.page = 3
    data = json.loads(JSONFormatter().format(record))
    assert data["page"] == 3
    assert "args" not in data


def test_json_exception_formatting():
    record = _make_record("error", logging.ERROR)
    try:
        raise ValueError("boom")
    except ValueError:
        record.exc_info = sys.exc_info()
    data = json.loads(JSONFormatter().format(record))
    assert "ValueError: boom" in data["exception"]


def test_text_format_with_request_id():
    with request_scope("aabbccdd1122334455"):
        output = TextFormatter().format(_make_record("hello text"))
    assert "[aabbccdd1122]" in output
    assert output.endswith("bolddesk.sdk.fetcher - hello text")


def test_text_format_without_request_id():
    output = TextFormatter().format(_make_record("no rid"))
    assert "[" not in output
    assert "INFO" in output


def test_setup_logging_json(sdk_logger):
    logger = setup_logging("debug", "json")
    assert logger is sdk_logger
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, JSONFormatter)


def test_setup_logging_replaces_handler(sdk_logger):
    setup_logging("INFO", "text")
    setup_logging("WARNING", "text")
    assert len(sdk_logger.handlers) == 1
    assert isinstance(sdk_logger.handlers[0].formatter, TextFormatter)
    assert sdk_logger.level == logging.WARNING


def test_setup_logging_unknown_level_defaults_to_info(sdk_logger):
    setup_logging("chatty", "text")
    assert sdk_logger.level == logging.INFO
