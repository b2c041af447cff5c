# test_log_format.py
"""Unit tests for adler32cmp/log_format.py."""

import json
import logging
import sys

import pytest

from adler32cmp.config import Adler32CmpEnv
from adler32cmp.log_format import configure_logging, StructuredFormatter


def make_record(exc_info=None) -> logging.LogRecord:
    """Create a LogRecord like adler32-cmp would log."""
    return logging.LogRecord(
        name="adler32cmp.adler32_cmd",
        level=logging.WARNING,
        pathname="/usr/lib/python3/site-packages/adler32cmp/adler32_cmd.py",
        lineno=151,
        msg="Checksum mismatch for %s: computed %s, saved %s",
        args=("/storage/atlas/a.txt", "6bc00fe4", "deadbeef"),
        exc_info=exc_info,
    )


@pytest.fixture
def root_logger():
    """Restore the root logger after a test configures it."""
    logger = logging.getLogger(None)
    handlers = list(logger.handlers)
    level = logger.level
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)


def test_constructor_default() -> None:
    """Test that StructuredFormatter can be created without any parameters."""
    sf = StructuredFormatter()
    assert sf.component_type is None
    assert sf.component_name is None
    assert sf.indent is None
    assert sf.separators == (',', ':')


def test_constructor_supplied() -> None:
    """Test that StructuredFormatter can be created with parameters."""
    sf = StructuredFormatter(component_type="adler32-cmp", component_name="storage-01", ndjson=False)
    assert sf.component_type == "adler32-cmp"
    assert sf.component_name == "storage-01"
    assert sf.indent == 4
    assert sf.separators == (', ', ': ')


def test_format_default() -> None:
    """Test that StructuredFormatter (no params) renders a single line of JSON."""
    json_text = StructuredFormatter().format(make_record())
    assert json_text.find("\n") == -1
    data = json.loads(json_text)
    assert data["message"] == "Checksum mismatch for /storage/atlas/a.txt: computed 6bc00fe4, saved deadbeef"
    assert data["levelname"] == "WARNING"
    assert data["name"] == "adler32cmp.adler32_cmd"
    assert "timestamp" in data
    assert "component_type" not in data
    assert "component_name" not in data
    assert "args" not in data


def test_format_supplied() -> None:
    """Test that StructuredFormatter (with params) pretty-prints and names the component."""
    sf = StructuredFormatter(component_type="adler32-cmp", component_name="storage-01", ndjson=False)
    json_text = sf.format(make_record())
    assert json_text.find("\n") != -1
    data = json.loads(json_text)
    assert data["component_type"] == "adler32-cmp"
    assert data["component_name"] == "storage-01"


def test_format_exception() -> None:
    """Test that exception information is rendered as a traceback."""
    try:
        raise RuntimeError("kaboom")
    except RuntimeError:
        record = make_record(exc_info=sys.exc_info())
    data = json.loads(StructuredFormatter().format(record))
    assert any("RuntimeError: kaboom" in line for line in data["exc_info"])


def test_configure_logging_text(root_logger) -> None:
    """Test that plain text logging is configured by default."""
    configure_logging(Adler32CmpEnv(LOG_LEVEL="info"))
    handler = root_logger.handlers[-1]
    assert root_logger.level == logging.INFO
    assert handler.stream is sys.stderr
    assert not isinstance(handler.formatter, StructuredFormatter)


def test_configure_logging_json(root_logger) -> None:
    """Test that LOG_JSON switches to structured logging."""
    configure_logging(Adler32CmpEnv(LOG_LEVEL="DEBUG", LOG_JSON=True))
    handler = root_logger.handlers[-1]
    assert root_logger.level == logging.DEBUG
    assert isinstance(handler.formatter, StructuredFormatter)
    assert handler.formatter.component_type == "adler32-cmp"
