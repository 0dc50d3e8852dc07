"""Tests for logging setup and formatters."""

import io
import json
import logging

from api_playground.config import LoggingConfig
from api_playground.utils.logging import (
    CONTEXT_ATTR,
    ConsoleFormatter,
    JsonFormatter,
    get_contextual_logger,
    setup_logging,
)


def _record(context=None):
    record = logging.LogRecord(
        "api_playground.session", logging.INFO, __file__, 10, "Loaded %d rows", (3,), None
    )
    if context is not None:
        setattr(record, CONTEXT_ATTR, context)
    return record


class _Capture(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


def test_json_formatter_includes_context():
    """Structured records inline the context fields."""
    payload = json.loads(JsonFormatter().format(_record({"source_url": "https://x.io"})))

    assert payload["message"] == "Loaded 3 rows"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "api_playground.session"
    assert payload["source_url"] == "https://x.io"


def test_console_formatter_appends_context():
    """Readable lines end with sorted key=value context."""
    line = ConsoleFormatter().format(_record({"records": 3, "query": "SELECT *"}))

    assert line.endswith("INFO - Loaded 3 rows [query=SELECT * records=3]")


def test_console_formatter_without_context():
    """No brackets are added when there is no context."""
    line = ConsoleFormatter().format(_record())

    assert line.endswith("api_playground.session - INFO - Loaded 3 rows")


def test_contextual_logger_drops_none_and_binds():
    """None values are dropped and bind adds fields."""
    capture = _Capture()
    base = logging.getLogger("api_playground.tests.context")
    base.addHandler(capture)
    base.setLevel(logging.INFO)
    try:
        logger = get_contextual_logger(base.name, {"source_url": None, "family": "users"})
        logger.bind(records=2).info("loaded")
    finally:
        base.removeHandler(capture)

    assert getattr(capture.records[0], CONTEXT_ATTR) == {"family": "users", "records": 2}


def test_setup_logging_structured_stream():
    """setup_logging writes JSON lines to the given stream."""
    stream = io.StringIO()
    setup_logging(LoggingConfig(level="DEBUG", structured=True), stream=stream)

    logging.getLogger("api_playground.tests.setup").debug("hello")

    assert json.loads(stream.getvalue().strip())["message"] == "hello"
    assert logging.getLogger("httpx").level == logging.WARNING
