# file: tests/test_logging.py
from __future__ import annotations

import json
import logging

from phonedial.logging_config import JsonFormatter


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord(
        "phonedial.test", logging.WARNING, __file__, 1, "hello %s", ("world",), None
    )
    record.dial_code = "+86"
    payload = json.loads(JsonFormatter().format(record))
    assert payload["msg"] == "hello world"
    assert payload["level"] == "WARNING"
    assert payload["logger"] == "phonedial.test"
    assert payload["dial_code"] == "+86"
    assert "args" not in payload
    assert "lineno" not in payload
