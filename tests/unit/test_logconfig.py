from __future__ import annotations

import io
import json
import logging

from solstamp.core.config import LoggingConfig
from solstamp.core.logconfig import setup_logging


def test_text_output_renders_extras() -> None:
    buf = io.StringIO()
    logger = setup_logging(LoggingConfig(level="INFO"), stream=buf)

    logging.getLogger("solstamp.discovery").info("timestamp_found", extra={"url": "https://a", "timestamp": 7})
    logging.getLogger("solstamp.discovery").debug("hidden")

    out = buf.getvalue()
    assert "timestamp_found" in out
    assert "url=https://a" in out
    assert "timestamp=7" in out
    assert "hidden" not in out
    assert logger.level == logging.INFO


def test_json_output_is_one_object_per_line() -> None:
    buf = io.StringIO()
    setup_logging(LoggingConfig(json_output=True), verbose=True, stream=buf)

    logging.getLogger("solstamp.core.retry").debug("retry_scheduled", extra={"attempt": 1, "wait_s": 1.0})

    line = buf.getvalue().strip().splitlines()[-1]
    body = json.loads(line)
    assert body["event"] == "retry_scheduled"
    assert body["level"] == "DEBUG"
    assert body["attempt"] == 1
    assert body["logger"] == "solstamp.core.retry"


def test_setup_is_idempotent() -> None:
    setup_logging()
    logger = setup_logging()
    assert len(logger.handlers) == 1
