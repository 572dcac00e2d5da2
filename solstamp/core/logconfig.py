"""solstamp.core.logconfig

Stdlib logging, configured once at the CLI boundary.

Call sites log snake_case event names and put details in ``extra``. The formatters here
render those extras as ``key=value`` pairs or as one JSON object per line.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, TextIO

from solstamp.core.config import LoggingConfig

ROOT_LOGGER = "solstamp"

# Attributes every LogRecord carries; anything else came in through `extra`.
_RESERVED = frozenset(vars(logging.LogRecord("x", logging.INFO, "x", 0, "x", None, None))) | {
    "message",
    "asctime",
    "taskName",
}


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _RESERVED and not k.startswith("_")}


class KeyValueFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = record_extras(record)
        if extras:
            line += " " + " ".join(f"{k}={v}" for k, v in extras.items())
        return line


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        body: dict[str, Any] = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
            **record_extras(record),
        }
        if record.exc_info:
            body["exc"] = self.formatException(record.exc_info)
        return json.dumps(body, default=str)


def setup_logging(
    config: LoggingConfig | None = None,
    *,
    verbose: bool = False,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Install a single handler on the `solstamp` logger and return it.

    Idempotent: calling it again replaces the previous handler.
    """

    cfg = config or LoggingConfig()
    logger = logging.getLogger(ROOT_LOGGER)
    for h in list(logger.handlers):
        logger.removeHandler(h)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter() if cfg.json_output else KeyValueFormatter())
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else cfg.level.upper())
    logger.propagate = False
    return logger
