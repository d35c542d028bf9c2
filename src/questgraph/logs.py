"""Logging setup for questgraph hosts."""

import json
import logging
import sys
from typing import TextIO

from .config import LoggingConfig


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def build_log_handler(config: LoggingConfig, stream: TextIO | None = None) -> logging.Handler:
    """Stream handler formatted per `config`.

    Args:
        config: Logging section. `format` applies unless `json_mode` is set.
        stream: Output stream, stderr by default.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    if config.json_mode:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(config.format))
    return handler


def setup_logging(config: LoggingConfig) -> None:
    """Configure root logging to stderr."""
    logging.basicConfig(level=getattr(logging, config.level), handlers=[build_log_handler(config)])
