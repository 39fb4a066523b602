"""
Logging setup for asnetkit

The package only emits DEBUG lifecycle records on loggers under
``asnetkit``; failures are reported to callers, never logged and dropped.
These helpers are for applications that want to see those records.
"""

import json
import logging
import sys
from typing import Any, Dict


class JsonFormatter(logging.Formatter):
    """Formats log records as JSON for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": int(record.created * 1000),  # milliseconds
            "name": record.name,
            "level": record.levelname,
            "msg": record.getMessage(),
        }

        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)

        for field in ("method", "url", "attempt", "status_code"):
            if hasattr(record, field):
                payload[field] = getattr(record, field)

        return json.dumps(payload, default=str)


def setup_structured_logger(level: int = logging.INFO) -> None:
    """
    Configure structured JSON logging for asnetkit.

    Args:
        level: Logging level (default: logging.INFO)

    Example:
        >>> from asnetkit.logging_setup import setup_structured_logger
        >>> setup_structured_logger(logging.DEBUG)
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())

    kit_logger = logging.getLogger("asnetkit")
    kit_logger.setLevel(level)
    kit_logger.handlers = [handler]
    kit_logger.propagate = False


def setup_logging(debug: bool = False) -> None:
    """
    Plain-text logging for asnetkit

    Args:
        debug: Enable debug level logging
    """
    level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("asnetkit").setLevel(level)
