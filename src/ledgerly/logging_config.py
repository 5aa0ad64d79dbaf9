"""Logging setup for the ledgerly command line."""

import logging
import sys
from datetime import datetime, UTC
from typing import Any

from pythonjsonlogger.json import JsonFormatter

LOG_LEVEL_ENV = "LEDGERLY_LOG_LEVEL"
LOG_JSON_ENV = "LEDGERLY_LOG_JSON"
DEFAULT_LOG_LEVEL = "WARNING"

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class LedgerlyJsonFormatter(JsonFormatter):
    """JSON formatter adding timestamp, level and service fields."""

    def add_fields(
        self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict[str, Any]
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.fromtimestamp(record.created, UTC).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["service"] = "ledgerly"


def configure_logging(level: str = DEFAULT_LOG_LEVEL, json_output: bool = False) -> logging.Handler:
    """Install a single stderr handler on the ``ledgerly`` logger.

    Calling this again replaces the previous handler.

    Args:
        level: Level name such as "INFO" or "WARNING"
        json_output: Emit one JSON object per line instead of plain text

    Returns:
        The installed handler
    """
    logger = logging.getLogger("ledgerly")
    logger.setLevel(level.upper())
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(LedgerlyJsonFormatter("%(message)s"))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    logger.addHandler(handler)
    return handler


def remove_logging(handler: logging.Handler) -> None:
    """Detach a handler installed by configure_logging."""
    logging.getLogger("ledgerly").removeHandler(handler)
    handler.close()
