"""Logging configuration."""

import json
import logging
import sys
from typing import Any, Dict, Optional


class ColorCodes:
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    BOLD = "\033[1m"


LEVEL_COLORS = {
    "DEBUG": ColorCodes.BLUE,
    "INFO": ColorCodes.GREEN,
    "WARNING": ColorCodes.YELLOW,
    "ERROR": ColorCodes.RED + ColorCodes.BOLD,
    "CRITICAL": ColorCodes.MAGENTA + ColorCodes.BOLD,
}

APP_LOGGER = "mcp_spark_dist"


class JsonFormatter(logging.Formatter):
    """Format log records as color-coded JSON."""

    def format(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelname, "")

        output = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.msg if isinstance(record.msg, dict) else record.getMessage(),
        }

        if hasattr(record, "data"):
            output["data"] = record.data

        json_str = json.dumps(output, default=str)
        return f"{color}{json_str}{ColorCodes.RESET}"


def configure_logging(level: str = "DEBUG") -> None:
    """Set up application logging with JSON formatting on stderr.

    Stdout is left alone because the MCP stdio transport owns it.
    """
    app_logger = logging.getLogger(APP_LOGGER)

    if not app_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter())
        handler.setLevel(logging.DEBUG)

        app_logger.addHandler(handler)
        app_logger.propagate = False

    app_logger.setLevel(getattr(logging, level.upper()))


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    if name.startswith(APP_LOGGER):
        return logging.getLogger(name)
    return logging.getLogger(f"{APP_LOGGER}.{name}")


def log_with_data(
    logger: logging.Logger, level: int, msg: str, data: Optional[Dict[str, Any]] = None
):
    """Log a message with optional structured data."""
    if data:
        logger.log(level, msg, extra={"data": data})
    else:
        logger.log(level, msg)
