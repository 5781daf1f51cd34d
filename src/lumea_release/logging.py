"""Logging configuration and JSON log formatting."""

import json
import logging
import sys
from typing import Any, Dict

PACKAGE_LOGGER = "lumea_release"


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


class JsonFormatter(logging.Formatter):
    """Format log records as color-coded single-line JSON."""

    def __init__(self, colors: bool = True):
        super().__init__()
        self.colors = colors

    def format(self, record: logging.LogRecord) -> str:
        output = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.msg if isinstance(record.msg, dict) else record.getMessage(),
        }

        if hasattr(record, "data"):
            output["data"] = record.data

        json_str = json.dumps(output, default=str)
        if not self.colors:
            return json_str

        color = LEVEL_COLORS.get(record.levelname, "")
        return f"{color}{json_str}{ColorCodes.RESET}"


def configure_logging(level: str = "INFO") -> None:
    """Set up application logging with JSON formatting on stderr."""
    app_logger = logging.getLogger(PACKAGE_LOGGER)
    app_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Only attach a handler once
    if not app_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter(colors=sys.stderr.isatty()))
        app_logger.addHandler(handler)
        app_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance below the package logger."""
    if name == PACKAGE_LOGGER or name.startswith(f"{PACKAGE_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")


def log_with_data(
    logger: logging.Logger, level: int, msg: str, data: Dict[str, Any] = None
):
    """Log a message with optional structured data."""
    if data:
        logger.log(level, msg, extra={"data": data})
    else:
        logger.log(level, msg)
