"""Logging infrastructure for the Recipedia core.

Provides centralized logging with configurable format (text/JSON) and level.
Configured via environment variables:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
- LOG_TYPE: text, json (default: text)

Each core area logs through its own named logger so callers can route or
silence them independently: OCR structuring, filtering, validation and
shopping list maintenance. Severity carries meaning: ERROR marks input the
core could not convert, WARNING marks imperfect input that was skipped.
"""

import json
import logging
import os
import sys
from typing import Any


class JSONFormatter(logging.Formatter):
    """Formatter that outputs structured JSON."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format.

        Returns:
            JSON string with timestamp, level, logger name, message, and optional traceback.
        """
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Include exception traceback if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Include OCR field and filter category if passed through `extra`
        if hasattr(record, "field"):
            log_data["field"] = str(record.field)
        if hasattr(record, "category"):
            log_data["category"] = str(record.category)

        return json.dumps(log_data)


class RichTextFormatter(logging.Formatter):
    """Formatter that outputs colored text with emoji icons."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",      # Cyan
        "INFO": "\033[32m",       # Green
        "WARNING": "\033[33m",    # Yellow
        "ERROR": "\033[31m",      # Red
        "RESET": "\033[0m",       # Reset
    }

    # Emoji icons for each level
    ICONS = {
        "DEBUG": "🔍",
        "INFO": "ℹ️",
        "WARNING": "⚠️",
        "ERROR": "❌",
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as colored text.

        Args:
            record: Log record to format.

        Returns:
            Formatted string with color codes and emoji icon.
        """
        level = record.levelname
        color = self.COLORS.get(level, self.COLORS["RESET"])
        icon = self.ICONS.get(level, "")
        reset = self.COLORS["RESET"]

        # Format: YYYY-MM-DD HH:MM:SS
        timestamp = self.formatTime(record, "%Y-%m-%d %H:%M:%S")

        message = f"{color}{icon} {timestamp} {level:<8} {record.name:<20} {record.getMessage()}{reset}"

        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        return message


def get_logger(name: str) -> logging.Logger:
    """Create and configure logger instance.

    Args:
        name: Logger name, typically the core area ("ocr", "filters", ...).

    Returns:
        Configured logger instance.
    """
    logger_instance = logging.getLogger(name)

    # Return existing logger if already configured
    if logger_instance.handlers:
        return logger_instance

    # Read configuration from environment
    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_type = os.getenv("LOG_TYPE", "text").lower()

    log_level = getattr(logging, log_level_str, logging.INFO)
    logger_instance.setLevel(log_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)

    if log_type == "json":
        formatter = JSONFormatter()
    else:
        formatter = RichTextFormatter()

    handler.setFormatter(formatter)
    logger_instance.addHandler(handler)

    return logger_instance


# Module-level logger instances. Names are flat (not dotted children of
# "recipedia") so a record is emitted once by its own handler.
logger = get_logger("recipedia")
ocr_logger = get_logger("recipedia_ocr")
filter_logger = get_logger("recipedia_filters")
validation_logger = get_logger("recipedia_validation")
shopping_logger = get_logger("recipedia_shopping")
