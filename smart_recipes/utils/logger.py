"""Logging for Smart Recipe Generator.

LOG_LEVEL (default INFO) and LOG_TYPE (text | json, default text) select the
level and output format. Records may carry ``cycle`` and ``recipe_id`` extras.
Output goes to stderr so it never mixes with the recipes printed by the CLI.
"""

import json
import logging
import os
import sys
from typing import Any

CONTEXT_FIELDS = ("cycle", "recipe_id")


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with the context extras when present."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update({field: getattr(record, field) for field in CONTEXT_FIELDS if hasattr(record, field)})

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


class RichTextFormatter(logging.Formatter):
    """Colored single-line text with a level icon and the cycle name."""

    RESET = "\033[0m"
    LEVEL_STYLES = {
        "DEBUG": ("\033[36m", "🔍"),
        "INFO": ("\033[32m", "🍳"),
        "WARNING": ("\033[33m", "⚠️"),
        "ERROR": ("\033[31m", "❌"),
    }

    def format(self, record: logging.LogRecord) -> str:
        color, icon = self.LEVEL_STYLES.get(record.levelname, (self.RESET, ""))
        cycle = getattr(record, "cycle", None)
        context = f"[{cycle}] " if cycle else ""

        message = (
            f"{color}{icon} {self.formatTime(record, '%Y-%m-%d %H:%M:%S')} "
            f"{record.levelname:<8} {record.name:<20} {context}{record.getMessage()}{self.RESET}"
        )
        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"
        return message


def get_logger(name: str) -> logging.Logger:
    """Return the named logger, attaching a stderr handler on first use."""
    logger_instance = logging.getLogger(name)
    if logger_instance.handlers:
        return logger_instance

    logger_instance.setLevel(getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if os.getenv("LOG_TYPE", "text").lower() == "json" else RichTextFormatter())
    logger_instance.addHandler(handler)
    return logger_instance


logger = get_logger("smart_recipes")

# Gemini SDK request logs
logging.getLogger("google.genai").setLevel(logging.WARNING)
