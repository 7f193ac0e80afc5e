"""
Log Formatters
=============

- DevFormatter: Colored text format for development
- JsonFormatter: Structured JSON format for production
- FileFormatter: Plain text for category files

Development (text):
    2026-01-11 12:00:00 | INFO  | newsfeed.aggregator       | [fetch-abc123] [mediastack] 21 articles

Production (JSON):
    {"timestamp": "2026-01-11T12:00:00.000Z", "level": "INFO", "logger": "newsfeed.aggregator", "request_id": "fetch-abc123", "message": "..."}
"""

import json
import logging
from datetime import datetime, timezone

from src.core.logging.context import get_request_id


# Attributes every LogRecord carries; anything else was passed via ``extra=``
_RESERVED_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "message",
}


class DevFormatter(logging.Formatter):
    """
    Development formatter with colors and readable format.

    Format: {timestamp} | {level} | {logger} | [{request_id}] {message}
    """

    COLORS = {
        "DEBUG": "\x1b[38;5;244m",
        "INFO": "\x1b[38;5;39m",
        "WARNING": "\x1b[38;5;208m",
        "ERROR": "\x1b[38;5;196m",
        "CRITICAL": "\x1b[38;5;196;1m",
    }
    RESET = "\x1b[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        request_id = get_request_id()
        request_id_str = f"[{request_id}] " if request_id else ""

        timestamp = datetime.fromtimestamp(record.created).strftime(
            "%Y-%m-%d %H:%M:%S"
        )
        level = record.levelname.ljust(5)

        logger_name = record.name
        if len(logger_name) > 25:
            logger_name = "..." + logger_name[-22:]

        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        line = f"{timestamp} | {level} | {logger_name.ljust(25)} | {request_id_str}{message}"

        if self.use_colors:
            color = self.COLORS.get(record.levelname, "")
            line = f"{color}{line}{self.RESET}"

        return line


class JsonFormatter(logging.Formatter):
    """JSON formatter for production/log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            log_entry["request_id"] = request_id

        log_entry["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        extra_fields = {
            k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS
        }
        if extra_fields:
            log_entry["extra"] = extra_fields

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class FileFormatter(logging.Formatter):
    """Plain text formatter for file output (no colors)."""

    def format(self, record: logging.LogRecord) -> str:
        request_id = get_request_id()
        request_id_str = f"[{request_id}] " if request_id else ""

        timestamp = datetime.fromtimestamp(record.created).strftime(
            "%Y-%m-%d %H:%M:%S,%f"
        )[:23]  # milliseconds
        level = record.levelname.ljust(8)

        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        return f"{timestamp} | {level} | {record.name} | {request_id_str}{message}"
