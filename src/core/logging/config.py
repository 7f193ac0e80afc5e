"""
Logging Configuration
====================

Environment Variables:
---------------------
- LOG_LEVEL: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
- LOG_FORMAT: "json" for production, "text" for development (default)
- LOG_DIR: Base directory for log files (default: ./logs)
- LOG_RETENTION_DAYS: Days to keep log files (default: 15)
- LOG_CONSOLE: "true" to enable console output (default: true)
- LOG_FILES: "false" to disable the category/error files (default: true)
"""

import os
import sys
import logging
from typing import Dict, Optional

from src.core.logging.formatters import DevFormatter, JsonFormatter
from src.core.logging.handlers import (
    ensure_log_directories,
    create_error_handler,
    create_smart_routing_handler,
    cleanup_old_logs,
)


_configured_loggers: Dict[str, logging.Logger] = {}
_logging_initialized = False


def get_config() -> dict:
    """Get logging configuration from environment."""
    return {
        "level": os.environ.get("LOG_LEVEL", "INFO").upper(),
        "format": os.environ.get("LOG_FORMAT", "text").lower(),
        "log_dir": os.environ.get("LOG_DIR", "logs"),
        "retention_days": int(os.environ.get("LOG_RETENTION_DAYS", "15")),
        "console_enabled": os.environ.get("LOG_CONSOLE", "true").lower() == "true",
        "files_enabled": os.environ.get("LOG_FILES", "true").lower() == "true",
        "is_production": os.environ.get("ENV_STATE", "dev").lower() == "prod",
    }


def setup_logging(
    level: Optional[str] = None,
    use_json: Optional[bool] = None,
    console: Optional[bool] = None,
) -> None:
    """
    Initialize the logging system. Call this once at application startup;
    later calls are no-ops.
    """
    global _logging_initialized

    if _logging_initialized:
        return

    config = get_config()

    if level:
        config["level"] = level.upper()
    if use_json is not None:
        config["format"] = "json" if use_json else "text"
    if console is not None:
        config["console_enabled"] = console

    log_level = getattr(logging, config["level"], logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # handlers filter
    root_logger.handlers.clear()

    use_json_format = config["format"] == "json" or config["is_production"]

    if config["console_enabled"]:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        if use_json_format:
            console_handler.setFormatter(JsonFormatter())
        else:
            console_handler.setFormatter(DevFormatter(use_colors=True))
        root_logger.addHandler(console_handler)

    if config["files_enabled"]:
        ensure_log_directories()
        root_logger.addHandler(create_smart_routing_handler(
            use_json=use_json_format,
            retention_days=config["retention_days"],
            level=logging.DEBUG,
        ))
        root_logger.addHandler(create_error_handler(
            use_json=use_json_format,
            retention_days=config["retention_days"],
        ))
        cleanup_old_logs(config["retention_days"])

    _configure_third_party_loggers(log_level)

    _logging_initialized = True

    root_logger.info(
        f"Logging initialized: level={config['level']}, "
        f"format={'json' if use_json_format else 'text'}, "
        f"files={'on' if config['files_enabled'] else 'off'}, "
        f"dir={config['log_dir']}"
    )


def _configure_third_party_loggers(level: int) -> None:
    """Quiet third-party loggers; httpx logs every request URL, keys included."""
    for name in ["httpx", "httpcore", "asyncio", "apscheduler", "uvicorn.access"]:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(
    name: Optional[str] = None,
    category: Optional[str] = None,
) -> logging.Logger:
    """
    Get a configured logger.

    Args:
        name: Logger name (e.g., module name). If None, uses "app"
        category: Force a category by prefixing the name

    Examples:
        get_logger("api.news")  → logs to api/
        get_logger("src.newsfeed.providers.gnews_provider")  → logs to provider/
        get_logger("mymodule", category="provider")  → logs to provider/
    """
    if not _logging_initialized:
        setup_logging()

    if name is None:
        name = "app"

    if category and category not in name.lower():
        name = f"{category}.{name}"

    if name in _configured_loggers:
        return _configured_loggers[name]

    logger = logging.getLogger(name)
    _configured_loggers[name] = logger
    return logger


def shutdown_logging() -> None:
    """Flush and close handlers at application shutdown."""
    global _logging_initialized

    logging.shutdown()
    _configured_loggers.clear()
    _logging_initialized = False
