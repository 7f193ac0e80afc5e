"""
Custom Log Handlers
==================

Directory Structure:
-------------------
logs/
├── app/            # Default application logs (aggregator, jobs)
├── error/          # ERROR + CRITICAL only
├── api/            # HTTP request/response
├── provider/       # Upstream news API calls and key rotation
└── performance/    # Timing

File naming: {category}_YYYY-MM-DD.log
Retention: 15 days (configurable)
"""

import os
import logging
from datetime import datetime, timedelta
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from src.core.logging.formatters import FileFormatter, JsonFormatter


CATEGORIES = ["app", "error", "api", "provider", "performance"]


def get_log_dir() -> Path:
    """Get the base log directory."""
    return Path(os.environ.get("LOG_DIR", "logs"))


def ensure_log_directories() -> None:
    """Create all log category directories."""
    base_dir = get_log_dir()
    for category in CATEGORIES:
        (base_dir / category).mkdir(parents=True, exist_ok=True)


def cleanup_old_logs(retention_days: int = 15) -> int:
    """
    Remove log files older than retention_days.

    Returns:
        Number of files deleted
    """
    base_dir = get_log_dir()
    cutoff_date = datetime.now() - timedelta(days=retention_days)
    deleted_count = 0

    for category in CATEGORIES:
        category_dir = base_dir / category
        if not category_dir.exists():
            continue

        for log_file in category_dir.glob("*.log"):
            try:
                # {category}_YYYY-MM-DD.log
                date_str = log_file.stem.split("_")[-1]
                if len(date_str) == 10:
                    file_date = datetime.strptime(date_str, "%Y-%m-%d")
                    if file_date < cutoff_date:
                        log_file.unlink()
                        deleted_count += 1
            except (ValueError, IndexError):
                continue

    return deleted_count


class DailyRotatingFileHandler(TimedRotatingFileHandler):
    """
    Rotates at midnight into {category}_YYYY-MM-DD.log files.
    """

    def __init__(
        self,
        category: str,
        retention_days: int = 15,
        use_json: bool = False,
    ):
        self.category = category
        self.retention_days = retention_days

        category_dir = get_log_dir() / category
        category_dir.mkdir(parents=True, exist_ok=True)

        today = datetime.now().strftime("%Y-%m-%d")
        filename = category_dir / f"{category}_{today}.log"

        super().__init__(
            filename=str(filename),
            when="midnight",
            interval=1,
            backupCount=retention_days,
            encoding="utf-8",
        )

        self.setFormatter(JsonFormatter() if use_json else FileFormatter())

    def doRollover(self):
        """Override to use our date-based naming convention."""
        if self.stream:
            self.stream.close()
            self.stream = None

        today = datetime.now().strftime("%Y-%m-%d")
        self.baseFilename = str(get_log_dir() / self.category / f"{self.category}_{today}.log")
        self.stream = self._open()

        cleanup_old_logs(self.retention_days)


class ErrorMirrorFilter(logging.Filter):
    """Filter that only allows ERROR and CRITICAL level logs."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def create_error_handler(
    use_json: bool = False,
    retention_days: int = 15,
) -> DailyRotatingFileHandler:
    """
    Create handler that captures all ERROR/CRITICAL logs from every logger.
    """
    handler = DailyRotatingFileHandler(
        category="error",
        retention_days=retention_days,
        use_json=use_json,
    )
    handler.setLevel(logging.ERROR)
    handler.addFilter(ErrorMirrorFilter())
    return handler


def detect_category(logger_name: str) -> str:
    """Map a logger name to its log category."""
    name_lower = logger_name.lower()

    if any(kw in name_lower for kw in SmartRoutingHandler.PROVIDER_KEYWORDS):
        return "provider"
    if any(kw in name_lower for kw in SmartRoutingHandler.API_KEYWORDS):
        return "api"
    if any(kw in name_lower for kw in SmartRoutingHandler.PERF_KEYWORDS):
        return "performance"
    return "app"


class SmartRoutingHandler(logging.Handler):
    """
    Routes records to the category file matching the logger name, so any code
    using logging.getLogger(__name__) lands in the right file.
    """

    PROVIDER_KEYWORDS = ["provider", "mediastack", "guardian", "gnews", "newsdata", "rotator"]
    API_KEYWORDS = ["api", "router", "endpoint", "uvicorn", "fastapi"]
    PERF_KEYWORDS = ["perf", "metric", "timing", "duration", "performance"]

    def __init__(
        self,
        use_json: bool = False,
        retention_days: int = 15,
        level: int = logging.DEBUG,
    ):
        super().__init__(level)
        self.use_json = use_json
        self.retention_days = retention_days
        self._category_handlers: dict[str, DailyRotatingFileHandler] = {}

    def _get_category_handler(self, category: str) -> DailyRotatingFileHandler:
        if category not in self._category_handlers:
            self._category_handlers[category] = DailyRotatingFileHandler(
                category=category,
                retention_days=self.retention_days,
                use_json=self.use_json,
            )
        return self._category_handlers[category]

    def emit(self, record: logging.LogRecord) -> None:
        try:
            handler = self._get_category_handler(detect_category(record.name))
            handler.emit(record)
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        for handler in self._category_handlers.values():
            handler.close()
        self._category_handlers.clear()
        super().close()


def create_smart_routing_handler(
    use_json: bool = False,
    retention_days: int = 15,
    level: int = logging.DEBUG,
) -> SmartRoutingHandler:
    return SmartRoutingHandler(
        use_json=use_json,
        retention_days=retention_days,
        level=level,
    )
