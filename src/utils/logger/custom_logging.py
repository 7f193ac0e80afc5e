"""
Custom Logging - class-level access to the logging system
=========================================================

Usage:
    from src.utils.logger.custom_logging import LogHandler, LoggerMixin

    # Option 1: LogHandler
    logger = LogHandler().get_logger(__name__)

    # Option 2: LoggerMixin (for classes)
    class KeyRotator(LoggerMixin):
        def get_key(self, ...):
            self.logger.info("Hello")
"""

import logging
from typing import Optional

from src.core.logging import get_logger as _get_production_logger
from src.core.logging.handlers import detect_category


class LogHandler(object):
    """Hands out loggers routed to the category matching their name."""

    def get_logger(self, logger_name: str, category: Optional[str] = None) -> logging.Logger:
        """
        Args:
            logger_name: Name of the logger (usually __name__)
            category: Force a specific category (provider, api, app, performance)
        """
        if category is None:
            category = detect_category(logger_name)
        if category == "app":
            # no prefix needed, app is the default route
            return _get_production_logger(logger_name)
        return _get_production_logger(logger_name, category=category)


class LoggerMixin:
    """
    Mixin class that provides a ``self.logger`` named after the concrete
    class: ``{module}.{ClassName}``.
    """

    def __init__(self) -> None:
        logger_name = f"{self.__class__.__module__}.{self.__class__.__name__}"
        self.logger = LogHandler().get_logger(logger_name)


def get_logger(name: str, category: Optional[str] = None) -> logging.Logger:
    """Convenience wrapper around LogHandler().get_logger."""
    return LogHandler().get_logger(name, category)
