"""
Logging System
==============

- Category-based log files (app, error, api, provider, performance)
- Daily rotation with 15-day retention
- Request/fetch ID tracing via contextvars
- JSON format for production, colored text for development

Usage:
------
```python
from src.core.logging import setup_logging, get_logger, RequestContext

setup_logging()

logger = get_logger("provider")  # logs/provider/
logger = get_logger()            # logs/app/

with RequestContext(request_id="fetch-abc123"):
    logger.info("Trying mediastack")
```
"""

from src.core.logging.config import setup_logging, get_logger, shutdown_logging
from src.core.logging.context import (
    RequestContext,
    get_request_id,
    set_request_id,
    clear_request_id,
    generate_flow_id,
)
from src.core.logging.middleware import LoggingMiddleware

__all__ = [
    "setup_logging",
    "get_logger",
    "shutdown_logging",
    "RequestContext",
    "get_request_id",
    "set_request_id",
    "clear_request_id",
    "generate_flow_id",
    "LoggingMiddleware",
]
