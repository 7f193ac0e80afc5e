"""
Logging Middleware for FastAPI
=============================

- Request ID injection and propagation (X-Request-ID)
- API request/response logging with duration

Only the path is logged, never the query string.
"""

import time
import uuid
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from src.core.logging.context import set_request_id, clear_request_id
from src.core.logging.config import get_logger


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Generates (or accepts) a request id, logs request start and response
    status with duration, and echoes the id in the X-Request-ID header.
    """

    def __init__(self, app, exclude_paths: Optional[list[str]] = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or ["/api/v1/ping", "/favicon.ico"]
        self.logger = get_logger("api.middleware", category="api")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.exclude_paths:
            return await call_next(request)

        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:12]
        set_request_id(request_id)

        start_time = time.perf_counter()
        client_host = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path

        self.logger.info(f"→ {method} {path} | client={client_host}")

        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start_time) * 1000

            status_mark = "✓" if response.status_code < 400 else "✗"
            self.logger.info(
                f"{status_mark} {method} {path} | "
                f"status={response.status_code} | "
                f"duration={duration_ms:.1f}ms"
            )
            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            self.logger.error(
                f"✗ {method} {path} | "
                f"error={type(e).__name__}: {str(e)[:100]} | "
                f"duration={duration_ms:.1f}ms",
                exc_info=True,
            )
            raise

        finally:
            clear_request_id()
