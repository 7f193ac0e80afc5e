"""
Request Context Management
=========================

Carries a short request id across every log line of one HTTP request or one
aggregation run using contextvars.

Usage:
------
```python
from src.core.logging.context import RequestContext

with RequestContext(request_id=generate_flow_id("fetch")):
    logger.info("Trying mediastack")   # ... | [fetch-a1b2c3d4] Trying mediastack
```
"""

import uuid
from contextvars import ContextVar
from typing import Optional

# Context variable for request ID - thread-safe and async-safe
_request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    """Get the current request ID from context."""
    return _request_id_var.get()


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Set request ID in context.

    Args:
        request_id: Custom request ID. If None, generates a new UUID.

    Returns:
        The request ID that was set.
    """
    if request_id is None:
        request_id = str(uuid.uuid4())[:8]
    _request_id_var.set(request_id)
    return request_id


def clear_request_id() -> None:
    """Clear the request ID from context."""
    _request_id_var.set(None)


class RequestContext:
    """
    Context manager for request ID scoping.

    An id already present in the context (e.g. set by the HTTP middleware) is
    kept unless an explicit one is given, so nested aggregation runs log under
    the id of the request that triggered them.
    """

    def __init__(self, request_id: Optional[str] = None, inherit: bool = True):
        self.request_id = request_id
        self.inherit = inherit
        self._token = None

    def __enter__(self):
        current = _request_id_var.get()
        if self.request_id is None and self.inherit and current:
            self.request_id = current
        self._token = _request_id_var.set(
            self.request_id if self.request_id else str(uuid.uuid4())[:8]
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _request_id_var.reset(self._token)
        return False  # Don't suppress exceptions

    async def __aenter__(self):
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return self.__exit__(exc_type, exc_val, exc_tb)


def generate_flow_id(prefix: str = "flow") -> str:
    """
    Generate a short flow ID for tracking sub-operations.

    Returns:
        Flow ID like "fetch-a1b2c3d4"
    """
    return f"{prefix}-{uuid.uuid4().hex[:8]}"
