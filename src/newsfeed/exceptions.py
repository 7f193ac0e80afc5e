# src/newsfeed/exceptions.py
"""
Failure taxonomy for the news aggregator.

- ApiKeyError: configuration problem (missing, placeholder or rejected key).
  Only surfaces to the caller when every provider ends this way.
- ProviderError: transient upstream failure, malformed payload or empty
  result. Always soft: triggers fallback to the next provider.
- ReRankError: the relevance re-ranker failed or returned an invalid
  permutation. Always soft: the date-sorted order is kept.
"""

from typing import Optional


class NewsServiceError(Exception):
    """Base class for all aggregator failures."""

    def __init__(self, message: str, provider: Optional[str] = None):
        self.message = message
        self.provider = provider
        super().__init__(message)

    def __str__(self) -> str:
        if self.provider:
            return f"[{self.provider}] {self.message}"
        return self.message


class ApiKeyError(NewsServiceError):
    """Bad, missing, expired or unauthorized API key."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        env_vars: Optional[list[str]] = None,
    ):
        super().__init__(message, provider)
        self.env_vars = env_vars or []


class ProviderError(NewsServiceError):
    """Any other non-success from an upstream."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, provider)
        self.status_code = status_code


class ReRankError(NewsServiceError):
    """Re-ranker failure or invalid re-ordering."""
