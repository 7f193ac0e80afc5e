# src/newsfeed/schemas/provider.py
"""
Provider registration and key usage records
"""

from datetime import datetime
from enum import Enum
from typing import List
from pydantic import BaseModel, Field


class NewsProvider(str, Enum):
    """Upstream news APIs"""
    MEDIASTACK = "mediastack"
    GUARDIAN = "guardian"
    GNEWS = "gnews"
    NEWSDATA = "newsdata"


class UsageWindow(str, Enum):
    """Period after which a key's request counter resets"""
    DAILY = "daily"
    MONTHLY = "monthly"

    def has_elapsed(self, window_start: datetime, now: datetime) -> bool:
        if self is UsageWindow.DAILY:
            return now.date() != window_start.date()
        return (now.year, now.month) != (window_start.year, window_start.month)


class ProviderRegistration(BaseModel):
    """
    One configured upstream.

    ``keys`` is already filtered of unset/placeholder values.
    """
    name: NewsProvider
    base_url: str
    priority: int = Field(..., description="Lower = tried first")
    keys: List[str] = Field(default_factory=list)
    rate_limit: int = Field(..., ge=1, description="Requests per key per window")
    reset_window: UsageWindow = UsageWindow.DAILY
    key_env_vars: List[str] = Field(default_factory=list, description="Where the keys come from")

    @property
    def sort_key(self) -> tuple:
        return (self.priority, self.name.value)

    def describe(self) -> dict:
        """Public view - key count only, never the keys"""
        return {
            "name": self.name.value,
            "base_url": self.base_url,
            "priority": self.priority,
            "configured_keys": len(self.keys),
            "rate_limit": self.rate_limit,
            "reset_window": self.reset_window.value,
            "key_env_vars": self.key_env_vars,
        }


class KeyUsage(BaseModel):
    """Request counter for one (provider, key) pair within its window"""
    provider: NewsProvider
    key: str
    count: int = 0
    window_start: datetime

    def masked(self) -> dict:
        return {
            "provider": self.provider.value,
            "key": mask_key(self.key),
            "count": self.count,
            "window_start": self.window_start.isoformat(),
        }


def mask_key(key: str) -> str:
    """abcd1234efgh -> abcd…efgh"""
    if len(key) <= 8:
        return "*" * len(key)
    return f"{key[:4]}…{key[-4:]}"
