# src/newsfeed/schemas/vocabulary.py
"""
Generic news vocabulary shared by every provider adapter.

Adapters translate NewsCategory into their own terms through enum-keyed
tables (see each provider module) with an explicit default.
"""

from enum import Enum
from typing import Dict, Optional


class NewsCategory(str, Enum):
    """Categories the UI offers."""
    GENERAL = "general"
    BUSINESS = "business"
    TECHNOLOGY = "technology"
    SPORTS = "sports"
    HEALTH = "health"
    SCIENCE = "science"
    ENTERTAINMENT = "entertainment"
    POLITICS = "politics"
    FOOD = "food"
    TRAVEL = "travel"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["NewsCategory"]:
        """Case-insensitive lookup; None for unknown values."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


# Filter values meaning "no filter"
UNFILTERED_VALUES = frozenset({"all", "global"})

# Display country name -> ISO 3166 alpha-2 code (None = worldwide)
COUNTRY_CODES: Dict[str, Optional[str]] = {
    "USA": "us",
    "UK": "gb",
    "Canada": "ca",
    "Brazil": "br",
    "Australia": "au",
    "India": "in",
    "Germany": "de",
    "France": "fr",
    "Japan": "jp",
    "China": "cn",
    "Global": None,
}


def resolve_country_code(value: Optional[str]) -> Optional[str]:
    """
    Accept either a display name ("UK") or a code ("gb") and return the code.
    Unknown names pass through lower-cased.
    """
    if not value or not value.strip():
        return None
    value = value.strip()
    for name, code in COUNTRY_CODES.items():
        if name.lower() == value.lower():
            return code
    if value.lower() in UNFILTERED_VALUES:
        return None
    return value.lower()
