"""
Shared normalization helpers: fallback literals, topical hints, timestamp
parsing and newest-first ordering.
"""

import re
import time
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from dateutil import parser as date_parser

from src.newsfeed.schemas.article import Article

NO_TITLE = "No title available"
NO_SUMMARY = "No summary available"
PLACEHOLDER_IMAGE_URL = "https://placehold.co/600x400.png"
UNKNOWN_SOURCE = "Unknown Source"
GENERIC_HINT = "news media"

# Ask upstream for a few more than we show so unusable records can be dropped
REQUEST_PAGE_SIZE = 25
MAX_ARTICLES = 21

_HINTLESS_CATEGORIES = {"general", "top"}
_TAG_RE = re.compile(r"<[^>]+>")


def first_text(*values) -> Optional[str]:
    """First value that is a non-blank string, stripped."""
    for value in values:
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def strip_html(text: Optional[str]) -> Optional[str]:
    if not text:
        return text
    return re.sub(r"\s+", " ", _TAG_RE.sub("", text)).strip()


def generate_ai_hint(display_category: Optional[str], title: Optional[str]) -> str:
    """
    Display category unless it is a catch-all, else the first two words of the
    title, else a generic hint.
    """
    if display_category and display_category.strip().lower() not in _HINTLESS_CATEGORIES:
        return display_category.strip().lower()
    words = (title or "").split()[:2]
    if words:
        return " ".join(words).lower()
    return GENERIC_HINT


def synthetic_id(source: str, index: int) -> str:
    """Unique within one batch: source name + position + current epoch ms."""
    return f"{source}_{index}_{int(time.time() * 1000)}"


# Newsdata.io pubDate, e.g. "2024-05-01 10:00:00"
NEWSDATA_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_published_at(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an upstream timestamp. Naive values are taken as UTC.
    Returns None when missing or unparsable.
    """
    if not value or not isinstance(value, str) or not value.strip():
        return None
    value = value.strip()
    try:
        parsed = date_parser.isoparse(value)
    except (ValueError, OverflowError):
        try:
            parsed = datetime.strptime(value, NEWSDATA_TIMESTAMP_FORMAT)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sort_articles_by_date(articles: Iterable[Article]) -> List[Article]:
    """
    Newest first. Articles whose timestamp is missing or unparsable go last,
    keeping their relative order (sorted() is stable).
    """
    def _key(article: Article):
        parsed = parse_published_at(article.published_at)
        if parsed is None:
            return (1, 0.0)
        return (0, -parsed.timestamp())

    return sorted(articles, key=_key)


def deduplicate_by_id(articles: Iterable[Article]) -> List[Article]:
    """Drop later articles whose id was already seen."""
    seen = set()
    unique: List[Article] = []
    for article in articles:
        if article.id in seen:
            continue
        seen.add(article.id)
        unique.append(article)
    return unique
