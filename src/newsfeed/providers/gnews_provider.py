# src/newsfeed/providers/gnews_provider.py
"""
GNews Provider

Endpoints:
- GET /api/v4/top-headlines  (category/country browsing)
- GET /api/v4/search         (free-text query)
Docs: https://gnews.io/docs/v4
"""

from typing import Any, Dict, List, Optional, Tuple

from src.newsfeed.exceptions import NewsServiceError
from src.newsfeed.providers.base_provider import (
    KEY_ERROR_STATUSES,
    BaseNewsProvider,
    contains_any,
)
from src.newsfeed.schemas.article import Article, NewsQuery
from src.newsfeed.schemas.provider import NewsProvider
from src.newsfeed.schemas.vocabulary import NewsCategory
from src.newsfeed.utils.normalization import (
    NO_SUMMARY,
    NO_TITLE,
    PLACEHOLDER_IMAGE_URL,
    REQUEST_PAGE_SIZE,
    UNKNOWN_SOURCE,
    first_text,
    generate_ai_hint,
    synthetic_id,
)


class GNewsProvider(BaseNewsProvider):
    """
    GNews API.

    Errors arrive as ``{"errors": [...]}`` or ``{"errors": {"field": "msg"}}``.
    """

    ORIGIN = "gnews.io"
    DEFAULT_TOPIC = "general"

    # GNews topics: general, world, nation, business, technology,
    # entertainment, sports, science, health
    TOPIC_MAP: Dict[NewsCategory, str] = {
        NewsCategory.GENERAL: "general",
        NewsCategory.BUSINESS: "business",
        NewsCategory.TECHNOLOGY: "technology",
        NewsCategory.SPORTS: "sports",
        NewsCategory.HEALTH: "health",
        NewsCategory.SCIENCE: "science",
        NewsCategory.ENTERTAINMENT: "entertainment",
        NewsCategory.POLITICS: "nation",
        NewsCategory.FOOD: "general",
        NewsCategory.TRAVEL: "general",
    }

    @property
    def provider_name(self) -> NewsProvider:
        return NewsProvider.GNEWS

    def map_topic(self, category: Optional[str]) -> str:
        parsed = NewsCategory.parse(category)
        if parsed is None:
            return self.DEFAULT_TOPIC
        return self.TOPIC_MAP.get(parsed, self.DEFAULT_TOPIC)

    def build_request(self, query: NewsQuery, api_key: str) -> Tuple[str, Dict[str, Any]]:
        params: Dict[str, Any] = {
            "apikey": api_key,
            "lang": "en",
            "max": REQUEST_PAGE_SIZE,
            "sortby": "publishedAt",
        }
        if query.search_text:
            params["q"] = query.search_text
            endpoint = "search"
        else:
            params["topic"] = self.map_topic(query.category_filter)
            if query.country_filter:
                params["country"] = query.country_filter
            endpoint = "top-headlines"

        if query.page and query.page > 1:
            params["page"] = query.page

        return f"{self.base_url}/{endpoint}", params

    def classify_error(self, status_code: int, payload: Any) -> Optional[NewsServiceError]:
        errors = payload.get("errors") if isinstance(payload, dict) else None
        if not errors and 200 <= status_code < 300:
            return None

        if isinstance(errors, dict):
            message = ", ".join(str(v) for v in errors.values())
        elif isinstance(errors, list):
            message = ", ".join(str(e) for e in errors)
        else:
            message = str(errors or f"HTTP {status_code}")

        if status_code in KEY_ERROR_STATUSES or contains_any(message, ("api key", "apikey", "token")):
            return self.key_error(message)
        return self.provider_error(message, status_code)

    def extract_records(self, payload: Any) -> List[Dict[str, Any]]:
        articles = payload.get("articles") if isinstance(payload, dict) else None
        return articles if isinstance(articles, list) else []

    def to_article(self, record: Dict[str, Any], query: NewsQuery, index: int) -> Article:
        source_info = record.get("source") or {}
        title = first_text(record.get("title"))
        source = first_text(source_info.get("name")) or UNKNOWN_SOURCE
        url = first_text(record.get("url")) or ""
        return Article(
            id=url or synthetic_id(source, index),
            title=title or NO_TITLE,
            summary=first_text(record.get("description"), record.get("content")) or NO_SUMMARY,
            image_url=first_text(record.get("image")) or PLACEHOLDER_IMAGE_URL,
            source=source,
            category=query.display_category,
            country=query.display_country,
            published_at=first_text(record.get("publishedAt")) or "",
            url=url,
            original_provider=self.ORIGIN,
            ai_hint=generate_ai_hint(query.display_category, title),
        )
