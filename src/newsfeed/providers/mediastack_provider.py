# src/newsfeed/providers/mediastack_provider.py
"""
Mediastack Provider

Endpoint: GET /v1/news
Docs: https://mediastack.com/documentation
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


class MediastackProvider(BaseNewsProvider):
    """
    Mediastack news provider.

    Errors arrive as ``{"error": {"code": ..., "message": ...}}``, often with
    HTTP 200, so the body is always inspected.
    """

    ORIGIN = "mediastack.com"
    DEFAULT_CATEGORY = "general"

    # Mediastack categories: general, business, entertainment, health,
    # science, sports, technology
    CATEGORY_MAP: Dict[NewsCategory, str] = {
        NewsCategory.GENERAL: "general",
        NewsCategory.BUSINESS: "business",
        NewsCategory.TECHNOLOGY: "technology",
        NewsCategory.SPORTS: "sports",
        NewsCategory.HEALTH: "health",
        NewsCategory.SCIENCE: "science",
        NewsCategory.ENTERTAINMENT: "entertainment",
        NewsCategory.POLITICS: "general",
        NewsCategory.FOOD: "general",
        NewsCategory.TRAVEL: "general",
    }

    KEY_ERROR_CODES = {
        "invalid_access_key",
        "missing_access_key",
        "inactive_user",
        "usage_limit_reached",
        "function_access_restricted",
        "https_access_restricted",
    }

    @property
    def provider_name(self) -> NewsProvider:
        return NewsProvider.MEDIASTACK

    def map_category(self, category: Optional[str]) -> str:
        parsed = NewsCategory.parse(category)
        if parsed is None:
            return self.DEFAULT_CATEGORY
        return self.CATEGORY_MAP.get(parsed, self.DEFAULT_CATEGORY)

    def build_request(self, query: NewsQuery, api_key: str) -> Tuple[str, Dict[str, Any]]:
        params: Dict[str, Any] = {
            "access_key": api_key,
            "limit": REQUEST_PAGE_SIZE,
            "languages": "en",
            "sort": "published_desc",
        }
        if query.search_text:
            params["keywords"] = query.search_text
        else:
            if query.category_filter:
                params["categories"] = self.map_category(query.category_filter)
            if query.country_filter:
                params["countries"] = query.country_filter

        if query.page and query.page > 1:
            params["offset"] = (query.page - 1) * REQUEST_PAGE_SIZE

        return f"{self.base_url}/news", params

    def classify_error(self, status_code: int, payload: Any) -> Optional[NewsServiceError]:
        error = payload.get("error") if isinstance(payload, dict) else None
        if not error and 200 <= status_code < 300:
            return None
        if not isinstance(error, dict):
            error = {"message": str(error)} if error else {}

        code = str(error.get("code") or "").lower()
        message = str(error.get("message") or f"HTTP {status_code}")

        if (
            code in self.KEY_ERROR_CODES
            or contains_any(code, ("access_key", "api_key", "subscription"))
            or status_code in KEY_ERROR_STATUSES
            or contains_any(message, ("api key", "access key", "access_key"))
        ):
            return self.key_error(f"{code or status_code} - {message}")
        return self.provider_error(f"{code or 'error'} - {message}", status_code)

    def extract_records(self, payload: Any) -> List[Dict[str, Any]]:
        data = payload.get("data") if isinstance(payload, dict) else None
        return data if isinstance(data, list) else []

    def to_article(self, record: Dict[str, Any], query: NewsQuery, index: int) -> Article:
        title = first_text(record.get("title"))
        source = first_text(record.get("source")) or UNKNOWN_SOURCE
        url = first_text(record.get("url")) or ""
        return Article(
            id=url or synthetic_id(source, index),
            title=title or NO_TITLE,
            summary=first_text(record.get("description")) or NO_SUMMARY,
            image_url=first_text(record.get("image")) or PLACEHOLDER_IMAGE_URL,
            source=source,
            category=query.display_category,
            country=query.display_country,
            published_at=first_text(record.get("published_at")) or "",
            url=url,
            original_provider=self.ORIGIN,
            ai_hint=generate_ai_hint(query.display_category, title),
        )
