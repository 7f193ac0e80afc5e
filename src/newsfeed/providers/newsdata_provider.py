# src/newsfeed/providers/newsdata_provider.py
"""
Newsdata.io Provider

Endpoint: GET /api/1/news (latest news)
Docs: https://newsdata.io/documentation
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
    UNKNOWN_SOURCE,
    first_text,
    generate_ai_hint,
    synthetic_id,
)


class NewsdataProvider(BaseNewsProvider):
    """
    Newsdata.io latest-news API.

    ``pubDate`` is "YYYY-MM-DD HH:MM:SS" in UTC. Errors arrive as
    ``{"status": "error", "results": {"message": ..., "code": ...}}``.
    Page tokens are opaque (nextPage), so ``query.page`` is not forwarded.
    """

    ORIGIN = "newsdata.io"
    DEFAULT_CATEGORY = "top"

    CATEGORY_MAP: Dict[NewsCategory, str] = {
        NewsCategory.GENERAL: "top",
        NewsCategory.BUSINESS: "business",
        NewsCategory.TECHNOLOGY: "technology",
        NewsCategory.SPORTS: "sports",
        NewsCategory.HEALTH: "health",
        NewsCategory.SCIENCE: "science",
        NewsCategory.ENTERTAINMENT: "entertainment",
        NewsCategory.POLITICS: "politics",
        NewsCategory.FOOD: "food",
        NewsCategory.TRAVEL: "tourism",
    }

    KEY_ERROR_CODES = {"unauthorized", "invalidapikey", "apikeymissing", "apilimitexceeded"}

    @property
    def provider_name(self) -> NewsProvider:
        return NewsProvider.NEWSDATA

    def map_category(self, category: Optional[str]) -> str:
        parsed = NewsCategory.parse(category)
        if parsed is None:
            return self.DEFAULT_CATEGORY
        return self.CATEGORY_MAP.get(parsed, self.DEFAULT_CATEGORY)

    def build_request(self, query: NewsQuery, api_key: str) -> Tuple[str, Dict[str, Any]]:
        params: Dict[str, Any] = {
            "apikey": api_key,
            "image": 1,
            "language": "en",
        }
        if query.search_text:
            params["q"] = query.search_text
        else:
            params["category"] = self.map_category(query.category_filter)
            if query.country_filter:
                params["country"] = query.country_filter

        return f"{self.base_url}/news", params

    def classify_error(self, status_code: int, payload: Any) -> Optional[NewsServiceError]:
        status = payload.get("status") if isinstance(payload, dict) else None
        if status != "error" and 200 <= status_code < 300:
            return None

        code, message = "", ""
        if isinstance(payload, dict):
            details = payload.get("results")
            if isinstance(details, dict):
                code = str(details.get("code") or "")
                message = str(details.get("message") or "")
            code = code or str(payload.get("code") or "")
            message = message or str(payload.get("message") or "")
        message = message or f"HTTP {status_code}"

        normalized_code = code.replace("_", "").replace(" ", "").lower()
        if (
            normalized_code in self.KEY_ERROR_CODES
            or status_code in KEY_ERROR_STATUSES
            or contains_any(message, ("api key", "apikey", "unauthorized"))
        ):
            return self.key_error(f"{code or status_code} - {message}")
        return self.provider_error(f"{code or 'error'} - {message}", status_code)

    def extract_records(self, payload: Any) -> List[Dict[str, Any]]:
        results = payload.get("results") if isinstance(payload, dict) else None
        return results if isinstance(results, list) else []

    def to_article(self, record: Dict[str, Any], query: NewsQuery, index: int) -> Article:
        title = first_text(record.get("title"))
        source = first_text(record.get("source_name"), record.get("source_id")) or UNKNOWN_SOURCE
        url = first_text(record.get("link")) or ""
        return Article(
            id=url or first_text(record.get("article_id")) or synthetic_id(source, index),
            title=title or NO_TITLE,
            summary=first_text(record.get("description"), record.get("content")) or NO_SUMMARY,
            image_url=first_text(record.get("image_url")) or PLACEHOLDER_IMAGE_URL,
            source=source,
            category=query.display_category,
            country=query.display_country,
            published_at=first_text(record.get("pubDate")) or "",
            url=url,
            original_provider=self.ORIGIN,
            ai_hint=generate_ai_hint(query.display_category, title),
        )
