# src/newsfeed/providers/guardian_provider.py
"""
The Guardian Open Platform Provider

Endpoint: GET /search
Docs: https://open-platform.theguardian.com/documentation/search
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
    first_text,
    generate_ai_hint,
    strip_html,
    synthetic_id,
)


class GuardianProvider(BaseNewsProvider):
    """
    The Guardian content API.

    Filters by section slug; there is no country filter. Articles are all
    Guardian's own, so ``source`` is the section name.
    """

    ORIGIN = "theguardian.com"
    DEFAULT_SECTION = "world"
    DEFAULT_SOURCE = "The Guardian"

    SECTION_MAP: Dict[NewsCategory, str] = {
        NewsCategory.GENERAL: "world",
        NewsCategory.BUSINESS: "business",
        NewsCategory.TECHNOLOGY: "technology",
        NewsCategory.SPORTS: "sport",
        NewsCategory.HEALTH: "society",
        NewsCategory.SCIENCE: "science",
        NewsCategory.ENTERTAINMENT: "film",
        NewsCategory.POLITICS: "politics",
        NewsCategory.FOOD: "food",
        NewsCategory.TRAVEL: "travel",
    }

    @property
    def provider_name(self) -> NewsProvider:
        return NewsProvider.GUARDIAN

    def map_section(self, category: Optional[str]) -> str:
        parsed = NewsCategory.parse(category)
        if parsed is None:
            return self.DEFAULT_SECTION
        return self.SECTION_MAP.get(parsed, self.DEFAULT_SECTION)

    def build_request(self, query: NewsQuery, api_key: str) -> Tuple[str, Dict[str, Any]]:
        params: Dict[str, Any] = {
            "api-key": api_key,
            "show-fields": "trailText,thumbnail",
            "page-size": REQUEST_PAGE_SIZE,
            "order-by": "newest",
        }
        if query.search_text:
            params["q"] = query.search_text
        elif query.category_filter:
            params["section"] = self.map_section(query.category_filter)

        if query.page and query.page > 1:
            params["page"] = query.page

        return f"{self.base_url}/search", params

    def classify_error(self, status_code: int, payload: Any) -> Optional[NewsServiceError]:
        body = payload.get("response") if isinstance(payload, dict) else None
        status = body.get("status") if isinstance(body, dict) else None

        if status == "ok" and 200 <= status_code < 300:
            return None

        message = None
        if isinstance(body, dict):
            message = body.get("message")
        if not message and isinstance(payload, dict):
            # 401s come back as a bare {"message": "Unauthorized"}
            message = payload.get("message")
        message = str(message or status or f"HTTP {status_code}")

        if status_code in KEY_ERROR_STATUSES or contains_any(message, ("api key", "api-key", "unauthorized")):
            return self.key_error(message)
        return self.provider_error(message, status_code)

    def extract_records(self, payload: Any) -> List[Dict[str, Any]]:
        results = payload.get("response", {}).get("results")
        return results if isinstance(results, list) else []

    def to_article(self, record: Dict[str, Any], query: NewsQuery, index: int) -> Article:
        fields = record.get("fields") or {}
        title = first_text(record.get("webTitle"))
        source = first_text(record.get("sectionName")) or self.DEFAULT_SOURCE
        url = first_text(record.get("webUrl")) or ""
        return Article(
            id=url or first_text(record.get("id")) or synthetic_id(source, index),
            title=title or NO_TITLE,
            summary=first_text(strip_html(fields.get("trailText"))) or NO_SUMMARY,
            image_url=first_text(fields.get("thumbnail")) or PLACEHOLDER_IMAGE_URL,
            source=source,
            category=query.display_category,
            country=query.display_country,
            published_at=first_text(record.get("webPublicationDate")) or "",
            url=url,
            original_provider=self.ORIGIN,
            ai_hint=generate_ai_hint(query.display_category, title),
        )
