import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

import httpx

from src.newsfeed.exceptions import ApiKeyError, NewsServiceError, ProviderError
from src.newsfeed.schemas.article import Article, NewsQuery
from src.newsfeed.schemas.provider import NewsProvider, ProviderRegistration
from src.newsfeed.services.key_rotator import KeyRotator
from src.newsfeed.utils.normalization import (
    MAX_ARTICLES,
    deduplicate_by_id,
    sort_articles_by_date,
)
from src.utils.logger.custom_logging import LoggerMixin

KEY_ERROR_STATUSES = {401, 403}


class BaseNewsProvider(LoggerMixin, ABC):
    """
    Abstract base class for news providers.

    Each provider must:
    1. Build its upstream request from a NewsQuery
    2. Classify upstream failures as ApiKeyError or ProviderError
    3. Convert records to the Article format

    ``fetch_news`` drives one attempt: exactly one HTTP call, exactly one
    ``record_usage``. ApiKeyError propagates; ProviderError becomes ``[]``.
    """

    # Shown as Article.original_provider
    ORIGIN: str = ""

    def __init__(
        self,
        registration: ProviderRegistration,
        key_rotator: KeyRotator,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 5.0,
    ):
        super().__init__()
        self.registration = registration
        self.key_rotator = key_rotator
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    @abstractmethod
    def provider_name(self) -> NewsProvider:
        """Return the provider identifier"""
        pass

    @property
    def priority(self) -> int:
        """Lower number = tried first"""
        return self.registration.priority

    @property
    def base_url(self) -> str:
        return self.registration.base_url.rstrip("/")

    @abstractmethod
    def build_request(self, query: NewsQuery, api_key: str) -> Tuple[str, Dict[str, Any]]:
        """Return (url, query params) for one request."""
        pass

    @abstractmethod
    def classify_error(self, status_code: int, payload: Any) -> Optional[NewsServiceError]:
        """
        Inspect a response and return the failure it represents, or None for
        a usable response. Structured error codes first, keywords last.
        """
        pass

    @abstractmethod
    def extract_records(self, payload: Any) -> List[Dict[str, Any]]:
        """Pull the raw article records out of a successful payload."""
        pass

    @abstractmethod
    def to_article(self, record: Dict[str, Any], query: NewsQuery, index: int) -> Article:
        """Map one upstream record onto the Article shape."""
        pass

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def close(self):
        """Close the HTTP client if this provider created it"""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()

    async def fetch_news(self, query: NewsQuery, api_key: str) -> List[Article]:
        """
        Fetch one page for ``query`` with ``api_key``.

        Returns:
            Normalized articles sorted newest first (possibly empty)

        Raises:
            ApiKeyError: the upstream rejected the key
        """
        start_time = time.time()
        self._log_fetch_start(query)
        try:
            status_code, payload = await self._send(query, api_key)
            error = self.classify_error(status_code, payload)
            if error is not None:
                raise error
            if not 200 <= status_code < 300:
                raise ProviderError(f"HTTP {status_code}", self.provider_name.value, status_code)
            if payload is None:
                raise ProviderError("Malformed (non-JSON) payload", self.provider_name.value, status_code)

            records = self.extract_records(payload)
            if not records:
                raise ProviderError("No articles in response", self.provider_name.value, status_code)

            articles = self._normalize(records, query)
            if not articles:
                raise ProviderError("No usable articles in response", self.provider_name.value, status_code)

        except ApiKeyError as e:
            self._log_fetch_error(f"key error: {e.message}")
            raise
        except ProviderError as e:
            self.logger.warning(f"[{self.provider_name.value}] {e.message}")
            return []

        self._log_fetch_complete(len(articles), int((time.time() - start_time) * 1000))
        return articles

    async def _send(self, query: NewsQuery, api_key: str) -> Tuple[int, Any]:
        """
        Issue the request. Transport failures and timeouts become
        ProviderError; usage is recorded whatever the outcome.

        Returns:
            (status code, decoded JSON or None when the body is not JSON)
        """
        url, params = self.build_request(query, api_key)
        try:
            client = await self._get_client()
            response = await client.get(url, params=params, timeout=self.timeout)
        except httpx.TimeoutException as e:
            raise ProviderError(f"Timed out after {self.timeout}s: {type(e).__name__}", self.provider_name.value) from e
        except httpx.RequestError as e:
            raise ProviderError(f"Request error: {type(e).__name__}", self.provider_name.value) from e
        finally:
            self.key_rotator.record_usage(self.provider_name, api_key)

        try:
            payload = response.json()
        except ValueError:
            payload = None
        return response.status_code, payload

    def _normalize(self, records: List[Any], query: NewsQuery) -> List[Article]:
        articles: List[Article] = []
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                self.logger.warning(f"[{self.provider_name.value}] Skipping non-object record #{index}")
                continue
            try:
                articles.append(self.to_article(record, query, index))
            except (ValueError, TypeError, AttributeError) as e:
                self.logger.warning(f"[{self.provider_name.value}] Failed to convert record #{index}: {e}")
        articles = deduplicate_by_id(articles)[:MAX_ARTICLES]
        return sort_articles_by_date(articles)

    def key_error(self, detail: str) -> ApiKeyError:
        """ApiKeyError whose message names the env vars to check"""
        env_hint = ", ".join(self.registration.key_env_vars) or "the API key"
        return ApiKeyError(
            f"API key issue: {detail}. Please check {env_hint} in your .env file or your API plan limits.",
            provider=self.provider_name.value,
            env_vars=self.registration.key_env_vars,
        )

    def provider_error(self, detail: str, status_code: Optional[int] = None) -> ProviderError:
        return ProviderError(detail, provider=self.provider_name.value, status_code=status_code)

    def _log_fetch_start(self, query: NewsQuery):
        self.logger.info(
            f"[{self.provider_name.value}] Fetching category={query.category_filter} "
            f"country={query.country_filter} query={query.search_text!r} page={query.page}"
        )

    def _log_fetch_complete(self, count: int, time_ms: int):
        self.logger.info(f"[{self.provider_name.value}] Fetched {count} articles in {time_ms}ms")

    def _log_fetch_error(self, error: str):
        self.logger.error(f"[{self.provider_name.value}] {error}")


def contains_any(text: Optional[str], keywords) -> bool:
    """Case-insensitive keyword check used as the last-resort classifier."""
    if not text:
        return False
    lowered = str(text).lower()
    return any(keyword in lowered for keyword in keywords)
