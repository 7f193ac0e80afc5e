# src/newsfeed/services/aggregator_service.py
"""
News Aggregator Service
Tries providers in priority order and returns the first non-empty page
"""

import time
from typing import Callable, Dict, List, Optional

import httpx

from src.core.logging.context import RequestContext, generate_flow_id, get_request_id
from src.newsfeed.exceptions import ApiKeyError, ProviderError
from src.newsfeed.providers.base_provider import BaseNewsProvider
from src.newsfeed.schemas.article import Article, NewsQuery
from src.newsfeed.schemas.response import AggregationResult, AttemptOutcome, ProviderAttempt
from src.newsfeed.services.key_rotator import KeyRotator
from src.newsfeed.services.reranker import RelevanceReranker, apply_reranking
from src.newsfeed.utils.normalization import sort_articles_by_date
from src.utils.logger.custom_logging import LoggerMixin

Verifier = Callable[[Article], Optional[bool]]


class NewsAggregatorService(LoggerMixin):
    """
    Main service for news aggregation.

    Pipeline:
    1. Walk providers by ascending priority
    2. Pick a key from the rotator (skip the provider if none)
    3. Fetch one page; the first provider with articles wins (no merging)
    4. Sort newest first and apply the optional verifier
    5. Optionally re-rank by user category clicks

    Only when every provider failed on its API key does the caller see an
    ApiKeyError; anything else degrades to an empty list.
    """

    def __init__(
        self,
        providers: List[BaseNewsProvider],
        key_rotator: KeyRotator,
        reranker: Optional[RelevanceReranker] = None,
        verifier: Optional[Verifier] = None,
        rerank_timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
        key_env_vars: Optional[List[str]] = None,
    ):
        """
        Args:
            providers: Adapters; tried in ascending priority whatever the list order
            key_rotator: Shared key pool and usage counters
            reranker: Optional relevance re-ranker for the personalized feed
            verifier: Optional callable setting Article.verified
            rerank_timeout: Seconds allowed for one re-rank call
            client: HTTP client shared by the providers, closed by aclose()
            key_env_vars: Env vars named when no provider is configured
        """
        super().__init__()
        self.providers = sorted(providers, key=lambda p: p.registration.sort_key)
        self.key_rotator = key_rotator
        self.reranker = reranker
        self.verifier = verifier
        self.rerank_timeout = rerank_timeout
        self._client = client
        self._key_env_vars = key_env_vars or []

        self.logger.info(
            f"[Aggregator] Providers in order: {[p.provider_name.value for p in self.providers]}"
        )

    async def aggregate(self, query: NewsQuery) -> AggregationResult:
        """
        Run one fetch and report every provider attempt.

        Raises:
            ApiKeyError: no provider is configured, or every provider failed
                because of its key
        """
        with RequestContext(get_request_id() or generate_flow_id("fetch")):
            return await self._aggregate(query)

    async def _aggregate(self, query: NewsQuery) -> AggregationResult:
        total_start = time.time()

        if not self.providers:
            env_hint = ", ".join(self._key_env_vars) or "the provider API keys"
            raise ApiKeyError(
                f"No news providers configured. Please set {env_hint} in your .env file.",
                env_vars=self._key_env_vars,
            )

        self.logger.info(
            f"[Aggregator] Fetching category={query.category_filter} "
            f"country={query.country_filter} query={query.search_text!r}"
        )

        result = AggregationResult()
        first_key_error: Optional[ApiKeyError] = None

        for provider in self.providers:
            name = provider.provider_name
            start = time.time()

            api_key = self.key_rotator.get_key(name)
            if api_key is None:
                error = provider.key_error("no usable API key configured")
                first_key_error = first_key_error or error
                result.attempts.append(
                    ProviderAttempt(provider=name, outcome=AttemptOutcome.SKIPPED_NO_KEY, message=error.message)
                )
                self.logger.warning(f"[Aggregator] Skipping {name.value}: no usable API key")
                continue

            try:
                articles = await provider.fetch_news(query, api_key)
            except ApiKeyError as e:
                first_key_error = first_key_error or e
                self.key_rotator.mark_exhausted(name, api_key)
                result.attempts.append(
                    ProviderAttempt(
                        provider=name,
                        outcome=AttemptOutcome.KEY_ERROR,
                        time_ms=_elapsed_ms(start),
                        message=e.message,
                    )
                )
                continue
            except ProviderError as e:
                result.attempts.append(
                    ProviderAttempt(
                        provider=name,
                        outcome=AttemptOutcome.PROVIDER_ERROR,
                        time_ms=_elapsed_ms(start),
                        message=e.message,
                    )
                )
                self.logger.warning(f"[Aggregator] {name.value} failed: {e.message}")
                continue
            except Exception as e:
                result.attempts.append(
                    ProviderAttempt(
                        provider=name,
                        outcome=AttemptOutcome.PROVIDER_ERROR,
                        time_ms=_elapsed_ms(start),
                        message=f"{type(e).__name__}: {e}",
                    )
                )
                self.logger.error(f"[Aggregator] {name.value} fetch error: {e}", exc_info=True)
                continue

            if not articles:
                result.attempts.append(
                    ProviderAttempt(provider=name, outcome=AttemptOutcome.EMPTY, time_ms=_elapsed_ms(start))
                )
                self.logger.info(f"[Aggregator] {name.value} returned no articles, trying next provider")
                continue

            articles = self._verify(sort_articles_by_date(articles))
            result.articles = articles
            result.provider = name
            result.attempts.append(
                ProviderAttempt(
                    provider=name,
                    outcome=AttemptOutcome.SUCCESS,
                    article_count=len(articles),
                    time_ms=_elapsed_ms(start),
                )
            )
            break

        result.processing_time_ms = _elapsed_ms(total_start)

        if result.provider is not None:
            self.logger.info(
                f"[Aggregator] Complete: {len(result.articles)} articles from "
                f"{result.provider.value} in {result.processing_time_ms}ms"
            )
            return result

        key_outcomes = {AttemptOutcome.KEY_ERROR, AttemptOutcome.SKIPPED_NO_KEY}
        if first_key_error is not None and all(a.outcome in key_outcomes for a in result.attempts):
            self.logger.error(f"[Aggregator] Every provider failed on its API key: {first_key_error}")
            raise first_key_error

        self.logger.warning(
            f"[Aggregator] All {len(self.providers)} providers exhausted, returning no articles"
        )
        return result

    async def fetch_articles(self, query: NewsQuery) -> List[Article]:
        """Articles for ``query``, newest first (possibly empty)."""
        result = await self.aggregate(query)
        return result.articles

    async def search_news(self, text: str) -> List[Article]:
        """Free-text search across all categories and countries."""
        return await self.fetch_articles(
            NewsQuery(
                query=text,
                display_category=f"Search: {text[:15]}...",
                display_country="Global",
            )
        )

    async def fetch_local_news(self, location: str) -> List[Article]:
        """News about a place, searched as free text."""
        return await self.fetch_articles(
            NewsQuery(
                query=f"news in {location}",
                display_category=f"Local: {location}",
                display_country=location,
            )
        )

    async def get_news_by_category(self, category: str) -> List[Article]:
        """Worldwide headlines for one category."""
        return await self.fetch_articles(
            NewsQuery(
                category=category,
                country="Global",
                display_category=category,
                display_country="Global",
            )
        )

    async def fetch_personalized_articles(
        self,
        query: NewsQuery,
        user_category_clicks: Optional[Dict[str, int]] = None,
    ) -> AggregationResult:
        """
        Fetch, then re-rank by the user's category clicks.

        Returns:
            The fetch result with articles in re-ranked order; ``reasoning``
            stays None when the date order was kept
        """
        with RequestContext(get_request_id() or generate_flow_id("personalized")):
            result = await self._aggregate(query)
            result.articles, result.reasoning = await apply_reranking(
                result.articles,
                user_category_clicks,
                self.reranker,
                timeout=self.rerank_timeout,
            )
            return result

    def provider_status(self) -> Dict[str, object]:
        """Registrations (key counts only) and masked usage counters."""
        return {
            "providers": [p.registration.describe() for p in self.providers],
            "usage": self.key_rotator.usage_snapshot(),
        }

    def _verify(self, articles: List[Article]) -> List[Article]:
        if self.verifier is None:
            return articles
        verified = []
        for article in articles:
            try:
                flag = self.verifier(article)
            except Exception as e:
                self.logger.warning(f"[Aggregator] Verifier failed on {article.id}: {e}")
                flag = None
            verified.append(article.model_copy(update={"verified": flag}))
        return verified

    async def aclose(self):
        """Close provider clients and the shared client if owned"""
        for provider in self.providers:
            await provider.close()
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self.logger.info("[Aggregator] Closed")


def _elapsed_ms(start: float) -> int:
    return int((time.time() - start) * 1000)
