"""
Query -> Mediastack ──┐ (first non-empty page wins)
         Guardian ────┤
         GNews ───────┼→ Normalize → Dedupe → Sort → [Verify] → [Re-rank] → Articles
         Newsdata.io ─┘
              ↑
         KeyRotator (least-used key under its rate limit)
"""
from src.newsfeed.exceptions import ApiKeyError, NewsServiceError, ProviderError, ReRankError
from src.newsfeed.schemas.article import Article, NewsQuery
from src.newsfeed.schemas.provider import KeyUsage, NewsProvider, ProviderRegistration, UsageWindow
from src.newsfeed.schemas.response import AggregationResult, AttemptOutcome, ProviderAttempt
from src.newsfeed.schemas.rerank import RerankRequest, RerankResponse
from src.newsfeed.schemas.vocabulary import NewsCategory

from src.newsfeed.services.key_rotator import KeyRotator
from src.newsfeed.services.aggregator_service import NewsAggregatorService
from src.newsfeed.services.reranker import RelevanceReranker, apply_reranking

from src.newsfeed.providers.mediastack_provider import MediastackProvider
from src.newsfeed.providers.guardian_provider import GuardianProvider
from src.newsfeed.providers.gnews_provider import GNewsProvider
from src.newsfeed.providers.newsdata_provider import NewsdataProvider
from src.newsfeed.providers.registry import create_aggregator

__version__ = "1.0.0"
__all__ = [
    # Errors
    "NewsServiceError",
    "ApiKeyError",
    "ProviderError",
    "ReRankError",
    # Schemas
    "Article",
    "NewsQuery",
    "NewsCategory",
    "NewsProvider",
    "ProviderRegistration",
    "UsageWindow",
    "KeyUsage",
    "AggregationResult",
    "AttemptOutcome",
    "ProviderAttempt",
    "RerankRequest",
    "RerankResponse",
    # Services
    "KeyRotator",
    "NewsAggregatorService",
    "RelevanceReranker",
    "apply_reranking",
    "create_aggregator",
    # Providers
    "MediastackProvider",
    "GuardianProvider",
    "GNewsProvider",
    "NewsdataProvider",
]
