# src/newsfeed/schemas/response.py
"""
Aggregation result schemas
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.newsfeed.schemas.article import Article
from src.newsfeed.schemas.provider import NewsProvider


class AttemptOutcome(str, Enum):
    SUCCESS = "success"
    EMPTY = "empty"
    PROVIDER_ERROR = "provider_error"
    KEY_ERROR = "key_error"
    SKIPPED_NO_KEY = "skipped_no_key"


class ProviderAttempt(BaseModel):
    """What happened when one provider was tried"""
    provider: NewsProvider
    outcome: AttemptOutcome
    article_count: int = 0
    time_ms: int = 0
    message: Optional[str] = None


class AggregationResult(BaseModel):
    """
    Outcome of one fetch: the winning provider's articles plus the trail of
    attempts for monitoring.
    """
    articles: List[Article] = Field(default_factory=list)
    provider: Optional[NewsProvider] = Field(None, description="Provider whose page was returned")
    attempts: List[ProviderAttempt] = Field(default_factory=list)
    processing_time_ms: int = 0
    reasoning: Optional[str] = Field(None, description="Re-ranker explanation, personalized feed only")


class ArticleListResponse(BaseModel):
    """HTTP response body for article listings"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    articles: List[Article] = Field(default_factory=list)
    total_count: int = 0
    provider: Optional[str] = None
    reasoning: Optional[str] = Field(None, description="Re-ranker explanation, personalized feed only")
