from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.app import logger_instance
from src.newsfeed.exceptions import ApiKeyError
from src.newsfeed.schemas.article import NewsQuery
from src.newsfeed.schemas.response import ArticleListResponse
from src.newsfeed.services.aggregator_service import NewsAggregatorService

logger = logger_instance.get_logger(__name__)

router = APIRouter(prefix="/news")


class PersonalizedNewsRequest(BaseModel):
    """Query plus the user's category click counts"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    query: NewsQuery
    user_category_clicks: Dict[str, int] = Field(
        default_factory=dict,
        description="Category -> click count",
    )


def get_aggregator(request: Request) -> NewsAggregatorService:
    aggregator = getattr(request.app.state, "aggregator", None)
    if aggregator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="News aggregator is not initialized",
        )
    return aggregator


@router.get("", response_model=ArticleListResponse, response_model_by_alias=True)
async def fetch_articles(
    category: Optional[str] = Query(None, description="Generic category, e.g. technology"),
    country: Optional[str] = Query(None, description="ISO country code, e.g. gb"),
    q: Optional[str] = Query(None, description="Free-text search; overrides category/country"),
    display_category: str = Query("General", min_length=1),
    display_country: str = Query("Global", min_length=1),
    page: Optional[int] = Query(None, ge=1),
    aggregator: NewsAggregatorService = Depends(get_aggregator),
) -> ArticleListResponse:
    """
    Articles from the first provider that has any, newest first.

    503 when every provider is missing or rejecting its API key.
    """
    query = NewsQuery(
        category=category,
        country=country,
        query=q,
        display_category=display_category,
        display_country=display_country,
        page=page,
    )
    try:
        result = await aggregator.aggregate(query)
    except ApiKeyError as e:
        logger.error(f"News fetch failed on configuration: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

    return ArticleListResponse(
        articles=result.articles,
        total_count=len(result.articles),
        provider=result.provider.value if result.provider else None,
    )


@router.post("/personalized", response_model=ArticleListResponse, response_model_by_alias=True)
async def fetch_personalized_articles(
    request: PersonalizedNewsRequest,
    aggregator: NewsAggregatorService = Depends(get_aggregator),
) -> ArticleListResponse:
    """Same as GET /news, re-ranked by the user's category clicks when possible."""
    try:
        result = await aggregator.fetch_personalized_articles(
            request.query, request.user_category_clicks
        )
    except ApiKeyError as e:
        logger.error(f"Personalized fetch failed on configuration: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

    return ArticleListResponse(
        articles=result.articles,
        total_count=len(result.articles),
        provider=result.provider.value if result.provider else None,
        reasoning=result.reasoning,
    )


@router.get("/providers")
async def provider_status(
    aggregator: NewsAggregatorService = Depends(get_aggregator),
) -> Dict[str, Any]:
    """Provider order, key counts and masked usage. Keys are never returned."""
    return aggregator.provider_status()
