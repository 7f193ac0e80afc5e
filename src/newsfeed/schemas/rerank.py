# src/newsfeed/schemas/rerank.py
"""
Relevance re-ranker contract
"""

from typing import Dict, List
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ArticleForRanking(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    summary: str
    category: str
    published_at: str = Field("", description="ISO 8601 publication date")


class RerankRequest(BaseModel):
    """Articles arrive sorted newest first"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    articles: List[ArticleForRanking] = Field(default_factory=list)
    user_category_clicks: Dict[str, int] = Field(
        default_factory=dict,
        description="Category -> click count, higher = stronger preference",
    )


class RerankResponse(BaseModel):
    """Must contain every input id exactly once"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    prioritized_article_ids: List[str] = Field(default_factory=list)
    reasoning: str = ""
