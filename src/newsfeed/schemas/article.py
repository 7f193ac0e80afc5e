# src/newsfeed/schemas/article.py
"""
Article / Query Schemas
Normalized format that all providers convert to
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.newsfeed.schemas.vocabulary import UNFILTERED_VALUES, resolve_country_code


class Article(BaseModel):
    """
    Unified article record.

    Serialized with camelCase keys (imageUrl, publishedAt, ...) for the UI;
    attributes stay snake_case in Python.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., min_length=1, description="Canonical URL, or a synthetic source_index_timestamp id")
    title: str = Field(..., min_length=1)
    summary: str = Field(..., min_length=1)
    image_url: str = Field(..., min_length=1)
    source: str = Field(..., min_length=1)

    # Stamped from the query, never from upstream metadata
    category: str
    country: str

    published_at: str = Field("", description="Timestamp exactly as reported upstream")
    url: str = ""
    original_provider: str = Field(..., description="Origin label of the adapter, e.g. gnews.io")
    ai_hint: str = Field("news media", description="Cosmetic topical hint for image placeholders")
    verified: Optional[bool] = Field(None, description="Set only by an external verification signal")

    def to_ranking_dict(self) -> dict:
        """Fields handed to the relevance re-ranker"""
        return {
            "id": self.id,
            "title": self.title,
            "summary": self.summary,
            "category": self.category,
            "published_at": self.published_at,
        }


class NewsQuery(BaseModel):
    """
    Unified input for one fetch.

    A free-text ``query`` takes precedence: when present, category and
    country become advisory only and no adapter filters on them.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    category: Optional[str] = Field(None, description="Generic category, e.g. technology")
    country: Optional[str] = Field(None, description="ISO country code or display name, e.g. gb or UK")
    query: Optional[str] = Field(None, description="Free-text search")
    display_category: str = Field(..., min_length=1, description="Label stamped onto every article")
    display_country: str = Field(..., min_length=1, description="Label stamped onto every article")
    page: Optional[int] = Field(None, ge=1)

    @field_validator("display_category", "display_country")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("display labels must not be blank")
        return value

    @property
    def search_text(self) -> Optional[str]:
        if self.query and self.query.strip():
            return self.query.strip()
        return None

    @property
    def category_filter(self) -> Optional[str]:
        return self._filter_value(self.category)

    @property
    def country_filter(self) -> Optional[str]:
        """ISO code; display names such as "UK" are resolved to "gb"."""
        return resolve_country_code(self._filter_value(self.country))

    def _filter_value(self, value: Optional[str]) -> Optional[str]:
        if self.search_text is not None:
            return None
        if not value or not value.strip():
            return None
        value = value.strip().lower()
        if value in UNFILTERED_VALUES:
            return None
        return value
