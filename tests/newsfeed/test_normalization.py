"""
Unit tests for key filtering and article normalization helpers
"""

import pytest

from src.newsfeed.schemas.article import Article, NewsQuery
from src.newsfeed.schemas.vocabulary import NewsCategory, resolve_country_code
from src.newsfeed.utils.api_keys import filter_api_keys, is_placeholder_key
from src.newsfeed.utils.normalization import (
    GENERIC_HINT,
    deduplicate_by_id,
    generate_ai_hint,
    parse_published_at,
    sort_articles_by_date,
    strip_html,
)


def _article(article_id: str, published_at: str = "") -> Article:
    return Article(
        id=article_id,
        title=f"Title {article_id}",
        summary="Summary",
        image_url="https://placehold.co/600x400.png",
        source="Test",
        category="Technology",
        country="Global",
        published_at=published_at,
        original_provider="gnews.io",
    )


# ============================================================================
# API KEY FILTERING
# ============================================================================

class TestApiKeyFiltering:

    @pytest.mark.parametrize("raw", [None, "", "   ", "YOUR_GNEWS_API_KEY", "your_key_here", "abc12"])
    def test_placeholder_values(self, raw):
        assert is_placeholder_key(raw) is True

    def test_exact_documented_placeholder(self):
        assert is_placeholder_key("NEWS-KEY-PLACEHOLDER", placeholder="NEWS-KEY-PLACEHOLDER") is True

    def test_real_key(self):
        assert is_placeholder_key("  9f8e7d6c5b4a  ") is False

    def test_filter_keeps_order_strips_and_dedups(self):
        keys = filter_api_keys(
            [" key-one-1111 ", "YOUR_MEDIASTACK_KEY_2", None, "key-two-2222", "key-one-1111"],
            placeholders=["YOUR_MEDIASTACK_KEY_1", "YOUR_MEDIASTACK_KEY_2", "YOUR_MEDIASTACK_KEY_3"],
        )
        assert keys == ["key-one-1111", "key-two-2222"]

    def test_min_length_is_configurable(self):
        assert filter_api_keys(["abcdefgh"], min_length=10) == []


# ============================================================================
# NORMALIZATION
# ============================================================================

class TestAiHint:

    def test_uses_display_category(self):
        assert generate_ai_hint("Technology", "Anything at all") == "technology"

    @pytest.mark.parametrize("category", ["General", "top", None])
    def test_catch_all_category_uses_title_words(self, category):
        assert generate_ai_hint(category, "Markets Rally After Fed Decision") == "markets rally"

    def test_generic_fallback(self):
        assert generate_ai_hint("general", "") == GENERIC_HINT


class TestTimestamps:

    @pytest.mark.parametrize("value", [
        "2024-05-01T10:00:00Z",
        "2024-05-01T10:00:00+00:00",
        "2024-05-01 10:00:00",
    ])
    def test_parses_upstream_formats_as_utc(self, value):
        parsed = parse_published_at(value)
        assert parsed is not None
        assert parsed.utcoffset().total_seconds() == 0
        assert (parsed.year, parsed.month, parsed.day, parsed.hour) == (2024, 5, 1, 10)

    @pytest.mark.parametrize("value", [None, "", "not a date", "May", "Tuesday"])
    def test_unparsable_is_none(self, value):
        assert parse_published_at(value) is None

    def test_sort_newest_first_with_unparsable_last_and_stable(self):
        articles = [
            _article("undated-1"),
            _article("old", "2024-01-01T00:00:00Z"),
            _article("garbage", "yesterday-ish"),
            _article("new", "2024-06-01 12:00:00"),
            _article("mid", "2024-03-01T00:00:00+02:00"),
            _article("undated-2"),
        ]
        ordered = [a.id for a in sort_articles_by_date(articles)]
        assert ordered == ["new", "mid", "old", "undated-1", "garbage", "undated-2"]

    def test_bare_month_name_sorts_last(self):
        articles = [_article("month-only", "May"), _article("dated", "2020-01-01T00:00:00Z")]
        assert [a.id for a in sort_articles_by_date(articles)] == ["dated", "month-only"]

    def test_equal_timestamps_keep_input_order(self):
        articles = [_article(str(i), "2024-05-01T10:00:00Z") for i in range(5)]
        assert [a.id for a in sort_articles_by_date(articles)] == ["0", "1", "2", "3", "4"]


class TestHelpers:

    def test_strip_html(self):
        assert strip_html("<p>Hello <b>world</b></p>\n<br/>again") == "Hello world again"

    def test_deduplicate_keeps_first(self):
        first = _article("same", "2024-01-01T00:00:00Z")
        second = _article("same", "2024-02-01T00:00:00Z")
        assert deduplicate_by_id([first, second, _article("other")]) == [first, _article("other")]


# ============================================================================
# QUERY & VOCABULARY
# ============================================================================

class TestNewsQuery:

    def test_filters_lowercased(self):
        query = NewsQuery(category="Technology", country="GB", display_category="Tech", display_country="UK")
        assert query.category_filter == "technology"
        assert query.country_filter == "gb"

    def test_country_display_name_resolved(self):
        query = NewsQuery(country=" UK ", display_category="All", display_country="UK")
        assert query.country_filter == "gb"

    @pytest.mark.parametrize("value", ["all", "Global", "  "])
    def test_unfiltered_values(self, value):
        query = NewsQuery(category=value, country=value, display_category="All", display_country="Global")
        assert query.category_filter is None
        assert query.country_filter is None

    def test_free_text_suppresses_filters(self):
        query = NewsQuery(
            category="sports", country="us", query="  world cup  ",
            display_category="Sports", display_country="USA",
        )
        assert query.search_text == "world cup"
        assert query.category_filter is None
        assert query.country_filter is None

    def test_blank_display_labels_rejected(self):
        with pytest.raises(ValueError):
            NewsQuery(display_category="  ", display_country="Global")

    def test_article_serializes_camel_case(self):
        data = _article("x", "2024-01-01T00:00:00Z").model_dump(by_alias=True)
        assert data["imageUrl"] == "https://placehold.co/600x400.png"
        assert data["originalProvider"] == "gnews.io"
        assert data["aiHint"] == "news media"


class TestVocabulary:

    def test_category_parse(self):
        assert NewsCategory.parse(" Sports ") is NewsCategory.SPORTS
        assert NewsCategory.parse("crypto") is None

    @pytest.mark.parametrize("value,expected", [
        ("UK", "gb"), ("usa", "us"), ("Global", None), ("gb", "gb"), ("all", None), (None, None),
    ])
    def test_resolve_country_code(self, value, expected):
        assert resolve_country_code(value) == expected
