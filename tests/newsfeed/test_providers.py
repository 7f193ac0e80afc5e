"""
Unit tests for the provider adapters

Request mapping, error classification, record conversion and the shared
fetch_news template (one HTTP call, one record_usage).
"""

import httpx
import pytest

from src.newsfeed.exceptions import ApiKeyError, ProviderError
from src.newsfeed.providers.base_provider import contains_any
from src.newsfeed.schemas.provider import NewsProvider
from src.newsfeed.utils.normalization import (
    NO_SUMMARY,
    NO_TITLE,
    PLACEHOLDER_IMAGE_URL,
    UNKNOWN_SOURCE,
)

KEY = "test-api-key-123456"


# ============================================================================
# MEDIASTACK
# ============================================================================

class TestMediastackProvider:

    @pytest.fixture
    def provider(self, make_provider):
        return make_provider(NewsProvider.MEDIASTACK)

    def test_build_request_with_filters(self, provider, make_query):
        url, params = provider.build_request(make_query(category="Politics", country="gb", page=3), KEY)

        assert url == "https://api.mediastack.com/v1/news"
        assert params["access_key"] == KEY
        assert params["limit"] == 25
        assert params["languages"] == "en"
        assert params["sort"] == "published_desc"
        assert params["categories"] == "general"
        assert params["countries"] == "gb"
        assert params["offset"] == 50

    def test_country_display_name_resolved_to_code(self, provider, make_query):
        _, params = provider.build_request(make_query(category="business", country="UK"), KEY)
        assert params["countries"] == "gb"

    def test_build_request_with_keywords(self, provider, make_query):
        _, params = provider.build_request(make_query(category="sports", country="us", query="olympics"), KEY)

        assert params["keywords"] == "olympics"
        assert "categories" not in params
        assert "countries" not in params
        assert "offset" not in params

    @pytest.mark.parametrize("code", ["invalid_access_key", "usage_limit_reached", "function_access_restricted"])
    def test_key_error_codes_at_http_200(self, provider, code):
        error = provider.classify_error(200, {"error": {"code": code, "message": "nope"}})
        assert isinstance(error, ApiKeyError)
        assert "MEDIASTACK_API_KEY" in error.message

    def test_other_error_code_is_provider_error(self, provider):
        error = provider.classify_error(200, {"error": {"code": "rate_limit_reached", "message": "slow down"}})
        assert isinstance(error, ProviderError)

    def test_unauthorized_status(self, provider):
        assert isinstance(provider.classify_error(401, {}), ApiKeyError)

    def test_success_payload_is_not_an_error(self, provider, payloads):
        assert provider.classify_error(200, payloads[NewsProvider.MEDIASTACK]()) is None

    def test_to_article_fallbacks(self, provider, make_query):
        article = provider.to_article({"title": "  ", "description": None}, make_query(), 4)

        assert article.title == NO_TITLE
        assert article.summary == NO_SUMMARY
        assert article.image_url == PLACEHOLDER_IMAGE_URL
        assert article.source == UNKNOWN_SOURCE
        assert article.id.startswith(f"{UNKNOWN_SOURCE}_4_")
        assert article.original_provider == "mediastack.com"
        assert article.category == "Technology"
        assert article.country == "Global"


# ============================================================================
# GUARDIAN
# ============================================================================

class TestGuardianProvider:

    @pytest.fixture
    def provider(self, make_provider):
        return make_provider(NewsProvider.GUARDIAN)

    def test_build_request_maps_section(self, provider, make_query):
        url, params = provider.build_request(make_query(category="sports", country="us"), KEY)

        assert url == "https://content.guardianapis.com/search"
        assert params["api-key"] == KEY
        assert params["section"] == "sport"
        assert params["show-fields"] == "trailText,thumbnail"
        assert params["order-by"] == "newest"
        assert "country" not in params

    def test_unknown_category_defaults_to_world(self, provider):
        assert provider.map_section("crypto") == "world"

    def test_search_uses_q(self, provider, make_query):
        _, params = provider.build_request(make_query(category="sports", query="ashes", page=2), KEY)
        assert params["q"] == "ashes"
        assert "section" not in params
        assert params["page"] == 2

    def test_bare_unauthorized_message(self, provider):
        assert isinstance(provider.classify_error(401, {"message": "Unauthorized"}), ApiKeyError)

    def test_invalid_key_message_in_response(self, provider):
        payload = {"response": {"status": "error", "message": "The api-key provided is invalid"}}
        assert isinstance(provider.classify_error(200, payload), ApiKeyError)

    def test_other_error_is_provider_error(self, provider):
        payload = {"response": {"status": "error", "message": "requested page is beyond the number of available pages"}}
        assert isinstance(provider.classify_error(400, payload), ProviderError)

    def test_message_mentioning_key_word_is_not_a_key_error(self, provider):
        payload = {"response": {"status": "error", "message": "Unsupported key in order-by parameter"}}
        assert isinstance(provider.classify_error(400, payload), ProviderError)

    def test_to_article_strips_trail_html(self, provider, make_query, payloads):
        record = payloads[NewsProvider.GUARDIAN]()["response"]["results"][0]
        article = provider.to_article(record, make_query(), 0)

        assert article.summary == "Guardian trail 0"
        assert article.id == "https://www.theguardian.com/technology/story-0"
        assert article.source == "Technology"
        assert article.original_provider == "theguardian.com"

    def test_missing_section_name_defaults_source(self, provider, make_query):
        article = provider.to_article({"webTitle": "Story", "webUrl": "https://g.co/x"}, make_query(), 0)
        assert article.source == "The Guardian"


# ============================================================================
# GNEWS
# ============================================================================

class TestGNewsProvider:

    @pytest.fixture
    def provider(self, make_provider):
        return make_provider(NewsProvider.GNEWS)

    def test_headlines_endpoint_for_browsing(self, provider, make_query):
        url, params = provider.build_request(make_query(category="politics", country="ca"), KEY)

        assert url == "https://gnews.io/api/v4/top-headlines"
        assert params["topic"] == "nation"
        assert params["country"] == "ca"
        assert params["max"] == 25
        assert params["lang"] == "en"

    def test_country_display_name_resolved_to_code(self, provider, make_query):
        _, params = provider.build_request(make_query(category="sports", country="USA"), KEY)
        assert params["country"] == "us"

    def test_search_endpoint_for_free_text(self, provider, make_query):
        url, params = provider.build_request(make_query(category="politics", query="election"), KEY)

        assert url == "https://gnews.io/api/v4/search"
        assert params["q"] == "election"
        assert "topic" not in params

    def test_unfiltered_category_defaults_to_general(self, provider, make_query):
        _, params = provider.build_request(make_query(category="all", country="Global"), KEY)
        assert params["topic"] == "general"
        assert "country" not in params

    @pytest.mark.parametrize("status,payload", [
        (401, {"errors": ["You did not provide an API key."]}),
        (400, {"errors": {"apikey": "The API key is invalid"}}),
        (403, {"errors": ["Daily request limit reached"]}),
    ])
    def test_key_errors(self, provider, status, payload):
        assert isinstance(provider.classify_error(status, payload), ApiKeyError)

    def test_rate_limit_is_provider_error(self, provider):
        error = provider.classify_error(429, {"errors": ["Too many requests"]})
        assert isinstance(error, ProviderError)
        assert error.status_code == 429

    def test_summary_falls_back_to_content(self, provider, make_query):
        record = {"title": "T", "description": "", "content": "Body text", "url": "https://x.io/1", "source": {}}
        article = provider.to_article(record, make_query(), 0)

        assert article.summary == "Body text"
        assert article.source == UNKNOWN_SOURCE


# ============================================================================
# NEWSDATA
# ============================================================================

class TestNewsdataProvider:

    @pytest.fixture
    def provider(self, make_provider):
        return make_provider(NewsProvider.NEWSDATA)

    @pytest.mark.parametrize("category,expected", [
        ("general", "top"), ("travel", "tourism"), ("food", "food"), ("unknown", "top"), (None, "top"),
    ])
    def test_category_mapping(self, provider, category, expected):
        assert provider.map_category(category) == expected

    def test_build_request(self, provider, make_query):
        url, params = provider.build_request(make_query(category="travel", country="jp"), KEY)

        assert url == "https://newsdata.io/api/1/news"
        assert params == {"apikey": KEY, "image": 1, "language": "en", "category": "tourism", "country": "jp"}

    def test_country_display_name_resolved_to_code(self, provider, make_query):
        _, params = provider.build_request(make_query(category="science", country="UK"), KEY)
        assert params["country"] == "gb"

    @pytest.mark.parametrize("payload", [
        {"status": "error", "results": {"message": "API key invalid", "code": "Unauthorized"}},
        {"status": "error", "results": {"message": "bad", "code": "InvalidApiKey"}},
    ])
    def test_key_errors(self, provider, payload):
        assert isinstance(provider.classify_error(200, payload), ApiKeyError)

    def test_other_error(self, provider):
        payload = {"status": "error", "results": {"message": "Too many requests", "code": "RateLimitExceeded"}}
        assert isinstance(provider.classify_error(429, payload), ProviderError)

    def test_to_article(self, provider, make_query, payloads):
        record = payloads[NewsProvider.NEWSDATA]()["results"][1]
        article = provider.to_article(record, make_query(), 1)

        assert article.id == "https://example.com/newsdata/1"
        assert article.source == "example_source"
        assert article.published_at == "2024-05-02 09:30:00"
        assert article.image_url == PLACEHOLDER_IMAGE_URL
        assert article.original_provider == "newsdata.io"


# ============================================================================
# FETCH TEMPLATE
# ============================================================================

class TestFetchNews:
    """Shared fetch_news behaviour, exercised through the Mediastack adapter"""

    @pytest.mark.asyncio
    async def test_success_records_usage_once(self, make_provider, make_query, rotator, upstream):
        provider = make_provider(NewsProvider.MEDIASTACK)
        articles = await provider.fetch_news(make_query(), KEY)

        assert [a.title for a in articles] == ["Mediastack story 1", "Mediastack story 0"]
        assert len(upstream.calls) == 1
        assert upstream.calls[0].url.params["access_key"] == KEY
        assert rotator.get_usage(NewsProvider.MEDIASTACK, KEY).count == 1

    @pytest.mark.asyncio
    async def test_key_error_propagates_and_counts_usage(self, make_provider, make_query, rotator, upstream):
        upstream.respond(NewsProvider.MEDIASTACK, 200, {"error": {"code": "invalid_access_key", "message": "bad"}})
        provider = make_provider(NewsProvider.MEDIASTACK)

        with pytest.raises(ApiKeyError):
            await provider.fetch_news(make_query(), KEY)
        assert rotator.get_usage(NewsProvider.MEDIASTACK, KEY).count == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("exc_type", [httpx.ReadTimeout, httpx.ConnectError])
    async def test_transport_failures_are_soft(self, make_provider, make_query, rotator, upstream, exc_type):
        upstream.raise_error(NewsProvider.GNEWS, exc_type)
        provider = make_provider(NewsProvider.GNEWS)

        assert await provider.fetch_news(make_query(), KEY) == []
        assert rotator.get_usage(NewsProvider.GNEWS, KEY).count == 1

    @pytest.mark.asyncio
    async def test_non_json_body_is_soft(self, make_provider, make_query, upstream):
        upstream.respond(NewsProvider.GUARDIAN, 200, content=b"<html>maintenance</html>")
        provider = make_provider(NewsProvider.GUARDIAN)

        assert await provider.fetch_news(make_query(), KEY) == []

    @pytest.mark.asyncio
    async def test_server_error_is_soft(self, make_provider, make_query, upstream):
        upstream.respond(NewsProvider.NEWSDATA, 500, {"status": "error", "results": {"message": "boom"}})
        provider = make_provider(NewsProvider.NEWSDATA)

        assert await provider.fetch_news(make_query(), KEY) == []

    @pytest.mark.asyncio
    async def test_empty_results_are_soft(self, make_provider, make_query, upstream):
        upstream.respond(NewsProvider.GNEWS, 200, {"totalArticles": 0, "articles": []})
        provider = make_provider(NewsProvider.GNEWS)

        assert await provider.fetch_news(make_query(), KEY) == []

    @pytest.mark.asyncio
    async def test_bad_records_skipped_duplicates_dropped_and_capped(self, make_provider, make_query, upstream):
        records = [
            {"title": f"Story {i}", "url": f"https://example.com/{i}", "published_at": "2024-05-01T10:00:00Z"}
            for i in range(30)
        ]
        records.insert(3, "not a record")
        records.insert(5, {"title": "Duplicate", "url": "https://example.com/0"})
        upstream.respond(NewsProvider.MEDIASTACK, 200, {"data": records})
        provider = make_provider(NewsProvider.MEDIASTACK)

        articles = await provider.fetch_news(make_query(), KEY)

        ids = [a.id for a in articles]
        assert len(ids) == 21
        assert len(set(ids)) == 21
        assert "Duplicate" not in [a.title for a in articles]


def test_contains_any():
    assert contains_any("Invalid API Key supplied", ("api key",)) is True
    assert contains_any(None, ("api key",)) is False
