from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from src.newsfeed.schemas.article import NewsQuery
from src.newsfeed.schemas.provider import NewsProvider, ProviderRegistration, UsageWindow
from src.newsfeed.services.key_rotator import KeyRotator

BASE_URLS = {
    NewsProvider.MEDIASTACK: "https://api.mediastack.com/v1",
    NewsProvider.GUARDIAN: "https://content.guardianapis.com",
    NewsProvider.GNEWS: "https://gnews.io/api/v4",
    NewsProvider.NEWSDATA: "https://newsdata.io/api/1",
}

PRIORITIES = {
    NewsProvider.MEDIASTACK: 1,
    NewsProvider.GUARDIAN: 2,
    NewsProvider.GNEWS: 3,
    NewsProvider.NEWSDATA: 4,
}

HOSTS = {
    "api.mediastack.com": NewsProvider.MEDIASTACK,
    "content.guardianapis.com": NewsProvider.GUARDIAN,
    "gnews.io": NewsProvider.GNEWS,
    "newsdata.io": NewsProvider.NEWSDATA,
}


class FakeClock:
    """Settable UTC clock for window tests"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def registration_for(
    provider: NewsProvider,
    keys: Optional[List[str]] = None,
    rate_limit: int = 100,
    window: UsageWindow = UsageWindow.DAILY,
    priority: Optional[int] = None,
) -> ProviderRegistration:
    return ProviderRegistration(
        name=provider,
        base_url=BASE_URLS[provider],
        priority=PRIORITIES[provider] if priority is None else priority,
        keys=[f"{provider.value}-key-000001"] if keys is None else keys,
        rate_limit=rate_limit,
        reset_window=window,
        key_env_vars=[f"{provider.value.upper()}_API_KEY"],
    )


# ============================================================================
# SAMPLE PAYLOADS
# ============================================================================

def mediastack_payload(count: int = 2) -> dict:
    return {
        "pagination": {"limit": 25, "offset": 0, "count": count, "total": count},
        "data": [
            {
                "author": "Staff",
                "title": f"Mediastack story {i}",
                "description": f"Mediastack description {i}",
                "url": f"https://example.com/mediastack/{i}",
                "source": "Example Wire",
                "image": None,
                "category": "technology",
                "language": "en",
                "country": "us",
                "published_at": f"2024-05-0{i + 1}T10:00:00+00:00",
            }
            for i in range(count)
        ],
    }


def guardian_payload(count: int = 2) -> dict:
    return {
        "response": {
            "status": "ok",
            "total": count,
            "results": [
                {
                    "id": f"technology/2024/may/0{i + 1}/story-{i}",
                    "sectionName": "Technology",
                    "webPublicationDate": f"2024-05-0{i + 1}T08:00:00Z",
                    "webTitle": f"Guardian story {i}",
                    "webUrl": f"https://www.theguardian.com/technology/story-{i}",
                    "fields": {
                        "trailText": f"<p>Guardian <strong>trail</strong> {i}</p>",
                        "thumbnail": f"https://media.guim.co.uk/{i}.jpg",
                    },
                }
                for i in range(count)
            ],
        }
    }


def gnews_payload(count: int = 2) -> dict:
    return {
        "totalArticles": count,
        "articles": [
            {
                "title": f"GNews story {i}",
                "description": f"GNews description {i}",
                "content": f"GNews content {i}",
                "url": f"https://example.com/gnews/{i}",
                "image": f"https://example.com/gnews/{i}.jpg",
                "publishedAt": f"2024-05-0{i + 1}T12:00:00Z",
                "source": {"name": "GNews Source", "url": "https://example.com"},
            }
            for i in range(count)
        ],
    }


def newsdata_payload(count: int = 2) -> dict:
    return {
        "status": "success",
        "totalResults": count,
        "results": [
            {
                "article_id": f"nd{i}",
                "title": f"Newsdata story {i}",
                "link": f"https://example.com/newsdata/{i}",
                "description": f"Newsdata description {i}",
                "content": None,
                "pubDate": f"2024-05-0{i + 1} 09:30:00",
                "image_url": None,
                "source_id": "example_source",
                "source_name": None,
            }
            for i in range(count)
        ],
    }


SUCCESS_PAYLOADS: Dict[NewsProvider, Callable[..., dict]] = {
    NewsProvider.MEDIASTACK: mediastack_payload,
    NewsProvider.GUARDIAN: guardian_payload,
    NewsProvider.GNEWS: gnews_payload,
    NewsProvider.NEWSDATA: newsdata_payload,
}


class UpstreamStub:
    """
    Routes requests by host to per-provider canned responses and records
    every call. Unconfigured providers answer with a successful page.
    """

    def __init__(self):
        self.responses: Dict[NewsProvider, Callable[[httpx.Request], httpx.Response]] = {}
        self.calls: List[httpx.Request] = []

    def respond(self, provider: NewsProvider, status_code: int = 200, json=None, content=None) -> None:
        def _handler(request: httpx.Request) -> httpx.Response:
            if content is not None:
                return httpx.Response(status_code, content=content)
            return httpx.Response(status_code, json=json)
        self.responses[provider] = _handler

    def raise_error(self, provider: NewsProvider, exc_type=httpx.ReadTimeout) -> None:
        def _handler(request: httpx.Request) -> httpx.Response:
            raise exc_type("upstream unavailable", request=request)
        self.responses[provider] = _handler

    def calls_to(self, provider: NewsProvider) -> List[httpx.Request]:
        return [r for r in self.calls if HOSTS[r.url.host] is provider]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        provider = HOSTS[request.url.host]
        handler = self.responses.get(provider)
        if handler is None:
            return httpx.Response(200, json=SUCCESS_PAYLOADS[provider]())
        return handler(request)


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 5, 31, 23, 0, tzinfo=timezone.utc))


@pytest.fixture
def upstream():
    return UpstreamStub()


@pytest.fixture
def http_client(upstream):
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream))


@pytest.fixture
def all_registrations():
    return [registration_for(provider) for provider in NewsProvider]


@pytest.fixture
def rotator(all_registrations, clock):
    return KeyRotator(all_registrations, clock=clock)


@pytest.fixture
def make_query():
    def _make(**overrides) -> NewsQuery:
        values = {"display_category": "Technology", "display_country": "Global"}
        values.update(overrides)
        return NewsQuery(**values)
    return _make


@pytest.fixture
def make_registration():
    return registration_for


@pytest.fixture
def payloads():
    return SUCCESS_PAYLOADS


@pytest.fixture
def make_provider(rotator, http_client, all_registrations):
    """Build one adapter wired to the shared rotator and the stubbed upstream"""
    from src.newsfeed.providers.registry import PROVIDER_CLASSES

    def _make(provider: NewsProvider):
        registration = next(r for r in all_registrations if r.name is provider)
        return PROVIDER_CLASSES[provider](registration, rotator, client=http_client, timeout=1.0)
    return _make
