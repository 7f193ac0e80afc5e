# src/newsfeed/providers/registry.py
"""
Provider registry
Builds provider registrations from Settings and wires the adapters
"""

from typing import Callable, Dict, List, Optional, Type

import httpx

from src.newsfeed.providers.base_provider import BaseNewsProvider
from src.newsfeed.providers.gnews_provider import GNewsProvider
from src.newsfeed.providers.guardian_provider import GuardianProvider
from src.newsfeed.providers.mediastack_provider import MediastackProvider
from src.newsfeed.providers.newsdata_provider import NewsdataProvider
from src.newsfeed.schemas.provider import NewsProvider, ProviderRegistration, UsageWindow
from src.newsfeed.services.aggregator_service import NewsAggregatorService
from src.newsfeed.services.key_rotator import KeyRotator
from src.newsfeed.utils.api_keys import filter_api_keys
from src.utils.config import Settings, get_settings

PROVIDER_CLASSES: Dict[NewsProvider, Type[BaseNewsProvider]] = {
    NewsProvider.MEDIASTACK: MediastackProvider,
    NewsProvider.GUARDIAN: GuardianProvider,
    NewsProvider.GNEWS: GNewsProvider,
    NewsProvider.NEWSDATA: NewsdataProvider,
}

# env var -> placeholder value shipped in .env.example
KEY_PLACEHOLDERS: Dict[NewsProvider, Dict[str, str]] = {
    NewsProvider.MEDIASTACK: {
        "MEDIASTACK_KEY_1": "YOUR_MEDIASTACK_KEY_1",
        "MEDIASTACK_KEY_2": "YOUR_MEDIASTACK_KEY_2",
        "MEDIASTACK_KEY_3": "YOUR_MEDIASTACK_KEY_3",
    },
    NewsProvider.GUARDIAN: {"GUARDIAN_KEY_1": "YOUR_GUARDIAN_KEY_1"},
    NewsProvider.GNEWS: {"GNEWS_API_KEY": "YOUR_GNEWS_API_KEY"},
    NewsProvider.NEWSDATA: {"NEWSDATA_API_KEY": "YOUR_NEWSDATA_API_KEY_HERE"},
}

RESET_WINDOWS: Dict[NewsProvider, UsageWindow] = {
    NewsProvider.MEDIASTACK: UsageWindow.MONTHLY,
    NewsProvider.GUARDIAN: UsageWindow.DAILY,
    NewsProvider.GNEWS: UsageWindow.DAILY,
    NewsProvider.NEWSDATA: UsageWindow.DAILY,
}


def all_key_env_vars() -> List[str]:
    return [env_var for placeholders in KEY_PLACEHOLDERS.values() for env_var in placeholders]


def build_registrations(settings: Optional[Settings] = None) -> List[ProviderRegistration]:
    """
    One registration per provider, sorted by priority.

    Providers without a usable key are still registered (with an empty pool)
    so the aggregator can report them as misconfigured.
    """
    settings = settings or get_settings()
    registrations = []
    for provider, placeholders in KEY_PLACEHOLDERS.items():
        prefix = provider.value.upper()
        env_vars = list(placeholders)
        keys = filter_api_keys(
            [getattr(settings, env_var, None) for env_var in env_vars],
            placeholders=list(placeholders.values()),
            min_length=settings.MIN_API_KEY_LENGTH,
        )
        registrations.append(
            ProviderRegistration(
                name=provider,
                base_url=getattr(settings, f"{prefix}_BASE_URL"),
                priority=getattr(settings, f"{prefix}_PRIORITY"),
                keys=keys,
                rate_limit=getattr(settings, f"{prefix}_RATE_LIMIT"),
                reset_window=RESET_WINDOWS[provider],
                key_env_vars=env_vars,
            )
        )
    return sorted(registrations, key=lambda r: r.sort_key)


def build_providers(
    registrations: List[ProviderRegistration],
    key_rotator: KeyRotator,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = 5.0,
) -> List[BaseNewsProvider]:
    """Instantiate adapters in ascending priority order."""
    providers = []
    for registration in sorted(registrations, key=lambda r: r.sort_key):
        provider_cls = PROVIDER_CLASSES[registration.name]
        providers.append(provider_cls(registration, key_rotator, client=client, timeout=timeout))
    return providers


def create_aggregator(
    settings: Optional[Settings] = None,
    reranker=None,
    verifier: Optional[Callable] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> NewsAggregatorService:
    """Wire rotator, adapters and aggregator from configuration."""
    settings = settings or get_settings()
    registrations = build_registrations(settings)
    rotator = KeyRotator(registrations, min_key_length=settings.MIN_API_KEY_LENGTH)
    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=settings.NEWS_REQUEST_TIMEOUT)
    providers = build_providers(
        registrations, rotator, client=client, timeout=settings.NEWS_REQUEST_TIMEOUT
    )
    return NewsAggregatorService(
        providers=providers,
        key_rotator=rotator,
        reranker=reranker,
        verifier=verifier,
        rerank_timeout=settings.RERANK_TIMEOUT,
        client=client if owns_client else None,
        key_env_vars=all_key_env_vars(),
    )
