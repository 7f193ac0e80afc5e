# src/newsfeed/services/key_rotator.py
"""
Key Rotator
Per-(provider, key) usage accounting and key selection
"""

import threading
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from src.newsfeed.schemas.provider import KeyUsage, NewsProvider, ProviderRegistration
from src.newsfeed.utils.api_keys import DEFAULT_MIN_KEY_LENGTH, is_placeholder_key
from src.utils.logger.custom_logging import LoggerMixin

ProviderRef = Union[NewsProvider, str]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KeyRotator(LoggerMixin):
    """
    Hands out API keys and tracks how often each one has been used.

    Features:
    - Least-used selection among keys still under the provider's rate limit
    - Daily or monthly usage windows per provider
    - Thread-safe counters (shared by concurrent fetches)

    Resetting elapsed windows is driven from outside (see
    src/newsfeed/jobs/key_usage_reset.py); the rotator never schedules itself.

    Args:
        registrations: Provider registrations supplying rate limits, windows
            and default key pools
        clock: Returns the current aware UTC datetime
        min_key_length: Keys shorter than this are treated as placeholders
    """

    def __init__(
        self,
        registrations: Iterable[ProviderRegistration] = (),
        clock: Callable[[], datetime] = _utcnow,
        min_key_length: int = DEFAULT_MIN_KEY_LENGTH,
    ):
        super().__init__()
        self._clock = clock
        self._min_key_length = min_key_length
        self._registrations: Dict[NewsProvider, ProviderRegistration] = {}
        self._usage: Dict[Tuple[NewsProvider, str], KeyUsage] = {}
        self._lock = threading.RLock()
        for registration in registrations:
            self.register(registration)

    def register(self, registration: ProviderRegistration) -> None:
        with self._lock:
            self._registrations[registration.name] = registration

    def get_key(
        self,
        provider: ProviderRef,
        candidate_keys: Optional[List[str]] = None,
    ) -> Optional[str]:
        """
        Pick the key to use for one request.

        Args:
            provider: Provider the key is for
            candidate_keys: Key pool; defaults to the registered pool

        Returns:
            The least-used available key (ties go to the earlier key in the
            pool), or None if the pool is empty or exhausted
        """
        provider = NewsProvider(provider)
        if candidate_keys is None:
            registration = self._registrations.get(provider)
            candidate_keys = registration.keys if registration else []

        if not candidate_keys:
            self.logger.warning(f"[{provider.value}] No API keys configured")
            return None

        with self._lock:
            best_key: Optional[str] = None
            best_count = 0
            for key in candidate_keys:
                if is_placeholder_key(key, min_length=self._min_key_length):
                    self.logger.warning(f"[{provider.value}] Ignoring placeholder or invalid key")
                    continue
                if not self.is_available(provider, key):
                    continue
                count = self._current_count(provider, key)
                if best_key is None or count < best_count:
                    best_key, best_count = key, count

        if best_key is None:
            self.logger.warning(f"[{provider.value}] All {len(candidate_keys)} API key(s) exhausted or invalid")
        return best_key

    def record_usage(self, provider: ProviderRef, key: str, cost: int = 1) -> KeyUsage:
        """
        Count one upstream call attempt against ``key``.

        Returns:
            Snapshot of the updated usage record
        """
        provider = NewsProvider(provider)
        now = self._clock()
        with self._lock:
            usage = self._usage.get((provider, key))
            if usage is None or self._window_elapsed(provider, usage, now):
                usage = KeyUsage(provider=provider, key=key, count=0, window_start=now)
                self._usage[(provider, key)] = usage
            usage.count += cost
            return usage.model_copy()

    def mark_exhausted(self, provider: ProviderRef, key: str) -> Optional[KeyUsage]:
        """
        Take ``key`` out of rotation until its window elapses, after the
        upstream rejected it.

        Returns:
            Snapshot of the updated usage record, or None for a provider
            without a registered rate limit
        """
        provider = NewsProvider(provider)
        registration = self._registrations.get(provider)
        if registration is None:
            return None
        now = self._clock()
        with self._lock:
            usage = self._usage.get((provider, key))
            if usage is None or self._window_elapsed(provider, usage, now):
                usage = KeyUsage(provider=provider, key=key, count=0, window_start=now)
                self._usage[(provider, key)] = usage
            usage.count = max(usage.count, registration.rate_limit)
            snapshot = usage.model_copy()
        self.logger.warning(f"[{provider.value}] Key rejected upstream, parked until its window resets")
        return snapshot

    def is_available(self, provider: ProviderRef, key: str) -> bool:
        """False once the key's count in the current window reaches the rate limit."""
        provider = NewsProvider(provider)
        registration = self._registrations.get(provider)
        if registration is None:
            return True
        with self._lock:
            return self._current_count(provider, key) < registration.rate_limit

    def reset_window(self, provider: ProviderRef, force: bool = False) -> int:
        """
        Zero the counters of ``provider`` whose window has elapsed
        (all of them with ``force=True``).

        Returns:
            Number of counters reset
        """
        provider = NewsProvider(provider)
        now = self._clock()
        reset = 0
        with self._lock:
            for (usage_provider, _), usage in self._usage.items():
                if usage_provider is not provider:
                    continue
                if force or self._window_elapsed(provider, usage, now):
                    usage.count = 0
                    usage.window_start = now
                    reset += 1
        if reset:
            self.logger.info(f"[{provider.value}] Reset usage for {reset} key(s)")
        return reset

    def reset_expired(self) -> int:
        """Sweep every provider with tracked usage."""
        with self._lock:
            providers = {provider for provider, _ in self._usage}
        return sum(self.reset_window(provider) for provider in providers)

    def get_usage(self, provider: ProviderRef, key: str) -> Optional[KeyUsage]:
        with self._lock:
            usage = self._usage.get((NewsProvider(provider), key))
            return usage.model_copy() if usage else None

    def usage_snapshot(self) -> Dict[str, List[dict]]:
        """Masked usage per provider, for monitoring"""
        snapshot: Dict[str, List[dict]] = {}
        with self._lock:
            for (provider, _), usage in self._usage.items():
                snapshot.setdefault(provider.value, []).append(usage.masked())
        return snapshot

    def _current_count(self, provider: NewsProvider, key: str) -> int:
        usage = self._usage.get((provider, key))
        if usage is None or self._window_elapsed(provider, usage, self._clock()):
            return 0
        return usage.count

    def _window_elapsed(self, provider: NewsProvider, usage: KeyUsage, now: datetime) -> bool:
        registration = self._registrations.get(provider)
        if registration is None:
            return False
        return registration.reset_window.has_elapsed(usage.window_start, now)
