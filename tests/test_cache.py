"""
Tests for fleet_gps_sync.cache module.

Tests TTLCache expiry with an injected clock, read-through loading and
invalidation hooks.
"""

import threading

import pytest

from fleet_gps_sync.cache import TTLCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now: float = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> TTLCache[int, str]:
    return TTLCache(ttl_seconds=30.0, clock=clock)


class TestExpiry:
    """Entries live for exactly ttl_seconds."""

    def test_fresh_entry_is_returned(self, cache: TTLCache[int, str]) -> None:
        cache.put(1, 'provider-1')

        assert cache.get(1) == 'provider-1'

    def test_entry_expires(self, cache: TTLCache[int, str], clock: FakeClock) -> None:
        cache.put(1, 'provider-1')
        clock.advance(29.0)
        assert cache.get(1) == 'provider-1'

        clock.advance(1.0)
        assert cache.get(1) is None
        assert len(cache) == 0

    def test_zero_ttl_disables_caching(self, clock: FakeClock) -> None:
        disabled: TTLCache[int, str] = TTLCache(ttl_seconds=0, clock=clock)
        disabled.put(1, 'provider-1')

        assert not disabled.enabled
        assert disabled.get(1) is None

    def test_negative_ttl_rejected(self) -> None:
        with pytest.raises(ValueError, match='ttl_seconds'):
            TTLCache(ttl_seconds=-1)


class TestGetOrLoad:
    """Read-through behavior."""

    def test_loader_called_once_while_fresh(self, cache: TTLCache[int, str]) -> None:
        calls: list[int] = []

        def _load() -> str:
            calls.append(1)
            return 'loaded'

        assert cache.get_or_load(7, _load) == 'loaded'
        assert cache.get_or_load(7, _load) == 'loaded'
        assert len(calls) == 1

    def test_none_result_is_not_cached(self, cache: TTLCache[int, str]) -> None:
        calls: list[int] = []

        def _load() -> str | None:
            calls.append(1)
            return None

        assert cache.get_or_load(7, _load) is None
        assert cache.get_or_load(7, _load) is None
        assert len(calls) == 2  # noqa: PLR2004


class TestInvalidation:
    """Explicit invalidation and hooks."""

    def test_invalidate_drops_key(self, cache: TTLCache[int, str]) -> None:
        cache.put(1, 'a')
        cache.put(2, 'b')

        cache.invalidate(1)

        assert cache.get(1) is None
        assert cache.get(2) == 'b'

    def test_hooks_receive_keys(self, cache: TTLCache[int, str]) -> None:
        seen: list[int | None] = []
        cache.add_invalidation_hook(seen.append)
        cache.put(1, 'a')

        cache.invalidate(1)
        cache.clear()

        assert seen == [1, None]
        assert len(cache) == 0

    def test_invalidate_missing_key_still_notifies(
        self, cache: TTLCache[int, str]
    ) -> None:
        seen: list[int | None] = []
        cache.add_invalidation_hook(seen.append)

        cache.invalidate(99)

        assert seen == [99]


class TestConcurrentAccess:
    """Shared use from several request threads."""

    def test_expired_entry_removed_concurrently(self) -> None:
        """Another reader dropping the expired key mid-lookup is harmless."""
        cache: TTLCache[int, str]

        class RacingClock(FakeClock):
            def __call__(self) -> float:
                cache.invalidate(1)
                return self.now

        racing_clock = RacingClock()
        cache = TTLCache(ttl_seconds=30.0, clock=racing_clock)
        cache.put(1, 'provider-1')
        racing_clock.advance(31.0)

        assert cache.get(1) is None
        assert len(cache) == 0

    def test_parallel_readers_of_expiring_entries(self, clock: FakeClock) -> None:
        cache: TTLCache[int, str] = TTLCache(ttl_seconds=1.0, clock=clock)
        errors: list[BaseException] = []

        def _read_all() -> None:
            try:
                for key in range(200):
                    cache.get(key)
            except Exception as error:  # noqa: BLE001
                errors.append(error)

        for key in range(200):
            cache.put(key, f'provider-{key}')
        clock.advance(5.0)

        threads: list[threading.Thread] = [
            threading.Thread(target=_read_all) for _ in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len(cache) == 0
