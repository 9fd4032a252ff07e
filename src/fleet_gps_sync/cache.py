# fleet_gps_sync/cache.py
"""
Small read-through cache with an injected TTL and clock.

A TTLCache instance is owned by whoever reads through it (the provider
store), never by the module, and is shared between request threads.
Writers invalidate keys explicitly; listeners registered with
`add_invalidation_hook` are told about every invalidation, which lets
dependent caches drop their own entries.
"""

import logging
import threading
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass

__all__: list[str] = ['TTLCache']

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Entry[ValueT]:
    value: ValueT
    expires_at: float


class TTLCache[KeyT: Hashable, ValueT]:
    """
    Map with per-entry expiry.

    Args:
        ttl_seconds: Entry lifetime. 0 disables caching entirely.
        clock: Monotonic time source in seconds; injectable for tests.

    Example:
        >>> cache = TTLCache[int, str](ttl_seconds=60.0)
        >>> cache.get_or_load(1, lambda: 'loaded')
        'loaded'
        >>> cache.invalidate(1)
    """

    def __init__(
        self,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError(f'ttl_seconds must be >= 0, got {ttl_seconds}')
        self._ttl_seconds: float = ttl_seconds
        self._clock: Callable[[], float] = clock
        self._entries: dict[KeyT, _Entry[ValueT]] = {}
        self._lock: threading.RLock = threading.RLock()
        self._hooks: list[Callable[[KeyT | None], None]] = []

    @property
    def enabled(self) -> bool:
        return self._ttl_seconds > 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: KeyT) -> ValueT | None:
        """Return the cached value, or None if absent or expired."""
        with self._lock:
            entry: _Entry[ValueT] | None = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                self._entries.pop(key, None)
                return None
            return entry.value

    def put(self, key: KeyT, value: ValueT) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._entries[key] = _Entry(value, self._clock() + self._ttl_seconds)

    def get_or_load(self, key: KeyT, loader: Callable[[], ValueT | None]) -> ValueT | None:
        """
        Return the cached value or call `loader` and cache its result.

        None results are not cached, so a missing row is looked up again.
        """
        cached: ValueT | None = self.get(key)
        if cached is not None:
            return cached

        loaded: ValueT | None = loader()
        if loaded is not None:
            self.put(key, loaded)
        return loaded

    def invalidate(self, key: KeyT) -> None:
        """Drop one key and notify hooks."""
        with self._lock:
            self._entries.pop(key, None)
        self._notify(key)

    def clear(self) -> None:
        """Drop every key and notify hooks with None."""
        with self._lock:
            self._entries.clear()
        self._notify(None)

    def add_invalidation_hook(self, hook: Callable[[KeyT | None], None]) -> None:
        """Register a callback receiving the invalidated key (None for clear)."""
        self._hooks.append(hook)

    def _notify(self, key: KeyT | None) -> None:
        for hook in self._hooks:
            hook(key)
        logger.debug('Cache invalidated: key=%r', key)
