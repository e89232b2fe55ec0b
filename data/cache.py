"""In-memory TTL cache for meal analyses."""

import hashlib
import time
from typing import Any, Callable

from config.constants import FocusMode, SubscriptionTier


def analysis_cache_key(image_data: str, focus_mode: FocusMode, tier: SubscriptionTier) -> str:
    """Cache key for an analysis: same photo, mode and tier share a result."""
    digest = hashlib.sha256(image_data.encode("utf-8")).hexdigest()[:24]
    return f"{tier.value}-{focus_mode.value}-{digest}"


class TTLCache:
    """In-memory cache with per-key TTL and an optional size bound."""

    def __init__(self, max_entries: int | None = None, clock: Callable[[], float] = time.time) -> None:
        self._store: dict[str, tuple[Any, float]] = {}
        self.max_entries = max_entries
        self._clock = clock

    def __len__(self) -> int:
        return len(self._store)

    def get(self, key: str) -> Any | None:
        """Get a cached value, or None if expired/missing."""
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() > expires_at:
            del self._store[key]
            return None
        return value

    def set(self, key: str, value: Any, ttl: int) -> None:
        """Set a value with TTL in seconds, evicting the oldest entry when full."""
        self._store.pop(key, None)
        if self.max_entries is not None and len(self._store) >= self.max_entries:
            self.cleanup()
            while self._store and len(self._store) >= self.max_entries:
                del self._store[next(iter(self._store))]
        self._store[key] = (value, self._clock() + ttl)

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def clear(self) -> None:
        self._store.clear()

    def cleanup(self) -> int:
        """Remove expired entries. Returns count of removed entries."""
        now = self._clock()
        expired = [k for k, (_, exp) in self._store.items() if now > exp]
        for k in expired:
            del self._store[k]
        return len(expired)
