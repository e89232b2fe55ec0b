"""Per-user, per-tier sliding window limiter for meal analyses."""

import asyncio
import time
from collections import defaultdict
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Awaitable, Callable

import structlog

from ai.tiers import coerce_tier
from config.constants import (
    RATE_LIMIT_NOTIFY_DEBOUNCE,
    RATE_LIMIT_WINDOW,
    RATE_LIMITS,
    SubscriptionTier,
)

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RateLimitResult:
    success: bool
    remaining: int
    reset: float  # epoch seconds when the oldest counted request leaves the window
    limit: int


class TierRateLimiter:
    """Sliding window limiter keyed by user and subscription tier.

    State for users whose window has fully expired is dropped by
    ``cleanup()``, which ``check`` runs at most once per window.
    """

    def __init__(
        self,
        limits: Mapping[SubscriptionTier, int] | None = None,
        window_seconds: float = RATE_LIMIT_WINDOW,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._limits = dict(RATE_LIMITS)
        self._limits.update(limits or {})
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, list[float]] = defaultdict(list)
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._pending: dict[str, int] = defaultdict(int)
        self._last_throttle_notify: dict[str, float] = {}
        self._last_cleanup = clock()
        # Callback for rejected requests: async fn(user_id, tier, reset)
        self.on_rate_limit: Callable[[str, SubscriptionTier, float], Awaitable[None]] | None = None

    def get_limit(self, tier: SubscriptionTier | str) -> int:
        return self._limits[coerce_tier(tier)]

    async def check(self, user_id: str, tier: SubscriptionTier | str) -> RateLimitResult:
        """Count one analysis for the user, or reject it if the window is full."""
        tier = coerce_tier(tier)
        limit = self._limits[tier]
        key = f"{user_id}:{tier.value}"

        if self._clock() - self._last_cleanup >= self.window_seconds:
            self.cleanup()

        self._pending[key] += 1
        try:
            async with self._locks[key]:
                return await self._check_locked(key, user_id, tier, limit)
        finally:
            self._pending[key] -= 1
            if not self._pending[key]:
                del self._pending[key]

    async def _check_locked(
        self, key: str, user_id: str, tier: SubscriptionTier, limit: int,
    ) -> RateLimitResult:
        now = self._clock()
        window = self._windows[key]
        window[:] = [t for t in window if now - t < self.window_seconds]

        if len(window) >= limit:
            reset = window[0] + self.window_seconds
            log.info("analysis_rate_limited", user_id=user_id, tier=tier.value, limit=limit)
            await self._notify_rate_limit(key, user_id, tier, reset)
            return RateLimitResult(success=False, remaining=0, reset=reset, limit=limit)

        window.append(now)
        return RateLimitResult(
            success=True,
            remaining=limit - len(window),
            reset=window[0] + self.window_seconds,
            limit=limit,
        )

    def cleanup(self) -> int:
        """Drop windows, locks and notify stamps for idle users. Returns keys removed."""
        now = self._clock()
        self._last_cleanup = now
        expired = [
            key for key, window in self._windows.items()
            if key not in self._pending
            and all(now - t >= self.window_seconds for t in window)
        ]
        for key in expired:
            del self._windows[key]
            self._locks.pop(key, None)
        # Locks can outlive windows when a check raised before recording anything
        for key in [k for k in self._locks if k not in self._windows and k not in self._pending]:
            del self._locks[key]
        for key in [
            k for k, last in self._last_throttle_notify.items()
            if now - last >= RATE_LIMIT_NOTIFY_DEBOUNCE and k not in self._windows
        ]:
            del self._last_throttle_notify[key]
        if expired:
            log.debug("rate_limit_windows_pruned", count=len(expired))
        return len(expired)

    async def _notify_rate_limit(
        self, key: str, user_id: str, tier: SubscriptionTier, reset: float,
    ) -> None:
        """Fire the rate limit callback, debounced per user and tier."""
        if self.on_rate_limit is None:
            return
        now = self._clock()
        last = self._last_throttle_notify.get(key)
        if last is not None and now - last < RATE_LIMIT_NOTIFY_DEBOUNCE:
            return
        self._last_throttle_notify[key] = now
        try:
            await self.on_rate_limit(user_id, tier, reset)
        except Exception as e:
            log.warning("rate_limit_notify_failed", user_id=user_id, tier=tier.value, error=str(e))

    def get_usage(self, user_id: str, tier: SubscriptionTier | str) -> dict[str, int]:
        tier = coerce_tier(tier)
        now = self._clock()
        window = self._windows.get(f"{user_id}:{tier.value}", [])
        used = sum(1 for t in window if now - t < self.window_seconds)
        return {"used": used, "limit": self._limits[tier]}

    def reset(self, user_id: str | None = None) -> None:
        """Forget recorded requests for one user, or for everyone."""
        if user_id is None:
            self._windows.clear()
            self._last_throttle_notify.clear()
            return
        prefix = f"{user_id}:"
        for key in [k for k in self._windows if k.startswith(prefix)]:
            del self._windows[key]
            self._last_throttle_notify.pop(key, None)
