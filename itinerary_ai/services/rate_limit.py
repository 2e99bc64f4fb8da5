"""Per-user request rate limiting and daily token quota checks.

Both checks run once at the start of a generation run and never consume
quota themselves.  Request counters live in process memory, so the limit is
per instance; a multi-instance deployment would swap ``RateLimiter`` for a
shared counter store with the same ``check`` signature.
"""
from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Dict, Optional

from itinerary_ai.core.config import LimitSettings

logger = logging.getLogger(__name__)

UsageLookup = Callable[[str, datetime], Awaitable[int]]


@dataclass(slots=True)
class RateLimitEntry:
    count: int
    reset_at: float


@dataclass(slots=True, frozen=True)
class RateLimitDecision:
    allowed: bool
    retry_after: Optional[int] = None


@dataclass(slots=True, frozen=True)
class QuotaDecision:
    allowed: bool
    used_tokens: int = 0
    quota: int = 0


class RateLimiter:
    """Fixed-window request counter keyed by user.

    A window opens on a user's first request and resets lazily on the first
    request after it has elapsed.  Increment-and-compare happens under a lock so
    concurrent runs for the same user cannot both slip past the ceiling.
    """

    def __init__(
        self,
        max_requests: int = 30,
        window_seconds: float = 3600,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()
        self._next_prune_at = clock() + window_seconds

    @classmethod
    def from_settings(cls, settings: LimitSettings) -> "RateLimiter":
        return cls(settings.requests_per_window, settings.window_seconds)

    def __len__(self) -> int:
        return len(self._entries)

    def _prune(self, now: float) -> None:
        # Caller holds the lock; sweeps at most once per window.
        if now < self._next_prune_at:
            return
        expired = [key for key, entry in self._entries.items() if now >= entry.reset_at]
        for key in expired:
            del self._entries[key]
        self._next_prune_at = now + self.window_seconds

    @staticmethod
    def _key(user_id: str) -> str:
        return f"ai:{user_id}"

    def check(self, user_id: str) -> RateLimitDecision:
        """Count one request for ``user_id`` and report whether it is allowed."""

        now = self._clock()
        key = self._key(user_id)
        with self._lock:
            self._prune(now)
            entry = self._entries.get(key)
            if entry is None or now >= entry.reset_at:
                self._entries[key] = RateLimitEntry(count=1, reset_at=now + self.window_seconds)
                return RateLimitDecision(allowed=True)

            entry.count += 1
            if entry.count > self.max_requests:
                retry_after = max(1, math.ceil(entry.reset_at - now))
                return RateLimitDecision(allowed=False, retry_after=retry_after)
            return RateLimitDecision(allowed=True)

    def reset(self, user_id: Optional[str] = None) -> None:
        """Forget counters for one user, or for everyone when ``user_id`` is None."""

        with self._lock:
            if user_id is None:
                self._entries.clear()
            else:
                self._entries.pop(self._key(user_id), None)


async def check_token_quota(
    user_id: str,
    usage_lookup: UsageLookup,
    *,
    daily_quota: int = 500_000,
    window_hours: int = 24,
    now: Optional[datetime] = None,
) -> QuotaDecision:
    """Allow the run iff tokens used in the lookback window are strictly below the quota."""

    since = (now or datetime.now(timezone.utc)) - timedelta(hours=window_hours)
    used = await usage_lookup(user_id, since)
    allowed = used < daily_quota
    if not allowed:
        logger.info(f"User {user_id} used {used} tokens since {since.isoformat()}, quota {daily_quota}")
    return QuotaDecision(allowed=allowed, used_tokens=used, quota=daily_quota)
