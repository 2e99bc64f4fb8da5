"""Tests for the per-user rate limiter and token quota check."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from threading import Thread

import pytest

from itinerary_ai.core.config import LimitSettings
from itinerary_ai.services.rate_limit import RateLimiter, check_token_quota


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_requests_up_to_ceiling_are_allowed():
    limiter = RateLimiter(max_requests=3, window_seconds=3600, clock=FakeClock())
    decisions = [limiter.check("alice") for _ in range(3)]
    assert all(decision.allowed for decision in decisions)


def test_request_over_ceiling_is_rejected_with_retry_after():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=3, window_seconds=3600, clock=clock)
    for _ in range(3):
        limiter.check("alice")

    clock.now += 600.5
    decision = limiter.check("alice")

    assert not decision.allowed
    assert decision.retry_after == 3000


def test_window_elapsing_resets_counter():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=1, window_seconds=60, clock=clock)
    assert limiter.check("alice").allowed
    assert not limiter.check("alice").allowed

    clock.now += 60
    assert limiter.check("alice").allowed
    assert not limiter.check("alice").allowed


def test_users_are_counted_independently():
    limiter = RateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
    assert limiter.check("alice").allowed
    assert limiter.check("bob").allowed
    assert not limiter.check("alice").allowed


def test_reset_forgets_user():
    limiter = RateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
    limiter.check("alice")
    limiter.reset("alice")
    assert limiter.check("alice").allowed


def test_from_settings_uses_defaults():
    limiter = RateLimiter.from_settings(LimitSettings())
    assert limiter.max_requests == 30
    assert limiter.window_seconds == 3600


def test_concurrent_checks_never_exceed_ceiling():
    limiter = RateLimiter(max_requests=25, window_seconds=3600)
    results = []

    def worker():
        for _ in range(10):
            results.append(limiter.check("alice").allowed)

    threads = [Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count(True) == 25


@pytest.mark.asyncio
async def test_quota_allows_usage_strictly_below_ceiling():
    now = datetime(2025, 6, 1, 12, tzinfo=timezone.utc)
    seen = {}

    async def lookup(user_id, since):
        seen["args"] = (user_id, since)
        return 499_999

    decision = await check_token_quota("alice", lookup, now=now)

    assert decision.allowed
    assert decision.used_tokens == 499_999
    assert seen["args"] == ("alice", now - timedelta(hours=24))


@pytest.mark.asyncio
async def test_quota_rejects_usage_at_ceiling():
    async def lookup(user_id, since):
        return 1000

    decision = await check_token_quota("alice", lookup, daily_quota=1000)
    assert not decision.allowed


def test_expired_windows_are_pruned():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=3, window_seconds=60, clock=clock)
    for user in ("alice", "bob", "carol"):
        limiter.check(user)
    assert len(limiter) == 3

    clock.now += 30
    limiter.check("dave")
    assert len(limiter) == 4

    clock.now += 31
    decision = limiter.check("erin")

    assert decision.allowed
    assert len(limiter) == 2


def test_pruning_keeps_active_windows_counting():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=2, window_seconds=60, clock=clock)
    limiter.check("stale")
    clock.now += 59
    limiter.check("alice")
    limiter.check("alice")

    clock.now += 2
    decision = limiter.check("alice")

    assert not decision.allowed
    assert len(limiter) == 1
