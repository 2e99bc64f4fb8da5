"""Tests for the usage ledger and in-memory store."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from itinerary_ai.core.schemas import UsageRecord
from itinerary_ai.services.usage import InMemoryUsageStore, UsageLedger


class BrokenStore:
    async def insert(self, record):
        raise ConnectionError("database unavailable")

    async def sum_tokens(self, user_id, since):
        raise ConnectionError("database unavailable")


@pytest.mark.asyncio
async def test_log_usage_appends_record():
    store = InMemoryUsageStore()
    ledger = UsageLedger(store)

    record = await ledger.log_usage(
        user_id="alice", provider="openai", model="gpt-4o-mini",
        input_tokens=120, output_tokens=80, request_id="req-1",
    )

    assert record is not None
    assert store.records == [record]
    assert record.total_tokens == 200
    assert record.request_id == "req-1"


@pytest.mark.asyncio
async def test_log_usage_generates_request_id():
    ledger = UsageLedger(InMemoryUsageStore())
    record = await ledger.log_usage(
        user_id="alice", provider="gemini", model="gemini-2.5-flash", input_tokens=1, output_tokens=1
    )
    assert record is not None and record.request_id


@pytest.mark.asyncio
async def test_window_sum_filters_user_and_time():
    store = InMemoryUsageStore()
    now = datetime.now(timezone.utc)
    await store.insert(UsageRecord(user_id="alice", provider="openai", model="m", input_tokens=10,
                                   output_tokens=5, request_id="a", created_at=now - timedelta(hours=1)))
    await store.insert(UsageRecord(user_id="alice", provider="openai", model="m", input_tokens=100,
                                   output_tokens=50, request_id="b", created_at=now - timedelta(hours=30)))
    await store.insert(UsageRecord(user_id="bob", provider="openai", model="m", input_tokens=7,
                                   output_tokens=7, request_id="c", created_at=now))

    ledger = UsageLedger(store)
    assert await ledger.get_token_usage_in_window("alice", now - timedelta(hours=24)) == 15
    assert await ledger.get_token_usage_in_window("bob", now - timedelta(hours=24)) == 14


@pytest.mark.asyncio
async def test_store_failures_are_swallowed():
    ledger = UsageLedger(BrokenStore())

    record = await ledger.log_usage(
        user_id="alice", provider="openai", model="m", input_tokens=1, output_tokens=1
    )
    used = await ledger.get_token_usage_in_window("alice", datetime.now(timezone.utc))

    assert record is None
    assert used == 0
