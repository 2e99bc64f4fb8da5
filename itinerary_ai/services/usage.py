"""Token usage ledger backing quota checks and cost visibility."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import List, Optional, Protocol
from uuid import uuid4

from itinerary_ai.core.schemas import UsageRecord

logger = logging.getLogger(__name__)


class UsageStore(Protocol):
    """Durable append-only storage for usage records."""

    async def insert(self, record: UsageRecord) -> None:
        ...

    async def sum_tokens(self, user_id: str, since: datetime) -> int:
        ...


class InMemoryUsageStore:
    """Process-local usage store."""

    def __init__(self) -> None:
        self._records: List[UsageRecord] = []
        self._lock = asyncio.Lock()

    @property
    def records(self) -> List[UsageRecord]:
        return list(self._records)

    async def insert(self, record: UsageRecord) -> None:
        async with self._lock:
            self._records.append(record)

    async def sum_tokens(self, user_id: str, since: datetime) -> int:
        return sum(
            record.total_tokens
            for record in self._records
            if record.user_id == user_id and record.created_at >= since
        )


class UsageLedger:
    """Writes one record per accepted model call and answers window totals.

    Store failures never propagate: a lost write only under-counts quota, and
    a failed read is treated as zero usage.
    """

    def __init__(self, store: UsageStore) -> None:
        self._store = store

    async def log_usage(
        self,
        *,
        user_id: str,
        provider: str,
        model: str,
        input_tokens: int,
        output_tokens: int,
        request_id: Optional[str] = None,
    ) -> Optional[UsageRecord]:
        record = UsageRecord(
            user_id=user_id,
            provider=provider,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            request_id=request_id or str(uuid4()),
        )
        try:
            await self._store.insert(record)
        except Exception as exc:
            logger.warning(f"Failed to log token usage for request {record.request_id}: {exc}")
            return None
        return record

    async def get_token_usage_in_window(self, user_id: str, since: datetime) -> int:
        try:
            return int(await self._store.sum_tokens(user_id, since))
        except Exception as exc:
            logger.warning(f"Failed to read token usage for user {user_id}: {exc}")
            return 0
