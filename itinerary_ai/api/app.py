"""FastAPI surface for itinerary generation."""
from __future__ import annotations

import os
# Load environment variables from .env file
from dotenv import load_dotenv

# Load .env file before any other imports that might need environment variables
load_dotenv()

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict

import sentry_sdk
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from itinerary_ai.api.dependencies import get_orchestrator
from itinerary_ai.api.schemas import ErrorBody, GenerateRequest, UsageResponse
from itinerary_ai.core.schemas import ErrorCode, GenerateItineraryError, GenerateItineraryResult
from itinerary_ai.workflows.orchestrator import ItineraryOrchestrator

logger = logging.getLogger(__name__)

if os.getenv("SENTRY_DSN"):  # pragma: no cover - runtime configuration
    sentry_sdk.init(
        dsn=os.getenv("SENTRY_DSN"),
        enable_logs=True,
        send_default_pii=False,
        traces_sample_rate=1.0,
    )

ERROR_STATUS: Dict[ErrorCode, int] = {
    ErrorCode.RATE_LIMIT: 429,
    ErrorCode.QUOTA: 429,
    ErrorCode.VALIDATION: 502,
    ErrorCode.PROVIDER: 502,
}

app = FastAPI(title="Itinerary AI", version="0.1.0")

origins = [
    "http://localhost:3000",
    "http://localhost:3001",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.post(
    "/itinerary/generate",
    response_model=GenerateItineraryResult,
    responses={429: {"model": ErrorBody}, 502: {"model": ErrorBody}},
)
async def generate_itinerary(
    payload: GenerateRequest,
    orchestrator: ItineraryOrchestrator = Depends(get_orchestrator),
) -> GenerateItineraryResult:
    """Generate a validated day-by-day itinerary.

    The run is guarded by the per-user rate limit and daily token quota,
    optionally enriched with retrieved verified context, and retried and
    failed over across the configured providers.

    Example JSON payload:
        ```json
        {
            "user_id": "user-123",
            "trip": {
                "destination": "Lisbon",
                "travel_days": 3,
                "budget": 900,
                "travel_style": "moderate",
                "interests": ["food", "history"]
            }
        }
        ```
    """

    logger.info(f"Generate request for {payload.trip.destination} ({payload.trip.travel_days} days)")
    outcome = await orchestrator.generate(
        payload.user_id,
        payload.trip,
        enable_retrieval=payload.enable_retrieval,
        request_id=payload.request_id,
    )
    if isinstance(outcome, GenerateItineraryError):
        raise HTTPException(
            status_code=ERROR_STATUS[outcome.code],
            detail=ErrorBody(code=outcome.code, message=outcome.message).model_dump(mode="json"),
        )
    return outcome


@app.get("/usage/{user_id}", response_model=UsageResponse)
async def get_usage(
    user_id: str,
    orchestrator: ItineraryOrchestrator = Depends(get_orchestrator),
) -> UsageResponse:
    """Tokens used by ``user_id`` in the current quota window."""

    limits = orchestrator.config.limits
    since = datetime.now(timezone.utc) - timedelta(hours=limits.quota_window_hours)
    used = await orchestrator.ledger.get_token_usage_in_window(user_id, since)
    return UsageResponse(
        user_id=user_id,
        used_tokens=used,
        daily_quota=limits.daily_token_quota,
        remaining_tokens=max(0, limits.daily_token_quota - used),
    )


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """Simple health endpoint used for readiness probes."""

    return {"status": "healthy", "service": "itinerary-ai"}
