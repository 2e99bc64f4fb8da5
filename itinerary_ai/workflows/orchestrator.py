"""Itinerary generation workflow: guards, retrieval, provider calls, validation, fallback.

One ``generate`` call is one run.  The run is strictly sequential:

1. Rate-limit and token-quota guards (short-circuit with RATE_LIMIT / QUOTA)
2. Optional retrieval of verified context (failure means empty context)
3. For each provider in order (primary, then fallback):
   initial call, validation, at most ``max_validation_retries`` corrective
   calls with the validator's errors appended to the original user message
4. First valid output wins: usage is logged for that call only
5. Exhausting every provider yields a VALIDATION error

Every log line carries the run's request id.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Union
from uuid import uuid4

from itinerary_ai.core.config import AIConfig
from itinerary_ai.core.prompts import build_system_prompt, build_user_message, with_retry
from itinerary_ai.core.schemas import (
    ErrorCode,
    GenerateItineraryError,
    GenerateItineraryResult,
    LLMResponse,
    TripRequest,
)
from itinerary_ai.core.validation import (
    ValidationSuccess,
    consistency_warnings,
    validate_itinerary_response,
)
from itinerary_ai.services.rate_limit import RateLimiter, check_token_quota
from itinerary_ai.services.usage import UsageLedger

logger = logging.getLogger(__name__)

GenerateOutcome = Union[GenerateItineraryResult, GenerateItineraryError]

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Try again later."
QUOTA_MESSAGE = "Daily token quota exceeded."
VALIDATION_MESSAGE = "Failed to generate a valid itinerary. Please try again."
PROVIDER_MESSAGE = "No AI provider is available to generate an itinerary."


class Gateway(Protocol):
    def is_available(self, name: str) -> bool:
        ...

    async def call(self, provider_name: str, system_prompt: str, user_message: str) -> LLMResponse:
        ...


class Retriever(Protocol):
    async def retrieve_context(self, trip: TripRequest) -> str:
        ...


class ItineraryOrchestrator:
    """Runs the guarded, retrying, multi-provider generation flow.

    Attributes:
        config: Provider order, retry and limit configuration
        gateway: Dispatches prompt pairs to model providers
        ledger: Records token usage and answers quota lookups
        rate_limiter: Per-user request counter
        retriever: Optional source of verified context
    """

    def __init__(
        self,
        config: AIConfig,
        gateway: Gateway,
        ledger: UsageLedger,
        *,
        rate_limiter: Optional[RateLimiter] = None,
        retriever: Optional[Retriever] = None,
    ) -> None:
        self.config = config
        self.gateway = gateway
        self.ledger = ledger
        self.rate_limiter = rate_limiter or RateLimiter.from_settings(config.limits)
        self.retriever = retriever

    def __repr__(self) -> str:
        return (
            f"ItineraryOrchestrator(providers={self.config.provider_order}, "
            f"retries={self.config.max_validation_retries}, "
            f"retrieval={self.retriever is not None})"
        )

    def _providers(self) -> List[str]:
        return [name for name in self.config.provider_order if self.gateway.is_available(name)]

    async def _retrieve(self, trip: TripRequest, request_id: str) -> str:
        if self.retriever is None:
            return ""
        try:
            return await self.retriever.retrieve_context(trip)
        except Exception as exc:
            logger.warning(f"[{request_id}] Retrieval failed, continuing without context: {exc}")
            return ""

    async def _accept(
        self,
        *,
        user_id: str,
        trip: TripRequest,
        provider_name: str,
        response: LLMResponse,
        validation: ValidationSuccess,
        request_id: str,
    ) -> GenerateItineraryResult:
        for warning in consistency_warnings(validation.data, trip):
            logger.warning(f"[{request_id}] {warning}")

        await self.ledger.log_usage(
            user_id=user_id,
            provider=provider_name,
            model=response.model,
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
            request_id=request_id,
        )
        return GenerateItineraryResult(
            itinerary=validation.data.itinerary,
            total_estimated_cost=validation.data.total_estimated_cost,
            provider=provider_name,
            request_id=request_id,
        )

    async def generate(
        self,
        user_id: str,
        trip: TripRequest,
        *,
        enable_retrieval: bool = True,
        request_id: Optional[str] = None,
    ) -> GenerateOutcome:
        """Produce a validated itinerary for ``trip`` or a typed error.

        Args:
            user_id: Caller identity used for rate limits, quota and usage
            trip: Trip parameters
            enable_retrieval: Whether to prepend retrieved verified context
            request_id: Correlation id; generated when omitted

        Returns:
            GenerateItineraryResult on success, otherwise GenerateItineraryError
            with one of the RATE_LIMIT, QUOTA, VALIDATION or PROVIDER codes.
        """

        request_id = request_id or str(uuid4())
        logger.info(f"[{request_id}] Generating {trip.travel_days}-day itinerary for {trip.destination}")

        rate = self.rate_limiter.check(user_id)
        if not rate.allowed:
            logger.info(f"[{request_id}] Rate limit hit for user {user_id}, retry after {rate.retry_after}s")
            return GenerateItineraryError(message=RATE_LIMIT_MESSAGE, code=ErrorCode.RATE_LIMIT)

        limits = self.config.limits
        quota = await check_token_quota(
            user_id,
            self.ledger.get_token_usage_in_window,
            daily_quota=limits.daily_token_quota,
            window_hours=limits.quota_window_hours,
        )
        if not quota.allowed:
            logger.info(f"[{request_id}] Token quota exhausted for user {user_id}")
            return GenerateItineraryError(message=QUOTA_MESSAGE, code=ErrorCode.QUOTA)

        providers = self._providers()
        if not providers:
            logger.error(f"[{request_id}] None of {self.config.provider_order} is a registered provider")
            return GenerateItineraryError(message=PROVIDER_MESSAGE, code=ErrorCode.PROVIDER)

        context = await self._retrieve(trip, request_id) if enable_retrieval else ""
        system_prompt = build_system_prompt()
        user_message = build_user_message(trip, context)

        last_error = ""
        last_content = ""
        attempts = 1 + self.config.max_validation_retries

        for provider_name in providers:
            message = user_message
            for attempt in range(1, attempts + 1):
                try:
                    response = await self.gateway.call(provider_name, system_prompt, message)
                except Exception as exc:
                    last_error = str(exc)
                    logger.warning(
                        f"[{request_id}] Provider {provider_name} failed on attempt {attempt}: {exc}"
                    )
                    break

                validation = validate_itinerary_response(response.content)
                if isinstance(validation, ValidationSuccess):
                    logger.info(f"[{request_id}] Valid itinerary from {provider_name} on attempt {attempt}")
                    return await self._accept(
                        user_id=user_id,
                        trip=trip,
                        provider_name=provider_name,
                        response=response,
                        validation=validation,
                        request_id=request_id,
                    )

                last_error = validation.error
                last_content = response.content
                logger.warning(
                    f"[{request_id}] Invalid output from {provider_name} on attempt {attempt}: {validation.error}"
                )
                message = with_retry(user_message, validation.error)

        logger.error(
            f"[{request_id}] All providers failed or validation failed. "
            f"Last error: {last_error}, last content length: {len(last_content)}"
        )
        return GenerateItineraryError(message=VALIDATION_MESSAGE, code=ErrorCode.VALIDATION)
