"""Services used by the itinerary generation workflow.

This package provides the collaborators the orchestrator depends on:

- providers: Model backends and the ``ProviderGateway`` that dispatches to them
- rate_limit: Per-user request limiter and daily token quota check
- usage: Usage ledger and the stores behind it
- travel_tools: LangChain tools for weather, currency, budget and distance

Example Usage:
    >>> from itinerary_ai.services import RateLimiter, UsageLedger, InMemoryUsageStore
    >>>
    >>> limiter = RateLimiter(max_requests=30)
    >>> ledger = UsageLedger(InMemoryUsageStore())
"""

from itinerary_ai.services.providers import ProviderGateway, LLMProvider, register_provider
from itinerary_ai.services.rate_limit import (
    QuotaDecision,
    RateLimitDecision,
    RateLimiter,
    check_token_quota,
)
from itinerary_ai.services.usage import InMemoryUsageStore, UsageLedger, UsageStore
from itinerary_ai.services.travel_tools import create_travel_tools, execute_tool

__all__ = [
    # Providers
    "ProviderGateway",
    "LLMProvider",
    "register_provider",
    # Limits
    "QuotaDecision",
    "RateLimitDecision",
    "RateLimiter",
    "check_token_quota",
    # Usage
    "InMemoryUsageStore",
    "UsageLedger",
    "UsageStore",
    # Tools
    "create_travel_tools",
    "execute_tool",
]
