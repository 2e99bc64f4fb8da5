import logging
from functools import lru_cache
from typing import Optional

from itinerary_ai.core.config import AIConfig, ApiSettings
from itinerary_ai.pipelines.rag import ContextRetriever, VectorIndex, create_context_retriever
from itinerary_ai.services.providers import ProviderGateway
from itinerary_ai.services.rate_limit import RateLimiter
from itinerary_ai.services.usage import InMemoryUsageStore, UsageLedger
from itinerary_ai.workflows.orchestrator import ItineraryOrchestrator

logger = logging.getLogger(__name__)


def build_retriever(
    config: AIConfig,
    settings: ApiSettings,
    index: Optional[VectorIndex] = None,
) -> Optional[ContextRetriever]:
    """Return a retriever only when embeddings are configured and the index holds content."""

    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set; retrieval-augmented context is disabled")
        return None

    retriever = create_context_retriever(config.retrieval, settings, index)
    if len(retriever.index) == 0:
        logger.warning("Vector index is empty; retrieval-augmented context is disabled")
        return None
    return retriever


@lru_cache(maxsize=1)
def get_orchestrator() -> ItineraryOrchestrator:
    settings = ApiSettings.from_env()
    config = AIConfig.from_env()

    return ItineraryOrchestrator(
        config,
        ProviderGateway(config, settings),
        UsageLedger(InMemoryUsageStore()),
        rate_limiter=RateLimiter.from_settings(config.limits),
        retriever=build_retriever(config, settings),
    )
