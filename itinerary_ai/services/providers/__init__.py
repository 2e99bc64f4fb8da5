"""Model provider backends for itinerary generation.

Every backend implements ``LLMProvider.call(system_prompt, user_message)`` and
registers itself in ``PROVIDER_REGISTRY`` through ``register_provider``.
Importing this package registers the built-in backends:

- openai: LangChain ``ChatOpenAI`` with JSON-object response format
- xai: LangChain ``ChatXAI``
- gemini: ``google-genai`` async client

Example Usage:
    >>> from itinerary_ai.core.config import AIConfig, ApiSettings
    >>> from itinerary_ai.services.providers import ProviderGateway
    >>>
    >>> gateway = ProviderGateway(AIConfig.from_env(), ApiSettings.from_env())
    >>> response = await gateway.call("openai", system_prompt, user_message)
"""

from itinerary_ai.services.providers.base import (
    PROVIDER_REGISTRY,
    LLMProvider,
    register_provider,
    usage_from_metadata,
)
from itinerary_ai.services.providers.langchain_chat import (
    LangChainChatProvider,
    OpenAIProvider,
    XAIProvider,
)
from itinerary_ai.services.providers.gemini import GeminiProvider
from itinerary_ai.services.providers.gateway import ProviderGateway

__all__ = [
    "PROVIDER_REGISTRY",
    "LLMProvider",
    "register_provider",
    "usage_from_metadata",
    "LangChainChatProvider",
    "OpenAIProvider",
    "XAIProvider",
    "GeminiProvider",
    "ProviderGateway",
]
