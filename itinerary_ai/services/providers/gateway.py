"""Single entry point dispatching model calls to registered providers."""
from __future__ import annotations

import logging
from typing import Dict, Optional

from itinerary_ai.core.config import AIConfig, ApiSettings
from itinerary_ai.core.errors import ConfigurationError
from itinerary_ai.core.schemas import LLMResponse
from itinerary_ai.services.providers.base import PROVIDER_REGISTRY, LLMProvider

logger = logging.getLogger(__name__)


class ProviderGateway:
    """Resolves provider names to backends and forwards prompt pairs to them."""

    def __init__(
        self,
        config: AIConfig,
        api_settings: ApiSettings,
        providers: Optional[Dict[str, LLMProvider]] = None,
    ) -> None:
        self._config = config
        self._api_settings = api_settings
        self._providers: Dict[str, LLMProvider] = dict(providers or {})

    def is_available(self, name: str) -> bool:
        """Whether ``name`` is registered and has model settings."""

        return name in self._providers or (name in PROVIDER_REGISTRY and name in self._config.providers)

    def get(self, name: str) -> LLMProvider:
        provider = self._providers.get(name)
        if provider is not None:
            return provider

        provider_cls = PROVIDER_REGISTRY.get(name)
        if provider_cls is None:
            raise ConfigurationError(f"Unsupported provider: {name}", provider=name)
        provider = provider_cls(self._config.provider_settings(name), self._api_settings)
        self._providers[name] = provider
        return provider

    async def call(self, provider_name: str, system_prompt: str, user_message: str) -> LLMResponse:
        """Send ``system_prompt``/``user_message`` to ``provider_name``.

        Raises:
            ConfigurationError: Unknown provider or missing credentials
            ProviderError: Backend failure or empty payload
        """

        provider = self.get(provider_name)
        logger.debug(f"Calling provider '{provider_name}' with model '{provider.model}'")
        return await provider.call(system_prompt, user_message)
