"""Provider abstraction shared by every model backend."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple, Type

from itinerary_ai.core.config import ApiSettings, ProviderSettings
from itinerary_ai.core.errors import ConfigurationError
from itinerary_ai.core.schemas import LLMResponse

logger = logging.getLogger(__name__)


class LLMProvider(ABC):
    """One model backend behind the ``call(system_prompt, user_message)`` signature.

    Subclasses set ``name`` and ``credential_field`` (the ``ApiSettings``
    attribute holding the API key) and implement ``_invoke``.
    """

    name: str = ""
    credential_field: str = ""

    def __init__(self, settings: ProviderSettings, api_settings: ApiSettings) -> None:
        self.settings = settings
        self._api_settings = api_settings

    @property
    def model(self) -> str:
        return self.settings.model

    def api_key(self) -> str:
        """Return the provider credential or raise ``ConfigurationError``."""

        value = getattr(self._api_settings, self.credential_field, None)
        if not value:
            raise ConfigurationError(
                f"{self.credential_field.upper()} is not configured", provider=self.name
            )
        return value

    @abstractmethod
    async def call(self, system_prompt: str, user_message: str) -> LLMResponse:
        """Send the prompt pair and return the normalised response."""


PROVIDER_REGISTRY: Dict[str, Type[LLMProvider]] = {}


def register_provider(cls: Type[LLMProvider]) -> Type[LLMProvider]:
    """Class decorator adding a provider to the registry under ``cls.name``."""

    if not cls.name:
        raise ValueError(f"Provider class {cls.__name__} does not define a name")
    PROVIDER_REGISTRY[cls.name] = cls
    return cls


def usage_from_metadata(usage: Optional[Any]) -> Tuple[int, int]:
    """Extract (input, output) token counts from LangChain ``usage_metadata``."""

    if not usage:
        return 0, 0
    if isinstance(usage, dict):
        return int(usage.get("input_tokens") or 0), int(usage.get("output_tokens") or 0)
    return int(getattr(usage, "input_tokens", 0) or 0), int(getattr(usage, "output_tokens", 0) or 0)
