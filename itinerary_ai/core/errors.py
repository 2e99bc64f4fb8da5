"""Exception hierarchy for the itinerary generation layer."""
from __future__ import annotations

from typing import Optional


class ItineraryAIError(RuntimeError):
    """Base class for failures raised inside the generation layer."""


class ProviderError(ItineraryAIError):
    """Raised when a model backend call fails or returns nothing usable."""

    def __init__(self, message: str, *, provider: Optional[str] = None) -> None:
        super().__init__(message)
        self.provider = provider


class ConfigurationError(ProviderError):
    """Raised when a provider is unknown or its credentials are missing."""


class RetrievalError(ItineraryAIError):
    """Raised when the embedding service or vector index fails."""
