"""Configuration helpers for API keys, providers and generation limits."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from itinerary_ai.core.errors import ConfigurationError


@dataclass(slots=True)
class ApiSettings:
    """Centralised container for the model vendor credentials."""

    openai_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None
    xai_api_key: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ApiSettings":
        """Load credentials from environment variables."""

        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            gemini_api_key=os.getenv("GEMINI_API_KEY"),
            xai_api_key=os.getenv("XAI_API_KEY"),
        )

    def ensure(self, field: str) -> str:
        """Return the requested field and fail fast if it is missing."""

        value = getattr(self, field)
        if not value:
            raise ConfigurationError(f"Missing configuration value: {field}")
        return value


@dataclass(slots=True)
class ProviderSettings:
    """Model parameters for a single provider backend."""

    model: str
    temperature: float = 0.4
    max_tokens: int = 4000
    json_mode: bool = False


@dataclass(slots=True)
class RetrievalSettings:
    """Parameters for the retrieval-augmented context block."""

    top_k: int = 12
    max_chunk_length: int = 500
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536
    max_query_length: int = 8000


@dataclass(slots=True)
class LimitSettings:
    """Per-user request and token ceilings."""

    requests_per_window: int = 30
    window_seconds: int = 60 * 60
    daily_token_quota: int = 500_000
    quota_window_hours: int = 24


def _default_providers() -> Dict[str, ProviderSettings]:
    return {
        "openai": ProviderSettings(model="gpt-4o-mini", json_mode=True),
        "gemini": ProviderSettings(model="gemini-2.5-flash"),
        "xai": ProviderSettings(model="grok-4-fast-reasoning"),
    }


@dataclass(slots=True)
class AIConfig:
    """Provider selection, retrieval and limit configuration for generation runs.

    Attributes:
        provider: Primary provider name
        fallback_provider: Provider tried after the primary is exhausted
        providers: Model parameters keyed by provider name
        retrieval: Retrieval-augmented generation parameters
        limits: Rate-limit and token quota ceilings
        max_validation_retries: Corrective retries per provider after invalid output
    """

    provider: str = "gemini"
    fallback_provider: str = "openai"
    providers: Dict[str, ProviderSettings] = field(default_factory=_default_providers)
    retrieval: RetrievalSettings = field(default_factory=RetrievalSettings)
    limits: LimitSettings = field(default_factory=LimitSettings)
    max_validation_retries: int = 1

    @classmethod
    def from_env(cls) -> "AIConfig":
        """Build the configuration from environment variables, keeping defaults for unset values."""

        providers = _default_providers()
        for name, env_var in (
            ("openai", "OPENAI_MODEL"),
            ("gemini", "GEMINI_MODEL"),
            ("xai", "XAI_MODEL"),
        ):
            model = os.getenv(env_var)
            if model:
                providers[name].model = model

        defaults = RetrievalSettings()
        retrieval = RetrievalSettings(
            top_k=int(os.getenv("RAG_TOP_K", str(defaults.top_k))),
            max_chunk_length=int(os.getenv("RAG_MAX_CHUNK_LENGTH", str(defaults.max_chunk_length))),
            embedding_model=os.getenv("OPENAI_EMBEDDING_MODEL", defaults.embedding_model),
        )
        limit_defaults = LimitSettings()
        limits = LimitSettings(
            requests_per_window=int(
                os.getenv("AI_RATE_LIMIT_PER_HOUR", str(limit_defaults.requests_per_window))
            ),
            daily_token_quota=int(
                os.getenv("AI_DAILY_TOKEN_QUOTA_PER_USER", str(limit_defaults.daily_token_quota))
            ),
        )
        return cls(
            provider=os.getenv("AI_PROVIDER", "gemini"),
            fallback_provider=os.getenv("AI_FALLBACK_PROVIDER", "openai"),
            providers=providers,
            retrieval=retrieval,
            limits=limits,
        )

    @property
    def provider_order(self) -> List[str]:
        """Primary provider first, then the fallback when it differs."""

        order = [self.provider]
        if self.fallback_provider and self.fallback_provider != self.provider:
            order.append(self.fallback_provider)
        return order

    @property
    def max_fallback_attempts(self) -> int:
        return len(self.provider_order) - 1

    def provider_settings(self, name: str) -> ProviderSettings:
        """Return the model parameters for ``name`` or raise if it is not configured."""

        try:
            return self.providers[name]
        except KeyError as exc:
            raise ConfigurationError(f"No settings configured for provider '{name}'", provider=name) from exc
