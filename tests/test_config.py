"""Tests for environment-driven configuration."""
from __future__ import annotations

import pytest

from itinerary_ai.core.config import AIConfig, ApiSettings
from itinerary_ai.core.errors import ConfigurationError

ENV_VARS = [
    "AI_PROVIDER",
    "AI_FALLBACK_PROVIDER",
    "OPENAI_MODEL",
    "GEMINI_MODEL",
    "XAI_MODEL",
    "RAG_TOP_K",
    "RAG_MAX_CHUNK_LENGTH",
    "OPENAI_EMBEDDING_MODEL",
    "AI_RATE_LIMIT_PER_HOUR",
    "AI_DAILY_TOKEN_QUOTA_PER_USER",
    "OPENAI_API_KEY",
    "GEMINI_API_KEY",
    "XAI_API_KEY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = AIConfig.from_env()
    assert config.provider_order == ["gemini", "openai"]
    assert config.max_fallback_attempts == 1
    assert config.max_validation_retries == 1
    assert config.retrieval.top_k == 12
    assert config.retrieval.max_chunk_length == 500
    assert config.limits.requests_per_window == 30
    assert config.limits.daily_token_quota == 500_000
    assert config.provider_settings("openai").json_mode is True


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("AI_PROVIDER", "xai")
    monkeypatch.setenv("AI_FALLBACK_PROVIDER", "gemini")
    monkeypatch.setenv("XAI_MODEL", "grok-3-mini")
    monkeypatch.setenv("RAG_TOP_K", "5")
    monkeypatch.setenv("AI_RATE_LIMIT_PER_HOUR", "3")
    monkeypatch.setenv("AI_DAILY_TOKEN_QUOTA_PER_USER", "1000")

    config = AIConfig.from_env()

    assert config.provider_order == ["xai", "gemini"]
    assert config.provider_settings("xai").model == "grok-3-mini"
    assert config.retrieval.top_k == 5
    assert config.limits.requests_per_window == 3
    assert config.limits.daily_token_quota == 1000


def test_same_primary_and_fallback_collapse():
    config = AIConfig(provider="openai", fallback_provider="openai")
    assert config.provider_order == ["openai"]
    assert config.max_fallback_attempts == 0


def test_unknown_provider_settings():
    with pytest.raises(ConfigurationError):
        AIConfig().provider_settings("mistral")


def test_api_settings(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "gm-key")
    settings = ApiSettings.from_env()
    assert settings.ensure("gemini_api_key") == "gm-key"
    with pytest.raises(ConfigurationError, match="openai_api_key"):
        settings.ensure("openai_api_key")
