"""
OpenAI client configuration.

Environment-driven settings for the chat completion provider plus the
per-model token limits used to budget output tokens.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


@dataclass(frozen=True)
class ModelLimits:
    """Token limits for a specific model."""
    context_window: int
    max_output: int
    reserved_overhead: int = 500  # Safety margin for system tokens


MODEL_LIMITS: dict[str, ModelLimits] = {
    "gpt-4o-mini": ModelLimits(context_window=128_000, max_output=16_384),
    "gpt-4o": ModelLimits(context_window=128_000, max_output=16_384),
    "gpt-4.1-mini": ModelLimits(context_window=1_000_000, max_output=32_768),
    "gpt-4.1": ModelLimits(context_window=1_000_000, max_output=32_768),
    "gpt-4-turbo": ModelLimits(context_window=128_000, max_output=4_096),
    "gpt-4": ModelLimits(context_window=8_192, max_output=4_096),
    "gpt-3.5-turbo": ModelLimits(context_window=16_385, max_output=4_096),
}

DEFAULT_MODEL_LIMITS = ModelLimits(context_window=128_000, max_output=4_096)


class OpenAISettings(BaseSettings):
    """OpenAI client configuration from environment variables."""

    api_key: str = Field(default="", alias="OPENAI_API_KEY")
    default_model: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL")

    # Completion parameters
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, alias="OPENAI_TEMPERATURE")
    max_tokens: int = Field(default=2000, ge=1, alias="OPENAI_MAX_TOKENS")
    timeout_seconds: float = Field(default=45.0, gt=0, alias="OPENAI_TIMEOUT_SECONDS")

    # Connection configuration
    client_ttl_hours: int = Field(default=1, alias="OPENAI_CLIENT_TTL_HOURS")
    max_connections: int = Field(default=20, alias="OPENAI_MAX_CONNECTIONS")

    model_config = {"env_file": ".env", "extra": "ignore", "populate_by_name": True}

    @property
    def client_ttl(self) -> timedelta:
        """Get client TTL as timedelta."""
        return timedelta(hours=self.client_ttl_hours)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@lru_cache(maxsize=1)
def get_settings() -> OpenAISettings:
    """Get cached OpenAI settings instance."""
    return OpenAISettings()


def get_model_limits(model: str) -> ModelLimits:
    """Get token limits for a model, with fallback for unknown models."""
    if model in MODEL_LIMITS:
        return MODEL_LIMITS[model]

    # Longest prefix first so "gpt-4o-mini-2024" does not resolve to "gpt-4"
    for prefix in sorted(MODEL_LIMITS, key=len, reverse=True):
        if model.startswith(prefix):
            return MODEL_LIMITS[prefix]

    return DEFAULT_MODEL_LIMITS
