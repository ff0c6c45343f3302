"""AI configuration value object and its validation rules."""

from dataclasses import dataclass, replace
from typing import Any

from interviewer.domain.exceptions import ConfigurationError
from .common import KNOWN_PROVIDERS, MOCK_MODEL, PROVIDER_GEMINI, PROVIDER_MOCK, PROVIDER_OPENAI


@dataclass(frozen=True)
class AIConfig:
    """Provider credentials, defaults and feature flags.

    Built once from the environment (see `infrastructure.config.settings`)
    and never mutated; use `with_overrides` to derive a variant.
    """
    # API keys
    openai_api_key: str = ""
    gemini_api_key: str = ""

    # Custom endpoints (empty means the vendor's public URL)
    openai_base_url: str = ""
    gemini_base_url: str = ""

    # Defaults
    default_provider: str = PROVIDER_MOCK
    default_model: str = MOCK_MODEL
    max_retries: int = 3
    request_timeout: float = 60.0  # seconds
    default_max_tokens: int = 1000
    default_temperature: float = 0.7

    # Feature flags
    enable_caching: bool = True
    enable_metrics: bool = True
    enable_streaming: bool = False

    # Rate and cost ceilings
    rate_limit_rpm: int = 60
    rate_limit_tpm: int = 60000
    daily_token_limit: int = 100000
    cost_per_token: float = 0.000002
    max_cost_per_day: float = 10.0

    def with_overrides(self, **changes: Any) -> "AIConfig":
        return replace(self, **changes)

    def has_api_key(self, provider: str) -> bool:
        if provider == PROVIDER_OPENAI:
            return bool(self.openai_api_key)
        if provider == PROVIDER_GEMINI:
            return bool(self.gemini_api_key)
        return provider == PROVIDER_MOCK

    def validate(self) -> None:
        """Raises ConfigurationError on the first rule that fails."""
        if not self.openai_api_key and not self.gemini_api_key and self.default_provider != PROVIDER_MOCK:
            raise ConfigurationError("at least one AI provider API key must be configured, or use mock provider")

        if self.default_provider not in KNOWN_PROVIDERS:
            raise ConfigurationError(f"invalid default provider: {self.default_provider}")

        if self.default_provider == PROVIDER_OPENAI and not self.openai_api_key:
            raise ConfigurationError("OpenAI API key required when using OpenAI as default provider")
        if self.default_provider == PROVIDER_GEMINI and not self.gemini_api_key:
            raise ConfigurationError("Gemini API key required when using Gemini as default provider")

        if self.max_retries < 0:
            raise ConfigurationError("max retries cannot be negative")
        if self.request_timeout <= 0:
            raise ConfigurationError("request timeout must be positive")
        if self.default_max_tokens <= 0:
            raise ConfigurationError("default max tokens must be positive")
        if not 0 <= self.default_temperature <= 2:
            raise ConfigurationError("default temperature must be between 0 and 2")
