"""Builds interview clients from a base configuration plus per-call overrides."""

import logging
from typing import Optional

import httpx

from interviewer.core.services.enhanced_client import EnhancedAIClient
from interviewer.core.services.interview_service import InterviewClient
from interviewer.domain.exceptions import ConfigurationError
from interviewer.domain.models.config import AIConfig
from interviewer.infrastructure.ai import factory

logger = logging.getLogger(__name__)


class AIClientFactory:
    """Creates one InterviewClient per request or session."""

    def __init__(self, base_config: AIConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_config = base_config
        self._transport = transport

    def build_config(self, provider: str = "", model: str = "") -> AIConfig:
        """Copies the base config with provider/model overrides applied.

        `model` may also be given as "provider/model". When only the provider
        changes and the base model does not belong to it, the provider's
        recommended chat model is used.
        """
        if model and "/" in model:
            try:
                model_provider, model = factory.parse_model(model)
            except ValueError as e:
                raise ConfigurationError(f"failed to parse model '{model}': {e}") from e
            if provider and provider != model_provider:
                raise ConfigurationError(f"model '{model}' does not belong to provider '{provider}'")
            provider = model_provider

        changes = {}
        if provider:
            changes["default_provider"] = provider
        if model:
            changes["default_model"] = model
        elif provider and provider != self.base_config.default_provider:
            known_models = factory.get_provider_info(provider).get("models", [])
            if self.base_config.default_model not in known_models:
                changes["default_model"] = factory.get_model_recommendation(provider, "chat")
        return self.base_config.with_overrides(**changes)

    def create_client(self, provider: str = "", model: str = "") -> InterviewClient:
        """Validated client for the given overrides.

        Raises:
            ConfigurationError: The resulting configuration is invalid.
        """
        config = self.build_config(provider, model)
        config.validate()
        logger.debug(f"Creating client (provider={config.default_provider}, model={config.default_model})")
        return InterviewClient(config, EnhancedAIClient(config, transport=self._transport))

    def create_default_client(self) -> InterviewClient:
        return self.create_client()
