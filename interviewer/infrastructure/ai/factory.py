"""Provider construction and provider/model recommendations."""

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from interviewer.domain.exceptions import ConfigurationError
from interviewer.domain.interfaces.ai_model import AIProvider
from interviewer.domain.models.common import MOCK_MODEL, PROVIDER_GEMINI, PROVIDER_MOCK, PROVIDER_OPENAI
from interviewer.domain.models.config import AIConfig
from interviewer.infrastructure.ai.gemini.gemini_provider import GeminiProvider
from interviewer.infrastructure.ai.mock.mock_provider import MockProvider
from interviewer.infrastructure.ai.openai.openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)

PROVIDER_INFO: Dict[str, Dict[str, Any]] = {
    PROVIDER_OPENAI: {
        "name": "OpenAI",
        "models": ["gpt-4", "gpt-4-turbo", "gpt-3.5-turbo"],
        "supports_vision": True,
        "supports_functions": True,
        "max_tokens": 4096,
        "website": "https://platform.openai.com/",
    },
    PROVIDER_GEMINI: {
        "name": "Google Gemini",
        "models": ["gemini-1.5-pro", "gemini-1.5-flash", "gemini-pro"],
        "supports_vision": True,
        "supports_functions": True,
        "max_tokens": 8192,
        "website": "https://ai.google.dev/gemini-api",
    },
    PROVIDER_MOCK: {
        "name": "Mock Provider",
        "models": [MOCK_MODEL],
        "supports_vision": False,
        "supports_functions": False,
        "max_tokens": 1000,
        "website": "https://localhost/mock",
    },
}

# task type -> model, per provider
MODEL_RECOMMENDATIONS: Dict[str, Dict[str, str]] = {
    PROVIDER_OPENAI: {
        "chat": "gpt-3.5-turbo",
        "conversation": "gpt-3.5-turbo",
        "evaluation": "gpt-4",
        "analysis": "gpt-4",
        "question_generation": "gpt-3.5-turbo",
    },
    PROVIDER_GEMINI: {
        "chat": "gemini-1.5-flash",
        "conversation": "gemini-1.5-flash",
        "evaluation": "gemini-1.5-pro",
        "analysis": "gemini-1.5-pro",
        "question_generation": "gemini-1.5-flash",
    },
}
DEFAULT_RECOMMENDED_MODELS = {
    PROVIDER_OPENAI: "gpt-3.5-turbo",
    PROVIDER_GEMINI: "gemini-1.5-flash",
    PROVIDER_MOCK: MOCK_MODEL,
}


def parse_model(model: str) -> Tuple[str, str]:
    """Splits a 'provider/model' string.

    Raises:
        ValueError: If the string is empty, padded with whitespace, not
            exactly two '/'-separated parts, or either part is empty.
    """
    if not model:
        raise ValueError("model string cannot be empty")
    if model.strip() != model:
        raise ValueError(f"model string cannot have leading or trailing whitespace: '{model}'")

    parts = model.split("/")
    if len(parts) != 2:
        raise ValueError(f"invalid model format, expected 'provider/model', got '{model}'")

    provider, model_name = parts
    if not provider:
        raise ValueError(f"provider name cannot be empty in '{model}'")
    if not model_name:
        raise ValueError(f"model name cannot be empty in '{model}'")
    return provider, model_name


def create_provider_from_config(
    provider_name: str,
    config: AIConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AIProvider:
    """Builds the adapter for `provider_name` with the credentials in `config`.

    Raises:
        ConfigurationError: Unknown provider or missing API key.
    """
    if provider_name == PROVIDER_OPENAI:
        if not config.openai_api_key:
            raise ConfigurationError("OpenAI API key not configured")
        return OpenAIProvider(config.openai_api_key, config, transport=transport)
    if provider_name == PROVIDER_GEMINI:
        if not config.gemini_api_key:
            raise ConfigurationError("Gemini API key not configured")
        return GeminiProvider(config.gemini_api_key, config, transport=transport)
    if provider_name == PROVIDER_MOCK:
        return MockProvider()
    raise ConfigurationError(f"unknown provider: {provider_name}")


def create_provider(
    model: str,
    config: AIConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AIProvider:
    """Builds a provider from a 'provider/model' string; empty means Mock.

    The model part becomes the provider's default model.

    Raises:
        ConfigurationError: Malformed model string, unsupported provider or
            missing API key.
    """
    if not model:
        return MockProvider()

    try:
        provider_name, model_name = parse_model(model)
    except ValueError as e:
        raise ConfigurationError(f"failed to parse model '{model}': {e}") from e

    if provider_name not in PROVIDER_INFO:
        raise ConfigurationError(f"unsupported provider: {provider_name}")

    logger.debug(f"Creating provider '{provider_name}' for model '{model_name}'")
    return create_provider_from_config(provider_name, config.with_overrides(default_model=model_name), transport)


def get_available_providers(config: AIConfig) -> List[str]:
    """Providers with credentials configured, followed by mock."""
    providers = []
    if config.openai_api_key:
        providers.append(PROVIDER_OPENAI)
    if config.gemini_api_key:
        providers.append(PROVIDER_GEMINI)
    providers.append(PROVIDER_MOCK)
    return providers


def get_provider_info(provider: str) -> Dict[str, Any]:
    info = PROVIDER_INFO.get(provider)
    if info is None:
        return {"error": "Unknown provider"}
    return {**info, "models": list(info["models"])}


def get_recommended_provider(task_type: str, available_providers: List[str]) -> str:
    """OpenAI for chat, Gemini for evaluation, otherwise the first available."""
    if not available_providers:
        return ""

    preferred = {
        "chat": PROVIDER_OPENAI,
        "conversation": PROVIDER_OPENAI,
        "evaluation": PROVIDER_GEMINI,
        "analysis": PROVIDER_GEMINI,
    }.get(task_type)
    if preferred in available_providers:
        return preferred
    return available_providers[0]


def get_model_recommendation(provider: str, task_type: str) -> str:
    if provider == PROVIDER_MOCK:
        return MOCK_MODEL
    by_task = MODEL_RECOMMENDATIONS.get(provider)
    if by_task is None:
        return ""
    return by_task.get(task_type, DEFAULT_RECOMMENDED_MODELS[provider])
