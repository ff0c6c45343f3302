"""Multi-provider client adding retries, response caching and usage metrics.

Owns the provider registry, the response cache and the metrics counters for
one client instance. All three are shared between concurrent calls and are
guarded by read/write locks.
"""

import dataclasses
import logging
import time
from typing import AsyncIterator, Dict, List, Optional, Tuple

import httpx

from interviewer.domain.events.api_events import ResponseCacheHit
from interviewer.domain.exceptions import ConfigurationError, InterviewerError
from interviewer.domain.interfaces.ai_model import AIProvider
from interviewer.domain.interfaces.cache import CacheService
from interviewer.domain.models.ai import (
    ChatRequest,
    ChatResponse,
    EvaluationRequest,
    EvaluationResponse,
    QuestionGenerationRequest,
    QuestionGenerationResponse,
    StreamChunk,
)
from interviewer.domain.models.common import PROVIDER_GEMINI, PROVIDER_MOCK, PROVIDER_OPENAI
from interviewer.domain.models.config import AIConfig
from interviewer.domain.models.metrics import UsageMetrics
from interviewer.infrastructure.ai.factory import create_provider_from_config, get_model_recommendation
from interviewer.infrastructure.cache.response_cache import ResponseCache, generate_cache_key
from interviewer.infrastructure.concurrency.rwlock import ReadWriteLock
from interviewer.infrastructure.monitoring.metrics import MetricsCollector
from interviewer.infrastructure.optimization.token_estimator import TokenEstimator
from interviewer.infrastructure.resilience.api_retry import ApiRetryService, dispatch_event

logger = logging.getLogger(__name__)

PROVIDER_CONTEXT_KEY = "provider"


class EnhancedAIClient:
    """Routes requests to registered providers with retry, cache and metrics."""

    def __init__(
        self,
        config: AIConfig,
        providers: Optional[Dict[str, AIProvider]] = None,
        retry_service: Optional[ApiRetryService] = None,
        cache: Optional[CacheService] = None,
        token_estimator: Optional[TokenEstimator] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initializes the client and its provider registry.

        Args:
            config: Validated AI configuration.
            providers: Pre-built providers by name. When omitted, OpenAI and
                Gemini are registered if their keys are set.
            retry_service: Retry policy; defaults to config.max_retries.
            cache: Response cache; defaults to a one-hour in-memory cache.
            token_estimator: Used for cost accounting when a vendor reports
                zero tokens.
            transport: httpx transport passed to HTTP-backed providers.
        """
        self._config = config
        self._lock = ReadWriteLock()
        self._providers: Dict[str, AIProvider] = {}
        self._retry = retry_service or ApiRetryService(max_retries=config.max_retries)
        self._cache = cache or ResponseCache()
        self._metrics = MetricsCollector(cost_per_token=config.cost_per_token)
        self._token_estimator = token_estimator or TokenEstimator()

        if providers is None:
            for name in (PROVIDER_OPENAI, PROVIDER_GEMINI):
                if config.has_api_key(name):
                    self.register_provider(name, create_provider_from_config(name, config, transport=transport))
        else:
            for name, provider in providers.items():
                self.register_provider(name, provider)

        if PROVIDER_MOCK not in self._providers:
            self.register_provider(PROVIDER_MOCK, create_provider_from_config(PROVIDER_MOCK, config))

        logger.info(
            f"EnhancedAIClient initialized: providers={self.get_available_providers()}, "
            f"default={config.default_provider}, caching={config.enable_caching}, metrics={config.enable_metrics}"
        )

    @property
    def config(self) -> AIConfig:
        with self._lock.read_locked():
            return self._config

    # --- Provider registry ---

    def register_provider(self, name: str, provider: AIProvider) -> None:
        with self._lock.write_locked():
            self._providers[name] = provider
        logger.debug(f"Registered provider: {name}")

    def get_provider(self, name: str = "") -> AIProvider:
        """Looks up a provider; an empty name means the configured default.

        Raises:
            ConfigurationError: If no such provider is registered.
        """
        with self._lock.read_locked():
            provider_name = name or self._config.default_provider
            provider = self._providers.get(provider_name)
        if provider is None:
            raise ConfigurationError(f"provider {provider_name} not found or not configured")
        return provider

    def _resolve_provider(self, override: Optional[str]) -> Tuple[str, AIProvider]:
        """Request override first, then the configured default.

        An override naming an unregistered provider falls back to the default.

        Raises:
            ConfigurationError: If neither resolves.
        """
        with self._lock.read_locked():
            default_name = self._config.default_provider
            if override and override in self._providers:
                return override, self._providers[override]
            provider = self._providers.get(default_name)
        if override and override != default_name:
            logger.warning(f"Requested provider {override} is not registered; using default {default_name}")
        if provider is None:
            raise ConfigurationError(f"provider {override or default_name} not found or not configured")
        return default_name, provider

    def get_available_providers(self) -> List[str]:
        with self._lock.read_locked():
            return list(self._providers)

    def switch_provider(self, name: str) -> None:
        """Makes `name` the default provider.

        If the current default model is not one the new provider supports, the
        default model moves to that provider's recommended chat model.

        Raises:
            ConfigurationError: If the provider is not registered.
        """
        with self._lock.write_locked():
            provider = self._providers.get(name)
            if provider is None:
                raise ConfigurationError(f"provider not available: {name}")
            changes = {"default_provider": name}
            if self._config.default_model not in provider.get_supported_models():
                changes["default_model"] = get_model_recommendation(name, "chat")
            self._config = self._config.with_overrides(**changes)
            model = self._config.default_model
        logger.info(f"Switched default provider to {name} (model={model})")

    # --- Requests ---

    def _with_defaults(self, request: ChatRequest, config: AIConfig) -> ChatRequest:
        return dataclasses.replace(
            request,
            max_tokens=request.max_tokens or config.default_max_tokens,
            temperature=request.temperature or config.default_temperature,
            model=request.model or config.default_model,
        )

    async def generate_response(self, request: ChatRequest) -> ChatResponse:
        """Generates a chat completion.

        The cache is consulted first. On a miss the provider named in
        `request.context["provider"]` is called with retries; an unregistered
        name falls back to the default. Only the final failure is raised.

        Raises:
            ConfigurationError: Neither the requested nor the default provider
                is registered.
            MaxRetryError: Every attempt failed.
        """
        start_time = time.perf_counter()
        config = self.config
        request = self._with_defaults(request, config)

        cache_key = generate_cache_key(request) if config.enable_caching else None
        if cache_key is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                dispatch_event(ResponseCacheHit(cache_key=cache_key, provider=cached.provider))
                if config.enable_metrics:
                    self._metrics.record_cache_hit()
                return cached

        provider_name, provider = self._resolve_provider(request.context.get(PROVIDER_CONTEXT_KEY))
        try:
            response = await self._retry.execute_with_retry(
                provider.generate_response, request,
                provider_name=provider_name, endpoint_name="generate_response",
            )
        except InterviewerError:
            if config.enable_metrics:
                self._metrics.record_failure(provider_name)
            raise

        if config.enable_metrics:
            tokens = response.token_usage.total_tokens
            if not tokens:
                tokens = (self._token_estimator.estimate_tokens_for_messages(request.messages)
                          + self._token_estimator.estimate_tokens(response.content))
                logger.debug(f"{provider_name} reported no usage; estimated {tokens} tokens")
            self._metrics.record_success(provider_name, tokens, time.perf_counter() - start_time)

        if cache_key is not None:
            self._cache.set(cache_key, response)
        return response

    def stream_response(self, request: ChatRequest) -> AsyncIterator[StreamChunk]:
        """Streams a completion from the resolved provider. Not cached or retried.

        Raises:
            ConfigurationError: Streaming is disabled or the provider is unknown.
            StreamingNotSupportedError: The provider has no streaming support.
        """
        config = self.config
        if not config.enable_streaming:
            raise ConfigurationError("streaming is disabled (set AI_ENABLE_STREAMING=true)")
        request = self._with_defaults(request, config)
        _, provider = self._resolve_provider(request.context.get(PROVIDER_CONTEXT_KEY))
        return provider.generate_stream_response(request)

    async def generate_questions(self, request: QuestionGenerationRequest) -> QuestionGenerationResponse:
        provider_name, provider = self._resolve_provider(request.context.get(PROVIDER_CONTEXT_KEY))
        return await self._call_with_metrics(
            provider_name, provider.generate_interview_questions, request, "generate_interview_questions")

    async def evaluate_answers(self, request: EvaluationRequest) -> EvaluationResponse:
        provider_name, provider = self._resolve_provider(request.context.get(PROVIDER_CONTEXT_KEY))
        return await self._call_with_metrics(provider_name, provider.evaluate_answers, request, "evaluate_answers")

    async def _call_with_metrics(self, provider_name, func, request, endpoint_name):
        start_time = time.perf_counter()
        enable_metrics = self.config.enable_metrics
        try:
            result = await self._retry.execute_with_retry(
                func, request, provider_name=provider_name, endpoint_name=endpoint_name)
        except InterviewerError:
            if enable_metrics:
                self._metrics.record_failure(provider_name)
            raise
        if enable_metrics:
            self._metrics.record_success(
                provider_name, result.token_usage.total_tokens, time.perf_counter() - start_time)
        return result

    # --- Introspection ---

    def get_metrics(self) -> UsageMetrics:
        return self._metrics.snapshot()

    async def is_healthy(self) -> bool:
        """True if at least one registered provider is healthy."""
        with self._lock.read_locked():
            providers = list(self._providers.values())
        for provider in providers:
            if await provider.is_healthy():
                return True
        return False

    async def aclose(self) -> None:
        with self._lock.read_locked():
            providers = list(self._providers.values())
        for provider in providers:
            await provider.aclose()
