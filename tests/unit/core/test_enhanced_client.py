from unittest.mock import MagicMock

import httpx
import pytest

from interviewer.core.services.enhanced_client import EnhancedAIClient
from interviewer.domain.exceptions import (
    ConfigurationError,
    MaxRetryError,
    StreamingNotSupportedError,
    TransportError,
)
from interviewer.domain.models.ai import (
    ChatRequest,
    ChatResponse,
    EvaluationRequest,
    Message,
    QuestionGenerationRequest,
)
from interviewer.domain.models.config import AIConfig
from interviewer.infrastructure.ai.mock.mock_provider import MockProvider
from interviewer.infrastructure.optimization.token_estimator import TokenEstimator


class FlakyProvider(MockProvider):
    """Mock provider whose first `failures` chat calls raise a transport error."""

    def __init__(self, failures=0):
        super().__init__()
        self.failures = failures
        self.received = []

    async def generate_response(self, request):
        self.received.append(request)
        if len(self.received) <= self.failures:
            raise TransportError("connection refused", provider="mock")
        return await super().generate_response(request)


class SilentUsageProvider(MockProvider):
    """Reports no token usage."""

    async def generate_response(self, request):
        response = await super().generate_response(request)
        return ChatResponse(content=response.content, provider="mock")


def chat_request(**kwargs):
    return ChatRequest(
        messages=[Message(role="system", content="You are an interviewer."), Message(role="user", content="Hi")],
        **kwargs,
    )


@pytest.fixture
def provider():
    return FlakyProvider()


@pytest.fixture
def client(mock_config, provider, retry_service):
    return EnhancedAIClient(mock_config, providers={"mock": provider}, retry_service=retry_service)


def test_mock_is_always_registered(mock_config):
    client = EnhancedAIClient(mock_config)
    assert client.get_available_providers() == ["mock"]
    assert isinstance(client.get_provider(), MockProvider)


def test_http_providers_registered_when_keys_present():
    config = AIConfig(openai_api_key="sk", gemini_api_key="g", default_provider="openai",
                      default_model="gpt-3.5-turbo")
    client = EnhancedAIClient(config, transport=httpx.MockTransport(lambda request: httpx.Response(200)))

    assert client.get_available_providers() == ["openai", "gemini", "mock"]
    assert client.get_provider().get_provider_name() == "openai"


def test_unknown_provider(client):
    with pytest.raises(ConfigurationError, match="provider openai not found or not configured"):
        client.get_provider("openai")


async def test_unregistered_request_provider_falls_back_to_default(client, provider):
    """A request naming an unregistered provider is served by the configured default."""
    response = await client.generate_response(chat_request(context={"provider": "openai"}))

    assert response.content.startswith("[MOCK]")
    assert provider.request_count == 1
    assert list(client.get_metrics().provider_stats) == ["mock"]


async def test_questions_and_evaluation_fall_back_to_default(client, provider):
    context = {"provider": "gemini"}

    questions = await client.generate_questions(QuestionGenerationRequest(job_description="Go", context=context))
    evaluation = await client.evaluate_answers(EvaluationRequest(questions=["Q"], answers=["A"], context=context))

    assert len(questions.questions) == 3
    assert evaluation.overall_score == pytest.approx(0.8)
    assert provider.request_count == 2


async def test_no_provider_resolves(provider, retry_service):
    config = AIConfig(openai_api_key="sk", default_provider="openai", default_model="gpt-4")
    client = EnhancedAIClient(config, providers={"mock": provider}, retry_service=retry_service)

    with pytest.raises(ConfigurationError, match="not found or not configured"):
        await client.generate_response(chat_request(context={"provider": "gemini"}))
    with pytest.raises(ConfigurationError):
        await client.evaluate_answers(EvaluationRequest(questions=["Q"], answers=["A"]))
    assert provider.request_count == 0


async def test_non_retryable_provider_error_is_metered(mock_config, retry_service, fake_sleep):
    class RejectingProvider(MockProvider):
        async def generate_response(self, request):
            raise ConfigurationError("model not enabled for this key")

        async def evaluate_answers(self, request):
            raise ConfigurationError("model not enabled for this key")

    client = EnhancedAIClient(mock_config, providers={"mock": RejectingProvider()}, retry_service=retry_service)

    with pytest.raises(ConfigurationError):
        await client.generate_response(chat_request())
    with pytest.raises(ConfigurationError):
        await client.evaluate_answers(EvaluationRequest(questions=["Q"], answers=["A"]))

    metrics = client.get_metrics()
    assert metrics.failed_requests == 2
    assert metrics.provider_stats["mock"].failures == 2
    assert fake_sleep.delays == []


async def test_defaults_are_filled_without_mutating_request(client, provider):
    request = chat_request()

    await client.generate_response(request)

    sent = provider.received[0]
    assert sent.model == "mock-model"
    assert sent.max_tokens == 1000
    assert sent.temperature == pytest.approx(0.7)
    assert request.model == ""
    assert request.max_tokens == 0


async def test_explicit_values_are_kept(client, provider):
    await client.generate_response(chat_request(model="custom", max_tokens=50, temperature=0.1))

    sent = provider.received[0]
    assert (sent.model, sent.max_tokens, sent.temperature) == ("custom", 50, 0.1)


async def test_identical_requests_hit_the_cache(client, provider):
    first = await client.generate_response(chat_request())
    second = await client.generate_response(chat_request())

    assert second == first
    assert provider.request_count == 1
    metrics = client.get_metrics()
    assert metrics.cache_hits == 1
    assert metrics.total_requests == 2
    assert metrics.successful_requests == 1
    assert metrics.total_tokens_used == 30


async def test_different_language_misses_the_cache(client, provider):
    await client.generate_response(chat_request(context={"language": "en"}))
    await client.generate_response(chat_request(context={"language": "zh-TW"}))

    assert provider.request_count == 2


async def test_caching_disabled(provider, retry_service):
    config = AIConfig(enable_caching=False)
    client = EnhancedAIClient(config, providers={"mock": provider}, retry_service=retry_service)

    await client.generate_response(chat_request())
    await client.generate_response(chat_request())

    assert provider.request_count == 2
    assert client.get_metrics().cache_hits == 0


async def test_transient_failures_are_retried(mock_config, retry_service, fake_sleep):
    flaky = FlakyProvider(failures=2)
    client = EnhancedAIClient(mock_config, providers={"mock": flaky}, retry_service=retry_service)

    response = await client.generate_response(chat_request())

    assert response.content.startswith("[MOCK]")
    assert len(flaky.received) == 3
    assert fake_sleep.delays == [1.0, 2.0]
    metrics = client.get_metrics()
    assert metrics.successful_requests == 1
    assert metrics.failed_requests == 0


async def test_exhausted_retries_record_one_failure(mock_config, retry_service):
    flaky = FlakyProvider(failures=100)
    client = EnhancedAIClient(mock_config, providers={"mock": flaky}, retry_service=retry_service)

    with pytest.raises(MaxRetryError) as excinfo:
        await client.generate_response(chat_request())

    assert excinfo.value.attempts == 4
    assert isinstance(excinfo.value.original_exception, TransportError)
    metrics = client.get_metrics()
    assert metrics.total_requests == 1
    assert metrics.failed_requests == 1
    assert metrics.provider_stats["mock"].failures == 1


async def test_failures_are_not_cached(mock_config, retry_service):
    flaky = FlakyProvider(failures=4)
    client = EnhancedAIClient(mock_config, providers={"mock": flaky}, retry_service=retry_service)

    with pytest.raises(MaxRetryError):
        await client.generate_response(chat_request())
    await client.generate_response(chat_request())

    assert len(flaky.received) == 5


async def test_metrics_disabled(provider, retry_service):
    client = EnhancedAIClient(AIConfig(enable_metrics=False), providers={"mock": provider},
                              retry_service=retry_service)

    await client.generate_response(chat_request())

    assert client.get_metrics().total_requests == 0


async def test_missing_usage_falls_back_to_estimate(mock_config, retry_service):
    estimator = MagicMock(spec=TokenEstimator)
    estimator.estimate_tokens_for_messages.return_value = 12
    estimator.estimate_tokens.return_value = 3
    client = EnhancedAIClient(mock_config, providers={"mock": SilentUsageProvider()},
                              retry_service=retry_service, token_estimator=estimator)

    await client.generate_response(chat_request())

    assert client.get_metrics().total_tokens_used == 15
    estimator.estimate_tokens.assert_called_once()


async def test_questions_and_evaluation_are_metered(client):
    questions = await client.generate_questions(QuestionGenerationRequest(job_description="Go developer"))
    evaluation = await client.evaluate_answers(EvaluationRequest(questions=["Q"], answers=["A"]))

    assert len(questions.questions) == 3
    assert evaluation.overall_score == pytest.approx(0.8)
    metrics = client.get_metrics()
    assert metrics.successful_requests == 2
    assert metrics.total_tokens_used == 60 + 200


def test_switch_provider_moves_to_recommended_model():
    config = AIConfig(openai_api_key="sk", default_provider="mock")
    client = EnhancedAIClient(config, transport=httpx.MockTransport(lambda request: httpx.Response(200)))

    client.switch_provider("openai")

    assert client.config.default_provider == "openai"
    assert client.config.default_model == "gpt-3.5-turbo"
    assert config.default_provider == "mock"


def test_switch_provider_keeps_supported_model(client):
    client.switch_provider("mock")
    assert client.config.default_model == "mock-model"


def test_switch_to_unregistered_provider(client):
    with pytest.raises(ConfigurationError, match="provider not available: gemini"):
        client.switch_provider("gemini")
    assert client.config.default_provider == "mock"


def test_streaming_disabled_by_default(client):
    with pytest.raises(ConfigurationError, match="streaming is disabled"):
        client.stream_response(chat_request())


async def test_stream_response_from_mock(provider, retry_service):
    client = EnhancedAIClient(AIConfig(enable_streaming=True), providers={"mock": provider},
                              retry_service=retry_service)

    chunks = [chunk async for chunk in client.stream_response(chat_request())]

    assert len(chunks) == 1
    assert chunks[0].is_complete
    assert chunks[0].content.startswith("[MOCK] Streaming")


async def test_stream_response_unsupported_provider(retry_service):
    class NoStreamProvider(MockProvider):
        async def generate_stream_response(self, request):
            raise StreamingNotSupportedError("mock")
            yield  # pragma: no cover

    client = EnhancedAIClient(AIConfig(enable_streaming=True), providers={"mock": NoStreamProvider()},
                              retry_service=retry_service)

    with pytest.raises(StreamingNotSupportedError):
        async for _ in client.stream_response(chat_request()):
            pass


async def test_is_healthy_when_any_provider_healthy(client):
    assert await client.is_healthy() is True


async def test_is_unhealthy_when_all_fail(mock_config):
    class DownProvider(MockProvider):
        async def is_healthy(self):
            return False

    client = EnhancedAIClient(mock_config, providers={"mock": DownProvider()})
    assert await client.is_healthy() is False
