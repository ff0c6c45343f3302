import asyncio

import pytest

from interviewer.domain.exceptions import ConfigurationError, MaxRetryError, TransportError
from interviewer.infrastructure.resilience.api_retry import ApiRetryService


class FlakyCall:
    """Fails `failures` times, then returns `result`."""

    def __init__(self, failures, result="ok", error=None):
        self.failures = failures
        self.result = result
        self.error = error or TransportError("connection reset")
        self.calls = 0

    async def __call__(self, *args, **kwargs):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.result


async def test_success_on_first_attempt(retry_service, fake_sleep):
    call = FlakyCall(failures=0)

    assert await retry_service.execute_with_retry(call) == "ok"
    assert call.calls == 1
    assert fake_sleep.delays == []


async def test_recovers_after_transient_failures(retry_service, fake_sleep):
    call = FlakyCall(failures=2)

    assert await retry_service.execute_with_retry(call, provider_name="openai") == "ok"
    assert call.calls == 3
    assert fake_sleep.delays == [1.0, 2.0]


async def test_exhaustion_raises_max_retry_error(retry_service, fake_sleep):
    error = TransportError("still down")
    call = FlakyCall(failures=100, error=error)

    with pytest.raises(MaxRetryError) as excinfo:
        await retry_service.execute_with_retry(call)

    assert call.calls == 4
    assert excinfo.value.attempts == 4
    assert excinfo.value.original_exception is error
    assert excinfo.value.__cause__ is error
    assert "still down" in str(excinfo.value)


@pytest.mark.parametrize("max_retries", [0, 1, 3, 5])
async def test_attempts_and_backoff_bound(max_retries, fake_sleep):
    service = ApiRetryService(max_retries=max_retries, sleep=fake_sleep)
    call = FlakyCall(failures=100)

    with pytest.raises(MaxRetryError):
        await service.execute_with_retry(call)

    assert call.calls == max_retries + 1
    assert len(fake_sleep.delays) == max_retries
    assert fake_sleep.delays == sorted(fake_sleep.delays)
    assert fake_sleep.delays == [2.0 ** i for i in range(max_retries)]


def test_backoff_is_capped():
    service = ApiRetryService()
    assert service.backoff_delay(10) == 1024.0
    assert service.backoff_delay(50) == 1024.0


async def test_configuration_error_is_not_retried(retry_service, fake_sleep):
    call = FlakyCall(failures=1, error=ConfigurationError("no key"))

    with pytest.raises(ConfigurationError):
        await retry_service.execute_with_retry(call)

    assert call.calls == 1
    assert fake_sleep.delays == []


async def test_passes_arguments_through(retry_service):
    async def echo(a, b, c=None):
        return (a, b, c)

    assert await retry_service.execute_with_retry(echo, 1, 2, c=3, provider_name="mock") == (1, 2, 3)


async def test_cancellation_propagates(retry_service, fake_sleep):
    async def cancelled():
        raise asyncio.CancelledError()

    with pytest.raises(asyncio.CancelledError):
        await retry_service.execute_with_retry(cancelled)
    assert fake_sleep.delays == []


async def test_logs_each_retry_at_warning(retry_service, caplog):
    call = FlakyCall(failures=2)

    with caplog.at_level("WARNING"):
        await retry_service.execute_with_retry(call)

    retries = [r for r in caplog.records if "retrying in" in r.getMessage()]
    assert len(retries) == 2
    assert "attempt 1/4" in retries[0].getMessage()
