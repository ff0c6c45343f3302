"""Service for executing provider calls with automatic retries.

Implements exponential backoff for transient failures (transport errors,
vendor rate limits, 5xx responses). Only the final failure is raised; the
intermediate ones are logged.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Coroutine, Optional

from interviewer.domain.events.api_events import (
    ApiCallFailed,
    ApiCallInitiated,
    ApiCallSucceeded,
    DomainEvent,
    RetryScheduled,
)
from interviewer.domain.exceptions import ConfigurationError, MaxRetryError, StreamingNotSupportedError

logger = logging.getLogger(__name__)

MAX_BACKOFF_EXPONENT = 10  # caps the delay at 2**10 seconds
NON_RETRYABLE_EXCEPTIONS = (ConfigurationError, StreamingNotSupportedError)


def dispatch_event(event: DomainEvent) -> None:
    logger.debug(f"EVENT: {event}")


class ApiRetryService:
    """Runs an async call up to `max_retries + 1` times with exponential backoff."""

    def __init__(
        self,
        max_retries: int = 3,
        initial_backoff_s: float = 1.0,
        backoff_factor: float = 2.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """Initializes the ApiRetryService.

        Args:
            max_retries: Retries after the first attempt; 0 disables retrying.
            initial_backoff_s: Delay before the first retry.
            backoff_factor: Multiplier applied per retry.
            sleep: Awaitable sleep used between attempts (injectable for tests).
        """
        self.max_retries = max_retries
        self.initial_backoff_s = initial_backoff_s
        self.backoff_factor = backoff_factor
        self._sleep = sleep
        logger.debug(
            f"ApiRetryService initialized: max_retries={max_retries}, "
            f"initial_backoff={initial_backoff_s}s, factor={backoff_factor}"
        )

    def backoff_delay(self, attempt: int) -> float:
        """Delay after the failed attempt with zero-based index `attempt`."""
        return self.initial_backoff_s * self.backoff_factor ** min(attempt, MAX_BACKOFF_EXPONENT)

    async def execute_with_retry(
        self,
        func: Callable[..., Coroutine[Any, Any, Any]],
        *args: Any,
        provider_name: str = "",
        endpoint_name: Optional[str] = None,
        **kwargs: Any
    ) -> Any:
        """Executes an async function, retrying failures with backoff.

        Cancellation of the calling task propagates immediately; it is not
        treated as a retryable failure.

        Raises:
            MaxRetryError: If every attempt failed. Wraps the last error.
            ConfigurationError: Raised on the first attempt, never retried.
        """
        endpoint = endpoint_name or getattr(func, "__name__", "call")
        total_attempts = self.max_retries + 1
        last_exception: Optional[Exception] = None

        for attempt in range(total_attempts):
            dispatch_event(ApiCallInitiated(provider=provider_name, endpoint=endpoint, attempt_number=attempt + 1))
            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except NON_RETRYABLE_EXCEPTIONS as e:
                logger.error(f"Non-retryable error calling {provider_name}.{endpoint}: {e}")
                dispatch_event(ApiCallFailed(provider=provider_name, endpoint=endpoint,
                                             error_type=type(e).__name__, error_message=str(e),
                                             attempts=attempt + 1))
                raise
            except Exception as e:
                last_exception = e
                if attempt < self.max_retries:
                    delay = self.backoff_delay(attempt)
                    logger.warning(
                        f"AI request failed (attempt {attempt + 1}/{total_attempts}), "
                        f"retrying in {delay:.0f}s: {e}"
                    )
                    dispatch_event(RetryScheduled(provider=provider_name, endpoint=endpoint,
                                                  attempt_number=attempt + 1, delay_seconds=delay,
                                                  error_message=str(e)))
                    await self._sleep(delay)
                continue

            latency_ms = (time.perf_counter() - start_time) * 1000
            dispatch_event(ApiCallSucceeded(provider=provider_name, endpoint=endpoint, latency_ms=latency_ms,
                                            response_summary=getattr(result, "token_usage", None)))
            return result

        logger.error(f"Max retries ({self.max_retries}) reached for {provider_name}.{endpoint}. Last error: {last_exception}")
        dispatch_event(ApiCallFailed(provider=provider_name, endpoint=endpoint,
                                     error_type=type(last_exception).__name__, error_message=str(last_exception),
                                     attempts=total_attempts))
        raise MaxRetryError(last_exception, total_attempts) from last_exception
