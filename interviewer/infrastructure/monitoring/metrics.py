"""Usage metrics for provider calls.

Counters are updated under an exclusive lock and read back as deep-copied
snapshots so callers never hold a reference into live state.
"""

import copy
import logging
import time
from typing import Callable

from interviewer.domain.models.metrics import ProviderStats, UsageMetrics
from interviewer.infrastructure.concurrency.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)


def _running_average(current: float, sample: float, count: int) -> float:
    """Average after adding `sample` as the `count`-th observation."""
    if count <= 1:
        return sample
    return current + (sample - current) / count


class MetricsCollector:
    """Accumulates request, token and cost counters for one client."""

    def __init__(self, cost_per_token: float, clock: Callable[[], float] = time.time):
        self.cost_per_token = cost_per_token
        self._clock = clock
        self._metrics = UsageMetrics()
        self._lock = ReadWriteLock()

    def record_success(self, provider: str, tokens: int, response_time: float) -> None:
        cost = tokens * self.cost_per_token
        with self._lock.write_locked():
            m = self._metrics
            m.total_requests += 1
            m.last_request_time = self._clock()
            m.successful_requests += 1
            m.total_tokens_used += tokens
            m.total_cost += cost
            m.avg_response_time = _running_average(m.avg_response_time, response_time, m.successful_requests)

            stats = m.provider_stats.setdefault(provider, ProviderStats())
            stats.requests += 1
            stats.successes += 1
            stats.tokens_used += tokens
            stats.total_cost += cost
            stats.avg_response_time = _running_average(stats.avg_response_time, response_time, stats.successes)
        logger.debug(f"Recorded success for {provider}: tokens={tokens}, cost={cost:.6f}, time={response_time:.3f}s")

    def record_failure(self, provider: str) -> None:
        with self._lock.write_locked():
            m = self._metrics
            m.total_requests += 1
            m.last_request_time = self._clock()
            m.failed_requests += 1

            stats = m.provider_stats.setdefault(provider, ProviderStats())
            stats.requests += 1
            stats.failures += 1
        logger.debug(f"Recorded failure for {provider}")

    def record_cache_hit(self) -> None:
        """Counts a request served from cache; latency and tokens are untouched."""
        with self._lock.write_locked():
            m = self._metrics
            m.total_requests += 1
            m.last_request_time = self._clock()
            m.cache_hits += 1

    def snapshot(self) -> UsageMetrics:
        with self._lock.read_locked():
            return copy.deepcopy(self._metrics)
