"""Domain Events related to provider calls and resilience.

Raised around every provider call (initiated, succeeded, failed, retried)
and for cache hits; dispatched to the log by the services that emit them.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class DomainEvent:
    """Base class for domain events."""


@dataclass
class ApiCallInitiated(DomainEvent):
    """Event triggered when a provider call is about to be made."""
    provider: str
    endpoint: str
    attempt_number: int = 1
    timestamp: float = field(default_factory=time.time)


@dataclass
class ApiCallSucceeded(DomainEvent):
    provider: str
    endpoint: str
    latency_ms: float
    response_summary: Optional[Any] = None  # e.g. token usage
    timestamp: float = field(default_factory=time.time)


@dataclass
class ApiCallFailed(DomainEvent):
    """Event triggered when a provider call fails definitively (after retries)."""
    provider: str
    endpoint: str
    error_type: str
    error_message: str
    attempts: int = 1
    timestamp: float = field(default_factory=time.time)


@dataclass
class RetryScheduled(DomainEvent):
    provider: str
    endpoint: str
    attempt_number: int
    delay_seconds: float
    error_message: str = ""
    timestamp: float = field(default_factory=time.time)


@dataclass
class ResponseCacheHit(DomainEvent):
    cache_key: str
    provider: str = ""
    timestamp: float = field(default_factory=time.time)
