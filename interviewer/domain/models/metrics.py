"""Usage metrics aggregates tracked by the enhanced client."""

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class ProviderStats:
    requests: int = 0
    successes: int = 0
    failures: int = 0
    tokens_used: int = 0
    total_cost: float = 0.0
    avg_response_time: float = 0.0  # seconds


@dataclass
class UsageMetrics:
    """Counters scoped to one client instance; only ever increase."""
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    cache_hits: int = 0
    total_tokens_used: int = 0
    total_cost: float = 0.0
    avg_response_time: float = 0.0  # seconds, running average over successes
    last_request_time: Optional[float] = None
    provider_stats: Dict[str, ProviderStats] = field(default_factory=dict)
