"""Interface for response caching.

Defines the contract for storing and retrieving chat responses by key with
a time-to-live.
"""

import abc
from typing import Optional

from ..models.ai import ChatResponse
from ..models.common import CacheKey


class CacheService(abc.ABC):
    """Abstract Base Class for caching operations."""

    @abc.abstractmethod
    def get(self, key: CacheKey) -> Optional[ChatResponse]:
        """Retrieves a response from the cache.

        Returns:
            The cached response if found and not expired, otherwise None.
        """

    @abc.abstractmethod
    def set(self, key: CacheKey, value: ChatResponse, ttl: Optional[float] = None) -> None:
        """Stores a response.

        Args:
            key: The cache key to store the response under.
            value: The response to store.
            ttl: Time-to-live in seconds (uses the cache default if None).
        """

    @abc.abstractmethod
    def delete(self, key: CacheKey) -> None:
        pass

    @abc.abstractmethod
    def clear(self) -> None:
        pass
