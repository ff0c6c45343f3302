"""In-memory response cache with a fixed TTL.

Entries expire lazily: an expired entry is evicted the next time it is
looked up. There is no background sweep.
"""

import copy
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from interviewer.domain.interfaces.cache import CacheService
from interviewer.domain.models.ai import ChatRequest, ChatResponse
from interviewer.domain.models.common import CacheKey
from interviewer.infrastructure.concurrency.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60 * 60  # 1 hour
SYSTEM_PREFIX_LENGTH = 100


@dataclass
class CacheEntry:
    """Internal representation of a cache entry with expiry."""
    response: ChatResponse
    expires_at: float  # Unix timestamp when the entry expires
    hit_count: int = 0


def generate_cache_key(request: ChatRequest) -> CacheKey:
    """Builds the cache key for a chat request.

    The key combines model, language tag, the first 100 characters of a
    leading system message and the message count. Newlines and carriage
    returns are escaped so multi-line prompts cannot collide with the
    ':' separator layout.
    """
    parts = [request.model]

    language = request.context.get("language")
    if isinstance(language, str):
        parts.append(f"lang:{language}")

    if request.messages:
        system = request.system_message()
        if system is not None:
            parts.append(f"system:{system.content[:SYSTEM_PREFIX_LENGTH]}")
        parts.append(f"len:{len(request.messages)}")

    key = ":".join(parts)
    return CacheKey(key.replace("\n", "\\n").replace("\r", "\\r"))


class ResponseCache(CacheService):
    """Thread-safe TTL cache for chat responses.

    `get` hands out copies; callers cannot alter a stored entry.
    """

    def __init__(self, ttl: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self._lock = ReadWriteLock()
        logger.info(f"ResponseCache initialized (ttl={ttl}s)")

    def get(self, key: CacheKey) -> Optional[ChatResponse]:
        now = self._clock()
        with self._lock.read_locked():
            entry = self._entries.get(key)
            if entry is not None and now <= entry.expires_at:
                # hit_count is informational; a lost increment under
                # concurrent readers is acceptable.
                entry.hit_count += 1
                logger.debug(f"Cache hit for key: {key} (hits={entry.hit_count})")
                return copy.deepcopy(entry.response)

        if entry is not None:
            with self._lock.write_locked():
                current = self._entries.get(key)
                if current is not None and now > current.expires_at:
                    del self._entries[key]
                    logger.debug(f"Evicted expired cache entry: {key}")
        return None

    def set(self, key: CacheKey, value: ChatResponse, ttl: Optional[float] = None) -> None:
        expires_at = self._clock() + (self.ttl if ttl is None else ttl)
        with self._lock.write_locked():
            self._entries[key] = CacheEntry(response=value, expires_at=expires_at)
        logger.debug(f"Cached response for key: {key}")

    def delete(self, key: CacheKey) -> None:
        with self._lock.write_locked():
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock.write_locked():
            count = len(self._entries)
            self._entries.clear()
        logger.info(f"Cleared {count} cached responses")

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._entries)

    def hit_count(self, key: CacheKey) -> int:
        with self._lock.read_locked():
            entry = self._entries.get(key)
            return entry.hit_count if entry else 0
