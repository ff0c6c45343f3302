"""Interfaces for AI providers (LLM vendors).

Defines the contract every adapter implements, plus the small capability
interface the shared HTTP helper uses to place credentials and build URLs.
"""

import abc
import logging
from typing import Any, AsyncIterator, Dict, List

import httpx

from ..models.ai import (
    ChatRequest,
    ChatResponse,
    EvaluationRequest,
    EvaluationResponse,
    QuestionGenerationRequest,
    QuestionGenerationResponse,
    StreamChunk,
)

logger = logging.getLogger(__name__)


class AIProvider(abc.ABC):
    """Abstract Base Class for LLM provider adapters."""

    @abc.abstractmethod
    async def generate_response(self, request: ChatRequest) -> ChatResponse:
        """Sends a chat request and returns a single completion.

        Raises:
            ProviderError: The vendor rejected the call or reported an API error.
            TransportError: The vendor could not be reached in time.
        """

    @abc.abstractmethod
    def generate_stream_response(self, request: ChatRequest) -> AsyncIterator[StreamChunk]:
        """Streams partial responses.

        Adapters without streaming raise StreamingNotSupportedError instead of
        falling back to a single-shot call.
        """

    @abc.abstractmethod
    async def generate_interview_questions(self, request: QuestionGenerationRequest) -> QuestionGenerationResponse:
        pass

    @abc.abstractmethod
    async def evaluate_answers(self, request: EvaluationRequest) -> EvaluationResponse:
        pass

    @abc.abstractmethod
    def get_provider_name(self) -> str:
        pass

    @abc.abstractmethod
    def get_supported_models(self) -> List[str]:
        pass

    @abc.abstractmethod
    async def validate_credentials(self) -> None:
        """Issues a minimal real call; raises if the credentials are rejected."""

    async def is_healthy(self) -> bool:
        try:
            await self.validate_credentials()
        except Exception as e:
            logger.warning(f"Health check failed for {self.get_provider_name()}: {e}")
            return False
        return True

    @abc.abstractmethod
    async def get_usage_stats(self) -> Dict[str, Any]:
        pass

    async def aclose(self) -> None:
        """Releases network resources. No-op for adapters that hold none."""


class ProviderAdapter(abc.ABC):
    """Vendor-specific placement of credentials and endpoint construction."""

    @abc.abstractmethod
    def set_auth(self, request: httpx.Request) -> None:
        """Applies credentials to an outgoing request just before it is sent."""

    @abc.abstractmethod
    def get_endpoint_url(self, endpoint: str) -> str:
        pass
