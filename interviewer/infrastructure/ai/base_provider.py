"""Shared HTTP plumbing for HTTP-backed provider adapters.

`BaseProvider.make_request` serializes the payload, lets the adapter place
credentials and build the URL, sends the POST and classifies the outcome:
2xx returns the body; any other status raises ProviderError with status and
body embedded; network failures and timeouts raise TransportError.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from interviewer.domain.exceptions import ProviderError, TransportError
from interviewer.domain.interfaces.ai_model import AIProvider, ProviderAdapter
from interviewer.domain.models.config import AIConfig

logger = logging.getLogger(__name__)


class BaseProvider(AIProvider, ProviderAdapter):
    """Base class for adapters that talk to a vendor over HTTP."""

    def __init__(
        self,
        config: AIConfig,
        base_url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initializes the shared HTTP client.

        Args:
            config: Validated AI configuration; supplies the request timeout.
            base_url: Vendor API root, without a trailing slash.
            transport: Optional httpx transport (e.g. httpx.MockTransport in tests).
        """
        self.config = config
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(timeout=config.request_timeout, transport=transport)

    async def make_request(
        self,
        endpoint: str,
        payload: Dict[str, Any],
        adapter: Optional[ProviderAdapter] = None,
    ) -> bytes:
        """POSTs `payload` as JSON and returns the raw response body.

        Raises:
            ProviderError: Payload could not be serialized, or non-2xx status.
            TransportError: Network failure or timeout.
        """
        adapter = adapter or self
        provider = self.get_provider_name()

        try:
            body = json.dumps(payload).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise ProviderError(f"failed to marshal request: {e}", provider=provider) from e

        request = self._client.build_request(
            "POST",
            adapter.get_endpoint_url(endpoint),
            content=body,
            headers={"Content-Type": "application/json"},
        )
        adapter.set_auth(request)
        logger.debug(f"POST {provider}{endpoint} ({len(body)} bytes)")

        try:
            response = await self._client.send(request)
        except httpx.TimeoutException as e:
            raise TransportError(f"request to {provider} timed out: {e!r}", provider=provider) from e
        except httpx.HTTPError as e:
            raise TransportError(f"HTTP request failed: {e!r}", provider=provider) from e

        if not response.is_success:
            raise ProviderError(
                f"API returned status {response.status_code}: {response.text}",
                status_code=response.status_code,
                provider=provider,
            )
        return response.content

    def decode_json(self, body: bytes) -> Dict[str, Any]:
        try:
            return json.loads(body)
        except ValueError as e:
            raise ProviderError(f"failed to decode {self.get_provider_name()} response: {e}",
                                provider=self.get_provider_name()) from e

    def get_model_name(self, model: str, default_model: str = "") -> str:
        """Resolves the model: request model, then adapter default, then config default."""
        return model or default_model or self.config.default_model or ""

    async def aclose(self) -> None:
        await self._client.aclose()
