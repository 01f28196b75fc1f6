"""Shared plumbing for HTTP-backed LLM adapters."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import httpx

from litestar_chains.exceptions import LLMProviderError

if TYPE_CHECKING:
    from litestar_chains.core.models import LLMRequest, LLMResponse

__all__ = ["DEFAULT_SYSTEM_MESSAGE", "DEFAULT_TIMEOUT", "BaseLLMService"]

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_MESSAGE = "You are a helpful assistant."
DEFAULT_TIMEOUT = 60.0


class BaseLLMService(ABC):
    """Base class for adapters that talk to a provider over HTTP.

    Subclasses implement the three :class:`~litestar_chains.core.protocols.LLMService`
    operations; this class owns the lazily created ``httpx.AsyncClient`` and
    turns transport failures into :class:`LLMProviderError`.

    Attributes:
        provider: Provider name used in error messages.
        api_key: Credential sent to the provider, empty when none is needed.
        base_url: Provider base URL without trailing slash.
        timeout: Request timeout in seconds.
    """

    provider: str = "llm"

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            base_url: Provider base URL.
            api_key: Credential sent to the provider.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, mainly for tests.
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json"}

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers=self._headers(),
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request and raise on transport errors or non-success status.

        Raises:
            LLMProviderError: If the request fails or the provider answers
                with a non-2xx status.
        """
        client = await self._get_client()
        try:
            response = await client.request(method, f"{self.base_url}{path}", **kwargs)
        except httpx.RequestError as exc:
            logger.error("%s request to %s failed: %s", self.provider, path, exc)
            raise LLMProviderError(self.provider, str(exc)) from exc
        if not response.is_success:
            logger.error("%s returned %s for %s", self.provider, response.status_code, path)
            raise LLMProviderError(self.provider, response.reason_phrase or response.text, response.status_code)
        return response

    def _json_object(self, response: httpx.Response) -> dict[str, Any]:
        """Decode a response body that must be a JSON object.

        Raises:
            LLMProviderError: If the body is not valid JSON or not an object.
        """
        try:
            data = response.json()
        except ValueError as exc:
            raise LLMProviderError(self.provider, f"Invalid JSON response: {exc}", response.status_code) from exc
        if not isinstance(data, dict):
            msg = f"Unexpected response body: expected a JSON object, got {type(data).__name__}"
            raise LLMProviderError(self.provider, msg, response.status_code)
        return data

    async def _probe(self, path: str) -> bool:
        client = await self._get_client()
        try:
            response = await client.get(f"{self.base_url}{path}")
        except httpx.RequestError as exc:
            logger.warning("%s availability check failed: %s", self.provider, exc)
            return False
        return response.is_success

    @abstractmethod
    async def send_request(self, request: LLMRequest) -> LLMResponse:
        """Send a chat request and wait for the complete response."""

    @abstractmethod
    async def get_available_models(self) -> list[str]:
        """Return the provider's model identifiers, or ``[]`` on failure."""

    @abstractmethod
    async def is_available(self) -> bool:
        """Check whether the provider answers."""
