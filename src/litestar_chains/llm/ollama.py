"""Ollama adapter for local model inference."""

from __future__ import annotations

import logging
import math
import time

import httpx

from litestar_chains.core.models import LLMRequest, LLMResponse, TokenUsage
from litestar_chains.exceptions import LLMProviderError
from litestar_chains.llm.base import DEFAULT_SYSTEM_MESSAGE, BaseLLMService

__all__ = ["OLLAMA_BASE_URL", "OLLAMA_TIMEOUT", "OllamaService", "estimate_tokens"]

logger = logging.getLogger(__name__)

OLLAMA_BASE_URL = "http://localhost:11434"
# Longer for local inference
OLLAMA_TIMEOUT = 120.0


def estimate_tokens(text: str) -> int:
    """Estimate a token count as one token per four characters, rounded up.

    Example:
        >>> estimate_tokens("hello")
        2
    """
    return math.ceil(len(text) / 4)


class OllamaService(BaseLLMService):
    """LLM service backed by a local Ollama server.

    Ollama reports no token counts for chat, so usage is estimated from the
    prompt and response lengths.
    """

    provider = "ollama"

    def __init__(
        self,
        base_url: str = OLLAMA_BASE_URL,
        api_key: str = "",
        timeout: float = OLLAMA_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(base_url=base_url, api_key=api_key, timeout=timeout, transport=transport)

    def set_base_url(self, base_url: str) -> None:
        """Point the adapter at another Ollama server."""
        self.base_url = base_url.rstrip("/")

    async def send_request(self, request: LLMRequest) -> LLMResponse:
        response = await self._request(
            "POST",
            "/api/chat",
            json={
                "model": request.model,
                "messages": [
                    {"role": "system", "content": DEFAULT_SYSTEM_MESSAGE},
                    {"role": "user", "content": request.prompt},
                ],
                "options": request.parameters,
                "stream": False,
            },
        )
        data = self._json_object(response)

        content = (data.get("message") or {}).get("content") or ""
        prompt_tokens = estimate_tokens(request.prompt)
        completion_tokens = estimate_tokens(content)
        return LLMResponse(
            id=f"ollama-{int(time.time() * 1000)}",
            content=content,
            usage=TokenUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
            metadata={"model": request.model},
        )

    async def get_available_models(self) -> list[str]:
        try:
            response = await self._request("GET", "/api/tags")
            return [model["name"] for model in self._json_object(response).get("models", [])]
        except (LLMProviderError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Failed to fetch Ollama models: %s", exc)
            return []

    async def is_available(self) -> bool:
        return await self._probe("/api/tags")
