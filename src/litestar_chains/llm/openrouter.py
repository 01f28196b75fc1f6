"""OpenRouter adapter using the OpenAI-compatible chat completions API."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from litestar_chains.core.models import LLMRequest, LLMResponse, TokenUsage, ToolResult
from litestar_chains.exceptions import LLMProviderError
from litestar_chains.llm.base import DEFAULT_SYSTEM_MESSAGE, DEFAULT_TIMEOUT, BaseLLMService

__all__ = ["OPENROUTER_BASE_URL", "OpenRouterService", "format_tools"]

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


def format_tools(tools: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Convert tool descriptions to OpenAI function-tool entries.

    Args:
        tools: Tool descriptions with ``name``, ``description`` and
            ``configuration`` keys.

    Returns:
        Function tools for the ``tools`` field of a chat completion body.

    Example:
        >>> format_tools([{"name": "search", "description": "Web search", "configuration": {}}])
        [{'type': 'function', 'function': {'name': 'search', 'description': 'Web search', 'parameters': {}}}]
    """
    return [
        {
            "type": "function",
            "function": {
                "name": tool.get("name"),
                "description": tool.get("description"),
                "parameters": tool.get("configuration"),
            },
        }
        for tool in tools
    ]


def _parse_tool_calls(message: dict[str, Any]) -> list[ToolResult]:
    results: list[ToolResult] = []
    for call in message.get("tool_calls") or []:
        tool_id = call.get("id", "")
        try:
            arguments = json.loads((call.get("function") or {}).get("arguments") or "")
        except (TypeError, ValueError) as exc:
            results.append(ToolResult(tool_id=tool_id, error=f"Failed to parse tool arguments: {exc}"))
        else:
            results.append(ToolResult(tool_id=tool_id, result=arguments))
    return results


class OpenRouterService(BaseLLMService):
    """LLM service backed by OpenRouter.

    Example:
        >>> service = OpenRouterService(api_key="sk-or-...")
        >>> response = await service.send_request(
        ...     LLMRequest(provider=None, model="openai/gpt-4o-mini", prompt="Hello")
        ... )
    """

    provider = "openrouter"

    def __init__(
        self,
        api_key: str,
        base_url: str = OPENROUTER_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
        referer: str | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            api_key: OpenRouter API key.
            base_url: API base URL.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, mainly for tests.
            referer: Optional ``HTTP-Referer`` header identifying the app.
        """
        self.referer = referer
        super().__init__(base_url=base_url, api_key=api_key, timeout=timeout, transport=transport)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Authorization": f"Bearer {self.api_key}"}
        if self.referer:
            headers["HTTP-Referer"] = self.referer
        return headers

    async def send_request(self, request: LLMRequest) -> LLMResponse:
        body: dict[str, Any] = {
            "model": request.model,
            "messages": [
                {"role": "system", "content": DEFAULT_SYSTEM_MESSAGE},
                {"role": "user", "content": request.prompt},
            ],
            **request.parameters,
        }
        if request.tools:
            body["tools"] = format_tools(request.tools)

        response = await self._request("POST", "/chat/completions", json=body)
        data = self._json_object(response)

        choices = data.get("choices") or [{}]
        choice = choices[0] if isinstance(choices, list) and isinstance(choices[0], dict) else {}
        message = choice.get("message") or {}
        tool_results = _parse_tool_calls(message)
        usage = data.get("usage") or {}
        return LLMResponse(
            id=data.get("id") or "",
            content=message.get("content") or "",
            tool_results=tool_results or None,
            usage=TokenUsage(
                prompt_tokens=usage.get("prompt_tokens") or 0,
                completion_tokens=usage.get("completion_tokens") or 0,
                total_tokens=usage.get("total_tokens") or 0,
            ),
            metadata={"model": data.get("model"), "system_fingerprint": data.get("system_fingerprint")},
        )

    async def get_available_models(self) -> list[str]:
        try:
            response = await self._request("GET", "/models")
            return [model["id"] for model in self._json_object(response).get("data", [])]
        except (LLMProviderError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Failed to fetch OpenRouter models: %s", exc)
            return []

    async def is_available(self) -> bool:
        return await self._probe("/models")
