"""Tests for the LLM provider adapters and the provider router."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from litestar_chains.config import ChainsSettings
from litestar_chains.core.models import LLMRequest
from litestar_chains.core.types import LLMProvider
from litestar_chains.exceptions import LLMProviderError, ProviderNotConfiguredError
from litestar_chains.llm import (
    LLMRouter,
    OllamaService,
    OpenRouterService,
    estimate_tokens,
    format_tools,
)


class Recorder:
    """httpx handler that records requests and replies with a canned response."""

    def __init__(self, status_code: int = 200, payload: Any = None, content: bytes | None = None) -> None:
        self.status_code = status_code
        self.payload = payload
        self.content = content
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def last_body(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)


def _openrouter(handler: Any, **kwargs: Any) -> OpenRouterService:
    return OpenRouterService(api_key="sk-test", transport=httpx.MockTransport(handler), **kwargs)


def _ollama(handler: Any) -> OllamaService:
    return OllamaService(transport=httpx.MockTransport(handler))


def _request(**kwargs: Any) -> LLMRequest:
    defaults: dict[str, Any] = {
        "provider": None,
        "model": "some/model",
        "prompt": "Sys\n\nHello",
        "parameters": {"temperature": 0.2},
    }
    defaults.update(kwargs)
    return LLMRequest(**defaults)


COMPLETION = {
    "id": "gen-1",
    "model": "some/model",
    "system_fingerprint": "fp",
    "choices": [{"message": {"role": "assistant", "content": "Hi there"}}],
    "usage": {"prompt_tokens": 12, "completion_tokens": 3, "total_tokens": 15},
}


@pytest.mark.unit
class TestFormatTools:
    """Tests for format_tools."""

    def test_function_entries(self) -> None:
        tools = [{"name": "search", "description": "Web search", "configuration": {"type": "object"}}]

        assert format_tools(tools) == [
            {
                "type": "function",
                "function": {"name": "search", "description": "Web search", "parameters": {"type": "object"}},
            }
        ]


@pytest.mark.unit
class TestOpenRouterService:
    """Tests for OpenRouterService."""

    async def test_request_body_and_headers(self) -> None:
        recorder = Recorder(payload=COMPLETION)
        service = _openrouter(recorder, referer="https://example.org")

        await service.send_request(_request())

        sent = recorder.requests[-1]
        assert sent.method == "POST"
        assert str(sent.url) == "https://openrouter.ai/api/v1/chat/completions"
        assert sent.headers["Authorization"] == "Bearer sk-test"
        assert sent.headers["HTTP-Referer"] == "https://example.org"
        assert recorder.last_body == {
            "model": "some/model",
            "messages": [
                {"role": "system", "content": "You are a helpful assistant."},
                {"role": "user", "content": "Sys\n\nHello"},
            ],
            "temperature": 0.2,
        }

    async def test_response_mapping(self) -> None:
        service = _openrouter(Recorder(payload=COMPLETION))

        response = await service.send_request(_request())

        assert response.id == "gen-1"
        assert response.content == "Hi there"
        assert response.tool_results is None
        assert response.usage.prompt_tokens == 12
        assert response.usage.completion_tokens == 3
        assert response.usage.total_tokens == 15
        assert response.metadata == {"model": "some/model", "system_fingerprint": "fp"}

    async def test_missing_fields_default(self) -> None:
        service = _openrouter(Recorder(payload={"choices": [{"message": {"content": None}}]}))

        response = await service.send_request(_request())

        assert response.id == ""
        assert response.content == ""
        assert response.usage.total_tokens == 0

    async def test_tools_are_sent_and_tool_calls_parsed(self) -> None:
        payload = {
            "id": "gen-2",
            "choices": [
                {
                    "message": {
                        "content": "",
                        "tool_calls": [
                            {"id": "call-1", "function": {"name": "search", "arguments": '{"q": "litestar"}'}},
                            {"id": "call-2", "function": {"name": "search", "arguments": "{not json"}},
                        ],
                    }
                }
            ],
        }
        recorder = Recorder(payload=payload)
        service = _openrouter(recorder)

        response = await service.send_request(
            _request(tools=[{"name": "search", "description": "Web search", "configuration": {}}])
        )

        assert recorder.last_body["tools"][0]["function"]["name"] == "search"
        assert response.tool_results is not None
        first, second = response.tool_results
        assert first.tool_id == "call-1"
        assert first.result == {"q": "litestar"}
        assert first.error is None
        assert second.tool_id == "call-2"
        assert second.error is not None
        assert second.error.startswith("Failed to parse tool arguments")

    async def test_error_status(self) -> None:
        service = _openrouter(Recorder(status_code=401, payload={"error": "bad key"}))

        with pytest.raises(LLMProviderError) as exc_info:
            await service.send_request(_request())

        assert exc_info.value.status_code == 401
        assert exc_info.value.provider == "openrouter"
        assert str(exc_info.value).startswith("openrouter API error (401)")

    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        service = _openrouter(handler)

        with pytest.raises(LLMProviderError, match="connection refused") as exc_info:
            await service.send_request(_request())

        assert exc_info.value.status_code is None

    async def test_invalid_json(self) -> None:
        service = _openrouter(Recorder(content=b"<html>"))

        with pytest.raises(LLMProviderError, match="Invalid JSON"):
            await service.send_request(_request())

    @pytest.mark.parametrize("payload", [[COMPLETION], "Hi there", 42])
    async def test_non_object_body(self, payload: Any) -> None:
        service = _openrouter(Recorder(payload=payload))

        with pytest.raises(LLMProviderError, match="expected a JSON object") as exc_info:
            await service.send_request(_request())

        assert exc_info.value.provider == "openrouter"
        assert exc_info.value.status_code == 200

    async def test_malformed_choices(self) -> None:
        service = _openrouter(Recorder(payload={"choices": ["oops"], "usage": {"prompt_tokens": 2}}))

        response = await service.send_request(_request())

        assert response.content == ""
        assert response.usage.prompt_tokens == 2

    async def test_available_models_with_non_object_body(self) -> None:
        service = _openrouter(Recorder(payload=[{"id": "a/one"}]))

        assert await service.get_available_models() == []

    async def test_available_models(self) -> None:
        recorder = Recorder(payload={"data": [{"id": "a/one"}, {"id": "b/two"}]})
        service = _openrouter(recorder)

        assert await service.get_available_models() == ["a/one", "b/two"]
        assert recorder.requests[-1].url.path == "/api/v1/models"

    async def test_available_models_on_failure(self) -> None:
        service = _openrouter(Recorder(status_code=500, payload={}))

        assert await service.get_available_models() == []
        assert not await service.is_available()

    async def test_aclose_resets_client(self) -> None:
        service = _openrouter(Recorder(payload={"data": []}))
        assert await service.is_available()

        await service.aclose()
        await service.aclose()

        assert service._client is None


@pytest.mark.unit
class TestOllamaService:
    """Tests for OllamaService."""

    def test_estimate_tokens(self) -> None:
        assert estimate_tokens("") == 0
        assert estimate_tokens("abcd") == 1
        assert estimate_tokens("abcde") == 2

    async def test_request_body(self) -> None:
        recorder = Recorder(payload={"message": {"content": "pong"}})
        service = _ollama(recorder)

        await service.send_request(_request(model="llama3"))

        assert str(recorder.requests[-1].url) == "http://localhost:11434/api/chat"
        assert recorder.last_body == {
            "model": "llama3",
            "messages": [
                {"role": "system", "content": "You are a helpful assistant."},
                {"role": "user", "content": "Sys\n\nHello"},
            ],
            "options": {"temperature": 0.2},
            "stream": False,
        }

    async def test_usage_is_estimated(self) -> None:
        service = _ollama(Recorder(payload={"message": {"content": "12345678"}}))

        response = await service.send_request(_request(model="llama3", prompt="abcdefghi"))

        assert response.content == "12345678"
        assert response.usage.prompt_tokens == 3
        assert response.usage.completion_tokens == 2
        assert response.usage.total_tokens == 5
        assert response.id.startswith("ollama-")
        assert response.metadata == {"model": "llama3"}

    async def test_set_base_url(self) -> None:
        recorder = Recorder(payload={"models": [{"name": "llama3"}, {"name": "mistral"}]})
        service = _ollama(recorder)

        service.set_base_url("http://gpu-box:11434/")

        assert await service.get_available_models() == ["llama3", "mistral"]
        assert str(recorder.requests[-1].url) == "http://gpu-box:11434/api/tags"

    async def test_error_status(self) -> None:
        service = _ollama(Recorder(status_code=404, payload={"error": "model not found"}))

        with pytest.raises(LLMProviderError) as exc_info:
            await service.send_request(_request(model="missing"))

        assert exc_info.value.status_code == 404
        assert await service.get_available_models() == []

    async def test_non_object_body(self) -> None:
        service = _ollama(Recorder(payload=[{"message": {"content": "pong"}}]))

        with pytest.raises(LLMProviderError, match="expected a JSON object"):
            await service.send_request(_request(model="llama3"))
        assert await service.get_available_models() == []


@pytest.mark.unit
class TestLLMRouter:
    """Tests for LLMRouter."""

    async def test_dispatch_by_request_provider(self, make_llm: Any) -> None:
        ollama = make_llm()
        openrouter = make_llm()
        router = LLMRouter({LLMProvider.OLLAMA: ollama, LLMProvider.OPENROUTER: openrouter})

        await router.send_request(_request(provider=LLMProvider.OLLAMA))

        assert len(ollama.requests) == 1
        assert openrouter.requests == []

    async def test_unset_provider_uses_active(self, make_llm: Any) -> None:
        ollama = make_llm()
        router = LLMRouter({LLMProvider.OLLAMA: ollama})
        router.set_active_provider(LLMProvider.OLLAMA)

        await router.send_request(_request(provider=None))

        assert len(ollama.requests) == 1

    async def test_unconfigured_provider(self, make_llm: Any) -> None:
        router = LLMRouter({LLMProvider.OLLAMA: make_llm()})

        with pytest.raises(ProviderNotConfiguredError, match="openrouter"):
            await router.send_request(_request(provider=LLMProvider.OPENROUTER))

        assert not await router.is_available(LLMProvider.OPENROUTER)
        assert await router.is_available(LLMProvider.OLLAMA)

    async def test_models_and_registration(self, make_llm: Any) -> None:
        router = LLMRouter()
        assert router.providers == []

        router.register(LLMProvider.OLLAMA, make_llm())

        assert router.providers == [LLMProvider.OLLAMA]
        assert await router.get_available_models(LLMProvider.OLLAMA) == ["mock-model"]

    async def test_from_settings_without_api_key(self) -> None:
        router = LLMRouter.from_settings(ChainsSettings(openrouter_api_key="", default_provider=LLMProvider.OLLAMA))

        assert router.providers == [LLMProvider.OLLAMA]
        assert router.active_provider == LLMProvider.OLLAMA
        assert isinstance(router.get_service(), OllamaService)

    async def test_from_settings_with_api_key(self) -> None:
        settings = ChainsSettings(openrouter_api_key="sk-test", request_timeout=5.0)

        router = LLMRouter.from_settings(settings)

        service = router.get_service(LLMProvider.OPENROUTER)
        assert isinstance(service, OpenRouterService)
        assert service.api_key == "sk-test"
        assert service.timeout == 5.0

    async def test_aclose_closes_adapters(self) -> None:
        recorder = Recorder(payload={"models": []})
        ollama = _ollama(recorder)
        router = LLMRouter({LLMProvider.OLLAMA: ollama})
        await router.is_available(LLMProvider.OLLAMA)

        await router.aclose()

        assert ollama._client is None
