"""LLM provider adapters and the provider router."""

from __future__ import annotations

from litestar_chains.llm.base import BaseLLMService
from litestar_chains.llm.ollama import OLLAMA_BASE_URL, OllamaService, estimate_tokens
from litestar_chains.llm.openrouter import OPENROUTER_BASE_URL, OpenRouterService, format_tools
from litestar_chains.llm.router import LLMRouter

__all__ = [
    "OLLAMA_BASE_URL",
    "OPENROUTER_BASE_URL",
    "BaseLLMService",
    "LLMRouter",
    "OllamaService",
    "OpenRouterService",
    "estimate_tokens",
    "format_tools",
]
