"""Runtime settings for litestar-chains.

Defaults are read from the environment when a :class:`ChainsSettings` is
created, so an application can rely on environment variables alone.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from litestar_chains.core.types import LLMProvider
from litestar_chains.engine.history import DEFAULT_HISTORY_LIMIT
from litestar_chains.llm.base import DEFAULT_TIMEOUT
from litestar_chains.llm.ollama import OLLAMA_BASE_URL
from litestar_chains.llm.openrouter import OPENROUTER_BASE_URL
from litestar_chains.storage.memory import DEFAULT_STORAGE_PREFIX

__all__ = ["ChainsSettings"]


def _env(name: str, default: str) -> str:
    return os.getenv(name, default)


@dataclass
class ChainsSettings:
    """Application settings.

    Attributes:
        openrouter_api_key: OpenRouter API key (``OPENROUTER_API_KEY``). When
            empty, no OpenRouter adapter is registered.
        openrouter_base_url: OpenRouter API URL (``OPENROUTER_BASE_URL``).
        ollama_base_url: Ollama server URL (``OLLAMA_BASE_URL``).
        default_provider: Provider used for requests naming none
            (``CHAINS_DEFAULT_PROVIDER``).
        history_limit: Number of runs kept in history (``CHAINS_HISTORY_LIMIT``).
        storage_prefix: Prefix applied to storage keys (``CHAINS_STORAGE_PREFIX``).
        request_timeout: Provider request timeout in seconds
            (``CHAINS_REQUEST_TIMEOUT``).
    """

    # LLM providers
    openrouter_api_key: str = field(default_factory=lambda: _env("OPENROUTER_API_KEY", ""))
    openrouter_base_url: str = field(default_factory=lambda: _env("OPENROUTER_BASE_URL", OPENROUTER_BASE_URL))
    ollama_base_url: str = field(default_factory=lambda: _env("OLLAMA_BASE_URL", OLLAMA_BASE_URL))
    default_provider: LLMProvider = field(
        default_factory=lambda: LLMProvider(_env("CHAINS_DEFAULT_PROVIDER", LLMProvider.OPENROUTER.value))
    )

    # Engine
    history_limit: int = field(default_factory=lambda: int(_env("CHAINS_HISTORY_LIMIT", str(DEFAULT_HISTORY_LIMIT))))
    storage_prefix: str = field(default_factory=lambda: _env("CHAINS_STORAGE_PREFIX", DEFAULT_STORAGE_PREFIX))
    request_timeout: float = field(
        default_factory=lambda: float(_env("CHAINS_REQUEST_TIMEOUT", str(DEFAULT_TIMEOUT)))
    )
