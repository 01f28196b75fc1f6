"""Core protocols for litestar-chains.

This module defines the Protocol-based interfaces of the engine's external
collaborators: the LLM request capability and the key/value persistence
capability. Using Protocol allows duck typing while maintaining type safety.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from litestar_chains.core.models import LLMRequest, LLMResponse

__all__ = ["LLMService", "StorageService"]


@runtime_checkable
class LLMService(Protocol):
    """Protocol for anything able to answer an LLM request.

    Example:
        >>> class EchoService:
        ...     async def send_request(self, request: LLMRequest) -> LLMResponse:
        ...         return LLMResponse(content=request.prompt)
        ...
        ...     async def get_available_models(self) -> list[str]:
        ...         return ["echo"]
        ...
        ...     async def is_available(self) -> bool:
        ...         return True
    """

    async def send_request(self, request: LLMRequest) -> LLMResponse:
        """Send a request to the provider and wait for the full response.

        Args:
            request: The provider-agnostic request.

        Returns:
            The response with content and token usage.

        Raises:
            LLMProviderError: If the provider call fails.
        """
        ...

    async def get_available_models(self) -> list[str]:
        """Return the model identifiers the provider offers."""
        ...

    async def is_available(self) -> bool:
        """Check whether the provider can currently be reached."""
        ...


@runtime_checkable
class StorageService(Protocol):
    """Protocol for the key/value store that persists collections.

    Values must be JSON-serializable. Implementations return ``None`` for
    missing keys.
    """

    async def get_item(self, key: str) -> Any | None:
        """Return the value stored under ``key``, or ``None``."""
        ...

    async def set_item(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    async def remove_item(self, key: str) -> None:
        """Remove ``key`` if present."""
        ...

    async def clear(self) -> None:
        """Remove every key owned by this store."""
        ...

    async def keys(self) -> list[str]:
        """Return all keys owned by this store."""
        ...
