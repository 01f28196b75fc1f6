"""Provider dispatch for LLM requests."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from litestar_chains.core.types import LLMProvider
from litestar_chains.exceptions import ProviderNotConfiguredError
from litestar_chains.llm.ollama import OllamaService
from litestar_chains.llm.openrouter import OpenRouterService

if TYPE_CHECKING:
    from collections.abc import Mapping

    from litestar_chains.config import ChainsSettings
    from litestar_chains.core.models import LLMRequest, LLMResponse
    from litestar_chains.core.protocols import LLMService

__all__ = ["LLMRouter"]

logger = logging.getLogger(__name__)


class LLMRouter:
    """Route each request to the adapter registered for its provider.

    Requests without a provider go to the active provider. The router itself
    satisfies :class:`~litestar_chains.core.protocols.LLMService`, so it can be
    handed straight to the executor.

    Example:
        >>> router = LLMRouter(
        ...     {LLMProvider.OPENROUTER: OpenRouterService(api_key="..."), LLMProvider.OLLAMA: OllamaService()},
        ...     default_provider=LLMProvider.OPENROUTER,
        ... )
        >>> await router.send_request(LLMRequest(provider=LLMProvider.OLLAMA, model="llama3", prompt="Hi"))
    """

    def __init__(
        self,
        services: Mapping[LLMProvider, LLMService] | None = None,
        default_provider: LLMProvider = LLMProvider.OPENROUTER,
    ) -> None:
        self._services: dict[LLMProvider, LLMService] = dict(services or {})
        self.active_provider = default_provider

    @classmethod
    def from_settings(cls, settings: ChainsSettings) -> LLMRouter:
        """Build a router with the adapters the settings allow.

        Ollama needs no credentials and is always registered; OpenRouter is
        registered only when an API key is configured.
        """
        services: dict[LLMProvider, LLMService] = {
            LLMProvider.OLLAMA: OllamaService(base_url=settings.ollama_base_url, timeout=settings.request_timeout),
        }
        if settings.openrouter_api_key:
            services[LLMProvider.OPENROUTER] = OpenRouterService(
                api_key=settings.openrouter_api_key,
                base_url=settings.openrouter_base_url,
                timeout=settings.request_timeout,
            )
        else:
            logger.info("OPENROUTER_API_KEY is not set, OpenRouter requests will fail")
        return cls(services, default_provider=settings.default_provider)

    @property
    def providers(self) -> list[LLMProvider]:
        return list(self._services)

    def register(self, provider: LLMProvider, service: LLMService) -> None:
        """Register or replace the adapter for ``provider``."""
        self._services[provider] = service

    def set_active_provider(self, provider: LLMProvider) -> None:
        """Change the provider used for requests that name none."""
        self.active_provider = provider

    def get_service(self, provider: LLMProvider | None = None) -> LLMService:
        """Return the adapter for ``provider`` or the active provider.

        Raises:
            ProviderNotConfiguredError: If no adapter is registered.
        """
        target = provider or self.active_provider
        try:
            return self._services[target]
        except KeyError:
            raise ProviderNotConfiguredError(str(target)) from None

    async def send_request(self, request: LLMRequest) -> LLMResponse:
        service = self.get_service(request.provider)
        logger.debug("Routing request for model %s to %s", request.model, request.provider or self.active_provider)
        return await service.send_request(request)

    async def get_available_models(self, provider: LLMProvider | None = None) -> list[str]:
        return await self.get_service(provider).get_available_models()

    async def is_available(self, provider: LLMProvider | None = None) -> bool:
        try:
            service = self.get_service(provider)
        except ProviderNotConfiguredError:
            return False
        return await service.is_available()

    async def aclose(self) -> None:
        """Close every registered adapter that holds a client."""
        for service in self._services.values():
            close = getattr(service, "aclose", None)
            if close is not None:
                await close()
