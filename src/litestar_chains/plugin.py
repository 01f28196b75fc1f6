"""Litestar plugin for chains integration.

This module provides the ChainsPlugin for seamless integration of
litestar-chains with Litestar applications.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from litestar.di import Provide
from litestar.plugins import InitPluginProtocol

from litestar_chains.config import ChainsSettings
from litestar_chains.core.protocols import StorageService  # noqa: TC001 - needed for DI
from litestar_chains.engine.executor import WorkflowExecutor
from litestar_chains.engine.history import ExecutionHistory
from litestar_chains.engine.model_cards import ModelCardService
from litestar_chains.engine.registry import WorkflowRegistry
from litestar_chains.exceptions import ChainsError
from litestar_chains.llm.router import LLMRouter
from litestar_chains.storage.memory import MemoryStorage

if TYPE_CHECKING:
    from litestar.config.app import AppConfig

__all__ = ["ChainsPlugin", "ChainsPluginConfig"]

logger = logging.getLogger(__name__)


@dataclass
class ChainsPluginConfig:
    """Configuration for the ChainsPlugin.

    Attributes:
        settings: Optional settings. If not provided, they are read from the
            environment.
        storage: Optional pre-configured storage. If not provided, an
            in-memory store using ``settings.storage_prefix`` is created.
        llm_router: Optional pre-configured LLMRouter. If not provided, one
            is built from the settings.
        dependency_key_storage: The key used for dependency injection of the
            storage. Defaults to "chains_storage".
        dependency_key_registry: The key used for dependency injection of the
            WorkflowRegistry. Defaults to "workflow_registry".
        dependency_key_executor: The key used for dependency injection of the
            WorkflowExecutor. Defaults to "workflow_executor".
        dependency_key_model_cards: The key used for dependency injection of
            the ModelCardService. Defaults to "model_card_service".
        dependency_key_llm_router: The key used for dependency injection of
            the LLMRouter. Defaults to "llm_router".
        enable_api: Whether to enable the REST API endpoints. Defaults to True.
        api_path_prefix: URL path prefix for all chains API endpoints.
            Defaults to "/chains".
        api_guards: List of Litestar guards to apply to all chains API endpoints.
        api_tags: OpenAPI tags to apply to chains API endpoints.
        include_api_in_schema: Whether to include API endpoints in OpenAPI schema.
            Defaults to True.
    """

    settings: ChainsSettings | None = None
    storage: StorageService | None = None
    llm_router: LLMRouter | None = None
    dependency_key_storage: str = "chains_storage"
    dependency_key_registry: str = "workflow_registry"
    dependency_key_executor: str = "workflow_executor"
    dependency_key_model_cards: str = "model_card_service"
    dependency_key_llm_router: str = "llm_router"
    enable_api: bool = True
    api_path_prefix: str = "/chains"
    api_guards: list[Any] = field(default_factory=list)
    api_tags: list[str] = field(default_factory=lambda: ["Chains"])
    include_api_in_schema: bool = True


class ChainsPlugin(InitPluginProtocol):
    """Litestar plugin for LLM workflow chains.

    This plugin wires the storage, the LLM router, the workflow registry, the
    model card service and the executor into a Litestar application, loads
    persisted workflows and run history on startup, and closes provider
    clients on shutdown.

    Example:
        Basic usage::

            from litestar import Litestar
            from litestar_chains import ChainsPlugin, ChainsPluginConfig

            app = Litestar(plugins=[ChainsPlugin()])

        Using in a route handler::

            from litestar import post
            from litestar_chains import WorkflowExecutor


            @post("/summarize/{workflow_id:str}")
            async def summarize(workflow_id: str, data: str, workflow_executor: WorkflowExecutor) -> str:
                result = await workflow_executor.execute_workflow(workflow_id, data)
                return result.final_output
    """

    __slots__ = ("_config", "_executor", "_llm_router", "_model_cards", "_registry", "_settings", "_storage")

    def __init__(self, config: ChainsPluginConfig | None = None) -> None:
        """Initialize the plugin.

        Args:
            config: Optional configuration for the plugin.
        """
        self._config = config or ChainsPluginConfig()
        self._settings: ChainsSettings | None = None
        self._storage: StorageService | None = None
        self._llm_router: LLMRouter | None = None
        self._registry: WorkflowRegistry | None = None
        self._model_cards: ModelCardService | None = None
        self._executor: WorkflowExecutor | None = None

    @property
    def registry(self) -> WorkflowRegistry:
        """Get the workflow registry.

        Raises:
            RuntimeError: If accessed before plugin initialization.
        """
        if self._registry is None:
            msg = "ChainsPlugin has not been initialized. Access registry after app startup."
            raise RuntimeError(msg)
        return self._registry

    @property
    def executor(self) -> WorkflowExecutor:
        """Get the workflow executor.

        Raises:
            RuntimeError: If accessed before plugin initialization.
        """
        if self._executor is None:
            msg = "ChainsPlugin has not been initialized. Access executor after app startup."
            raise RuntimeError(msg)
        return self._executor

    @property
    def model_cards(self) -> ModelCardService:
        """Get the model card service.

        Raises:
            RuntimeError: If accessed before plugin initialization.
        """
        if self._model_cards is None:
            msg = "ChainsPlugin has not been initialized. Access model cards after app startup."
            raise RuntimeError(msg)
        return self._model_cards

    async def _on_startup(self) -> None:
        await self.registry.load()
        await self.executor.history.load()
        logger.info("Chains state loaded: %d workflows", len(self.registry.list_workflows()))

    async def _on_shutdown(self) -> None:
        if self._llm_router is not None:
            await self._llm_router.aclose()

    def on_app_init(self, app_config: AppConfig) -> AppConfig:
        """Initialize the plugin when the Litestar app starts.

        This method:
        1. Resolves settings, storage and the LLM router
        2. Creates the registry, history, executor and model card service
        3. Adds dependency providers and lifecycle hooks to the app config
        4. Optionally registers REST API controllers if enable_api=True

        Args:
            app_config: The Litestar application configuration.

        Returns:
            The modified application configuration.
        """
        settings = self._settings = self._config.settings or ChainsSettings()
        storage = self._storage = (
            self._config.storage if self._config.storage is not None else MemoryStorage(prefix=settings.storage_prefix)
        )
        llm_router = self._llm_router = self._config.llm_router or LLMRouter.from_settings(settings)

        self._registry = WorkflowRegistry(storage=storage)
        self._model_cards = ModelCardService(storage=storage)
        self._executor = WorkflowExecutor(
            registry=self._registry,
            llm_service=llm_router,
            history=ExecutionHistory(storage=storage, limit=settings.history_limit),
        )

        # Create dependency providers
        def provide_storage() -> StorageService:
            return storage

        def provide_registry() -> WorkflowRegistry:
            return self._registry  # type: ignore[return-value]

        def provide_executor() -> WorkflowExecutor:
            return self._executor  # type: ignore[return-value]

        def provide_model_cards() -> ModelCardService:
            return self._model_cards  # type: ignore[return-value]

        def provide_llm_router() -> LLMRouter:
            return llm_router

        # Add dependencies to app config
        providers = {
            self._config.dependency_key_storage: provide_storage,
            self._config.dependency_key_registry: provide_registry,
            self._config.dependency_key_executor: provide_executor,
            self._config.dependency_key_model_cards: provide_model_cards,
            self._config.dependency_key_llm_router: provide_llm_router,
        }
        for key, provider in providers.items():
            app_config.dependencies[key] = Provide(provider, sync_to_thread=False)

        app_config.on_startup.append(self._on_startup)
        app_config.on_shutdown.append(self._on_shutdown)

        # Register REST API controllers if enabled
        if self._config.enable_api:
            from litestar import Router

            from litestar_chains.web.controllers import (
                ExecutionController,
                ModelCardController,
                ProviderController,
                WorkflowController,
            )
            from litestar_chains.web.exceptions import chains_error_handler

            chains_router = Router(
                path=self._config.api_path_prefix,
                route_handlers=[
                    WorkflowController,
                    ExecutionController,
                    ModelCardController,
                    ProviderController,
                ],
                guards=self._config.api_guards,
                tags=self._config.api_tags,
                include_in_schema=self._config.include_api_in_schema,
            )
            app_config.route_handlers.append(chains_router)
            app_config.exception_handlers[ChainsError] = chains_error_handler  # type: ignore[assignment]

        return app_config
