"""Litestar Chains - sequential LLM workflow chains for Litestar.

This package lets an application compose model cards (an LLM provider, a
model, a system prompt and parameters) into workflows whose connections form a
directed acyclic graph, and run them by feeding each card's output into the
next one.

Key Features:
    - Cycle-safe connection validation with human-readable reasons
    - Topological execution order with a declaration-order fallback
    - Token usage aggregation and a capped run history
    - OpenRouter and Ollama adapters behind one provider router
    - Pluggable key/value persistence (in-memory or SQLAlchemy)
    - REST API through a Litestar plugin

Example:
    >>> from litestar_chains import WorkflowExecutor, WorkflowRegistry
    >>>
    >>> registry = WorkflowRegistry()
    >>> workflow = await registry.create_workflow("Summarize then translate")
    >>> await registry.add_model_card(workflow.id, summarizer)
    >>> await registry.add_model_card(workflow.id, translator)
    >>> await registry.create_connection(workflow.id, summarizer.id, translator.id)
    >>>
    >>> executor = WorkflowExecutor(registry, llm_service=router)
    >>> result = await executor.execute_workflow(workflow.id, article)
"""

from __future__ import annotations

from litestar_chains.__metadata__ import __project__, __version__
from litestar_chains.config import ChainsSettings
from litestar_chains.engine import ModelCardService, WorkflowExecutor, WorkflowRegistry
from litestar_chains.exceptions import (
    ChainsError,
    LLMProviderError,
    ModelCardNotFoundError,
    ProviderNotConfiguredError,
    UnresolvableExecutionOrderError,
    WorkflowNotFoundError,
)
from litestar_chains.plugin import ChainsPlugin, ChainsPluginConfig

__all__ = (
    "ChainsError",
    "ChainsPlugin",
    "ChainsPluginConfig",
    "ChainsSettings",
    "LLMProviderError",
    "ModelCardNotFoundError",
    "ModelCardService",
    "ProviderNotConfiguredError",
    "UnresolvableExecutionOrderError",
    "WorkflowExecutor",
    "WorkflowNotFoundError",
    "WorkflowRegistry",
    "__project__",
    "__version__",
)
