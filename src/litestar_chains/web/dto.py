"""Data Transfer Objects for the chains web API.

This module defines DTOs for request bodies and for the responses that are
not plain serialized records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from litestar_chains.core.types import ConnectionKind, LLMProvider

__all__ = [
    "AddModelCardDTO",
    "ConnectionValidationDTO",
    "CreateConnectionDTO",
    "CreateModelCardDTO",
    "CreateWorkflowDTO",
    "ExecuteWorkflowDTO",
    "ExecutionOrderDTO",
    "ExecutionStatusDTO",
    "GraphDTO",
    "ProviderDTO",
    "UpdateModelCardDTO",
    "UpdateWorkflowDTO",
]


@dataclass
class CreateWorkflowDTO:
    """DTO for creating a workflow.

    Attributes:
        name: Display name.
        description: Human-readable description.
    """

    name: str
    description: str = ""


@dataclass
class UpdateWorkflowDTO:
    """DTO for renaming or re-describing a workflow. ``None`` keeps a field."""

    name: str | None = None
    description: str | None = None


@dataclass
class AddModelCardDTO:
    """DTO for adding a stored model card to a workflow.

    Attributes:
        model_card_id: Id of a card in the model card collection. The workflow
            receives a snapshot of it.
    """

    model_card_id: str


@dataclass
class CreateConnectionDTO:
    """DTO for connecting two model cards of a workflow.

    Attributes:
        source_id: Id of the card producing output.
        target_id: Id of the card consuming it.
        kind: Connection kind. Anything but ``model-to-model`` is rejected
            by validation with a reason.
    """

    source_id: str
    target_id: str
    kind: str = ConnectionKind.MODEL_TO_MODEL.value


@dataclass
class ConnectionValidationDTO:
    """DTO for the outcome of a connection validation."""

    valid: bool
    reason: str | None = None


@dataclass
class ExecutionOrderDTO:
    """DTO for a workflow's resolved execution order.

    Attributes:
        workflow_id: The workflow.
        order: Model card ids in the order they run.
    """

    workflow_id: str
    order: list[str]


@dataclass
class ExecuteWorkflowDTO:
    """DTO for running a workflow.

    Attributes:
        input: Text fed to the first model card.
    """

    input: str


@dataclass
class ExecutionStatusDTO:
    """DTO for the executor's state.

    Attributes:
        is_executing: Whether any run is in flight.
        history_size: Number of runs kept in history.
    """

    is_executing: bool
    history_size: int


@dataclass
class GraphDTO:
    """DTO for workflow graph visualization.

    Attributes:
        mermaid_source: MermaidJS graph definition.
        nodes: List of node definitions.
        edges: List of edge definitions.
    """

    mermaid_source: str
    nodes: list[dict[str, Any]]
    edges: list[dict[str, Any]]


@dataclass
class CreateModelCardDTO:
    """DTO for creating a model card.

    ``parameters`` entries use the stored parameter layout: ``id``, ``name``,
    ``type``, ``value`` and, for select parameters, ``options``.
    """

    name: str
    description: str = ""
    system_prompt: str = ""
    parameters: list[dict[str, Any]] = field(default_factory=list)
    llm_provider: LLMProvider = LLMProvider.OPENROUTER
    llm_model: str = ""
    capabilities: dict[str, Any] | None = None
    mcp_servers: list[str] = field(default_factory=list)
    settings: dict[str, Any] = field(default_factory=dict)


@dataclass
class UpdateModelCardDTO:
    """DTO for a partial model card update. ``None`` keeps a field."""

    name: str | None = None
    description: str | None = None
    system_prompt: str | None = None
    parameters: list[dict[str, Any]] | None = None
    llm_provider: LLMProvider | None = None
    llm_model: str | None = None
    capabilities: dict[str, Any] | None = None
    mcp_servers: list[str] | None = None
    settings: dict[str, Any] | None = None


@dataclass
class ProviderDTO:
    """DTO for a registered LLM provider.

    Attributes:
        provider: Provider name.
        available: Whether the provider answered an availability check.
        active: Whether requests naming no provider go here.
    """

    provider: LLMProvider
    available: bool
    active: bool
