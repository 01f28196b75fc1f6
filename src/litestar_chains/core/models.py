"""Concrete data models for litestar-chains.

This module provides the dataclasses for model cards, workflows, LLM
requests/responses and execution results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, TypeAlias

from litestar_chains.core.types import ConnectionKind, LLMProvider, ParameterType

__all__ = [
    "BooleanParameter",
    "Connection",
    "ExecutionResult",
    "LLMRequest",
    "LLMResponse",
    "ModelCapabilities",
    "ModelCard",
    "NumberParameter",
    "Parameter",
    "SelectParameter",
    "StringParameter",
    "TokenUsage",
    "ToolResult",
    "UsageStatistics",
    "Workflow",
    "WorkflowExecutionResult",
    "parameters_to_dict",
    "utc_now",
]


def utc_now() -> datetime:
    """Return the current timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


@dataclass
class BaseParameter:
    """Fields shared by every model card parameter variant.

    Attributes:
        id: Unique identifier of the parameter within its model card.
        name: Name sent to the provider (e.g. ``temperature``).
        description: Optional help text.
    """

    id: str
    name: str
    description: str | None = None

    parameter_type: ClassVar[ParameterType]


@dataclass
class StringParameter(BaseParameter):
    """Free-form text parameter."""

    value: str = ""

    parameter_type: ClassVar[ParameterType] = ParameterType.STRING


@dataclass
class NumberParameter(BaseParameter):
    """Numeric parameter such as ``temperature`` or ``max_tokens``."""

    value: float = 0

    parameter_type: ClassVar[ParameterType] = ParameterType.NUMBER


@dataclass
class BooleanParameter(BaseParameter):
    """On/off parameter."""

    value: bool = False

    parameter_type: ClassVar[ParameterType] = ParameterType.BOOLEAN


@dataclass
class SelectParameter(BaseParameter):
    """Parameter restricted to an enumerated list of options.

    Attributes:
        value: The selected option.
        options: The allowed values.
    """

    value: str = ""
    options: list[str] = field(default_factory=list)

    parameter_type: ClassVar[ParameterType] = ParameterType.SELECT


Parameter: TypeAlias = StringParameter | NumberParameter | BooleanParameter | SelectParameter
"""Tagged union of all parameter variants."""


def parameters_to_dict(parameters: list[Parameter]) -> dict[str, Any]:
    """Reduce an ordered parameter list to a flat name -> value map.

    Later parameters win when two share a name.

    Args:
        parameters: The model card's parameters.

    Returns:
        Mapping of parameter names to values.

    Example:
        >>> parameters_to_dict([NumberParameter(id="p1", name="temperature", value=0.2)])
        {'temperature': 0.2}
    """
    return {parameter.name: parameter.value for parameter in parameters}


@dataclass
class ModelCapabilities:
    """Capability flags advertised by a model card."""

    supports_images: bool = False
    supports_audio: bool = False
    supports_files: bool = False
    supports_tools: bool = False
    supported_tool_types: list[str] = field(default_factory=list)


@dataclass
class ModelCard:
    """A named LLM configuration.

    Workflows hold copies of model cards, so editing a card in the global
    collection never changes a workflow that already contains it.

    Attributes:
        id: Unique identifier.
        name: Display name.
        description: Human-readable description.
        system_prompt: Text prepended to every prompt sent through this card.
        parameters: Ordered provider parameters.
        llm_provider: Provider the card targets.
        llm_model: Provider-specific model identifier.
        capabilities: Capability flags.
        mcp_servers: Ids of associated tool servers.
        settings: Free-form settings object.
        created_at: Creation timestamp.
        updated_at: Last modification timestamp.
    """

    id: str
    name: str
    description: str = ""
    system_prompt: str = ""
    parameters: list[Parameter] = field(default_factory=list)
    llm_provider: LLMProvider = LLMProvider.OPENROUTER
    llm_model: str = ""
    capabilities: ModelCapabilities = field(default_factory=ModelCapabilities)
    mcp_servers: list[str] = field(default_factory=list)
    settings: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)


@dataclass
class Connection:
    """A directed edge between two model cards of one workflow.

    Attributes:
        id: Unique identifier.
        source_id: Id of the model card producing output.
        target_id: Id of the model card consuming it.
        kind: The connection kind. Only ``model-to-model`` is executable.
    """

    id: str
    source_id: str
    target_id: str
    kind: ConnectionKind = ConnectionKind.MODEL_TO_MODEL


@dataclass
class Workflow:
    """An ordered collection of model card snapshots plus connections.

    Attributes:
        id: Unique identifier.
        name: Display name.
        description: Human-readable description.
        model_cards: Model card snapshots in declaration order.
        connections: Directed connections between the snapshots.
        created_at: Creation timestamp.
        updated_at: Last modification timestamp.
    """

    id: str
    name: str
    description: str = ""
    model_cards: list[ModelCard] = field(default_factory=list)
    connections: list[Connection] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def get_model_card(self, model_card_id: str) -> ModelCard | None:
        """Return the snapshot with the given id, if present."""
        for card in self.model_cards:
            if card.id == model_card_id:
                return card
        return None

    def has_model_card(self, model_card_id: str) -> bool:
        """Check whether a snapshot with the given id is part of the workflow."""
        return self.get_model_card(model_card_id) is not None


@dataclass
class UsageStatistics:
    """Token and timing statistics for a step or a whole run.

    Attributes:
        prompt_tokens: Tokens sent to the provider.
        completion_tokens: Tokens generated by the provider.
        total_tokens: Always ``prompt_tokens + completion_tokens`` when built
            through :meth:`from_tokens`.
        execution_time: Wall-clock duration in milliseconds.
        tool_calls: Number of tool results returned.
    """

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    execution_time: float = 0
    tool_calls: int = 0

    @classmethod
    def from_tokens(
        cls,
        prompt_tokens: int,
        completion_tokens: int,
        *,
        execution_time: float = 0,
        tool_calls: int = 0,
    ) -> UsageStatistics:
        """Build statistics with ``total_tokens`` derived from its parts.

        Args:
            prompt_tokens: Tokens sent to the provider.
            completion_tokens: Tokens generated by the provider.
            execution_time: Duration in milliseconds.
            tool_calls: Number of tool results.

        Returns:
            A new UsageStatistics instance.
        """
        return cls(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
            execution_time=execution_time,
            tool_calls=tool_calls,
        )

    def add(self, other: UsageStatistics) -> None:
        """Accumulate token and tool counts from ``other`` in place.

        ``execution_time`` is not summed; run totals carry wall-clock time.
        """
        self.prompt_tokens += other.prompt_tokens
        self.completion_tokens += other.completion_tokens
        self.total_tokens += other.total_tokens
        self.tool_calls += other.tool_calls


@dataclass
class ToolResult:
    """A tool call result returned alongside an LLM response."""

    tool_id: str
    result: Any = None
    error: str | None = None
    mcp_server_id: str | None = None


@dataclass
class TokenUsage:
    """Token usage reported by a provider for one request."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class LLMRequest:
    """Provider-agnostic chat request.

    Attributes:
        provider: Target provider. ``None`` lets a router pick its default.
        model: Provider-specific model identifier.
        prompt: Full user prompt.
        parameters: Flat provider parameters.
        tools: Optional tool descriptions (``name``, ``description``,
            ``configuration``).
    """

    provider: LLMProvider | None
    model: str
    prompt: str
    parameters: dict[str, Any] = field(default_factory=dict)
    tools: list[dict[str, Any]] | None = None


@dataclass
class LLMResponse:
    """Provider-agnostic chat response."""

    content: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    id: str = ""
    tool_results: list[ToolResult] | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class ExecutionResult:
    """One model card's contribution to a workflow run.

    Attributes:
        model_id: Id of the executed model card.
        model_name: Display name of the executed model card.
        input: The full prompt sent, system prompt included.
        output: The response content.
        usage_statistics: Usage for this step.
        timestamp: When the step finished.
    """

    model_id: str
    model_name: str
    input: str
    output: str
    usage_statistics: UsageStatistics
    timestamp: datetime = field(default_factory=utc_now)


@dataclass
class WorkflowExecutionResult:
    """The full record of one workflow run.

    Attributes:
        workflow_id: Id of the executed workflow.
        workflow_name: Name of the executed workflow.
        results: Step results in execution order.
        final_output: Output of the last executed step.
        total_usage_statistics: Sum of step usage; ``execution_time`` is the
            wall-clock duration of the whole run.
        start_time: When the run started.
        end_time: When the run finished.
    """

    workflow_id: str
    workflow_name: str
    start_time: datetime
    end_time: datetime
    results: list[ExecutionResult] = field(default_factory=list)
    final_output: str = ""
    total_usage_statistics: UsageStatistics = field(default_factory=UsageStatistics)
