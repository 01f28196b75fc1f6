"""JSON-compatible serialization of persisted records.

Every collection is stored as plain dicts with ISO-8601 timestamp strings.
Loading is tolerant: malformed timestamps become "now", missing lists become
empty and unknown tags degrade instead of failing the whole load.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from litestar_chains.core.models import (
    BooleanParameter,
    Connection,
    ExecutionResult,
    ModelCapabilities,
    ModelCard,
    NumberParameter,
    Parameter,
    SelectParameter,
    StringParameter,
    UsageStatistics,
    Workflow,
    WorkflowExecutionResult,
    utc_now,
)
from litestar_chains.core.types import ConnectionKind, JSONDict, LLMProvider, ParameterType

__all__ = [
    "capabilities_from_dict",
    "connection_from_dict",
    "connection_to_dict",
    "execution_result_from_dict",
    "execution_result_to_dict",
    "model_card_from_dict",
    "model_card_to_dict",
    "parameter_from_dict",
    "parameter_to_dict",
    "parse_datetime_safely",
    "usage_from_dict",
    "usage_to_dict",
    "workflow_execution_result_from_dict",
    "workflow_execution_result_to_dict",
    "workflow_from_dict",
    "workflow_to_dict",
]

logger = logging.getLogger(__name__)

_PARAMETER_CLASSES: dict[ParameterType, type[Parameter]] = {
    ParameterType.STRING: StringParameter,
    ParameterType.NUMBER: NumberParameter,
    ParameterType.BOOLEAN: BooleanParameter,
    ParameterType.SELECT: SelectParameter,
}


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _missing(data: JSONDict, *keys: str) -> list[str]:
    return [key for key in keys if data.get(key) is None]


def _number(data: JSONDict, key: str, cast: type[int] | type[float] = int) -> Any:
    try:
        return cast(data.get(key) or 0)
    except (TypeError, ValueError):
        logger.warning("Invalid %s %r, using 0 instead", key, data.get(key))
        return cast(0)


def parse_datetime_safely(value: Any) -> datetime:
    """Re-hydrate a stored timestamp.

    Accepts ``datetime`` objects and ISO-8601 strings (a trailing ``Z`` is
    accepted). Naive values are taken as UTC. Anything unparseable is replaced
    by the current time.

    Args:
        value: The stored value.

    Returns:
        A timezone-aware datetime.

    Example:
        >>> parse_datetime_safely("2024-01-02T03:04:05.000Z").year
        2024
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Invalid date %r, using current date instead", value)
            return utc_now()
    else:
        logger.warning("Invalid date %r, using current date instead", value)
        return utc_now()

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parameter_to_dict(parameter: Parameter) -> JSONDict:
    """Serialize a parameter, tagging it with its type."""
    data: JSONDict = {
        "id": parameter.id,
        "name": parameter.name,
        "type": str(parameter.parameter_type),
        "value": parameter.value,
        "description": parameter.description,
    }
    if isinstance(parameter, SelectParameter):
        data["options"] = list(parameter.options)
    return data


def parameter_from_dict(data: JSONDict) -> Parameter:
    """Deserialize a parameter; unknown type tags load as string parameters."""
    try:
        parameter_type = ParameterType(data.get("type", ParameterType.STRING))
    except ValueError:
        logger.warning("Unknown parameter type %r on parameter %r", data.get("type"), data.get("name"))
        parameter_type = ParameterType.STRING

    cls = _PARAMETER_CLASSES[parameter_type]
    kwargs: JSONDict = {
        "id": str(data.get("id", data.get("name", ""))),
        "name": str(data.get("name", "")),
        "description": data.get("description"),
    }
    if "value" in data:
        kwargs["value"] = data["value"]
    if cls is SelectParameter:
        kwargs["options"] = [str(option) for option in _as_list(data.get("options"))]
    return cls(**kwargs)


def capabilities_from_dict(data: Any) -> ModelCapabilities:
    """Deserialize capability flags; anything but a dict yields the defaults."""
    if not isinstance(data, dict):
        return ModelCapabilities()
    return ModelCapabilities(
        supports_images=bool(data.get("supports_images", False)),
        supports_audio=bool(data.get("supports_audio", False)),
        supports_files=bool(data.get("supports_files", False)),
        supports_tools=bool(data.get("supports_tools", False)),
        supported_tool_types=list(_as_list(data.get("supported_tool_types"))),
    )


def model_card_to_dict(card: ModelCard) -> JSONDict:
    """Serialize a model card."""
    return {
        "id": card.id,
        "name": card.name,
        "description": card.description,
        "system_prompt": card.system_prompt,
        "parameters": [parameter_to_dict(parameter) for parameter in card.parameters],
        "llm_provider": str(card.llm_provider),
        "llm_model": card.llm_model,
        "capabilities": {
            "supports_images": card.capabilities.supports_images,
            "supports_audio": card.capabilities.supports_audio,
            "supports_files": card.capabilities.supports_files,
            "supports_tools": card.capabilities.supports_tools,
            "supported_tool_types": list(card.capabilities.supported_tool_types),
        },
        "mcp_servers": list(card.mcp_servers),
        "settings": dict(card.settings),
        "created_at": card.created_at.isoformat(),
        "updated_at": card.updated_at.isoformat(),
    }


def model_card_from_dict(data: JSONDict) -> ModelCard | None:
    """Deserialize a model card; returns ``None`` when it has no id."""
    if _missing(data, "id"):
        logger.warning("Dropping model card %r without an id", data.get("name"))
        return None

    try:
        provider = LLMProvider(data.get("llm_provider", LLMProvider.OPENROUTER))
    except ValueError:
        logger.warning("Unknown provider %r on model card %r", data.get("llm_provider"), data.get("id"))
        provider = LLMProvider.OPENROUTER

    settings = data.get("settings")
    return ModelCard(
        id=str(data["id"]),
        name=str(data.get("name", "")),
        description=str(data.get("description", "")),
        system_prompt=str(data.get("system_prompt", "")),
        parameters=[parameter_from_dict(p) for p in _as_list(data.get("parameters")) if isinstance(p, dict)],
        llm_provider=provider,
        llm_model=str(data.get("llm_model", "")),
        capabilities=capabilities_from_dict(data.get("capabilities")),
        mcp_servers=[str(server_id) for server_id in _as_list(data.get("mcp_servers"))],
        settings=settings if isinstance(settings, dict) else {},
        created_at=parse_datetime_safely(data.get("created_at")),
        updated_at=parse_datetime_safely(data.get("updated_at")),
    )


def connection_to_dict(connection: Connection) -> JSONDict:
    """Serialize a connection."""
    return {
        "id": connection.id,
        "source_id": connection.source_id,
        "target_id": connection.target_id,
        "kind": str(connection.kind),
    }


def connection_from_dict(data: JSONDict) -> Connection | None:
    """Deserialize a connection; returns ``None`` for unknown kinds or missing endpoints."""
    missing = _missing(data, "id", "source_id", "target_id")
    if missing:
        logger.warning("Dropping connection %r missing %s", data.get("id"), ", ".join(missing))
        return None
    try:
        kind = ConnectionKind(data.get("kind", ConnectionKind.MODEL_TO_MODEL))
    except ValueError:
        logger.warning("Dropping connection %r with unknown kind %r", data.get("id"), data.get("kind"))
        return None
    return Connection(
        id=str(data["id"]),
        source_id=str(data["source_id"]),
        target_id=str(data["target_id"]),
        kind=kind,
    )


def workflow_to_dict(workflow: Workflow) -> JSONDict:
    """Serialize a workflow with its model card snapshots and connections."""
    return {
        "id": workflow.id,
        "name": workflow.name,
        "description": workflow.description,
        "model_cards": [model_card_to_dict(card) for card in workflow.model_cards],
        "connections": [connection_to_dict(connection) for connection in workflow.connections],
        "created_at": workflow.created_at.isoformat(),
        "updated_at": workflow.updated_at.isoformat(),
    }


def workflow_from_dict(data: JSONDict) -> Workflow:
    """Deserialize a workflow.

    Non-list ``model_cards``/``connections`` load as empty lists. Cards
    without an id and connections with unknown kinds or missing endpoints
    are dropped.
    """
    connections = [
        connection
        for connection in (connection_from_dict(c) for c in _as_list(data.get("connections")) if isinstance(c, dict))
        if connection is not None
    ]
    model_cards = [
        card
        for card in (model_card_from_dict(c) for c in _as_list(data.get("model_cards")) if isinstance(c, dict))
        if card is not None
    ]
    return Workflow(
        id=str(data["id"]),
        name=str(data.get("name", "")),
        description=str(data.get("description", "")),
        model_cards=model_cards,
        connections=connections,
        created_at=parse_datetime_safely(data.get("created_at")),
        updated_at=parse_datetime_safely(data.get("updated_at")),
    )


def usage_to_dict(usage: UsageStatistics) -> JSONDict:
    """Serialize usage statistics."""
    return {
        "prompt_tokens": usage.prompt_tokens,
        "completion_tokens": usage.completion_tokens,
        "total_tokens": usage.total_tokens,
        "execution_time": usage.execution_time,
        "tool_calls": usage.tool_calls,
    }


def usage_from_dict(data: Any) -> UsageStatistics:
    """Deserialize usage statistics; missing, null or invalid fields default to zero."""
    if not isinstance(data, dict):
        return UsageStatistics()
    return UsageStatistics(
        prompt_tokens=_number(data, "prompt_tokens"),
        completion_tokens=_number(data, "completion_tokens"),
        total_tokens=_number(data, "total_tokens"),
        execution_time=_number(data, "execution_time", float),
        tool_calls=_number(data, "tool_calls"),
    )


def execution_result_to_dict(result: ExecutionResult) -> JSONDict:
    """Serialize one step result."""
    return {
        "model_id": result.model_id,
        "model_name": result.model_name,
        "input": result.input,
        "output": result.output,
        "usage_statistics": usage_to_dict(result.usage_statistics),
        "timestamp": result.timestamp.isoformat(),
    }


def execution_result_from_dict(data: JSONDict) -> ExecutionResult:
    """Deserialize one step result."""
    return ExecutionResult(
        model_id=str(data.get("model_id", "")),
        model_name=str(data.get("model_name", "")),
        input=str(data.get("input", "")),
        output=str(data.get("output", "")),
        usage_statistics=usage_from_dict(data.get("usage_statistics")),
        timestamp=parse_datetime_safely(data.get("timestamp")),
    )


def workflow_execution_result_to_dict(result: WorkflowExecutionResult) -> JSONDict:
    """Serialize a whole run."""
    return {
        "workflow_id": result.workflow_id,
        "workflow_name": result.workflow_name,
        "results": [execution_result_to_dict(step) for step in result.results],
        "final_output": result.final_output,
        "total_usage_statistics": usage_to_dict(result.total_usage_statistics),
        "start_time": result.start_time.isoformat(),
        "end_time": result.end_time.isoformat(),
    }


def workflow_execution_result_from_dict(data: JSONDict) -> WorkflowExecutionResult:
    """Deserialize a whole run."""
    return WorkflowExecutionResult(
        workflow_id=str(data.get("workflow_id", "")),
        workflow_name=str(data.get("workflow_name", "")),
        results=[execution_result_from_dict(r) for r in _as_list(data.get("results")) if isinstance(r, dict)],
        final_output=str(data.get("final_output", "")),
        total_usage_statistics=usage_from_dict(data.get("total_usage_statistics")),
        start_time=parse_datetime_safely(data.get("start_time")),
        end_time=parse_datetime_safely(data.get("end_time")),
    )
