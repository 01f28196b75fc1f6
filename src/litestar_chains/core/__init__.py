"""Core domain module for litestar-chains.

This module exports the fundamental building blocks: types, data models and
the collaborator protocols.
"""

from __future__ import annotations

from litestar_chains.core.models import (
    BooleanParameter,
    Connection,
    ExecutionResult,
    LLMRequest,
    LLMResponse,
    ModelCapabilities,
    ModelCard,
    NumberParameter,
    Parameter,
    SelectParameter,
    StringParameter,
    TokenUsage,
    ToolResult,
    UsageStatistics,
    Workflow,
    WorkflowExecutionResult,
    parameters_to_dict,
)
from litestar_chains.core.protocols import LLMService, StorageService
from litestar_chains.core.types import ConnectionKind, LLMProvider, ParameterType

__all__ = [
    "BooleanParameter",
    "Connection",
    "ConnectionKind",
    "ExecutionResult",
    "LLMProvider",
    "LLMRequest",
    "LLMResponse",
    "LLMService",
    "ModelCapabilities",
    "ModelCard",
    "NumberParameter",
    "Parameter",
    "ParameterType",
    "SelectParameter",
    "StorageService",
    "StringParameter",
    "TokenUsage",
    "ToolResult",
    "UsageStatistics",
    "Workflow",
    "WorkflowExecutionResult",
    "parameters_to_dict",
]
