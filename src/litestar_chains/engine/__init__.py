"""Workflow engine.

This module provides the connection graph, connection validation, the
workflow and model card registries, and the sequential executor.
"""

from __future__ import annotations

from litestar_chains.engine.executor import WorkflowExecutor, build_request
from litestar_chains.engine.graph import ConnectionGraph, determine_execution_order, would_create_cycle
from litestar_chains.engine.history import ExecutionHistory
from litestar_chains.engine.model_cards import ModelCardService
from litestar_chains.engine.registry import WorkflowRegistry
from litestar_chains.engine.validation import ConnectionValidation, validate_connection

__all__ = [
    "ConnectionGraph",
    "ConnectionValidation",
    "ExecutionHistory",
    "ModelCardService",
    "WorkflowExecutor",
    "WorkflowRegistry",
    "build_request",
    "determine_execution_order",
    "validate_connection",
    "would_create_cycle",
]
