"""Web API module for litestar-chains.

This module provides REST API controllers, DTOs and graph utilities for
managing and running workflows over HTTP. The controllers are mounted by
:class:`~litestar_chains.plugin.ChainsPlugin` when ``enable_api`` is set.

Example:
    Basic usage with ChainsPlugin::

        from litestar import Litestar
        from litestar_chains import ChainsPlugin, ChainsPluginConfig

        app = Litestar(
            plugins=[
                ChainsPlugin(
                    config=ChainsPluginConfig(
                        enable_api=True,  # Default
                        api_path_prefix="/api/chains",
                    )
                ),
            ],
        )
"""

from __future__ import annotations

from litestar_chains.web.controllers import (
    ExecutionController,
    ModelCardController,
    ProviderController,
    WorkflowController,
)
from litestar_chains.web.dto import (
    AddModelCardDTO,
    ConnectionValidationDTO,
    CreateConnectionDTO,
    CreateModelCardDTO,
    CreateWorkflowDTO,
    ExecuteWorkflowDTO,
    ExecutionOrderDTO,
    ExecutionStatusDTO,
    GraphDTO,
    ProviderDTO,
    UpdateModelCardDTO,
    UpdateWorkflowDTO,
)
from litestar_chains.web.exceptions import chains_error_handler
from litestar_chains.web.graph import (
    generate_mermaid_graph,
    generate_mermaid_graph_with_state,
    parse_graph_to_dict,
)

__all__ = [
    "AddModelCardDTO",
    "ConnectionValidationDTO",
    "CreateConnectionDTO",
    "CreateModelCardDTO",
    "CreateWorkflowDTO",
    "ExecuteWorkflowDTO",
    "ExecutionController",
    "ExecutionOrderDTO",
    "ExecutionStatusDTO",
    "GraphDTO",
    "ModelCardController",
    "ProviderController",
    "ProviderDTO",
    "UpdateModelCardDTO",
    "UpdateWorkflowDTO",
    "WorkflowController",
    "chains_error_handler",
    "generate_mermaid_graph",
    "generate_mermaid_graph_with_state",
    "parse_graph_to_dict",
]
