"""REST API controllers for chains management.

This module provides four controller classes:
- WorkflowController: Manage workflows, their model cards and connections, and run them
- ExecutionController: Inspect the current run, its steps and the run history
- ModelCardController: Manage the model card collection
- ProviderController: List LLM providers and their models
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, ClassVar

from litestar import Controller, delete, get, patch, post
from litestar.exceptions import HTTPException, NotFoundException
from litestar.params import Parameter
from litestar.status_codes import HTTP_200_OK, HTTP_422_UNPROCESSABLE_ENTITY

from litestar_chains.core.serialization import (
    capabilities_from_dict,
    connection_to_dict,
    execution_result_to_dict,
    model_card_to_dict,
    parameter_from_dict,
    workflow_execution_result_to_dict,
    workflow_to_dict,
)
from litestar_chains.core.types import LLMProvider
from litestar_chains.engine.executor import WorkflowExecutor  # noqa: TC001 - needed for DI
from litestar_chains.engine.graph import determine_execution_order
from litestar_chains.engine.model_cards import ModelCardService  # noqa: TC001 - needed for DI
from litestar_chains.engine.registry import WorkflowRegistry  # noqa: TC001 - needed for DI
from litestar_chains.exceptions import ModelCardNotFoundError
from litestar_chains.llm.router import LLMRouter  # noqa: TC001 - needed for DI
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
from litestar_chains.web.graph import (
    generate_mermaid_graph,
    generate_mermaid_graph_with_state,
    parse_graph_to_dict,
)

__all__ = [
    "ExecutionController",
    "ModelCardController",
    "ProviderController",
    "WorkflowController",
]


def _model_card_attributes(data: CreateModelCardDTO | UpdateModelCardDTO) -> dict[str, Any]:
    attributes = {key: value for key, value in asdict(data).items() if value is not None}
    if "parameters" in attributes:
        attributes["parameters"] = [parameter_from_dict(p) for p in attributes["parameters"]]
    if "capabilities" in attributes:
        attributes["capabilities"] = capabilities_from_dict(attributes["capabilities"])
    return attributes


class WorkflowController(Controller):
    """API controller for workflows.

    Provides endpoints for workflow CRUD, editing the model cards and
    connections of a workflow, inspecting its graph and running it.

    Tags: Workflows
    """

    path = "/workflows"
    tags: ClassVar[list[str]] = ["Workflows"]

    @get("/")
    async def list_workflows(self, workflow_registry: WorkflowRegistry) -> list[dict[str, Any]]:
        """List all workflows in creation order."""
        return [workflow_to_dict(workflow) for workflow in workflow_registry.list_workflows()]

    @post("/")
    async def create_workflow(self, data: CreateWorkflowDTO, workflow_registry: WorkflowRegistry) -> dict[str, Any]:
        """Create an empty workflow and select it as the current one.

        Args:
            data: Name and description of the workflow.
            workflow_registry: Injected workflow registry.

        Returns:
            The created workflow.
        """
        workflow = await workflow_registry.create_workflow(data.name, data.description)
        return workflow_to_dict(workflow)

    @get("/current")
    async def get_current_workflow(self, workflow_registry: WorkflowRegistry) -> dict[str, Any]:
        """Get the selected workflow.

        Raises:
            NotFoundException: If no workflow is selected.
        """
        workflow = workflow_registry.current_workflow
        if workflow is None:
            raise NotFoundException(detail="No workflow is selected")
        return workflow_to_dict(workflow)

    @get("/{workflow_id:str}")
    async def get_workflow(self, workflow_id: str, workflow_registry: WorkflowRegistry) -> dict[str, Any]:
        """Get a workflow by id."""
        return workflow_to_dict(workflow_registry.get_workflow(workflow_id))

    @patch("/{workflow_id:str}")
    async def update_workflow(
        self,
        workflow_id: str,
        data: UpdateWorkflowDTO,
        workflow_registry: WorkflowRegistry,
    ) -> dict[str, Any]:
        """Rename or re-describe a workflow.

        Raises:
            NotFoundException: If the workflow does not exist.
        """
        workflow = await workflow_registry.update_workflow(
            workflow_id,
            name=data.name,
            description=data.description,
        )
        if workflow is None:
            raise NotFoundException(detail=f"Workflow '{workflow_id}' not found")
        return workflow_to_dict(workflow)

    @delete("/{workflow_id:str}")
    async def delete_workflow(self, workflow_id: str, workflow_registry: WorkflowRegistry) -> None:
        """Delete a workflow. Unknown ids are ignored."""
        await workflow_registry.delete_workflow(workflow_id)

    @post("/{workflow_id:str}/select", status_code=HTTP_200_OK)
    async def select_workflow(self, workflow_id: str, workflow_registry: WorkflowRegistry) -> dict[str, Any]:
        """Make a workflow the current one.

        Raises:
            NotFoundException: If the workflow does not exist.
        """
        workflow = await workflow_registry.load_workflow(workflow_id)
        if workflow is None:
            raise NotFoundException(detail=f"Workflow '{workflow_id}' not found")
        return workflow_to_dict(workflow)

    @post("/{workflow_id:str}/model-cards")
    async def add_model_card(
        self,
        workflow_id: str,
        data: AddModelCardDTO,
        workflow_registry: WorkflowRegistry,
        model_card_service: ModelCardService,
    ) -> dict[str, Any]:
        """Add a snapshot of a stored model card to a workflow.

        Args:
            workflow_id: The workflow.
            data: Id of the stored model card.
            workflow_registry: Injected workflow registry.
            model_card_service: Injected model card service.

        Returns:
            The updated workflow.

        Raises:
            ModelCardNotFoundError: If the model card does not exist.
        """
        model_card = await model_card_service.get_model_card(data.model_card_id)
        if model_card is None:
            raise ModelCardNotFoundError(data.model_card_id)
        workflow = await workflow_registry.add_model_card(workflow_id, model_card)
        return workflow_to_dict(workflow)

    @delete("/{workflow_id:str}/model-cards/{model_card_id:str}", status_code=HTTP_200_OK)
    async def remove_model_card(
        self,
        workflow_id: str,
        model_card_id: str,
        workflow_registry: WorkflowRegistry,
    ) -> dict[str, Any]:
        """Remove a model card and its connections from a workflow."""
        workflow = await workflow_registry.remove_model_card(workflow_id, model_card_id)
        return workflow_to_dict(workflow)

    @post("/{workflow_id:str}/connections")
    async def create_connection(
        self,
        workflow_id: str,
        data: CreateConnectionDTO,
        workflow_registry: WorkflowRegistry,
    ) -> dict[str, Any]:
        """Connect two model cards of a workflow.

        Args:
            workflow_id: The workflow.
            data: Source, target and kind of the connection.
            workflow_registry: Injected workflow registry.

        Returns:
            The created connection.

        Raises:
            HTTPException: 422 with the rejection reason if the connection is
                not valid.
        """
        workflow_registry.get_workflow(workflow_id)
        validation = workflow_registry.validate_connection(workflow_id, data.source_id, data.target_id, data.kind)
        if not validation:
            raise HTTPException(status_code=HTTP_422_UNPROCESSABLE_ENTITY, detail=validation.reason)

        connection = await workflow_registry.create_connection(workflow_id, data.source_id, data.target_id, data.kind)
        if connection is None:
            raise HTTPException(status_code=HTTP_422_UNPROCESSABLE_ENTITY, detail="Connection rejected")
        return connection_to_dict(connection)

    @delete("/{workflow_id:str}/connections/{connection_id:str}", status_code=HTTP_200_OK)
    async def remove_connection(
        self,
        workflow_id: str,
        connection_id: str,
        workflow_registry: WorkflowRegistry,
    ) -> dict[str, Any]:
        """Remove a connection from a workflow."""
        workflow = await workflow_registry.remove_connection(workflow_id, connection_id)
        return workflow_to_dict(workflow)

    @post("/{workflow_id:str}/connections/validate", status_code=HTTP_200_OK)
    async def validate_connection(
        self,
        workflow_id: str,
        data: CreateConnectionDTO,
        workflow_registry: WorkflowRegistry,
    ) -> ConnectionValidationDTO:
        """Check whether a connection could be created, without creating it."""
        validation = workflow_registry.validate_connection(workflow_id, data.source_id, data.target_id, data.kind)
        return ConnectionValidationDTO(valid=validation.is_valid, reason=validation.reason)

    @get("/{workflow_id:str}/execution-order")
    async def get_execution_order(self, workflow_id: str, workflow_registry: WorkflowRegistry) -> ExecutionOrderDTO:
        """Get the order in which the workflow's model cards would run."""
        workflow = workflow_registry.get_workflow(workflow_id)
        return ExecutionOrderDTO(workflow_id=workflow.id, order=determine_execution_order(workflow))

    @get("/{workflow_id:str}/graph")
    async def get_workflow_graph(
        self,
        workflow_id: str,
        workflow_registry: WorkflowRegistry,
        workflow_executor: WorkflowExecutor,
        graph_format: str = Parameter(
            default="mermaid",
            description="Graph format: 'mermaid' or 'json'",
        ),
    ) -> GraphDTO:
        """Get workflow graph visualization.

        When the current run belongs to this workflow, its executed model
        cards are highlighted in the Mermaid source.

        Args:
            workflow_id: The workflow.
            workflow_registry: Injected workflow registry.
            workflow_executor: Injected workflow executor.
            graph_format: Graph format ('mermaid' or 'json').

        Returns:
            Graph DTO with visualization data.

        Raises:
            NotFoundException: If the format is unknown.
        """
        workflow = workflow_registry.get_workflow(workflow_id)
        graph_dict = parse_graph_to_dict(workflow)

        if graph_format == "mermaid":
            current = workflow_executor.current_execution_result
            if current is not None and current.workflow_id == workflow.id:
                mermaid_source = generate_mermaid_graph_with_state(
                    workflow,
                    completed_steps=[step.model_id for step in current.results],
                )
            else:
                mermaid_source = generate_mermaid_graph(workflow)
            return GraphDTO(mermaid_source=mermaid_source, nodes=graph_dict["nodes"], edges=graph_dict["edges"])
        if graph_format == "json":
            return GraphDTO(mermaid_source="", nodes=graph_dict["nodes"], edges=graph_dict["edges"])

        raise NotFoundException(detail=f"Unknown format: {graph_format}")

    @post("/{workflow_id:str}/execute", status_code=HTTP_200_OK)
    async def execute_workflow(
        self,
        workflow_id: str,
        data: ExecuteWorkflowDTO,
        workflow_executor: WorkflowExecutor,
    ) -> dict[str, Any]:
        """Run a workflow and wait for its result.

        Args:
            workflow_id: The workflow to run.
            data: The user input.
            workflow_executor: Injected workflow executor.

        Returns:
            The finished run with every step's result.
        """
        result = await workflow_executor.execute_workflow(workflow_id, data.input)
        return workflow_execution_result_to_dict(result)


class ExecutionController(Controller):
    """API controller for workflow runs.

    Tags: Executions
    """

    path = "/executions"
    tags: ClassVar[list[str]] = ["Executions"]

    @get("/current")
    async def get_current_execution(self, workflow_executor: WorkflowExecutor) -> dict[str, Any]:
        """Get the most recently finished run.

        Raises:
            NotFoundException: If nothing has run yet.
        """
        result = workflow_executor.current_execution_result
        if result is None:
            raise NotFoundException(detail="No workflow has been executed yet")
        return workflow_execution_result_to_dict(result)

    @get("/current/steps")
    async def get_intermediate_results(self, workflow_executor: WorkflowExecutor) -> list[dict[str, Any]]:
        """Get the step results of the most recent run, or an empty list."""
        return [execution_result_to_dict(step) for step in workflow_executor.get_intermediate_results()]

    @get("/history")
    async def get_history(
        self,
        workflow_executor: WorkflowExecutor,
        workflow_id: str | None = Parameter(
            default=None,
            description="Only return runs of this workflow",
        ),
    ) -> list[dict[str, Any]]:
        """List past runs, newest first."""
        entries = workflow_executor.history.entries
        if workflow_id is not None:
            entries = [entry for entry in entries if entry.workflow_id == workflow_id]
        return [workflow_execution_result_to_dict(entry) for entry in entries]

    @delete("/history")
    async def clear_history(self, workflow_executor: WorkflowExecutor) -> None:
        """Forget every past run."""
        await workflow_executor.history.clear()

    @get("/status")
    async def get_status(self, workflow_executor: WorkflowExecutor) -> ExecutionStatusDTO:
        """Get whether a run is in flight."""
        return ExecutionStatusDTO(
            is_executing=workflow_executor.is_executing,
            history_size=len(workflow_executor.history),
        )


class ModelCardController(Controller):
    """API controller for the model card collection.

    Editing a card here never changes the snapshots held by workflows.

    Tags: Model Cards
    """

    path = "/model-cards"
    tags: ClassVar[list[str]] = ["Model Cards"]

    @get("/")
    async def list_model_cards(self, model_card_service: ModelCardService) -> list[dict[str, Any]]:
        """List all model cards."""
        return [model_card_to_dict(card) for card in await model_card_service.list_model_cards()]

    @post("/")
    async def create_model_card(
        self,
        data: CreateModelCardDTO,
        model_card_service: ModelCardService,
    ) -> dict[str, Any]:
        """Create a model card."""
        card = await model_card_service.create_model_card(**_model_card_attributes(data))
        return model_card_to_dict(card)

    @get("/{model_card_id:str}")
    async def get_model_card(self, model_card_id: str, model_card_service: ModelCardService) -> dict[str, Any]:
        """Get a model card by id.

        Raises:
            ModelCardNotFoundError: If the card does not exist.
        """
        card = await model_card_service.get_model_card(model_card_id)
        if card is None:
            raise ModelCardNotFoundError(model_card_id)
        return model_card_to_dict(card)

    @patch("/{model_card_id:str}")
    async def update_model_card(
        self,
        model_card_id: str,
        data: UpdateModelCardDTO,
        model_card_service: ModelCardService,
    ) -> dict[str, Any]:
        """Update fields of a model card."""
        card = await model_card_service.update_model_card(model_card_id, **_model_card_attributes(data))
        return model_card_to_dict(card)

    @delete("/{model_card_id:str}")
    async def delete_model_card(self, model_card_id: str, model_card_service: ModelCardService) -> None:
        """Delete a model card. Unknown ids are ignored."""
        await model_card_service.delete_model_card(model_card_id)


class ProviderController(Controller):
    """API controller for LLM providers.

    Tags: Providers
    """

    path = "/providers"
    tags: ClassVar[list[str]] = ["Providers"]

    @get("/")
    async def list_providers(self, llm_router: LLMRouter) -> list[ProviderDTO]:
        """List registered providers with their availability."""
        return [
            ProviderDTO(
                provider=provider,
                available=await llm_router.is_available(provider),
                active=provider == llm_router.active_provider,
            )
            for provider in llm_router.providers
        ]

    @get("/{provider:str}/models")
    async def list_models(self, provider: str, llm_router: LLMRouter) -> list[str]:
        """List the models a provider offers; empty when it cannot be reached.

        Raises:
            NotFoundException: If the provider name is unknown.
        """
        try:
            llm_provider = LLMProvider(provider)
        except ValueError as e:
            raise NotFoundException(detail=f"Unknown provider '{provider}'") from e
        return await llm_router.get_available_models(llm_provider)
