"""Workflow registry for managing workflows and their connections.

This module provides the registry that owns the workflow collection: CRUD
over workflows, model card membership and connections, with every successful
mutation persisted as a full snapshot of the collection.
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING
from uuid import uuid4

from litestar_chains.core.models import Connection, Workflow, utc_now
from litestar_chains.core.serialization import workflow_from_dict, workflow_to_dict
from litestar_chains.core.types import WORKFLOWS_STORAGE_KEY, ConnectionKind
from litestar_chains.engine.validation import ConnectionValidation, validate_connection
from litestar_chains.exceptions import WorkflowNotFoundError

if TYPE_CHECKING:
    from litestar_chains.core.models import ModelCard
    from litestar_chains.core.protocols import StorageService

__all__ = ["WorkflowRegistry"]

logger = logging.getLogger(__name__)


def _admit_connections(workflow: Workflow, connections: list[Connection]) -> None:
    workflow.connections = []
    for connection in connections:
        validation = validate_connection(workflow, connection.source_id, connection.target_id, connection.kind)
        if not validation:
            logger.warning(
                "Dropping connection %s (%s -> %s) from workflow %s: %s",
                connection.id,
                connection.source_id,
                connection.target_id,
                workflow.id,
                validation.reason,
            )
            continue
        workflow.connections.append(connection)


class WorkflowRegistry:
    """Registry storing the workflow collection and the selected workflow.

    Attributes:
        storage: Optional storage the collection is written to.
        _workflows: Workflows keyed by id, in creation order.
        _current_id: Id of the selected workflow.
    """

    def __init__(self, storage: StorageService | None = None) -> None:
        """Initialize an empty workflow registry.

        Args:
            storage: Optional storage for persistence.
        """
        self.storage = storage
        self._workflows: dict[str, Workflow] = {}
        self._current_id: str | None = None

    async def load(self) -> None:
        """Replace the in-memory collection with the persisted one.

        A missing or unreadable collection leaves the registry empty.
        """
        self._workflows = {}
        self._current_id = None

        if self.storage is None:
            return

        try:
            stored = await self.storage.get_item(WORKFLOWS_STORAGE_KEY)
        except Exception:
            logger.exception("Error loading workflows")
            return

        if not isinstance(stored, list):
            logger.debug("No workflows found in storage, initializing with empty collection")
            return

        for item in stored:
            if not isinstance(item, dict) or item.get("id") is None:
                logger.warning("Skipping malformed stored workflow %r", item)
                continue
            workflow = workflow_from_dict(item)
            self._workflows[workflow.id] = workflow

        logger.info("Loaded %d workflows", len(self._workflows))

    async def _persist(self) -> None:
        if self.storage is None:
            return
        try:
            await self.storage.set_item(
                WORKFLOWS_STORAGE_KEY,
                [workflow_to_dict(workflow) for workflow in self._workflows.values()],
            )
        except Exception:
            logger.exception("Error saving workflows")

    @property
    def current_workflow(self) -> Workflow | None:
        """The selected workflow, if any."""
        if self._current_id is None:
            return None
        return self._workflows.get(self._current_id)

    def set_current_workflow(self, workflow_id: str | None) -> None:
        """Select a workflow by id, or clear the selection with ``None``.

        Raises:
            WorkflowNotFoundError: If the id is unknown.
        """
        if workflow_id is not None:
            self.get_workflow(workflow_id)
        self._current_id = workflow_id

    def list_workflows(self) -> list[Workflow]:
        """List all workflows in creation order."""
        return list(self._workflows.values())

    def has_workflow(self, workflow_id: str) -> bool:
        """Check if a workflow exists in the registry."""
        return workflow_id in self._workflows

    def get_workflow(self, workflow_id: str) -> Workflow:
        """Retrieve a workflow by id.

        Raises:
            WorkflowNotFoundError: If the id is unknown.
        """
        if workflow_id not in self._workflows:
            raise WorkflowNotFoundError(workflow_id)
        return self._workflows[workflow_id]

    async def load_workflow(self, workflow_id: str) -> Workflow | None:
        """Select a workflow and return it, or ``None`` if it does not exist."""
        workflow = self._workflows.get(workflow_id)
        if workflow is None:
            logger.info("Workflow not found: %s", workflow_id)
            return None
        self._current_id = workflow_id
        return workflow

    async def create_workflow(self, name: str, description: str = "") -> Workflow:
        """Create an empty workflow and select it.

        Args:
            name: Display name.
            description: Human-readable description.

        Returns:
            The new workflow.
        """
        workflow = Workflow(id=str(uuid4()), name=name, description=description)
        self._workflows[workflow.id] = workflow
        self._current_id = workflow.id
        logger.info("Created workflow %s (%s)", workflow.id, name)
        await self._persist()
        return workflow

    async def update_workflow(
        self,
        workflow_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        model_cards: list[ModelCard] | None = None,
        connections: list[Connection] | None = None,
    ) -> Workflow | None:
        """Update fields of a workflow.

        Fields left as ``None`` are unchanged. Replacing the model cards drops
        connections whose endpoints are gone. Connections supplied here are
        admitted one at a time; any that fails validation against the ones
        admitted before it is dropped with a warning.

        Returns:
            The updated workflow, or ``None`` if it does not exist.
        """
        workflow = self._workflows.get(workflow_id)
        if workflow is None:
            return None

        if name is not None:
            workflow.name = name
        if description is not None:
            workflow.description = description
        if model_cards is not None:
            workflow.model_cards = [copy.deepcopy(card) for card in model_cards]
            if connections is None:
                workflow.connections = [
                    c
                    for c in workflow.connections
                    if workflow.has_model_card(c.source_id) and workflow.has_model_card(c.target_id)
                ]
        if connections is not None:
            _admit_connections(workflow, connections)

        await self._touch(workflow)
        return workflow

    async def delete_workflow(self, workflow_id: str) -> None:
        """Remove a workflow; unknown ids are ignored."""
        if self._workflows.pop(workflow_id, None) is None:
            return
        if self._current_id == workflow_id:
            self._current_id = None
        logger.info("Deleted workflow %s", workflow_id)
        await self._persist()

    async def save_workflow(self, workflow: Workflow) -> Workflow:
        """Store a whole workflow object, replacing any with the same id.

        Its connections are re-admitted through validation like those given
        to :meth:`update_workflow`.
        """
        _admit_connections(workflow, list(workflow.connections))
        self._workflows[workflow.id] = workflow
        await self._touch(workflow)
        return workflow

    async def add_model_card(self, workflow_id: str, model_card: ModelCard) -> Workflow:
        """Add a snapshot of a model card to a workflow.

        The card is deep-copied so later edits of the original do not reach
        the workflow. A card whose id is already present is not added again.

        Raises:
            WorkflowNotFoundError: If the workflow does not exist.
        """
        workflow = self.get_workflow(workflow_id)
        if workflow.has_model_card(model_card.id):
            logger.warning("Model card %s is already part of workflow %s", model_card.id, workflow_id)
            return workflow

        workflow.model_cards.append(copy.deepcopy(model_card))
        await self._touch(workflow)
        return workflow

    async def remove_model_card(self, workflow_id: str, model_card_id: str) -> Workflow:
        """Remove a model card and every connection touching it.

        Raises:
            WorkflowNotFoundError: If the workflow does not exist.
        """
        workflow = self.get_workflow(workflow_id)
        workflow.model_cards = [card for card in workflow.model_cards if card.id != model_card_id]
        workflow.connections = [
            c for c in workflow.connections if c.source_id != model_card_id and c.target_id != model_card_id
        ]
        await self._touch(workflow)
        return workflow

    def validate_connection(
        self,
        workflow_id: str,
        source_id: str,
        target_id: str,
        kind: ConnectionKind | str = ConnectionKind.MODEL_TO_MODEL,
    ) -> ConnectionValidation:
        """Validate a prospective connection without creating it.

        Never raises; an unknown workflow yields a failed validation.
        """
        workflow = self._workflows.get(workflow_id)
        if workflow is None:
            return ConnectionValidation(is_valid=False, reason=f"Workflow '{workflow_id}' not found")
        return validate_connection(workflow, source_id, target_id, kind)

    async def create_connection(
        self,
        workflow_id: str,
        source_id: str,
        target_id: str,
        kind: ConnectionKind | str = ConnectionKind.MODEL_TO_MODEL,
    ) -> Connection | None:
        """Create a validated connection.

        Returns:
            The new connection, or ``None`` if validation failed.

        Raises:
            WorkflowNotFoundError: If the workflow does not exist.
        """
        workflow = self.get_workflow(workflow_id)
        if not validate_connection(workflow, source_id, target_id, kind):
            return None

        connection = Connection(
            id=str(uuid4()),
            source_id=source_id,
            target_id=target_id,
            kind=ConnectionKind(kind),
        )
        workflow.connections.append(connection)
        logger.debug("Created connection %s -> %s in workflow %s", source_id, target_id, workflow_id)
        await self._touch(workflow)
        return connection

    async def remove_connection(self, workflow_id: str, connection_id: str) -> Workflow:
        """Remove a connection by id.

        Raises:
            WorkflowNotFoundError: If the workflow does not exist.
        """
        workflow = self.get_workflow(workflow_id)
        workflow.connections = [c for c in workflow.connections if c.id != connection_id]
        await self._touch(workflow)
        return workflow

    async def _touch(self, workflow: Workflow) -> None:
        workflow.updated_at = utc_now()
        await self._persist()
