"""Connection graph operations.

This module provides the graph view over a workflow's connections: cycle
detection for prospective connections and topological ordering of model cards
for execution.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

from litestar_chains.core.types import ConnectionKind

if TYPE_CHECKING:
    from collections.abc import Iterable

    from litestar_chains.core.models import Connection, Workflow

__all__ = ["ConnectionGraph", "determine_execution_order", "would_create_cycle"]

logger = logging.getLogger(__name__)


class ConnectionGraph:
    """Directed graph over model card ids built from workflow connections.

    Attributes:
        nodes: Node ids in discovery order.
        _adjacency: Adjacency list mapping a node id to its outgoing connections.
        _reverse_adjacency: Reverse adjacency list for finding predecessors.
    """

    def __init__(
        self,
        connections: Iterable[Connection],
        nodes: Iterable[str] = (),
        kinds: set[ConnectionKind] | None = None,
    ) -> None:
        """Initialize a graph from connections.

        Args:
            connections: The connections forming the edges.
            nodes: Node ids to register first, in order. Connection endpoints
                not listed here are appended as they are discovered.
            kinds: If given, only connections of these kinds become edges.
        """
        self.nodes: list[str] = []
        self._adjacency: dict[str, list[Connection]] = {}
        self._reverse_adjacency: dict[str, list[str]] = {}

        for node in nodes:
            self._add_node(node)

        for connection in connections:
            if kinds is not None and connection.kind not in kinds:
                continue
            self._add_node(connection.source_id)
            self._add_node(connection.target_id)
            self._adjacency[connection.source_id].append(connection)
            self._reverse_adjacency[connection.target_id].append(connection.source_id)

    def _add_node(self, node: str) -> None:
        if node not in self._adjacency:
            self.nodes.append(node)
            self._adjacency[node] = []
            self._reverse_adjacency[node] = []

    @classmethod
    def from_workflow(cls, workflow: Workflow) -> ConnectionGraph:
        """Create the execution graph of a workflow.

        Nodes are the workflow's model cards in declaration order; only
        ``model-to-model`` connections become edges.

        Args:
            workflow: The workflow.

        Returns:
            A ConnectionGraph instance.

        Example:
            >>> graph = ConnectionGraph.from_workflow(my_workflow)
        """
        return cls(
            workflow.connections,
            nodes=[card.id for card in workflow.model_cards],
            kinds={ConnectionKind.MODEL_TO_MODEL},
        )

    def get_next_nodes(self, node: str) -> list[str]:
        """Get the targets of a node's outgoing edges."""
        return [connection.target_id for connection in self._adjacency.get(node, [])]

    def get_previous_nodes(self, node: str) -> list[str]:
        """Get the sources of a node's incoming edges."""
        return self._reverse_adjacency.get(node, [])

    def reaches(self, start: str, goal: str) -> bool:
        """Check whether ``goal`` is reachable from ``start`` along edges.

        Breadth-first search; ``start`` only counts as reaching itself through
        a non-empty path.

        Args:
            start: Node to search from.
            goal: Node to look for.

        Returns:
            True if a path from ``start`` to ``goal`` exists.
        """
        visited = {start}
        queue = deque([start])

        while queue:
            current = queue.popleft()
            for target in self.get_next_nodes(current):
                if target == goal:
                    return True
                if target not in visited:
                    visited.add(target)
                    queue.append(target)

        return False

    def topological_order(self) -> list[str]:
        """Order nodes with Kahn's algorithm.

        Nodes whose in-degree drops to zero at the same time keep discovery
        order. Nodes on a cycle never reach in-degree zero and are left out,
        so a result shorter than :attr:`nodes` means the graph is cyclic.

        Returns:
            Node ids in dependency order.
        """
        in_degree = {node: len(self._reverse_adjacency[node]) for node in self.nodes}
        queue = deque(node for node in self.nodes if in_degree[node] == 0)
        order: list[str] = []

        while queue:
            current = queue.popleft()
            order.append(current)
            for target in self.get_next_nodes(current):
                in_degree[target] -= 1
                if in_degree[target] == 0:
                    queue.append(target)

        return order


def would_create_cycle(connections: Iterable[Connection], source_id: str, target_id: str) -> bool:
    """Check whether adding ``source_id -> target_id`` would close a loop.

    The new edge is not part of ``connections``; the check looks for an
    existing path from ``target_id`` back to ``source_id``. Every connection
    kind counts. If the traversal fails on malformed data the edge is
    reported as cyclic.

    Args:
        connections: The workflow's existing connections.
        source_id: Source of the prospective connection.
        target_id: Target of the prospective connection.

    Returns:
        True if the connection must be rejected.

    Example:
        >>> would_create_cycle([Connection(id="c1", source_id="a", target_id="b")], "b", "a")
        True
    """
    if source_id == target_id:
        return True

    try:
        return ConnectionGraph(connections).reaches(target_id, source_id)
    except (AttributeError, KeyError, TypeError):
        logger.exception("Error checking for circular connections from %s to %s", source_id, target_id)
        return True


def determine_execution_order(workflow: Workflow) -> list[str]:
    """Resolve the order in which a workflow's model cards run.

    Without connections the declaration order is used. Otherwise the
    ``model-to-model`` graph is sorted topologically; if the sort leaves any model
    card out, the declaration order is used instead and a warning is logged.

    Args:
        workflow: The workflow to order.

    Returns:
        Model card ids in execution order.
    """
    declaration_order = [card.id for card in workflow.model_cards]

    if not workflow.connections:
        return declaration_order

    order = ConnectionGraph.from_workflow(workflow).topological_order()
    ordered = set(order)
    missing = [card_id for card_id in declaration_order if card_id not in ordered]

    if missing:
        logger.warning(
            "Workflow %s has a cyclic or incomplete connection graph (%d of %d model cards ordered); "
            "falling back to declaration order",
            workflow.id,
            len(declaration_order) - len(missing),
            len(declaration_order),
        )
        return declaration_order

    return order
