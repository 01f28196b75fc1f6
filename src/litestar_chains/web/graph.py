"""Graph visualization utilities for workflows.

This module provides utilities for generating visual representations of
workflow graphs, primarily using MermaidJS format.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from litestar_chains.core.types import ConnectionKind
from litestar_chains.engine.graph import determine_execution_order

if TYPE_CHECKING:
    from litestar_chains.core.models import Workflow

__all__ = ["generate_mermaid_graph", "generate_mermaid_graph_with_state", "parse_graph_to_dict"]


def _node_ids(workflow: Workflow) -> dict[str, str]:
    # Card ids are UUIDs, which Mermaid does not accept as node ids.
    return {card.id: f"card{index}" for index, card in enumerate(workflow.model_cards)}


def _label(text: str) -> str:
    return text.replace('"', "'")


def generate_mermaid_graph(workflow: Workflow) -> str:
    """Generate a MermaidJS graph representation of a workflow.

    Model cards become nodes labelled with their name, executable connections
    solid arrows and any other connection a dotted arrow. Connections to
    cards that are not part of the workflow are left out.

    Args:
        workflow: The workflow to visualize.

    Returns:
        A MermaidJS flowchart definition as a string.

    Example:
        >>> print(generate_mermaid_graph(workflow))
        graph TD
            card0["Summarizer"]
            card1["Translator"]
            card0 --> card1
    """
    node_ids = _node_ids(workflow)
    lines = ["graph TD"]

    for card in workflow.model_cards:
        lines.append(f'    {node_ids[card.id]}["{_label(card.name)}"]')

    for connection in workflow.connections:
        source = node_ids.get(connection.source_id)
        target = node_ids.get(connection.target_id)
        if source is None or target is None:
            continue
        arrow = "-->" if connection.kind == ConnectionKind.MODEL_TO_MODEL else "-.->"
        lines.append(f"    {source} {arrow} {target}")

    return "\n".join(lines)


def generate_mermaid_graph_with_state(
    workflow: Workflow,
    completed_steps: list[str] | None = None,
) -> str:
    """Generate a MermaidJS graph highlighting executed model cards.

    Args:
        workflow: The workflow to visualize.
        completed_steps: Ids of model cards that produced a result.

    Returns:
        A MermaidJS flowchart definition with state styling.
    """
    node_ids = _node_ids(workflow)
    lines = [generate_mermaid_graph(workflow)]
    for card_id in completed_steps or []:
        if card_id in node_ids:
            lines.append(f"    style {node_ids[card_id]} fill:#90EE90,stroke:#006400,stroke-width:2px")
    return "\n".join(lines)


def parse_graph_to_dict(workflow: Workflow) -> dict[str, Any]:
    """Parse a workflow into a dictionary representation.

    Each node carries its position in the execution order, or ``None`` when
    the card does not run.

    Args:
        workflow: The workflow to parse.

    Returns:
        A dictionary containing nodes and edges lists.

    Example:
        >>> graph_dict = parse_graph_to_dict(workflow)
        >>> graph_dict["nodes"][0]
        {'id': '...', 'label': 'Summarizer', 'model': 'openai/gpt-4o-mini', 'provider': 'openrouter', 'position': 0}
    """
    order = [card_id for card_id in determine_execution_order(workflow) if workflow.has_model_card(card_id)]
    positions = {card_id: index for index, card_id in enumerate(order)}

    nodes = [
        {
            "id": card.id,
            "label": card.name,
            "model": card.llm_model,
            "provider": str(card.llm_provider),
            "position": positions.get(card.id),
        }
        for card in workflow.model_cards
    ]
    edges = [
        {
            "id": connection.id,
            "source": connection.source_id,
            "target": connection.target_id,
            "kind": str(connection.kind),
        }
        for connection in workflow.connections
    ]
    return {
        "nodes": nodes,
        "edges": edges,
    }
