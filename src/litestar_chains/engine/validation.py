"""Connection validation.

Validation never raises: it returns a :class:`ConnectionValidation` that is
falsy on failure and carries a human-readable reason.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from litestar_chains.core.types import ConnectionKind
from litestar_chains.engine.graph import would_create_cycle

if TYPE_CHECKING:
    from litestar_chains.core.models import Workflow

__all__ = ["ConnectionValidation", "validate_connection"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectionValidation:
    """Outcome of validating a prospective connection.

    Attributes:
        is_valid: Whether the connection may be created.
        reason: Why the connection was rejected, ``None`` when valid.

    Example:
        >>> result = validate_connection(workflow, "a", "b", ConnectionKind.MODEL_TO_MODEL)
        >>> if not result:
        ...     print(result.reason)
    """

    is_valid: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.is_valid


def _reject(reason: str) -> ConnectionValidation:
    logger.warning("Connection validation failed: %s", reason)
    return ConnectionValidation(is_valid=False, reason=reason)


def validate_connection(
    workflow: Workflow,
    source_id: str,
    target_id: str,
    kind: ConnectionKind | str,
) -> ConnectionValidation:
    """Validate a prospective connection against a workflow.

    Rules are checked in order and the first failure wins:

    1. Both endpoints must be model cards of the workflow.
    2. No connection with the same source and target may exist.
    3. The connection must not close a cycle.
    4. Only ``model-to-model`` connections are supported.

    Args:
        workflow: The workflow the connection would belong to.
        source_id: Source model card id.
        target_id: Target model card id.
        kind: Connection kind.

    Returns:
        The validation outcome.
    """
    if not workflow.has_model_card(source_id) or not workflow.has_model_card(target_id):
        return _reject("Source or target model card not found")

    if any(c.source_id == source_id and c.target_id == target_id for c in workflow.connections):
        return _reject("Connection already exists")

    if would_create_cycle(workflow.connections, source_id, target_id):
        return _reject("Circular connection detected")

    try:
        connection_kind = ConnectionKind(kind)
    except ValueError:
        return _reject(f"Unknown connection type: {kind}")

    if connection_kind == ConnectionKind.MODEL_TO_MODEL:
        return ConnectionValidation(is_valid=True)
    if connection_kind == ConnectionKind.INPUT_TO_MODEL:
        return _reject("input-to-model connections are not supported")
    if connection_kind == ConnectionKind.MODEL_TO_OUTPUT:
        return _reject("model-to-output connections are not supported")
    return _reject(f"Unknown connection type: {kind}")
