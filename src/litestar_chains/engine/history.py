"""Capped history of workflow runs."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from litestar_chains.core.serialization import (
    workflow_execution_result_from_dict,
    workflow_execution_result_to_dict,
)
from litestar_chains.core.types import HISTORY_STORAGE_KEY

if TYPE_CHECKING:
    from litestar_chains.core.models import WorkflowExecutionResult
    from litestar_chains.core.protocols import StorageService

__all__ = ["DEFAULT_HISTORY_LIMIT", "ExecutionHistory"]

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 10
"""Number of runs kept by default."""


class ExecutionHistory:
    """Most-recent-first list of past runs, capped and persisted as a whole.

    Attributes:
        storage: Optional storage the history is written to after every change.
        limit: Maximum number of runs kept.
        _entries: The runs, newest first.
    """

    def __init__(self, storage: StorageService | None = None, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        """Initialize an empty history.

        Args:
            storage: Optional storage for persistence.
            limit: Maximum number of runs kept.
        """
        self.storage = storage
        self.limit = limit
        self._entries: list[WorkflowExecutionResult] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[WorkflowExecutionResult]:
        """A copy of the runs, newest first."""
        return list(self._entries)

    @property
    def latest(self) -> WorkflowExecutionResult | None:
        """The most recent run, if any."""
        return self._entries[0] if self._entries else None

    async def add(self, result: WorkflowExecutionResult) -> None:
        """Prepend a run, drop the oldest beyond :attr:`limit` and persist."""
        self._entries = [result, *self._entries][: self.limit]
        await self._persist()

    async def clear(self) -> None:
        """Forget every run."""
        self._entries = []
        await self._persist()

    async def load(self) -> None:
        """Replace the in-memory runs with the persisted ones.

        Unreadable storage leaves the history empty.
        """
        if self.storage is None:
            return

        try:
            stored = await self.storage.get_item(HISTORY_STORAGE_KEY)
        except Exception:
            logger.exception("Error loading execution history")
            self._entries = []
            return

        if not isinstance(stored, list):
            self._entries = []
            return

        self._entries = [workflow_execution_result_from_dict(item) for item in stored if isinstance(item, dict)][
            : self.limit
        ]
        logger.debug("Loaded %d execution history entries", len(self._entries))

    async def _persist(self) -> None:
        if self.storage is None:
            return
        try:
            await self.storage.set_item(
                HISTORY_STORAGE_KEY,
                [workflow_execution_result_to_dict(entry) for entry in self._entries],
            )
        except Exception:
            logger.exception("Error saving execution history")
