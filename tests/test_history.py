"""Tests for ExecutionHistory."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import pytest

from litestar_chains.core.models import WorkflowExecutionResult
from litestar_chains.core.types import HISTORY_STORAGE_KEY
from litestar_chains.engine.history import DEFAULT_HISTORY_LIMIT, ExecutionHistory

if TYPE_CHECKING:
    from litestar_chains.storage.memory import MemoryStorage


def _run(name: str) -> WorkflowExecutionResult:
    moment = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return WorkflowExecutionResult(
        workflow_id="wf",
        workflow_name=name,
        start_time=moment,
        end_time=moment,
        final_output=f"{name} output",
    )


@pytest.mark.unit
class TestExecutionHistory:
    """Tests for the capped run history."""

    def test_default_limit(self) -> None:
        assert ExecutionHistory().limit == DEFAULT_HISTORY_LIMIT == 10

    async def test_newest_first(self) -> None:
        history = ExecutionHistory()

        await history.add(_run("first"))
        await history.add(_run("second"))

        assert [entry.workflow_name for entry in history.entries] == ["second", "first"]
        assert history.latest is not None
        assert history.latest.workflow_name == "second"

    async def test_cap_drops_oldest(self) -> None:
        history = ExecutionHistory(limit=3)

        for index in range(5):
            await history.add(_run(f"run{index}"))

        assert [entry.workflow_name for entry in history.entries] == ["run4", "run3", "run2"]

    async def test_entries_is_a_copy(self) -> None:
        history = ExecutionHistory()
        await history.add(_run("only"))

        history.entries.clear()

        assert len(history) == 1

    async def test_clear(self, memory_storage: MemoryStorage) -> None:
        history = ExecutionHistory(storage=memory_storage)
        await history.add(_run("only"))

        await history.clear()

        assert history.latest is None
        assert await memory_storage.get_item(HISTORY_STORAGE_KEY) == []

    async def test_persist_and_load(self, memory_storage: MemoryStorage) -> None:
        history = ExecutionHistory(storage=memory_storage)
        await history.add(_run("first"))
        await history.add(_run("second"))

        restored = ExecutionHistory(storage=memory_storage)
        await restored.load()

        assert [entry.workflow_name for entry in restored.entries] == ["second", "first"]
        assert restored.entries[0].final_output == "second output"
        assert restored.entries[0].start_time == datetime(2024, 1, 1, tzinfo=timezone.utc)

    async def test_load_applies_limit(self, memory_storage: MemoryStorage) -> None:
        history = ExecutionHistory(storage=memory_storage)
        for index in range(4):
            await history.add(_run(f"run{index}"))

        restored = ExecutionHistory(storage=memory_storage, limit=2)
        await restored.load()

        assert [entry.workflow_name for entry in restored.entries] == ["run3", "run2"]

    async def test_load_ignores_garbage(self, memory_storage: MemoryStorage) -> None:
        await memory_storage.set_item(HISTORY_STORAGE_KEY, {"not": "a list"})
        history = ExecutionHistory(storage=memory_storage)

        await history.load()

        assert len(history) == 0

    async def test_load_tolerates_null_counters(self, memory_storage: MemoryStorage) -> None:
        await memory_storage.set_item(
            HISTORY_STORAGE_KEY,
            [
                {
                    "workflow_name": "partial",
                    "results": [{"model_id": "a", "usage_statistics": {"prompt_tokens": None}}],
                    "total_usage_statistics": {"prompt_tokens": None, "total_tokens": None},
                },
                {"workflow_name": "healthy", "total_usage_statistics": {"prompt_tokens": 4}},
            ],
        )
        history = ExecutionHistory(storage=memory_storage)

        await history.load()

        assert [entry.workflow_name for entry in history.entries] == ["partial", "healthy"]
        assert history.entries[0].total_usage_statistics.prompt_tokens == 0
        assert history.entries[0].results[0].usage_statistics.prompt_tokens == 0
        assert history.entries[1].total_usage_statistics.prompt_tokens == 4

    async def test_broken_storage_is_logged(
        self,
        broken_storage: Any,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        history = ExecutionHistory(storage=broken_storage)

        with caplog.at_level(logging.ERROR):
            await history.add(_run("kept"))
            await history.load()

        assert len(history) == 0
        assert "Error saving execution history" in caplog.text
        assert "Error loading execution history" in caplog.text
