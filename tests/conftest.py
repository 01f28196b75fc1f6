"""Shared test fixtures for litestar-chains test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from litestar_chains.core.models import LLMResponse, ModelCard, NumberParameter, TokenUsage, ToolResult
from litestar_chains.core.types import LLMProvider

if TYPE_CHECKING:
    from litestar_chains.core.models import LLMRequest, Workflow
    from litestar_chains.engine.executor import WorkflowExecutor
    from litestar_chains.engine.registry import WorkflowRegistry
    from litestar_chains.storage.memory import MemoryStorage


class UpperCaseLLM:
    """Mock LLM service that echoes the prompt upper-cased.

    Every response reports 10 prompt and 5 completion tokens.
    """

    def __init__(self, tool_results: list[ToolResult] | None = None) -> None:
        self.requests: list[LLMRequest] = []
        self.tool_results = tool_results

    async def send_request(self, request: LLMRequest) -> LLMResponse:
        self.requests.append(request)
        return LLMResponse(
            content=request.prompt.upper(),
            usage=TokenUsage(prompt_tokens=10, completion_tokens=5, total_tokens=15),
            id=f"mock-{len(self.requests)}",
            tool_results=self.tool_results,
        )

    async def get_available_models(self) -> list[str]:
        return ["mock-model"]

    async def is_available(self) -> bool:
        return True


class FailingLLM:
    """Mock LLM service whose requests always fail."""

    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    async def send_request(self, request: LLMRequest) -> LLMResponse:
        raise self.exc

    async def get_available_models(self) -> list[str]:
        return []

    async def is_available(self) -> bool:
        return False


class BrokenStorage:
    """Storage whose every operation raises."""

    async def get_item(self, key: str) -> Any | None:
        raise OSError("storage unavailable")

    async def set_item(self, key: str, value: Any) -> None:
        raise OSError("storage unavailable")

    async def remove_item(self, key: str) -> None:
        raise OSError("storage unavailable")

    async def clear(self) -> None:
        raise OSError("storage unavailable")

    async def keys(self) -> list[str]:
        raise OSError("storage unavailable")


def make_model_card(card_id: str, name: str | None = None, system_prompt: str = "") -> ModelCard:
    """Create a model card with a predictable id.

    Args:
        card_id: The card id.
        name: Display name, defaults to the upper-cased id.
        system_prompt: The system prompt.

    Returns:
        ModelCard instance
    """
    return ModelCard(
        id=card_id,
        name=name or card_id.upper(),
        system_prompt=system_prompt,
        llm_provider=LLMProvider.OLLAMA,
        llm_model="llama3",
        parameters=[NumberParameter(id="temperature", name="temperature", value=0.2)],
    )


@pytest.fixture
def memory_storage() -> MemoryStorage:
    """Create an empty in-memory storage.

    Returns:
        MemoryStorage instance
    """
    from litestar_chains.storage.memory import MemoryStorage

    return MemoryStorage()


@pytest.fixture
def mock_llm() -> UpperCaseLLM:
    """Create the upper-casing mock LLM service."""
    return UpperCaseLLM()


@pytest.fixture
def broken_storage() -> BrokenStorage:
    """Create a storage whose every operation raises."""
    return BrokenStorage()


@pytest.fixture
def make_card() -> Any:
    """Expose the model card factory to tests."""
    return make_model_card


@pytest.fixture
def make_llm() -> Any:
    """Build an upper-casing mock LLM service, optionally returning tool results."""
    return UpperCaseLLM


@pytest.fixture
def failing_llm() -> Any:
    """Build a mock LLM service that raises the given exception."""
    return FailingLLM


@pytest.fixture
def card_a() -> ModelCard:
    return make_model_card("a", system_prompt="SP_A")


@pytest.fixture
def card_b() -> ModelCard:
    return make_model_card("b", system_prompt="SP_B")


@pytest.fixture
def card_c() -> ModelCard:
    return make_model_card("c", system_prompt="SP_C")


@pytest.fixture
def workflow_registry(memory_storage: MemoryStorage) -> WorkflowRegistry:
    """Create a workflow registry persisting to the in-memory storage.

    Args:
        memory_storage: Storage fixture

    Returns:
        WorkflowRegistry instance
    """
    from litestar_chains.engine.registry import WorkflowRegistry

    return WorkflowRegistry(storage=memory_storage)


@pytest.fixture
def workflow_executor(
    workflow_registry: WorkflowRegistry,
    mock_llm: UpperCaseLLM,
    memory_storage: MemoryStorage,
) -> WorkflowExecutor:
    """Create a workflow executor backed by the mock LLM.

    Args:
        workflow_registry: Workflow registry fixture
        mock_llm: Mock LLM fixture
        memory_storage: Storage fixture

    Returns:
        WorkflowExecutor instance
    """
    from litestar_chains.engine.executor import WorkflowExecutor
    from litestar_chains.engine.history import ExecutionHistory

    return WorkflowExecutor(
        registry=workflow_registry,
        llm_service=mock_llm,
        history=ExecutionHistory(storage=memory_storage),
    )


@pytest.fixture
async def chain_workflow(
    workflow_registry: WorkflowRegistry,
    card_a: ModelCard,
    card_b: ModelCard,
) -> Workflow:
    """Create a stored two-card workflow connected a -> b.

    Returns:
        The stored workflow
    """
    workflow = await workflow_registry.create_workflow("chain", "a then b")
    await workflow_registry.add_model_card(workflow.id, card_a)
    await workflow_registry.add_model_card(workflow.id, card_b)
    await workflow_registry.create_connection(workflow.id, "a", "b")
    return workflow_registry.get_workflow(workflow.id)


# Pytest configuration
def pytest_configure(config: Any) -> None:
    """Configure pytest with custom markers.

    Args:
        config: Pytest config object
    """
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
