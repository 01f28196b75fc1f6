"""Sequential workflow executor.

This module runs a workflow's model cards one after another in resolved
execution order, threading each step's output into the next step's prompt and
aggregating usage into a single run record.
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING

from litestar_chains.core.models import (
    ExecutionResult,
    LLMRequest,
    UsageStatistics,
    WorkflowExecutionResult,
    parameters_to_dict,
    utc_now,
)
from litestar_chains.engine.graph import determine_execution_order
from litestar_chains.engine.history import ExecutionHistory
from litestar_chains.exceptions import UnresolvableExecutionOrderError

if TYPE_CHECKING:
    from litestar_chains.core.models import ModelCard, Workflow
    from litestar_chains.core.protocols import LLMService
    from litestar_chains.engine.registry import WorkflowRegistry

__all__ = ["PROMPT_SEPARATOR", "WorkflowExecutor", "build_request"]

logger = logging.getLogger(__name__)

PROMPT_SEPARATOR = "\n\n"
"""Separator placed between a model card's system prompt and its input."""


def build_request(model_card: ModelCard, current_input: str) -> LLMRequest:
    """Build the provider-agnostic request for one step.

    Args:
        model_card: The model card being executed.
        current_input: The user input or the previous step's output.

    Returns:
        The request: the card's system prompt, a blank line, then the input.

    Example:
        >>> build_request(card, "hello").prompt
        'You are terse.\\n\\nhello'
    """
    return LLMRequest(
        provider=model_card.llm_provider,
        model=model_card.llm_model,
        prompt=f"{model_card.system_prompt}{PROMPT_SEPARATOR}{current_input}",
        parameters=parameters_to_dict(model_card.parameters),
    )


class WorkflowExecutor:
    """Runs workflows against an LLM service and keeps their results.

    Runs are independent: concurrent runs share no lock, and whichever run
    finishes last becomes :attr:`current_execution_result`.

    Attributes:
        registry: Registry the workflows are looked up in.
        llm_service: Service answering each step's request.
        history: Capped history the finished runs are prepended to.
        current_execution_result: The most recently finished run.
        _active_runs: Number of runs in flight.
    """

    def __init__(
        self,
        registry: WorkflowRegistry,
        llm_service: LLMService,
        history: ExecutionHistory | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            registry: The workflow registry.
            llm_service: The LLM service.
            history: Optional history; an unpersisted one is created if omitted.
        """
        self.registry = registry
        self.llm_service = llm_service
        self.history = history if history is not None else ExecutionHistory()
        self.current_execution_result: WorkflowExecutionResult | None = None
        self._active_runs = 0

    @property
    def is_executing(self) -> bool:
        """Whether at least one run is in flight."""
        return self._active_runs > 0

    def get_intermediate_results(self) -> list[ExecutionResult]:
        """Return the step results of the current run, or an empty list."""
        if self.current_execution_result is None:
            return []
        return list(self.current_execution_result.results)

    async def execute_workflow(self, workflow_id: str, user_input: str) -> WorkflowExecutionResult:
        """Execute a workflow with the given user input.

        The workflow is copied at the start of the run, so edits made while
        it executes do not affect it. Errors raised by the LLM service
        propagate and no result is recorded for the failed run.

        Args:
            workflow_id: Id of the workflow to run.
            user_input: Text fed to the first step.

        Returns:
            The finished run.

        Raises:
            WorkflowNotFoundError: If the workflow does not exist.
            UnresolvableExecutionOrderError: If no execution order can be
                determined for a non-empty workflow.

        Example:
            >>> result = await executor.execute_workflow(workflow.id, "Summarize this")
            >>> print(result.final_output)
        """
        workflow = copy.deepcopy(self.registry.get_workflow(workflow_id))

        self._active_runs += 1
        try:
            result = await self._run(workflow, user_input)
            self.current_execution_result = result
            await self.history.add(result)
        finally:
            self._active_runs -= 1

        return result

    async def _run(self, workflow: Workflow, user_input: str) -> WorkflowExecutionResult:
        start_time = utc_now()
        logger.info("Executing workflow %s (%s)", workflow.id, workflow.name)

        order = determine_execution_order(workflow)
        if not order and workflow.model_cards:
            raise UnresolvableExecutionOrderError(workflow.id)

        result = WorkflowExecutionResult(
            workflow_id=workflow.id,
            workflow_name=workflow.name,
            start_time=start_time,
            end_time=start_time,
        )
        current_input = user_input

        for model_card_id in order:
            model_card = workflow.get_model_card(model_card_id)
            if model_card is None:
                logger.warning("Model card %s not found in workflow %s, skipping step", model_card_id, workflow.id)
                continue

            request = build_request(model_card, current_input)
            response = await self.llm_service.send_request(request)
            current_input = response.content

            # Per-step latency is not measured; only the whole run is timed.
            usage = UsageStatistics.from_tokens(
                response.usage.prompt_tokens,
                response.usage.completion_tokens,
                tool_calls=len(response.tool_results or []),
            )
            result.results.append(
                ExecutionResult(
                    model_id=model_card.id,
                    model_name=model_card.name,
                    input=request.prompt,
                    output=response.content,
                    usage_statistics=usage,
                    timestamp=utc_now(),
                )
            )
            result.total_usage_statistics.add(usage)

        result.final_output = current_input
        result.end_time = utc_now()
        result.total_usage_statistics.execution_time = (result.end_time - start_time).total_seconds() * 1000

        logger.info(
            "Workflow %s finished: %d steps, %d tokens",
            workflow.id,
            len(result.results),
            result.total_usage_statistics.total_tokens,
        )
        return result
