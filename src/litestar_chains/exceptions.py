"""Exception hierarchy for litestar-chains."""

from __future__ import annotations

__all__ = (
    "ChainsError",
    "LLMProviderError",
    "ModelCardNotFoundError",
    "ProviderNotConfiguredError",
    "UnresolvableExecutionOrderError",
    "WorkflowNotFoundError",
)


class ChainsError(Exception):
    """Base exception for all litestar-chains errors.

    All exceptions raised by litestar-chains inherit from this class, so callers
    rendering an error output can catch a single type.
    """


class WorkflowNotFoundError(ChainsError):
    """Raised when a workflow id does not match any stored workflow.

    Attributes:
        workflow_id: The id that was looked up.
    """

    def __init__(self, workflow_id: str) -> None:
        """Initialize the exception with the missing workflow id.

        Args:
            workflow_id: The id that was looked up.
        """
        self.workflow_id = workflow_id
        super().__init__(f"Workflow '{workflow_id}' not found")


class ModelCardNotFoundError(ChainsError):
    """Raised when a model card id does not match any stored model card.

    Attributes:
        model_card_id: The id that was looked up.
    """

    def __init__(self, model_card_id: str) -> None:
        """Initialize the exception with the missing model card id.

        Args:
            model_card_id: The id that was looked up.
        """
        self.model_card_id = model_card_id
        super().__init__(f"Model card '{model_card_id}' not found")


class UnresolvableExecutionOrderError(ChainsError):
    """Raised when a workflow with model cards yields no execution order.

    Attributes:
        workflow_id: The workflow that could not be ordered.
    """

    def __init__(self, workflow_id: str) -> None:
        """Initialize the exception.

        Args:
            workflow_id: The workflow that could not be ordered.
        """
        self.workflow_id = workflow_id
        super().__init__(f"Could not determine an execution order for workflow '{workflow_id}'")


class LLMProviderError(ChainsError):
    """Raised when an LLM provider call fails.

    Wraps transport failures and non-success HTTP responses from a provider.

    Attributes:
        provider: The provider that failed.
        status_code: HTTP status code returned by the provider, if any.
    """

    def __init__(self, provider: str, message: str, status_code: int | None = None) -> None:
        """Initialize the exception with provider details.

        Args:
            provider: The provider that failed.
            message: Description of the failure.
            status_code: HTTP status code returned by the provider, if any.
        """
        self.provider = provider
        self.status_code = status_code
        msg = f"{provider} API error"
        if status_code is not None:
            msg += f" ({status_code})"
        super().__init__(f"{msg}: {message}")


class ProviderNotConfiguredError(ChainsError):
    """Raised when a request names a provider with no registered adapter.

    Attributes:
        provider: The requested provider.
    """

    def __init__(self, provider: str) -> None:
        """Initialize the exception.

        Args:
            provider: The requested provider.
        """
        self.provider = provider
        super().__init__(f"No LLM service configured for provider '{provider}'")
