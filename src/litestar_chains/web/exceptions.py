"""Exception handling for chains web endpoints.

Maps the library's exception hierarchy to HTTP responses with a JSON error
body.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from litestar import Response
from litestar.status_codes import (
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
)

from litestar_chains.exceptions import (
    ChainsError,
    LLMProviderError,
    ModelCardNotFoundError,
    ProviderNotConfiguredError,
    UnresolvableExecutionOrderError,
    WorkflowNotFoundError,
)

if TYPE_CHECKING:  # pragma: no cover
    from litestar import Request

__all__ = ["chains_error_handler", "status_code_for"]

_STATUS_CODES: dict[type[ChainsError], tuple[int, str]] = {
    WorkflowNotFoundError: (HTTP_404_NOT_FOUND, "workflow_not_found"),
    ModelCardNotFoundError: (HTTP_404_NOT_FOUND, "model_card_not_found"),
    UnresolvableExecutionOrderError: (HTTP_409_CONFLICT, "unresolvable_execution_order"),
    LLMProviderError: (HTTP_502_BAD_GATEWAY, "llm_provider_error"),
    ProviderNotConfiguredError: (HTTP_502_BAD_GATEWAY, "provider_not_configured"),
}


def status_code_for(exc: ChainsError) -> tuple[int, str]:
    """Return the HTTP status code and error slug for an exception.

    Unmapped subclasses resolve through their bases; anything else is a 500.
    """
    for cls in type(exc).__mro__:
        if cls in _STATUS_CODES:
            return _STATUS_CODES[cls]
    return HTTP_500_INTERNAL_SERVER_ERROR, "chains_error"


def chains_error_handler(
    _request: Request,
    exc: ChainsError,
) -> Response:
    """Exception handler for :class:`ChainsError` and its subclasses.

    Args:
        request: The Litestar request object.
        exc: The raised exception.

    Returns:
        Response with the error slug and message.
    """
    status_code, error = status_code_for(exc)
    return Response(
        content={"error": error, "message": str(exc)},
        status_code=status_code,
        media_type="application/json",
    )
