"""Core type definitions for litestar-chains.

This module defines the enumerations and storage keys shared across the
model card and workflow layers.
"""

from __future__ import annotations

import sys
from enum import Enum
from typing import Any, Final, TypeAlias

# StrEnum backport for Python < 3.11
if sys.version_info >= (3, 11):
    from enum import StrEnum
else:

    class StrEnum(str, Enum):
        """String enumeration compatibility for Python < 3.11."""

        def __str__(self) -> str:
            return str(self.value)


__all__ = [
    "HISTORY_STORAGE_KEY",
    "MODEL_CARDS_STORAGE_KEY",
    "WORKFLOWS_STORAGE_KEY",
    "ConnectionKind",
    "JSONDict",
    "LLMProvider",
    "ParameterType",
]


class ConnectionKind(StrEnum):
    """Kind of a directed connection inside a workflow.

    Attributes:
        MODEL_TO_MODEL: Output of one model card feeds the next one.
        INPUT_TO_MODEL: An input component feeds a model card (not executable).
        MODEL_TO_OUTPUT: A model card feeds an output component (not executable).
    """

    MODEL_TO_MODEL = "model-to-model"
    INPUT_TO_MODEL = "input-to-model"
    MODEL_TO_OUTPUT = "model-to-output"


class LLMProvider(StrEnum):
    """LLM providers a model card can target.

    Attributes:
        OPENROUTER: The hosted OpenRouter chat-completions API.
        OLLAMA: A local Ollama server.
    """

    OPENROUTER = "openrouter"
    OLLAMA = "ollama"


class ParameterType(StrEnum):
    """Type tag of a model card parameter.

    Attributes:
        STRING: Free-form text value.
        NUMBER: Numeric value.
        BOOLEAN: On/off flag.
        SELECT: One value out of an enumerated option list.
    """

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SELECT = "select"


JSONDict: TypeAlias = dict[str, Any]
"""Type alias for JSON-compatible dictionaries written to storage."""

WORKFLOWS_STORAGE_KEY: Final = "workflows"
"""Storage key holding the whole workflow collection."""

HISTORY_STORAGE_KEY: Final = "workflow_execution_history"
"""Storage key holding the capped execution history."""

MODEL_CARDS_STORAGE_KEY: Final = "model-cards"
"""Storage key holding the global model card collection."""
