"""Tests for connection validation."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from litestar_chains.core.models import Connection, Workflow
from litestar_chains.core.types import ConnectionKind
from litestar_chains.engine.validation import ConnectionValidation, validate_connection


@pytest.fixture
def workflow(make_card: Any) -> Workflow:
    """Three cards with a single a -> b connection."""
    return Workflow(
        id="wf",
        name="wf",
        model_cards=[make_card("a"), make_card("b"), make_card("c")],
        connections=[Connection(id="ab", source_id="a", target_id="b")],
    )


@pytest.mark.unit
class TestConnectionValidation:
    """Tests for the ConnectionValidation result type."""

    def test_truthiness_follows_validity(self) -> None:
        assert ConnectionValidation(is_valid=True)
        assert not ConnectionValidation(is_valid=False, reason="nope")


@pytest.mark.unit
class TestValidateConnection:
    """Tests for validate_connection."""

    def test_valid_connection(self, workflow: Workflow) -> None:
        result = validate_connection(workflow, "b", "c", ConnectionKind.MODEL_TO_MODEL)

        assert result.is_valid
        assert result.reason is None

    def test_kind_as_string(self, workflow: Workflow) -> None:
        assert validate_connection(workflow, "b", "c", "model-to-model")

    def test_missing_source(self, workflow: Workflow) -> None:
        result = validate_connection(workflow, "ghost", "c", ConnectionKind.MODEL_TO_MODEL)

        assert not result
        assert result.reason == "Source or target model card not found"

    def test_missing_target(self, workflow: Workflow) -> None:
        result = validate_connection(workflow, "a", "ghost", ConnectionKind.MODEL_TO_MODEL)

        assert result.reason == "Source or target model card not found"

    def test_duplicate(self, workflow: Workflow) -> None:
        result = validate_connection(workflow, "a", "b", ConnectionKind.MODEL_TO_MODEL)

        assert not result
        assert result.reason == "Connection already exists"

    def test_reverse_edge_is_a_cycle(self, workflow: Workflow) -> None:
        result = validate_connection(workflow, "b", "a", ConnectionKind.MODEL_TO_MODEL)

        assert not result
        assert result.reason == "Circular connection detected"

    def test_self_loop_is_a_cycle(self, workflow: Workflow) -> None:
        result = validate_connection(workflow, "c", "c", ConnectionKind.MODEL_TO_MODEL)

        assert result.reason == "Circular connection detected"

    def test_duplicate_is_checked_before_cycle(self, workflow: Workflow) -> None:
        """Test the first failing rule decides the reason."""
        workflow.connections.append(Connection(id="ba", source_id="b", target_id="a"))

        result = validate_connection(workflow, "a", "b", ConnectionKind.MODEL_TO_MODEL)

        assert result.reason == "Connection already exists"

    @pytest.mark.parametrize(
        ("kind", "reason"),
        [
            (ConnectionKind.INPUT_TO_MODEL, "input-to-model connections are not supported"),
            (ConnectionKind.MODEL_TO_OUTPUT, "model-to-output connections are not supported"),
            ("model-to-nowhere", "Unknown connection type: model-to-nowhere"),
        ],
    )
    def test_unsupported_kinds(self, workflow: Workflow, kind: Any, reason: str) -> None:
        result = validate_connection(workflow, "b", "c", kind)

        assert not result
        assert result.reason == reason

    def test_rejection_is_logged(self, workflow: Workflow, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            validate_connection(workflow, "b", "a", ConnectionKind.MODEL_TO_MODEL)

        assert "Circular connection detected" in caplog.text
