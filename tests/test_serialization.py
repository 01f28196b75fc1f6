"""Tests for persisted record serialization."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from litestar_chains.core.models import (
    BooleanParameter,
    ModelCapabilities,
    ModelCard,
    NumberParameter,
    SelectParameter,
    StringParameter,
)
from litestar_chains.core.serialization import (
    capabilities_from_dict,
    connection_from_dict,
    model_card_from_dict,
    model_card_to_dict,
    parameter_from_dict,
    parameter_to_dict,
    parse_datetime_safely,
    usage_from_dict,
    workflow_from_dict,
)
from litestar_chains.core.types import ConnectionKind, LLMProvider


@pytest.mark.unit
class TestParseDatetimeSafely:
    """Tests for parse_datetime_safely."""

    def test_iso_with_zulu_suffix(self) -> None:
        parsed = parse_datetime_safely("2024-01-02T03:04:05.000Z")

        assert parsed == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    def test_naive_is_utc(self) -> None:
        assert parse_datetime_safely("2024-01-02T03:04:05").tzinfo == timezone.utc

    def test_datetime_passes_through(self) -> None:
        moment = datetime(2024, 1, 2, tzinfo=timezone.utc)

        assert parse_datetime_safely(moment) is moment

    @pytest.mark.parametrize("value", ["yesterday", None, 42, ""])
    def test_invalid_becomes_now(self, value: object) -> None:
        before = datetime.now(timezone.utc)

        parsed = parse_datetime_safely(value)

        assert parsed >= before


@pytest.mark.unit
class TestParameters:
    """Tests for parameter serialization."""

    def test_select_keeps_options(self) -> None:
        parameter = SelectParameter(id="p", name="format", value="json", options=["json", "text"])

        data = parameter_to_dict(parameter)

        assert data["type"] == "select"
        assert data["options"] == ["json", "text"]
        assert parameter_from_dict(data) == parameter

    @pytest.mark.parametrize(
        ("data", "expected"),
        [
            ({"id": "t", "name": "temperature", "type": "number", "value": 0.7}, NumberParameter),
            ({"id": "s", "name": "stream", "type": "boolean", "value": True}, BooleanParameter),
            ({"id": "u", "name": "user", "type": "string", "value": "x"}, StringParameter),
        ],
    )
    def test_type_tag_selects_variant(self, data: dict, expected: type) -> None:
        assert isinstance(parameter_from_dict(data), expected)

    def test_unknown_type_loads_as_string(self) -> None:
        parameter = parameter_from_dict({"id": "x", "name": "x", "type": "color", "value": "red"})

        assert isinstance(parameter, StringParameter)
        assert parameter.value == "red"

    def test_id_defaults_to_name(self) -> None:
        assert parameter_from_dict({"name": "top_p", "type": "number"}).id == "top_p"


@pytest.mark.unit
class TestModelCards:
    """Tests for model card serialization."""

    def test_round_trip_is_json_compatible(self) -> None:
        card = ModelCard(
            id="card",
            name="Writer",
            system_prompt="Write.",
            parameters=[NumberParameter(id="t", name="temperature", value=0.5)],
            llm_provider=LLMProvider.OLLAMA,
            llm_model="llama3",
            capabilities=ModelCapabilities(supports_tools=True, supported_tool_types=["function"]),
            mcp_servers=["srv"],
            settings={"color": "blue"},
        )

        data = json.loads(json.dumps(model_card_to_dict(card)))

        assert model_card_from_dict(data) == card

    def test_unknown_provider_defaults_to_openrouter(self) -> None:
        card = model_card_from_dict({"id": "c", "llm_provider": "acme"})

        assert card.llm_provider == LLMProvider.OPENROUTER

    def test_missing_fields_default(self) -> None:
        card = model_card_from_dict({"id": "c", "parameters": "oops", "settings": []})

        assert card.name == ""
        assert card.parameters == []
        assert card.settings == {}
        assert card.capabilities == ModelCapabilities()

    def test_capabilities_from_non_dict(self) -> None:
        assert capabilities_from_dict(None) == ModelCapabilities()


@pytest.mark.unit
class TestWorkflows:
    """Tests for workflow and connection serialization."""

    def test_unknown_connection_kind_is_dropped(self) -> None:
        assert connection_from_dict({"id": "c", "source_id": "a", "target_id": "b", "kind": "wireless"}) is None

    def test_connection_kind_defaults(self) -> None:
        connection = connection_from_dict({"id": "c", "source_id": "a", "target_id": "b"})

        assert connection is not None
        assert connection.kind == ConnectionKind.MODEL_TO_MODEL

    def test_workflow_tolerates_bad_collections(self) -> None:
        workflow = workflow_from_dict(
            {
                "id": "wf",
                "model_cards": None,
                "connections": [
                    {"id": "1", "source_id": "a", "target_id": "b", "kind": "input-to-model"},
                    {"id": "2", "source_id": "a", "target_id": "b", "kind": "bogus"},
                    "junk",
                ],
            }
        )

        assert workflow.model_cards == []
        assert [c.id for c in workflow.connections] == ["1"]

    @pytest.mark.parametrize(
        "data",
        [
            {"id": "c1", "source_id": "a"},
            {"id": "c1", "target_id": "b"},
            {"source_id": "a", "target_id": "b"},
            {"id": "c1", "source_id": None, "target_id": "b"},
        ],
    )
    def test_connection_missing_fields_is_dropped(self, data: dict) -> None:
        assert connection_from_dict(data) is None

    def test_model_card_without_id_is_dropped(self) -> None:
        assert model_card_from_dict({"name": "nameless"}) is None
        assert model_card_from_dict({"id": None, "name": "nameless"}) is None

    def test_workflow_drops_incomplete_records(self) -> None:
        workflow = workflow_from_dict(
            {
                "id": "wf",
                "model_cards": [{"id": "a"}, {"name": "no id"}, {"id": "b"}],
                "connections": [
                    {"id": "c1", "source_id": "a"},
                    {"id": "c2", "source_id": "a", "target_id": "b"},
                ],
            }
        )

        assert [card.id for card in workflow.model_cards] == ["a", "b"]
        assert [c.id for c in workflow.connections] == ["c2"]

    def test_usage_defaults(self) -> None:
        usage = usage_from_dict({"prompt_tokens": 3})

        assert usage.prompt_tokens == 3
        assert usage.total_tokens == 0
        assert usage_from_dict("nope").execution_time == 0

    def test_usage_null_and_invalid_counters(self) -> None:
        usage = usage_from_dict(
            {
                "prompt_tokens": None,
                "completion_tokens": "many",
                "total_tokens": 7,
                "execution_time": None,
                "tool_calls": [],
            }
        )

        assert usage.prompt_tokens == 0
        assert usage.completion_tokens == 0
        assert usage.total_tokens == 7
        assert usage.execution_time == 0
        assert usage.tool_calls == 0
