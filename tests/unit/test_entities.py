"""
Change model and experiment payload tests.
"""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from absmartly_ssr.adapters.logger import MemoryLogger
from absmartly_ssr.domain.entities import DOMChange, ExperimentData
from absmartly_ssr.domain.serialize import (
    deserialize_experiments,
    experiments_from_payload,
    serialize_experiments,
)


class TestDOMChange:
    """Test DOMChange construction."""

    def test_defaults(self) -> None:
        change = DOMChange(selector="h1", type="text", value="x")
        assert change.position == "append"
        assert change.trigger_on_view is False
        assert change.target is None

    def test_target_selector_alias(self) -> None:
        change = DOMChange.from_dict(
            {"selector": "#a", "type": "move", "targetSelector": "#b", "position": "before"}
        )
        assert change.target == "#b"
        assert change.position == "before"

    def test_target_wins_over_alias(self) -> None:
        change = DOMChange.from_dict(
            {"selector": "#a", "type": "move", "target": "#t", "targetSelector": "#b"}
        )
        assert change.target == "#t"

    def test_empty_position_defaults(self) -> None:
        change = DOMChange.from_dict({"selector": "p", "type": "create", "position": None})
        assert change.position == "append"

    def test_unknown_keys_ignored(self) -> None:
        change = DOMChange.from_dict({"selector": "p", "type": "text", "waitForElement": True})
        assert change.selector == "p"

    def test_missing_selector_and_type_are_blank(self) -> None:
        change = DOMChange.from_dict({"type": "styleRules", "rules": "p{}"})
        assert change.selector == ""
        assert DOMChange.from_dict({"selector": None, "type": None}).type == ""

    def test_non_mapping_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DOMChange.from_dict("text")  # type: ignore[arg-type]


class TestExperimentData:
    """Test ExperimentData construction."""

    def test_unassigned_by_default(self) -> None:
        exp = ExperimentData(name="e")
        assert exp.treatment == -1
        assert exp.is_assigned is False
        assert exp.changes == []

    def test_null_fields(self) -> None:
        exp = ExperimentData.from_dict({"name": "e", "treatment": None, "changes": None})
        assert exp.treatment == -1
        assert exp.changes == []

    def test_changes_parsed(self) -> None:
        exp = ExperimentData.from_dict(
            {"name": "e", "treatment": 1, "changes": [{"selector": "h1", "type": "text", "value": "x"}]}
        )
        assert exp.is_assigned is True
        assert exp.changes[0].selector == "h1"


class TestSerialization:
    """Test experiment payload (de)serialization."""

    def test_serialize_shape(self) -> None:
        exp = ExperimentData(
            name="e", treatment=1, changes=[DOMChange(selector="h1", type="text", value="x")]
        )
        payload = json.loads(serialize_experiments([exp]))

        assert payload["experiments"][0]["name"] == "e"
        assert payload["experiments"][0]["changes"][0]["value"] == "x"
        assert "variant" not in payload["experiments"][0]

    def test_deserialize(self) -> None:
        exp = ExperimentData(name="e", treatment=2, variant="C")
        assert deserialize_experiments(serialize_experiments([exp])) == [exp]

    def test_deserialize_bare_list(self) -> None:
        result = deserialize_experiments('[{"name": "a", "treatment": 0}]')
        assert [e.name for e in result] == ["a"]

    def test_selectorless_change_keeps_experiment(self) -> None:
        logger = MemoryLogger()
        payload = json.dumps(
            [
                {
                    "name": "promo",
                    "treatment": 1,
                    "changes": [
                        {"type": "styleRules", "rules": ".promo{color:red}"},
                        {"selector": "h1", "type": "text", "value": "Sale"},
                    ],
                }
            ]
        )
        result = deserialize_experiments(payload, logger)

        assert [e.name for e in result] == ["promo"]
        assert [c.selector for c in result[0].changes] == ["", "h1"]
        assert logger.messages("error") == []

    def test_invalid_json(self) -> None:
        logger = MemoryLogger()
        assert deserialize_experiments("{not json", logger) == []
        assert logger.has("error", "Failed to deserialize experiment data")

    def test_invalid_entries_skipped(self) -> None:
        logger = MemoryLogger()
        result = experiments_from_payload(
            {"experiments": [{"treatment": 1}, {"name": "ok", "treatment": 1}]}, logger
        )
        assert [e.name for e in result] == ["ok"]
        assert logger.has("error", "Skipping invalid experiment entry")

    def test_payload_must_be_list(self) -> None:
        logger = MemoryLogger()
        assert experiments_from_payload("nope", logger) == []
        assert logger.has("error", "must be a list")
