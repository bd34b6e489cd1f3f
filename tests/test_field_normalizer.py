"""Tests for field alias resolution and scalar-or-list coercion."""

import pytest

from artifact_engine.core.field_normalizer import (
    LOTO_FIELDS,
    LOTO_SEQUENCES,
    WORK_ORDER_FIELDS,
    WORK_ORDER_SEQUENCES,
    alias_table,
    has_field,
    normalize,
    resolve_field,
    to_array,
)

WORK_ORDER_SNAKE = {
    "work_order_number": "WO-1001",
    "equipment_tag": "P-101",
    "priority": "high",
    "symptoms": "vibration",
    "required_parts": [{"part_number": "MS-22", "description": "Mechanical seal", "quantity": 1}],
    "procedure_steps": ["Isolate pump", "Replace seal"],
    "unknown_field": "dropped",
}

WORK_ORDER_CAMEL = {
    "workOrderNumber": "WO-1001",
    "equipmentTag": "P-101",
    "priority": "high",
    "symptoms": "vibration",
    "requiredParts": [{"part_number": "MS-22", "description": "Mechanical seal", "quantity": 1}],
    "procedureSteps": ["Isolate pump", "Replace seal"],
}


class TestToArray:
    def test_string_is_wrapped(self):
        assert to_array("a") == ["a"]

    def test_list_is_unchanged(self):
        value = ["a", "b"]
        assert to_array(value) is value

    def test_none_is_empty(self):
        assert to_array(None) == []

    def test_tuple_becomes_list(self):
        assert to_array(("a", "b")) == ["a", "b"]

    def test_other_scalar_is_wrapped(self):
        assert to_array(3) == [3]
        assert to_array({"k": "v"}) == [{"k": "v"}]


class TestResolveField:
    def test_first_present_alias_wins(self):
        raw = {"requiredPpe": ["gloves"], "ppe_required": ["goggles"]}
        assert resolve_field(raw, LOTO_FIELDS["ppe"]) == ("ppe_required", ["goggles"])

    def test_null_counts_as_present(self):
        raw = {"ppe": None, "requiredPpe": ["gloves"]}
        assert resolve_field(raw, LOTO_FIELDS["ppe"]) == ("ppe", None)

    def test_absent(self):
        assert resolve_field({}, LOTO_FIELDS["ppe"]) == (None, None)


class TestNormalize:
    def test_projects_onto_canonical_names(self):
        result = normalize(WORK_ORDER_CAMEL, WORK_ORDER_FIELDS, WORK_ORDER_SEQUENCES)
        assert result["work_order_number"] == "WO-1001"
        assert result["equipment_tag"] == "P-101"
        assert result["required_parts"][0]["part_number"] == "MS-22"

    def test_absent_fields_stay_absent(self):
        result = normalize({"priority": "low"}, WORK_ORDER_FIELDS, WORK_ORDER_SEQUENCES)
        assert result == {"priority": "low"}
        assert "symptoms" not in result

    def test_unknown_fields_are_dropped(self):
        result = normalize(WORK_ORDER_SNAKE, WORK_ORDER_FIELDS, WORK_ORDER_SEQUENCES)
        assert "unknown_field" not in result

    def test_only_sequence_fields_are_coerced(self):
        result = normalize(WORK_ORDER_SNAKE, WORK_ORDER_FIELDS, WORK_ORDER_SEQUENCES)
        assert result["symptoms"] == ["vibration"]
        assert result["priority"] == "high"

    def test_present_null_sequence_becomes_empty(self):
        result = normalize({"hazards": None}, LOTO_FIELDS, LOTO_SEQUENCES)
        assert result == {"hazards": []}

    def test_does_not_modify_input(self):
        raw = dict(WORK_ORDER_CAMEL)
        normalize(raw, WORK_ORDER_FIELDS, WORK_ORDER_SEQUENCES)
        assert raw == WORK_ORDER_CAMEL

    @pytest.mark.parametrize("fixture", [WORK_ORDER_SNAKE, WORK_ORDER_CAMEL])
    def test_idempotent(self, fixture):
        once = normalize(fixture, WORK_ORDER_FIELDS, WORK_ORDER_SEQUENCES)
        twice = normalize(once, WORK_ORDER_FIELDS, WORK_ORDER_SEQUENCES)
        assert twice == once

    def test_idempotent_for_loto_aliases(self):
        raw = {"isolationSteps": {"point": "MCC-4"}, "requiredPpe": "gloves", "hazards": "arc flash"}
        once = normalize(raw, LOTO_FIELDS, LOTO_SEQUENCES)
        assert normalize(once, LOTO_FIELDS, LOTO_SEQUENCES) == once

    def test_snake_and_camel_normalize_equal(self):
        snake = normalize(WORK_ORDER_SNAKE, WORK_ORDER_FIELDS, WORK_ORDER_SEQUENCES)
        camel = normalize(WORK_ORDER_CAMEL, WORK_ORDER_FIELDS, WORK_ORDER_SEQUENCES)
        assert snake == camel


class TestAliasTable:
    def test_canonical_name_is_first_candidate(self):
        table = alias_table(required_parts=("requiredParts", "required_parts"))
        assert table["required_parts"] == ("required_parts", "requiredParts")

    def test_is_read_only(self):
        with pytest.raises(TypeError):
            WORK_ORDER_FIELDS["priority"] = ("prio",)


class TestHasField:
    def test_none_value_is_not_present(self):
        assert has_field({"priority": None}, "priority") is False

    def test_any_name_matches(self):
        assert has_field({"equipmentTag": "P-1"}, "equipment_tag", "equipmentTag") is True

    def test_non_mapping(self):
        assert has_field("text", "priority") is False
