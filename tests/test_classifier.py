"""Tests for structural classification of unwrapped responses."""

import pytest

from artifact_engine.core.classifier import SIGNATURES, classify, match_signature
from artifact_engine.core.schemas_artifacts import (
    ArtifactKind,
    ClassificationSource,
    UnwrappedResponse,
)


def _untagged(data, responses=None):
    return UnwrappedResponse(type=None, data=data, responses=responses)


class TestExplicitTag:
    def test_multi_response_tag_wins_over_data_shape(self):
        result = classify(UnwrappedResponse(type="multi_response", data={"work_order_number": "WO-1"}))
        assert result.kind is ArtifactKind.MULTI_RESPONSE
        assert result.source is ClassificationSource.EXPLICIT_TAG

    def test_recognized_tag_is_trusted(self):
        # LOTO-shaped data, but the tag says checklist
        result = classify(UnwrappedResponse(type="checklist", data={"isolation_points": ["x"]}))
        assert result.kind is ArtifactKind.CHECKLIST
        assert result.source is ClassificationSource.EXPLICIT_TAG

    @pytest.mark.parametrize("kind", [k for k in ArtifactKind])
    def test_every_kind_is_recognized(self, kind):
        assert classify(UnwrappedResponse(type=kind.value, data={})).kind is kind

    def test_unknown_tag_falls_through_to_structure(self):
        result = classify(UnwrappedResponse(type="gantt_chart", data={"work_order_number": "WO-1"}))
        assert result.kind is ArtifactKind.WORK_ORDER
        assert result.source is ClassificationSource.STRUCTURAL_SIGNATURE


class TestStructuralSignatures:
    def test_signature_order(self):
        assert [kind for kind, _ in SIGNATURES] == [
            ArtifactKind.WORK_ORDER,
            ArtifactKind.LOTO_PROCEDURE,
            ArtifactKind.CHECKLIST,
            ArtifactKind.EQUIPMENT_CARD,
            ArtifactKind.SELECTION,
            ArtifactKind.INFO_MESSAGE,
        ]

    def test_work_order_beats_loto(self):
        data = {"work_order_number": "WO-7", "isolation_points": [{"tag": "MCC-4"}]}
        assert classify(_untagged(data)).kind is ArtifactKind.WORK_ORDER

    @pytest.mark.parametrize(
        "data",
        [
            {"work_order_number": "WO-1"},
            {"workOrderNumber": "WO-1"},
            {"equipment_tag": "P-101", "priority": "high"},
            {"equipmentTag": "P-101", "priority": "high"},
            {"equipmentName": "Feed pump", "procedureSteps": ["Isolate"]},
        ],
    )
    def test_work_order(self, data):
        assert match_signature(data) is ArtifactKind.WORK_ORDER

    def test_equipment_tag_alone_is_not_a_work_order(self):
        assert match_signature({"equipment_tag": "P-101"}) is None

    @pytest.mark.parametrize(
        "data",
        [
            {"isolation_points": []},
            {"isolationSteps": [{"point": "V-12"}]},
            {"equipment_tag": "P-101", "hazards": ["electrical"], "requiredPpe": ["gloves"]},
        ],
    )
    def test_loto_procedure(self, data):
        assert match_signature(data) is ArtifactKind.LOTO_PROCEDURE

    def test_checklist_needs_items_and_title(self):
        assert match_signature({"title": "Pre-Start", "items": ["Check oil"]}) is ArtifactKind.CHECKLIST
        assert match_signature({"title": "Pre-Start", "items": []}) is None
        assert match_signature({"items": ["Check oil"]}) is None

    def test_equipment_card(self):
        data = {"tag": "P-101", "name": "Feed pump", "type": "pump", "specifications": {"flow": "20 m3/h"}}
        assert match_signature(data) is ArtifactKind.EQUIPMENT_CARD

    def test_equipment_card_needs_details(self):
        assert match_signature({"tag": "P-101", "name": "Feed pump", "type": "pump"}) is None

    def test_selection(self):
        assert match_signature({"question": "Which pump?", "options": [{"id": "a"}]}) is ArtifactKind.SELECTION

    @pytest.mark.parametrize("field", ["message", "content", "analysis", "text", "answer"])
    def test_message_fields(self, field):
        assert match_signature({field: "Check the coupling alignment."}) is ArtifactKind.INFO_MESSAGE

    def test_non_string_message_does_not_match(self):
        assert match_signature({"message": {"nested": True}}) is None


class TestFallbacks:
    def test_untagged_responses_list_is_multi(self):
        result = classify(_untagged({"responses": []}))
        assert result.kind is ArtifactKind.MULTI_RESPONSE
        assert result.source is ClassificationSource.STRUCTURAL_SIGNATURE

    def test_sibling_responses_is_multi(self):
        result = classify(_untagged({}, responses=[{"type": "checklist"}]))
        assert result.kind is ArtifactKind.MULTI_RESPONSE

    @pytest.mark.parametrize("data", [{"foo": "bar"}, "plain text", None, [1, 2, 3], 42])
    def test_anything_else_falls_back_to_info_message(self, data):
        result = classify(_untagged(data))
        assert result.kind is ArtifactKind.INFO_MESSAGE
        assert result.source is ClassificationSource.FALLBACK

    def test_deterministic(self):
        data = {"equipment_tag": "P-101", "priority": "low", "hazards": ["x"], "ppe": ["y"]}
        results = {classify(_untagged(data)) for _ in range(5)}
        assert len(results) == 1
