"""Tests for plain-text and JSON artifact export."""

import json

from artifact_engine.core.artifact_builders import (
    build_checklist,
    build_document_output,
    build_equipment_card,
    build_loto_procedure,
    build_work_order,
)
from artifact_engine.core.artifact_export import artifact_to_json, artifact_to_text
from artifact_engine.core.multi_response import compose
from artifact_engine.core.schemas_artifacts import InfoMessageArtifact, MultiResponseArtifact


class TestArtifactToText:
    def test_work_order(self):
        artifact = build_work_order(
            {
                "work_order_number": "WO-12",
                "equipment_tag": "XFMR-12",
                "equipment_name": "Main transformer",
                "priority": "urgent",
                "symptoms": "overheating",
                "steps": ["Isolate", {"description": "Sample oil", "critical": True}],
            }
        )
        text = artifact_to_text(artifact)
        assert text.startswith("WORK ORDER WO-12")
        assert "Equipment: Main transformer (XFMR-12)" in text
        assert "Priority: High" in text
        assert "  - overheating" in text
        assert "  2. Sample oil [CRITICAL]" in text

    def test_work_order_without_tag(self):
        text = artifact_to_text(build_work_order({}))
        assert "Equipment: Equipment\n" in text

    def test_loto(self):
        artifact = build_loto_procedure(
            {
                "equipment_tag": "P-101",
                "isolation_points": [{"tag": "MCC-4", "type": "electrical", "action": "Open", "verification": "Test dead"}],
            }
        )
        text = artifact_to_text(artifact)
        assert "  1. MCC-4 (electrical): Open" in text
        assert "Verify: Test dead" in text

    def test_checklist_nesting(self):
        artifact = build_checklist(
            {"title": "Pre-Start", "items": [{"text": "Guards", "checked": True, "sub_items": ["Coupling"]}]}
        )
        text = artifact_to_text(artifact)
        assert text.splitlines()[0] == "PRE-START"
        assert "  [x] Guards" in text
        assert "    [ ] Coupling" in text

    def test_info_message(self):
        text = artifact_to_text(InfoMessageArtifact(title="Note", message="Check oil", suggestions=["Retry"]))
        assert text == "Note\nCheck oil\n\nSuggestions:\n  - Retry"

    def test_generic_fallback(self):
        artifact = build_equipment_card({"tag": "P-101", "type": "pump", "specifications": {"flow": "20 m3/h"}})
        text = artifact_to_text(artifact)
        assert "Tag: P-101" in text
        assert "Specifications:" in text
        assert "  Flow: 20 m3/h" in text
        assert "Kind" not in text

    def test_multi_response_joins_children(self):
        artifact = MultiResponseArtifact(
            responses=compose([{"answer": "first"}, {"answer": "second"}])
        )
        assert artifact_to_text(artifact) == "first\n\n---\n\nsecond"

    def test_document_output(self):
        artifact = build_document_output(
            {
                "title": "Shift report",
                "date": "2024-05-01",
                "sections": [
                    {"type": "heading", "content": "Summary"},
                    {"type": "paragraph", "content": "Pump P-101 restarted."},
                    {"type": "table", "table": {"headers": ["Tag", "Status"], "rows": [["P-101", "OK"]]}},
                    {"type": "divider"},
                ],
                "footer": "End of report",
            }
        )
        text = artifact_to_text(artifact)
        assert text.startswith("SHIFT REPORT\nDate: 2024-05-01")
        assert "\nSUMMARY\n" in text
        assert "Pump P-101 restarted." in text
        assert "Tag | Status\nP-101 | OK" in text
        assert text.endswith("End of report")


class TestArtifactToJson:
    def test_includes_kind(self):
        data = json.loads(artifact_to_json(build_work_order({"priority": "emergency"})))
        assert data["kind"] == "work_order"
        assert data["priority"] == "Critical"
        assert data["work_order_number"] == "WO-DRAFT"

    def test_multi_response_children_are_tagged(self):
        artifact = MultiResponseArtifact(responses=compose([{"answer": "a"}]))
        data = json.loads(artifact_to_json(artifact))
        assert data["responses"][0]["kind"] == "info_message"
