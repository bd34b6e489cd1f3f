"""Tests for multi-response composition and response resolution."""

import json
import logging

import pytest

from artifact_engine.core.errors import UpstreamError
from artifact_engine.core.multi_response import (
    EXPORTABLE_KINDS,
    CITATION_TITLE,
    NO_RESPONSE_TEXT,
    compose,
    resolve_response,
)
from artifact_engine.core.schemas_artifacts import (
    ArtifactKind,
    ChecklistArtifact,
    ClassificationSource,
    DiagnosticQuestionsArtifact,
    DocumentOutputArtifact,
    InfoMessageArtifact,
    MultiResponseArtifact,
    WorkOrderArtifact,
)


class TestCompose:
    def test_preserves_order_and_length(self):
        children = [
            {"type": "checklist", "data": {"title": "A", "items": []}},
            {"totally": "unclassifiable"},
            "bare string",
            None,
            {"type": "work_order", "data": {"work_order_number": "WO-1"}},
        ]
        artifacts = compose(children)
        assert len(artifacts) == len(children)
        assert [a.kind for a in artifacts] == [
            "checklist",
            "info_message",
            "info_message",
            "info_message",
            "work_order",
        ]

    def test_nested_multi_response_child(self):
        children = [
            {"type": "multi_response", "responses": [{"answer": "inner"}]},
        ]
        artifacts = compose(children)
        assert isinstance(artifacts[0], MultiResponseArtifact)
        assert artifacts[0].responses[0].message == "inner"

    def test_empty_with_citations(self):
        artifacts = compose([], {"sources": {"manuals": [{"title": "Manual A", "page": 12}]}})
        assert len(artifacts) == 1
        citation = artifacts[0]
        assert isinstance(citation, InfoMessageArtifact)
        assert citation.title == CITATION_TITLE
        assert "Manual A p.12" in citation.message
        assert citation.references[0].title == "Manual A"

    def test_citation_preview_is_limited(self):
        manuals = [{"title": f"Manual {i}", "page": i} for i in range(7)]
        citation = compose([], {"sources": {"manuals": manuals}})[0]
        assert "Manual 4 p.4" in citation.message
        assert "Manual 5" not in citation.message
        assert "+2 more" in citation.message
        assert len(citation.references) == 7

    def test_manual_without_page(self):
        citation = compose([], {"sources": {"manuals": [{"title": "Manual B"}]}})[0]
        assert citation.message.endswith("Sources found: Manual B")

    def test_totally_empty(self):
        assert compose([], None) == []
        assert compose([], {"sources": {"manuals": []}}) == []


class TestResolveResponse:
    def test_nested_multi_checklist_scenario(self):
        resolved = resolve_response(
            {
                "response": {
                    "type": "multi_response",
                    "responses": [{"type": "checklist", "data": {"title": "Pre-Start", "items": []}}],
                }
            }
        )
        assert isinstance(resolved.artifact, MultiResponseArtifact)
        assert len(resolved.artifact.responses) == 1
        child = resolved.artifact.responses[0]
        assert isinstance(child, ChecklistArtifact)
        assert child.title == "Pre-Start"
        assert child.items == []

    def test_untyped_answer_scenario(self):
        resolved = resolve_response({"answer": "No type here, just a string."})
        assert isinstance(resolved.artifact, InfoMessageArtifact)
        assert resolved.artifact.message == "No type here, just a string."
        assert resolved.text == "No type here, just a string."
        assert resolved.classification_source is ClassificationSource.STRUCTURAL_SIGNATURE

    def test_work_order_scenario(self):
        resolved = resolve_response(
            {"type": "work_order", "data": {"equipment_tag": "XFMR-12", "priority": "urgent", "symptoms": "overheating"}}
        )
        assert isinstance(resolved.artifact, WorkOrderArtifact)
        assert resolved.artifact.priority == "High"
        assert resolved.artifact.symptoms == ["overheating"]
        assert resolved.exportable is True
        assert resolved.classification_source is ClassificationSource.EXPLICIT_TAG

    def test_upstream_error_short_circuits(self):
        with pytest.raises(UpstreamError) as exc_info:
            resolve_response({"success": False, "error": "Knowledge base not found", "type": "checklist"})
        assert str(exc_info.value) == "Knowledge base not found"

    def test_failure_without_error_text_is_resolved(self):
        resolved = resolve_response({"success": False, "answer": "partial"})
        assert resolved.artifact.message == "partial"

    def test_empty_multi_response_text(self):
        resolved = resolve_response({"type": "multi_response", "responses": []})
        assert resolved.artifact.responses == []
        assert resolved.text == NO_RESPONSE_TEXT

    def test_fallback_payload(self):
        resolved = resolve_response({"weird": [1, 2]})
        assert resolved.classified_as is ArtifactKind.INFO_MESSAGE
        assert resolved.classification_source is ClassificationSource.FALLBACK
        assert resolved.exportable is False
        assert '"weird"' in resolved.artifact.message

    def test_dynamic_form_conversion_keeps_classification(self):
        resolved = resolve_response(
            {"type": "dynamic_form", "data": {"formType": "work_order", "sections": []}}
        )
        assert resolved.classified_as is ArtifactKind.DYNAMIC_FORM
        assert resolved.artifact.kind == "work_order"

    def test_sources_are_attached(self):
        resolved = resolve_response(
            {
                "answer": "Check the seal.",
                "sources": {
                    "manuals": [{"title": "Pump manual", "page": "12"}],
                    "searchedManualCount": 4,
                },
            }
        )
        assert resolved.sources.manuals[0].page == 12
        assert resolved.sources.searched_manual_count == 4

    def test_malformed_sources_are_ignored(self):
        resolved = resolve_response({"answer": "ok", "sources": "nope"})
        assert resolved.sources is None


class TestOutOfRangeNumbers:
    """JSON numbers like 1e400 parse to inf and must not break resolution."""

    def test_work_order_reference_page_and_step(self):
        payload = json.loads(
            '{"type": "work_order", "data": {"work_order_number": "WO-9",'
            ' "references": [{"title": "Pump manual", "page": 1e400}],'
            ' "procedure_steps": [{"step": 1e400, "description": "Drain casing"}]}}'
        )
        resolved = resolve_response(payload)

        artifact = resolved.artifact
        assert isinstance(artifact, WorkOrderArtifact)
        assert artifact.references[0].title == "Pump manual"
        assert artifact.references[0].page is None
        assert artifact.procedure_steps[0].description == "Drain casing"
        assert artifact.procedure_steps[0].step is None

    def test_citation_with_infinite_manual_page(self):
        meta = json.loads('{"sources": {"manuals": [{"title": "Manual A", "page": 1e400}]}}')
        artifacts = compose([], meta)

        assert len(artifacts) == 1
        assert "Manual A" in artifacts[0].message
        assert artifacts[0].references[0].page is None

    def test_sources_block_with_infinite_page(self):
        payload = json.loads('{"answer": "ok", "sources": {"manuals": [{"title": "M", "page": -1e400}]}}')
        resolved = resolve_response(payload)
        assert resolved.sources.manuals[0].page is None


class TestAdditionalKinds:
    def test_diagnostic_questions_are_not_demoted(self):
        resolved = resolve_response(
            {
                "type": "diagnostic_questions",
                "data": {
                    "title": "Diagnose",
                    "questions": [
                        {
                            "id": "q1",
                            "question": "Is the pump running?",
                            "options": [{"id": "yes", "label": "Yes"}, {"id": "no", "label": "No"}],
                        }
                    ],
                },
            }
        )

        assert isinstance(resolved.artifact, DiagnosticQuestionsArtifact)
        assert resolved.classified_as is ArtifactKind.DIAGNOSTIC_QUESTIONS
        assert resolved.classification_source is ClassificationSource.EXPLICIT_TAG
        assert resolved.artifact.title == "Diagnose"
        assert [o.label for o in resolved.artifact.questions[0].options] == ["Yes", "No"]
        assert resolved.exportable is False

    def test_document_output_is_exportable(self):
        resolved = resolve_response(
            {
                "type": "document_output",
                "data": {"title": "Shift report", "sections": [{"type": "paragraph", "content": "All normal"}]},
            }
        )

        assert isinstance(resolved.artifact, DocumentOutputArtifact)
        assert resolved.classification_source is ClassificationSource.EXPLICIT_TAG
        assert resolved.exportable is True
        assert ArtifactKind.DOCUMENT_OUTPUT in EXPORTABLE_KINDS


class TestResponseId:
    def test_generated_when_not_given(self):
        first = resolve_response({"answer": "one"})
        second = resolve_response({"answer": "two"})
        assert first.response_id
        assert first.response_id != second.response_id

    def test_given_id_is_returned_and_logged(self, caplog, monkeypatch):
        logger = logging.getLogger("artifact_engine.core.multi_response")
        monkeypatch.setattr(logger, "propagate", True)
        with caplog.at_level(logging.INFO, logger="artifact_engine.core.multi_response"):
            resolved = resolve_response({"answer": "ok"}, response_id="resp-42")

        assert resolved.response_id == "resp-42"
        resolved_records = [r for r in caplog.records if r.getMessage().startswith("Resolved response")]
        assert resolved_records[-1].response_id == "resp-42"
        assert resolved_records[-1].extra_data["classified_as"] == "info_message"
