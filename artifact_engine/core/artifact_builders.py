"""Builders that turn normalized upstream payloads into canonical artifacts.

One builder per artifact kind. Builders are total: a payload that cannot be
projected onto its artifact degrades to an InfoMessage holding the raw
payload, and malformed list entries (a part, a step, an option) are skipped
rather than failing the whole artifact.
"""

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from artifact_engine.core.config import get_settings
from artifact_engine.core.field_normalizer import (
    AliasTable,
    CHECKLIST_FIELDS,
    CHECKLIST_ITEM_FIELDS,
    CHECKLIST_ITEM_SEQUENCES,
    CHECKLIST_SEQUENCES,
    CHECKPOINT_FIELDS,
    CITATION_FIELDS,
    CONNECTION_FIELDS,
    DATA_TABLE_FIELDS,
    DATA_TABLE_SEQUENCES,
    DECISION_CRITERION_FIELDS,
    DECISION_MATRIX_FIELDS,
    DECISION_MATRIX_SEQUENCES,
    DECISION_OPTION_FIELDS,
    DIAGNOSTIC_OPTION_FIELDS,
    DIAGNOSTIC_QUESTION_FIELDS,
    DIAGNOSTIC_QUESTION_SEQUENCES,
    DIAGNOSTIC_QUESTIONS_FIELDS,
    DIAGNOSTIC_QUESTIONS_SEQUENCES,
    DOCUMENT_OUTPUT_FIELDS,
    DOCUMENT_OUTPUT_SEQUENCES,
    DOCUMENT_SECTION_FIELDS,
    DOCUMENT_SECTION_SEQUENCES,
    DYNAMIC_FORM_FIELDS,
    DYNAMIC_FORM_SEQUENCES,
    EQUIPMENT_FIELDS,
    EQUIPMENT_GRID_FIELDS,
    EQUIPMENT_GRID_SEQUENCES,
    EQUIPMENT_SEQUENCES,
    ERROR_MESSAGE_FIELDS,
    FORM_FIELD_FIELDS,
    FORM_FIELD_SEQUENCES,
    FORM_SECTION_FIELDS,
    FORM_SECTION_SEQUENCES,
    FORM_TOTAL_FIELDS,
    IMAGE_CARD_FIELDS,
    IMAGE_CARD_SEQUENCES,
    INFO_MESSAGE_FIELDS,
    INFO_MESSAGE_SEQUENCES,
    INSTRUMENT_FIELDS,
    ISOLATION_POINT_FIELDS,
    LOTO_FIELDS,
    LOTO_SEQUENCES,
    MANUAL_CITATION_FIELDS,
    MANUAL_CITATION_SEQUENCES,
    PART_FIELDS,
    RCA_FIELDS,
    RCA_SEQUENCES,
    REFERENCE_FIELDS,
    RESEARCH_FIELDS,
    RESEARCH_SEQUENCES,
    SELECTION_FIELDS,
    SELECTION_OPTION_FIELDS,
    SELECTION_SEQUENCES,
    STEP_FIELDS,
    TABLE_COLUMN_FIELDS,
    TABLE_ROW_FIELDS,
    WORK_ORDER_FIELDS,
    WORK_ORDER_SEQUENCES,
    has_field,
    normalize,
    resolve_field,
    to_array,
)
from artifact_engine.core.logging import get_logger, log_with_context
from artifact_engine.core.schemas_artifacts import (
    ArtifactKind,
    ArtifactModel,
    ChecklistArtifact,
    ChecklistItem,
    Checkpoint,
    Citation,
    DataTableArtifact,
    DecisionCriterion,
    DecisionMatrixArtifact,
    DecisionOption,
    DiagnosticOption,
    DiagnosticQuestion,
    DiagnosticQuestionsArtifact,
    DocumentOutputArtifact,
    DocumentSection,
    DocumentTable,
    DynamicFormArtifact,
    EquipmentCardArtifact,
    EquipmentConnection,
    EquipmentGridArtifact,
    ErrorMessageArtifact,
    FormField,
    FormFieldOption,
    FormSection,
    FormTotal,
    ImageCardArtifact,
    InfoMessageArtifact,
    Instrument,
    IsolationPoint,
    LotoProcedureArtifact,
    ManualCitationArtifact,
    Part,
    RCAArtifact,
    Reference,
    ResearchResultArtifact,
    SelectionArtifact,
    SelectionOption,
    Step,
    TableColumn,
    TableRow,
    WorkOrderArtifact,
)

logger = get_logger(__name__)

# Case-insensitive; anything else maps to Medium
PRIORITY_SYNONYMS = MappingProxyType(
    {
        "critical": "Critical",
        "emergency": "Critical",
        "high": "High",
        "urgent": "High",
        "medium": "Medium",
        "normal": "Medium",
        "low": "Low",
    }
)

ANALYSIS_MARKERS = ("ROOT CAUSE", "KNOWLEDGE BASE", "RECOMMENDATION")
ANALYSIS_SUGGESTIONS = ("Generate Work Order", "Generate LOTO Procedure", "View Checklist")

TRUTHY_STRINGS = frozenset({"true", "yes", "y", "1", "required"})

FALLBACK_TITLE = "Response"


# =============================================================================
# Value helpers
# =============================================================================


def normalize_priority(value: Any) -> str:
    """Map an upstream priority onto Critical/High/Medium/Low."""
    if isinstance(value, str):
        return PRIORITY_SYNONYMS.get(value.strip().lower(), "Medium")
    return "Medium"


def pretty_json(payload: Any) -> str:
    try:
        return json.dumps(payload, indent=2, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(payload)


def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, bool)):
        return str(value)
    return pretty_json(value)


def _optional_text(value: Any) -> str | None:
    return _text(value) or None


def _texts(values: Iterable[Any]) -> list[str]:
    """Flatten a list of strings or small objects into display strings."""
    texts = []
    for value in values:
        if value is None:
            continue
        if isinstance(value, Mapping):
            _, text = resolve_field(
                value, ("text", "description", "name", "title", "action", "item")
            )
            texts.append(_text(text) if text is not None else pretty_json(value))
        else:
            texts.append(_text(value))
    return texts


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_STRINGS
    if isinstance(value, (int, float)):
        return value != 0
    return False


def _string_map(value: Any) -> dict[str, str]:
    if not isinstance(value, Mapping):
        return {}
    return {str(k): _text(v) for k, v in value.items() if v is not None}


def _build_items(
    model: type[ArtifactModel],
    values: Iterable[Any],
    table: AliasTable,
    text_field: str,
    sequences: Iterable[str] = (),
    id_prefix: str | None = None,
    prepare: Callable[[dict[str, Any], int], dict[str, Any]] | None = None,
) -> list:
    """
    Build a list of component models from raw list entries.

    Args:
        model: Component model to validate each entry against
        values: Raw entries (objects or plain strings)
        table: Alias table for the component
        text_field: Field a plain-string entry is promoted to
        sequences: Component fields coerced to lists
        id_prefix: When set, entries without an id get "<prefix>-<n>"
        prepare: Hook to adjust normalized fields before validation

    Returns:
        Validated components; malformed entries are skipped
    """
    items = []
    for index, value in enumerate(values):
        if value is None:
            continue
        if isinstance(value, Mapping):
            fields = normalize(value, table, sequences)
        else:
            fields = {text_field: _text(value)}
        if id_prefix and not fields.get("id"):
            fields["id"] = f"{id_prefix}-{index + 1}"
        if prepare is not None:
            fields = prepare(fields, index)
        try:
            items.append(model.model_validate(fields))
        except ValidationError as e:
            logger.warning(
                f"Skipping malformed {model.__name__} entry at index {index}",
                extra={"errors": e.error_count()},
            )
    return items


def _numbered(field: str) -> Callable[[dict[str, Any], int], dict[str, Any]]:
    """Prepare hook filling a missing sequence number from the entry position."""

    def prepare(fields: dict[str, Any], index: int) -> dict[str, Any]:
        if fields.get(field) is None:
            fields[field] = index + 1
        return fields

    return prepare


def _references(values: Iterable[Any]) -> list[Reference]:
    return _build_items(Reference, values, REFERENCE_FIELDS, "title")


def fallback_message(payload: Any, title: str = FALLBACK_TITLE) -> InfoMessageArtifact:
    """
    Wrap an unusable payload in an InfoMessage so it can still be shown.

    Strings are shown as-is; anything else is pretty-printed JSON.
    """
    message = payload if isinstance(payload, str) else pretty_json(payload)
    return InfoMessageArtifact(title=title, message=message)


# =============================================================================
# Work orders and procedures
# =============================================================================


def build_work_order(data: Mapping[str, Any]) -> WorkOrderArtifact:
    fields = normalize(data, WORK_ORDER_FIELDS, WORK_ORDER_SEQUENCES)

    estimated = _text(fields.get("estimated_duration"))
    hours = fields.get("estimated_hours")
    if not estimated and hours not in (None, ""):
        estimated = f"{_text(hours)} hours"

    return WorkOrderArtifact(
        work_order_number=_text(fields.get("work_order_number"))
        or get_settings().DRAFT_WORK_ORDER_NUMBER,
        equipment_tag=_text(fields.get("equipment_tag")),
        equipment_name=_text(fields.get("equipment_name")) or "Equipment",
        work_type=_text(fields.get("work_type")) or "Maintenance",
        priority=normalize_priority(fields.get("priority")),
        description=_text(fields.get("description")),
        symptoms=_texts(fields.get("symptoms", [])),
        required_parts=_build_items(
            Part, fields.get("required_parts", []), PART_FIELDS, "description"
        ),
        required_tools=_texts(fields.get("required_tools", [])),
        safety_requirements=_texts(fields.get("safety_requirements", [])),
        procedure_steps=_build_items(
            Step,
            fields.get("procedure_steps", []),
            STEP_FIELDS,
            "description",
            prepare=_numbered("step"),
        ),
        quality_checkpoints=_build_items(
            Checkpoint, fields.get("quality_checkpoints", []), CHECKPOINT_FIELDS, "checkpoint"
        ),
        estimated_duration=estimated or "TBD",
        lockout_required=_flag(fields.get("lockout_required")),
        atex_compliance=_flag(fields.get("atex_compliance")),
        references=_references(fields.get("references", [])),
    )


def build_loto_procedure(data: Mapping[str, Any]) -> LotoProcedureArtifact:
    fields = normalize(data, LOTO_FIELDS, LOTO_SEQUENCES)

    return LotoProcedureArtifact(
        equipment_tag=_text(fields.get("equipment_tag")),
        equipment_name=_text(fields.get("equipment_name")) or "Equipment",
        procedure_number=_optional_text(fields.get("procedure_number")),
        location=_optional_text(fields.get("location")),
        scope=_optional_text(fields.get("scope")),
        estimated_duration=_optional_text(fields.get("estimated_duration")),
        hazard_summary=_optional_text(fields.get("hazard_summary")),
        hazards=_texts(fields.get("hazards", [])),
        ppe=_texts(fields.get("ppe", [])),
        pre_isolation_checks=_texts(fields.get("pre_isolation_checks", [])),
        isolation_points=_build_items(
            IsolationPoint,
            fields.get("isolation_points", []),
            ISOLATION_POINT_FIELDS,
            "action",
            prepare=_numbered("sequence"),
        ),
        verification_steps=_texts(fields.get("verification_steps", [])),
        reinstate_steps=_texts(fields.get("reinstate_steps", [])),
        special_precautions=_texts(fields.get("special_precautions", [])),
        warnings=_texts(fields.get("warnings", [])),
        authorized_personnel=_texts(fields.get("authorized_personnel", [])),
        drawing_reference=_optional_text(fields.get("drawing_reference")),
    )


def _checklist_items(values: Iterable[Any], id_prefix: str = "item") -> list[ChecklistItem]:
    def prepare(fields: dict[str, Any], index: int) -> dict[str, Any]:
        fields["text"] = _text(fields.get("text"))
        fields["checked"] = _flag(fields.get("checked"))
        fields["sub_items"] = _checklist_items(
            fields.get("sub_items", []), id_prefix=f"{fields['id']}"
        )
        return fields

    return _build_items(
        ChecklistItem,
        values,
        CHECKLIST_ITEM_FIELDS,
        "text",
        sequences=CHECKLIST_ITEM_SEQUENCES,
        id_prefix=id_prefix,
        prepare=prepare,
    )


def build_checklist(data: Mapping[str, Any]) -> ChecklistArtifact:
    fields = normalize(data, CHECKLIST_FIELDS, CHECKLIST_SEQUENCES)

    return ChecklistArtifact(
        title=_text(fields.get("title")) or "Checklist",
        description=_optional_text(fields.get("description")),
        items=_checklist_items(fields.get("items", [])),
        references=_references(fields.get("references", [])),
    )


# =============================================================================
# Equipment
# =============================================================================


def build_equipment_card(data: Mapping[str, Any]) -> EquipmentCardArtifact:
    fields = normalize(data, EQUIPMENT_FIELDS, EQUIPMENT_SEQUENCES)

    return EquipmentCardArtifact(
        tag=_text(fields.get("tag")),
        name=_optional_text(fields.get("name")),
        type=_text(fields.get("type")),
        subtype=_optional_text(fields.get("subtype")),
        description=_optional_text(fields.get("description")),
        manufacturer=_optional_text(fields.get("manufacturer")),
        model=_optional_text(fields.get("model")),
        drawing_number=_optional_text(fields.get("drawing_number")),
        connections=_build_items(
            EquipmentConnection, fields.get("connections", []), CONNECTION_FIELDS, "tag"
        ),
        instruments=_build_items(
            Instrument, fields.get("instruments", []), INSTRUMENT_FIELDS, "tag"
        ),
        specifications=_string_map(fields.get("specifications")),
        references=_references(fields.get("references", [])),
    )


def build_equipment_grid(data: Mapping[str, Any]) -> EquipmentGridArtifact:
    fields = normalize(data, EQUIPMENT_GRID_FIELDS, EQUIPMENT_GRID_SEQUENCES)

    group_by = fields.get("group_by")
    if group_by not in ("type", "drawing", "none"):
        group_by = "none"

    return EquipmentGridArtifact(
        title=_optional_text(fields.get("title")),
        equipment=[
            build_equipment_card(entry)
            for entry in fields.get("equipment", [])
            if isinstance(entry, Mapping)
        ],
        group_by=group_by,
    )


# =============================================================================
# Forms and tables
# =============================================================================


def is_work_order_form(data: Mapping[str, Any]) -> bool:
    """Return True if a dynamic form is really a work order in form clothing."""
    form_type = data.get("formType", data.get("form_type"))
    if form_type in ("work_order", "workOrder"):
        return True
    title = data.get("title")
    if isinstance(title, str) and ("work order" in title.lower() or "maintenance" in title.lower()):
        return True
    return has_field(data, "equipmentTag", "equipment_tag")


def work_order_fields_from_form(data: Mapping[str, Any]) -> dict[str, Any]:
    """
    Collect work order fields from the values of a dynamic form.

    Field ids become payload keys, so the usual work order aliases apply.
    """
    values: dict[str, Any] = {}
    for section in data.get("sections") or []:
        if not isinstance(section, Mapping):
            continue
        for field in section.get("fields") or []:
            if isinstance(field, Mapping) and "value" in field and field.get("id"):
                values[str(field["id"])] = field["value"]

    for key in ("equipmentTag", "equipment_tag"):
        if key in data:
            values.setdefault(key, data[key])

    metadata = data.get("metadata") if isinstance(data.get("metadata"), Mapping) else {}
    number_key, _ = resolve_field(values, WORK_ORDER_FIELDS["work_order_number"])
    if number_key is None and metadata.get("documentNumber"):
        values["work_order_number"] = metadata["documentNumber"]

    values.setdefault("priority", "urgent")
    if resolve_field(values, WORK_ORDER_FIELDS["work_type"])[0] is None:
        values["work_type"] = "corrective"
    if not values.get("description"):
        values["description"] = data.get("description") or ""
    return values


def _form_field(fields: dict[str, Any], index: int) -> dict[str, Any]:
    fields["type"] = _text(fields.get("type")) or "text"
    fields["label"] = _text(fields.get("label")) or _text(fields.get("id"))
    fields["required"] = _flag(fields.get("required"))
    fields["options"] = [
        FormFieldOption(
            value=_text(option.get("value")), label=_text(option.get("label", option.get("value")))
        )
        if isinstance(option, Mapping)
        else FormFieldOption(value=_text(option), label=_text(option))
        for option in fields.get("options", [])
        if option is not None
    ]
    return fields


def _form_section(fields: dict[str, Any], index: int) -> dict[str, Any]:
    fields["title"] = _text(fields.get("title"))
    fields["fields"] = _build_items(
        FormField,
        fields.get("fields", []),
        FORM_FIELD_FIELDS,
        "label",
        sequences=FORM_FIELD_SEQUENCES,
        id_prefix=f"{fields['id']}-field",
        prepare=_form_field,
    )
    return fields


def build_dynamic_form(data: Mapping[str, Any]) -> DynamicFormArtifact | WorkOrderArtifact:
    if is_work_order_form(data):
        logger.debug("Dynamic form carries a work order, converting")
        return build_work_order(work_order_fields_from_form(data))

    fields = normalize(data, DYNAMIC_FORM_FIELDS, DYNAMIC_FORM_SEQUENCES)
    metadata = fields.get("metadata") if isinstance(fields.get("metadata"), Mapping) else {}

    return DynamicFormArtifact(
        form_type=_text(fields.get("form_type")) or "custom",
        title=_text(fields.get("title")) or "Form",
        description=_optional_text(fields.get("description")),
        sections=_build_items(
            FormSection,
            fields.get("sections", []),
            FORM_SECTION_FIELDS,
            "title",
            sequences=FORM_SECTION_SEQUENCES,
            id_prefix="section",
            prepare=_form_section,
        ),
        totals=_build_items(FormTotal, fields.get("totals", []), FORM_TOTAL_FIELDS, "label"),
        document_number=_optional_text(
            metadata.get("documentNumber", metadata.get("document_number"))
        ),
        date=_optional_text(metadata.get("date")),
        due_date=_optional_text(metadata.get("dueDate", metadata.get("due_date"))),
        status=_optional_text(metadata.get("status")),
    )


def _table_column(fields: dict[str, Any], index: int) -> dict[str, Any]:
    key = _text(fields.get("key")) or _text(fields.get("label")) or f"col-{index + 1}"
    fields["key"] = key
    fields["label"] = _text(fields.get("label")) or key
    fields["type"] = _text(fields.get("type")) or "text"
    fields["sortable"] = _flag(fields.get("sortable"))
    return fields


def _table_rows(values: Iterable[Any], columns: list[TableColumn]) -> list[TableRow]:
    column_keys = [column.key for column in columns]
    rows = []
    for index, value in enumerate(values):
        row_id = f"row-{index + 1}"
        if isinstance(value, Mapping):
            fields = normalize(value, TABLE_ROW_FIELDS)
            if isinstance(fields.get("cells"), Mapping):
                cells = dict(fields["cells"])
            else:
                cells = {k: v for k, v in value.items() if k != "id"}
            row_id = _text(fields.get("id")) or row_id
        elif isinstance(value, list):
            cells = dict(zip(column_keys, value))
        else:
            continue
        rows.append(TableRow(id=row_id, cells=cells))
    return rows


def build_data_table(data: Mapping[str, Any]) -> DataTableArtifact:
    fields = normalize(data, DATA_TABLE_FIELDS, DATA_TABLE_SEQUENCES)
    columns = _build_items(
        TableColumn,
        fields.get("columns", []),
        TABLE_COLUMN_FIELDS,
        "key",
        prepare=_table_column,
    )

    return DataTableArtifact(
        title=_text(fields.get("title")) or "Table",
        description=_optional_text(fields.get("description")),
        columns=columns,
        rows=_table_rows(fields.get("rows", []), columns),
    )


# =============================================================================
# Research, analysis and media
# =============================================================================


def build_image_card(data: Mapping[str, Any]) -> ImageCardArtifact:
    fields = normalize(data, IMAGE_CARD_FIELDS, IMAGE_CARD_SEQUENCES)

    return ImageCardArtifact(
        title=_text(fields.get("title")) or "Image",
        description=_text(fields.get("description")),
        source_document=_optional_text(fields.get("source_document")),
        source_page=fields.get("source_page"),
        image_url=_optional_text(fields.get("image_url")),
        detected_equipment=_texts(fields.get("detected_equipment", [])),
    )


def build_research_result(data: Mapping[str, Any]) -> ResearchResultArtifact:
    fields = normalize(data, RESEARCH_FIELDS, RESEARCH_SEQUENCES)

    return ResearchResultArtifact(
        question=_text(fields.get("question")),
        answer=_text(fields.get("answer")),
        summary=_optional_text(fields.get("summary")),
        citations=_build_items(Citation, fields.get("citations", []), CITATION_FIELDS, "source"),
        related_topics=_texts(fields.get("related_topics", [])),
        confidence=fields.get("confidence"),
    )


def build_rca(data: Mapping[str, Any]) -> RCAArtifact:
    fields = normalize(data, RCA_FIELDS, RCA_SEQUENCES)

    return RCAArtifact(
        title=_text(fields.get("title")) or "Root Cause Analysis",
        equipment=_optional_text(fields.get("equipment")),
        issue=_optional_text(fields.get("issue")),
        analysis=_optional_text(fields.get("analysis")),
        root_cause=_optional_text(fields.get("root_cause")),
        factors=_texts(fields.get("factors", [])),
        recommendations=_texts(fields.get("recommendations", [])),
        steps=_texts(fields.get("steps", [])),
        severity=_optional_text(fields.get("severity")),
        confidence=fields.get("confidence"),
    )


def _decision_option(fields: dict[str, Any], index: int) -> dict[str, Any]:
    scores = {}
    raw_scores = fields.get("scores")
    if isinstance(raw_scores, Mapping):
        for criterion, score in raw_scores.items():
            try:
                scores[str(criterion)] = float(score)
            except (TypeError, ValueError, OverflowError):
                continue
    fields["scores"] = scores
    fields["recommended"] = _flag(fields.get("recommended"))
    return fields


def build_decision_matrix(data: Mapping[str, Any]) -> DecisionMatrixArtifact:
    fields = normalize(data, DECISION_MATRIX_FIELDS, DECISION_MATRIX_SEQUENCES)

    return DecisionMatrixArtifact(
        title=_text(fields.get("title")) or "Decision Matrix",
        description=_optional_text(fields.get("description")),
        criteria=_build_items(
            DecisionCriterion,
            fields.get("criteria", []),
            DECISION_CRITERION_FIELDS,
            "name",
            id_prefix="criterion",
        ),
        options=_build_items(
            DecisionOption,
            fields.get("options", []),
            DECISION_OPTION_FIELDS,
            "name",
            id_prefix="option",
            prepare=_decision_option,
        ),
        recommendation=_optional_text(fields.get("recommendation")),
    )


# =============================================================================
# Prompts and messages
# =============================================================================


def _selection_option(fields: dict[str, Any], index: int) -> dict[str, Any]:
    fields["title"] = _text(fields.get("title")) or fields["id"]
    fields["metadata"] = _string_map(fields.get("metadata"))
    return fields


def build_selection(data: Mapping[str, Any]) -> SelectionArtifact:
    fields = normalize(data, SELECTION_FIELDS, SELECTION_SEQUENCES)

    return SelectionArtifact(
        question=_text(fields.get("question")),
        options=_build_items(
            SelectionOption,
            fields.get("options", []),
            SELECTION_OPTION_FIELDS,
            "title",
            id_prefix="option",
            prepare=_selection_option,
        ),
        allow_free_text=_flag(fields.get("allow_free_text")),
        multi_select=_flag(fields.get("multi_select")),
    )


def _diagnostic_option(fields: dict[str, Any], index: int) -> dict[str, Any]:
    fields["label"] = _text(fields.get("label")) or fields["id"]
    return fields


def _diagnostic_question(fields: dict[str, Any], index: int) -> dict[str, Any]:
    fields["question"] = _text(fields.get("question"))
    fields["options"] = _build_items(
        DiagnosticOption,
        fields.get("options", []),
        DIAGNOSTIC_OPTION_FIELDS,
        "label",
        id_prefix=f"{fields['id']}-option",
        prepare=_diagnostic_option,
    )
    return fields


def build_diagnostic_questions(data: Mapping[str, Any]) -> DiagnosticQuestionsArtifact:
    fields = normalize(data, DIAGNOSTIC_QUESTIONS_FIELDS, DIAGNOSTIC_QUESTIONS_SEQUENCES)

    return DiagnosticQuestionsArtifact(
        title=_text(fields.get("title")) or "Diagnostic Questions",
        description=_optional_text(fields.get("description")),
        questions=_build_items(
            DiagnosticQuestion,
            fields.get("questions", []),
            DIAGNOSTIC_QUESTION_FIELDS,
            "question",
            sequences=DIAGNOSTIC_QUESTION_SEQUENCES,
            id_prefix="question",
            prepare=_diagnostic_question,
        ),
    )


DOCUMENT_SECTION_TYPES = frozenset({"heading", "paragraph", "list", "table", "divider", "quote"})


def _document_table(value: Any) -> DocumentTable | None:
    if not isinstance(value, Mapping):
        return None
    rows = [
        [_text(cell) for cell in to_array(row)]
        for row in to_array(value.get("rows"))
        if row is not None
    ]
    return DocumentTable(headers=_texts(to_array(value.get("headers"))), rows=rows)


def _document_section(fields: dict[str, Any], index: int) -> dict[str, Any]:
    section_type = fields.get("type")
    if not isinstance(section_type, str) or section_type not in DOCUMENT_SECTION_TYPES:
        fields["type"] = "paragraph"
    fields["content"] = _optional_text(fields.get("content"))
    fields["items"] = _texts(fields.get("items", []))
    fields["table"] = _document_table(fields.get("table"))
    return fields


def build_document_output(data: Mapping[str, Any]) -> DocumentOutputArtifact:
    fields = normalize(data, DOCUMENT_OUTPUT_FIELDS, DOCUMENT_OUTPUT_SEQUENCES)

    return DocumentOutputArtifact(
        title=_text(fields.get("title")) or "Document",
        document_type=_optional_text(fields.get("document_type")),
        date=_optional_text(fields.get("date")),
        author=_optional_text(fields.get("author")),
        sections=_build_items(
            DocumentSection,
            fields.get("sections", []),
            DOCUMENT_SECTION_FIELDS,
            "content",
            sequences=DOCUMENT_SECTION_SEQUENCES,
            prepare=_document_section,
        ),
        footer=_optional_text(fields.get("footer")),
        watermark=_optional_text(fields.get("watermark")),
    )


def build_manual_citation(data: Mapping[str, Any]) -> ManualCitationArtifact:
    fields = normalize(data, MANUAL_CITATION_FIELDS, MANUAL_CITATION_SEQUENCES)

    return ManualCitationArtifact(
        title=_text(fields.get("title")) or "Manual References",
        summary=_text(fields.get("summary")),
        references=_references(fields.get("references", [])),
    )


def build_info_message(data: Mapping[str, Any]) -> InfoMessageArtifact:
    """
    Build an InfoMessage from whichever message-like field is present.

    The first string among message/content/analysis/text/answer wins. An
    ``answer`` that reads like a finished diagnosis gets a title and
    follow-up suggestions.
    """
    fields = normalize(data, INFO_MESSAGE_FIELDS, INFO_MESSAGE_SEQUENCES)

    source = None
    message = None
    for name in INFO_MESSAGE_FIELDS["message"]:
        if isinstance(data.get(name), str):
            source, message = name, data[name]
            break
    if message is None:
        message = fields.get("message")
    if message is None:
        return fallback_message(data)

    title = _text(fields.get("title"))
    suggestions = _texts(fields.get("suggestions", []))
    if source == "answer" and not title and any(m in message for m in ANALYSIS_MARKERS):
        title = "Analysis Complete"
        suggestions = suggestions or list(ANALYSIS_SUGGESTIONS)

    return InfoMessageArtifact(
        title=title,
        message=_text(message),
        details=_texts(fields.get("details", [])),
        suggestions=suggestions,
        references=_references(fields.get("references", [])),
    )


def build_error_message(data: Mapping[str, Any]) -> ErrorMessageArtifact:
    fields = normalize(data, ERROR_MESSAGE_FIELDS)

    return ErrorMessageArtifact(
        title=_text(fields.get("title")) or "Error",
        message=_text(fields.get("message")) or "An unexpected error occurred.",
        code=_optional_text(fields.get("code")),
        suggestion=_optional_text(fields.get("suggestion")),
    )


# =============================================================================
# Dispatch
# =============================================================================

ARTIFACT_BUILDERS: Mapping[ArtifactKind, Callable[[Mapping[str, Any]], Any]] = MappingProxyType(
    {
        ArtifactKind.WORK_ORDER: build_work_order,
        ArtifactKind.LOTO_PROCEDURE: build_loto_procedure,
        ArtifactKind.CHECKLIST: build_checklist,
        ArtifactKind.EQUIPMENT_CARD: build_equipment_card,
        ArtifactKind.EQUIPMENT_GRID: build_equipment_grid,
        ArtifactKind.DYNAMIC_FORM: build_dynamic_form,
        ArtifactKind.IMAGE_CARD: build_image_card,
        ArtifactKind.RESEARCH_RESULT: build_research_result,
        ArtifactKind.DATA_TABLE: build_data_table,
        ArtifactKind.RCA: build_rca,
        ArtifactKind.SELECTION: build_selection,
        ArtifactKind.MANUAL_CITATION: build_manual_citation,
        ArtifactKind.INFO_MESSAGE: build_info_message,
        ArtifactKind.ERROR_MESSAGE: build_error_message,
        ArtifactKind.DECISION_MATRIX: build_decision_matrix,
        ArtifactKind.DIAGNOSTIC_QUESTIONS: build_diagnostic_questions,
        ArtifactKind.DOCUMENT_OUTPUT: build_document_output,
    }
)


def build_artifact(kind: ArtifactKind, data: Any):
    """
    Build the canonical artifact for a classified payload.

    Never raises. Multi-responses are composed elsewhere; passing one here,
    passing a non-object payload, or a payload the builder cannot project all
    yield an InfoMessage holding the payload.

    Args:
        kind: Classified artifact kind
        data: Payload (the `data` part of the response)

    Returns:
        A canonical artifact
    """
    builder = ARTIFACT_BUILDERS.get(kind)
    if builder is None:
        log_with_context(logger, logging.WARNING, "No builder for kind", kind=kind.value)
        return fallback_message(data)

    if not isinstance(data, Mapping):
        log_with_context(
            logger,
            logging.WARNING,
            "Payload is not an object, degrading to info message",
            kind=kind.value,
            payload_type=type(data).__name__,
        )
        return fallback_message(data)

    try:
        return builder(data)
    except (ValidationError, TypeError, ValueError, AttributeError) as e:
        log_with_context(
            logger,
            logging.WARNING,
            f"Failed to build {kind.value}, degrading to info message: {e}",
            kind=kind.value,
        )
        return fallback_message(data)
