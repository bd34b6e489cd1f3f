"""Field-name alias resolution for upstream troubleshooting payloads.

The troubleshooting assistant sends the same logical attribute under several
names (``required_parts`` / ``requiredParts``, ``ppe`` / ``ppe_required`` /
``requiredPpe``) and sends list-valued attributes either as a list or as a
single string. Both inconsistencies are resolved here, once, before any
builder sees the payload.

Alias tables map a canonical (snake_case) field to the ordered source names
accepted for it. The canonical name is always the first accepted source, so
normalizing an already-normalized payload returns an equal payload.
"""

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

AliasTable = Mapping[str, tuple[str, ...]]

_MISSING = object()


def alias_table(**entries: Iterable[str]) -> AliasTable:
    """
    Build a read-only alias table.

    Args:
        **entries: canonical field name -> accepted source names (in priority order)

    Returns:
        Immutable mapping of canonical name to a tuple of candidates, canonical first
    """
    table = {}
    for canonical, aliases in entries.items():
        candidates = [canonical]
        candidates.extend(a for a in aliases if a != canonical)
        table[canonical] = tuple(candidates)
    return MappingProxyType(table)


def to_array(value: Any) -> list:
    """
    Coerce a scalar-or-list value into a list.

    None -> [], a string -> [string], a list -> the same items, anything
    else -> a one-element list.
    """
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return [value]


def resolve_field(raw: Mapping[str, Any], candidates: Iterable[str]) -> tuple[str | None, Any]:
    """
    Find the first candidate key present in ``raw``.

    A key that is present with a None value still counts as present.

    Returns:
        Tuple of (matched key, value), or (None, None) if no candidate is present
    """
    for name in candidates:
        value = raw.get(name, _MISSING)
        if value is not _MISSING:
            return name, value
    return None, None


def normalize(
    raw: Mapping[str, Any],
    table: AliasTable,
    sequence_fields: Iterable[str] = (),
) -> dict[str, Any]:
    """
    Project a raw payload onto the canonical field names of ``table``.

    Args:
        raw: Upstream payload (not modified)
        table: Alias table for the target artifact or component
        sequence_fields: Canonical fields coerced with ``to_array``

    Returns:
        New dict holding only canonical fields that were present in ``raw``
    """
    sequences = frozenset(sequence_fields)
    normalized: dict[str, Any] = {}
    for canonical, candidates in table.items():
        matched, value = resolve_field(raw, candidates)
        if matched is None:
            continue
        normalized[canonical] = to_array(value) if canonical in sequences else value
    return normalized


def has_field(raw: Any, *names: str) -> bool:
    """Return True if any of ``names`` is present in ``raw`` with a non-None value."""
    if not isinstance(raw, Mapping):
        return False
    return any(raw.get(name) is not None for name in names)


# =============================================================================
# Artifact alias tables
# =============================================================================

WORK_ORDER_FIELDS = alias_table(
    work_order_number=("workOrderNumber", "wo_number"),
    equipment_tag=("equipmentTag", "equipment"),
    equipment_name=("equipmentName",),
    work_type=("workType",),
    priority=(),
    description=(),
    symptoms=(),
    required_parts=("requiredParts", "parts"),
    required_tools=("requiredTools", "tools"),
    safety_requirements=("safetyRequirements", "safetyNotes", "safety_notes"),
    procedure_steps=("procedureSteps", "steps"),
    quality_checkpoints=("qualityCheckpoints",),
    estimated_duration=("estimatedDuration",),
    estimated_hours=("estimatedHours",),
    lockout_required=(
        "lockoutRequired",
        "lockout_tagout_required",
        "lotoRequired",
        "loto_required",
    ),
    atex_compliance=("atexCompliance",),
    references=(),
)
WORK_ORDER_SEQUENCES = (
    "symptoms",
    "required_parts",
    "required_tools",
    "safety_requirements",
    "procedure_steps",
    "quality_checkpoints",
    "references",
)

PART_FIELDS = alias_table(
    part_number=("partNumber",),
    description=("name",),
    quantity=("qty",),
)

STEP_FIELDS = alias_table(
    step=("number", "sequence"),
    description=("text", "action"),
    notes=(),
    critical=(),
)

CHECKPOINT_FIELDS = alias_table(
    checkpoint=("name", "description"),
    criteria=("acceptance_criteria", "acceptanceCriteria"),
)

REFERENCE_FIELDS = alias_table(
    title=("manualName", "manual_name", "source", "name"),
    page=("pageNumber", "page_number"),
    section=(),
    snippet=("excerpt",),
    manual_id=("manualId",),
)

LOTO_FIELDS = alias_table(
    equipment_tag=("equipmentTag",),
    equipment_name=("equipmentName",),
    procedure_number=("procedureNumber",),
    location=(),
    scope=(),
    estimated_duration=("estimatedDuration",),
    hazard_summary=("hazardSummary",),
    hazards=(),
    ppe=("ppe_required", "requiredPpe", "required_ppe"),
    pre_isolation_checks=("preIsolationChecks",),
    isolation_points=("isolationPoints", "isolationSteps", "isolation_steps"),
    verification_steps=("verificationSteps",),
    reinstate_steps=("reinstateSteps",),
    special_precautions=("specialPrecautions",),
    warnings=(),
    authorized_personnel=("authorizedPersonnel",),
    drawing_reference=("drawingReference",),
)
LOTO_SEQUENCES = (
    "hazards",
    "ppe",
    "pre_isolation_checks",
    "isolation_points",
    "verification_steps",
    "reinstate_steps",
    "special_precautions",
    "warnings",
    "authorized_personnel",
)

ISOLATION_POINT_FIELDS = alias_table(
    sequence=("step",),
    tag=("point",),
    type=("pointType", "point_type"),
    location=(),
    action=(),
    verification=(),
    lock_location=("lockLocation",),
    energy_source=("energySource",),
)

CHECKLIST_FIELDS = alias_table(
    title=(),
    description=(),
    items=(),
    references=(),
)
CHECKLIST_SEQUENCES = ("items", "references")

CHECKLIST_ITEM_FIELDS = alias_table(
    id=(),
    text=("label", "title", "description", "item"),
    checked=("completed", "done"),
    priority=(),
    reference=(),
    sub_items=("subItems",),
)
CHECKLIST_ITEM_SEQUENCES = ("sub_items",)

EQUIPMENT_FIELDS = alias_table(
    tag=("equipmentTag", "equipment_tag"),
    name=("equipmentName", "equipment_name"),
    type=("equipmentType", "equipment_type"),
    subtype=(),
    description=(),
    manufacturer=(),
    model=(),
    drawing_number=("drawingNumber",),
    connections=("connectedEquipment", "connected_equipment"),
    instruments=(),
    specifications=("specs",),
    references=("manualReferences", "manual_references"),
)
EQUIPMENT_SEQUENCES = ("connections", "instruments", "references")

CONNECTION_FIELDS = alias_table(
    direction=(),
    tag=(),
    type=(),
    via=(),
)

INSTRUMENT_FIELDS = alias_table(
    tag=(),
    type=(),
    measured_variable=("measuredVariable",),
)

EQUIPMENT_GRID_FIELDS = alias_table(
    title=(),
    equipment=("items",),
    group_by=("groupBy",),
)
EQUIPMENT_GRID_SEQUENCES = ("equipment",)

DYNAMIC_FORM_FIELDS = alias_table(
    form_type=("formType",),
    title=(),
    description=(),
    sections=(),
    totals=(),
    metadata=(),
)
DYNAMIC_FORM_SEQUENCES = ("sections", "totals")

FORM_SECTION_FIELDS = alias_table(
    id=(),
    title=(),
    description=(),
    fields=(),
)
FORM_SECTION_SEQUENCES = ("fields",)

FORM_FIELD_FIELDS = alias_table(
    id=("name", "key"),
    label=(),
    type=(),
    value=(),
    placeholder=(),
    required=(),
    options=(),
)
FORM_FIELD_SEQUENCES = ("options",)

FORM_TOTAL_FIELDS = alias_table(
    label=("name",),
    value=("amount",),
    type=(),
)

IMAGE_CARD_FIELDS = alias_table(
    title=(),
    description=(),
    source_document=("sourceDocument",),
    source_page=("sourcePage",),
    image_url=("imageUrl", "url"),
    detected_equipment=("detectedEquipment",),
)
IMAGE_CARD_SEQUENCES = ("detected_equipment",)

RESEARCH_FIELDS = alias_table(
    question=(),
    answer=(),
    summary=(),
    citations=("sources",),
    related_topics=("relatedTopics",),
    confidence=(),
)
RESEARCH_SEQUENCES = ("citations", "related_topics")

CITATION_FIELDS = alias_table(
    source=("document", "title"),
    page=(),
    section=(),
    excerpt=("snippet", "text"),
    confidence=(),
)

DATA_TABLE_FIELDS = alias_table(
    title=(),
    description=(),
    columns=(),
    rows=(),
)
DATA_TABLE_SEQUENCES = ("columns", "rows")

TABLE_COLUMN_FIELDS = alias_table(
    key=("id", "field"),
    label=("header", "title", "name"),
    type=(),
    sortable=(),
)

TABLE_ROW_FIELDS = alias_table(
    id=(),
    cells=("values",),
)

RCA_FIELDS = alias_table(
    title=(),
    equipment=(),
    issue=(),
    analysis=("message", "content"),
    root_cause=("rootCause",),
    factors=("causes", "contributing_factors", "contributingFactors"),
    recommendations=(),
    steps=(),
    severity=(),
    confidence=(),
)
RCA_SEQUENCES = ("factors", "recommendations", "steps")

SELECTION_FIELDS = alias_table(
    question=("prompt", "title"),
    options=(),
    allow_free_text=("allowFreeText",),
    multi_select=("multiSelect",),
)
SELECTION_SEQUENCES = ("options",)

SELECTION_OPTION_FIELDS = alias_table(
    id=("value",),
    title=("label", "name", "text"),
    subtitle=("description",),
    icon=(),
    metadata=(),
    drawing_number=("drawingNumber",),
)

MANUAL_CITATION_FIELDS = alias_table(
    title=(),
    summary=(),
    references=(),
)
MANUAL_CITATION_SEQUENCES = ("references",)

INFO_MESSAGE_FIELDS = alias_table(
    title=(),
    message=("content", "analysis", "text", "answer"),
    details=(),
    suggestions=(),
    references=(),
)
INFO_MESSAGE_SEQUENCES = ("details", "suggestions", "references")

ERROR_MESSAGE_FIELDS = alias_table(
    title=(),
    message=("error",),
    code=(),
    suggestion=(),
)

DECISION_MATRIX_FIELDS = alias_table(
    title=(),
    description=(),
    criteria=(),
    options=(),
    recommendation=(),
)
DECISION_MATRIX_SEQUENCES = ("criteria", "options")

DECISION_CRITERION_FIELDS = alias_table(
    id=(),
    name=("label",),
    weight=(),
    description=(),
)

DECISION_OPTION_FIELDS = alias_table(
    id=(),
    name=("label", "title"),
    description=(),
    scores=(),
    total_score=("totalScore",),
    recommended=(),
)

DIAGNOSTIC_QUESTIONS_FIELDS = alias_table(
    title=(),
    description=(),
    questions=(),
)
DIAGNOSTIC_QUESTIONS_SEQUENCES = ("questions",)

DIAGNOSTIC_QUESTION_FIELDS = alias_table(
    id=(),
    question=("text", "label", "title"),
    options=("choices",),
)
DIAGNOSTIC_QUESTION_SEQUENCES = ("options",)

DIAGNOSTIC_OPTION_FIELDS = alias_table(
    id=("value",),
    label=("text", "title"),
)

DOCUMENT_OUTPUT_FIELDS = alias_table(
    title=(),
    document_type=("documentType",),
    date=(),
    author=(),
    sections=(),
    footer=(),
    watermark=(),
)
DOCUMENT_OUTPUT_SEQUENCES = ("sections",)

DOCUMENT_SECTION_FIELDS = alias_table(
    type=(),
    level=(),
    content=("text",),
    items=(),
    table=("tableData", "table_data"),
)
DOCUMENT_SECTION_SEQUENCES = ("items",)

SOURCES_FIELDS = alias_table(
    pnids=(),
    manuals=(),
    images=(),
    searched_pnid_count=("searchedPnidCount",),
    searched_manual_count=("searchedManualCount",),
)
SOURCES_SEQUENCES = ("pnids", "manuals", "images")
