"""Pydantic schemas for canonical troubleshooting artifacts.

Every response from the troubleshooting assistant is projected onto exactly
one of the models below. The models are frozen: an artifact is built once per
upstream response and never mutated afterwards. Unknown upstream fields are
ignored, so an artifact only ever carries its declared attributes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


# =============================================================================
# Enums
# =============================================================================


class ArtifactKind(str, Enum):
    """Artifact kinds, valued by the upstream `type` tag."""

    WORK_ORDER = "work_order"
    LOTO_PROCEDURE = "loto_procedure"
    CHECKLIST = "checklist"
    EQUIPMENT_CARD = "equipment_card"
    EQUIPMENT_GRID = "equipment_grid"
    DYNAMIC_FORM = "dynamic_form"
    IMAGE_CARD = "image_card"
    RESEARCH_RESULT = "research_result"
    DATA_TABLE = "data_table"
    RCA = "rca"
    SELECTION = "selection"
    MANUAL_CITATION = "manual_citation"
    INFO_MESSAGE = "info_message"
    ERROR_MESSAGE = "error_message"
    DECISION_MATRIX = "decision_matrix"
    DIAGNOSTIC_QUESTIONS = "diagnostic_questions"
    DOCUMENT_OUTPUT = "document_output"
    MULTI_RESPONSE = "multi_response"

    @classmethod
    def from_tag(cls, tag: Any) -> Optional["ArtifactKind"]:
        """Return the kind for a recognized tag, None otherwise."""
        if not isinstance(tag, str):
            return None
        try:
            return cls(tag)
        except ValueError:
            return None


class ClassificationSource(str, Enum):
    """How a classification was reached."""

    EXPLICIT_TAG = "explicit-tag"
    STRUCTURAL_SIGNATURE = "structural-signature"
    FALLBACK = "fallback"


Priority = Literal["Critical", "High", "Medium", "Low"]


@dataclass(frozen=True)
class ClassificationResult:
    """Result of classifying an unwrapped response. Informational only."""

    kind: ArtifactKind
    source: ClassificationSource


@dataclass(frozen=True)
class UnwrappedResponse:
    """A response with its transport envelope stripped.

    `responses` and `meta` hold sibling `responses` / `_meta` keys found next
    to `type` at the envelope level that was unwrapped.
    """

    type: Optional[str]
    data: Any
    responses: Optional[list] = None
    meta: Optional[dict] = None


# =============================================================================
# Supporting Models
# =============================================================================


def _lenient_number(cast):
    def _coerce(v: Any) -> Any:
        if v is None or isinstance(v, bool):
            return None
        try:
            return cast(v)
        except (TypeError, ValueError, OverflowError):
            return None

    return _coerce


# Numeric fields the upstream fills with free text ("p. 12", "approx 3"); unparsable values become None
LenientInt = Annotated[Optional[int], BeforeValidator(_lenient_number(int))]
LenientFloat = Annotated[Optional[float], BeforeValidator(_lenient_number(float))]


class ArtifactModel(BaseModel):
    """Base for every artifact and artifact component."""

    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)


class Reference(ArtifactModel):
    """A manual or document reference."""

    title: str = ""
    page: LenientInt = None
    section: Optional[str] = None
    snippet: Optional[str] = None
    manual_id: Optional[str] = None


class Part(ArtifactModel):
    """A spare part required by a work order."""

    part_number: Optional[str] = None
    description: str = ""
    quantity: LenientFloat = None


class Step(ArtifactModel):
    """A numbered procedure step."""

    step: LenientInt = None
    description: str = ""
    notes: Optional[str] = None
    critical: bool = False


class Checkpoint(ArtifactModel):
    """A quality checkpoint with acceptance criteria."""

    checkpoint: str = ""
    criteria: Optional[str] = None


class IsolationPoint(ArtifactModel):
    """A single energy isolation point in a LOTO procedure."""

    sequence: LenientInt = None
    tag: str = ""
    type: Optional[str] = None
    location: Optional[str] = None
    action: str = ""
    verification: str = ""
    lock_location: Optional[str] = None
    energy_source: Optional[str] = None


class ChecklistItem(ArtifactModel):
    id: str
    text: str = ""
    checked: bool = False
    priority: Optional[str] = None
    reference: Optional[str] = None
    sub_items: list["ChecklistItem"] = Field(default_factory=list)


class EquipmentConnection(ArtifactModel):
    direction: Optional[str] = None
    tag: str = ""
    type: Optional[str] = None
    via: Optional[str] = None


class Instrument(ArtifactModel):
    tag: str = ""
    type: Optional[str] = None
    measured_variable: Optional[str] = None


class FormFieldOption(ArtifactModel):
    value: str = ""
    label: str = ""


class FormField(ArtifactModel):
    id: str
    label: str = ""
    type: str = "text"
    value: Any = None
    placeholder: Optional[str] = None
    required: bool = False
    options: list[FormFieldOption] = Field(default_factory=list)


class FormSection(ArtifactModel):
    id: str
    title: str = ""
    description: Optional[str] = None
    fields: list[FormField] = Field(default_factory=list)


class FormTotal(ArtifactModel):
    label: str = ""
    value: LenientFloat = None
    type: Optional[str] = None


class TableColumn(ArtifactModel):
    key: str
    label: str = ""
    type: str = "text"
    sortable: bool = False


class TableRow(ArtifactModel):
    id: str
    cells: dict[str, Any] = Field(default_factory=dict)


class Citation(ArtifactModel):
    """A research answer citation."""

    source: str = ""
    page: LenientInt = None
    section: Optional[str] = None
    excerpt: str = ""
    confidence: LenientFloat = None


class SelectionOption(ArtifactModel):
    id: str
    title: str = ""
    subtitle: Optional[str] = None
    icon: Optional[str] = None
    metadata: dict[str, str] = Field(default_factory=dict)
    drawing_number: Optional[str] = None


class DecisionCriterion(ArtifactModel):
    id: str
    name: str = ""
    weight: LenientFloat = None
    description: Optional[str] = None


class DecisionOption(ArtifactModel):
    id: str
    name: str = ""
    description: Optional[str] = None
    scores: dict[str, float] = Field(default_factory=dict)
    total_score: LenientFloat = None
    recommended: bool = False


class DiagnosticOption(ArtifactModel):
    id: str
    label: str = ""


class DiagnosticQuestion(ArtifactModel):
    id: str
    question: str = ""
    options: list[DiagnosticOption] = Field(default_factory=list)


class DocumentTable(ArtifactModel):
    headers: list[str] = Field(default_factory=list)
    rows: list[list[str]] = Field(default_factory=list)


class DocumentSection(ArtifactModel):
    """One block of a formatted document."""

    type: Literal["heading", "paragraph", "list", "table", "divider", "quote"] = "paragraph"
    level: LenientInt = None
    content: Optional[str] = None
    items: list[str] = Field(default_factory=list)
    table: Optional[DocumentTable] = None


# =============================================================================
# Canonical Artifacts
# =============================================================================


class WorkOrderArtifact(ArtifactModel):
    kind: Literal["work_order"] = "work_order"
    work_order_number: str
    equipment_tag: str = ""
    equipment_name: str = "Equipment"
    work_type: str = "Maintenance"
    priority: Priority = "Medium"
    description: str = ""
    symptoms: list[str] = Field(default_factory=list)
    required_parts: list[Part] = Field(default_factory=list)
    required_tools: list[str] = Field(default_factory=list)
    safety_requirements: list[str] = Field(default_factory=list)
    procedure_steps: list[Step] = Field(default_factory=list)
    quality_checkpoints: list[Checkpoint] = Field(default_factory=list)
    estimated_duration: str = "TBD"
    lockout_required: bool = False
    atex_compliance: bool = False
    references: list[Reference] = Field(default_factory=list)


class LotoProcedureArtifact(ArtifactModel):
    kind: Literal["loto_procedure"] = "loto_procedure"
    equipment_tag: str = ""
    equipment_name: str = "Equipment"
    procedure_number: Optional[str] = None
    location: Optional[str] = None
    scope: Optional[str] = None
    estimated_duration: Optional[str] = None
    hazard_summary: Optional[str] = None
    hazards: list[str] = Field(default_factory=list)
    ppe: list[str] = Field(default_factory=list)
    pre_isolation_checks: list[str] = Field(default_factory=list)
    isolation_points: list[IsolationPoint] = Field(default_factory=list)
    verification_steps: list[str] = Field(default_factory=list)
    reinstate_steps: list[str] = Field(default_factory=list)
    special_precautions: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    authorized_personnel: list[str] = Field(default_factory=list)
    drawing_reference: Optional[str] = None


class ChecklistArtifact(ArtifactModel):
    kind: Literal["checklist"] = "checklist"
    title: str = "Checklist"
    description: Optional[str] = None
    items: list[ChecklistItem] = Field(default_factory=list)
    references: list[Reference] = Field(default_factory=list)


class EquipmentCardArtifact(ArtifactModel):
    kind: Literal["equipment_card"] = "equipment_card"
    tag: str = ""
    name: Optional[str] = None
    type: str = ""
    subtype: Optional[str] = None
    description: Optional[str] = None
    manufacturer: Optional[str] = None
    model: Optional[str] = None
    drawing_number: Optional[str] = None
    connections: list[EquipmentConnection] = Field(default_factory=list)
    instruments: list[Instrument] = Field(default_factory=list)
    specifications: dict[str, str] = Field(default_factory=dict)
    references: list[Reference] = Field(default_factory=list)


class EquipmentGridArtifact(ArtifactModel):
    kind: Literal["equipment_grid"] = "equipment_grid"
    title: Optional[str] = None
    equipment: list[EquipmentCardArtifact] = Field(default_factory=list)
    group_by: Literal["type", "drawing", "none"] = "none"


class DynamicFormArtifact(ArtifactModel):
    kind: Literal["dynamic_form"] = "dynamic_form"
    form_type: str = "custom"
    title: str = "Form"
    description: Optional[str] = None
    sections: list[FormSection] = Field(default_factory=list)
    totals: list[FormTotal] = Field(default_factory=list)
    document_number: Optional[str] = None
    date: Optional[str] = None
    due_date: Optional[str] = None
    status: Optional[str] = None


class ImageCardArtifact(ArtifactModel):
    kind: Literal["image_card"] = "image_card"
    title: str = "Image"
    description: str = ""
    source_document: Optional[str] = None
    source_page: LenientInt = None
    image_url: Optional[str] = None
    detected_equipment: list[str] = Field(default_factory=list)


class ResearchResultArtifact(ArtifactModel):
    kind: Literal["research_result"] = "research_result"
    question: str = ""
    answer: str = ""
    summary: Optional[str] = None
    citations: list[Citation] = Field(default_factory=list)
    related_topics: list[str] = Field(default_factory=list)
    confidence: LenientFloat = None


class DataTableArtifact(ArtifactModel):
    kind: Literal["data_table"] = "data_table"
    title: str = "Table"
    description: Optional[str] = None
    columns: list[TableColumn] = Field(default_factory=list)
    rows: list[TableRow] = Field(default_factory=list)


class RCAArtifact(ArtifactModel):
    kind: Literal["rca"] = "rca"
    title: str = "Root Cause Analysis"
    equipment: Optional[str] = None
    issue: Optional[str] = None
    analysis: Optional[str] = None
    root_cause: Optional[str] = None
    factors: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)
    severity: Optional[str] = None
    confidence: LenientFloat = None


class SelectionArtifact(ArtifactModel):
    kind: Literal["selection"] = "selection"
    question: str = ""
    options: list[SelectionOption] = Field(default_factory=list)
    allow_free_text: bool = False
    multi_select: bool = False


class ManualCitationArtifact(ArtifactModel):
    kind: Literal["manual_citation"] = "manual_citation"
    title: str = "Manual References"
    summary: str = ""
    references: list[Reference] = Field(default_factory=list)


class InfoMessageArtifact(ArtifactModel):
    kind: Literal["info_message"] = "info_message"
    title: str = ""
    message: str = ""
    details: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    references: list[Reference] = Field(default_factory=list)


class ErrorMessageArtifact(ArtifactModel):
    kind: Literal["error_message"] = "error_message"
    title: str = "Error"
    message: str = ""
    code: Optional[str] = None
    suggestion: Optional[str] = None


class DecisionMatrixArtifact(ArtifactModel):
    kind: Literal["decision_matrix"] = "decision_matrix"
    title: str = "Decision Matrix"
    description: Optional[str] = None
    criteria: list[DecisionCriterion] = Field(default_factory=list)
    options: list[DecisionOption] = Field(default_factory=list)
    recommendation: Optional[str] = None


class DiagnosticQuestionsArtifact(ArtifactModel):
    kind: Literal["diagnostic_questions"] = "diagnostic_questions"
    title: str = "Diagnostic Questions"
    description: Optional[str] = None
    questions: list[DiagnosticQuestion] = Field(default_factory=list)


class DocumentOutputArtifact(ArtifactModel):
    kind: Literal["document_output"] = "document_output"
    title: str = "Document"
    document_type: Optional[str] = None
    date: Optional[str] = None
    author: Optional[str] = None
    sections: list[DocumentSection] = Field(default_factory=list)
    footer: Optional[str] = None
    watermark: Optional[str] = None


class MultiResponseArtifact(ArtifactModel):
    """Ordered container; child order is presentation order."""

    kind: Literal["multi_response"] = "multi_response"
    responses: list["CanonicalArtifact"] = Field(default_factory=list)


CanonicalArtifact = Annotated[
    Union[
        WorkOrderArtifact,
        LotoProcedureArtifact,
        ChecklistArtifact,
        EquipmentCardArtifact,
        EquipmentGridArtifact,
        DynamicFormArtifact,
        ImageCardArtifact,
        ResearchResultArtifact,
        DataTableArtifact,
        RCAArtifact,
        SelectionArtifact,
        ManualCitationArtifact,
        InfoMessageArtifact,
        ErrorMessageArtifact,
        DecisionMatrixArtifact,
        DiagnosticQuestionsArtifact,
        DocumentOutputArtifact,
        MultiResponseArtifact,
    ],
    Field(discriminator="kind"),
]


# =============================================================================
# Knowledge base sources and pipeline output
# =============================================================================


class ManualSource(ArtifactModel):
    title: str = ""
    page: LenientInt = None


class PnidSource(ArtifactModel):
    tag: str = ""
    type: Optional[str] = None
    drawing: Optional[str] = None


class KnowledgeBaseImage(ArtifactModel):
    id: str = ""
    description: str = ""
    source_document: Optional[str] = None
    source_page: LenientInt = None
    image_url: Optional[str] = None


class KnowledgeBaseSources(ArtifactModel):
    """Knowledge base material the upstream consulted for an answer."""

    pnids: list[PnidSource] = Field(default_factory=list)
    manuals: list[ManualSource] = Field(default_factory=list)
    images: list[KnowledgeBaseImage] = Field(default_factory=list)
    searched_pnid_count: int = 0
    searched_manual_count: int = 0


class ResolvedResponse(BaseModel):
    """Pipeline output for one upstream response."""

    model_config = ConfigDict(frozen=True)

    artifact: CanonicalArtifact
    classified_as: ArtifactKind
    classification_source: ClassificationSource
    exportable: bool = False
    sources: Optional[KnowledgeBaseSources] = None
    text: str = ""
    response_id: Optional[str] = None


ChecklistItem.model_rebuild()
MultiResponseArtifact.model_rebuild()
ResolvedResponse.model_rebuild()
