"""Plain-text and JSON export of canonical artifacts."""

from typing import Any, Callable

from artifact_engine.core.schemas_artifacts import (
    ChecklistArtifact,
    ChecklistItem,
    DataTableArtifact,
    DocumentOutputArtifact,
    DocumentSection,
    InfoMessageArtifact,
    LotoProcedureArtifact,
    MultiResponseArtifact,
    Reference,
    WorkOrderArtifact,
)

# Fields never rendered in the generic text export
SKIP_FIELDS = frozenset({"kind"})


def _render_value(value: Any, indent: int = 0) -> str:
    """
    Render a dumped value to readable text.

    Args:
        value: Any value (str, dict, list, etc.)
        indent: Indentation level

    Returns:
        Formatted text representation
    """
    prefix = "  " * indent

    if value is None:
        return ""

    if isinstance(value, str):
        return f"{prefix}{value}"

    if isinstance(value, list):
        lines = []
        for item in value:
            if isinstance(item, dict):
                lines.append(_render_value(item, indent))
            else:
                lines.append(f"{prefix}- {item}")
        return "\n".join(lines)

    if isinstance(value, dict):
        lines = []
        for k, v in value.items():
            if v is None or v == [] or v == {} or k in SKIP_FIELDS:
                continue
            label = k.replace("_", " ").capitalize()
            if isinstance(v, (list, dict)):
                lines.append(f"{prefix}{label}:")
                lines.append(_render_value(v, indent + 1))
            else:
                lines.append(f"{prefix}{label}: {v}")
        return "\n".join(lines)

    return f"{prefix}{value}"


def _section(title: str, lines: list[str]) -> list[str]:
    if not lines:
        return []
    return ["", f"{title}:", *lines]


def _bullets(items: list[str]) -> list[str]:
    return [f"  - {item}" for item in items]


def _references(references: list[Reference]) -> list[str]:
    lines = []
    for ref in references:
        line = f"  - {ref.title}"
        if ref.page is not None:
            line += f" p.{ref.page}"
        if ref.section:
            line += f" ({ref.section})"
        lines.append(line)
    return lines


def _work_order_text(artifact: WorkOrderArtifact) -> list[str]:
    lines = [
        f"WORK ORDER {artifact.work_order_number}",
        f"Equipment: {artifact.equipment_name} ({artifact.equipment_tag})".replace(" ()", ""),
        f"Type: {artifact.work_type}",
        f"Priority: {artifact.priority}",
        f"Estimated duration: {artifact.estimated_duration}",
    ]
    if artifact.lockout_required:
        lines.append("Lockout/tagout required")
    if artifact.atex_compliance:
        lines.append("ATEX compliance required")
    if artifact.description:
        lines.extend(["", artifact.description])

    lines += _section("Symptoms", _bullets(artifact.symptoms))
    lines += _section(
        "Required parts",
        [
            f"  - {p.description}"
            + (f" [{p.part_number}]" if p.part_number else "")
            + (f" x{p.quantity:g}" if p.quantity is not None else "")
            for p in artifact.required_parts
        ],
    )
    lines += _section("Required tools", _bullets(artifact.required_tools))
    lines += _section("Safety requirements", _bullets(artifact.safety_requirements))
    lines += _section(
        "Procedure",
        [
            f"  {s.step if s.step is not None else i}. {s.description}"
            + (" [CRITICAL]" if s.critical else "")
            for i, s in enumerate(artifact.procedure_steps, start=1)
        ],
    )
    lines += _section(
        "Quality checkpoints",
        [
            f"  - {c.checkpoint}" + (f": {c.criteria}" if c.criteria else "")
            for c in artifact.quality_checkpoints
        ],
    )
    lines += _section("References", _references(artifact.references))
    return lines


def _loto_text(artifact: LotoProcedureArtifact) -> list[str]:
    lines = [f"LOTO PROCEDURE {artifact.procedure_number or ''}".rstrip()]
    lines.append(f"Equipment: {artifact.equipment_name} ({artifact.equipment_tag})".replace(" ()", ""))
    if artifact.location:
        lines.append(f"Location: {artifact.location}")
    if artifact.hazard_summary:
        lines.extend(["", artifact.hazard_summary])

    lines += _section("Hazards", _bullets(artifact.hazards))
    lines += _section("PPE", _bullets(artifact.ppe))
    lines += _section("Pre-isolation checks", _bullets(artifact.pre_isolation_checks))

    points = []
    for i, point in enumerate(artifact.isolation_points, start=1):
        number = point.sequence if point.sequence is not None else i
        line = f"  {number}. {point.tag}"
        if point.type:
            line += f" ({point.type})"
        if point.action:
            line += f": {point.action}"
        points.append(line)
        if point.verification:
            points.append(f"     Verify: {point.verification}")
    lines += _section("Isolation points", points)

    lines += _section("Verification", _bullets(artifact.verification_steps))
    lines += _section("Reinstatement", _bullets(artifact.reinstate_steps))
    lines += _section("Warnings", _bullets(artifact.warnings + artifact.special_precautions))
    return lines


def _checklist_item_lines(item: ChecklistItem, depth: int) -> list[str]:
    box = "[x]" if item.checked else "[ ]"
    lines = [f"{'  ' * depth}{box} {item.text}"]
    for sub in item.sub_items:
        lines.extend(_checklist_item_lines(sub, depth + 1))
    return lines


def _checklist_text(artifact: ChecklistArtifact) -> list[str]:
    lines = [artifact.title.upper()]
    if artifact.description:
        lines.append(artifact.description)
    lines.append("")
    for item in artifact.items:
        lines.extend(_checklist_item_lines(item, 1))
    lines += _section("References", _references(artifact.references))
    return lines


def _data_table_text(artifact: DataTableArtifact) -> list[str]:
    lines = [artifact.title]
    if artifact.description:
        lines.append(artifact.description)
    if artifact.columns:
        lines.append(" | ".join(c.label or c.key for c in artifact.columns))
        for row in artifact.rows:
            lines.append(" | ".join(str(row.cells.get(c.key, "")) for c in artifact.columns))
    return lines


def _document_section_lines(section: DocumentSection) -> list[str]:
    if section.type == "divider":
        return ["", "-" * 40]
    if section.type == "heading":
        return ["", (section.content or "").upper()]
    if section.type == "list":
        return _bullets(section.items)
    if section.type == "quote":
        return [f"> {section.content or ''}"]
    if section.type == "table" and section.table is not None:
        rows = [section.table.headers, *section.table.rows]
        return [" | ".join(row) for row in rows if row]
    return ["", section.content] if section.content else []


def _document_output_text(artifact: DocumentOutputArtifact) -> list[str]:
    lines = [artifact.title.upper()]
    header = [
        f"{label}: {value}"
        for label, value in (
            ("Type", artifact.document_type),
            ("Date", artifact.date),
            ("Author", artifact.author),
        )
        if value
    ]
    lines.extend(header)
    for section in artifact.sections:
        lines.extend(_document_section_lines(section))
    if artifact.footer:
        lines.extend(["", artifact.footer])
    return lines


def _info_message_text(artifact: InfoMessageArtifact) -> list[str]:
    lines = [artifact.title] if artifact.title else []
    if artifact.message:
        lines.append(artifact.message)
    lines += _section("Details", _bullets(artifact.details))
    lines += _section("Suggestions", _bullets(artifact.suggestions))
    lines += _section("References", _references(artifact.references))
    return lines


def _multi_response_text(artifact: MultiResponseArtifact) -> list[str]:
    blocks = [artifact_to_text(child) for child in artifact.responses]
    return ["\n\n---\n\n".join(blocks)] if blocks else []


TEXT_RENDERERS: dict[type, Callable[[Any], list[str]]] = {
    WorkOrderArtifact: _work_order_text,
    LotoProcedureArtifact: _loto_text,
    ChecklistArtifact: _checklist_text,
    DataTableArtifact: _data_table_text,
    DocumentOutputArtifact: _document_output_text,
    InfoMessageArtifact: _info_message_text,
    MultiResponseArtifact: _multi_response_text,
}


def artifact_to_text(artifact: Any) -> str:
    """
    Render a canonical artifact as plain text.

    Artifacts without a dedicated layout are rendered field by field.

    Args:
        artifact: Any canonical artifact

    Returns:
        Plain-text document
    """
    renderer = TEXT_RENDERERS.get(type(artifact))
    if renderer is not None:
        return "\n".join(renderer(artifact)).strip()
    return _render_value(artifact.model_dump(mode="json")).strip()


def artifact_to_json(artifact: Any) -> str:
    """Serialize a canonical artifact (including its `kind` tag) as indented JSON."""
    return artifact.model_dump_json(indent=2)
