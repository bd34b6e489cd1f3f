"""Structural classification of unwrapped troubleshooting responses.

Decides which canonical artifact an upstream payload represents:

1. ``multi_response`` tag -> MultiResponse, whatever the data looks like
2. any other recognized tag -> that kind (the upstream tag is authoritative)
3. structural signatures, first match wins (see SIGNATURES)
4. an untagged ``responses`` list -> MultiResponse
5. anything else -> InfoMessage holding the pretty-printed payload

Signature order matters: work orders and LOTO procedures can both carry an
equipment tag, so the work order signature (number / priority) runs first.
"""

from collections.abc import Callable, Mapping
from typing import Any

from artifact_engine.core.field_normalizer import has_field
from artifact_engine.core.logging import get_logger
from artifact_engine.core.schemas_artifacts import (
    ArtifactKind,
    ClassificationResult,
    ClassificationSource,
    UnwrappedResponse,
)

logger = get_logger(__name__)

Signature = Callable[[Mapping[str, Any]], bool]

# Fields an InfoMessage can take its text from, in priority order
MESSAGE_FIELDS = ("message", "content", "analysis", "text", "answer")


def _non_empty_list(value: Any) -> bool:
    return isinstance(value, list) and len(value) > 0


def looks_like_work_order(data: Mapping[str, Any]) -> bool:
    if has_field(data, "work_order_number", "workOrderNumber"):
        return True
    if has_field(data, "equipment_tag", "equipmentTag") and has_field(data, "priority"):
        return True
    return has_field(data, "equipment_name", "equipmentName") and has_field(
        data, "procedure_steps", "procedureSteps"
    )


def looks_like_loto_procedure(data: Mapping[str, Any]) -> bool:
    if has_field(data, "isolation_points", "isolationSteps", "isolation_steps"):
        return True
    return has_field(data, "hazards") and has_field(
        data, "ppe", "ppe_required", "requiredPpe", "required_ppe"
    )


def looks_like_checklist(data: Mapping[str, Any]) -> bool:
    return _non_empty_list(data.get("items")) and has_field(data, "title")


def looks_like_equipment_card(data: Mapping[str, Any]) -> bool:
    if not all(has_field(data, name) for name in ("tag", "name", "type")):
        return False
    return has_field(data, "specifications", "connectedEquipment", "connections")


def looks_like_selection(data: Mapping[str, Any]) -> bool:
    return _non_empty_list(data.get("options"))


def looks_like_message(data: Mapping[str, Any]) -> bool:
    return any(isinstance(data.get(name), str) for name in MESSAGE_FIELDS)


# Evaluated top to bottom; first match wins
SIGNATURES: tuple[tuple[ArtifactKind, Signature], ...] = (
    (ArtifactKind.WORK_ORDER, looks_like_work_order),
    (ArtifactKind.LOTO_PROCEDURE, looks_like_loto_procedure),
    (ArtifactKind.CHECKLIST, looks_like_checklist),
    (ArtifactKind.EQUIPMENT_CARD, looks_like_equipment_card),
    (ArtifactKind.SELECTION, looks_like_selection),
    (ArtifactKind.INFO_MESSAGE, looks_like_message),
)


def match_signature(data: Any) -> ArtifactKind | None:
    """
    Run the structural signatures against a payload.

    Args:
        data: Untagged payload

    Returns:
        First matching kind, or None if nothing matches
    """
    if not isinstance(data, Mapping):
        return None
    for kind, signature in SIGNATURES:
        if signature(data):
            return kind
    return None


def classify(unwrapped: UnwrappedResponse) -> ClassificationResult:
    """
    Classify an unwrapped response into an artifact kind.

    Never raises; every input yields a classification.

    Args:
        unwrapped: Envelope-free response

    Returns:
        ClassificationResult with the kind and how it was decided
    """
    if unwrapped.type == ArtifactKind.MULTI_RESPONSE.value:
        return ClassificationResult(ArtifactKind.MULTI_RESPONSE, ClassificationSource.EXPLICIT_TAG)

    tagged = ArtifactKind.from_tag(unwrapped.type)
    if tagged is not None:
        return ClassificationResult(tagged, ClassificationSource.EXPLICIT_TAG)

    if unwrapped.type is not None:
        logger.debug(f"Unrecognized type tag '{unwrapped.type}', inferring from structure")

    inferred = match_signature(unwrapped.data)
    if inferred is not None:
        logger.debug(f"Inferred {inferred.value} from structure")
        return ClassificationResult(inferred, ClassificationSource.STRUCTURAL_SIGNATURE)

    data = unwrapped.data
    if (isinstance(data, Mapping) and isinstance(data.get("responses"), list)) or isinstance(
        unwrapped.responses, list
    ):
        return ClassificationResult(
            ArtifactKind.MULTI_RESPONSE, ClassificationSource.STRUCTURAL_SIGNATURE
        )

    logger.debug("No structural signature matched, falling back to raw payload message")
    return ClassificationResult(ArtifactKind.INFO_MESSAGE, ClassificationSource.FALLBACK)
