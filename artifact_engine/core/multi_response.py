"""Multi-response composition and the response resolution entry point.

``resolve_response`` is the one function callers need: it takes the raw JSON
body returned by the troubleshooting assistant and returns a ResolvedResponse
holding exactly one canonical artifact (possibly a MultiResponse container).

Flow:
    raw -> upstream error check -> unwrap -> classify -> build
    raw -> ... -> classify (multi_response) -> compose children recursively
"""

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from artifact_engine.core.artifact_builders import build_artifact, fallback_message
from artifact_engine.core.classifier import classify
from artifact_engine.core.config import get_settings
from artifact_engine.core.envelope import extract_children, extract_meta, unwrap
from artifact_engine.core.errors import UpstreamError
from artifact_engine.core.field_normalizer import SOURCES_FIELDS, SOURCES_SEQUENCES, normalize
from artifact_engine.core.logging import get_logger, log_with_context
from artifact_engine.core.schemas_artifacts import (
    ArtifactKind,
    ClassificationResult,
    ClassificationSource,
    InfoMessageArtifact,
    KnowledgeBaseSources,
    ManualSource,
    MultiResponseArtifact,
    Reference,
    ResolvedResponse,
    UnwrappedResponse,
)

logger = get_logger(__name__)

NO_RESPONSE_TEXT = "No response available. Please try rephrasing your question."

CITATION_TITLE = "Documentation Found"

EXPORTABLE_KINDS = frozenset(
    {
        ArtifactKind.WORK_ORDER,
        ArtifactKind.LOTO_PROCEDURE,
        ArtifactKind.CHECKLIST,
        ArtifactKind.DYNAMIC_FORM,
        ArtifactKind.DOCUMENT_OUTPUT,
        ArtifactKind.DATA_TABLE,
    }
)


def _cited_manuals(meta: Any) -> list[ManualSource]:
    if not isinstance(meta, Mapping):
        return []
    sources = meta.get("sources")
    if not isinstance(sources, Mapping):
        return []
    manuals = []
    for manual in sources.get("manuals") or []:
        if not isinstance(manual, Mapping):
            continue
        try:
            manuals.append(ManualSource.model_validate(manual))
        except ValidationError:
            logger.warning("Skipping malformed manual source in response metadata")
    return manuals


def _format_manual(manual: ManualSource) -> str:
    if manual.page is None:
        return manual.title
    return f"{manual.title} p.{manual.page}"


def citation_message(manuals: list[ManualSource]) -> InfoMessageArtifact:
    """
    Summarize found manuals when the assistant produced no diagnosis.

    Args:
        manuals: Manuals the upstream search found (non-empty)

    Returns:
        InfoMessage listing the first few manuals and referencing all of them
    """
    preview_limit = get_settings().MAX_CITATION_PREVIEW
    listed = [_format_manual(m) for m in manuals[:preview_limit]]
    if len(manuals) > preview_limit:
        listed.append(f"+{len(manuals) - preview_limit} more")

    message = (
        "Found relevant documentation but no specific diagnosis was generated. "
        f"Sources found: {', '.join(listed)}"
    )
    return InfoMessageArtifact(
        title=CITATION_TITLE,
        message=message,
        suggestions=["Try being more specific about the symptoms or equipment."],
        references=[Reference(title=m.title, page=m.page) for m in manuals],
    )


def resolve_unwrapped(unwrapped: UnwrappedResponse) -> tuple[Any, ClassificationResult]:
    """
    Classify and build one unwrapped response.

    Returns:
        Tuple of (canonical artifact, classification)
    """
    classification = classify(unwrapped)

    if classification.kind is ArtifactKind.MULTI_RESPONSE:
        children = extract_children(unwrapped)
        artifact = MultiResponseArtifact(
            responses=compose(children, extract_meta(unwrapped))
        )
    elif classification.source is ClassificationSource.FALLBACK:
        artifact = fallback_message(unwrapped.data)
    else:
        artifact = build_artifact(classification.kind, unwrapped.data)

    return artifact, classification


def compose(children: list, meta: Mapping[str, Any] | None = None) -> list:
    """
    Compose the children of a multi_response into canonical artifacts.

    - non-empty children: one artifact per child, in order; a child that
      fits no artifact becomes an InfoMessage, never dropped
    - no children but cited manuals in ``meta``: one citation InfoMessage
    - neither: an empty list

    Args:
        children: Raw child responses
        meta: Optional `_meta` block, e.g. {"sources": {"manuals": [...]}}

    Returns:
        List of canonical artifacts
    """
    if children:
        artifacts = [resolve_unwrapped(unwrap(child))[0] for child in children]
        logger.debug(
            f"Composed multi_response with {len(artifacts)} children",
            extra={"kinds": [a.kind for a in artifacts]},
        )
        return artifacts

    manuals = _cited_manuals(meta)
    if manuals:
        logger.info(f"Empty multi_response, synthesizing citation for {len(manuals)} manuals")
        return [citation_message(manuals)]

    return []


def parse_sources(raw: Any) -> KnowledgeBaseSources | None:
    """Parse the knowledge base `sources` block leniently; None if absent or unusable."""
    if not isinstance(raw, Mapping):
        return None
    try:
        return KnowledgeBaseSources.model_validate(normalize(raw, SOURCES_FIELDS, SOURCES_SEQUENCES))
    except ValidationError as e:
        logger.warning(f"Ignoring malformed knowledge base sources: {e.error_count()} errors")
        return None


def check_upstream_error(response: Any) -> None:
    """
    Raise if the upstream reported failure.

    Raises:
        UpstreamError: For `{success: false, error: "..."}`, carrying the error verbatim
    """
    if isinstance(response, Mapping) and response.get("success") is False:
        error = response.get("error")
        if error:
            raise UpstreamError(str(error))


def resolve_response(response: Any, response_id: str | None = None) -> ResolvedResponse:
    """
    Turn a raw troubleshooting assistant response into a canonical artifact.

    Args:
        response: Raw JSON body
        response_id: Correlation id for logs; generated when not given

    Returns:
        ResolvedResponse with the artifact, its classification, sources and id

    Raises:
        UpstreamError: If the response is an explicit upstream failure
    """
    response_id = response_id or str(uuid.uuid4())
    check_upstream_error(response)

    unwrapped = unwrap(response)
    artifact, classification = resolve_unwrapped(unwrapped)

    body = response if isinstance(response, Mapping) else {}
    answer = body.get("answer")
    text = answer if isinstance(answer, str) else ""
    if isinstance(artifact, MultiResponseArtifact) and not artifact.responses:
        text = NO_RESPONSE_TEXT

    log_with_context(
        logger,
        logging.INFO,
        f"Resolved response as {artifact.kind}",
        classified_as=classification.kind.value,
        classification_source=classification.source.value,
        response_id=response_id,
    )

    return ResolvedResponse(
        artifact=artifact,
        classified_as=classification.kind,
        classification_source=classification.source,
        exportable=ArtifactKind(artifact.kind) in EXPORTABLE_KINDS,
        sources=parse_sources(body.get("sources")),
        text=text,
        response_id=response_id,
    )
