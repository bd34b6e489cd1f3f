"""API endpoints for resolving and exporting troubleshooting artifacts."""

from typing import Any, Literal

from fastapi import APIRouter, Body, HTTPException, Query
from fastapi.responses import PlainTextResponse, Response

from artifact_engine.core.artifact_export import artifact_to_json, artifact_to_text
from artifact_engine.core.errors import UpstreamError
from artifact_engine.core.logging import get_logger
from artifact_engine.core.multi_response import resolve_response
from artifact_engine.core.schemas_artifacts import ResolvedResponse

logger = get_logger(__name__)

router = APIRouter()


def _resolve(payload: dict[str, Any]) -> ResolvedResponse:
    try:
        return resolve_response(payload)
    except UpstreamError as e:
        logger.warning(f"Upstream reported failure: {e}")
        raise HTTPException(status_code=502, detail=str(e)) from e


@router.post("/resolve", response_model=ResolvedResponse)
async def resolve_artifact(payload: dict[str, Any] = Body(...)) -> ResolvedResponse:
    """
    Resolve a raw troubleshooting assistant response into a canonical artifact.

    Args:
        payload: Raw response body as returned by the assistant

    Returns:
        ResolvedResponse with the artifact and how it was classified

    Raises:
        HTTPException 502: If the payload is an upstream failure
    """
    return _resolve(payload)


@router.post("/export")
async def export_artifact(
    payload: dict[str, Any] = Body(...),
    export_format: Literal["text", "json"] = Query("text", alias="format"),
) -> Response:
    """
    Resolve a raw response and export its artifact as plain text or JSON.

    Raises:
        HTTPException 502: If the payload is an upstream failure
    """
    resolved = _resolve(payload)

    if export_format == "json":
        return Response(content=artifact_to_json(resolved.artifact), media_type="application/json")
    return PlainTextResponse(artifact_to_text(resolved.artifact))
