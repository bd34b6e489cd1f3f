"""Response envelope unwrapping.

The troubleshooting assistant wraps its payload in one of several envelopes
depending on the endpoint that produced it:

1. ``{type, data}``                                  (query endpoint)
2. ``{response: {type, data}}``                      (session endpoint)
3. ``{type: "multi_response", responses: [...]}``
4. ``{response: {type: "multi_response", responses: [...]}}``
5. a bare payload with no recognizable envelope

The first shape that fits wins.
"""

from collections.abc import Mapping
from typing import Any

from artifact_engine.core.schemas_artifacts import ArtifactKind, UnwrappedResponse

MULTI_RESPONSE_TAG = ArtifactKind.MULTI_RESPONSE.value


def _present(obj: Mapping[str, Any], key: str) -> bool:
    return obj.get(key) is not None


def _sibling_responses(obj: Mapping[str, Any]) -> list | None:
    responses = obj.get("responses")
    return responses if isinstance(responses, list) else None


def _sibling_meta(obj: Mapping[str, Any]) -> dict | None:
    meta = obj.get("_meta")
    return meta if isinstance(meta, dict) else None


def _unwrap_level(obj: Mapping[str, Any]) -> UnwrappedResponse | None:
    """Unwrap one envelope level: `{type, data}` or a multi_response with sibling responses."""
    if _present(obj, "type") and _present(obj, "data"):
        return UnwrappedResponse(
            type=obj["type"],
            data=obj["data"],
            responses=_sibling_responses(obj),
            meta=_sibling_meta(obj),
        )
    return None


def _unwrap_multi(obj: Mapping[str, Any]) -> UnwrappedResponse | None:
    responses = _sibling_responses(obj)
    if obj.get("type") == MULTI_RESPONSE_TAG and responses is not None:
        return UnwrappedResponse(
            type=MULTI_RESPONSE_TAG,
            data=obj.get("data"),
            responses=responses,
            meta=_sibling_meta(obj),
        )
    return None


def unwrap(response: Any) -> UnwrappedResponse:
    """
    Strip the transport envelope from an upstream response.

    Args:
        response: Raw JSON value as received

    Returns:
        UnwrappedResponse; untyped (type=None) when no envelope is recognized
    """
    if not isinstance(response, Mapping):
        return UnwrappedResponse(type=None, data=response)

    nested = response.get("response")
    nested = nested if isinstance(nested, Mapping) else None

    unwrapped = _unwrap_level(response)
    if unwrapped is None and nested is not None:
        unwrapped = _unwrap_level(nested)
    if unwrapped is None:
        unwrapped = _unwrap_multi(response)
    if unwrapped is None and nested is not None:
        unwrapped = _unwrap_multi(nested)

    return unwrapped or UnwrappedResponse(type=None, data=response)


def extract_children(unwrapped: UnwrappedResponse) -> list:
    """
    Find the child responses of a multi_response.

    Looks at ``data.responses``, then sibling ``responses``, then the
    double-wrapped ``data.data.responses``; the first non-empty list wins.

    Returns:
        List of raw child responses (possibly empty)
    """
    data = unwrapped.data if isinstance(unwrapped.data, Mapping) else {}
    inner = data.get("data") if isinstance(data.get("data"), Mapping) else {}

    for candidate in (data.get("responses"), unwrapped.responses, inner.get("responses")):
        if isinstance(candidate, list) and candidate:
            return candidate
    return []


def extract_meta(unwrapped: UnwrappedResponse) -> dict | None:
    """Return the `_meta` block of a multi_response (inside data first, then sibling)."""
    data = unwrapped.data
    if isinstance(data, Mapping) and isinstance(data.get("_meta"), dict):
        return data["_meta"]
    return unwrapped.meta
