"""Async client for the troubleshooting assistant.

The assistant exposes a single POST endpoint; the operation is selected by an
``action`` field in the JSON body and the API key travels in the body as
``api_key``. Responses are returned raw so that ``resolve_response`` can turn
them into canonical artifacts.
"""

import json
from typing import Any

import httpx

from artifact_engine.core.config import get_settings
from artifact_engine.core.errors import (
    IMAGE_TOO_LARGE_MESSAGE,
    TIMEOUT_MESSAGE,
    ArtifactEngineError,
    ImageTooLarge,
    NetworkTimeout,
    SessionUnavailable,
    UpstreamError,
    UploadFailure,
    classify_http_failure,
)
from artifact_engine.core.logging import get_logger
from artifact_engine.core.multi_response import resolve_response
from artifact_engine.core.schemas_artifacts import ResolvedResponse
from artifact_engine.core.session_state import SessionStateMachine

logger = get_logger(__name__)

DEFAULT_RESPONSE_FORMAT = "ui"
IMAGE_ONLY_PROMPT = "Please analyze this image and help me troubleshoot."


class TroubleshootClient:
    """Thin async wrapper around the troubleshooting assistant endpoint."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 300.0,
        upload_url: str | None = None,
        max_upload_bytes: int = 10 * 1024 * 1024,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_key:
            raise ValueError("RESOLVE_API_KEY not configured")
        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout
        self.upload_url = upload_url
        self.max_upload_bytes = max_upload_bytes
        self._transport = transport

    @classmethod
    def from_settings(cls, transport: httpx.AsyncBaseTransport | None = None) -> "TroubleshootClient":
        settings = get_settings()
        return cls(
            base_url=settings.RESOLVE_API_URL,
            api_key=settings.RESOLVE_API_KEY or "",
            timeout=settings.RESOLVE_TIMEOUT_SECONDS,
            upload_url=settings.UPLOAD_URL,
            max_upload_bytes=settings.MAX_UPLOAD_BYTES,
            transport=transport,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def _request(self, action: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        POST one action to the assistant.

        Args:
            action: Operation name (query, start_session, send_message, ...)
            params: Action parameters; None values are omitted

        Returns:
            Parsed JSON body (a `{success: false}` body is returned, not raised)

        Raises:
            NetworkTimeout: On timeouts or an empty body
            UpstreamError: On an unparsable body or a failed HTTP status
        """
        body = {k: v for k, v in (params or {}).items() if v is not None}
        body["action"] = action
        body["api_key"] = self.api_key

        try:
            async with self._client() as client:
                response = await client.post(self.base_url, json=body)
        except httpx.TimeoutException as e:
            logger.warning(f"Troubleshoot request '{action}' timed out: {e}")
            raise NetworkTimeout(TIMEOUT_MESSAGE) from e
        except httpx.HTTPError as e:
            logger.error(f"Troubleshoot request '{action}' failed: {e}")
            raise classify_http_failure(None, str(e)) from e

        text = response.text
        if not text.strip():
            raise NetworkTimeout(
                f"Empty response from API (status: {response.status_code}). "
                "The request may have timed out."
            )

        if not response.is_success:
            logger.error(f"Troubleshoot request '{action}' returned {response.status_code}")
            raise classify_http_failure(response.status_code, _error_text(text))

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(f"Invalid JSON response from API: {text[:100]}...") from e

        if not isinstance(data, dict):
            raise UpstreamError(f"Unexpected response from API: {text[:100]}...")
        return data

    async def query(
        self,
        message: str,
        image_url: str | None = None,
        knowledge_base_id: str | None = None,
        context: dict[str, str] | None = None,
        response_format: str = DEFAULT_RESPONSE_FORMAT,
    ) -> dict[str, Any]:
        """Stateless question; the raw body is returned for resolution."""
        return await self._request(
            "query",
            {
                "message": message or IMAGE_ONLY_PROMPT,
                "image_url": image_url,
                "knowledge_base_id": knowledge_base_id,
                "response_format": response_format,
                "context": context or None,
            },
        )

    async def create_session(
        self,
        title: str | None = None,
        knowledge_base_id: str | None = None,
    ) -> str:
        """
        Start a session that keeps conversation history upstream.

        Returns:
            The new session id

        Raises:
            SessionUnavailable: If the assistant does not hand back a session
        """
        data = await self._request(
            "start_session", {"title": title, "knowledge_base_id": knowledge_base_id}
        )
        session = data.get("session")
        session_id = session.get("id") if isinstance(session, dict) else None
        if data.get("success") is False or not session_id:
            raise SessionUnavailable(data.get("error") or "Sessions are not supported")
        return str(session_id)

    async def send_message(
        self,
        session_id: str,
        message: str,
        image_url: str | None = None,
        response_format: str = DEFAULT_RESPONSE_FORMAT,
    ) -> dict[str, Any]:
        """Send a message within a session; the knowledge base is inherited from it."""
        return await self._request(
            "send_message",
            {
                "session_id": session_id,
                "message": message or IMAGE_ONLY_PROMPT,
                "image_url": image_url,
                "response_format": response_format,
            },
        )

    async def upload_image(
        self,
        content: bytes,
        filename: str = "image.jpg",
        content_type: str = "image/jpeg",
    ) -> str:
        """
        Upload an image and return its public URL.

        Raises:
            ImageTooLarge: If the image exceeds the upload limit
            UploadFailure: On any other upload failure
        """
        if len(content) > self.max_upload_bytes:
            raise ImageTooLarge(IMAGE_TOO_LARGE_MESSAGE)
        if not self.upload_url:
            raise UploadFailure()

        try:
            async with self._client() as client:
                response = await client.post(
                    self.upload_url,
                    files={"file": (filename, content, content_type)},
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Image upload failed: {e}")
            raise UploadFailure() from e

        url = data.get("url") if isinstance(data, dict) else None
        if not url:
            logger.error("Image upload returned no URL")
            raise UploadFailure()
        return url


def _error_text(text: str) -> str:
    """Prefer the `error` field of a JSON error body, else the raw text."""
    try:
        data = json.loads(text)
    except ValueError:
        return text
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return text


class TroubleshootConversation:
    """
    One conversation with the assistant.

    Tries to keep history in an upstream session and falls back to stateless
    queries for the rest of the conversation after the first session failure.
    """

    def __init__(
        self,
        client: TroubleshootClient,
        knowledge_base_id: str | None = None,
        title: str | None = None,
    ):
        self.client = client
        self.knowledge_base_id = knowledge_base_id
        self.title = title
        self.session = SessionStateMachine()

    def reset(self) -> None:
        """Forget the session so the next question creates a new one."""
        self.session = SessionStateMachine()

    async def _ensure_session(self, message: str) -> None:
        if not self.session.should_create_session:
            return
        self.session.begin_creation()
        try:
            session_id = await self.client.create_session(
                title=self.title or message[:50] or None,
                knowledge_base_id=self.knowledge_base_id,
            )
        except ArtifactEngineError as e:
            self.session.disable(str(e))
            return
        self.session.session_created(session_id)

    async def ask(
        self,
        message: str,
        image_url: str | None = None,
        context: dict[str, str] | None = None,
    ) -> ResolvedResponse:
        """
        Ask a question and resolve the answer into a canonical artifact.

        Raises:
            UpstreamError: If the assistant reports failure
            NetworkTimeout: If the stateless request times out
        """
        await self._ensure_session(message)

        body = None
        if self.session.uses_session:
            try:
                body = await self.client.send_message(
                    self.session.session_id, message, image_url=image_url
                )
            except ArtifactEngineError as e:
                self.session.disable(str(e))

        if body is None:
            body = await self.client.query(
                message,
                image_url=image_url,
                knowledge_base_id=self.knowledge_base_id,
                context=context,
            )

        return resolve_response(body)
