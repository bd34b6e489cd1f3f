"""Error taxonomy for the troubleshooting assistant integration.

Only the network edge (the upstream client) and the explicit upstream
failure contract raise these. Classification, normalization and building
never raise: a payload that fits no artifact becomes an InfoMessage.
"""

UPLOAD_FAILURE_MESSAGE = "Failed to upload image. Please try again."
IMAGE_TOO_LARGE_MESSAGE = "Image is too large. Please use an image smaller than 10MB."
PROCESSING_ERROR_MESSAGE = (
    "The AI encountered a processing error. Please try rephrasing your question "
    "or starting a new conversation."
)
TIMEOUT_MESSAGE = (
    "The request timed out. The AI may be processing a complex query. Please try again."
)

TIMEOUT_MARKERS = ("FUNCTION_INVOCATION_TIMEOUT", "timeout", "timed out", "504")
PROCESSING_ERROR_MARKERS = ("Invalid regular expression", "Unterminated group")
TOO_LARGE_MARKER = "Request Entity Too Large"


class ArtifactEngineError(Exception):
    """Base class for troubleshooting integration errors."""


class UpstreamError(ArtifactEngineError):
    """The assistant answered `{success: false, error}`; the message is shown verbatim."""


class SessionUnavailable(ArtifactEngineError):
    """Session creation or a session-based send failed."""


class UploadFailure(ArtifactEngineError):
    """An image upload failed before the query was sent."""

    def __init__(self, message: str = UPLOAD_FAILURE_MESSAGE):
        super().__init__(message)


class NetworkTimeout(ArtifactEngineError):
    """The upstream request timed out."""


class ImageTooLarge(ArtifactEngineError):
    """The upstream rejected the request body as too large."""


class UpstreamProcessingError(ArtifactEngineError):
    """The upstream failed internally while processing the question."""


def classify_http_failure(status_code: int | None, body: str) -> ArtifactEngineError:
    """
    Map a failed upstream HTTP exchange onto the error taxonomy.

    Args:
        status_code: HTTP status (None if no response was received)
        body: Response body or transport error message

    Returns:
        The matching error instance (not raised)
    """
    body = body or ""
    if status_code == 413 or TOO_LARGE_MARKER in body:
        return ImageTooLarge(IMAGE_TOO_LARGE_MESSAGE)
    if any(marker in body for marker in PROCESSING_ERROR_MARKERS):
        return UpstreamProcessingError(PROCESSING_ERROR_MESSAGE)
    if status_code == 504 or any(marker in body for marker in TIMEOUT_MARKERS):
        return NetworkTimeout(TIMEOUT_MESSAGE)
    return UpstreamError(body or f"Server error: {status_code}")


def user_message(error: Exception) -> str:
    """
    Text to show the end user for a failed request.

    Integration errors already carry user-facing wording (upstream errors
    verbatim); anything else is wrapped in an apology.
    """
    if isinstance(error, ArtifactEngineError):
        return str(error)
    return f"Sorry, I encountered an error: {error}"
