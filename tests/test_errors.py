"""Tests for the upstream error taxonomy."""

import pytest

from artifact_engine.core.errors import (
    IMAGE_TOO_LARGE_MESSAGE,
    PROCESSING_ERROR_MESSAGE,
    TIMEOUT_MESSAGE,
    UPLOAD_FAILURE_MESSAGE,
    ImageTooLarge,
    NetworkTimeout,
    UploadFailure,
    UpstreamError,
    UpstreamProcessingError,
    classify_http_failure,
    user_message,
)


class TestClassifyHttpFailure:
    def test_413_is_too_large(self):
        error = classify_http_failure(413, "")
        assert isinstance(error, ImageTooLarge)
        assert str(error) == IMAGE_TOO_LARGE_MESSAGE

    def test_too_large_body(self):
        assert isinstance(classify_http_failure(500, "Request Entity Too Large"), ImageTooLarge)

    @pytest.mark.parametrize("body", ["Invalid regular expression: /(/", "Unterminated group"])
    def test_processing_error(self, body):
        error = classify_http_failure(500, body)
        assert isinstance(error, UpstreamProcessingError)
        assert str(error) == PROCESSING_ERROR_MESSAGE

    @pytest.mark.parametrize(
        "status,body",
        [
            (504, ""),
            (500, "FUNCTION_INVOCATION_TIMEOUT"),
            (500, "upstream timeout"),
            (None, "The read operation timed out"),
        ],
    )
    def test_timeout(self, status, body):
        error = classify_http_failure(status, body)
        assert isinstance(error, NetworkTimeout)
        assert str(error) == TIMEOUT_MESSAGE

    def test_other_failures_keep_body(self):
        error = classify_http_failure(500, "Knowledge base not found")
        assert type(error) is UpstreamError
        assert str(error) == "Knowledge base not found"

    def test_empty_body_reports_status(self):
        assert str(classify_http_failure(502, "")) == "Server error: 502"


class TestUserMessage:
    def test_upload_failure(self):
        assert user_message(UploadFailure()) == UPLOAD_FAILURE_MESSAGE

    def test_upstream_error_is_verbatim(self):
        assert user_message(UpstreamError("Quota exceeded")) == "Quota exceeded"

    def test_unexpected_error_is_wrapped(self):
        assert user_message(RuntimeError("boom")) == "Sorry, I encountered an error: boom"
