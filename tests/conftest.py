"""Pytest configuration and fixtures."""

import os

import pytest

from artifact_engine.core.config import get_settings


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["ARTIFACT_ENGINE_ENV"] = "test"
    os.environ["RESOLVE_API_URL"] = "https://resolve.test/functions/v1/troubleshoot-agent"
    os.environ["RESOLVE_API_KEY"] = "test-resolve-key"
    os.environ["UPLOAD_URL"] = "https://resolve.test/upload-image"
    get_settings.cache_clear()
