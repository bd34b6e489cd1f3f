"""Configuration management for the Troubleshoot Artifact Engine."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Environment
    ARTIFACT_ENGINE_ENV: str = Field(
        default="dev", description="Environment: dev, staging, prod, test"
    )

    # Upstream troubleshooting assistant
    RESOLVE_API_URL: str = Field(
        default="https://api.resolve.example/functions/v1/troubleshoot-agent",
        description="Troubleshoot agent endpoint (single POST endpoint, action in body)",
    )
    RESOLVE_API_KEY: str | None = Field(default=None, description="Troubleshoot agent API key")
    RESOLVE_TIMEOUT_SECONDS: float = Field(
        default=300.0, description="Upstream request timeout in seconds"
    )
    UPLOAD_URL: str | None = Field(
        default=None, description="Image upload endpoint returning a public URL"
    )
    MAX_UPLOAD_BYTES: int = Field(
        default=10 * 1024 * 1024, description="Max image upload size in bytes"
    )

    # Artifact defaults
    DRAFT_WORK_ORDER_NUMBER: str = Field(
        default="WO-DRAFT", description="Placeholder for work orders without a number"
    )
    MAX_CITATION_PREVIEW: int = Field(
        default=5, description="Manuals listed in a synthesized citation message"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance
    """
    return Settings()
