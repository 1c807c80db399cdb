"""Gemini client configuration with environment variable loading.

Pydantic-based configuration for the Gemini REST client. The API key is
optional here and resolved at call time so a missing key fails the turn,
not the process.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-flash"


class GeminiConfig(BaseModel):
    """Configuration for the Gemini client.

    Attributes:
        api_key: Explicit API key. Falls back to the environment when unset.
        base_url: REST API base URL.
        model_name: Model used when a call does not name one.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
        top_k: Top-k sampling cutoff.
        top_p: Nucleus sampling cutoff.
        max_output_tokens: Maximum tokens in generated response.
        timeout: Request timeout in seconds.
        max_retries: Extra attempts after a transient failure.
        retry_backoff: Base delay in seconds between attempts.
    """

    api_key: str | None = Field(default=None, description="Gemini API key")
    base_url: str = Field(
        default_factory=lambda: os.getenv("GEMINI_BASE_URL", DEFAULT_BASE_URL),
        description="Gemini REST API base URL",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
        description="Default model",
    )
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    top_k: int = Field(default=40, ge=1)
    top_p: float = Field(default=0.95, ge=0.0, le=1.0)
    max_output_tokens: int = Field(default=2048, ge=1, le=65536)
    timeout: float = Field(default=60.0, gt=0.0, description="Request timeout in seconds")
    max_retries: int = Field(default=2, ge=0, le=5)
    retry_backoff: float = Field(default=0.5, ge=0.0)

    @field_validator("api_key")
    @classmethod
    def strip_api_key(cls, v: str | None) -> str | None:
        """Treat a blank key as unset."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def resolve_api_key(self) -> str | None:
        """Return the configured key, or read it from the environment now.

        Returns:
            The API key, or None if none is available.
        """
        if self.api_key:
            return self.api_key
        key = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or ""
        return key.strip() or None


def get_gemini_config() -> GeminiConfig:
    """Create Gemini configuration from environment.

    Returns:
        Configured GeminiConfig instance.
    """
    return GeminiConfig()
