"""Model provider client for Google Gemini.

Responsibilities:
    - Formatting conversation history into the Gemini wire schema
    - One logical request per turn, with a bounded transport retry
    - Mapping provider failures onto a small error taxonomy
    - The static catalog of selectable models

The rest of the application only sees ``complete(history, model) -> text``.
"""

from gemini_chat.provider.catalog import MODELS, UnknownModelError, default_model, get_model
from gemini_chat.provider.config import GeminiConfig, get_gemini_config
from gemini_chat.provider.errors import (
    ConfigurationError,
    GeminiError,
    MalformedResponseError,
    ProviderError,
)
from gemini_chat.provider.gemini_client import WIRE_ROLES, GeminiClient

__all__ = [
    "MODELS",
    "WIRE_ROLES",
    "ConfigurationError",
    "GeminiClient",
    "GeminiConfig",
    "GeminiError",
    "MalformedResponseError",
    "ProviderError",
    "UnknownModelError",
    "default_model",
    "get_gemini_config",
    "get_model",
]
