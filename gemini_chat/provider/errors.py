"""Errors raised by the Gemini client."""


class GeminiError(Exception):
    """Base class for failures talking to the model provider."""

    pass


class ConfigurationError(GeminiError):
    """Raised when no API key is available."""

    pass


class ProviderError(GeminiError):
    """Raised when the provider answers with a non-success status.

    Attributes:
        status: HTTP status code, or None when the request never got a response.
        message: Provider error message or transport status line.
    """

    def __init__(self, status: int | None, message: str) -> None:
        self.status = status
        self.message = message
        if status is None:
            super().__init__(f"Gemini request failed: {message}")
        else:
            super().__init__(f"Gemini request failed: {status} - {message}")


class MalformedResponseError(GeminiError):
    """Raised when a success response carries no usable candidate text."""

    pass
