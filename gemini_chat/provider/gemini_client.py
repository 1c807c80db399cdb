"""Gemini REST client for single-shot chat completions.

Talks to the ``generateContent`` endpoint with httpx and hides the wire
format from the rest of the application.

Design decisions:

1. **Role mapping table** - The provider calls the assistant ``model``. The
   translation lives in one dict so no other module ever sees wire roles.

2. **Key resolved per call** - The API key is read when a request is made,
   so a missing key turns into a ``ConfigurationError`` for that turn only.

3. **Key in a header** - The key is sent as ``x-goog-api-key`` rather than a
   query parameter so it never shows up in httpx request logs.

4. **Bounded retry** - 5xx responses, timeouts and connect errors are retried
   a few times with linear backoff. 4xx responses fail immediately.
"""

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

import httpx

from gemini_chat.models.schemas import ChatMessage, Role
from gemini_chat.provider.config import GeminiConfig, get_gemini_config
from gemini_chat.provider.errors import (
    ConfigurationError,
    MalformedResponseError,
    ProviderError,
)

logger = logging.getLogger(__name__)

WIRE_ROLES: dict[Role, str] = {
    Role.USER: "user",
    Role.ASSISTANT: "model",
}

_RETRYABLE_TRANSPORT_ERRORS = (httpx.TimeoutException, httpx.ConnectError)


class GeminiClient:
    """Async client for the Gemini ``generateContent`` API.

    Usage:
        async with GeminiClient() as client:
            text = await client.complete(history, model="gemini-2.5-flash")
    """

    def __init__(
        self,
        config: GeminiConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Optional client configuration.
                    Loads from environment if not provided.
            http_client: Optional pre-built httpx client (tests inject one
                         backed by ``httpx.MockTransport``).
        """
        self._config = config or get_gemini_config()
        self._http = http_client
        self._owns_http = http_client is None

    @property
    def default_model(self) -> str:
        return self._config.model_name

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self._config.timeout)
        return self._http

    def build_payload(self, history: Sequence[ChatMessage]) -> dict[str, Any]:
        """Convert a conversation into the provider request body.

        Args:
            history: Ordered role/content pairs.

        Returns:
            JSON-serializable request body.
        """
        return {
            "contents": [
                {"role": WIRE_ROLES[msg.role], "parts": [{"text": msg.content}]}
                for msg in history
            ],
            "generationConfig": {
                "temperature": self._config.temperature,
                "topK": self._config.top_k,
                "topP": self._config.top_p,
                "maxOutputTokens": self._config.max_output_tokens,
            },
        }

    async def complete(self, history: Sequence[ChatMessage], model: str | None = None) -> str:
        """Send the conversation and return the first candidate's text.

        Args:
            history: Ordered role/content pairs, oldest first.
            model: Model to use (overrides the configured default).

        Returns:
            The reply text, unmodified.

        Raises:
            ConfigurationError: No API key is available.
            ProviderError: The provider returned a non-success status or the
                request could not be completed.
            MalformedResponseError: The success payload had no usable text.
        """
        api_key = self._config.resolve_api_key()
        if not api_key:
            raise ConfigurationError(
                "Gemini API key not found. Set GEMINI_API_KEY in the environment or .env"
            )

        model_to_use = model or self._config.model_name
        url = f"{self._config.base_url}/models/{model_to_use}:generateContent"
        payload = self.build_payload(history)
        headers = {"Content-Type": "application/json", "x-goog-api-key": api_key}

        response = await self._post_with_retry(url, payload, headers)
        if not response.is_success:
            raise ProviderError(response.status_code, _error_message(response))
        return _extract_text(response)

    async def _post_with_retry(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str],
    ) -> httpx.Response:
        http = self._get_http_client()
        attempts = self._config.max_retries + 1

        for attempt in range(attempts):
            is_last = attempt == attempts - 1
            try:
                response = await http.post(
                    url, json=payload, headers=headers, timeout=self._config.timeout
                )
            except _RETRYABLE_TRANSPORT_ERRORS as e:
                if is_last:
                    raise ProviderError(None, f"Connection failed: {e}") from e
                logger.warning(f"Gemini transport error (attempt {attempt + 1}/{attempts}): {e}")
            except httpx.RequestError as e:
                raise ProviderError(None, f"Connection failed: {e}") from e
            else:
                if response.status_code < 500 or is_last:
                    return response
                logger.warning(
                    f"Gemini returned {response.status_code} (attempt {attempt + 1}/{attempts})"
                )

            await asyncio.sleep(self._config.retry_backoff * (attempt + 1))

        # Unreachable: the final attempt either returns or raises.
        raise ProviderError(None, "No attempts made")

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> "GeminiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def _error_message(response: httpx.Response) -> str:
    """Pull ``error.message`` from an error body, else the reason phrase."""
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return response.reason_phrase or "Unknown error"


def _extract_text(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError as e:
        raise MalformedResponseError("Invalid response received from Gemini: body is not JSON") from e

    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedResponseError("Invalid response received from Gemini") from e

    if not isinstance(text, str):
        raise MalformedResponseError("Invalid response received from Gemini")
    return text
