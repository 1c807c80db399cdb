"""Process-wide chat service shared by the HTTP API and the web UI.

Bundles the conversation store, the turn orchestrator and the Gemini client
so both surfaces see the same chats.
"""

import logging
import os

from gemini_chat.conversation.locale import UiStrings, get_strings
from gemini_chat.conversation.orchestrator import CompletionProvider, TurnOrchestrator
from gemini_chat.conversation.store import ConversationStore
from gemini_chat.provider.config import DEFAULT_MODEL
from gemini_chat.provider.gemini_client import GeminiClient

logger = logging.getLogger(__name__)


class ChatService:
    """Store, orchestrator and provider wired together.

    Attributes:
        store: The conversation store.
        orchestrator: The turn orchestrator bound to ``store``.
        provider: The completion provider used by ``orchestrator``.
        strings: Locale strings for user-visible text.
    """

    def __init__(
        self,
        provider: CompletionProvider | None = None,
        locale: str | None = None,
        model: str | None = None,
    ) -> None:
        """Initialize the chat service.

        Args:
            provider: Optional completion provider. A GeminiClient configured
                      from the environment is created if not provided.
            locale: Locale for user-visible strings (``en`` or ``fa``).
            model: Initial model id. Defaults to the provider's default.
        """
        self.strings: UiStrings = get_strings(locale)
        self.provider = provider or GeminiClient()
        model = model or getattr(self.provider, "default_model", None) or DEFAULT_MODEL
        self.store = ConversationStore(default_title=self.strings.new_chat_title)
        self.orchestrator = TurnOrchestrator(
            self.store, self.provider, model=model, strings=self.strings
        )

    async def aclose(self) -> None:
        """Wait for in-flight turns, then release the provider."""
        await self.orchestrator.drain()
        close = getattr(self.provider, "aclose", None)
        if close is not None:
            await close()


# Module-level singleton instance
_chat_service: ChatService | None = None


def get_chat_service() -> ChatService:
    """Get or create the global chat service.

    Returns:
        The ChatService instance.
    """
    global _chat_service
    if _chat_service is None:
        _chat_service = ChatService(locale=os.getenv("CHAT_LOCALE"))
        logger.info(f"Chat service ready (model {_chat_service.orchestrator.model})")
    return _chat_service


def reset_chat_service() -> None:
    """Drop the global chat service so the next call builds a fresh one."""
    global _chat_service
    _chat_service = None


async def shutdown_chat_service() -> None:
    """Close the global chat service, if one was created."""
    global _chat_service
    if _chat_service is not None:
        await _chat_service.aclose()
        _chat_service = None
