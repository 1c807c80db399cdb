"""Conversation state and turn orchestration.

Responsibilities:
    - Owning chats and messages (ConversationStore)
    - Running user turns against the model provider (TurnOrchestrator)
    - Sharing one store between the API and the UI (ChatService)

Keeps all conversation state in one explicit object with change
subscriptions. No other module holds chat data of its own.
"""

from gemini_chat.conversation.errors import (
    ChatNotFoundError,
    ConversationError,
    InvalidStateError,
    TurnInProgressError,
)
from gemini_chat.conversation.orchestrator import (
    TurnFailure,
    TurnOrchestrator,
    TurnOutcome,
    TurnState,
)
from gemini_chat.conversation.service import ChatService, get_chat_service
from gemini_chat.conversation.store import (
    ConversationStore,
    StoreEvent,
    StoreEventKind,
    derive_title,
)

__all__ = [
    "ChatNotFoundError",
    "ChatService",
    "ConversationError",
    "ConversationStore",
    "InvalidStateError",
    "StoreEvent",
    "StoreEventKind",
    "TurnFailure",
    "TurnInProgressError",
    "TurnOrchestrator",
    "TurnOutcome",
    "TurnState",
    "derive_title",
    "get_chat_service",
]
