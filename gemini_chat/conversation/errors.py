"""Errors raised by the conversation store and turn orchestrator."""


class ConversationError(Exception):
    """Base class for store and orchestrator contract violations."""

    pass


class ChatNotFoundError(ConversationError):
    """Raised when an operation names a chat that does not exist."""

    def __init__(self, chat_id: str) -> None:
        self.chat_id = chat_id
        super().__init__(f"Chat not found: {chat_id}")


class InvalidStateError(ConversationError):
    """Raised when a mutation would break the placeholder invariant."""

    pass


class TurnInProgressError(ConversationError):
    """Raised when a chat already has a turn awaiting a response."""

    def __init__(self, chat_id: str) -> None:
        self.chat_id = chat_id
        super().__init__(f"A turn is already in progress for chat {chat_id}")
