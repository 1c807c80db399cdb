"""In-memory conversation store.

Owns every Chat and Message record. The presentation layer reads through the
accessors and learns about changes by subscribing; it never keeps its own copy.

Invariants:
    - At least one chat exists and exactly one is current.
    - A chat holds at most one placeholder message, always in last position.
"""

import logging
from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel

from gemini_chat.conversation.errors import ChatNotFoundError, InvalidStateError
from gemini_chat.models.schemas import Chat, Message, utcnow

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 50
TITLE_TRUNCATION_MARKER = "..."


def derive_title(text: str, max_length: int = TITLE_MAX_LENGTH) -> str:
    """Build a chat title from the first user message.

    Args:
        text: The message text.
        max_length: Characters kept before truncating.

    Returns:
        The trimmed text, cut to ``max_length`` with a trailing marker if longer.
    """
    text = text.strip()
    if len(text) > max_length:
        return text[:max_length] + TITLE_TRUNCATION_MARKER
    return text


class StoreEventKind(str, Enum):
    """Kinds of change the store reports to subscribers."""

    CHAT_CREATED = "chat_created"
    CHAT_SELECTED = "chat_selected"
    CHAT_DELETED = "chat_deleted"
    CHAT_UPDATED = "chat_updated"
    MESSAGE_APPENDED = "message_appended"
    MESSAGE_REPLACED = "message_replaced"


class StoreEvent(BaseModel):
    """A change notification.

    Attributes:
        kind: What happened.
        chat_id: The chat affected.
    """

    kind: StoreEventKind
    chat_id: str


StoreListener = Callable[[StoreEvent], None]


class ConversationStore:
    """Ordered collection of chats with a current selection.

    New chats go to the front of the list. A fresh store already holds one
    empty chat so the "at least one chat" invariant holds from construction.
    """

    def __init__(self, default_title: str = "New Chat") -> None:
        self._default_title = default_title
        self._chats: list[Chat] = []
        self._current_chat_id: str | None = None
        self._listeners: list[StoreListener] = []
        self.create_chat()

    # --- Accessors ---

    @property
    def chats(self) -> list[Chat]:
        """Chats in display order (newest first)."""
        return list(self._chats)

    @property
    def current_chat_id(self) -> str | None:
        return self._current_chat_id

    @property
    def current_chat(self) -> Chat | None:
        if self._current_chat_id is None:
            return None
        return self._find(self._current_chat_id)

    def get_chat(self, chat_id: str) -> Chat:
        """Return a chat by id.

        Raises:
            ChatNotFoundError: If the chat does not exist.
        """
        chat = self._find(chat_id)
        if chat is None:
            raise ChatNotFoundError(chat_id)
        return chat

    def has_chat(self, chat_id: str) -> bool:
        return self._find(chat_id) is not None

    def messages(self, chat_id: str) -> list[Message]:
        return list(self.get_chat(chat_id).messages)

    def starred_chats(self) -> list[Chat]:
        return [chat for chat in self._chats if chat.starred]

    # --- Subscriptions ---

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a change listener.

        Args:
            listener: Called with a StoreEvent after each mutation.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, kind: StoreEventKind, chat_id: str) -> None:
        event = StoreEvent(kind=kind, chat_id=chat_id)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Store listener failed on {kind.value} for {chat_id}")

    # --- Chat operations ---

    def create_chat(self) -> str:
        """Insert a new empty chat at the front and make it current.

        Returns:
            The new chat's id.
        """
        chat = Chat(title=self._default_title)
        self._chats.insert(0, chat)
        self._current_chat_id = chat.id
        logger.info(f"Created chat {chat.id}")
        self._emit(StoreEventKind.CHAT_CREATED, chat.id)
        return chat.id

    def select_chat(self, chat_id: str) -> None:
        """Make a chat current.

        Raises:
            ChatNotFoundError: If the chat does not exist. The selection is
                left unchanged.
        """
        self.get_chat(chat_id)
        self._current_chat_id = chat_id
        self._emit(StoreEventKind.CHAT_SELECTED, chat_id)

    def delete_chat(self, chat_id: str) -> None:
        """Remove a chat, keeping a valid current selection.

        If the deleted chat was current, the first remaining chat becomes
        current. If no chats remain, a new empty chat is created.

        Raises:
            ChatNotFoundError: If the chat does not exist.
        """
        chat = self.get_chat(chat_id)
        self._chats.remove(chat)
        logger.info(f"Deleted chat {chat_id}")

        reselected = self._current_chat_id == chat_id and bool(self._chats)
        if reselected:
            self._current_chat_id = self._chats[0].id
        self._emit(StoreEventKind.CHAT_DELETED, chat_id)

        if not self._chats:
            self.create_chat()
        elif reselected:
            self._emit(StoreEventKind.CHAT_SELECTED, self._current_chat_id)

    def toggle_starred(self, chat_id: str) -> Chat | None:
        """Flip a chat's starred flag.

        Returns:
            The updated chat, or None if it does not exist.
        """
        chat = self._find(chat_id)
        if chat is None:
            return None
        chat.starred = not chat.starred
        self._emit(StoreEventKind.CHAT_UPDATED, chat_id)
        return chat

    def rename_chat(self, chat_id: str, title: str) -> None:
        """Overwrite a chat's title.

        Raises:
            ChatNotFoundError: If the chat does not exist.
        """
        chat = self.get_chat(chat_id)
        chat.title = title
        self._emit(StoreEventKind.CHAT_UPDATED, chat_id)

    # --- Message operations ---

    def append_message(self, chat_id: str, message: Message) -> None:
        """Append a message and bump the chat's activity timestamp.

        Raises:
            ChatNotFoundError: If the chat does not exist.
            InvalidStateError: If the chat's last message is a placeholder.
        """
        chat = self.get_chat(chat_id)
        if chat.messages and chat.messages[-1].is_placeholder:
            raise InvalidStateError(
                f"Chat {chat_id} has a pending placeholder; resolve it before appending"
            )
        chat.messages.append(message)
        chat.last_activity_at = utcnow()
        self._emit(StoreEventKind.MESSAGE_APPENDED, chat_id)

    def replace_last_message(self, chat_id: str, message: Message) -> None:
        """Replace the trailing placeholder with a final message.

        Raises:
            ChatNotFoundError: If the chat does not exist.
            InvalidStateError: If there is no trailing placeholder, or the
                replacement is itself a placeholder.
        """
        chat = self.get_chat(chat_id)
        if not chat.messages:
            raise InvalidStateError(f"Chat {chat_id} has no messages")
        if not chat.messages[-1].is_placeholder:
            raise InvalidStateError(f"Last message in chat {chat_id} is not a placeholder")
        if message.is_placeholder:
            raise InvalidStateError("A placeholder cannot replace a placeholder")
        chat.messages[-1] = message
        chat.last_activity_at = utcnow()
        self._emit(StoreEventKind.MESSAGE_REPLACED, chat_id)

    def _find(self, chat_id: str) -> Chat | None:
        for chat in self._chats:
            if chat.id == chat_id:
                return chat
        return None
