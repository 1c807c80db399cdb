"""Pydantic models for chats, messages and API payloads.

Provides type safety and validation for everything the conversation store
owns and everything the HTTP API accepts or returns.

Models:
    - Role: Closed set of message authors
    - Attachment: File reference submitted with a user message
    - Message: One entry in a chat
    - Chat: One conversation thread
    - ChatMessage: Role/content pair sent to the model provider
    - ModelInfo: Selectable model in the catalog
"""

import itertools
import time
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

_sequence = itertools.count(1)


def new_id(prefix: str) -> str:
    """Generate a unique identifier that sorts by creation order.

    Args:
        prefix: Short tag for the record type ("msg", "chat").

    Returns:
        Identifier of the form ``<prefix>_<epoch-ms>_<sequence>``.
    """
    return f"{prefix}_{int(time.time() * 1000)}_{next(_sequence):06d}"


def utcnow() -> datetime:
    return datetime.now(UTC)


class Role(str, Enum):
    """Author of a message."""

    USER = "user"
    ASSISTANT = "assistant"


class Attachment(BaseModel):
    """Metadata for a file attached to a user message.

    Attributes:
        name: Original file name.
        size: File size in bytes.
        content_type: MIME type reported by the client.
    """

    name: str = Field(..., min_length=1)
    size: int = Field(..., ge=0)
    content_type: str = ""


class Message(BaseModel):
    """A single message in a chat.

    Attributes:
        id: Unique identifier, ordered by creation.
        content: The message text (empty while a placeholder).
        role: Who wrote the message.
        created_at: Creation timestamp.
        is_placeholder: Marks the transient "assistant is typing" entry.
        is_error: Marks an assistant message reporting a failed turn.
        attachments: Files submitted with a user message.
    """

    id: str = Field(default_factory=lambda: new_id("msg"))
    content: str = ""
    role: Role
    created_at: datetime = Field(default_factory=utcnow)
    is_placeholder: bool = False
    is_error: bool = False
    attachments: list[Attachment] = Field(default_factory=list)


class Chat(BaseModel):
    """An independent conversation thread.

    Attributes:
        id: Unique identifier.
        title: Human-readable label shown in the chat list.
        created_at: Creation timestamp.
        last_activity_at: Timestamp of the most recent appended message.
        messages: Messages in conversation order.
        starred: User-toggled favourite flag.
    """

    id: str = Field(default_factory=lambda: new_id("chat"))
    title: str
    created_at: datetime = Field(default_factory=utcnow)
    last_activity_at: datetime = Field(default_factory=utcnow)
    messages: list[Message] = Field(default_factory=list)
    starred: bool = False


class ChatMessage(BaseModel):
    """A role/content pair in the history sent to the model provider."""

    role: Role
    content: str


class ModelInfo(BaseModel):
    """A selectable model.

    Attributes:
        id: Provider model identifier.
        name: Display name.
        description: Short description shown in the selector.
    """

    id: str
    name: str
    description: str = ""


class ChatSummary(BaseModel):
    """Chat list entry returned by the API."""

    id: str
    title: str
    starred: bool
    message_count: int = Field(..., ge=0)
    created_at: datetime
    last_activity_at: datetime

    @classmethod
    def from_chat(cls, chat: Chat) -> "ChatSummary":
        return cls(
            id=chat.id,
            title=chat.title,
            starred=chat.starred,
            message_count=len(chat.messages),
            created_at=chat.created_at,
            last_activity_at=chat.last_activity_at,
        )


class ChatListResponse(BaseModel):
    """All chats plus the current selection."""

    current_chat_id: str | None
    chats: list[ChatSummary]


class RenameChatRequest(BaseModel):
    """Request payload for renaming a chat."""

    title: str = Field(..., min_length=1, max_length=200)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v: str) -> str:
        """Strip whitespace from title before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class TurnRequest(BaseModel):
    """Request payload for submitting a user turn.

    Attributes:
        text: The user's message; may be empty when attachments are present.
        attachments: Previously validated attachment references.
        model: Optional model override for this turn.
    """

    text: str = ""
    attachments: list[Attachment] = Field(default_factory=list)
    model: str | None = None


class TurnAccepted(BaseModel):
    """Response after a turn has been accepted for processing."""

    chat_id: str
    user_message_id: str
    state: str
