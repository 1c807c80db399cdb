"""Pydantic models shared by the store, the orchestrator and the API.

Models:
    - Message / Chat: Records owned by the conversation store
    - ChatMessage: Provider-facing history entry
    - Attachment: File reference collected by the upload widget
    - ModelInfo: Catalog entry for a selectable model
    - Request/response payloads for the HTTP API
"""

from gemini_chat.models.schemas import (
    Attachment,
    Chat,
    ChatListResponse,
    ChatMessage,
    ChatSummary,
    Message,
    ModelInfo,
    RenameChatRequest,
    Role,
    TurnAccepted,
    TurnRequest,
)

__all__ = [
    "Attachment",
    "Chat",
    "ChatListResponse",
    "ChatMessage",
    "ChatSummary",
    "Message",
    "ModelInfo",
    "RenameChatRequest",
    "Role",
    "TurnAccepted",
    "TurnRequest",
]
