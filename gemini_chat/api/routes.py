"""Chat, turn, model and upload endpoints.

Thin HTTP layer over the shared ChatService. Turns are fire-and-forget:
``POST /chats/{id}/turns`` returns 202 once the user message and placeholder
are stored; clients poll ``GET /chats/{id}/messages`` for the reply.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, UploadFile, status

from gemini_chat.conversation.errors import ChatNotFoundError, TurnInProgressError
from gemini_chat.conversation.service import ChatService, get_chat_service
from gemini_chat.models.schemas import (
    Attachment,
    Chat,
    ChatListResponse,
    ChatSummary,
    Message,
    ModelInfo,
    RenameChatRequest,
    Role,
    TurnAccepted,
    TurnRequest,
)
from gemini_chat.provider.catalog import MODELS, UnknownModelError
from gemini_chat.uploads.validation import (
    AttachmentError,
    AttachmentTooLargeError,
    validate_attachment,
    validate_attachments,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chats"])


def _require_chat(service: ChatService, chat_id: str) -> None:
    if not service.store.has_chat(chat_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Chat not found: {chat_id}"
        )


def _get_chat_or_404(service: ChatService, chat_id: str) -> Chat:
    """Look up a chat.

    Raises:
        HTTPException: 404 if the chat does not exist.
    """
    try:
        return service.store.get_chat(chat_id)
    except ChatNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


def _chat_list(service: ChatService, starred_only: bool = False) -> ChatListResponse:
    chats = service.store.starred_chats() if starred_only else service.store.chats
    return ChatListResponse(
        current_chat_id=service.store.current_chat_id,
        chats=[ChatSummary.from_chat(chat) for chat in chats],
    )


@router.get("/models", response_model=list[ModelInfo])
async def list_models() -> list[ModelInfo]:
    """List the selectable models."""
    return MODELS


@router.get("/chats", response_model=ChatListResponse)
async def list_chats(
    starred: bool = False,
    service: ChatService = Depends(get_chat_service),
) -> ChatListResponse:
    """List chats, newest first, with the current selection.

    Args:
        starred: Only return starred chats.
    """
    return _chat_list(service, starred_only=starred)


@router.post("/chats", response_model=ChatSummary, status_code=status.HTTP_201_CREATED)
async def create_chat(service: ChatService = Depends(get_chat_service)) -> ChatSummary:
    """Create an empty chat and make it current."""
    chat_id = service.store.create_chat()
    return ChatSummary.from_chat(service.store.get_chat(chat_id))


@router.post("/chats/{chat_id}/select", status_code=status.HTTP_204_NO_CONTENT)
async def select_chat(chat_id: str, service: ChatService = Depends(get_chat_service)) -> Response:
    """Make a chat current.

    Raises:
        404: Unknown chat; the selection is unchanged.
    """
    _require_chat(service, chat_id)
    service.store.select_chat(chat_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/chats/{chat_id}", response_model=ChatListResponse)
async def delete_chat(
    chat_id: str, service: ChatService = Depends(get_chat_service)
) -> ChatListResponse:
    """Delete a chat and return the remaining chats."""
    _require_chat(service, chat_id)
    service.store.delete_chat(chat_id)
    return _chat_list(service)


@router.post("/chats/{chat_id}/star", response_model=ChatSummary)
async def toggle_star(chat_id: str, service: ChatService = Depends(get_chat_service)) -> ChatSummary:
    """Flip a chat's starred flag."""
    chat = service.store.toggle_starred(chat_id)
    if chat is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Chat not found: {chat_id}")
    return ChatSummary.from_chat(chat)


@router.patch("/chats/{chat_id}", response_model=ChatSummary)
async def rename_chat(
    chat_id: str,
    request: RenameChatRequest,
    service: ChatService = Depends(get_chat_service),
) -> ChatSummary:
    """Rename a chat."""
    chat = _get_chat_or_404(service, chat_id)
    service.store.rename_chat(chat_id, request.title)
    return ChatSummary.from_chat(chat)


@router.get("/chats/{chat_id}/messages", response_model=list[Message])
async def list_messages(
    chat_id: str, service: ChatService = Depends(get_chat_service)
) -> list[Message]:
    """Return a chat's messages in conversation order."""
    return list(_get_chat_or_404(service, chat_id).messages)


@router.post(
    "/chats/{chat_id}/turns",
    response_model=TurnAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
async def submit_turn(
    chat_id: str,
    request: TurnRequest,
    service: ChatService = Depends(get_chat_service),
) -> TurnAccepted:
    """Submit a user message and start fetching the reply.

    Raises:
        400: No text and no attachments, or an invalid attachment.
        404: Unknown chat.
        409: A turn is already in progress for this chat.
        422: Unknown model.
    """
    _require_chat(service, chat_id)

    try:
        attachments = validate_attachments(request.attachments)
    except AttachmentError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    try:
        task = service.orchestrator.submit_turn(
            chat_id, request.text, attachments, model=request.model
        )
    except TurnInProgressError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except UnknownModelError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    if task is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Message text or at least one attachment is required",
        )

    user_message = next(
        msg for msg in reversed(service.store.messages(chat_id)) if msg.role == Role.USER
    )
    return TurnAccepted(
        chat_id=chat_id,
        user_message_id=user_message.id,
        state=service.orchestrator.turn_state(chat_id).value,
    )


@router.post("/uploads", response_model=Attachment)
async def upload_attachment(file: UploadFile) -> Attachment:
    """Validate an uploaded file and return its attachment reference.

    Raises:
        400: Missing name, empty file, or unsupported type.
        413: File exceeds the size limit.
    """
    content = await file.read()
    try:
        attachment = validate_attachment(file.filename, file.content_type, len(content))
    except AttachmentTooLargeError as e:
        raise HTTPException(
            status_code=413,
            detail=str(e),
        ) from e
    except AttachmentError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    logger.info(f"Accepted attachment {attachment.name} ({attachment.size} bytes)")
    return attachment
