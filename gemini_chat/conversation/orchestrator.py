"""Turn orchestration between the conversation store and the model provider.

A turn moves through these states:

    idle -> user_message_appended -> awaiting_response -> resolved | failed

The user message and the placeholder are written synchronously; the only
suspension point is the provider call. Provider failures never escape a turn:
they become an assistant error message plus a failure notification.
A cancelled turn is resolved the same way before the cancellation propagates.

Only one turn per chat may await a response at a time. A second submission
to the same chat raises ``TurnInProgressError`` without touching the store.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Protocol

from pydantic import BaseModel

from gemini_chat.conversation.errors import ChatNotFoundError, TurnInProgressError
from gemini_chat.conversation.locale import UiStrings, get_strings
from gemini_chat.conversation.store import (
    ConversationStore,
    StoreEvent,
    StoreEventKind,
    derive_title,
)
from gemini_chat.models.schemas import Attachment, ChatMessage, Message, Role
from gemini_chat.provider.catalog import get_model
from gemini_chat.provider.config import DEFAULT_MODEL
from gemini_chat.provider.errors import GeminiError

logger = logging.getLogger(__name__)


class CompletionProvider(Protocol):
    """Anything that can turn a conversation into a reply."""

    async def complete(self, history: Sequence[ChatMessage], model: str | None = None) -> str: ...


class TurnState(str, Enum):
    """Lifecycle of a single turn."""

    IDLE = "idle"
    USER_MESSAGE_APPENDED = "user_message_appended"
    AWAITING_RESPONSE = "awaiting_response"
    RESOLVED = "resolved"
    FAILED = "failed"


class TurnOutcome(BaseModel):
    """Result of a finished turn.

    Attributes:
        chat_id: Chat the turn belongs to.
        state: RESOLVED or FAILED.
        reply: The assistant message that replaced the placeholder, or None
            if the chat was deleted before the reply arrived.
        error: Error detail for failed turns.
    """

    chat_id: str
    state: TurnState
    reply: Message | None = None
    error: str | None = None


class TurnFailure(BaseModel):
    """Transient alert raised when a turn fails."""

    chat_id: str
    title: str
    detail: str


FailureListener = Callable[[TurnFailure], None]


class TurnOrchestrator:
    """Runs user submissions against the store and the model provider."""

    def __init__(
        self,
        store: ConversationStore,
        provider: CompletionProvider,
        model: str = DEFAULT_MODEL,
        strings: UiStrings | None = None,
    ) -> None:
        self._store = store
        self._provider = provider
        self._model = model
        self._strings = strings or get_strings()
        self._states: dict[str, TurnState] = {}
        self._failure_listeners: list[FailureListener] = []
        self._tasks: set[asyncio.Task] = set()
        self._store.subscribe(self._on_store_event)

    @property
    def model(self) -> str:
        return self._model

    def set_model(self, model_id: str) -> None:
        """Switch the model used for subsequent turns.

        Raises:
            UnknownModelError: If the model is not in the catalog.
        """
        self._model = get_model(model_id).id
        logger.info(f"Model set to {self._model}")

    def turn_state(self, chat_id: str) -> TurnState:
        return self._states.get(chat_id, TurnState.IDLE)

    def is_busy(self, chat_id: str) -> bool:
        return self.turn_state(chat_id) in (
            TurnState.USER_MESSAGE_APPENDED,
            TurnState.AWAITING_RESPONSE,
        )

    def add_failure_listener(self, listener: FailureListener) -> Callable[[], None]:
        """Register a callback for failed turns.

        Returns:
            A function that removes the listener.
        """
        self._failure_listeners.append(listener)

        def remove() -> None:
            if listener in self._failure_listeners:
                self._failure_listeners.remove(listener)

        return remove

    async def run_turn(
        self,
        chat_id: str,
        text: str,
        attachments: Sequence[Attachment] | None = None,
        model: str | None = None,
    ) -> TurnOutcome | None:
        """Run a full turn and wait for it to finish.

        Args:
            chat_id: Target chat.
            text: The user's message.
            attachments: Files submitted with the message.
            model: Optional model override for this turn.

        Returns:
            The turn outcome, or None if the submission was empty.

        Raises:
            ChatNotFoundError: If the chat does not exist.
            TurnInProgressError: If the chat already has a turn in flight.
            UnknownModelError: If ``model`` is not in the catalog.
        """
        started = self._begin_turn(chat_id, text, attachments, model)
        if started is None:
            return None
        history, model_id = started
        return await self._finish_turn(chat_id, history, model_id)

    def submit_turn(
        self,
        chat_id: str,
        text: str,
        attachments: Sequence[Attachment] | None = None,
        model: str | None = None,
    ) -> asyncio.Task | None:
        """Start a turn without waiting for the reply.

        The user message and the placeholder are in the store when this
        returns. Must be called from a running event loop.

        Returns:
            The task resolving the turn, or None if the submission was empty.

        Raises:
            ChatNotFoundError: If the chat does not exist.
            TurnInProgressError: If the chat already has a turn in flight.
            UnknownModelError: If ``model`` is not in the catalog.
        """
        started = self._begin_turn(chat_id, text, attachments, model)
        if started is None:
            return None
        history, model_id = started
        task = asyncio.get_running_loop().create_task(
            self._finish_turn(chat_id, history, model_id)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(lambda t: self._settle_cancelled(chat_id, t))
        return task

    async def drain(self) -> None:
        """Wait for every in-flight turn to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _begin_turn(
        self,
        chat_id: str,
        text: str,
        attachments: Sequence[Attachment] | None,
        model: str | None,
    ) -> tuple[list[ChatMessage], str] | None:
        text = text.strip()
        files = list(attachments or [])
        if not text and not files:
            logger.debug(f"Ignoring empty submission for chat {chat_id}")
            return None

        chat = self._store.get_chat(chat_id)
        if self.is_busy(chat_id):
            raise TurnInProgressError(chat_id)
        model_id = get_model(model).id if model else self._model

        is_first_message = not chat.messages
        self._store.append_message(
            chat_id, Message(role=Role.USER, content=text, attachments=files)
        )
        self._states[chat_id] = TurnState.USER_MESSAGE_APPENDED
        if is_first_message and text:
            self._store.rename_chat(chat_id, derive_title(text))

        # Attachments are collected but not sent to the model.
        history = [
            ChatMessage(role=msg.role, content=msg.content)
            for msg in self._store.messages(chat_id)
            if not msg.is_placeholder
        ]
        self._store.append_message(
            chat_id, Message(role=Role.ASSISTANT, content="", is_placeholder=True)
        )
        self._states[chat_id] = TurnState.AWAITING_RESPONSE
        return history, model_id

    async def _finish_turn(
        self,
        chat_id: str,
        history: list[ChatMessage],
        model_id: str,
    ) -> TurnOutcome:
        try:
            text = await self._provider.complete(history, model=model_id)
        except asyncio.CancelledError:
            logger.warning(f"Turn cancelled for chat {chat_id}")
            self._fail(chat_id, self._strings.turn_cancelled)
            raise
        except GeminiError as e:
            logger.warning(f"Turn failed for chat {chat_id}: {e}")
            return self._fail(chat_id, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error during turn for chat {chat_id}")
            return self._fail(chat_id, str(e))

        reply = Message(role=Role.ASSISTANT, content=text)
        state = TurnState.RESOLVED
        if not self._resolve_placeholder(chat_id, reply, state):
            return TurnOutcome(chat_id=chat_id, state=state)
        logger.info(f"Turn resolved for chat {chat_id} ({len(text)} chars)")
        return TurnOutcome(chat_id=chat_id, state=state, reply=reply)

    def _fail(self, chat_id: str, detail: str) -> TurnOutcome:
        detail = detail or self._strings.unknown_error
        reply = Message(
            role=Role.ASSISTANT,
            content=self._strings.error_reply.format(detail=detail),
            is_error=True,
        )
        state = TurnState.FAILED
        resolved = self._resolve_placeholder(chat_id, reply, state)
        self._notify_failure(
            TurnFailure(chat_id=chat_id, title=self._strings.failure_title, detail=detail)
        )
        return TurnOutcome(
            chat_id=chat_id,
            state=state,
            reply=reply if resolved else None,
            error=detail,
        )

    def _resolve_placeholder(self, chat_id: str, reply: Message, state: TurnState) -> bool:
        try:
            self._store.replace_last_message(chat_id, reply)
        except ChatNotFoundError:
            logger.warning(f"Chat {chat_id} was deleted before its reply arrived; discarding")
            self._states.pop(chat_id, None)
            return False
        self._states[chat_id] = state
        return True

    def _settle_cancelled(self, chat_id: str, task: asyncio.Task) -> None:
        # A task cancelled before its first step never reaches _finish_turn.
        if task.cancelled() and self.turn_state(chat_id) == TurnState.AWAITING_RESPONSE:
            logger.warning(f"Turn cancelled before start for chat {chat_id}")
            self._fail(chat_id, self._strings.turn_cancelled)

    def _on_store_event(self, event: StoreEvent) -> None:
        if event.kind == StoreEventKind.CHAT_DELETED:
            self._states.pop(event.chat_id, None)

    def _notify_failure(self, failure: TurnFailure) -> None:
        for listener in list(self._failure_listeners):
            try:
                listener(failure)
            except Exception:
                logger.exception(f"Failure listener raised for chat {failure.chat_id}")
