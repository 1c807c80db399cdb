"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - fake_provider: Scriptable stand-in for the Gemini client
    - store: Fresh conversation store
    - orchestrator: Turn orchestrator wired to store and fake_provider
    - chat_service: ChatService around fake_provider
    - async_client: HTTPX client for API testing with the service injected

No network access: the Gemini client itself is tested against
httpx.MockTransport in tests/unit/test_gemini_client.py.
"""

import asyncio
from collections.abc import AsyncGenerator, Sequence

import pytest
from httpx import ASGITransport, AsyncClient

from gemini_chat.api.app import create_app
from gemini_chat.conversation.orchestrator import TurnOrchestrator
from gemini_chat.conversation.service import ChatService, get_chat_service
from gemini_chat.conversation.store import ConversationStore
from gemini_chat.models.schemas import ChatMessage


class FakeProvider:
    """Completion provider returning scripted replies.

    Attributes:
        calls: (history, model) pairs received, in order.
        replies: Queue of strings to return or exceptions to raise.
        default_reply: Returned when ``replies`` is empty.
        gate: Optional event the provider waits on before answering.
    """

    default_model = "gemini-2.5-flash"

    def __init__(self) -> None:
        self.calls: list[tuple[list[ChatMessage], str | None]] = []
        self.replies: list[str | Exception] = []
        self.default_reply = "Hello from Gemini"
        self.gate: asyncio.Event | None = None

    async def complete(self, history: Sequence[ChatMessage], model: str | None = None) -> str:
        self.calls.append((list(history), model))
        if self.gate is not None:
            await self.gate.wait()
        reply = self.replies.pop(0) if self.replies else self.default_reply
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def fake_provider() -> FakeProvider:
    """Return a fake provider with the default reply."""
    return FakeProvider()


@pytest.fixture
def store() -> ConversationStore:
    """Return a fresh store holding one empty chat."""
    return ConversationStore()


@pytest.fixture
def orchestrator(store: ConversationStore, fake_provider: FakeProvider) -> TurnOrchestrator:
    """Return an orchestrator bound to the store and the fake provider."""
    return TurnOrchestrator(store, fake_provider)


@pytest.fixture
def chat_service(fake_provider: FakeProvider) -> ChatService:
    """Return a chat service around the fake provider."""
    return ChatService(provider=fake_provider, locale="en")


@pytest.fixture
async def async_client(chat_service: ChatService) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient talking to an app that uses ``chat_service``.
    """
    app = create_app()
    app.dependency_overrides[get_chat_service] = lambda: chat_service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    await chat_service.orchestrator.drain()
