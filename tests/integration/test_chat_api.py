"""Integration tests for the chat HTTP API.

Drives the real FastAPI app through httpx AsyncClient and ASGITransport.
The Gemini client is replaced by the FakeProvider from conftest, so no
network access or API key is needed.
"""

import asyncio

import pytest
import pytest_check as check
from httpx import AsyncClient

from gemini_chat.conversation.service import ChatService
from gemini_chat.models.schemas import Attachment, ChatListResponse, ChatSummary, Message
from gemini_chat.provider.errors import ProviderError
from tests.conftest import FakeProvider


class TestHealthAndModels:
    """Tests for static endpoints."""

    async def test_health(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_models_lists_catalog(self, async_client: AsyncClient) -> None:
        """GET /models returns the selectable models."""
        response = await async_client.get("/models")

        assert response.status_code == 200
        ids = [model["id"] for model in response.json()]
        check.is_in("gemini-2.5-flash", ids)
        check.is_in("gemini-2.5-pro", ids)


class TestChatEndpoints:
    """Tests for chat management endpoints."""

    async def test_list_starts_with_one_current_chat(self, async_client: AsyncClient) -> None:
        """A fresh service exposes exactly one chat, which is current."""
        response = await async_client.get("/chats")

        data = ChatListResponse.model_validate(response.json())
        check.equal(len(data.chats), 1)
        check.equal(data.current_chat_id, data.chats[0].id)

    async def test_create_chat(self, async_client: AsyncClient) -> None:
        """POST /chats creates a chat at the front and selects it."""
        response = await async_client.post("/chats")

        assert response.status_code == 201
        created = ChatSummary.model_validate(response.json())
        listing = ChatListResponse.model_validate((await async_client.get("/chats")).json())
        check.equal(listing.chats[0].id, created.id)
        check.equal(listing.current_chat_id, created.id)
        check.equal(created.message_count, 0)

    async def test_select_chat(self, async_client: AsyncClient, chat_service: ChatService) -> None:
        first = chat_service.store.current_chat_id
        chat_service.store.create_chat()

        response = await async_client.post(f"/chats/{first}/select")

        assert response.status_code == 204
        check.equal(chat_service.store.current_chat_id, first)

    async def test_select_unknown_chat_returns_404(
        self, async_client: AsyncClient, chat_service: ChatService
    ) -> None:
        """Unknown ids are reported and the selection is unchanged."""
        current = chat_service.store.current_chat_id

        response = await async_client.post("/chats/chat_missing/select")

        assert response.status_code == 404
        check.equal(chat_service.store.current_chat_id, current)

    async def test_delete_only_chat_leaves_new_chat(
        self, async_client: AsyncClient, chat_service: ChatService
    ) -> None:
        """Deleting the only chat returns a list with one fresh chat."""
        only = chat_service.store.current_chat_id

        response = await async_client.delete(f"/chats/{only}")

        assert response.status_code == 200
        data = ChatListResponse.model_validate(response.json())
        check.equal(len(data.chats), 1)
        check.not_equal(data.chats[0].id, only)
        check.equal(data.current_chat_id, data.chats[0].id)

    async def test_delete_unknown_chat_returns_404(self, async_client: AsyncClient) -> None:
        response = await async_client.delete("/chats/chat_missing")

        assert response.status_code == 404

    async def test_star_toggles(self, async_client: AsyncClient, chat_service: ChatService) -> None:
        chat_id = chat_service.store.current_chat_id

        first = await async_client.post(f"/chats/{chat_id}/star")
        second = await async_client.post(f"/chats/{chat_id}/star")

        check.is_true(first.json()["starred"])
        check.is_false(second.json()["starred"])

    async def test_star_unknown_chat_returns_404(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/chats/chat_missing/star")

        assert response.status_code == 404

    async def test_list_starred_only(
        self, async_client: AsyncClient, chat_service: ChatService
    ) -> None:
        """?starred=true filters the list to starred chats."""
        starred_id = chat_service.store.current_chat_id
        chat_service.store.create_chat()
        chat_service.store.toggle_starred(starred_id)

        response = await async_client.get("/chats", params={"starred": "true"})

        data = ChatListResponse.model_validate(response.json())
        check.equal([c.id for c in data.chats], [starred_id])
        check.not_equal(data.current_chat_id, starred_id)

    async def test_rename_chat(self, async_client: AsyncClient, chat_service: ChatService) -> None:
        chat_id = chat_service.store.current_chat_id

        response = await async_client.patch(f"/chats/{chat_id}", json={"title": "  Recipes  "})

        assert response.status_code == 200
        check.equal(response.json()["title"], "Recipes")
        check.equal(chat_service.store.get_chat(chat_id).title, "Recipes")

    async def test_rename_to_blank_returns_422(
        self, async_client: AsyncClient, chat_service: ChatService
    ) -> None:
        chat_id = chat_service.store.current_chat_id

        response = await async_client.patch(f"/chats/{chat_id}", json={"title": "   "})

        assert response.status_code == 422


class TestTurnEndpoint:
    """Tests for POST /chats/{id}/turns."""

    async def test_turn_is_accepted_and_resolved(
        self,
        async_client: AsyncClient,
        chat_service: ChatService,
        fake_provider: FakeProvider,
    ) -> None:
        """A turn returns 202, then the reply replaces the placeholder."""
        chat_id = chat_service.store.current_chat_id

        response = await async_client.post(f"/chats/{chat_id}/turns", json={"text": "hello"})

        assert response.status_code == 202
        body = response.json()
        check.equal(body["chat_id"], chat_id)
        check.equal(body["state"], "awaiting_response")

        await chat_service.orchestrator.drain()
        messages = [
            Message.model_validate(m)
            for m in (await async_client.get(f"/chats/{chat_id}/messages")).json()
        ]
        check.equal([m.content for m in messages], ["hello", "Hello from Gemini"])
        check.equal(messages[0].id, body["user_message_id"])
        check.is_false(any(m.is_placeholder for m in messages))
        check.equal(chat_service.store.get_chat(chat_id).title, "hello")

    async def test_failed_turn_yields_error_message(
        self,
        async_client: AsyncClient,
        chat_service: ChatService,
        fake_provider: FakeProvider,
    ) -> None:
        """Provider failures show up as an assistant error message."""
        chat_id = chat_service.store.current_chat_id
        fake_provider.replies.append(ProviderError(500, "Internal error"))

        await async_client.post(f"/chats/{chat_id}/turns", json={"text": "hello"})
        await chat_service.orchestrator.drain()

        messages = (await async_client.get(f"/chats/{chat_id}/messages")).json()
        check.equal(len(messages), 2)
        check.is_true(messages[-1]["is_error"])
        check.is_in("500 - Internal error", messages[-1]["content"])

    async def test_empty_turn_returns_400_without_changes(
        self, async_client: AsyncClient, chat_service: ChatService
    ) -> None:
        """No text and no attachments is rejected; the chat is untouched."""
        chat_id = chat_service.store.current_chat_id

        response = await async_client.post(f"/chats/{chat_id}/turns", json={"text": "  "})

        assert response.status_code == 400
        check.equal(chat_service.store.messages(chat_id), [])

    async def test_turn_with_only_attachment_is_accepted(
        self, async_client: AsyncClient, chat_service: ChatService
    ) -> None:
        chat_id = chat_service.store.current_chat_id
        attachment = Attachment(name="notes.txt", size=20, content_type="text/plain")

        response = await async_client.post(
            f"/chats/{chat_id}/turns",
            json={"text": "", "attachments": [attachment.model_dump()]},
        )

        assert response.status_code == 202
        check.equal(chat_service.store.messages(chat_id)[0].attachments, [attachment])

    async def test_turn_for_unknown_chat_returns_404(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/chats/chat_missing/turns", json={"text": "hi"})

        assert response.status_code == 404

    async def test_concurrent_turn_returns_409(
        self,
        async_client: AsyncClient,
        chat_service: ChatService,
        fake_provider: FakeProvider,
    ) -> None:
        """A second turn while the first is pending is rejected."""
        chat_id = chat_service.store.current_chat_id
        fake_provider.gate = asyncio.Event()

        first = await async_client.post(f"/chats/{chat_id}/turns", json={"text": "one"})
        second = await async_client.post(f"/chats/{chat_id}/turns", json={"text": "two"})

        check.equal(first.status_code, 202)
        check.equal(second.status_code, 409)
        fake_provider.gate.set()
        await chat_service.orchestrator.drain()
        check.equal(len(chat_service.store.messages(chat_id)), 2)

    async def test_unknown_model_returns_422(
        self, async_client: AsyncClient, chat_service: ChatService
    ) -> None:
        chat_id = chat_service.store.current_chat_id

        response = await async_client.post(
            f"/chats/{chat_id}/turns", json={"text": "hi", "model": "gpt-4o"}
        )

        assert response.status_code == 422
        check.equal(chat_service.store.messages(chat_id), [])

    async def test_messages_for_unknown_chat_returns_404(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/chats/chat_missing/messages")

        assert response.status_code == 404


class TestUploadEndpoint:
    """Tests for POST /uploads."""

    async def test_upload_returns_attachment(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/uploads",
            files={"file": ("notes.txt", b"some notes", "text/plain")},
        )

        assert response.status_code == 200
        attachment = Attachment.model_validate(response.json())
        check.equal(attachment.name, "notes.txt")
        check.equal(attachment.size, 10)
        check.equal(attachment.content_type, "text/plain")

    @pytest.mark.parametrize(
        "filename,content,content_type",
        [
            ("setup.exe", b"MZ\x90\x00", "application/x-msdownload"),
            ("empty.txt", b"", "text/plain"),
        ],
    )
    async def test_upload_rejects_invalid_file(
        self,
        async_client: AsyncClient,
        filename: str,
        content: bytes,
        content_type: str,
    ) -> None:
        response = await async_client.post(
            "/uploads",
            files={"file": (filename, content, content_type)},
        )

        assert response.status_code == 400
        assert "detail" in response.json()
