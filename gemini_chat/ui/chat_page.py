"""NiceGUI chat interface over the shared chat service."""

from nicegui import events, ui

from gemini_chat.conversation.errors import TurnInProgressError
from gemini_chat.conversation.orchestrator import TurnFailure
from gemini_chat.conversation.service import get_chat_service
from gemini_chat.conversation.store import StoreEvent, StoreEventKind
from gemini_chat.models.schemas import Attachment, Chat, Message, Role
from gemini_chat.provider.catalog import MODELS
from gemini_chat.uploads.validation import (
    MAX_FILE_SIZE,
    MAX_FILES,
    AttachmentError,
    format_file_size,
    validate_attachment,
)

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    body { background: #f5f5f5; min-height: 100vh; }

    .app-container {
        background: white;
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
        overflow: hidden;
    }

    .header { background: linear-gradient(135deg, #4285f4 0%, #9b72cb 100%); }

    .message-user {
        background: linear-gradient(135deg, #4285f4 0%, #9b72cb 100%);
        color: white;
        border-radius: 18px 18px 4px 18px;
    }

    .message-assistant {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }

    .message-error { background: #fef2f2; color: #991b1b; }

    .typing-dot {
        width: 8px; height: 8px;
        background: #4285f4;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }

    .chat-item { border-radius: 8px; cursor: pointer; }
    .chat-item:hover { background: #f3f4f6; }
    .chat-item.active { background: rgba(66, 133, 244, 0.1); }

    .input-box {
        background: #f9fafb;
        border: 1px solid #e5e7eb;
        border-radius: 12px;
        transition: border-color 0.2s;
    }
    .input-box:focus-within { border-color: #4285f4; }
</style>
"""


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    service = get_chat_service()
    store = service.store
    orchestrator = service.orchestrator
    strings = service.strings

    pending_attachments: list[Attachment] = []

    sidebar_container: ui.column
    messages_container: ui.column
    attachments_row: ui.row
    input_field: ui.textarea
    send_btn: ui.button

    def render_typing_indicator() -> None:
        with ui.row().classes("w-full justify-start"):
            with ui.element("div").classes("message-assistant px-4 py-3"):
                with ui.row().classes("gap-1"):
                    for _ in range(3):
                        ui.element("div").classes("typing-dot")

    def copy_to_clipboard(text: str) -> None:
        ui.clipboard.write(text)
        ui.notify(strings.copied, type="positive")

    def render_message(msg: Message) -> None:
        if msg.is_placeholder:
            render_typing_indicator()
            return

        is_user = msg.role == Role.USER
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-assistant"
        if msg.is_error:
            bubble += " message-error"

        with ui.row().classes(f"w-full {align}"):
            with ui.column().classes("max-w-[75%] gap-1"):
                with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                    if is_user:
                        ui.label(msg.content).classes("text-sm whitespace-pre-wrap")
                    else:
                        ui.markdown(msg.content).classes("text-sm")
                for attachment in msg.attachments:
                    ui.label(
                        f"📎 {attachment.name} ({format_file_size(attachment.size)})"
                    ).classes("text-xs text-gray-500")
                with ui.row().classes(
                    f"items-center gap-1 {'self-end' if is_user else 'self-start'}"
                ):
                    ui.label(msg.created_at.astimezone().strftime("%I:%M %p")).classes(
                        "text-[10px] text-gray-400"
                    )
                    if not is_user:
                        ui.button(
                            icon="content_copy",
                            on_click=lambda _, text=msg.content: copy_to_clipboard(text),
                        ).props("flat round dense size=xs color=grey").tooltip("Copy")

    def refresh_messages() -> None:
        messages_container.clear()
        chat = store.current_chat
        with messages_container:
            if chat is None or not chat.messages:
                with ui.column().classes("w-full h-64 items-center justify-center gap-3"):
                    ui.icon("forum").classes("text-5xl text-gray-300")
                    ui.label("Start a conversation").classes("text-lg text-gray-400")
            else:
                for msg in chat.messages:
                    render_message(msg)
        update_send_state()

    def render_chat_item(chat: Chat) -> None:
        active = "active" if chat.id == store.current_chat_id else ""
        with ui.row().classes(f"w-full chat-item {active} px-2 py-1 items-center no-wrap"):
            star = "⭐ " if chat.starred else ""
            ui.label(f"{star}{chat.title}").classes("flex-grow text-sm truncate").on(
                "click", lambda _, chat_id=chat.id: store.select_chat(chat_id)
            )
            ui.button(
                icon="star" if chat.starred else "star_border",
                on_click=lambda _, chat_id=chat.id: store.toggle_starred(chat_id),
            ).props("flat round dense size=sm")
            ui.button(
                icon="delete", on_click=lambda _, chat_id=chat.id: delete_chat(chat_id)
            ).props("flat round dense size=sm color=negative")

    def refresh_sidebar() -> None:
        sidebar_container.clear()
        with sidebar_container:
            for chat in store.chats:
                render_chat_item(chat)

    def refresh_attachments() -> None:
        attachments_row.clear()
        with attachments_row:
            for index, attachment in enumerate(pending_attachments):
                ui.chip(
                    f"{attachment.name} ({format_file_size(attachment.size)})",
                    removable=True,
                    on_value_change=lambda _, i=index: remove_attachment(i),
                ).props("dense")
        update_send_state()

    def update_send_state() -> None:
        chat_id = store.current_chat_id
        busy = chat_id is not None and orchestrator.is_busy(chat_id)
        if busy:
            send_btn.disable()
        else:
            send_btn.enable()

    def on_store_event(event: StoreEvent) -> None:
        if event.kind in (StoreEventKind.MESSAGE_APPENDED, StoreEventKind.MESSAGE_REPLACED):
            if event.chat_id == store.current_chat_id:
                refresh_messages()
            refresh_sidebar()
        else:
            refresh_sidebar()
            refresh_messages()

    def on_turn_failure(failure: TurnFailure) -> None:
        # The orchestrator is shared; notify in this page's client.
        with messages_container:
            ui.notify(f"{failure.title}: {failure.detail}", type="negative")

    def remove_attachment(index: int) -> None:
        if 0 <= index < len(pending_attachments):
            pending_attachments.pop(index)
        refresh_attachments()

    def handle_upload(e: events.UploadEventArguments) -> None:
        if len(pending_attachments) >= MAX_FILES:
            ui.notify(f"At most {MAX_FILES} files can be attached", type="warning")
            return
        content = e.content.read()
        try:
            attachment = validate_attachment(e.name, e.type, len(content))
        except AttachmentError as err:
            ui.notify(str(err), type="negative")
            return
        pending_attachments.append(attachment)
        refresh_attachments()

    def new_chat() -> None:
        store.create_chat()
        ui.notify(strings.chat_created, type="positive")

    def delete_chat(chat_id: str) -> None:
        store.delete_chat(chat_id)
        ui.notify(strings.chat_deleted, type="warning")

    def change_model(e: events.ValueChangeEventArguments) -> None:
        orchestrator.set_model(e.value)

    async def send_message() -> None:
        chat_id = store.current_chat_id
        text = (input_field.value or "").strip()
        if chat_id is None or (not text and not pending_attachments):
            return

        try:
            task = orchestrator.submit_turn(chat_id, text, list(pending_attachments))
        except TurnInProgressError:
            ui.notify("Please wait for the current reply", type="warning")
            return

        if task is not None:
            input_field.value = ""
            pending_attachments.clear()
            refresh_attachments()
            await task

    unsubscribe_store = store.subscribe(on_store_event)
    remove_failure_listener = orchestrator.add_failure_listener(on_turn_failure)

    def cleanup() -> None:
        unsubscribe_store()
        remove_failure_listener()

    ui.context.client.on_disconnect(cleanup)

    # === UI Layout ===
    with ui.row().classes("w-full min-h-screen p-4 gap-4 no-wrap"):
        # Sidebar
        with ui.column().classes("w-72 app-container p-3 gap-2").style(
            "height: calc(100vh - 2rem)"
        ):
            ui.button("New chat", icon="add", on_click=new_chat).classes("w-full")
            with ui.scroll_area().classes("flex-grow w-full"):
                sidebar_container = ui.column().classes("w-full gap-1")

        # Conversation
        with ui.column().classes("flex-grow app-container gap-0").style(
            "height: calc(100vh - 2rem)"
        ):
            # Header
            with ui.row().classes("w-full header px-5 py-4 items-center justify-between"):
                with ui.row().classes("items-center gap-3"):
                    ui.icon("auto_awesome").classes("text-white text-3xl")
                    ui.label("Gemini Chat").classes("text-lg font-semibold text-white")
                ui.select(
                    {model.id: model.name for model in MODELS},
                    value=orchestrator.model if orchestrator.model in {m.id for m in MODELS} else None,
                    on_change=change_model,
                ).props("dense outlined bg-color=white").classes("w-48")

            # Messages
            with (
                ui.scroll_area().classes("flex-grow w-full bg-gray-50"),
                ui.column().classes("w-full p-5"),
            ):
                messages_container = ui.column().classes("w-full gap-4")

            # Input
            with ui.column().classes("w-full p-4 gap-2 bg-white border-t"):
                attachments_row = ui.row().classes("w-full gap-2")
                with ui.row().classes("w-full gap-3 items-end no-wrap"):
                    ui.upload(
                        on_upload=handle_upload,
                        multiple=True,
                        auto_upload=True,
                        max_file_size=MAX_FILE_SIZE,
                        max_files=MAX_FILES,
                    ).props("flat dense accept='image/*,text/*,.pdf,.doc,.docx,.json,.csv'").classes(
                        "w-40"
                    )
                    with ui.element("div").classes("flex-grow input-box px-3 py-2"):
                        input_field = (
                            ui.textarea(placeholder="Type a message...")
                            .props("autogrow borderless dense rows=1")
                            .classes("w-full")
                            .on("keydown.enter.prevent", send_message)
                        )
                    send_btn = ui.button(icon="send", on_click=send_message).props(
                        "round unelevated"
                    )

    refresh_sidebar()
    refresh_messages()


def main() -> None:
    ui.run(title="Gemini Chat", port=8080, reload=False)


if __name__ == "__main__":
    main()
