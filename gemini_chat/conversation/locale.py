"""User-visible strings, keyed by locale."""

from pydantic import BaseModel


class UiStrings(BaseModel):
    """Strings the core writes into chats or raises as notifications."""

    new_chat_title: str
    error_reply: str
    unknown_error: str
    failure_title: str
    turn_cancelled: str
    chat_created: str
    chat_deleted: str
    copied: str


CATALOGS: dict[str, UiStrings] = {
    "en": UiStrings(
        new_chat_title="New Chat",
        error_reply="Sorry, an error occurred: {detail}",
        unknown_error="Unknown error",
        failure_title="Failed to get a response",
        turn_cancelled="Request cancelled",
        chat_created="New chat created",
        chat_deleted="Chat deleted",
        copied="Copied to clipboard",
    ),
    "fa": UiStrings(
        new_chat_title="گفتگوی جدید",
        error_reply="متأسفم، خطایی رخ داد: {detail}",
        unknown_error="خطای نامشخص",
        failure_title="خطا در دریافت پاسخ",
        turn_cancelled="درخواست لغو شد",
        chat_created="گفتگوی جدید ایجاد شد",
        chat_deleted="گفتگو حذف شد",
        copied="کپی شد!",
    ),
}

DEFAULT_LOCALE = "en"


def get_strings(locale: str | None = None) -> UiStrings:
    """Return the catalog for a locale, falling back to English."""
    return CATALOGS.get((locale or DEFAULT_LOCALE).lower(), CATALOGS[DEFAULT_LOCALE])
