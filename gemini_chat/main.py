"""Command-line entry point for the Gemini chat server.

Serves the HTTP API and the NiceGUI chat page from a single uvicorn process.
Settings come from the environment (a .env file is honoured):

    HOST, PORT                 Bind address (default 0.0.0.0:8000)
    LOG_LEVEL                  Root log level (default INFO)
    CHAT_LOCALE                en or fa
    GEMINI_API_KEY             Read on each request
    NICEGUI_STORAGE_SECRET     Secret for NiceGUI user storage
"""

import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    """Send log records to stdout at the requested level."""
    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # httpx logs every request URL at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main() -> None:
    """Start the combined API and UI server."""
    configure_logging()

    import uvicorn
    from nicegui import ui

    from gemini_chat.api.app import create_app
    from gemini_chat.ui.chat_page import chat_page  # noqa: F401 - registers "/"

    app = create_app()
    ui.run_with(
        app,
        title="Gemini Chat",
        favicon="✨",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "gemini-chat-secret"),
    )

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Gemini Chat listening on http://{host}:{port} (API docs at /docs)")

    uvicorn.run(app, host=host, port=port, log_level=os.getenv("LOG_LEVEL", "info").lower())


if __name__ == "__main__":
    main()
