"""FastAPI application for the chat service.

Builds the app, registers the chat router and maps conversation errors to
HTTP status codes. The shared ChatService is closed on shutdown so pending
turns finish and the Gemini HTTP client is released.
"""

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gemini_chat import __version__
from gemini_chat.api.routes import router as chat_router
from gemini_chat.conversation.errors import (
    ChatNotFoundError,
    InvalidStateError,
    TurnInProgressError,
)
from gemini_chat.conversation.service import shutdown_chat_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Close the chat service when the server stops.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    logger.info(f"Gemini Chat API {__version__} starting")
    yield
    logger.info("Gemini Chat API stopping; waiting for pending turns")
    await shutdown_chat_service()


def _cors_origins() -> list[str]:
    raw = os.getenv("CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


async def _chat_not_found(request: Request, exc: ChatNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


async def _conflict(request: Request, exc: Exception) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="Gemini Chat API",
        description=(
            "Multi-chat client for the Google Gemini API. Manages chat sessions, "
            "runs turns against the selected model and exposes pending replies."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Errors that escape a route's own handling
    application.add_exception_handler(ChatNotFoundError, _chat_not_found)
    application.add_exception_handler(TurnInProgressError, _conflict)
    application.add_exception_handler(InvalidStateError, _conflict)

    application.include_router(chat_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Report liveness and version."""
        return {"status": "healthy", "service": "gemini-chat", "version": __version__}

    return application


app = create_app()
