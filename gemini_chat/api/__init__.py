"""FastAPI endpoints for the Gemini chat client.

RESTful access to the shared conversation store and turn orchestrator.

Endpoints:
    - GET /health: Service health status
    - GET /models: Selectable models
    - /chats: Create, list, select, star, rename and delete chats
    - POST /chats/{id}/turns: Submit a user turn (fire-and-forget)
    - POST /uploads: Validate an attachment
"""

from gemini_chat.api.app import app, create_app

__all__ = ["app", "create_app"]
