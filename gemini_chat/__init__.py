"""Gemini Chat - multi-session chat client for the Google Gemini API.

Combines FastAPI for the HTTP API, NiceGUI for the web interface,
httpx for the provider round-trip, and Pydantic for data validation.

Components:
    - provider: Gemini REST client, configuration and model catalog
    - conversation: Chat store, turn orchestration and the shared service
    - uploads: Attachment validation
    - api: HTTP endpoints
    - ui: Web interface for chat interactions
    - models: Chat, message and request/response schemas
"""

__version__ = "0.1.0"
