"""Test package for the Gemini chat client.

Structure:
    - unit/: Store, orchestrator, Gemini client, uploads and service tests
    - integration/: HTTP API tests against the assembled FastAPI app

The Gemini API is never called. Unit tests use httpx.MockTransport or the
FakeProvider from conftest. Leverages pytest with pytest-check for soft
assertions.
"""
