"""Integration tests for components working together as a system.

Drives the real FastAPI app over httpx ASGITransport. Only the model
provider is replaced, so no API key or network access is required.
"""
