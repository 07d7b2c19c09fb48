"""
Shared fixtures for PaperGen tests.

Settings are overridden through the environment before any papergen module
is imported; the helpers that build fake Gemini responses live in
``tests/helpers.py``.
"""
from __future__ import annotations

import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Override settings *before* any papergen module is imported
os.environ["GEMINI_API_KEY"] = "test-key"
os.environ["GENERATION_MAX_RETRIES"] = "3"
os.environ["GENERATION_BACKOFF_SECONDS"] = "1.0"

from papergen.dependencies.services import (  # noqa: E402
    get_document_store,
    get_gemini_client,
    get_workspace_registry,
)
from papergen.main import app  # noqa: E402
from papergen.services.document_store import InMemoryDocumentStore  # noqa: E402
from papergen.services.generation_client import GeminiClient  # noqa: E402
from papergen.services.pipeline import WorkspaceRegistry  # noqa: E402
from tests.helpers import FakeGemini  # noqa: E402


@pytest.fixture
def fake_gemini() -> FakeGemini:
    return FakeGemini()


@pytest.fixture
def gemini_client(fake_gemini: FakeGemini) -> GeminiClient:
    return fake_gemini.client()


@pytest_asyncio.fixture
async def client(gemini_client: GeminiClient) -> AsyncGenerator[AsyncClient, None]:
    """
    httpx AsyncClient wired to the FastAPI app with the generation client,
    workspaces and document store replaced by fresh per-test instances.
    """
    registry = WorkspaceRegistry(gemini_client)
    store = InMemoryDocumentStore()

    app.dependency_overrides[get_gemini_client] = lambda: gemini_client
    app.dependency_overrides[get_workspace_registry] = lambda: registry
    app.dependency_overrides[get_document_store] = lambda: store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
