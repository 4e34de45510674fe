"""
Shared fixtures for valuation service tests.

Storage is an in-memory object store and templates are built with python-docx
at test time, so no Azure account or network access is needed. The Gemini
client is a MagicMock whose responses each test sets as required.
"""
from __future__ import annotations

import os
from typing import AsyncGenerator
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Keep the application away from real storage, whatever the developer's .env says
os.environ["AZURE_STORAGE_CONNECTION_STRING"] = ""
os.environ["GEMINI_API_KEY"] = ""

from valuation_app.api.deps import build_services, get_services  # noqa: E402
from valuation_app.core.config import settings  # noqa: E402
from valuation_app.main import app  # noqa: E402
from tests.helpers import InMemoryObjectStore, StaticGeocoder  # noqa: E402


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def geocoder() -> StaticGeocoder:
    return StaticGeocoder()


@pytest.fixture
def genai_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def search_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def services(object_store, geocoder, genai_client, search_client):
    return build_services(
        settings,
        object_store,
        genai_client=genai_client,
        geocoder=geocoder,
        search_client=search_client,
    )


@pytest_asyncio.fixture
async def client(services) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client talking to the app with services swapped for the in-memory ones"""
    app.dependency_overrides[get_services] = lambda: services
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
