"""Shared fixtures for client tests."""
from collections.abc import AsyncGenerator, Generator

import httpx
import pytest
import respx

from client.api_client import BookmarksApiClient, create_http_client

API_BASE_URL = "http://api.test"


def bookmark_json(bookmark_id: str = "b1", **fields: object) -> dict:
    """A bookmark as serialized by the owner endpoints."""
    return {
        "id": bookmark_id,
        "user_id": "user-a",
        "url": "https://example.com",
        "title": "Example",
        "description": "",
        "tags": [],
        "is_shared": False,
        "user_email": "alice@example.com",
        "user_name": "Alice",
        "created_at": "2026-01-01T00:00:00Z",
        "updated_at": "2026-01-01T00:00:00Z",
        **fields,
    }


@pytest.fixture
def mock_api() -> Generator[respx.MockRouter]:
    """Mock the Bookmarks API."""
    with respx.mock(base_url=API_BASE_URL, assert_all_called=False) as respx_mock:
        yield respx_mock


@pytest.fixture
async def http_client() -> AsyncGenerator[httpx.AsyncClient]:
    async with create_http_client(API_BASE_URL) as client:
        yield client


@pytest.fixture
def api(http_client: httpx.AsyncClient) -> BookmarksApiClient:
    return BookmarksApiClient(http_client, token="token-a")
