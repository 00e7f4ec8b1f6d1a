"""Shared fixtures for API tests."""
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
import pytest
from httpx import ASGITransport, AsyncClient

from core.config import Settings, get_settings
from db.sql_store import SqlBookmarkStore
from db.store import BookmarkStore, get_bookmark_store

TEST_JWT_SECRET = "test-supabase-jwt-secret-with-enough-length"

USER_A = {"user_id": "user-a", "email": "alice@example.com", "name": "Alice"}
USER_B = {"user_id": "user-b", "email": "bob@example.com", "name": "Bob"}

# Constant for non-existent entity ID
FAKE_UUID = "00000000-0000-0000-0000-000000000000"


def make_token(
    user_id: str,
    email: str | None,
    name: str | None = None,
    secret: str = TEST_JWT_SECRET,
    audience: str = "authenticated",
    expires_in: timedelta = timedelta(hours=1),
) -> str:
    """Create a Supabase-style HS256 access token."""
    payload: dict[str, Any] = {
        "sub": user_id,
        "aud": audience,
        "exp": datetime.now(UTC) + expires_in,
        "user_metadata": {"full_name": name} if name else {},
    }
    if email is not None:
        payload["email"] = email
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_settings(**overrides: Any) -> Settings:
    """Settings with token validation enabled (dev mode off)."""
    values: dict[str, Any] = {
        "database_url": "postgresql://test",
        "dev_mode": False,
        "auth_provider": "supabase",
        "supabase_jwt_secret": TEST_JWT_SECRET,
        "allowed_email": None,
        "urlmeta_api_key": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@asynccontextmanager
async def create_client(
    store: BookmarkStore,
    settings: Settings,
    token: str | None = None,
) -> AsyncGenerator[AsyncClient]:
    """
    Create an AsyncClient with the given settings and store.

    Overrides FastAPI dependencies and, if a token is given, sends it as a bearer
    token. Cleans up dependency overrides on exit.
    """
    from api.main import app

    get_settings.cache_clear()
    app.dependency_overrides[get_bookmark_store] = lambda: store
    app.dependency_overrides[get_settings] = lambda: settings

    headers = {"Authorization": f"Bearer {token}"} if token else {}
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            headers=headers,
        ) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
async def client_as_user_a(
    database_url: str,  # noqa: ARG001
    sql_store: SqlBookmarkStore,
) -> AsyncGenerator[AsyncClient]:
    """Client authenticated as user A with an open allow-list."""
    async with create_client(sql_store, auth_settings(), make_token(**USER_A)) as c:
        yield c


@pytest.fixture
async def client_as_user_b(
    database_url: str,  # noqa: ARG001
    sql_store: SqlBookmarkStore,
) -> AsyncGenerator[AsyncClient]:
    """Client authenticated as user B with an open allow-list."""
    async with create_client(sql_store, auth_settings(), make_token(**USER_B)) as c:
        yield c


@pytest.fixture
async def anonymous_client(
    database_url: str,  # noqa: ARG001
    sql_store: SqlBookmarkStore,
) -> AsyncGenerator[AsyncClient]:
    """Client without credentials and with token validation enabled."""
    async with create_client(sql_store, auth_settings()) as c:
        yield c
