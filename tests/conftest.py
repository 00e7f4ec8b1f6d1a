"""Pytest fixtures for testing."""
import os
from collections.abc import AsyncGenerator, Generator
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from pymongo import AsyncMongoClient
from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from testcontainers.mongodb import MongoDbContainer
from testcontainers.postgres import PostgresContainer

from db.mongo_store import MongoBookmarkStore
from db.sql_store import SqlBookmarkStore
from models.base import Base


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer]:
    """Start a PostgreSQL container for the test session."""
    with PostgresContainer("postgres:16", driver="asyncpg") as postgres:
        yield postgres


@pytest.fixture(scope="session")
def mongo_container() -> Generator[MongoDbContainer]:
    """Start a MongoDB container for the test session."""
    with MongoDbContainer("mongo:7.0") as mongo:
        yield mongo


@pytest.fixture(scope="session")
def database_url(postgres_container: PostgresContainer) -> str:
    """
    Get the database URL from the container and set it in environment.

    This must be set before any app imports that trigger Settings validation.
    """
    url = postgres_container.get_connection_url()
    os.environ["DATABASE_URL"] = url
    os.environ["STORE_BACKEND"] = "postgres"
    # Ensure tests run in dev mode (bypasses auth) regardless of local .env
    os.environ["DEV_MODE"] = "true"
    os.environ["ALLOWED_EMAIL"] = ""
    return url


@pytest.fixture(scope="session")
def mongodb_uri(mongo_container: MongoDbContainer) -> str:
    """Connection URI of the MongoDB container."""
    return mongo_container.get_connection_url()


@pytest.fixture
async def async_engine(database_url: str) -> AsyncGenerator[AsyncEngine]:
    """Create an async engine for testing."""
    engine = create_async_engine(database_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_connection(async_engine: AsyncEngine) -> AsyncGenerator[AsyncConnection]:
    """
    Create a connection with a transaction that will be rolled back after the test.

    This provides test isolation - each test runs in its own transaction
    that is rolled back, so tests don't affect each other.
    """
    async with async_engine.connect() as connection:
        transaction = await connection.begin()
        try:
            yield connection
        finally:
            await transaction.rollback()


@pytest.fixture
def db_session_factory(db_connection: AsyncConnection) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to the test transaction.

    Uses savepoints so the store's per-operation commits stay inside the outer
    test transaction.
    """
    return async_sessionmaker(
        bind=db_connection,
        class_=AsyncSession,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )


@pytest.fixture
def sql_store(db_session_factory: async_sessionmaker[AsyncSession]) -> SqlBookmarkStore:
    """PostgreSQL bookmark store isolated to the current test."""
    return SqlBookmarkStore(db_session_factory)


@pytest.fixture
async def mongo_store(mongodb_uri: str) -> AsyncGenerator[MongoBookmarkStore]:
    """MongoDB bookmark store backed by a collection unique to the current test."""
    client: AsyncMongoClient = AsyncMongoClient(mongodb_uri, tz_aware=True)
    collection = client["bookmarks_test"][f"bookmarks_{uuid4().hex}"]
    store = MongoBookmarkStore(collection)
    await store.ensure_indexes()

    yield store

    await collection.drop()
    await client.close()


@pytest.fixture(params=["postgres", "mongodb"])
def store(request: pytest.FixtureRequest) -> SqlBookmarkStore | MongoBookmarkStore:
    """Each store adapter in turn; tests using this run once per backend."""
    if request.param == "postgres":
        return request.getfixturevalue("sql_store")
    return request.getfixturevalue("mongo_store")


@pytest.fixture
async def client(
    database_url: str,  # noqa: ARG001
    sql_store: SqlBookmarkStore,
) -> AsyncGenerator[AsyncClient]:
    """Create a test client (dev mode) backed by the isolated PostgreSQL store."""
    # Clear the settings cache so it picks up DATABASE_URL from environment
    from core.config import get_settings

    get_settings.cache_clear()

    from api.main import app
    from db.store import get_bookmark_store

    app.dependency_overrides[get_bookmark_store] = lambda: sql_store

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
