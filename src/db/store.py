"""
Bookmark persistence contract and store lifecycle.

Two adapters implement `BookmarkStore`: `SqlBookmarkStore` (PostgreSQL) and
`MongoBookmarkStore` (MongoDB). Exactly one is opened per process, selected by
`STORE_BACKEND`, and handed to request handlers through the `get_bookmark_store`
dependency. Ownership is not enforced here; the service layer does that.
"""
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Protocol

from fastapi import Request
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from core.config import Settings
from db.mongo_store import MongoBookmarkStore
from db.session import create_engine, create_session_factory
from db.sql_store import SqlBookmarkStore
from schemas.bookmark import BookmarkChanges, BookmarkRecord, NewBookmark

logger = logging.getLogger(__name__)


class BookmarkStore(Protocol):
    """Operations every bookmark store adapter provides."""

    async def list_by_owner(self, user_id: str, tag: str | None = None) -> list[BookmarkRecord]:
        """Bookmarks owned by `user_id`, newest first, optionally containing `tag`."""
        ...

    async def list_shared(
        self,
        tag: str | None = None,
        limit: int | None = None,
    ) -> list[BookmarkRecord]:
        """Shared bookmarks of every owner, newest first."""
        ...

    async def get(self, bookmark_id: str) -> BookmarkRecord | None:
        """Bookmark by id, or None if absent (including malformed ids)."""
        ...

    async def create(self, data: NewBookmark) -> BookmarkRecord:
        """Persist a new bookmark; both timestamps are set to now."""
        ...

    async def update(self, bookmark_id: str, changes: BookmarkChanges) -> BookmarkRecord | None:
        """Overwrite the editable fields and refresh `updated_at`; None if absent."""
        ...

    async def delete(self, bookmark_id: str) -> bool:
        """Physically remove a bookmark; False if it did not exist."""
        ...

    async def ping(self) -> bool:
        """Check connectivity to the backing database."""
        ...


@asynccontextmanager
async def open_bookmark_store(settings: Settings) -> AsyncGenerator[BookmarkStore]:
    """
    Open the configured store for the lifetime of the application.

    Connections are established lazily by the driver pools; the engine is disposed or
    the client closed when the context exits.
    """
    if settings.store_backend == "mongodb":
        client: AsyncMongoClient = AsyncMongoClient(
            settings.mongodb_uri,
            maxPoolSize=settings.mongodb_max_pool_size,
            tz_aware=True,
        )
        try:
            collection = client[settings.mongodb_db][settings.mongodb_collection]
            mongo_store = MongoBookmarkStore(collection)
            try:
                await mongo_store.ensure_indexes()
            except PyMongoError as e:
                logger.warning("Could not ensure MongoDB indexes: %s", e)
            logger.info(
                "Opened MongoDB bookmark store (db=%s, collection=%s)",
                settings.mongodb_db,
                settings.mongodb_collection,
            )
            yield mongo_store
        finally:
            await client.close()
            logger.info("MongoDB client closed")
        return

    engine = create_engine(settings)
    try:
        logger.info("Opened PostgreSQL bookmark store")
        yield SqlBookmarkStore(create_session_factory(engine))
    finally:
        await engine.dispose()
        logger.info("PostgreSQL engine disposed")


def get_bookmark_store(request: Request) -> BookmarkStore:
    """Dependency returning the store opened by the application lifespan."""
    return request.app.state.bookmark_store
