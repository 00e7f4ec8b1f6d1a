"""Bookmark store backed by PostgreSQL through SQLAlchemy async sessions."""
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from models.bookmark import Bookmark
from schemas.bookmark import BookmarkChanges, BookmarkRecord, NewBookmark
from services.exceptions import BookmarkStoreError

logger = logging.getLogger(__name__)


def _parse_id(bookmark_id: str) -> UUID | None:
    try:
        return UUID(bookmark_id)
    except (ValueError, TypeError):
        return None


def _to_record(bookmark: Bookmark) -> BookmarkRecord:
    return BookmarkRecord(
        id=str(bookmark.id),
        user_id=bookmark.user_id,
        url=bookmark.url,
        title=bookmark.title,
        description=bookmark.description,
        tags=list(bookmark.tags),
        is_shared=bookmark.is_shared,
        user_email=bookmark.user_email,
        user_name=bookmark.user_name,
        created_at=bookmark.created_at,
        updated_at=bookmark.updated_at,
    )


class SqlBookmarkStore:
    """
    Relational bookmark store.

    Each operation runs in its own session and commits at the end. Updates are a
    read followed by a write with no version check, so concurrent edits to the same
    bookmark resolve as last write wins.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncGenerator[AsyncSession]:
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.exception("Bookmark store operation '%s' failed", operation)
                raise BookmarkStoreError(operation, e) from e

    async def list_by_owner(self, user_id: str, tag: str | None = None) -> list[BookmarkRecord]:
        """Bookmarks owned by `user_id`, newest first."""
        query = select(Bookmark).where(Bookmark.user_id == user_id)
        if tag:
            query = query.where(Bookmark.tags.contains([tag]))
        query = query.order_by(Bookmark.created_at.desc(), Bookmark.id.desc())

        async with self._session("list_by_owner") as session:
            result = await session.execute(query)
            return [_to_record(b) for b in result.scalars().all()]

    async def list_shared(
        self,
        tag: str | None = None,
        limit: int | None = None,
    ) -> list[BookmarkRecord]:
        """Shared bookmarks, newest first."""
        query = select(Bookmark).where(Bookmark.is_shared.is_(True))
        if tag:
            query = query.where(Bookmark.tags.contains([tag]))
        query = query.order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
        if limit is not None:
            query = query.limit(limit)

        async with self._session("list_shared") as session:
            result = await session.execute(query)
            return [_to_record(b) for b in result.scalars().all()]

    async def get(self, bookmark_id: str) -> BookmarkRecord | None:
        """Bookmark by id, or None."""
        key = _parse_id(bookmark_id)
        if key is None:
            return None
        async with self._session("get") as session:
            bookmark = await session.get(Bookmark, key)
            return _to_record(bookmark) if bookmark is not None else None

    async def create(self, data: NewBookmark) -> BookmarkRecord:
        """Insert a bookmark and return it with its generated id."""
        now = datetime.now(UTC)
        bookmark = Bookmark(
            **data.model_dump(),
            created_at=now,
            updated_at=now,
        )
        async with self._session("create") as session:
            session.add(bookmark)
            await session.flush()
            await session.refresh(bookmark)
            return _to_record(bookmark)

    async def update(self, bookmark_id: str, changes: BookmarkChanges) -> BookmarkRecord | None:
        """Overwrite editable fields and refresh `updated_at`."""
        key = _parse_id(bookmark_id)
        if key is None:
            return None
        async with self._session("update") as session:
            bookmark = await session.get(Bookmark, key)
            if bookmark is None:
                return None

            for field, value in changes.model_dump().items():
                setattr(bookmark, field, value)
            bookmark.updated_at = max(datetime.now(UTC), bookmark.created_at)

            await session.flush()
            await session.refresh(bookmark)
            return _to_record(bookmark)

    async def delete(self, bookmark_id: str) -> bool:
        """Delete a bookmark. Returns False if it did not exist."""
        key = _parse_id(bookmark_id)
        if key is None:
            return False
        async with self._session("delete") as session:
            bookmark = await session.get(Bookmark, key)
            if bookmark is None:
                return False
            await session.delete(bookmark)
            return True

    async def ping(self) -> bool:
        """Run a trivial query against the database."""
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Database health check failed")
            return False
        return True
