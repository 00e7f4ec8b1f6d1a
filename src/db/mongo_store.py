"""Bookmark store backed by a MongoDB collection through PyMongo's async API."""
import logging
from datetime import UTC, datetime
from typing import Any

from bson import ObjectId
from bson.errors import BSONError
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from schemas.bookmark import BookmarkChanges, BookmarkRecord, NewBookmark
from services.exceptions import BookmarkStoreError

logger = logging.getLogger(__name__)


def _parse_id(bookmark_id: str) -> ObjectId | None:
    if not ObjectId.is_valid(bookmark_id):
        return None
    return ObjectId(bookmark_id)


def _to_record(document: dict[str, Any]) -> BookmarkRecord:
    fields = {key: value for key, value in document.items() if key != "_id"}
    return BookmarkRecord(id=str(document["_id"]), **fields)


class MongoBookmarkStore:
    """
    Document bookmark store.

    Filters that the relational store gets from SQL are expressed as query documents
    here: owner and shared scoping, array membership for tags, newest-first sort.
    """

    def __init__(self, collection: AsyncCollection) -> None:
        self._collection = collection

    async def ensure_indexes(self) -> None:
        """Create the indexes backing owner and shared listings."""
        await self._collection.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
        await self._collection.create_index(
            [("is_shared", ASCENDING), ("created_at", DESCENDING)],
        )

    async def _find(self, query: dict[str, Any], limit: int | None = None) -> list[BookmarkRecord]:
        try:
            cursor = self._collection.find(query).sort(
                [("created_at", DESCENDING), ("_id", DESCENDING)],
            )
            if limit is not None:
                cursor = cursor.limit(limit)
            return [_to_record(doc) async for doc in cursor]
        except (PyMongoError, BSONError, OverflowError) as e:
            logger.exception("Bookmark store find failed")
            raise BookmarkStoreError("find", e) from e

    async def list_by_owner(self, user_id: str, tag: str | None = None) -> list[BookmarkRecord]:
        """Bookmarks owned by `user_id`, newest first."""
        query: dict[str, Any] = {"user_id": user_id}
        if tag:
            query["tags"] = tag
        return await self._find(query)

    async def list_shared(
        self,
        tag: str | None = None,
        limit: int | None = None,
    ) -> list[BookmarkRecord]:
        """Shared bookmarks, newest first."""
        query: dict[str, Any] = {"is_shared": True}
        if tag:
            query["tags"] = tag
        return await self._find(query, limit=limit)

    async def get(self, bookmark_id: str) -> BookmarkRecord | None:
        """Bookmark by id, or None."""
        key = _parse_id(bookmark_id)
        if key is None:
            return None
        try:
            document = await self._collection.find_one({"_id": key})
        except PyMongoError as e:
            logger.exception("Bookmark store get failed")
            raise BookmarkStoreError("get", e) from e
        return _to_record(document) if document is not None else None

    async def create(self, data: NewBookmark) -> BookmarkRecord:
        """Insert a document and return it with its generated id."""
        now = datetime.now(UTC)
        document = {**data.model_dump(), "created_at": now, "updated_at": now}
        try:
            result = await self._collection.insert_one(document)
            stored = await self._collection.find_one({"_id": result.inserted_id})
        except PyMongoError as e:
            logger.exception("Bookmark store create failed")
            raise BookmarkStoreError("create", e) from e
        return _to_record(stored)

    async def update(self, bookmark_id: str, changes: BookmarkChanges) -> BookmarkRecord | None:
        """Overwrite editable fields and refresh `updated_at`."""
        key = _parse_id(bookmark_id)
        if key is None:
            return None
        try:
            document = await self._collection.find_one_and_update(
                {"_id": key},
                {"$set": {**changes.model_dump(), "updated_at": datetime.now(UTC)}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.exception("Bookmark store update failed")
            raise BookmarkStoreError("update", e) from e
        return _to_record(document) if document is not None else None

    async def delete(self, bookmark_id: str) -> bool:
        """Delete a document. Returns False if it did not exist."""
        key = _parse_id(bookmark_id)
        if key is None:
            return False
        try:
            result = await self._collection.delete_one({"_id": key})
        except PyMongoError as e:
            logger.exception("Bookmark store delete failed")
            raise BookmarkStoreError("delete", e) from e
        return result.deleted_count == 1

    async def ping(self) -> bool:
        """Run the `ping` command against the database."""
        try:
            await self._collection.database.command("ping")
        except PyMongoError:
            logger.exception("Database health check failed")
            return False
        return True
