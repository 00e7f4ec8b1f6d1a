"""
Service layer for bookmark operations.

Validation and ownership rules live here so both store adapters share them:

- `url` and `title` must be non-empty on create and update; nothing is persisted
  otherwise.
- Update and delete look the bookmark up first (not found wins over forbidden),
  then compare its owner with the caller.
"""
import logging

from core.auth import Principal
from db.store import BookmarkStore
from schemas.bookmark import BookmarkChanges, BookmarkRecord, BookmarkWrite, NewBookmark
from services.exceptions import (
    BookmarkForbiddenError,
    BookmarkNotFoundError,
    BookmarkValidationError,
)

logger = logging.getLogger(__name__)

# Largest limit passed to a store; 32-bit so every driver can bind it
MAX_LIMIT = 2**31 - 1


def parse_limit(raw: str | None) -> int | None:
    """
    Parse a `limit` query value.

    Non-numeric, zero, negative and out-of-range values mean "no limit".
    """
    if raw is None:
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        return None
    return value if 0 < value <= MAX_LIMIT else None


def _validated_changes(data: BookmarkWrite) -> BookmarkChanges:
    url = (data.url or "").strip()
    title = (data.title or "").strip()
    if not url or not title:
        raise BookmarkValidationError()
    return BookmarkChanges(
        url=url,
        title=title,
        description=data.description or "",
        tags=data.tags or [],
        is_shared=bool(data.is_shared),
    )


async def list_user_bookmarks(
    store: BookmarkStore,
    principal: Principal,
    tag: str | None = None,
) -> list[BookmarkRecord]:
    """All bookmarks owned by the caller, newest first."""
    return await store.list_by_owner(principal.user_id, tag=tag or None)


async def list_public_bookmarks(
    store: BookmarkStore,
    tag: str | None = None,
    limit: int | None = None,
) -> list[BookmarkRecord]:
    """Shared bookmarks of every owner, newest first."""
    return await store.list_shared(tag=tag or None, limit=limit)


async def create_bookmark(
    store: BookmarkStore,
    principal: Principal,
    data: BookmarkWrite,
) -> BookmarkRecord:
    """
    Create a bookmark owned by the caller.

    The caller's email and display name are copied onto the record as a snapshot.

    Raises:
        BookmarkValidationError: If url or title is missing or blank.
    """
    changes = _validated_changes(data)
    bookmark = await store.create(
        NewBookmark(
            user_id=principal.user_id,
            user_email=principal.email,
            user_name=principal.name,
            **changes.model_dump(),
        ),
    )
    logger.info("Created bookmark %s for %s", bookmark.id, principal.user_id)
    return bookmark


async def _get_owned_bookmark(
    store: BookmarkStore,
    principal: Principal,
    bookmark_id: str,
) -> BookmarkRecord:
    bookmark = await store.get(bookmark_id)
    if bookmark is None:
        raise BookmarkNotFoundError(bookmark_id)
    if bookmark.user_id != principal.user_id:
        logger.warning(
            "User %s attempted to modify bookmark %s owned by another user",
            principal.user_id,
            bookmark_id,
        )
        raise BookmarkForbiddenError(bookmark_id, principal.user_id)
    return bookmark


async def update_bookmark(
    store: BookmarkStore,
    principal: Principal,
    bookmark_id: str,
    data: BookmarkWrite,
) -> BookmarkRecord:
    """
    Replace the editable fields of a bookmark owned by the caller.

    Raises:
        BookmarkValidationError: If url or title is missing or blank.
        BookmarkNotFoundError: If the bookmark does not exist.
        BookmarkForbiddenError: If the bookmark belongs to someone else.
    """
    changes = _validated_changes(data)
    await _get_owned_bookmark(store, principal, bookmark_id)

    updated = await store.update(bookmark_id, changes)
    if updated is None:
        # Deleted between the ownership check and the write
        raise BookmarkNotFoundError(bookmark_id)
    return updated


async def delete_bookmark(
    store: BookmarkStore,
    principal: Principal,
    bookmark_id: str,
) -> None:
    """
    Physically delete a bookmark owned by the caller.

    Raises:
        BookmarkNotFoundError: If the bookmark does not exist.
        BookmarkForbiddenError: If the bookmark belongs to someone else.
    """
    await _get_owned_bookmark(store, principal, bookmark_id)
    if not await store.delete(bookmark_id):
        raise BookmarkNotFoundError(bookmark_id)
    logger.info("Deleted bookmark %s for %s", bookmark_id, principal.user_id)
