"""Unauthenticated read access to shared bookmarks."""
from fastapi import APIRouter, Depends, Query

from api.dependencies import get_bookmark_store
from db.store import BookmarkStore
from schemas.bookmark import PublicBookmarkListResponse, PublicBookmarkResponse
from services import bookmark_service

router = APIRouter(prefix="/public", tags=["public"])


@router.get("/bookmarks", response_model=PublicBookmarkListResponse)
async def list_public_bookmarks(
    tag: str | None = Query(default=None, description="Only bookmarks containing this exact tag"),
    limit: str | None = Query(
        default=None,
        description="Maximum number of results; non-numeric or non-positive values are ignored",
    ),
    store: BookmarkStore = Depends(get_bookmark_store),
) -> PublicBookmarkListResponse:
    """List shared bookmarks of every user, newest first."""
    bookmarks = await bookmark_service.list_public_bookmarks(
        store,
        tag=tag,
        limit=bookmark_service.parse_limit(limit),
    )
    items = [PublicBookmarkResponse.model_validate(b) for b in bookmarks]
    return PublicBookmarkListResponse(bookmarks=items, total=len(items))
