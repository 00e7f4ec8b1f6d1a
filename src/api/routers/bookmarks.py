"""Owner-scoped bookmark endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.dependencies import get_bookmark_store, get_current_principal
from core.auth import Principal
from db.store import BookmarkStore
from schemas.bookmark import (
    BookmarkEnvelope,
    BookmarkListResponse,
    BookmarkResponse,
    BookmarkWrite,
    MessageResponse,
)
from services import bookmark_service
from services.exceptions import (
    BookmarkForbiddenError,
    BookmarkNotFoundError,
    BookmarkValidationError,
)

router = APIRouter(prefix="/bookmarks/user", tags=["bookmarks"])

NOT_FOUND_DETAIL = "Bookmark not found"
NOT_OWNER_DETAIL = "Access denied - not the bookmark owner"


@router.get("", response_model=BookmarkListResponse)
async def list_bookmarks(
    tag: str | None = Query(default=None, description="Only bookmarks containing this exact tag"),
    principal: Principal = Depends(get_current_principal),
    store: BookmarkStore = Depends(get_bookmark_store),
) -> BookmarkListResponse:
    """List the caller's bookmarks, newest first."""
    bookmarks = await bookmark_service.list_user_bookmarks(store, principal, tag=tag)
    return BookmarkListResponse(
        bookmarks=[BookmarkResponse.model_validate(b) for b in bookmarks],
    )


@router.post("", response_model=BookmarkEnvelope, status_code=201)
async def create_bookmark(
    data: BookmarkWrite,
    principal: Principal = Depends(get_current_principal),
    store: BookmarkStore = Depends(get_bookmark_store),
) -> BookmarkEnvelope:
    """Create a bookmark owned by the caller."""
    try:
        bookmark = await bookmark_service.create_bookmark(store, principal, data)
    except BookmarkValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return BookmarkEnvelope(bookmark=BookmarkResponse.model_validate(bookmark))


@router.put("/{bookmark_id}", response_model=BookmarkEnvelope)
async def update_bookmark(
    bookmark_id: str,
    data: BookmarkWrite,
    principal: Principal = Depends(get_current_principal),
    store: BookmarkStore = Depends(get_bookmark_store),
) -> BookmarkEnvelope:
    """Replace a bookmark owned by the caller."""
    try:
        bookmark = await bookmark_service.update_bookmark(store, principal, bookmark_id, data)
    except BookmarkValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except BookmarkNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL)
    except BookmarkForbiddenError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=NOT_OWNER_DETAIL)
    return BookmarkEnvelope(bookmark=BookmarkResponse.model_validate(bookmark))


@router.delete("/{bookmark_id}", response_model=MessageResponse)
async def delete_bookmark(
    bookmark_id: str,
    principal: Principal = Depends(get_current_principal),
    store: BookmarkStore = Depends(get_bookmark_store),
) -> MessageResponse:
    """Delete a bookmark owned by the caller."""
    try:
        await bookmark_service.delete_bookmark(store, principal, bookmark_id)
    except BookmarkNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL)
    except BookmarkForbiddenError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=NOT_OWNER_DETAIL)
    return MessageResponse(message="Bookmark deleted successfully")
