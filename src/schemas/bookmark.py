"""Pydantic schemas for bookmark endpoints."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_TAG_LENGTH = 100


def clean_tags(tags: list[str]) -> list[str]:
    """
    Trim tags and drop blank entries.

    Order and duplicates are preserved; tag filters compare exact strings, so no
    case normalization is applied.
    """
    cleaned = []
    for tag in tags:
        if not isinstance(tag, str):
            raise ValueError("Tags must be strings")
        trimmed = tag.strip()
        if not trimmed:
            continue
        if len(trimmed) > MAX_TAG_LENGTH:
            raise ValueError(
                f"Tag exceeds maximum length of {MAX_TAG_LENGTH} characters: '{trimmed[:20]}...'",
            )
        cleaned.append(trimmed)
    return cleaned


class BookmarkWrite(BaseModel):
    """
    Request body for creating or replacing a bookmark.

    `url` and `title` are optional at the schema level so that missing values are
    reported by the service layer as a 400 rather than a schema validation error.
    """

    url: str | None = None
    title: str | None = None
    description: str | None = None
    tags: list[str] | None = None
    is_shared: bool | None = None

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: list[str] | None) -> list[str] | None:
        """Trim tags and drop blanks once the value is known to be a list of strings."""
        if v is None:
            return None
        return clean_tags(v)


class BookmarkRecord(BaseModel):
    """A stored bookmark, as returned by every store adapter."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    url: str
    title: str
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    is_shared: bool = False
    user_email: str | None = None
    user_name: str | None = None
    created_at: datetime
    updated_at: datetime


class NewBookmark(BaseModel):
    """Validated values for a bookmark about to be persisted."""

    user_id: str
    url: str
    title: str
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    is_shared: bool = False
    user_email: str | None = None
    user_name: str | None = None


class BookmarkChanges(BaseModel):
    """Validated values that overwrite an existing bookmark on update."""

    url: str
    title: str
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    is_shared: bool = False


class BookmarkResponse(BaseModel):
    """Owner-facing bookmark representation."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    url: str
    title: str
    description: str
    tags: list[str]
    is_shared: bool
    user_email: str | None
    user_name: str | None
    created_at: datetime
    updated_at: datetime


class PublicBookmarkResponse(BaseModel):
    """Public projection of a shared bookmark; owner identifiers are not exposed."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    url: str
    title: str
    description: str
    tags: list[str]
    user_name: str | None
    created_at: datetime


class BookmarkEnvelope(BaseModel):
    """Response wrapper for a single bookmark."""

    bookmark: BookmarkResponse


class BookmarkListResponse(BaseModel):
    """Response wrapper for the owner's bookmarks."""

    bookmarks: list[BookmarkResponse]


class PublicBookmarkListResponse(BaseModel):
    """Response wrapper for publicly shared bookmarks."""

    bookmarks: list[PublicBookmarkResponse]
    total: int


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str
