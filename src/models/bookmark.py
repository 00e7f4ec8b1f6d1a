"""Bookmark model for storing user bookmarks."""
from sqlalchemy import Boolean, Index, String, Text, text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin, UUIDv7Mixin


class Bookmark(Base, UUIDv7Mixin, TimestampMixin):
    """
    Bookmark model - stores URLs with metadata and tags.

    `user_id` is the owner identity issued by the auth provider (account id or email),
    so it is a plain string rather than a foreign key. `user_email` and `user_name`
    are a snapshot taken at creation and are not kept in sync afterwards.
    """

    __tablename__ = "bookmarks"
    __table_args__ = (
        Index("ix_bookmarks_user_id_created_at", "user_id", "created_at"),
        Index(
            "ix_bookmarks_shared_created_at",
            "created_at",
            postgresql_where=text("is_shared"),
        ),
        Index("ix_bookmarks_tags", "tags", postgresql_using="gin"),
    )

    user_id: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, server_default="")
    tags: Mapped[list[str]] = mapped_column(ARRAY(Text), nullable=False, server_default="{}")
    is_shared: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false"),
    )
    user_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    user_name: Mapped[str | None] = mapped_column(Text, nullable=True)
