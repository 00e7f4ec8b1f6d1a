"""SQLAlchemy models."""
from models.base import Base, TimestampMixin, UUIDv7Mixin
from models.bookmark import Bookmark

__all__ = ["Base", "Bookmark", "TimestampMixin", "UUIDv7Mixin"]
