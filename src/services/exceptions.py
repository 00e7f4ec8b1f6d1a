"""Shared exceptions for service layer operations."""


class BookmarkValidationError(Exception):
    """Raised when a bookmark payload is missing required values."""

    def __init__(self, message: str = "URL and title are required") -> None:
        super().__init__(message)


class BookmarkNotFoundError(Exception):
    """Raised when a bookmark id does not exist in the store."""

    def __init__(self, bookmark_id: str) -> None:
        self.bookmark_id = bookmark_id
        super().__init__(f"Bookmark not found: {bookmark_id}")


class BookmarkForbiddenError(Exception):
    """
    Raised when a bookmark exists but belongs to a different user.

    Ownership is checked only after existence, so a missing record is always reported
    as not found and an existing foreign record is always reported as forbidden.
    """

    def __init__(self, bookmark_id: str, user_id: str) -> None:
        self.bookmark_id = bookmark_id
        self.user_id = user_id
        super().__init__(f"Bookmark {bookmark_id} is not owned by {user_id}")


class BookmarkStoreError(Exception):
    """
    Raised by store adapters when the underlying database call fails.

    The message is logged server-side; clients only receive a generic label.
    """

    def __init__(self, operation: str, cause: Exception) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"Bookmark store '{operation}' failed: {cause}")


class MetadataNotFoundError(Exception):
    """Raised when the metadata service returns no usable title for a URL."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"No metadata found for {url}")


class MetadataServiceError(Exception):
    """Raised when the metadata service cannot be reached or answers with an error."""

    pass
