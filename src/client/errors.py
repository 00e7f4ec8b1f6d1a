"""
API error parsing for the bookmarks client.

Extracts semantic meaning from HTTP errors so the view can decide between a plain
notice and a forced sign-out.
"""

from dataclasses import dataclass
from typing import Any, Literal

import httpx

ErrorCategory = Literal[
    "auth",          # 401 - Missing or invalid session
    "forbidden",     # 403 - Not allow-listed, or not the owner
    "not_found",     # 404 - Resource not found
    "validation",    # 400/422 - Validation error
    "internal",      # 5xx or unexpected errors
]

UNAUTHORIZED_USER_DETAIL = "Access denied - Unauthorized user"


@dataclass
class ParsedApiError:
    """Parsed API error with semantic category and message."""

    category: ErrorCategory
    message: str

    @property
    def is_unauthorized_user(self) -> bool:
        """True when the server rejected the principal via the allow-list."""
        return self.category == "forbidden" and self.message == UNAUTHORIZED_USER_DETAIL


class BookmarksApiError(Exception):
    """Raised by the API client for any non-2xx response."""

    def __init__(self, parsed: ParsedApiError, status_code: int | None = None) -> None:
        self.parsed = parsed
        self.status_code = status_code
        super().__init__(parsed.message)


def parse_http_error(e: httpx.HTTPStatusError) -> ParsedApiError:
    """
    Parse HTTP error into semantic categories.

    Args:
        e: The HTTP status error from httpx

    Returns:
        ParsedApiError with category and the server's message where available
    """
    status = e.response.status_code
    detail = _safe_get_detail(e)

    if status == 401:
        return ParsedApiError("auth", detail or "Invalid or expired session")

    if status == 403:
        return ParsedApiError("forbidden", detail or "Access denied")

    if status == 404:
        return ParsedApiError("not_found", detail or "Not found")

    if status in (400, 422):
        return ParsedApiError("validation", _extract_validation_message(e))

    # Generic error for other status codes
    return ParsedApiError("internal", f"API error {status}")


def _safe_get_detail(e: httpx.HTTPStatusError) -> str:
    """Safely extract a string detail from an error response."""
    try:
        body = e.response.json()
    except ValueError:
        return ""
    if isinstance(body, dict) and isinstance(body.get("detail"), str):
        return body["detail"]
    return ""


def _extract_validation_message(e: httpx.HTTPStatusError) -> str:
    """Extract validation error message from 400/422 response."""
    try:
        body: Any = e.response.json()
    except ValueError:
        return "Validation error"
    if not isinstance(body, dict):
        return "Validation error"
    detail = body.get("detail", "Validation error")
    if isinstance(detail, list):
        # FastAPI validation errors return a list of error objects
        messages = []
        for err in detail:
            if isinstance(err, dict):
                loc = err.get("loc", ["unknown"])
                field = loc[-1] if loc else "unknown"
                msg = err.get("msg", "invalid")
                messages.append(f"{field}: {msg}")
        return "; ".join(messages) if messages else "Validation error"
    return str(detail)
