"""HTTP client for the Bookmarks API."""

from typing import Any

import httpx

from client.errors import BookmarksApiError, parse_http_error
from schemas.bookmark import BookmarkResponse, PublicBookmarkResponse

DEFAULT_TIMEOUT = 30.0


def create_http_client(base_url: str, timeout: float = DEFAULT_TIMEOUT) -> httpx.AsyncClient:
    """Create the HTTP client used to reach the API."""
    return httpx.AsyncClient(base_url=base_url, timeout=timeout)


class BookmarksApiClient:
    """
    Thin async wrapper around the Bookmarks API endpoints.

    The caller owns the `httpx.AsyncClient` (base URL, transport, lifetime). Every
    non-2xx response is raised as `BookmarksApiError`.
    """

    def __init__(self, http: httpx.AsyncClient, token: str | None = None) -> None:
        self._http = http
        self.token = token

    def _headers(self) -> dict[str, str]:
        if self.token is None:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        response = await self._http.request(
            method,
            path,
            params=params,
            json=json,
            headers=self._headers(),
        )
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise BookmarksApiError(parse_http_error(e), status_code=response.status_code) from e
        return response.json()

    async def list_own(self, tag: str | None = None) -> list[BookmarkResponse]:
        """List the signed-in user's bookmarks."""
        params = {"tag": tag} if tag else None
        data = await self._request("GET", "/bookmarks/user", params=params)
        return [BookmarkResponse.model_validate(b) for b in data.get("bookmarks") or []]

    async def create(self, payload: dict[str, Any]) -> BookmarkResponse:
        """Create a bookmark."""
        data = await self._request("POST", "/bookmarks/user", json=payload)
        return BookmarkResponse.model_validate(data["bookmark"])

    async def update(self, bookmark_id: str, payload: dict[str, Any]) -> BookmarkResponse:
        """Replace a bookmark."""
        data = await self._request("PUT", f"/bookmarks/user/{bookmark_id}", json=payload)
        return BookmarkResponse.model_validate(data["bookmark"])

    async def delete(self, bookmark_id: str) -> str:
        """Delete a bookmark and return the confirmation message."""
        data = await self._request("DELETE", f"/bookmarks/user/{bookmark_id}")
        return data.get("message", "")

    async def list_public(
        self,
        tag: str | None = None,
        limit: int | None = None,
    ) -> list[PublicBookmarkResponse]:
        """List publicly shared bookmarks."""
        params: dict[str, Any] = {}
        if tag:
            params["tag"] = tag
        if limit is not None:
            params["limit"] = limit
        data = await self._request("GET", "/public/bookmarks", params=params or None)
        return [PublicBookmarkResponse.model_validate(b) for b in data.get("bookmarks") or []]

    async def fetch_metadata(self, url: str) -> dict[str, Any]:
        """Look up title and description for a URL through the server relay."""
        return await self._request("POST", "/bookmarks/metadata", json={"url": url})
