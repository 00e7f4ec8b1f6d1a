"""
State behind the bookmarks page.

`BookmarkView` holds the owner's bookmark list, the local filters (active tag, search
term, shared-only), and the selection used for batch delete. Every user-facing
outcome is reported as a `Notice` through the `notify` callback.
"""
import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

import httpx

from client.api_client import BookmarksApiClient
from client.errors import BookmarksApiError
from client.session import AuthSession
from schemas.bookmark import BookmarkResponse

logger = logging.getLogger(__name__)

NoticeVariant = Literal["default", "destructive"]

METADATA_FAILURE_DETAIL = "Could not fetch metadata"


@dataclass(frozen=True)
class Notice:
    """A transient message shown to the user."""

    title: str
    description: str
    variant: NoticeVariant = "default"


@dataclass
class BookmarkForm:
    """Editable values of the create/edit dialog."""

    url: str = ""
    title: str = ""
    description: str = ""
    tags: list[str] = field(default_factory=list)
    is_shared: bool = False
    bookmark_id: str | None = None

    @classmethod
    def from_bookmark(cls, bookmark: BookmarkResponse) -> "BookmarkForm":
        """Prefill the form for editing an existing bookmark."""
        return cls(
            url=bookmark.url,
            title=bookmark.title,
            description=bookmark.description,
            tags=list(bookmark.tags),
            is_shared=bookmark.is_shared,
            bookmark_id=bookmark.id,
        )

    def add_tag(self, tag: str) -> bool:
        """Add a trimmed tag unless it is blank or already present."""
        trimmed = tag.strip()
        if not trimmed or trimmed in self.tags:
            return False
        self.tags.append(trimmed)
        return True

    def remove_tag(self, tag: str) -> None:
        """Remove every occurrence of `tag`."""
        self.tags = [t for t in self.tags if t != tag]

    def to_payload(self) -> dict[str, Any]:
        """Request body for create/update with duplicate tags removed."""
        return {
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "tags": list(dict.fromkeys(self.tags)),
            "is_shared": self.is_shared,
        }


def _matches_search(bookmark: BookmarkResponse, term: str) -> bool:
    needle = term.lower()
    haystacks = [bookmark.title, bookmark.description, bookmark.url, *bookmark.tags]
    return any(needle in (h or "").lower() for h in haystacks)


class BookmarkView:
    """Owner bookmark list with filters, selection and batch delete."""

    def __init__(
        self,
        api: BookmarksApiClient,
        session: AuthSession | None = None,
        notify: Callable[[Notice], None] | None = None,
    ) -> None:
        self._api = api
        self._session = session
        self._notify = notify or (lambda _notice: None)
        self.bookmarks: list[BookmarkResponse] = []
        self.active_tag: str | None = None
        self.search_term = ""
        self.shared_only = False
        self.selected: set[str] = set()
        self.loading = False

    def _report(self, title: str, description: str, variant: NoticeVariant = "default") -> None:
        self._notify(Notice(title=title, description=description, variant=variant))

    def _report_failure(self, error: Exception, description: str) -> None:
        """Show an error notice, or end the session if the user was rejected."""
        if (
            isinstance(error, BookmarksApiError)
            and self._session is not None
            and self._session.handle_api_error(error.parsed)
        ):
            self.bookmarks = []
            self.selected.clear()
            return
        self._report("Error", description, "destructive")

    async def refresh(self) -> None:
        """Fetch the owner's bookmarks for the active tag."""
        self.loading = True
        try:
            self.bookmarks = await self._api.list_own(tag=self.active_tag)
        except (BookmarksApiError, httpx.HTTPError) as e:
            logger.warning("Failed to load bookmarks: %s", e)
            self._report_failure(e, "Failed to load bookmarks")
        finally:
            self.loading = False

    async def toggle_tag(self, tag: str) -> None:
        """Select `tag` as the filter, or clear it if it is already active."""
        self.active_tag = None if self.active_tag == tag else tag
        await self.refresh()

    async def clear_tag(self) -> None:
        """Drop the tag filter."""
        self.active_tag = None
        await self.refresh()

    def set_search_term(self, term: str) -> None:
        self.search_term = term

    def set_shared_only(self, shared_only: bool) -> None:
        self.shared_only = shared_only

    @property
    def all_tags(self) -> list[str]:
        """Distinct tags across the loaded bookmarks, sorted."""
        return sorted({tag for b in self.bookmarks for tag in b.tags})

    @property
    def filtered_bookmarks(self) -> list[BookmarkResponse]:
        """Loaded bookmarks passing every active filter."""
        result = self.bookmarks
        if self.active_tag:
            result = [b for b in result if self.active_tag in b.tags]
        if self.shared_only:
            result = [b for b in result if b.is_shared]
        term = self.search_term.strip()
        if term:
            result = [b for b in result if _matches_search(b, term)]
        return result

    def toggle_selection(self, bookmark_id: str) -> None:
        if bookmark_id in self.selected:
            self.selected.discard(bookmark_id)
        else:
            self.selected.add(bookmark_id)

    def select_all(self) -> None:
        """
        Select every bookmark in the filtered view.

        If all of them are already selected, deselect them instead. Selections
        outside the filtered view are left alone.
        """
        visible = {b.id for b in self.filtered_bookmarks}
        if visible and visible <= self.selected:
            self.selected -= visible
        else:
            self.selected |= visible

    def _remove_locally(self, ids: set[str]) -> None:
        self.bookmarks = [b for b in self.bookmarks if b.id not in ids]
        self.selected -= ids

    async def delete_bookmark(self, bookmark_id: str) -> bool:
        """Delete a single bookmark."""
        try:
            await self._api.delete(bookmark_id)
        except (BookmarksApiError, httpx.HTTPError) as e:
            logger.warning("Failed to delete bookmark %s: %s", bookmark_id, e)
            self._report_failure(e, "Failed to delete bookmark")
            return False
        self._remove_locally({bookmark_id})
        self._report("Success", "Bookmark deleted")
        return True

    async def delete_selected(self) -> bool:
        """
        Delete every selected bookmark with one request per id.

        Requests run concurrently and successful deletes are never rolled back. If
        any request fails, a single failure notice is shown and the list is
        refetched to reflect what was actually removed.
        """
        ids = list(self.selected)
        if not ids:
            return True

        results = await asyncio.gather(
            *(self._api.delete(bookmark_id) for bookmark_id in ids),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        for failure in failures:
            if not isinstance(failure, (BookmarksApiError, httpx.HTTPError)):
                raise failure

        if not failures:
            self._remove_locally(set(ids))
            self._report("Success", f"Deleted {len(ids)} bookmarks")
            return True

        logger.warning("%d of %d batch deletes failed", len(failures), len(ids))
        self._report_failure(failures[0], "Failed to delete some bookmarks")
        if self._session is None or self._session.is_authorized:
            await self.refresh()
            self.selected &= {b.id for b in self.bookmarks}
        return False

    async def save_bookmark(self, form: BookmarkForm) -> BookmarkResponse | None:
        """Create or update the bookmark described by `form`, then refetch."""
        payload = form.to_payload()
        try:
            if form.bookmark_id:
                saved = await self._api.update(form.bookmark_id, payload)
            else:
                saved = await self._api.create(payload)
        except (BookmarksApiError, httpx.HTTPError) as e:
            logger.warning("Failed to save bookmark: %s", e)
            self._report_failure(e, "Failed to save bookmark")
            return None

        self._report("Success", "Bookmark updated" if form.bookmark_id else "Bookmark created")
        await self.refresh()
        return saved

    async def lookup_metadata(self, url: str) -> dict[str, Any] | None:
        """
        Fetch title and description for `url`.

        Every failure, whatever its cause, yields the same notice and None.
        """
        try:
            return await self._api.fetch_metadata(url)
        except (BookmarksApiError, httpx.HTTPError, ValueError) as e:
            logger.info("Metadata lookup failed for %s: %s", url, e)
            self._report("Error", METADATA_FAILURE_DETAIL, "destructive")
            return None
