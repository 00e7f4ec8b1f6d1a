"""
Behavior shared by every bookmark store adapter.

Each test runs once against PostgreSQL and once against MongoDB.
"""
import asyncio

import pytest

from db.mongo_store import MongoBookmarkStore
from db.store import BookmarkStore
from schemas.bookmark import BookmarkChanges, NewBookmark
from services.exceptions import BookmarkStoreError

MISSING_UUID = "00000000-0000-0000-0000-000000000000"
MISSING_OBJECT_ID = "000000000000000000000000"


def new_bookmark(user_id: str = "user-a", **fields: object) -> NewBookmark:
    values: dict = {
        "user_id": user_id,
        "url": "https://example.com",
        "title": "Example",
        "user_email": f"{user_id}@example.com",
        "user_name": user_id.title(),
    }
    values.update(fields)
    return NewBookmark(**values)


async def test__create__returns_record_with_id_and_timestamps(store: BookmarkStore) -> None:
    created = await store.create(new_bookmark(tags=["python", "web"], description="Desc"))

    assert created.id
    assert created.user_id == "user-a"
    assert created.tags == ["python", "web"]
    assert created.description == "Desc"
    assert created.is_shared is False
    assert created.created_at == created.updated_at
    assert created.created_at.tzinfo is not None


async def test__get__returns_created_record(store: BookmarkStore) -> None:
    created = await store.create(new_bookmark())
    fetched = await store.get(created.id)
    assert fetched == created


async def test__get__missing_or_malformed_id_returns_none(store: BookmarkStore) -> None:
    assert await store.get(MISSING_UUID) is None
    assert await store.get(MISSING_OBJECT_ID) is None
    assert await store.get("not-an-id") is None
    assert await store.get("") is None


async def test__list_by_owner__scoped_and_newest_first(store: BookmarkStore) -> None:
    first = await store.create(new_bookmark(title="First"))
    other = await store.create(new_bookmark(user_id="user-b", title="Other"))
    second = await store.create(new_bookmark(title="Second"))

    owned = await store.list_by_owner("user-a")
    assert [b.id for b in owned] == [second.id, first.id]
    assert other.id not in {b.id for b in owned}


async def test__list_by_owner__tag_is_exact_element_match(store: BookmarkStore) -> None:
    js = await store.create(new_bookmark(title="JS", tags=["js"]))
    javascript = await store.create(new_bookmark(title="JavaScript", tags=["javascript"]))
    await store.create(new_bookmark(title="Cased", tags=["JS"]))

    assert [b.id for b in await store.list_by_owner("user-a", tag="js")] == [js.id]
    assert [b.id for b in await store.list_by_owner("user-a", tag="javascript")] == [
        javascript.id,
    ]
    assert await store.list_by_owner("user-a", tag="java") == []


async def test__list_shared__excludes_unshared_and_spans_owners(store: BookmarkStore) -> None:
    a = await store.create(new_bookmark(is_shared=True))
    await store.create(new_bookmark(title="Private"))
    b = await store.create(new_bookmark(user_id="user-b", is_shared=True))

    shared = await store.list_shared()
    assert [r.id for r in shared] == [b.id, a.id]
    assert all(r.is_shared for r in shared)


async def test__list_shared__tag_and_limit(store: BookmarkStore) -> None:
    for i in range(4):
        await store.create(new_bookmark(title=f"Tagged {i}", tags=["go"], is_shared=True))
    await store.create(new_bookmark(title="Untagged", is_shared=True))

    limited = await store.list_shared(tag="go", limit=2)
    assert [r.title for r in limited] == ["Tagged 3", "Tagged 2"]
    assert len(await store.list_shared(tag="go")) == 4
    assert len(await store.list_shared(limit=None)) == 5


async def test__update__overwrites_fields_and_refreshes_updated_at(store: BookmarkStore) -> None:
    created = await store.create(new_bookmark(tags=["old"]))
    await asyncio.sleep(0.01)

    updated = await store.update(
        created.id,
        BookmarkChanges(
            url="https://example.org",
            title="Renamed",
            description="New",
            tags=["new"],
            is_shared=True,
        ),
    )

    assert updated is not None
    assert updated.id == created.id
    assert updated.url == "https://example.org"
    assert updated.title == "Renamed"
    assert updated.description == "New"
    assert updated.tags == ["new"]
    assert updated.is_shared is True
    assert updated.user_id == created.user_id
    assert updated.user_name == created.user_name
    assert updated.created_at == created.created_at
    assert updated.updated_at > created.updated_at


async def test__update__missing_returns_none(store: BookmarkStore) -> None:
    changes = BookmarkChanges(url="https://example.com", title="Example")
    assert await store.update(MISSING_UUID, changes) is None
    assert await store.update(MISSING_OBJECT_ID, changes) is None
    assert await store.update("garbage", changes) is None


async def test__delete__removes_record(store: BookmarkStore) -> None:
    created = await store.create(new_bookmark())

    assert await store.delete(created.id) is True
    assert await store.get(created.id) is None
    assert await store.delete(created.id) is False


async def test__delete__missing_returns_false(store: BookmarkStore) -> None:
    assert await store.delete(MISSING_UUID) is False
    assert await store.delete("garbage") is False


async def test__ping__reachable_store(store: BookmarkStore) -> None:
    assert await store.ping() is True


async def test__mongo_list_shared__unencodable_limit_raises_store_error(
    mongo_store: MongoBookmarkStore,
) -> None:
    """Driver encoding failures surface as store errors like any other database failure."""
    with pytest.raises(BookmarkStoreError):
        await mongo_store.list_shared(limit=10**20)
