import asyncio
import sqlite3
from pathlib import Path

import pytest

from pinmarks.errors import NotFoundError, StoreUnavailable
from pinmarks.flatten import flatten_tree
from pinmarks.store_sqlite import BookmarkDB, SqliteBookmarkStore

from conftest import NOW_MS


def test_fresh_store_has_three_empty_system_roots(tmp_path: Path):
    store = SqliteBookmarkStore(tmp_path / "b.sqlite")
    tree = asyncio.run(store.get_tree())
    assert [n.title for n in tree] == ["Bookmarks Bar", "Other Bookmarks", "Mobile Bookmarks"]
    assert all(n.children == [] for n in tree)


def test_import_merges_system_roots_and_keeps_order(tmp_path: Path, sample_forest):
    store = SqliteBookmarkStore(tmp_path / "b.sqlite")
    count = asyncio.run(store.import_forest(sample_forest))
    assert count == 4

    tree = asyncio.run(store.get_tree())
    bookmarks, folders = flatten_tree(tree, now=NOW_MS)
    assert [(b.title, b.folder_path) for b in bookmarks] == [
        ("GitHub - awesome programming repo", "Bookmarks Bar"),
        ("Jira board", "Bookmarks Bar > Work"),
        ("Design guide", "Bookmarks Bar > Work > Docs"),
        ("Reuters", "Other Bookmarks"),
    ]
    assert sorted(f.path for f in folders.values()) == [
        "Bookmarks Bar > Work",
        "Bookmarks Bar > Work > Docs",
        "Other Bookmarks > Empty",
    ]
    assert bookmarks[0].date_added == sample_forest[0].children[0].date_added


def test_create_update_remove_roundtrip(tmp_path: Path):
    store = SqliteBookmarkStore(tmp_path / "b.sqlite")

    async def scenario():
        created = await store.create("Example", "https://example.com/")
        await store.update(created.id, "Renamed", "https://example.org/")
        tree = await store.get_tree()
        await store.remove(created.id)
        return created, tree, await store.get_tree()

    created, tree, after = asyncio.run(scenario())
    assert created.folder_path == "Other Bookmarks"
    other = next(n for n in tree if n.title == "Other Bookmarks")
    assert [(n.title, n.url) for n in other.children] == [("Renamed", "https://example.org/")]
    assert next(n for n in after if n.title == "Other Bookmarks").children == []


def test_update_and_remove_unknown_ids_raise_not_found(tmp_path: Path):
    store = SqliteBookmarkStore(tmp_path / "b.sqlite")
    with pytest.raises(NotFoundError):
        asyncio.run(store.update("12345", "t", "https://x/"))
    with pytest.raises(NotFoundError):
        asyncio.run(store.remove("not-a-number"))


def test_system_roots_cannot_be_removed(tmp_path: Path):
    db_path = tmp_path / "b.sqlite"
    with BookmarkDB(db_path) as db:
        root = db.root_id("unfiled")
    with pytest.raises(StoreUnavailable):
        asyncio.run(SqliteBookmarkStore(db_path).remove(str(root)))


def test_kv_roundtrip(tmp_path: Path):
    store = SqliteBookmarkStore(tmp_path / "b.sqlite")

    async def scenario():
        assert await store.kv_get("suggestionsEnabled") is None
        await store.kv_set("suggestionsEnabled", True)
        await store.kv_set("userPin", "1234")
        flag = await store.kv_get("suggestionsEnabled")
        await store.kv_remove("userPin")
        return flag, await store.kv_get("userPin")

    assert asyncio.run(scenario()) == (True, None)


def test_sqlite_errors_surface_as_store_unavailable(tmp_path: Path):
    db_path = tmp_path / "b.sqlite"
    with BookmarkDB(db_path):
        pass
    with sqlite3.connect(db_path) as conn:
        conn.execute("DROP TABLE nodes")
        conn.execute("CREATE TABLE nodes (id INTEGER PRIMARY KEY)")
    with pytest.raises(StoreUnavailable):
        asyncio.run(SqliteBookmarkStore(db_path).get_tree())
