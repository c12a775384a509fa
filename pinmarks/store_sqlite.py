from __future__ import annotations

import asyncio
import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .domain import now_ms
from .errors import NotFoundError, StoreUnavailable
from .log import get_logger
from .model import BOOKMARKS_BAR, MOBILE_BOOKMARKS, OTHER_BOOKMARKS, Bookmark, RawNode

log = get_logger(__name__)

# Seeded in this order; get_tree() returns roots in the same order.
_ROOTS = (
    ("toolbar", BOOKMARKS_BAR),
    ("unfiled", OTHER_BOOKMARKS),
    ("mobile", MOBILE_BOOKMARKS),
)
_ROOT_BY_TITLE = {title: name for name, title in _ROOTS}


class BookmarkDB:
    """Synchronous access to the bookmark tree and key-value tables."""

    def __init__(self, db_path: Path | str, *, busy_timeout_ms: int = 5000):
        self.db_path = Path(db_path)
        self.busy_timeout_ms = max(0, int(busy_timeout_ms))
        self.conn: sqlite3.Connection | None = None

    def __enter__(self) -> "BookmarkDB":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and self.conn is not None:
            self.conn.commit()
        self.close()

    def open(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        timeout_s = max(0.1, self.busy_timeout_ms / 1000.0)
        self.conn = sqlite3.connect(self.db_path, timeout=timeout_s)
        self.conn.row_factory = sqlite3.Row
        self._init_schema()

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def _cursor(self) -> sqlite3.Connection:
        if self.conn is None:
            raise RuntimeError("database is not open")
        return self.conn

    def _init_schema(self) -> None:
        c = self._cursor()
        c.executescript(
            """
            CREATE TABLE IF NOT EXISTS nodes (
                id INTEGER PRIMARY KEY,
                parent_id INTEGER,
                position INTEGER NOT NULL DEFAULT 0,
                title TEXT NOT NULL DEFAULT '',
                url TEXT,
                date_added INTEGER,
                root_name TEXT UNIQUE
            );
            CREATE INDEX IF NOT EXISTS idx_nodes_parent ON nodes(parent_id, position);
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value_json TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            """
        )
        for pos, (name, title) in enumerate(_ROOTS):
            c.execute(
                "INSERT OR IGNORE INTO nodes(parent_id, position, title, root_name) VALUES(NULL, ?, ?, ?)",
                (pos, title, name),
            )

    def root_id(self, name: str) -> int:
        row = self._cursor().execute("SELECT id FROM nodes WHERE root_name = ?", (name,)).fetchone()
        if row is None:
            raise StoreUnavailable(f"bookmark root {name!r} missing from {self.db_path}")
        return int(row["id"])

    # Tree

    def read_tree(self) -> List[RawNode]:
        rows = self._cursor().execute(
            "SELECT id, parent_id, title, url, date_added FROM nodes ORDER BY position, id"
        ).fetchall()
        by_parent: Dict[Optional[int], List[sqlite3.Row]] = {}
        for r in rows:
            by_parent.setdefault(r["parent_id"], []).append(r)
        return self._build_nodes(by_parent, None)

    def _build_nodes(self, by_parent: Dict[Optional[int], List[sqlite3.Row]], parent_id: Optional[int]) -> List[RawNode]:
        out: List[RawNode] = []
        for r in by_parent.get(parent_id, []):
            node = RawNode(
                id=str(r["id"]),
                title=r["title"] or "",
                url=r["url"] or None,
                parent_id=str(parent_id) if parent_id is not None else None,
                date_added=r["date_added"],
            )
            if not node.url:
                node.children = self._build_nodes(by_parent, int(r["id"]))
            out.append(node)
        return out

    def _next_position(self, parent_id: int) -> int:
        row = self._cursor().execute(
            "SELECT COALESCE(MAX(position), -1) + 1 AS pos FROM nodes WHERE parent_id = ?",
            (parent_id,),
        ).fetchone()
        return int(row["pos"])

    def add_node(self, parent_id: int, title: str, url: Optional[str], date_added: Optional[int]) -> int:
        cur = self._cursor().execute(
            "INSERT INTO nodes(parent_id, position, title, url, date_added) VALUES(?, ?, ?, ?, ?)",
            (parent_id, self._next_position(parent_id), title, url, date_added),
        )
        return int(cur.lastrowid)

    def create_bookmark(self, title: str, url: str) -> Bookmark:
        parent = self.root_id("unfiled")
        added = now_ms()
        node_id = self.add_node(parent, title, url, added)
        return Bookmark(
            id=str(node_id),
            title=title,
            url=url,
            parent_id=str(parent),
            date_added=added,
            folder_path=OTHER_BOOKMARKS,
        )

    def update_bookmark(self, bookmark_id: str, title: str, url: str) -> None:
        cur = self._cursor().execute(
            "UPDATE nodes SET title = ?, url = ? WHERE id = ? AND url IS NOT NULL",
            (title, url, _int_id(bookmark_id)),
        )
        if cur.rowcount == 0:
            raise NotFoundError(f"Bookmark {bookmark_id} not found")

    def remove_node(self, node_id: str) -> None:
        c = self._cursor()
        row = c.execute("SELECT root_name FROM nodes WHERE id = ?", (_int_id(node_id),)).fetchone()
        if row is None:
            raise NotFoundError(f"Bookmark {node_id} not found")
        if row["root_name"]:
            raise StoreUnavailable(f"cannot remove system root {row['root_name']!r}")
        c.execute(
            """
            WITH RECURSIVE sub(id) AS (
                SELECT ?
                UNION ALL
                SELECT n.id FROM nodes n JOIN sub ON n.parent_id = sub.id
            )
            DELETE FROM nodes WHERE id IN (SELECT id FROM sub)
            """,
            (_int_id(node_id),),
        )

    def import_forest(self, forest: Sequence[RawNode]) -> int:
        """Copy a forest into the store; returns the number of bookmarks added.

        Children of recognized system roots merge into the seeded roots, any
        other top-level node lands under "Other Bookmarks".
        """
        count = 0
        for node in forest:
            root_name = _ROOT_BY_TITLE.get(node.title)
            if root_name is not None and not node.url:
                count += self._import_nodes(self.root_id(root_name), node.children or [])
            else:
                count += self._import_nodes(self.root_id("unfiled"), [node])
        return count

    def _import_nodes(self, parent_id: int, nodes: Iterable[RawNode]) -> int:
        count = 0
        for n in nodes:
            if n.url:
                self.add_node(parent_id, n.title, n.url, n.date_added)
                count += 1
                continue
            folder_id = self.add_node(parent_id, n.title, None, n.date_added)
            count += self._import_nodes(folder_id, n.children or [])
        return count

    # Key-value

    def kv_get(self, key: str) -> Any:
        row = self._cursor().execute("SELECT value_json FROM kv WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        try:
            return json.loads(row["value_json"])
        except ValueError:
            log.warning("Ignoring undecodable value for key %r in %s", key, self.db_path)
            return None

    def kv_set(self, key: str, value: Any) -> None:
        self._cursor().execute(
            """
            INSERT INTO kv(key, value_json, updated_at) VALUES(?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value_json=excluded.value_json, updated_at=excluded.updated_at
            """,
            (key, json.dumps(value, ensure_ascii=False), datetime.now(timezone.utc).isoformat()),
        )

    def kv_remove(self, key: str) -> None:
        self._cursor().execute("DELETE FROM kv WHERE key = ?", (key,))


class SqliteBookmarkStore:
    """Async tree provider, bookmark mutator and key-value store on one SQLite file.

    Every call opens its own connection in a worker thread, so the event loop
    never blocks on disk I/O.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)

    async def get_tree(self) -> List[RawNode]:
        return await self._run(lambda db: db.read_tree())

    async def create(self, title: str, url: str) -> Bookmark:
        return await self._run(lambda db: db.create_bookmark(title, url))

    async def update(self, bookmark_id: str, title: str, url: str) -> None:
        await self._run(lambda db: db.update_bookmark(bookmark_id, title, url))

    async def remove(self, bookmark_id: str) -> None:
        await self._run(lambda db: db.remove_node(bookmark_id))

    async def import_forest(self, forest: Sequence[RawNode]) -> int:
        return await self._run(lambda db: db.import_forest(forest))

    async def kv_get(self, key: str) -> Any:
        return await self._run(lambda db: db.kv_get(key))

    async def kv_set(self, key: str, value: Any) -> None:
        await self._run(lambda db: db.kv_set(key, value))

    async def kv_remove(self, key: str) -> None:
        await self._run(lambda db: db.kv_remove(key))

    async def _run(self, fn):
        return await asyncio.to_thread(self._run_sync, fn)

    def _run_sync(self, fn):
        try:
            with BookmarkDB(self.db_path) as db:
                return fn(db)
        except sqlite3.OperationalError as e:
            msg = str(e).strip()
            if "locked" in msg.lower() or "busy" in msg.lower():
                raise StoreUnavailable(f"Bookmark database is locked ({self.db_path}).") from e
            raise StoreUnavailable(f"Bookmark database error ({self.db_path}): {msg}") from e
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Bookmark database error ({self.db_path}): {e}") from e


def _int_id(value: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise NotFoundError(f"Bookmark {value} not found") from None
