from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from .domain import now_ms
from .log import get_logger
from .model import OTHER_BOOKMARKS, SYSTEM_ROOTS, Bookmark, Folder, RawNode

log = get_logger(__name__)

PATH_SEP = " > "

_Walk = Tuple[List[Bookmark], List[Folder]]


def flatten_tree(forest: Sequence[RawNode], *, now: Optional[int] = None) -> Tuple[List[Bookmark], Dict[str, Folder]]:
    """Flatten a bookmark forest in pre-order.

    Returns the bookmarks in document order and a registry of the non-system
    folders keyed by node id. ``now`` (epoch ms) stamps bookmarks that carry no
    creation time.
    """
    ts = now_ms() if now is None else now
    bookmarks, folders = _walk_nodes(forest, "", ts)
    registry = {f.id: f for f in folders}
    log.debug("Flattened %d bookmarks across %d folders.", len(bookmarks), len(registry))
    return bookmarks, registry


def _walk_nodes(nodes: Sequence[RawNode], path: str, ts: int) -> _Walk:
    bookmarks: List[Bookmark] = []
    folders: List[Folder] = []
    for node in nodes:
        b, f = _walk(node, path, ts)
        bookmarks.extend(b)
        folders.extend(f)
    return bookmarks, folders


def _walk(node: RawNode, path: str, ts: int) -> _Walk:
    if node.url:
        b = Bookmark(
            id=node.id,
            title=node.title,
            url=node.url,
            parent_id=node.parent_id,
            date_added=node.date_added or ts,
            folder_path=path or OTHER_BOOKMARKS,
        )
        return [b], []
    if node.children is None:
        return [], []

    if node.title in SYSTEM_ROOTS:
        return _walk_nodes(node.children, node.title, ts)

    sub_path = folder_path_for(path, node.title)
    folder = Folder(id=node.id, title=node.title, path=sub_path, parent_id=node.parent_id)
    bookmarks, folders = _walk_nodes(node.children, sub_path, ts)
    return bookmarks, [folder] + folders


def folder_path_for(parent_path: str, title: str) -> str:
    return f"{parent_path}{PATH_SEP}{title}" if parent_path else title
