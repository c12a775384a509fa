from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from .log import get_logger
from .model import BOOKMARKS_BAR, MOBILE_BOOKMARKS, OTHER_BOOKMARKS, RawNode

log = get_logger(__name__)

_ROOT_LABELS = {
    "bookmark_bar": BOOKMARKS_BAR,
    "other": OTHER_BOOKMARKS,
    "synced": MOBILE_BOOKMARKS,
}

# Chrome stores times as microseconds since 1601-01-01 UTC.
_WEBKIT_EPOCH_OFFSET_MS = 11_644_473_600_000


def parse_chrome_bookmarks(path: Path) -> List[RawNode]:
    """Read a Chromium ``Bookmarks`` JSON file into a forest of system roots."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    roots = data.get("roots")
    if not isinstance(roots, dict):
        raise ValueError(f"Not a Chromium bookmarks file (no 'roots'): {path}")

    forest: List[RawNode] = []
    for key, label in _ROOT_LABELS.items():
        raw = roots.get(key)
        if not isinstance(raw, dict):
            continue
        root = _to_node(raw, parent_id=None)
        root.title = label
        forest.append(root)
    log.debug("Read %d Chromium bookmark roots from %s", len(forest), path)
    return forest


def _to_node(raw: Dict[str, Any], parent_id: Optional[str]) -> RawNode:
    node_id = str(raw.get("id", ""))
    node = RawNode(
        id=node_id,
        title=str(raw.get("name", "")),
        parent_id=parent_id,
        date_added=webkit_to_epoch_ms(raw.get("date_added")),
    )
    if raw.get("type") == "url":
        node.url = str(raw.get("url", "")) or None
    else:
        node.children = [_to_node(c, node_id) for c in raw.get("children", []) if isinstance(c, dict)]
    return node


def webkit_to_epoch_ms(v) -> Optional[int]:
    if v in (None, "", "0", 0):
        return None
    try:
        return int(v) // 1000 - _WEBKIT_EPOCH_OFFSET_MS
    except (TypeError, ValueError):
        return None
