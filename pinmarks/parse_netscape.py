from __future__ import annotations

import re
from pathlib import Path
from typing import Iterator, List, Optional

from bs4 import BeautifulSoup  # type: ignore

from .log import get_logger
from .model import BOOKMARKS_BAR, OTHER_BOOKMARKS, RawNode

log = get_logger(__name__)
_WS_RE = re.compile(r"\s+")


def parse_bookmarks_html(path: Path) -> List[RawNode]:
    text = Path(path).read_text(encoding="utf-8", errors="replace")
    soup = BeautifulSoup(text, "lxml")

    dl = soup.find("dl")
    if dl is None:
        raise ValueError("Could not find <DL> root in bookmarks file")

    ids = _counter()
    forest = _walk_dl(dl, parent_id=None, ids=ids)
    log.debug("Parsed Netscape bookmarks tree with %d top-level nodes from %s", len(forest), path)
    return forest


def _walk_dl(dl, parent_id: Optional[str], ids: Iterator[int]) -> List[RawNode]:
    out: List[RawNode] = []
    # Exports often leave <DT> unclosed, so parsers nest logical siblings;
    # a DT belongs to this level when this DL is its nearest DL ancestor.
    for dt in dl.find_all("dt"):
        if dt.find_parent("dl") is not dl:
            continue
        h3 = dt.find("h3", recursive=False)
        if h3 is not None:
            node = RawNode(
                id=f"n{next(ids)}",
                title=_folder_title(h3),
                parent_id=parent_id,
                date_added=_seconds_to_ms(h3.get("add_date")),
            )
            sub_dl = h3.find_next("dl")
            if sub_dl is not None and sub_dl.find_parent("dl") is not dl:
                sub_dl = None
            if sub_dl is None:
                log.warning("Folder without DL: %s", node.title)
                node.children = []
            else:
                node.children = _walk_dl(sub_dl, node.id, ids)
            out.append(node)
            continue

        a = dt.find("a", recursive=False)
        if a is not None and a.get("href"):
            out.append(
                RawNode(
                    id=f"n{next(ids)}",
                    title=_WS_RE.sub(" ", a.get_text(strip=True)),
                    url=a.get("href"),
                    parent_id=parent_id,
                    date_added=_seconds_to_ms(a.get("add_date")),
                )
            )
    return out


def _folder_title(h3) -> str:
    if (h3.get("personal_toolbar_folder") or "").lower() == "true":
        return BOOKMARKS_BAR
    if (h3.get("unfiled_bookmarks_folder") or "").lower() == "true":
        return OTHER_BOOKMARKS
    return _WS_RE.sub(" ", h3.get_text(strip=True))


def _seconds_to_ms(v) -> Optional[int]:
    if v is None:
        return None
    try:
        return int(v) * 1000
    except Exception:
        return None


def _counter() -> Iterator[int]:
    n = 0
    while True:
        n += 1
        yield n
