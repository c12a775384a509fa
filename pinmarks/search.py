from __future__ import annotations

from typing import List, Sequence

from .model import Bookmark


def filter_bookmarks(bookmarks: Sequence[Bookmark], query: str) -> Sequence[Bookmark]:
    """Case-insensitive substring match on title or url; a blank query passes everything through."""
    q = (query or "").strip().casefold()
    if not q:
        return bookmarks
    out: List[Bookmark] = []
    for b in bookmarks:
        if q in b.title.casefold() or q in b.url.casefold():
            out.append(b)
    return out
