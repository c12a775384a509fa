from __future__ import annotations

from typing import Iterable, List, Sequence

from .model import Bookmark

RECENT_WINDOW_MS = 7 * 24 * 60 * 60 * 1000
RECENT_LIMIT = 10


def compute_recent(
    bookmarks: Iterable[Bookmark],
    now: int,
    *,
    window_ms: int = RECENT_WINDOW_MS,
    limit: int = RECENT_LIMIT,
) -> List[Bookmark]:
    fresh = [b for b in bookmarks if now - b.date_added < window_ms]
    fresh.sort(key=lambda b: b.date_added, reverse=True)
    return fresh[:limit]


def on_bookmark_added(recent: Sequence[Bookmark], new: Bookmark, *, limit: int = RECENT_LIMIT) -> List[Bookmark]:
    return [new, *recent][:limit]


def on_bookmark_removed(recent: Sequence[Bookmark], bookmark_id: str) -> List[Bookmark]:
    return [b for b in recent if b.id != bookmark_id]


def on_bookmark_replaced(recent: Sequence[Bookmark], updated: Bookmark) -> List[Bookmark]:
    return [updated if b.id == updated.id else b for b in recent]
