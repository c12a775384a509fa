"""Immutable view state and the pure transitions between states.

Every operation takes a :class:`ViewState` and returns a new one; nothing here
touches a store, so a failed external call simply never produces a new state.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Sequence, Tuple

from .errors import NotFoundError
from .flatten import flatten_tree
from .grouping import group_by_folder, toggle_collapsed
from .model import Bookmark, CuratedSite, Folder, RawNode
from .recent import (
    RECENT_LIMIT,
    RECENT_WINDOW_MS,
    compute_recent,
    on_bookmark_added,
    on_bookmark_removed,
    on_bookmark_replaced,
)
from .search import filter_bookmarks
from .suggest import dismiss_suggestion


@dataclass(frozen=True)
class ViewState:
    bookmarks: Tuple[Bookmark, ...] = ()
    folders: Mapping[str, Folder] = field(default_factory=dict)
    recent: Tuple[Bookmark, ...] = ()
    query: str = ""
    collapsed: FrozenSet[str] = frozenset()
    suggestions: Tuple[CuratedSite, ...] = ()
    suggestions_enabled: bool = False
    unlocked: bool = False

    @property
    def filtered(self) -> Tuple[Bookmark, ...]:
        return tuple(filter_bookmarks(self.bookmarks, self.query))

    @property
    def groups(self) -> Dict[str, list]:
        return group_by_folder(self.filtered)

    def find(self, bookmark_id: str) -> Optional[Bookmark]:
        for b in self.bookmarks:
            if b.id == bookmark_id:
                return b
        return None

    def has_url(self, url: str) -> bool:
        return any(b.url == url for b in self.bookmarks)


def loaded(
    state: ViewState,
    forest: Sequence[RawNode],
    now: int,
    *,
    window_ms: int = RECENT_WINDOW_MS,
    recent_limit: int = RECENT_LIMIT,
) -> ViewState:
    bookmarks, folders = flatten_tree(forest, now=now)
    return replace(
        state,
        bookmarks=tuple(bookmarks),
        folders=folders,
        recent=tuple(compute_recent(bookmarks, now, window_ms=window_ms, limit=recent_limit)),
        unlocked=True,
    )


def locked(state: ViewState) -> ViewState:
    # Collapse state and the suggestions flag outlive a lock/unlock cycle.
    return ViewState(collapsed=state.collapsed, suggestions_enabled=state.suggestions_enabled)


def with_added(state: ViewState, bookmark: Bookmark, *, recent_limit: int = RECENT_LIMIT) -> ViewState:
    return replace(
        state,
        bookmarks=(bookmark,) + state.bookmarks,
        recent=tuple(on_bookmark_added(state.recent, bookmark, limit=recent_limit)),
    )


def with_edited(state: ViewState, bookmark_id: str, title: str, url: str) -> ViewState:
    current = state.find(bookmark_id)
    if current is None:
        raise NotFoundError(f"Bookmark {bookmark_id} not found")
    updated = replace(current, title=title, url=url)
    return replace(
        state,
        bookmarks=tuple(updated if b.id == bookmark_id else b for b in state.bookmarks),
        recent=tuple(on_bookmark_replaced(state.recent, updated)),
    )


def with_removed(state: ViewState, bookmark_id: str) -> ViewState:
    if state.find(bookmark_id) is None:
        raise NotFoundError(f"Bookmark {bookmark_id} not found")
    return replace(
        state,
        bookmarks=tuple(b for b in state.bookmarks if b.id != bookmark_id),
        recent=tuple(on_bookmark_removed(state.recent, bookmark_id)),
    )


def with_query(state: ViewState, query: str) -> ViewState:
    return replace(state, query=query or "")


def with_collapse_toggled(state: ViewState, path: str) -> ViewState:
    return replace(state, collapsed=toggle_collapsed(state.collapsed, path))


def with_suggestions(state: ViewState, suggestions: Iterable[CuratedSite]) -> ViewState:
    return replace(state, suggestions=tuple(suggestions))


def with_suggestion_dismissed(state: ViewState, url: str) -> ViewState:
    return replace(state, suggestions=tuple(dismiss_suggestion(state.suggestions, url)))


def with_suggestions_enabled(state: ViewState, enabled: bool) -> ViewState:
    if enabled:
        return replace(state, suggestions_enabled=True)
    return replace(state, suggestions_enabled=False, suggestions=())
