from __future__ import annotations

from typing import AbstractSet, Dict, FrozenSet, Iterable, List

from .model import OTHER_BOOKMARKS, Bookmark


def group_by_folder(bookmarks: Iterable[Bookmark]) -> Dict[str, List[Bookmark]]:
    """Group bookmarks by ``folder_path``; dict order is the section order."""
    groups: Dict[str, List[Bookmark]] = {}
    for b in bookmarks:
        groups.setdefault(b.folder_path or OTHER_BOOKMARKS, []).append(b)
    return {path: groups[path] for path in section_order(groups)}


def section_order(paths: Iterable[str]) -> List[str]:
    # "Other Bookmarks" always sinks to the bottom regardless of its lexical rank.
    keys = list(paths)
    ordered = sorted(p for p in keys if p != OTHER_BOOKMARKS)
    if OTHER_BOOKMARKS in keys:
        ordered.append(OTHER_BOOKMARKS)
    return ordered


def toggle_collapsed(collapsed: AbstractSet[str], path: str) -> FrozenSet[str]:
    if path in collapsed:
        return frozenset(p for p in collapsed if p != path)
    return frozenset(collapsed) | {path}
