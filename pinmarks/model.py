from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

BOOKMARKS_BAR = "Bookmarks Bar"
OTHER_BOOKMARKS = "Other Bookmarks"
MOBILE_BOOKMARKS = "Mobile Bookmarks"

# Root folder titles recognized verbatim; they reset path composition.
SYSTEM_ROOTS = (BOOKMARKS_BAR, OTHER_BOOKMARKS, MOBILE_BOOKMARKS)


@dataclass
class RawNode:
    id: str
    title: str
    url: Optional[str] = None
    children: Optional[List["RawNode"]] = None
    parent_id: Optional[str] = None
    date_added: Optional[int] = None  # epoch ms


@dataclass(frozen=True)
class Bookmark:
    id: str
    title: str
    url: str
    parent_id: Optional[str] = None
    date_added: int = 0  # epoch ms
    folder_path: str = OTHER_BOOKMARKS


@dataclass(frozen=True)
class Folder:
    id: str
    title: str
    path: str
    parent_id: Optional[str] = None


@dataclass(frozen=True)
class Category:
    name: str
    keywords: tuple = field(default_factory=tuple)
    domains: tuple = field(default_factory=tuple)


@dataclass(frozen=True)
class CuratedSite:
    title: str
    url: str
    description: str
    rating: float
    category: str
