from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from .catalog import CATEGORIES
from .domain import domain_of, strip_www
from .log import get_logger
from .model import Bookmark, Category

log = get_logger(__name__)

DOMAIN_WEIGHT = 2
KEYWORD_WEIGHT = 1


def score_bookmark(bookmark: Bookmark, category: Category) -> int:
    domain = domain_of(bookmark.url)
    title = bookmark.title.lower()
    score = 0
    if any(strip_www(d) in domain for d in category.domains):
        score += DOMAIN_WEIGHT
    if any(k in title for k in category.keywords):
        score += KEYWORD_WEIGHT
    return score


def score_categories(
    bookmarks: Iterable[Bookmark],
    categories: Sequence[Category] = CATEGORIES,
) -> List[Tuple[str, int]]:
    """Score every category against the corpus, best first.

    Zero scores are dropped. Ties keep catalog order (``sorted`` is stable).
    """
    items = list(bookmarks)
    scored = []
    for c in categories:
        total = sum(score_bookmark(b, c) for b in items)
        if total > 0:
            scored.append((c.name, total))
    return sorted(scored, key=lambda kv: -kv[1])


def rank_categories(
    bookmarks: Iterable[Bookmark],
    categories: Sequence[Category] = CATEGORIES,
    *,
    top: int = 3,
) -> List[str]:
    scored = score_categories(bookmarks, categories)
    if scored:
        log.debug("Category scores: %s", ", ".join(f"{name}={score}" for name, score in scored))
    return [name for name, _score in scored[:top]]
