from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .catalog import CATEGORIES, CURATED_SITES, curated_sites_for
from .categories import rank_categories
from .domain import domain_of
from .log import get_logger
from .model import Bookmark, Category, CuratedSite

log = get_logger(__name__)

SUGGESTION_LIMIT = 6
TOP_CATEGORIES = 3


class SuggestionCache:
    """Memo table of curated lists per category.

    Entries live as long as the process; the table is only cleared when the
    whole catalog is swapped via :meth:`replace_catalog`.
    """

    def __init__(self, sites: Optional[Dict[str, Tuple[CuratedSite, ...]]] = None):
        self._sites = CURATED_SITES if sites is None else sites
        self._entries: Dict[str, Tuple[CuratedSite, ...]] = {}
        self.hits = 0
        self.misses = 0

    def __contains__(self, category: str) -> bool:
        return category in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, category: str) -> Tuple[CuratedSite, ...]:
        cached = self._entries.get(category)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1
        sites = curated_sites_for(category, self._sites)
        self._entries[category] = sites
        return sites

    def replace_catalog(self, sites: Dict[str, Tuple[CuratedSite, ...]]) -> None:
        self._sites = sites
        self._entries.clear()
        log.info("Curated catalog replaced (%d categories); suggestion cache cleared.", len(sites))


def generate_suggestions(
    bookmarks: Sequence[Bookmark],
    cache: SuggestionCache,
    *,
    categories: Sequence[Category] = CATEGORIES,
    top_categories: int = TOP_CATEGORIES,
    limit: int = SUGGESTION_LIMIT,
) -> List[CuratedSite]:
    ranked = rank_categories(bookmarks, categories, top=top_categories)
    candidates: List[CuratedSite] = []
    for name in ranked:
        candidates.extend(cache.get(name))

    known = {domain_of(b.url) for b in bookmarks}
    out = [s for s in candidates if domain_of(s.url) not in known][:limit]
    log.info("Generated %d suggestions from categories: %s", len(out), ", ".join(ranked) or "-")
    return out


def dismiss_suggestion(suggestions: Iterable[CuratedSite], url: str) -> List[CuratedSite]:
    return [s for s in suggestions if s.url != url]


class RegenerationScheduler:
    """Runs ``callback`` after a delay, keeping only the latest request.

    Each request bumps a generation counter and cancels the pending task; a
    task that wakes up under a stale generation exits without running.
    """

    def __init__(self, callback: Callable[[], Awaitable[None]], delay_s: float = 1.0):
        self._callback = callback
        self.delay_s = delay_s
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def request(self, delay_s: Optional[float] = None) -> int:
        self._generation += 1
        gen = self._generation
        if self.pending:
            self._task.cancel()
        delay = self.delay_s if delay_s is None else delay_s
        self._task = asyncio.get_running_loop().create_task(self._run(gen, delay))
        return gen

    def cancel(self) -> None:
        self._generation += 1
        if self.pending:
            self._task.cancel()

    async def wait(self) -> None:
        while self.pending:
            await asyncio.wait({self._task})

    async def _run(self, gen: int, delay: float) -> None:
        await asyncio.sleep(delay)
        if gen != self._generation:
            log.debug("Skipping stale suggestion regeneration (generation %d < %d).", gen, self._generation)
            return
        await self._callback()
