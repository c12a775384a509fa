"""Long-lived session object driving the view state against the external stores.

The session owns one :class:`~pinmarks.state.ViewState` value and swaps it for
a new one only after the corresponding store call succeeded. All mutating
operations go through a single ``asyncio.Lock`` so at most one is in flight.

Collaborators are duck-typed:

- tree provider: ``async get_tree() -> List[RawNode]``
- bookmark mutator: ``async create(title, url) -> Bookmark``,
  ``async update(id, title, url)``, ``async remove(id)``
- key-value store: ``async kv_get(key)``, ``async kv_set(key, value)``,
  ``async kv_remove(key)``

:class:`~pinmarks.store_sqlite.SqliteBookmarkStore` provides all three.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from .config import Settings
from .domain import now_ms
from .errors import DuplicateError, NotFoundError, PinmarksError, StoreUnavailable, ValidationError
from .export import write_export
from .log import get_logger
from .model import Bookmark, CuratedSite, Folder
from .pin import PinGate, is_well_formed
from .state import (
    ViewState,
    loaded,
    locked,
    with_added,
    with_collapse_toggled,
    with_edited,
    with_query,
    with_removed,
    with_suggestion_dismissed,
    with_suggestions,
    with_suggestions_enabled,
)
from .suggest import RegenerationScheduler, SuggestionCache, generate_suggestions

log = get_logger(__name__)

SUGGESTIONS_KEY = "suggestionsEnabled"


@dataclass(frozen=True)
class Notice:
    level: str  # "info" | "error"
    message: str


class BookmarkSession:
    def __init__(
        self,
        store: Any,
        *,
        kv: Any = None,
        settings: Optional[Settings] = None,
        cache: Optional[SuggestionCache] = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.store = store
        self.kv = store if kv is None else kv
        self.settings = settings or Settings()
        self.cache = cache or SuggestionCache()
        self.clock = clock
        self.state = ViewState()
        self.notices: List[Notice] = []
        self.pin = PinGate(self.kv)
        self._lock = asyncio.Lock()
        self._regen = RegenerationScheduler(self.regenerate_suggestions, delay_s=self.settings.regen_delay_s)

    # Read side

    @property
    def bookmarks(self) -> Tuple[Bookmark, ...]:
        return self.state.bookmarks

    @property
    def folders(self) -> Dict[str, Folder]:
        return dict(self.state.folders)

    @property
    def recent(self) -> Tuple[Bookmark, ...]:
        return self.state.recent

    @property
    def filtered(self) -> Tuple[Bookmark, ...]:
        return self.state.filtered

    @property
    def groups(self) -> Dict[str, List[Bookmark]]:
        return self.state.groups

    @property
    def suggestions(self) -> Tuple[CuratedSite, ...]:
        return self.state.suggestions

    @property
    def suggestions_enabled(self) -> bool:
        return self.state.suggestions_enabled

    def is_collapsed(self, path: str) -> bool:
        return path in self.state.collapsed

    def drain_notices(self) -> List[Notice]:
        out, self.notices = self.notices, []
        return out

    # Lifecycle

    async def start(self) -> bool:
        """Load the persisted suggestions flag."""
        try:
            enabled = await self._call("read suggestion settings", self.kv.kv_get, SUGGESTIONS_KEY)
        except PinmarksError as e:
            self._fail("Failed to load suggestion settings", e)
            return False
        self.state = with_suggestions_enabled(self.state, bool(enabled))
        return True

    async def submit_pin(self, pin: str) -> bool:
        """Verify ``pin`` against the stored one, or store it when none is set yet; then unlock."""
        if not is_well_formed(pin):
            self._notify("error", "Please enter a 4-digit PIN")
            return False
        try:
            if await self._call("read PIN", self.pin.has_pin):
                if not await self._call("verify PIN", self.pin.matches, pin):
                    self._notify("error", "Incorrect PIN. Please try again.")
                    return False
            else:
                await self._call("store PIN", self.pin.set_pin, pin)
        except PinmarksError as e:
            self._fail("PIN check failed", e)
            return False
        return await self.unlock()

    async def reset_pin(self) -> bool:
        try:
            await self._call("reset PIN", self.pin.reset)
        except PinmarksError as e:
            self._fail("Failed to reset PIN", e)
            return False
        return True

    async def unlock(self) -> bool:
        async with self._lock:
            if not await self._load():
                return False
            if self.state.suggestions_enabled:
                self._refresh_suggestions()
        return True

    async def reload(self) -> bool:
        async with self._lock:
            return await self._load()

    def lock(self) -> None:
        self._regen.cancel()
        self.state = locked(self.state)

    async def _load(self) -> bool:
        try:
            forest = await self._call("read bookmark tree", self.store.get_tree)
        except PinmarksError as e:
            self._fail("Failed to load bookmarks", e)
            return False
        self.state = loaded(
            self.state,
            forest,
            self.clock(),
            window_ms=self.settings.recent_window_ms,
            recent_limit=self.settings.recent_limit,
        )
        log.info("Loaded %d bookmarks in %d folders.", len(self.state.bookmarks), len(self.state.folders))
        return True

    # Mutations

    async def add_from_context(self, title: str, url: str) -> Optional[Bookmark]:
        """Bookmark the page the user is looking at (title/url come from the caller's context)."""
        async with self._lock:
            try:
                self._require_unlocked()
                url = (url or "").strip()
                if not url:
                    raise ValidationError("Could not get current page information")
                if self.state.has_url(url):
                    raise DuplicateError("This page is already bookmarked")
                created = await self._call("create bookmark", self.store.create, (title or "").strip() or url, url)
                applied = self._apply(with_added, created, recent_limit=self.settings.recent_limit)
            except PinmarksError as e:
                self._fail("Failed to add bookmark", e)
                return None
            # New bookmarks may shift the inferred interests.
            if applied and self.state.suggestions_enabled:
                self.schedule_regeneration()
        self._notify("info", "Bookmark added successfully!")
        return created

    async def edit(self, bookmark_id: str, title: str, url: str) -> bool:
        async with self._lock:
            try:
                self._require_unlocked()
                new_title, new_url = (title or "").strip(), (url or "").strip()
                if not new_title or not new_url:
                    raise ValidationError("Title and URL are required")
                if self.state.find(bookmark_id) is None:
                    raise NotFoundError(f"Bookmark {bookmark_id} not found")
                await self._call("update bookmark", self.store.update, bookmark_id, new_title, new_url)
                self._apply(with_edited, bookmark_id, new_title, new_url)
            except PinmarksError as e:
                self._fail("Failed to update bookmark", e)
                return False
        self._notify("info", "Bookmark updated")
        return True

    async def delete(self, bookmark_id: str) -> bool:
        async with self._lock:
            try:
                self._require_unlocked()
                if self.state.find(bookmark_id) is None:
                    raise NotFoundError(f"Bookmark {bookmark_id} not found")
                await self._call("remove bookmark", self.store.remove, bookmark_id)
                self._apply(with_removed, bookmark_id)
            except PinmarksError as e:
                self._fail("Failed to delete bookmark", e)
                return False
        self._notify("info", "Bookmark deleted")
        return True

    async def add_suggestion(self, url: str) -> Optional[Bookmark]:
        async with self._lock:
            try:
                self._require_unlocked()
                site = next((s for s in self.state.suggestions if s.url == url), None)
                if site is None:
                    raise NotFoundError(f"No current suggestion for {url}")
                if self.state.has_url(site.url):
                    raise DuplicateError("This page is already bookmarked")
                created = await self._call("create bookmark", self.store.create, site.title, site.url)
                self._apply(
                    lambda s: with_suggestion_dismissed(
                        with_added(s, created, recent_limit=self.settings.recent_limit), site.url
                    )
                )
            except PinmarksError as e:
                self._fail("Failed to add suggestion", e)
                return None
        self._notify("info", "Suggestion added to bookmarks!")
        return created

    def dismiss_suggestion(self, url: str) -> None:
        # Only the current list changes; the cache may bring it back next generation.
        self.state = with_suggestion_dismissed(self.state, url)

    def toggle_folder_collapse(self, path: str) -> bool:
        self.state = with_collapse_toggled(self.state, path)
        return path in self.state.collapsed

    def set_search_query(self, query: str) -> None:
        self.state = with_query(self.state, query)

    async def toggle_suggestions_enabled(self) -> bool:
        async with self._lock:
            enabled = not self.state.suggestions_enabled
            try:
                await self._call("store suggestion settings", self.kv.kv_set, SUGGESTIONS_KEY, enabled)
            except PinmarksError as e:
                self._fail("Failed to toggle suggestions", e)
                return False
            self.state = with_suggestions_enabled(self.state, enabled)
            if enabled and self.state.unlocked:
                self._refresh_suggestions()
            elif not enabled:
                self._regen.cancel()
        return True

    # Suggestions

    def schedule_regeneration(self, delay_s: Optional[float] = None) -> int:
        return self._regen.request(delay_s)

    async def wait_for_regeneration(self) -> None:
        await self._regen.wait()

    async def regenerate_suggestions(self) -> None:
        async with self._lock:
            self._refresh_suggestions()

    def _refresh_suggestions(self) -> None:
        if not self.state.suggestions_enabled or not self.state.unlocked:
            return
        suggestions = generate_suggestions(
            self.state.bookmarks,
            self.cache,
            top_categories=self.settings.top_categories,
            limit=self.settings.suggestion_limit,
        )
        self.state = with_suggestions(self.state, suggestions)

    # Export

    def export(self, out_dir: Optional[Path] = None, now: Optional[datetime] = None) -> Optional[Path]:
        target = out_dir or Path(self.settings.export_dir)
        try:
            path = write_export(self.state, target, now)
        except OSError as e:
            log.warning("Failed to export bookmarks to %s: %s", target, e)
            self._notify("error", "Failed to export bookmarks")
            return None
        self._notify("info", "Bookmarks exported successfully!")
        return path

    # Plumbing

    def _require_unlocked(self) -> None:
        if not self.state.unlocked:
            raise ValidationError("Unlock with your PIN first")

    def _apply(self, transition: Callable[..., ViewState], *args, **kwargs) -> bool:
        # lock() may have run while the store call was suspended; the locked
        # view stays empty and picks the change up on the next load.
        if not self.state.unlocked:
            log.info("Session locked during a store call; view not updated.")
            return False
        self.state = transition(self.state, *args, **kwargs)
        return True

    async def _call(self, what: str, fn: Callable[..., Awaitable], *args):
        try:
            return await fn(*args)
        except PinmarksError:
            raise
        except Exception as e:
            raise StoreUnavailable(f"{what} failed: {e}") from e

    def _fail(self, context: str, err: PinmarksError) -> None:
        log.warning("%s: %s", context, err)
        message = context if isinstance(err, StoreUnavailable) else str(err)
        self._notify("error", message)

    def _notify(self, level: str, message: str) -> None:
        self.notices.append(Notice(level=level, message=message))
