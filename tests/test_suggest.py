import asyncio

from pinmarks.domain import domain_of
from pinmarks.flatten import flatten_tree
from pinmarks.model import Bookmark, CuratedSite
from pinmarks.suggest import RegenerationScheduler, SuggestionCache, dismiss_suggestion, generate_suggestions

from conftest import NOW_MS


def test_generate_ranks_by_category_and_skips_bookmarked_domains(sample_forest):
    bookmarks, _ = flatten_tree(sample_forest, now=NOW_MS)
    out = generate_suggestions(bookmarks, SuggestionCache())

    assert [s.url for s in out] == [
        "https://developer.mozilla.org",
        "https://news.ycombinator.com",
        "https://dribbble.com",
        "https://unsplash.com",
        "https://apnews.com",
    ]
    known = {domain_of(b.url) for b in bookmarks}
    assert not any(domain_of(s.url) in known for s in out)


def test_generate_never_exceeds_limit():
    bookmarks = [
        Bookmark(id="1", title="programming", url="https://github.com/"),
        Bookmark(id="2", title="design", url="https://figma.com/"),
        Bookmark(id="3", title="course", url="https://edx.org/"),
    ]
    out = generate_suggestions(bookmarks, SuggestionCache())
    assert len(out) == 6
    assert len(generate_suggestions(bookmarks, SuggestionCache(), limit=2)) == 2


def test_cache_is_filled_once_per_category():
    cache = SuggestionCache()
    bookmarks = [Bookmark(id="1", title="programming", url="https://github.com/")]
    generate_suggestions(bookmarks, cache)
    generate_suggestions(bookmarks, cache)
    assert "Development" in cache
    assert cache.misses == 1
    assert cache.hits == 1


def test_replace_catalog_clears_cache():
    site = CuratedSite(title="T", url="https://t.example", description="d", rating=1.0, category="Development")
    cache = SuggestionCache()
    cache.get("Development")
    cache.replace_catalog({"Development": (site,)})
    assert len(cache) == 0
    assert cache.get("Development") == (site,)


def test_unknown_category_yields_empty_list():
    assert SuggestionCache().get("Gardening") == ()


def test_dismiss_only_touches_current_list(sample_forest):
    bookmarks, _ = flatten_tree(sample_forest, now=NOW_MS)
    cache = SuggestionCache()
    current = generate_suggestions(bookmarks, cache)
    trimmed = dismiss_suggestion(current, "https://dribbble.com")

    assert "https://dribbble.com" not in [s.url for s in trimmed]
    assert len(trimmed) == len(current) - 1
    # A later generation may bring it back.
    assert "https://dribbble.com" in [s.url for s in generate_suggestions(bookmarks, cache)]


def test_scheduler_collapses_overlapping_requests():
    calls = []

    async def scenario():
        async def callback():
            calls.append("run")

        sched = RegenerationScheduler(callback, delay_s=0.01)
        sched.request()
        sched.request()
        last = sched.request()
        await sched.wait()
        return last, sched.pending

    last, pending = asyncio.run(scenario())
    assert last == 3
    assert pending is False
    assert calls == ["run"]


def test_scheduler_cancel_drops_pending_request():
    calls = []

    async def scenario():
        async def callback():
            calls.append("run")

        sched = RegenerationScheduler(callback, delay_s=0.01)
        sched.request()
        sched.cancel()
        await sched.wait()
        await asyncio.sleep(0.02)

    asyncio.run(scenario())
    assert calls == []


def test_scheme_less_bookmark_still_excludes_its_domain():
    bookmarks = [
        Bookmark(id="1", title="productivity tool", url="https://trello.com/b"),
        Bookmark(id="2", title="Notion", url="notion.so"),
    ]
    out = [s.url for s in generate_suggestions(bookmarks, SuggestionCache())]

    assert "https://notion.so" not in out
    assert "https://todoist.com" in out
