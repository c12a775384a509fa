from pinmarks.catalog import CATEGORIES
from pinmarks.categories import rank_categories, score_bookmark, score_categories
from pinmarks.flatten import flatten_tree
from pinmarks.model import Bookmark, Category

from conftest import NOW_MS

DEV = next(c for c in CATEGORIES if c.name == "Development")


def test_domain_and_keyword_match_both_count():
    b = Bookmark(id="1", title="Awesome programming repo", url="https://github.com/x/y")
    assert score_bookmark(b, DEV) == 3


def test_www_prefix_is_ignored_on_both_sides():
    cat = Category(name="Docs", keywords=(), domains=("www.example.org",))
    b = Bookmark(id="1", title="x", url="https://www.example.org/page")
    assert score_bookmark(b, cat) == 2


def test_domain_match_is_substring_based():
    b = Bookmark(id="1", title="Gist", url="https://gist.github.com/abc")
    assert score_bookmark(b, DEV) == 2


def test_multiple_keywords_count_once_per_bookmark():
    b = Bookmark(id="1", title="dev coding programming tech", url="https://example.com/")
    assert score_bookmark(b, DEV) == 1


def test_zero_scores_dropped_and_ties_keep_catalog_order(sample_forest):
    bookmarks, _ = flatten_tree(sample_forest, now=NOW_MS)
    scored = score_categories(bookmarks)

    assert scored == [("Development", 3), ("Design", 3), ("News", 2), ("Learning", 1)]
    assert rank_categories(bookmarks) == ["Development", "Design", "News"]


def test_tie_break_uses_catalog_position_not_name():
    cats = [
        Category(name="Zebra", keywords=("zoo",), domains=()),
        Category(name="Apple", keywords=("zoo",), domains=()),
    ]
    b = Bookmark(id="1", title="zoo trip", url="https://example.com/")
    assert rank_categories([b], cats) == ["Zebra", "Apple"]


def test_empty_corpus_ranks_nothing():
    assert rank_categories([]) == []
