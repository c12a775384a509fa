from pinmarks.flatten import flatten_tree
from pinmarks.model import RawNode

from conftest import DAY_MS, NOW_MS, folder, link


def test_flatten_preserves_preorder_and_builds_paths(sample_forest):
    bookmarks, folders = flatten_tree(sample_forest, now=NOW_MS)

    assert [b.id for b in bookmarks] == ["10", "12", "14", "20"]
    assert [b.folder_path for b in bookmarks] == [
        "Bookmarks Bar",
        "Bookmarks Bar > Work",
        "Bookmarks Bar > Work > Docs",
        "Other Bookmarks",
    ]
    assert {k: f.path for k, f in folders.items()} == {
        "11": "Bookmarks Bar > Work",
        "13": "Bookmarks Bar > Work > Docs",
        "21": "Other Bookmarks > Empty",
    }


def test_system_roots_are_not_registered_and_reset_the_path():
    forest = [
        folder(
            "1",
            "Projects",
            folder("2", "Mobile Bookmarks", link("3", "M", "https://m.example/")),
            link("4", "P", "https://p.example/"),
        )
    ]
    bookmarks, folders = flatten_tree(forest, now=NOW_MS)

    assert [(b.title, b.folder_path) for b in bookmarks] == [("M", "Mobile Bookmarks"), ("P", "Projects")]
    assert list(folders) == ["1"]


def test_top_level_links_fall_back_to_other_bookmarks():
    bookmarks, folders = flatten_tree([link("1", "Loose", "https://loose.example/")], now=NOW_MS)
    assert bookmarks[0].folder_path == "Other Bookmarks"
    assert folders == {}


def test_missing_creation_time_defaults_to_now():
    forest = [link("1", "A", "https://a.example/"), link("2", "B", "https://b.example/", date_added=NOW_MS - DAY_MS)]
    bookmarks, _ = flatten_tree(forest, now=NOW_MS)
    assert [b.date_added for b in bookmarks] == [NOW_MS, NOW_MS - DAY_MS]


def test_node_without_url_or_children_contributes_nothing():
    forest = [RawNode(id="1", title="Separator"), folder("2", "Work", link("3", "A", "https://a.example/"))]
    bookmarks, folders = flatten_tree(forest, now=NOW_MS)
    assert [b.id for b in bookmarks] == ["3"]
    assert list(folders) == ["2"]


def test_work_and_other_bookmarks_example():
    forest = [
        folder("1", "Work", link("2", "A", "https://a.com")),
        folder("3", "Other Bookmarks", link("4", "B", "https://b.com")),
    ]
    bookmarks, _ = flatten_tree(forest, now=NOW_MS)
    assert [(b.title, b.folder_path) for b in bookmarks] == [("A", "Work"), ("B", "Other Bookmarks")]


def test_flatten_does_not_mutate_input(sample_forest):
    before = repr(sample_forest)
    flatten_tree(sample_forest, now=NOW_MS)
    flatten_tree(sample_forest, now=NOW_MS)
    assert repr(sample_forest) == before
