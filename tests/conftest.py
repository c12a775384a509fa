import sys
from pathlib import Path

import pytest

# Allow `import pinmarks` without installing the package.
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from pinmarks.model import RawNode  # noqa: E402

DAY_MS = 24 * 60 * 60 * 1000
NOW_MS = 1_760_000_000_000


def folder(node_id, title, *children, parent_id=None):
    return RawNode(id=node_id, title=title, children=list(children), parent_id=parent_id)


def link(node_id, title, url, *, date_added=None, parent_id=None):
    return RawNode(id=node_id, title=title, url=url, date_added=date_added, parent_id=parent_id)


@pytest.fixture
def sample_forest():
    return [
        folder(
            "1",
            "Bookmarks Bar",
            link("10", "GitHub - awesome programming repo", "https://github.com/a/b", date_added=NOW_MS - DAY_MS),
            folder(
                "11",
                "Work",
                link("12", "Jira board", "https://jira.example.com/board", date_added=NOW_MS - 10 * DAY_MS),
                folder("13", "Docs", link("14", "Design guide", "https://www.figma.com/file/x", date_added=NOW_MS - 2 * DAY_MS)),
            ),
        ),
        folder(
            "2",
            "Other Bookmarks",
            link("20", "Reuters", "https://www.reuters.com/world", date_added=NOW_MS - 3 * DAY_MS),
            folder("21", "Empty"),
        ),
    ]
