from pathlib import Path

from pinmarks.flatten import flatten_tree
from pinmarks.parse_netscape import parse_bookmarks_html

SAMPLE = """<!DOCTYPE NETSCAPE-Bookmark-file-1>
<META HTTP-EQUIV="Content-Type" CONTENT="text/html; charset=UTF-8">
<TITLE>Bookmarks</TITLE>
<H1>Bookmarks</H1>
<DL><p>
    <DT><H3 ADD_DATE="1700000000" PERSONAL_TOOLBAR_FOLDER="true">Bookmarks bar</H3>
    <DL><p>
        <DT><A HREF="https://github.com/" ADD_DATE="1700000100">GitHub</A>
        <DT><H3>Reading</H3>
        <DL><p>
            <DT><A HREF="https://a.example/">A</A>
            <DT><A HREF="https://b.example/">B</A>
        </DL><p>
    </DL><p>
    <DT><A HREF="https://loose.example/">Loose</A>
</DL><p>
"""


def test_parse_netscape_tree(tmp_path: Path):
    src = tmp_path / "bookmarks.html"
    src.write_text(SAMPLE, encoding="utf-8")

    forest = parse_bookmarks_html(src)
    assert [n.title for n in forest] == ["Bookmarks Bar", "Loose"]

    bookmarks, folders = flatten_tree(forest, now=0)
    assert [(b.title, b.folder_path) for b in bookmarks] == [
        ("GitHub", "Bookmarks Bar"),
        ("A", "Bookmarks Bar > Reading"),
        ("B", "Bookmarks Bar > Reading"),
        ("Loose", "Other Bookmarks"),
    ]
    assert bookmarks[0].date_added == 1700000100 * 1000
    assert [f.path for f in folders.values()] == ["Bookmarks Bar > Reading"]
