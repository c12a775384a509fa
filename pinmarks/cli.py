from __future__ import annotations

import argparse
import asyncio
import time
from pathlib import Path
from typing import List

from . import __version__
from .config import Settings, load_settings
from .domain import domain_of
from .log import LogConfig, get_logger, setup_logging
from .parse_chrome import parse_chrome_bookmarks
from .parse_netscape import parse_bookmarks_html
from .session import BookmarkSession
from .store_sqlite import SqliteBookmarkStore

log = get_logger(__name__)


def main(argv: List[str] | None = None) -> int:
    p = argparse.ArgumentParser(
        prog="pinmarks",
        description="PIN-gated bookmark views: folder groups, recent additions, search and curated suggestions.",
    )
    p.add_argument("-V", "--version", action="version", version=f"pinmarks {__version__}")
    p.add_argument("--config", default=None, help="YAML config file (optional). Env vars override defaults.")
    p.add_argument("--db", default=None, help="Bookmark database path (overrides PINMARKS_DB/config).")
    p.add_argument("--pin", default=None, help="4-digit PIN, required once a PIN has been set.")
    p.add_argument("--log-level", default=None, help="DEBUG/INFO/WARN/ERROR (overrides env/config).")
    p.add_argument("--no-color", action="store_true", help="Disable colored logging.")
    sub = p.add_subparsers(dest="cmd", required=True)

    imp = sub.add_parser("import", help="Import a browser bookmark export into the database.")
    src = imp.add_mutually_exclusive_group(required=True)
    src.add_argument("--chrome-json", help="Chromium 'Bookmarks' JSON file.")
    src.add_argument("--netscape-html", help="Netscape bookmark HTML export.")

    ls = sub.add_parser("list", help="Show bookmarks grouped by folder.")
    ls.add_argument("--query", default="", help="Case-insensitive filter on title or URL.")
    ls.add_argument("--collapse", action="append", default=[], help="Folder path to show collapsed (repeatable).")

    sub.add_parser("recent", help="Show bookmarks added in the recent window.")
    sub.add_parser("folders", help="Show the folder registry.")
    sub.add_parser("suggest", help="Show curated suggestions (enables nothing by itself).")

    add = sub.add_parser("add", help="Bookmark a page.")
    add.add_argument("--title", default="")
    add.add_argument("--url", required=True)

    edit = sub.add_parser("edit", help="Edit a bookmark's title and URL.")
    edit.add_argument("id")
    edit.add_argument("--title", required=True)
    edit.add_argument("--url", required=True)

    rm = sub.add_parser("delete", help="Delete a bookmark.")
    rm.add_argument("id")

    dis = sub.add_parser("dismiss", help="Hide a suggestion from the current list and show the rest.")
    dis.add_argument("url")

    adds = sub.add_parser("add-suggestion", help="Bookmark one of the current suggestions.")
    adds.add_argument("url")

    sg = sub.add_parser("suggestions", help="Show or change whether suggestions are enabled.")
    sg.add_argument("action", choices=["on", "off", "toggle", "status"])

    ex = sub.add_parser("export", help="Write a JSON export of bookmarks and folders.")
    ex.add_argument("--out-dir", default=None, help="Directory for bookmarks-export-YYYY-MM-DD.json.")

    pin = sub.add_parser("pin", help="Set or reset the PIN.")
    pin.add_argument("action", choices=["set", "reset"])
    pin.add_argument("value", nargs="?", default=None)

    args = p.parse_args(argv)
    cfg = load_settings(args.config)
    if args.db:
        cfg.db_path = args.db
    if args.log_level:
        cfg.log_level = args.log_level
    if args.no_color:
        cfg.no_color = True
    setup_logging(LogConfig(level=cfg.log_level, no_color=cfg.no_color, log_file=cfg.log_file or None))

    t0 = time.time()
    rc = asyncio.run(_dispatch(args, cfg))
    log.debug("Done in %d ms.", int((time.time() - t0) * 1000))
    return rc


async def _dispatch(args, cfg: Settings) -> int:
    store = SqliteBookmarkStore(cfg.db_path)
    session = BookmarkSession(store, settings=cfg)
    try:
        if args.cmd == "import":
            return await _cmd_import(args, store)
        if args.cmd == "pin":
            return await _cmd_pin(args, session)

        if not await _open(args, session):
            return 2
        handler = _HANDLERS.get(args.cmd)
        if handler is None:
            return 2
        return await handler(args, session)
    finally:
        _flush_notices(session)
        session.lock()


async def _open(args, session: BookmarkSession) -> bool:
    if not await session.start():
        return False
    if await session.pin.has_pin():
        if not args.pin:
            log.error("A PIN is set; pass --pin.")
            return False
        return await session.submit_pin(args.pin)
    return await session.unlock()


async def _cmd_import(args, store: SqliteBookmarkStore) -> int:
    try:
        if args.chrome_json:
            forest = parse_chrome_bookmarks(Path(args.chrome_json))
        else:
            forest = parse_bookmarks_html(Path(args.netscape_html))
    except Exception as e:
        log.error("Failed to parse bookmarks export: %s", e)
        return 2
    try:
        count = await store.import_forest(forest)
    except Exception as e:
        log.error("Failed to import bookmarks: %s", e)
        return 2
    log.info("Imported %d bookmarks into %s", count, store.db_path)
    return 0


async def _cmd_pin(args, session: BookmarkSession) -> int:
    if args.action == "reset":
        return 0 if await session.reset_pin() else 2
    if not args.value:
        log.error("pin set needs a value.")
        return 2
    if await session.pin.has_pin():
        log.error("A PIN is already set; reset it first.")
        return 2
    return 0 if await session.submit_pin(args.value) else 2


async def _cmd_list(args, session: BookmarkSession) -> int:
    session.set_search_query(args.query)
    for path in args.collapse:
        session.toggle_folder_collapse(path)
    if not args.query and session.suggestions_enabled and session.suggestions:
        _print_suggestions(session)
    if not args.query and session.recent:
        _print_recent(session, limit=session.settings.recent_display_limit)
    groups = session.groups
    if not groups:
        print("No bookmarks found.")
        return 0
    for path, items in groups.items():
        collapsed = session.is_collapsed(path)
        print(f"{'+' if collapsed else '-'} {path} ({len(items)})")
        if collapsed:
            continue
        for b in items:
            print(f"    [{b.id}] {b.title} <{b.url}>")
    return 0


async def _cmd_recent(args, session: BookmarkSession) -> int:
    _print_recent(session, limit=session.settings.recent_limit)
    return 0


async def _cmd_folders(args, session: BookmarkSession) -> int:
    for f in session.folders.values():
        print(f"[{f.id}] {f.path}")
    return 0


async def _cmd_suggest(args, session: BookmarkSession) -> int:
    if not session.suggestions_enabled:
        print("Suggestions are disabled (pinmarks suggestions on).")
        return 0
    _print_suggestions(session)
    return 0


async def _cmd_add(args, session: BookmarkSession) -> int:
    created = await session.add_from_context(args.title, args.url)
    if created is None:
        return 2
    print(f"[{created.id}] {created.title} <{created.url}>")
    return 0


async def _cmd_edit(args, session: BookmarkSession) -> int:
    return 0 if await session.edit(args.id, args.title, args.url) else 2


async def _cmd_delete(args, session: BookmarkSession) -> int:
    return 0 if await session.delete(args.id) else 2


async def _cmd_add_suggestion(args, session: BookmarkSession) -> int:
    created = await session.add_suggestion(args.url)
    return 0 if created is not None else 2


async def _cmd_dismiss(args, session: BookmarkSession) -> int:
    if not session.suggestions_enabled:
        print("Suggestions are disabled (pinmarks suggestions on).")
        return 2
    session.dismiss_suggestion(args.url)
    _print_suggestions(session)
    return 0


async def _cmd_suggestions(args, session: BookmarkSession) -> int:
    want = {"on": True, "off": False}.get(args.action)
    if args.action == "toggle" or (want is not None and want != session.suggestions_enabled):
        if not await session.toggle_suggestions_enabled():
            return 2
    print(f"Suggestions {'enabled' if session.suggestions_enabled else 'disabled'}.")
    return 0


async def _cmd_export(args, session: BookmarkSession) -> int:
    out = session.export(Path(args.out_dir) if args.out_dir else None)
    if out is None:
        return 2
    print(out)
    return 0


def _print_recent(session: BookmarkSession, limit: int) -> None:
    now = session.clock()
    print(f"Recently Added ({len(session.recent)})")
    for b in session.recent[:limit]:
        print(f"    [{b.id}] {b.title} <{b.url}> {_age_label(now, b.date_added)}")


def _print_suggestions(session: BookmarkSession) -> None:
    print(f"Suggested for You ({len(session.suggestions)})")
    for s in session.suggestions:
        print(f"    {s.title} ({domain_of(s.url)}) {s.rating} [{s.category}]")
        print(f"        {s.description}")


def _age_label(now: int, date_added: int) -> str:
    days = -(-abs(now - date_added) // (24 * 60 * 60 * 1000))
    if days <= 1:
        return "Today"
    return f"{days} days ago"


def _flush_notices(session: BookmarkSession) -> None:
    for n in session.drain_notices():
        if n.level == "error":
            log.error("%s", n.message)
        else:
            log.info("%s", n.message)


_HANDLERS = {
    "list": _cmd_list,
    "recent": _cmd_recent,
    "folders": _cmd_folders,
    "suggest": _cmd_suggest,
    "add": _cmd_add,
    "edit": _cmd_edit,
    "delete": _cmd_delete,
    "dismiss": _cmd_dismiss,
    "add-suggestion": _cmd_add_suggestion,
    "suggestions": _cmd_suggestions,
    "export": _cmd_export,
}
