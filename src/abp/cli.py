from __future__ import annotations

import argparse
import asyncio
import logging
import os
import uuid
from collections.abc import Sequence
from pathlib import Path

from abp.book import Book
from abp.config import CONFIG_ENV, Settings, load_settings
from abp.player import LoggingPlayerController
from abp.prefs import PrefsManager
from abp.repo import BookRepository
from abp.search import (
    MEDIA_FOCUS_ALBUM,
    MEDIA_FOCUS_ANY,
    MEDIA_FOCUS_ARTIST,
    MEDIA_FOCUS_PLAYLIST,
    BookSearch,
    BookSearchHandler,
)
from db import SqlBookStorage, make_engine, make_session_factory, migrate
from logging_setup import setup_logging

logger = logging.getLogger(__name__)

FOCUS_CHOICES = {
    "any": MEDIA_FOCUS_ANY,
    "artist": MEDIA_FOCUS_ARTIST,
    "album": MEDIA_FOCUS_ALBUM,
    "playlist": MEDIA_FOCUS_PLAYLIST,
}


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(prog="abp", description="Manage the audiobook library.")
    ap.add_argument("--config", dest="config", default="abp.yaml", help="Settings YAML (optional)")
    ap.add_argument("--db", dest="database_url", default=None, help="Override the database URL")
    sub = ap.add_subparsers(dest="command", required=True)

    ls = sub.add_parser("list", help="List books")
    ls.add_argument("--orphaned", action="store_true", help="List hidden books instead of active ones")

    hide = sub.add_parser("hide", help="Hide an active book")
    hide.add_argument("book_id", type=uuid.UUID)

    reveal = sub.add_parser("reveal", help="Reveal a hidden book")
    reveal.add_argument("book_id", type=uuid.UUID)

    search = sub.add_parser("search", help="Resolve a voice search and select the match")
    search.add_argument("query", nargs="?", default=None)
    search.add_argument("--focus", choices=sorted(FOCUS_CHOICES), default=None)
    search.add_argument("--artist", default=None)
    search.add_argument("--album", default=None)
    search.add_argument("--playlist", default=None)

    db = sub.add_parser("db", help="Database maintenance")
    db_sub = db.add_subparsers(dest="db_command", required=True)
    up = db_sub.add_parser("upgrade", help="Apply schema migrations")
    up.add_argument("revision", nargs="?", default="head")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    return ap.parse_args(argv)


def _format_book(book: Book) -> str:
    author = book.author or "-"
    return f"{book.id}  {book.name}  ({author}, {len(book.chapters)} chapters)"


async def _run_library(args: argparse.Namespace, settings: Settings) -> int:
    session_factory = make_session_factory(make_engine(settings.database_url))
    repo = BookRepository(SqlBookStorage(session_factory))
    try:
        if args.command == "list":
            books = repo.orphaned_books() if args.orphaned else repo.active_books
            for book in books:
                print(_format_book(book))
            return 0
        if args.command == "hide":
            book = repo.book_by_id(args.book_id)
            if book is None:
                logger.error("No active book %s", args.book_id)
                return 1
            await repo.hide_books([book])
            print(f"hidden {book.name}")
            return 0
        if args.command == "reveal":
            book = next((b for b in repo.orphaned_books() if b.id == args.book_id), None)
            if book is None:
                logger.error("No hidden book %s", args.book_id)
                return 1
            await repo.reveal_book(book)
            print(f"revealed {book.name}")
            return 0
        # search
        search = BookSearch(
            query=args.query,
            media_focus=FOCUS_CHOICES.get(args.focus) if args.focus else None,
            artist=args.artist,
            album=args.album,
            playlist=args.playlist,
        )
        found = BookSearchHandler(repo, PrefsManager(session_factory), LoggingPlayerController()).handle(search)
        print(f"selected {found.name}" if found else "no match")
        return 0 if found else 1
    finally:
        repo.close()


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = load_settings(Path(args.config))
    if args.database_url:
        settings.database_url = args.database_url
    setup_logging(level_name=settings.log_level)

    if args.command == "db":
        migrate.upgrade(settings.database_url, args.revision)
        print(f"database at {args.revision}")
        return 0
    if args.command == "serve":
        import uvicorn

        os.environ[CONFIG_ENV] = str(Path(args.config).resolve())
        os.environ["DATABASE_URL"] = settings.database_url
        uvicorn.run("api.app:app", host=args.host, port=args.port, log_config=None)
        return 0
    return asyncio.run(_run_library(args, settings))


if __name__ == "__main__":
    raise SystemExit(main())
