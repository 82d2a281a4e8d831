"""SQL backed :class:`abp.repo.BookStorage`.

Each public method runs in its own transaction. Rows are mapped to the
immutable domain values of :mod:`abp.book`.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from abp.book import Book, BookType, Chapter

from . import models, repository
from .session import SessionFactory, session_scope

__all__ = ["BookNotFoundError", "SqlBookStorage"]

logger = logging.getLogger(__name__)


class BookNotFoundError(LookupError):
    """Raised when a write addresses a book id the store does not know."""

    def __init__(self, book_id: uuid.UUID) -> None:
        super().__init__(f"no stored book with id {book_id}")
        self.book_id = book_id


class SqlBookStorage:
    """Persist books through SQLAlchemy sessions from ``session_factory``."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def active_books(self) -> list[Book]:
        return self._load(active=True)

    def orphaned_books(self) -> list[Book]:
        return self._load(active=False)

    def add_book(self, book: Book) -> None:
        with session_scope(self._session_factory) as session:
            repository.insert_book(session, _book_values(book), _chapter_values(book))
        logger.debug("Stored book %s", book.id)

    def update_book(self, book: Book) -> None:
        with session_scope(self._session_factory) as session:
            row = repository.replace_book(session, str(book.id), _book_values(book), _chapter_values(book))
            if row is None:
                raise BookNotFoundError(book.id)

    def hide_book(self, book_id: uuid.UUID) -> None:
        self.hide_books([book_id])

    def hide_books(self, book_ids: Sequence[uuid.UUID]) -> None:
        """Mark every id inactive; any unknown id rolls back the whole batch."""
        with session_scope(self._session_factory) as session:
            for book_id in book_ids:
                if repository.set_active(session, str(book_id), False) == 0:
                    raise BookNotFoundError(book_id)
        logger.debug("Hid %d books", len(book_ids))

    def reveal_book(self, book_id: uuid.UUID) -> None:
        with session_scope(self._session_factory) as session:
            if repository.set_active(session, str(book_id), True) == 0:
                raise BookNotFoundError(book_id)

    def _load(self, active: bool) -> list[Book]:
        with session_scope(self._session_factory) as session:
            return [_to_book(row) for row in repository.list_books(session, active)]


def _book_values(book: Book) -> dict[str, Any]:
    return {
        "id": str(book.id),
        "name": book.name,
        "author": book.author,
        "current_media_path": str(book.current_file),
        "playback_speed": book.playback_speed,
        "root": book.root,
        "time": book.time,
        "type": book.type.value,
    }


def _chapter_values(book: Book) -> list[dict[str, Any]]:
    return [
        {
            "file": str(c.file),
            "name": c.name,
            "duration": c.duration,
            "last_modified": c.last_modified,
            "marks": {str(pos): name for pos, name in c.marks.items()},
        }
        for c in book.chapters
    ]


def _to_book(row: models.BookRow) -> Book:
    chapters = tuple(
        Chapter(
            file=Path(c.file),
            name=c.name,
            duration=c.duration,
            last_modified=c.last_modified,
            marks={int(pos): name for pos, name in (c.marks or {}).items()},
        )
        for c in row.chapters
    )
    return Book(
        id=uuid.UUID(row.id),
        type=BookType(row.type),
        author=row.author,
        current_file=Path(row.current_media_path),
        time=max(row.time, 0),
        name=row.name,
        chapters=chapters,
        playback_speed=row.playback_speed,
        root=row.root,
    )
