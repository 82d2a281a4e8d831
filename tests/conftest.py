from __future__ import annotations

import sys
import uuid
from collections.abc import Iterator, Sequence
from pathlib import Path

import pytest

# Ensure src/ is on sys.path so we can import abp.*, db.* and api.* directly.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from abp.book import Book, BookType, Chapter  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    # the repository is built on asyncio primitives
    return "asyncio"


class FakeBookStorage:
    """In-memory BookStorage recording every durable write."""

    def __init__(self, active: Sequence[Book] = (), orphaned: Sequence[Book] = ()) -> None:
        self.active = {b.id: b for b in active}
        self.orphaned = {b.id: b for b in orphaned}
        self.writes: list[tuple[str, uuid.UUID]] = []
        self.fail_on: str | None = None

    def _record(self, op: str, book_id: uuid.UUID) -> None:
        if self.fail_on == op:
            raise OSError(f"{op} failed")
        self.writes.append((op, book_id))

    def active_books(self) -> list[Book]:
        return list(self.active.values())

    def orphaned_books(self) -> list[Book]:
        return list(self.orphaned.values())

    def add_book(self, book: Book) -> None:
        self._record("add", book.id)
        self.active[book.id] = book

    def update_book(self, book: Book) -> None:
        self._record("update", book.id)
        self.active[book.id] = book

    def hide_books(self, book_ids: Sequence[uuid.UUID]) -> None:
        if self.fail_on == "hide":
            raise OSError("hide failed")
        for book_id in book_ids:
            self._record("hide", book_id)
        for book_id in book_ids:
            book = self.active.pop(book_id, None)
            if book is not None:
                self.orphaned[book_id] = book

    def reveal_book(self, book_id: uuid.UUID) -> None:
        self._record("reveal", book_id)
        book = self.orphaned.pop(book_id, None)
        if book is not None:
            self.active[book_id] = book


def make_book(name: str, author: str | None = None, folder: str | None = None, chapters: int = 2) -> Book:
    root = Path("/sdcard") / (folder or name)
    chs = tuple(
        Chapter(
            file=root / f"chapter{i}.mp3",
            name=f"{name} chapter {i}",
            duration=5000 * i,
            marks={0: f"{name} chapter {i}"},
        )
        for i in range(1, chapters + 1)
    )
    return Book(
        id=uuid.uuid4(),
        type=BookType.SINGLE_FOLDER,
        author=author,
        current_file=chs[0].file,
        time=3000,
        name=name,
        chapters=chs,
        playback_speed=1.0,
        root=str(root),
    )


@pytest.fixture
def book_factory():
    return make_book


@pytest.fixture
def fake_storage_cls() -> type[FakeBookStorage]:
    return FakeBookStorage


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'books.db'}"


@pytest.fixture
def session_factory(sqlite_url: str) -> Iterator[object]:
    """Session factory over a fresh database created from the ORM metadata."""
    from db.models import Base
    from db.session import make_engine, make_session_factory

    engine = make_engine(sqlite_url)
    Base.metadata.create_all(engine)
    try:
        yield make_session_factory(engine)
    finally:
        engine.dispose()
