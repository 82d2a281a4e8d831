"""SqlBookStorage against a temporary SQLite database."""

import dataclasses
from pathlib import Path

import pytest
from sqlalchemy import select

from abp.book import Chapter
from abp.repo import BookRepository
from db import models
from db.session import session_scope
from db.storage import BookNotFoundError, SqlBookStorage

pytestmark = pytest.mark.anyio


@pytest.fixture
def storage(session_factory) -> SqlBookStorage:
    return SqlBookStorage(session_factory)


def test_add_and_load_roundtrip_keeps_chapter_order_and_marks(storage, book_factory) -> None:
    book = book_factory("Dune", "Frank Herbert", chapters=3)
    book = dataclasses.replace(
        book,
        chapters=book.chapters[:2] + (Chapter(Path("/sdcard/Dune/z.mp3"), "last", 100, 17, {0: "a", 50: "b"}),),
    )
    storage.add_book(book)

    loaded = storage.active_books()
    assert loaded == [book]
    assert loaded[0].chapters[-1].marks == {0: "a", 50: "b"}
    assert storage.orphaned_books() == []


def test_update_replaces_columns_and_chapters(storage, book_factory) -> None:
    book = book_factory("Dune", chapters=3)
    storage.add_book(book)
    changed = dataclasses.replace(book, time=42, playback_speed=1.5, chapters=book.chapters[:1])
    storage.update_book(changed)
    assert storage.active_books() == [changed]


def test_update_unknown_book_raises(storage, book_factory) -> None:
    with pytest.raises(BookNotFoundError):
        storage.update_book(book_factory("Ghost"))


def test_hide_and_reveal_flip_visibility(storage, book_factory) -> None:
    a, b = book_factory("A"), book_factory("B")
    storage.add_book(a)
    storage.add_book(b)

    storage.hide_book(a.id)
    assert storage.active_books() == [b]
    assert storage.orphaned_books() == [a]

    storage.reveal_book(a.id)
    assert storage.orphaned_books() == []
    assert {x.id for x in storage.active_books()} == {a.id, b.id}


def test_hide_books_is_all_or_nothing(storage, session_factory, book_factory) -> None:
    a = book_factory("A")
    storage.add_book(a)
    with pytest.raises(BookNotFoundError):
        storage.hide_books([a.id, book_factory("Missing").id])
    with session_scope(session_factory) as session:
        assert session.scalars(select(models.BookRow.active)).all() == [1]


async def test_repository_over_sql_storage(storage, session_factory, book_factory) -> None:
    repo = BookRepository(storage)
    try:
        book = book_factory("Neuromancer", "William Gibson")
        await repo.add_book(book)
        await repo.update_book(dataclasses.replace(book, time=1234))
        await repo.hide_books([repo.book_by_id(book.id)])

        reopened = BookRepository(SqlBookStorage(session_factory))
        try:
            assert reopened.active_books == []
            assert [b.time for b in reopened.orphaned_books()] == [1234]
        finally:
            reopened.close()
    finally:
        repo.close()
