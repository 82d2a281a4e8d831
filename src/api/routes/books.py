"""Book library endpoints.

Implements:
- GET /books: sorted active books
- GET /books/orphaned: hidden books
- GET /books/{book_id}: one active book
- POST /books: add a book
- POST /books/{book_id}/hide and /reveal: move a book between the lists
- GET /prefs/current-book: the currently selected book id
"""

from __future__ import annotations

import uuid
from pathlib import Path

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from abp.book import Book, BookType, Chapter
from abp.prefs import PrefsManager
from abp.repo import BookRepository

router = APIRouter()


class ChapterModel(BaseModel):
    """Wire form of a chapter.

    Attributes:
        file (str): Media file path.
        name (str): Display name.
        duration (int): Length in ms.
        last_modified (int): File modification time in ms.
        marks (dict[int, str]): Marker positions (ms) to names.
    """

    file: str
    name: str
    duration: int = Field(ge=0)
    last_modified: int = 0
    marks: dict[int, str] = {}


class BookModel(BaseModel):
    """Wire form of a book."""

    id: uuid.UUID | None = None
    type: BookType = BookType.SINGLE_FOLDER
    author: str | None = None
    current_file: str | None = None
    time: int = Field(default=0, ge=0)
    name: str
    chapters: list[ChapterModel] = Field(min_length=1)
    playback_speed: float = Field(default=1.0, gt=0)
    root: str = ""

    def to_book(self) -> Book:
        chapters = tuple(
            Chapter(
                file=Path(c.file),
                name=c.name,
                duration=c.duration,
                last_modified=c.last_modified,
                marks=dict(c.marks),
            )
            for c in self.chapters
        )
        return Book(
            id=self.id or uuid.uuid4(),
            type=self.type,
            author=self.author,
            current_file=Path(self.current_file) if self.current_file else chapters[0].file,
            time=self.time,
            name=self.name,
            chapters=chapters,
            playback_speed=self.playback_speed,
            root=self.root,
        )

    @classmethod
    def from_book(cls, book: Book) -> BookModel:
        return cls(
            id=book.id,
            type=book.type,
            author=book.author,
            current_file=str(book.current_file),
            time=book.time,
            name=book.name,
            chapters=[
                ChapterModel(
                    file=str(c.file),
                    name=c.name,
                    duration=c.duration,
                    last_modified=c.last_modified,
                    marks=dict(c.marks),
                )
                for c in book.chapters
            ],
            playback_speed=book.playback_speed,
            root=book.root,
        )


class CurrentBookResponse(BaseModel):
    """Currently selected book id (``None`` when nothing was chosen)."""

    book_id: uuid.UUID | None


def get_repo(request: Request) -> BookRepository:
    return request.app.state.repo


def get_prefs(request: Request) -> PrefsManager:
    return request.app.state.prefs


@router.get("/books")
async def list_books(request: Request) -> list[BookModel]:
    """List active books in library order."""
    return [BookModel.from_book(b) for b in get_repo(request).active_books]


@router.get("/books/orphaned")
async def list_orphaned_books(request: Request) -> list[BookModel]:
    """List hidden books that can be revealed again."""
    return [BookModel.from_book(b) for b in get_repo(request).orphaned_books()]


@router.get("/books/{book_id}")
async def get_book(book_id: uuid.UUID, request: Request) -> BookModel:
    """Return one active book.

    Raises:
        HTTPException: If no active book has ``book_id``.
    """
    book = get_repo(request).book_by_id(book_id)
    if book is None:
        raise HTTPException(status_code=404, detail="book not found")
    return BookModel.from_book(book)


@router.post("/books", status_code=201)
async def add_book(payload: BookModel, request: Request) -> BookModel:
    """Persist a new book and make it active."""
    repo = get_repo(request)
    book = payload.to_book()
    if repo.book_by_id(book.id) is not None or any(b.id == book.id for b in repo.orphaned_books()):
        raise HTTPException(status_code=409, detail="book already exists")
    await repo.add_book(book)
    return BookModel.from_book(book)


@router.post("/books/{book_id}/hide")
async def hide_book(book_id: uuid.UUID, request: Request) -> dict[str, str]:
    repo = get_repo(request)
    book = repo.book_by_id(book_id)
    if book is None:
        raise HTTPException(status_code=404, detail="book not found")
    await repo.hide_books([book])
    return {"book_id": str(book_id), "status": "hidden"}


@router.post("/books/{book_id}/reveal")
async def reveal_book(book_id: uuid.UUID, request: Request) -> dict[str, str]:
    repo = get_repo(request)
    book = next((b for b in repo.orphaned_books() if b.id == book_id), None)
    if book is None:
        raise HTTPException(status_code=404, detail="orphaned book not found")
    await repo.reveal_book(book)
    return {"book_id": str(book_id), "status": "active"}


@router.get("/prefs/current-book")
async def current_book(request: Request) -> CurrentBookResponse:
    return CurrentBookResponse(book_id=get_prefs(request).current_book_id.get())
