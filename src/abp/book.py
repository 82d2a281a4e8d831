"""Book and chapter value types.

Books are immutable: a change is expressed by building a new ``Book`` with
:func:`dataclasses.replace` and handing it to the repository.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

__all__ = ["Book", "BookType", "Chapter", "book_sort_key", "natural_key"]

_DIGITS = re.compile(r"(\d+)")


class BookType(str, Enum):
    """How the files of a book are laid out on disk."""

    COLLECTION_FOLDER = "COLLECTION_FOLDER"
    SINGLE_FOLDER = "SINGLE_FOLDER"
    COLLECTION_FILE = "COLLECTION_FILE"
    SINGLE_FILE = "SINGLE_FILE"


@dataclass(frozen=True)
class Chapter:
    """A single playable file of a book.

    Attributes:
        file: Media file backing the chapter.
        name: Display name.
        duration: Length in milliseconds.
        last_modified: Modification timestamp of ``file`` (ms since epoch).
        marks: Positions inside the file (ms) mapped to their names.
    """

    file: Path
    name: str
    duration: int
    last_modified: int = 0
    marks: Mapping[int, str] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class Book:
    """An audiobook as known to the library.

    Attributes:
        id: Stable identity.
        type: Folder/file layout of the book.
        author: Author name, if known.
        current_file: File currently being played.
        time: Elapsed playback position inside ``current_file`` in ms.
        name: Display name.
        chapters: Ordered chapters.
        playback_speed: Playback speed multiplier.
        root: Root path the book was discovered under.
    """

    id: uuid.UUID
    type: BookType
    author: str | None
    current_file: Path
    time: int
    name: str
    chapters: tuple[Chapter, ...]
    playback_speed: float = 1.0
    root: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.chapters, tuple):
            object.__setattr__(self, "chapters", tuple(self.chapters))
        if self.time < 0:
            raise ValueError(f"negative time for book {self.id}: {self.time}")

    @property
    def current_chapter(self) -> Chapter | None:
        """Chapter whose file is ``current_file``."""
        for chapter in self.chapters:
            if chapter.file == self.current_file:
                return chapter
        return None

    @property
    def duration(self) -> int:
        return sum(c.duration for c in self.chapters)


def natural_key(text: str) -> tuple[object, ...]:
    """Split ``text`` so that digit runs compare numerically ("2" < "10")."""
    parts = _DIGITS.split(text.casefold())
    return tuple(int(p) if i % 2 else p for i, p in enumerate(parts))


def book_sort_key(book: Book) -> tuple[tuple[object, ...], str]:
    """Total order over books: natural name order, ties broken by id."""
    return natural_key(book.name), str(book.id)
