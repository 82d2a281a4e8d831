"""In-memory source of truth for the books of the library.

The repository keeps two lists: books the user currently sees (*active*) and
books that were hidden but may come back (*orphaned*). Every mutation is
written to the backing :class:`BookStorage` first and then published as a
fresh active snapshot to all stream subscribers.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from collections.abc import AsyncIterator, Callable, Coroutine, Sequence
from concurrent.futures import ThreadPoolExecutor
from contextlib import aclosing
from pathlib import Path
from typing import Protocol, TypeVar

from logging_setup import TRACE_LEVEL

from .book import Book, Chapter, book_sort_key
from .stream import LatestValueStream

__all__ = ["BookRepository", "BookStorage"]

logger = logging.getLogger(__name__)

R = TypeVar("R")


class BookStorage(Protocol):
    """Durable store the repository persists to.

    Every write is keyed by book id and expected to be transactional.
    """

    def active_books(self) -> list[Book]: ...

    def orphaned_books(self) -> list[Book]: ...

    def add_book(self, book: Book) -> None: ...

    def update_book(self, book: Book) -> None: ...

    def hide_books(self, book_ids: Sequence[uuid.UUID]) -> None:
        """Hide all ``book_ids`` in one transaction (all or nothing)."""
        ...

    def reveal_book(self, book_id: uuid.UUID) -> None: ...


class BookRepository:
    """Provides access to all books.

    Mutating coroutines are serialised by one ``asyncio.Lock`` held for the
    whole operation; once called, a mutation runs to completion even if the
    awaiting task is cancelled. Storage calls run on a dedicated single worker thread;
    snapshots are published from the event loop. Reads only take the short
    list lock and never suspend, so they are safe from any thread.
    """

    def __init__(self, storage: BookStorage, executor: ThreadPoolExecutor | None = None) -> None:
        self._storage = storage
        self._io = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="book-io")
        self._owns_executor = executor is None
        self._active: list[Book] = sorted(storage.active_books(), key=book_sort_key)
        self._orphaned: list[Book] = list(storage.orphaned_books())
        self._lists_lock = threading.Lock()
        self._mutation_lock = asyncio.Lock()
        self._pending: set[asyncio.Future[None]] = set()
        self._all: LatestValueStream[list[Book]] = LatestValueStream(list(self._active))
        logger.debug(
            "Loaded %d active and %d orphaned books",
            len(self._active),
            len(self._orphaned),
        )

    # ----- streams ---------------------------------------------------------

    def books_stream(self) -> AsyncIterator[list[Book]]:
        """Live stream of the sorted active books, replaying the latest list."""
        return self._all.subscribe()

    async def by_id(self, book_id: uuid.UUID) -> AsyncIterator[Book | None]:
        """Live stream of the active book with ``book_id`` (``None`` if absent)."""
        async with aclosing(self._all.subscribe()) as books_stream:
            async for books in books_stream:
                yield next((b for b in books if b.id == book_id), None)

    # ----- snapshot reads --------------------------------------------------

    @property
    def active_books(self) -> list[Book]:
        """All active books."""
        with self._lists_lock:
            return list(self._active)

    def book_by_id(self, book_id: uuid.UUID) -> Book | None:
        with self._lists_lock:
            return self._find_active(book_id)

    def orphaned_books(self) -> list[Book]:
        with self._lists_lock:
            return list(self._orphaned)

    def chapter_by_file(self, file: Path) -> Chapter | None:
        """First chapter backed by ``file``; active books are searched first."""
        with self._lists_lock:
            return _chapter_by_file(file, self._active) or _chapter_by_file(file, self._orphaned)

    # ----- mutations -------------------------------------------------------

    async def add_book(self, book: Book) -> None:
        await self._run_to_completion(self._add_book(book))

    async def update_book(self, book: Book) -> None:
        await self._run_to_completion(self._update_book(book))

    async def hide_books(self, to_hide: Sequence[Book]) -> None:
        await self._run_to_completion(self._hide_books(list(to_hide)))

    async def reveal_book(self, book: Book) -> None:
        await self._run_to_completion(self._reveal_book(book))

    def close(self) -> None:
        """Finish all streams and release the storage worker."""
        self._all.close()
        if self._owns_executor:
            self._io.shutdown(wait=True)

    # ----- internals -------------------------------------------------------

    async def _run_to_completion(self, operation: Coroutine[object, object, None]) -> None:
        """Run ``operation`` under the mutation lock, shielded from caller cancellation.

        A started mutation always finishes its durable write, list update and
        publish together; a cancelled caller just stops waiting for it.
        """

        async def locked() -> None:
            async with self._mutation_lock:
                await operation

        task = asyncio.ensure_future(locked())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        await asyncio.shield(task)

    async def _add_book(self, book: Book) -> None:
        logger.debug("addBook=%s", book.name)
        await self._run_io(self._storage.add_book, book)
        with self._lists_lock:
            self._active.append(book)
        self._sort_and_publish()

    async def _update_book(self, book: Book) -> None:
        with self._lists_lock:
            current = self._find_active(book.id)
        if current == book:
            return
        if current is None:
            logger.error("update failed as there was no book with id=%s", book.id)
            return
        await self._run_io(self._storage.update_book, book)
        with self._lists_lock:
            index = next(i for i, b in enumerate(self._active) if b.id == book.id)
            self._active[index] = book
        self._sort_and_publish()

    async def _hide_books(self, to_hide: list[Book]) -> None:
        logger.debug("hideBooks=%d", len(to_hide))
        if not to_hide:
            return
        ids = [b.id for b in to_hide]
        await self._run_io(self._storage.hide_books, ids)
        hidden = set(ids)
        with self._lists_lock:
            self._active[:] = [b for b in self._active if b.id not in hidden]
            self._orphaned.extend(to_hide)
        self._sort_and_publish()

    async def _reveal_book(self, book: Book) -> None:
        logger.debug("revealBook=%s", book.name)
        await self._run_io(self._storage.reveal_book, book.id)
        with self._lists_lock:
            self._orphaned[:] = [b for b in self._orphaned if b.id != book.id]
            self._active.append(book)
        self._sort_and_publish()

    def _find_active(self, book_id: uuid.UUID) -> Book | None:
        return next((b for b in self._active if b.id == book_id), None)

    def _sort_and_publish(self) -> None:
        with self._lists_lock:
            self._active.sort(key=book_sort_key)
            snapshot = list(self._active)
        logger.log(TRACE_LEVEL, "Publishing %d active books", len(snapshot))
        self._all.publish(snapshot)

    async def _run_io(self, fn: Callable[..., R], *args: object) -> R:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._io, fn, *args)


def _chapter_by_file(file: Path, books: Sequence[Book]) -> Chapter | None:
    for book in books:
        for chapter in book.chapters:
            if chapter.file == file:
                return chapter
    return None
