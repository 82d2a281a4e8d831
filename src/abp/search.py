"""Voice search resolution (media session ``playFromSearch`` requests).

A :class:`BookSearch` carries the structured fields a voice assistant hands
over. :class:`BookSearchHandler` resolves it against the active books, makes
the match the current book and starts playback.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from .book import Book

__all__ = [
    "EXTRA_ALBUM",
    "EXTRA_ARTIST",
    "EXTRA_FOCUS",
    "EXTRA_PLAYLIST",
    "MEDIA_FOCUS_ALBUM",
    "MEDIA_FOCUS_ANY",
    "MEDIA_FOCUS_ARTIST",
    "MEDIA_FOCUS_PLAYLIST",
    "BookSearch",
    "BookSearchHandler",
    "PlayerController",
]

logger = logging.getLogger(__name__)

MEDIA_FOCUS_ANY = "vnd.android.cursor.item/*"
MEDIA_FOCUS_ARTIST = "vnd.android.cursor.item/artist"
MEDIA_FOCUS_ALBUM = "vnd.android.cursor.item/album"
MEDIA_FOCUS_PLAYLIST = "vnd.android.cursor.item/playlist"

EXTRA_FOCUS = "android.intent.extra.focus"
EXTRA_ARTIST = "android.intent.extra.artist"
EXTRA_ALBUM = "android.intent.extra.album"
EXTRA_PLAYLIST = "android.intent.extra.playlist"


@dataclass(frozen=True)
class BookSearch:
    """Structured voice search request.

    Attributes:
        query: Free text the user spoke.
        media_focus: Category the assistant narrowed the request to.
        artist: Requested artist (matched against the author).
        album: Requested album (matched against the book name).
        playlist: Requested playlist (matched against the book name).
    """

    query: str | None = None
    media_focus: str | None = None
    artist: str | None = None
    album: str | None = None
    playlist: str | None = None

    @classmethod
    def from_extras(cls, query: str | None, extras: Mapping[str, Any] | None) -> BookSearch:
        """Build a search from a query and media session extras."""
        extras = extras or {}
        return cls(
            query=query or None,
            media_focus=extras.get(EXTRA_FOCUS),
            artist=extras.get(EXTRA_ARTIST),
            album=extras.get(EXTRA_ALBUM),
            playlist=extras.get(EXTRA_PLAYLIST),
        )


class PlayerController(Protocol):
    """Playback service the handler drives."""

    def play(self) -> None: ...


class _BookIdPreference(Protocol):
    def set(self, value: uuid.UUID | None) -> None: ...


class _Prefs(Protocol):
    @property
    def current_book_id(self) -> _BookIdPreference: ...


class _ActiveBooks(Protocol):
    @property
    def active_books(self) -> list[Book]: ...


class BookSearchHandler:
    """Resolve a :class:`BookSearch` and start playback of the match."""

    def __init__(self, repo: _ActiveBooks, prefs: _Prefs, player: PlayerController) -> None:
        self._repo = repo
        self._prefs = prefs
        self._player = player

    def handle(self, search: BookSearch) -> Book | None:
        """Handle ``search`` and return the book that was selected, if any."""
        logger.info("Handling search %s", search)
        focus = search.media_focus
        if focus == MEDIA_FOCUS_ARTIST:
            return self._play_focused(self._find_artist(search))
        if focus == MEDIA_FOCUS_ALBUM:
            return self._play_focused(self._find_album(search))
        if focus == MEDIA_FOCUS_PLAYLIST:
            return self._play_focused(self._find_playlist(search))
        if focus == MEDIA_FOCUS_ANY and not search.query:
            # nothing specific asked for: continue the current book
            self._player.play()
            return None
        return self._play_unstructured(search.query)

    def _find_artist(self, search: BookSearch) -> Book | None:
        if search.artist is None:
            return None
        return self._first(lambda b: b.author == search.artist)

    def _find_album(self, search: BookSearch) -> Book | None:
        if search.album is None:
            return None
        return self._first(lambda b: b.name == search.album and _artist_matches(b, search.artist))

    def _find_playlist(self, search: BookSearch) -> Book | None:
        names = [n for n in (search.playlist, search.album) if n is not None]
        if not names:
            return None
        return self._first(lambda b: all(b.name == n for n in names) and _artist_matches(b, search.artist))

    def _play_focused(self, book: Book | None) -> Book | None:
        if book is None:
            logger.info("Focused search without match")
            return None
        self._select_and_play(book)
        return book

    def _play_unstructured(self, query: str | None) -> Book | None:
        book = None
        if query:
            book = (
                self._first(lambda b: b.name == query)
                or self._first(lambda b: b.author == query)
                or self._first(lambda b: any(c.name == query for c in b.chapters))
            )
        if book is None:
            logger.info("No book for query=%r, continuing current book", query)
            self._player.play()
            return None
        self._select_and_play(book)
        return book

    def _select_and_play(self, book: Book) -> None:
        logger.info("Search resolved to %s (%s)", book.name, book.id)
        self._prefs.current_book_id.set(book.id)
        self._player.play()

    def _first(self, predicate: Callable[[Book], bool]) -> Book | None:
        return next((b for b in self._repo.active_books if predicate(b)), None)


def _artist_matches(book: Book, artist: str | None) -> bool:
    return artist is None or book.author == artist
