"""Voice search endpoint.

Accepts the structured fields of a media session search and returns the
book that was selected for playback, if any.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Request
from pydantic import BaseModel

from abp.search import BookSearch, BookSearchHandler

router = APIRouter()


class SearchRequest(BaseModel):
    """Search fields as delivered by the assistant.

    Attributes:
        query (str | None): Free text query.
        media_focus (str | None): Media focus content type.
        artist (str | None): Artist extra.
        album (str | None): Album extra.
        playlist (str | None): Playlist extra.
    """

    query: str | None = None
    media_focus: str | None = None
    artist: str | None = None
    album: str | None = None
    playlist: str | None = None


class SearchResponse(BaseModel):
    """Outcome of a search: the selected book, ``None`` when nothing matched."""

    book_id: uuid.UUID | None
    book_name: str | None


@router.post("/search")
async def search(payload: SearchRequest, request: Request) -> SearchResponse:
    state = request.app.state
    handler = BookSearchHandler(state.repo, state.prefs, state.player)
    book = handler.handle(BookSearch(**payload.model_dump()))
    return SearchResponse(
        book_id=book.id if book else None,
        book_name=book.name if book else None,
    )
