"""FastAPI application exposing the book library and voice search.

``create_app`` accepts ready-made collaborators (tests pass fakes or a
temporary database); without them the lifespan wires the repository to the
database named by the settings.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from abp.config import load_settings
from abp.player import LoggingPlayerController
from abp.prefs import PrefsManager
from abp.repo import BookRepository
from abp.search import PlayerController
from db import SqlBookStorage, make_engine, make_session_factory
from logging_setup import setup_logging

from .routes.books import router as books_router
from .routes.search import router as search_router

logger = logging.getLogger(__name__)


def create_app(
    repo: BookRepository | None = None,
    prefs: PrefsManager | None = None,
    player: PlayerController | None = None,
) -> FastAPI:
    """Build the API application around the given collaborators.

    ``repo`` and ``prefs`` come as a pair: pass both, or neither and let the
    lifespan open the configured database.

    Raises:
        ValueError: If only one of ``repo`` and ``prefs`` is given.
    """
    if (repo is None) != (prefs is None):
        raise ValueError("repo and prefs must be passed together")

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned: BookRepository | None = None
        if getattr(app.state, "repo", None) is None:
            settings = load_settings()
            setup_logging(level_name=settings.log_level)
            session_factory = make_session_factory(make_engine(settings.database_url))
            owned = BookRepository(SqlBookStorage(session_factory))
            app.state.repo = owned
            app.state.prefs = PrefsManager(session_factory)
            logger.info("Library opened at %s", settings.database_url)
        try:
            yield
        finally:
            if owned is not None:
                owned.close()

    app = FastAPI(title="Audiobook Player Library API", lifespan=lifespan)
    app.state.repo = repo
    app.state.prefs = prefs
    app.state.player = player or LoggingPlayerController()

    app.include_router(books_router)
    app.include_router(search_router)
    return app


app = create_app()
