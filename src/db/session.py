"""Session factory utilities for database access.

The project uses a single engine + sessionmaker pattern; this module
centralises creation so tests can build their own engine against a
temporary SQLite file.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

DEFAULT_DATABASE_URL = "sqlite:///./audiobooks.db"

DATABASE_URL = os.getenv("DATABASE_URL", os.getenv("DB_URL", DEFAULT_DATABASE_URL))

SessionFactory = Callable[[], Session]

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:  # type: ignore[no-untyped-def]
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str | None = None) -> Engine:
    """Create an engine for ``url`` (defaults to ``DATABASE_URL``).

    SQLite connections are allowed to cross threads because all storage
    work runs on the repository's I/O worker, not the creating thread.
    """
    url = url or DATABASE_URL
    kwargs: dict[str, object] = {"future": True, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    engine = create_engine(url, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    logger.debug("Engine created for %s", engine.url.render_as_string(hide_password=True))
    return engine


def make_session_factory(bind: Engine) -> sessionmaker[Session]:
    """Return a sessionmaker bound to ``bind`` with explicit commits."""
    return sessionmaker(
        bind=bind,
        autoflush=False,
        autocommit=False,
        future=True,
        expire_on_commit=False,
    )


@contextmanager
def session_scope(factory: SessionFactory) -> Iterator[Session]:
    """Yield a session from ``factory``; commit on success, roll back on error."""
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:  # noqa: BLE001
        session.rollback()
        raise
    finally:
        session.close()

