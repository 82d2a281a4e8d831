"""Durable user preferences stored in the ``preferences`` table."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from typing import Generic, TypeVar

from db import repository
from db.session import SessionFactory, session_scope

__all__ = ["CURRENT_BOOK_ID", "Preference", "PrefsManager"]

logger = logging.getLogger(__name__)

T = TypeVar("T")

CURRENT_BOOK_ID = "currentBookId"


class Preference(Generic[T]):
    """One typed preference value persisted under ``key``."""

    def __init__(
        self,
        session_factory: SessionFactory,
        key: str,
        default: T,
        parse: Callable[[str], T],
        dump: Callable[[T], str | None] = str,
    ) -> None:
        self._session_factory = session_factory
        self.key = key
        self._default = default
        self._parse = parse
        self._dump = dump

    def get(self) -> T:
        with session_scope(self._session_factory) as session:
            raw = repository.get_preference(session, self.key)
        if raw is None:
            return self._default
        try:
            return self._parse(raw)
        except ValueError:
            logger.warning("Ignoring malformed preference %s=%r", self.key, raw)
            return self._default

    def set(self, value: T) -> None:
        raw = None if value is None else self._dump(value)
        with session_scope(self._session_factory) as session:
            repository.put_preference(session, self.key, raw)
        logger.debug("Preference %s=%s", self.key, raw)


class PrefsManager:
    """Access to the preferences the player keeps between sessions."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self.current_book_id: Preference[uuid.UUID | None] = Preference(
            session_factory,
            CURRENT_BOOK_ID,
            default=None,
            parse=uuid.UUID,
        )
