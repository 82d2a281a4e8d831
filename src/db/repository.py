"""High-level CRUD helpers around the SQLAlchemy session.

Only the operations needed by the book storage and preferences are
implemented; they take an open session and leave commit/rollback to the
caller's ``session_scope``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from . import models


def list_books(session: Session, active: bool) -> list[models.BookRow]:
    """Return all books with the given visibility, chapters eagerly loaded."""
    stmt = (
        select(models.BookRow)
        .where(models.BookRow.active == int(active))
        .options(selectinload(models.BookRow.chapters))
        .order_by(models.BookRow.name)
    )
    return list(session.scalars(stmt))


def insert_book(
    session: Session,
    values: Mapping[str, Any],
    chapters: Sequence[Mapping[str, Any]],
) -> models.BookRow:
    """Insert a book row plus its chapter rows (positions follow ``chapters`` order)."""
    row = models.BookRow(**values)
    row.chapters = [models.ChapterRow(position=i, **ch) for i, ch in enumerate(chapters)]
    session.add(row)
    return row


def replace_book(
    session: Session,
    book_id: str,
    values: Mapping[str, Any],
    chapters: Sequence[Mapping[str, Any]],
) -> models.BookRow | None:
    """Overwrite columns and chapters of an existing book; ``None`` if missing."""
    row = session.get(models.BookRow, book_id)
    if row is None:
        return None
    for key, value in values.items():
        setattr(row, key, value)
    row.chapters = [models.ChapterRow(position=i, **ch) for i, ch in enumerate(chapters)]
    return row


def set_active(session: Session, book_id: str, active: bool) -> int:
    """Flip the visibility flag of one book and return the affected row count."""
    stmt = update(models.BookRow).where(models.BookRow.id == book_id).values(active=int(active))
    result = session.execute(stmt)
    return int(result.rowcount or 0)


def get_preference(session: Session, key: str) -> str | None:
    row = session.get(models.PreferenceRow, key)
    return row.value if row else None


def put_preference(session: Session, key: str, value: str | None) -> None:
    """Insert or update a preference value."""
    row = session.get(models.PreferenceRow, key)
    if row is None:
        session.add(models.PreferenceRow(key=key, value=value))
    else:
        row.value = value
