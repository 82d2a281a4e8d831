"""Database models.

SQLAlchemy ORM models for books, their chapters and the key/value
preferences table. Column layout follows schema version 40 (see
``alembic/versions``); the chapter marker map lives in a JSON column.
"""

from __future__ import annotations

from sqlalchemy import JSON, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Project Declarative base class.

    Declaring an explicit subclass (rather than using ``declarative_base()``)
    gives mypy a concrete symbol it can understand as a valid base for ORM
    models.
    """

    pass


class BookRow(Base):
    """Persisted book with playback state and visibility flag."""

    __tablename__ = "books"
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str | None] = mapped_column(Text, nullable=True)
    current_media_path: Mapped[str] = mapped_column(Text, nullable=False)
    playback_speed: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    root: Mapped[str] = mapped_column(Text, nullable=False)
    time: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    type: Mapped[str] = mapped_column(String, nullable=False)
    active: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    chapters = relationship(
        "ChapterRow",
        back_populates="book",
        order_by="ChapterRow.position",
        cascade="all, delete-orphan",
    )


class ChapterRow(Base):
    """Single chapter file of a book."""

    __tablename__ = "chapters"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    book_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("books.id"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    file: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    last_modified: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # JSON object keys are strings; converted back to int positions on load
    marks: Mapped[dict[str, str]] = mapped_column(JSON, nullable=False, default=dict)

    book = relationship("BookRow", back_populates="chapters")


class PreferenceRow(Base):
    """Durable key/value preference."""

    __tablename__ = "preferences"
    key: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[str | None] = mapped_column(Text, nullable=True)
