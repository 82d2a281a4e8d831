"""Schema migration 0039 -> 0040: negative playback positions become zero."""

from sqlalchemy import create_engine, inspect, text

from db import migrate


def _insert_book(conn, book_id: str, time: int) -> None:
    conn.execute(
        text(
            "INSERT INTO books (id, name, current_media_path, playback_speed, root, time, type) "
            "VALUES (:id, 'firstBookName', '/sdcard/file1.mp3', 1.0, '/sdcard', :time, 'COLLECTION_FOLDER')"
        ),
        {"id": book_id, "time": time},
    )


def test_negative_numbers_become_zero(sqlite_url: str) -> None:
    migrate.upgrade(sqlite_url, "0039")
    engine = create_engine(sqlite_url)
    try:
        with engine.begin() as conn:
            _insert_book(conn, "negative", -100)
            _insert_book(conn, "positive", 5000)

        migrate.upgrade(sqlite_url, "0040")

        with engine.connect() as conn:
            times = conn.execute(text("SELECT time FROM books")).scalars().all()
            version = conn.execute(text("SELECT version_num FROM alembic_version")).scalar_one()
        assert sorted(times) == [0, 5000]
        assert version == "0040"
    finally:
        engine.dispose()


def test_head_creates_all_tables(sqlite_url: str) -> None:
    migrate.upgrade(sqlite_url)
    engine = create_engine(sqlite_url)
    try:
        tables = set(inspect(engine).get_table_names())
        assert {"books", "chapters", "preferences", "alembic_version"} <= tables
        assert {c["name"] for c in inspect(engine).get_columns("books")} == {
            "id",
            "name",
            "author",
            "current_media_path",
            "playback_speed",
            "root",
            "time",
            "type",
            "active",
        }
    finally:
        engine.dispose()
