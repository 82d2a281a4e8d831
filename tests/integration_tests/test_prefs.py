import uuid

from abp.prefs import CURRENT_BOOK_ID, PrefsManager
from db import repository
from db.session import session_scope


def test_current_book_id_defaults_to_none(session_factory) -> None:
    assert PrefsManager(session_factory).current_book_id.get() is None


def test_current_book_id_persists(session_factory) -> None:
    book_id = uuid.uuid4()
    PrefsManager(session_factory).current_book_id.set(book_id)
    assert PrefsManager(session_factory).current_book_id.get() == book_id

    PrefsManager(session_factory).current_book_id.set(None)
    assert PrefsManager(session_factory).current_book_id.get() is None


def test_malformed_value_falls_back_to_default(session_factory) -> None:
    with session_scope(session_factory) as session:
        repository.put_preference(session, CURRENT_BOOK_ID, "not-a-uuid")
    assert PrefsManager(session_factory).current_book_id.get() is None
