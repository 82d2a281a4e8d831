"""HTTP API over a repository backed by a temporary SQLite database."""

import uuid

import httpx
import pytest

from abp.player import LoggingPlayerController
from abp.prefs import PrefsManager
from abp.repo import BookRepository
from api.app import create_app
from db.storage import SqlBookStorage

pytestmark = pytest.mark.anyio


def _payload(name: str, author: str | None = None) -> dict:
    return {
        "name": name,
        "author": author,
        "root": f"/sdcard/{name}",
        "chapters": [
            {"file": f"/sdcard/{name}/1.mp3", "name": f"{name} one", "duration": 1000, "marks": {"0": "Start"}},
            {"file": f"/sdcard/{name}/2.mp3", "name": f"{name} two", "duration": 2000},
        ],
    }


@pytest.fixture
async def client(session_factory):
    repo = BookRepository(SqlBookStorage(session_factory))
    player = LoggingPlayerController()
    app = create_app(repo=repo, prefs=PrefsManager(session_factory), player=player)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        c.player = player  # type: ignore[attr-defined]
        yield c
    repo.close()


async def test_add_list_and_get(client: httpx.AsyncClient) -> None:
    r = await client.post("/books", json=_payload("Beta", "B"))
    assert r.status_code == 201, r.text
    created = r.json()
    assert created["current_file"] == "/sdcard/Beta/1.mp3"
    assert created["chapters"][0]["marks"] == {"0": "Start"}

    await client.post("/books", json=_payload("Alpha", "A"))
    listing = await client.get("/books")
    assert [b["name"] for b in listing.json()] == ["Alpha", "Beta"]

    one = await client.get(f"/books/{created['id']}")
    assert one.status_code == 200
    assert one.json()["name"] == "Beta"


async def test_unknown_book_is_404(client: httpx.AsyncClient) -> None:
    r = await client.get(f"/books/{uuid.uuid4()}")
    assert r.status_code == 404


async def test_add_requires_chapters(client: httpx.AsyncClient) -> None:
    r = await client.post("/books", json={"name": "Empty", "chapters": []})
    assert r.status_code == 422


async def test_duplicate_add_conflicts(client: httpx.AsyncClient) -> None:
    body = _payload("Dup") | {"id": str(uuid.uuid4())}
    assert (await client.post("/books", json=body)).status_code == 201
    assert (await client.post("/books", json=body)).status_code == 409


async def test_hide_and_reveal(client: httpx.AsyncClient) -> None:
    book_id = (await client.post("/books", json=_payload("Gamma"))).json()["id"]

    r = await client.post(f"/books/{book_id}/hide")
    assert r.json() == {"book_id": book_id, "status": "hidden"}
    assert (await client.get("/books")).json() == []
    assert [b["id"] for b in (await client.get("/books/orphaned")).json()] == [book_id]

    r = await client.post(f"/books/{book_id}/reveal")
    assert r.json()["status"] == "active"
    assert [b["id"] for b in (await client.get("/books")).json()] == [book_id]
    assert (await client.post(f"/books/{book_id}/reveal")).status_code == 404


async def test_search_selects_book_and_plays(client: httpx.AsyncClient) -> None:
    book_id = (await client.post("/books", json=_payload("Book1", "Book1Author"))).json()["id"]

    r = await client.post("/search", json={"media_focus": "vnd.android.cursor.item/artist", "artist": "Nobody"})
    assert r.json() == {"book_id": None, "book_name": None}
    assert client.player.play_requests == 0  # type: ignore[attr-defined]
    assert (await client.get("/prefs/current-book")).json() == {"book_id": None}

    r = await client.post("/search", json={"query": "Book1 two"})
    assert r.json() == {"book_id": book_id, "book_name": "Book1"}
    assert client.player.play_requests == 1  # type: ignore[attr-defined]
    assert (await client.get("/prefs/current-book")).json() == {"book_id": book_id}


async def test_repo_without_prefs_is_rejected(fake_storage_cls) -> None:
    repo = BookRepository(fake_storage_cls())
    try:
        with pytest.raises(ValueError, match="together"):
            create_app(repo=repo)
    finally:
        repo.close()
