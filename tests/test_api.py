import os
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from swipe_cleaner.app import build_source, create_app
from swipe_cleaner.config import Settings


def touch(path, when):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"pixels-" + path.name.encode())
    ts = when.timestamp()
    os.utime(path, (ts, ts))


@pytest.fixture
def settings(tmp_path):
    library = tmp_path / "library"
    touch(library / "a.jpg", datetime(2024, 3, 3, tzinfo=timezone.utc))
    touch(library / "b.jpg", datetime(2024, 3, 2, tzinfo=timezone.utc))
    touch(library / "trip" / "c.jpg", datetime(2024, 3, 1, tzinfo=timezone.utc))
    return Settings(
        library_dir=library,
        state_dir=tmp_path / "state",
        delete_delay_seconds=60,
    )


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


def test_initial_state(client):
    state = client.get("/api/triage/state").json()
    assert state["authorization"] == "authorized"
    assert state["current"]["id"] == "a.jpg"
    assert state["preview"]["id"] == "b.jpg"
    assert state["albums"][0]["id"] == "all"
    assert state["date_filter_title"] == "All time"


def test_decisions_and_flush(client, settings):
    state = client.post("/api/triage/delete").json()
    assert state["pending_delete_count"] == 1
    assert state["stats"]["deleted"] == 1
    assert state["current"]["id"] == "b.jpg"

    state = client.post("/api/triage/skip").json()
    assert state["stats"]["skipped"] == 1
    assert state["current"]["id"] == "trip/c.jpg"

    body = client.post("/api/triage/flush").json()
    assert body["committed"] is True
    assert body["result"]["outcome"] == "success"
    assert not (settings.library_dir / "a.jpg").exists()
    assert (settings.resolved_trash_dir / "a.jpg").exists()

    body = client.post("/api/triage/flush").json()
    assert body["committed"] is False


def test_pending_deletes_flushed_on_shutdown(settings):
    with TestClient(create_app(settings)) as c:
        c.post("/api/triage/delete")
        assert (settings.library_dir / "a.jpg").exists()
    assert not (settings.library_dir / "a.jpg").exists()


def test_processed_items_stay_hidden_after_restart(settings):
    with TestClient(create_app(settings)) as c:
        c.post("/api/triage/keep")
    with TestClient(create_app(settings)) as c:
        assert c.get("/api/triage/state").json()["current"]["id"] == "b.jpg"


def test_filters(client):
    filters = client.get("/api/library/filters").json()
    assert [f["value"] for f in filters["media"]] == ["all", "photos_only", "videos_only"]

    state = client.put("/api/library/filters/album", json={"album_id": "trip"}).json()
    assert state["current"]["id"] == "trip/c.jpg"
    assert state["album_title"] == "trip"

    state = client.put("/api/library/filters/date", json={"filter": "older"}).json()
    assert state["filters"]["date_filter"] == "older"

    resp = client.put("/api/library/filters/media", json={"filter": "gifs"})
    assert resp.status_code == 422

    resp = client.put("/api/library/filters/album", json={"album_id": "nowhere"})
    assert resp.status_code == 404

    state = client.put("/api/library/filters/include-videos", json={"enabled": True}).json()
    assert state["filters"]["include_videos"] is True


def test_albums(client):
    albums = client.get("/api/library/albums").json()
    assert [a["id"] for a in albums] == ["all", "trip"]
    albums = client.post("/api/library/albums/refresh").json()
    assert albums[1]["asset_count"] == 1


def test_reload_and_reset(client):
    client.post("/api/triage/keep")
    state = client.post("/api/triage/reload", json={"reset_stats": True}).json()
    assert state["stats"] == {"kept": 0, "deleted": 0, "skipped": 0}
    assert state["current"]["id"] == "b.jpg"

    client.post("/api/triage/keep")
    state = client.post("/api/triage/stats/reset").json()
    assert state["stats"]["kept"] == 0


def test_authorization_endpoints(client):
    assert client.get("/api/library/authorization").json()["state"] == "authorized"
    state = client.post("/api/library/authorization/refresh").json()
    assert state["authorization"] == "authorized"


def test_preview(client):
    resp = client.get("/api/preview/b.jpg")
    assert resp.status_code == 200
    assert resp.content == b"pixels-b.jpg"
    assert resp.headers["content-type"] == "image/jpeg"

    assert client.get("/api/preview/trip/c.jpg").status_code == 200
    assert client.get("/api/preview/missing.jpg").status_code == 404


def test_websocket_pushes_state(client):
    with client.websocket_connect("/api/ws") as ws:
        first = ws.receive_json()
        assert first["type"] == "state"
        assert first["state"]["current"]["id"] == "a.jpg"

        client.post("/api/triage/keep")
        pushed = ws.receive_json()
        assert pushed["state"]["current"]["id"] == "b.jpg"

        ws.send_json({"action": "get_state"})
        assert ws.receive_json()["state"]["stats"]["kept"] == 1


def test_unknown_media_source_lists_available(tmp_path):
    bad = Settings(media_source="cloud", state_dir=tmp_path / "state")
    with pytest.raises(ValueError, match="available: filesystem"):
        build_source(bad)
