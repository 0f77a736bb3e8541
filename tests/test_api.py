from __future__ import annotations

import logging
import time

import pytest
from fastapi.testclient import TestClient

from linkhub import main
from linkhub.constants import INITIAL_CONFIG, ROSTER_COLORS
from linkhub.hub import HubShell
from linkhub.models import LinkMetadata, RosterStatus


@pytest.fixture
def client(monkeypatch, hub: HubShell) -> TestClient:
    monkeypatch.setattr(main, "hub", hub)
    return TestClient(main.app)


def _login(client: TestClient) -> None:
    resp = client.post("/api/admin/login", json={"password": INITIAL_CONFIG.admin_password})
    assert resp.status_code == 200


def test_state_hides_credential_from_viewers(client: TestClient) -> None:
    doc = client.get("/api/state").json()
    assert doc["links"] == []
    assert doc["layout"] == "grid"
    assert "adminPasswordHash" not in doc["config"]
    _login(client)
    assert "adminPasswordHash" in client.get("/api/state").json()["config"]


def test_status_reports_roster_and_accent(client: TestClient) -> None:
    status = client.get("/api/status").json()
    assert status["connection"] == "local"
    assert status["isAdmin"] is False
    assert status["roster"] == "yellow"
    assert status["accent"] == ROSTER_COLORS[RosterStatus.YELLOW]


def test_bad_login_is_401(client: TestClient) -> None:
    resp = client.post("/api/admin/login", json={"password": "guess"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Admin credential not authorized"


def test_link_crud_flow(client: TestClient, synchronizer) -> None:
    assert client.post("/api/links", json={"title": "Docs", "url": "https://x.test"}).status_code == 403

    _login(client)
    created = client.post("/api/links", json={"title": "Docs", "url": "https://x.test"}).json()
    assert created["order"] == 0
    assert created["category"] == "General"

    assert client.post("/api/links", json={"title": "", "url": "https://y.test"}).status_code == 400

    patched = client.patch(f"/api/links/{created['id']}", json={"category": "Dev"}).json()
    assert patched["category"] == "Dev"
    assert client.get("/api/categories").json() == ["Dev"]

    assert client.delete(f"/api/links/{created['id']}").status_code == 409
    assert client.delete(f"/api/links/{created['id']}?confirm=true").status_code == 200
    assert client.delete(f"/api/links/{created['id']}?confirm=true").status_code == 404
    assert len(synchronizer.pushed) == 3


def test_move_endpoint_returns_sorted_links(client: TestClient) -> None:
    _login(client)
    first = client.post("/api/links", json={"title": "One", "url": "https://1.test"}).json()
    client.post("/api/links", json={"title": "Two", "url": "https://2.test"})
    ordered = client.post(f"/api/links/{first['id']}/move", json={"direction": "down"}).json()
    assert [(l["title"], l["order"]) for l in ordered] == [("Two", 0), ("One", 1)]


def test_search_adds_previews(client: TestClient) -> None:
    _login(client)
    client.post("/api/links", json={"title": "Docs", "url": "https://x.test", "category": "Dev"})
    client.post("/api/links", json={"title": "Payroll", "url": "https://p.test", "category": "HR"})
    res = client.get("/api/search", params={"q": "dev"}).json()
    assert res["count"] == 1
    assert res["results"][0]["preview"].startswith("https://s0.wp.com/mshots/v1/")
    assert client.get("/api/search", params={"category": "HR"}).json()["count"] == 1


def test_layout_and_theme(client: TestClient) -> None:
    assert client.put("/api/layout", json={"layout": "list"}).json() == {"layout": "list"}
    assert client.put("/api/layout", json={"layout": "mosaic"}).status_code == 422
    theme = client.patch("/api/theme", json={"blur_amount": 3}).json()
    assert theme["blurAmount"] == 3
    assert client.patch("/api/theme", json={"card_opacity": 2}).status_code == 400


def test_preset_flow(client: TestClient) -> None:
    presets = client.get("/api/theme/presets").json()
    assert presets[0]["id"] == "readiness"
    _login(client)
    body = {"preset_id": "crimson-protocol"}
    assert client.post("/api/theme/preset", json=body).status_code == 409
    theme = client.post("/api/theme/preset", json={**body, "confirm": True}).json()
    assert theme["accent"] == "#ef4444"
    assert client.get("/api/status").json()["accent"] == "#ef4444"
    reset = client.post("/api/theme/reset", json={"confirm": True}).json()
    assert reset["id"] == "readiness"


def test_config_update_keeps_endpoint(client: TestClient) -> None:
    assert client.patch("/api/config", json={"title": "Mine"}).status_code == 403
    _login(client)
    config = client.patch("/api/config", json={"title": "Mine", "show_search": False}).json()
    assert config["title"] == "Mine"
    assert config["showSearch"] is False
    assert config["gasUrl"] == INITIAL_CONFIG.endpoint_url


def test_force_sync(client: TestClient, synchronizer) -> None:
    assert client.post("/api/sync").status_code == 403
    _login(client)
    assert client.post("/api/sync").json() == {"ok": True, "connection": "connected"}
    synchronizer.result = False
    assert client.post("/api/sync").json() == {"ok": False, "connection": "error"}


def test_suggest_passes_through(client: TestClient, monkeypatch) -> None:
    monkeypatch.setattr(
        main,
        "suggest_metadata",
        lambda url: LinkMetadata(description="Docs portal", category="Dev", icon="Book"),
    )
    assert client.post("/api/suggest", json={"url": "https://x.test"}).json() == {
        "description": "Docs portal",
        "category": "Dev",
        "icon": "Book",
    }
    monkeypatch.setattr(main, "suggest_metadata", lambda url: None)
    assert client.post("/api/suggest", json={"url": "https://x.test"}).json() is None


def test_clear_cache(client: TestClient) -> None:
    _login(client)
    client.post("/api/links", json={"title": "Docs", "url": "https://x.test"})
    assert client.delete("/api/cache").status_code == 409
    assert client.delete("/api/cache?confirm=true").status_code == 200
    assert client.get("/api/export/json").json()["links"] == []


def test_particle_frame_uses_effective_accent(client: TestClient) -> None:
    frame = client.get("/api/particles", params={"width": 300, "height": 300, "seed": 1}).json()
    assert frame["particles"] == "digital"
    assert len(frame["sprites"]) == 6
    assert {s["color"] for s in frame["sprites"]} == {ROSTER_COLORS[RosterStatus.YELLOW]}
    assert {s["shape"] for s in frame["sprites"]} == {"glyph"}


def test_crashed_background_push_is_logged(caplog) -> None:
    def explode():
        raise RuntimeError("cache volume vanished")

    with caplog.at_level(logging.ERROR, logger="linkhub.main"):
        future = main._dispatch_push(explode)
        with pytest.raises(RuntimeError):
            future.result(timeout=5)
        # done callbacks run after result() wakes the caller
        deadline = time.monotonic() + 5
        while "background push crashed" not in caplog.text and time.monotonic() < deadline:
            time.sleep(0.01)

    assert "background push crashed" in caplog.text
    assert "cache volume vanished" in caplog.text
