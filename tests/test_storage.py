from __future__ import annotations

import json

from linkhub.constants import DEFAULT_THEME, INITIAL_CONFIG, STORAGE_KEYS, THEME_PRESETS
from linkhub.models import AppState, LayoutType, LinkEntry
from linkhub.storage import LocalCache
from linkhub.sync import StateLoader


def _state() -> AppState:
    return AppState(
        links=[LinkEntry(id="id-1", title="Docs", url="https://x.test", category="Dev", order=0)],
        theme=THEME_PRESETS[3].model_copy(update={"background_image": "https://img.test/bg.png"}),
        config=INITIAL_CONFIG.model_copy(update={"title": "Team Hub", "show_search": False}),
        layout=LayoutType.LIST,
    )


def test_each_field_is_stored_under_its_own_key(cache: LocalCache) -> None:
    cache.persist(_state())
    assert json.loads(cache.get_item(STORAGE_KEYS["links"]))[0]["title"] == "Docs"
    assert json.loads(cache.get_item(STORAGE_KEYS["theme"]))["id"] == "indigo-deep"
    assert json.loads(cache.get_item(STORAGE_KEYS["config"]))["showSearch"] is False
    assert cache.get_item(STORAGE_KEYS["layout"]) == "list"


def test_persist_then_local_load_round_trips(cache: LocalCache) -> None:
    state = _state()
    cache.persist(state)
    loaded = StateLoader(cache, endpoint_url="").load()
    assert loaded.links == state.links
    assert loaded.theme == state.theme
    assert loaded.config == state.config
    assert loaded.layout == state.layout


def test_partial_cache_defaults_missing_fields(cache: LocalCache) -> None:
    cache.set_item(STORAGE_KEYS["layout"], "compact")
    cache.set_item(STORAGE_KEYS["theme"], "{not json")
    loaded = StateLoader(cache, endpoint_url="").load()
    assert loaded.layout is LayoutType.COMPACT
    assert loaded.theme == DEFAULT_THEME
    assert loaded.links == []
    assert loaded.config == INITIAL_CONFIG


def test_read_returns_default_for_missing_or_corrupt(cache: LocalCache) -> None:
    assert cache.read("hub_links", ["fallback"]) == ["fallback"]
    cache.set_item("hub_links", "][")
    assert cache.read("hub_links", []) == []


def test_write_failure_is_swallowed(tmp_path, caplog) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory")
    cache = LocalCache(blocker / "cache")
    cache.persist(_state())
    assert "failed to write local cache" in caplog.text


def test_clear_removes_all_entries(cache: LocalCache) -> None:
    cache.persist(_state())
    cache.clear()
    for key in STORAGE_KEYS.values():
        assert cache.get_item(key) is None


def test_undecodable_entry_only_loses_that_field(cache: LocalCache) -> None:
    state = _state()
    cache.persist(state)
    (cache.directory / STORAGE_KEYS["links"]).write_bytes(b"\xff\xfe[")
    assert cache.get_item(STORAGE_KEYS["links"]) is None
    loaded = StateLoader(cache, endpoint_url="").load()
    assert loaded.links == []
    assert loaded.theme == state.theme
    assert loaded.config == state.config
    assert loaded.layout is LayoutType.LIST
