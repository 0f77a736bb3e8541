from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pytest

from linkhub.hub import HubShell
from linkhub.storage import LocalCache
from linkhub.sync import StateLoader, StateSynchronizer

ENDPOINT = "https://script.example.test/macros/s/abc/exec"

# 2026-01-02 is one day after the roster epoch -> YELLOW
YELLOW_DAY = datetime(2026, 1, 2, 9, 30)


class FakeResponse:
    def __init__(self, payload=None, status_code: int = 200, text: str | None = None):
        self.payload = payload
        self.status_code = status_code
        self.text = text
        self.closed = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self):
        if self.text is not None:
            raise ValueError("not json")
        return self.payload

    def iter_content(self, chunk_size: int = 1):
        body = self.text if self.text is not None else json.dumps(self.payload)
        raw = body.encode("utf-8")
        for start in range(0, len(raw), chunk_size):
            yield raw[start:start + chunk_size]

    def close(self) -> None:
        self.closed = True


class RecordingSynchronizer(StateSynchronizer):
    def __init__(self, result: bool = True) -> None:
        super().__init__(ENDPOINT)
        self.result = result
        self.pushed = []

    def push(self, state) -> bool:
        self.pushed.append(state)
        return self.result


@pytest.fixture
def cache(tmp_path: Path) -> LocalCache:
    return LocalCache(tmp_path / "cache")


@pytest.fixture
def synchronizer() -> RecordingSynchronizer:
    return RecordingSynchronizer()


@pytest.fixture
def hub(cache: LocalCache, synchronizer: RecordingSynchronizer) -> HubShell:
    shell = HubShell(
        cache=cache,
        loader=StateLoader(cache, endpoint_url=""),
        synchronizer=synchronizer,
        clock=lambda: YELLOW_DAY,
    )
    shell.initialize()
    return shell


@pytest.fixture
def admin_hub(hub: HubShell) -> HubShell:
    hub.login(hub.state.config.admin_password)
    return hub
