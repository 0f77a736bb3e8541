import json
import logging
import time
from typing import Any, List, Optional

import requests
from pydantic import ValidationError

from .constants import (
    DEFAULT_THEME,
    INITIAL_CONFIG,
    LOAD_TIMEOUT_SECONDS,
    STORAGE_KEYS,
)
from .models import AppConfig, AppState, LayoutType, LinkEntry, ThemeSettings
from .storage import LocalCache
from .url_utils import build_read_url, clean_endpoint_url

logger = logging.getLogger("linkhub.sync")


def _coerce_links(raw: Any) -> List[LinkEntry]:
    if not isinstance(raw, list):
        return []
    links = []
    for item in raw:
        try:
            links.append(LinkEntry.model_validate(item))
        except ValidationError:
            logger.warning("dropping malformed link entry: %r", item)
    return links


def _coerce_theme(raw: Any) -> ThemeSettings:
    if not isinstance(raw, dict):
        return DEFAULT_THEME
    try:
        return ThemeSettings.model_validate(raw)
    except ValidationError:
        logger.warning("stored theme is invalid, using default")
        return DEFAULT_THEME


def _coerce_config(raw: Any, force_endpoint: bool = False) -> AppConfig:
    defaults = INITIAL_CONFIG.to_wire()
    merged = dict(defaults)
    if isinstance(raw, dict):
        merged.update(raw)
    if force_endpoint:
        # a stored document must never redirect future syncs
        merged["gasUrl"] = INITIAL_CONFIG.endpoint_url
    # invalid fields fall back to their default one by one
    for _ in range(len(merged) + 1):
        try:
            return AppConfig.model_validate(merged)
        except ValidationError as exc:
            bad = {err["loc"][0] for err in exc.errors() if err["loc"]}
            bad &= set(merged)
            if not bad:
                break
            logger.warning("stored config fields invalid, using defaults for: %s", sorted(bad))
            for key in bad:
                if key in defaults:
                    merged[key] = defaults[key]
                else:
                    merged.pop(key)
    logger.warning("stored config is invalid, using defaults")
    return INITIAL_CONFIG


def _coerce_layout(raw: Any) -> LayoutType:
    try:
        return LayoutType(raw)
    except ValueError:
        return LayoutType.GRID


class StateLoader:
    def __init__(
        self,
        cache: LocalCache,
        endpoint_url: str = INITIAL_CONFIG.endpoint_url,
        timeout: float = LOAD_TIMEOUT_SECONDS,
    ):
        self.cache = cache
        self.endpoint_url = endpoint_url
        self.timeout = timeout
        self.last_source = "local"

    def fetch_remote(self) -> Optional[dict]:
        """Read the stored document. None on any transport or format problem."""
        url = build_read_url(self.endpoint_url, str(int(time.time() * 1000)))
        # the timeout bounds the whole read, not each socket wait
        deadline = time.monotonic() + self.timeout
        try:
            resp = requests.get(
                url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
                stream=True,
            )
            try:
                if not resp.ok:
                    logger.warning("remote store answered HTTP %s", resp.status_code)
                    return None
                chunks = []
                for chunk in resp.iter_content(chunk_size=8192):
                    if time.monotonic() > deadline:
                        raise requests.Timeout(f"remote read exceeded {self.timeout}s")
                    chunks.append(chunk)
            finally:
                resp.close()
            data = json.loads(b"".join(chunks))
        except (requests.RequestException, ValueError) as exc:
            logger.warning("remote store unavailable, using local cache: %s", exc)
            return None
        if not isinstance(data, dict):
            logger.warning("remote store returned a non-object document")
            return None
        return data

    def load(self, force_remote: bool = True) -> AppState:
        if force_remote and self.endpoint_url:
            data = self.fetch_remote()
            if data is not None:
                logger.info("state loaded from remote store")
                self.last_source = "remote"
                return AppState(
                    links=_coerce_links(data.get("links")),
                    theme=_coerce_theme(data.get("theme")),
                    config=_coerce_config(data.get("config"), force_endpoint=True),
                    layout=_coerce_layout(data.get("layout")),
                )

        self.last_source = "local"
        return self.load_local()

    def load_local(self) -> AppState:
        return AppState(
            links=_coerce_links(self.cache.read(STORAGE_KEYS["links"], [])),
            theme=_coerce_theme(self.cache.read(STORAGE_KEYS["theme"], None)),
            config=_coerce_config(self.cache.read(STORAGE_KEYS["config"], None)),
            layout=_coerce_layout(self.cache.get_item(STORAGE_KEYS["layout"])),
        )


class StateSynchronizer:
    """
    Wholesale push of the state document to the remote store.

    The store is a write-only target: the response is never read and any
    request the transport completes counts as success. No timeout, no retry.
    """

    def __init__(self, endpoint_url: str = INITIAL_CONFIG.endpoint_url):
        self.endpoint_url = endpoint_url

    def push(self, state: AppState) -> bool:
        raw_url = state.config.endpoint_url or self.endpoint_url
        if not raw_url:
            return False

        payload = json.dumps({"action": "saveData", "data": state.to_document()})
        try:
            logger.info("pushing state to remote store")
            requests.post(
                clean_endpoint_url(raw_url),
                data=payload.encode("utf-8"),
                headers={"Content-Type": "text/plain;charset=utf-8"},
            )
        except requests.RequestException:
            logger.error("remote push failed", exc_info=True)
            return False
        return True
