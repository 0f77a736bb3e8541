import json
import logging
from pathlib import Path
from typing import Any, Optional

from .constants import STORAGE_KEYS
from .models import AppState

logger = logging.getLogger("linkhub.storage")


class LocalCache:
    """
    File-backed key/value cache for the hub state.

    Each state field lives in its own entry so that a missing or corrupt
    entry never takes the others down with it:
    - hub_links: JSON array
    - hub_theme: JSON object
    - hub_config: JSON object
    - hub_layout: raw layout string
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / key

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            logger.warning("cache entry %s unreadable", key, exc_info=True)
            return None

    def set_item(self, key: str, value: str):
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value, encoding="utf-8")

    def read(self, key: str, default: Any) -> Any:
        raw = self.get_item(key)
        if not raw:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            return default

    def persist(self, state: AppState):
        document = state.to_document()
        try:
            self.set_item(STORAGE_KEYS["links"], json.dumps(document["links"]))
            self.set_item(STORAGE_KEYS["theme"], json.dumps(document["theme"]))
            self.set_item(STORAGE_KEYS["config"], json.dumps(document["config"]))
            self.set_item(STORAGE_KEYS["layout"], document["layout"])
        except (OSError, TypeError, ValueError):
            logger.error("failed to write local cache in %s", self.directory, exc_info=True)

    def clear(self):
        for key in STORAGE_KEYS.values():
            try:
                self._path(key).unlink(missing_ok=True)
            except OSError:
                logger.error("failed to remove cache entry %s", key, exc_info=True)
