import hmac
import logging
import threading
from datetime import datetime
from enum import Enum
from typing import Any, Callable, List, Optional

from pydantic import ValidationError

from . import links as link_ops
from .constants import DEFAULT_THEME, THEME_PRESETS
from .errors import (
    AdminRequired,
    AuthenticationFailed,
    ConfirmationRequired,
    PresetNotFound,
    ValidationFailed,
)
from .models import AppState, LayoutType, LinkEntry, RosterStatus, ThemeSettings
from .roster import annotate_theme, current_roster, effective_accent
from .storage import LocalCache
from .sync import StateLoader, StateSynchronizer

logger = logging.getLogger("linkhub.hub")

# dispatch(fn, *args): runs fn now or hands it to a worker
Dispatcher = Callable[..., Any]


def _run_inline(fn, *args):
    return fn(*args)


def _merge(model, changes: dict):
    try:
        return type(model).model_validate({**model.model_dump(), **changes})
    except ValidationError as exc:
        raise ValidationFailed(str(exc)) from exc


class ConnectionStatus(str, Enum):
    CONNECTED = "connected"
    SYNCING = "syncing"
    ERROR = "error"
    LOCAL = "local"


class HubShell:
    """
    Owns the current AppState snapshot.

    Every operation computes a new snapshot from the current one and commits
    it: the snapshot is replaced, written to the local cache, and in admin
    mode pushed to the remote store through the dispatcher. Two overlapping
    commits each push their own snapshot; the store keeps whichever arrives
    last.
    """

    def __init__(
        self,
        cache: LocalCache,
        loader: StateLoader,
        synchronizer: StateSynchronizer,
        dispatch: Optional[Dispatcher] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.cache = cache
        self.loader = loader
        self.synchronizer = synchronizer
        self.dispatch = dispatch or _run_inline
        self.clock = clock
        self._state: Optional[AppState] = None
        self._sync_lock = threading.Lock()
        self._in_flight = 0
        self.is_admin = False
        self.status = ConnectionStatus.SYNCING
        self.last_sync: Optional[datetime] = None

    # ----- read side -----

    @property
    def state(self) -> AppState:
        if self._state is None:
            raise RuntimeError("HubShell.initialize() has not run")
        return self._state

    @property
    def is_syncing(self) -> bool:
        """True while any push is still in flight."""
        return self._in_flight > 0

    @property
    def roster(self) -> RosterStatus:
        return current_roster(self.clock())

    @property
    def effective_accent(self) -> str:
        return effective_accent(self.state.theme, self.roster)

    def categories(self) -> List[str]:
        return link_ops.categories(self.state.links)

    def search(self, query: str = "", category: Optional[str] = None) -> List[LinkEntry]:
        return link_ops.filter_links(self.state.links, query, category)

    # ----- lifecycle -----

    def initialize(self, force_remote: bool = True) -> AppState:
        self.status = ConnectionStatus.SYNCING
        data = self.loader.load(force_remote=force_remote)
        self._state = data.model_copy(
            update={"theme": annotate_theme(data.theme, self.roster)}
        )
        if self.loader.last_source == "remote":
            self.status = ConnectionStatus.CONNECTED
        else:
            self.status = ConnectionStatus.LOCAL
        self.cache.persist(self._state)
        self.last_sync = self.clock()
        return self._state

    def login(self, password: str):
        expected = self.state.config.admin_password
        if not expected or not hmac.compare_digest(
            password.encode("utf-8"), expected.encode("utf-8")
        ):
            raise AuthenticationFailed("Admin credential not authorized")
        self.is_admin = True
        logger.info("admin mode enabled")

    def logout(self):
        self.is_admin = False

    def _require_admin(self):
        if not self.is_admin:
            raise AdminRequired("Admin mode required")

    @staticmethod
    def _require_confirmation(confirmed: bool, action: str):
        if not confirmed:
            raise ConfirmationRequired(f"Confirmation required to {action}")

    # ----- commits -----

    def _commit(self, new_state: AppState) -> AppState:
        self._state = new_state
        self.cache.persist(new_state)
        if self.is_admin:
            self.dispatch(self._push, new_state)
        return new_state

    def _push(self, snapshot: AppState) -> bool:
        with self._sync_lock:
            self._in_flight += 1
        try:
            ok = self.synchronizer.push(snapshot)
        finally:
            with self._sync_lock:
                self._in_flight -= 1
        self.status = ConnectionStatus.CONNECTED if ok else ConnectionStatus.ERROR
        if ok:
            self.last_sync = self.clock()
        return ok

    # ----- links -----

    def add_link(self, title: str, url: str, **fields) -> AppState:
        self._require_admin()
        links = link_ops.add_link(self.state.links, title, url, **fields)
        return self._commit(self.state.model_copy(update={"links": links}))

    def edit_link(self, link_id: str, **changes) -> AppState:
        self._require_admin()
        links = link_ops.edit_link(self.state.links, link_id, **changes)
        return self._commit(self.state.model_copy(update={"links": links}))

    def delete_link(self, link_id: str, confirmed: bool = False) -> AppState:
        self._require_admin()
        self._require_confirmation(confirmed, "delete this link")
        links = link_ops.delete_link(self.state.links, link_id)
        return self._commit(self.state.model_copy(update={"links": links}))

    def move_link(self, link_id: str, direction: str) -> AppState:
        self._require_admin()
        links = link_ops.move_link(self.state.links, link_id, direction)
        if links is self.state.links:
            return self.state
        return self._commit(self.state.model_copy(update={"links": links}))

    # ----- layout, theme, config -----

    def set_layout(self, layout: LayoutType) -> AppState:
        return self._commit(self.state.model_copy(update={"layout": LayoutType(layout)}))

    def update_theme(self, **changes) -> AppState:
        theme = _merge(self.state.theme, changes)
        return self._commit(self.state.model_copy(update={"theme": theme}))

    def update_config(self, **changes) -> AppState:
        self._require_admin()
        config = _merge(self.state.config, changes)
        return self._commit(self.state.model_copy(update={"config": config}))

    def _swap_theme(self, preset: ThemeSettings) -> AppState:
        theme = annotate_theme(preset, self.roster).model_copy(
            update={"background_image": self.state.theme.background_image}
        )
        return self._commit(self.state.model_copy(update={"theme": theme}))

    def apply_preset(self, preset_id: str, confirmed: bool = False) -> AppState:
        self._require_admin()
        preset = next((p for p in THEME_PRESETS if p.id == preset_id), None)
        if not preset:
            raise PresetNotFound(f"No theme preset {preset_id}")
        self._require_confirmation(confirmed, "replace the theme")
        return self._swap_theme(preset)

    def reset_theme(self, confirmed: bool = False) -> AppState:
        self._require_admin()
        self._require_confirmation(confirmed, "reset the theme")
        return self._swap_theme(DEFAULT_THEME)

    # ----- maintenance -----

    def force_sync(self) -> bool:
        self._require_admin()
        self.status = ConnectionStatus.SYNCING
        return self._push(self.state)

    def clear_local_data(self, confirmed: bool = False) -> AppState:
        self._require_admin()
        self._require_confirmation(confirmed, "clear all local data")
        self.cache.clear()
        logger.warning("local cache cleared")
        self.is_admin = False
        return self.initialize()
