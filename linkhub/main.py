import logging
import random
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from . import settings
from .constants import THEME_PRESETS
from .errors import HubError
from .hub import HubShell
from .metadata import suggest_metadata
from .models import LayoutType, ParticleType
from .particles import ParticleField
from .storage import LocalCache
from .sync import StateLoader, StateSynchronizer
from .url_utils import preview_url

logger = logging.getLogger("linkhub.main")

app = FastAPI(title="LinkHub")

# Remote pushes never hold up a request
push_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="linkhub-push")


def _log_push_failure(future):
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.error("background push crashed", exc_info=exc)


def _dispatch_push(fn, *args):
    future = push_executor.submit(fn, *args)
    future.add_done_callback(_log_push_failure)
    return future


_cache = LocalCache(settings.CACHE_DIR)
hub = HubShell(
    cache=_cache,
    loader=StateLoader(_cache, settings.ENDPOINT_URL),
    synchronizer=StateSynchronizer(settings.ENDPOINT_URL),
    dispatch=_dispatch_push,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class LoginIn(BaseModel):
    password: str


class LinkIn(BaseModel):
    title: str = ""
    url: str = ""
    description: str = ""
    category: str = ""
    icon: str = ""


class LinkPatch(BaseModel):
    title: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    icon: Optional[str] = None
    order: Optional[int] = None


class MoveIn(BaseModel):
    direction: str


class LayoutIn(BaseModel):
    layout: LayoutType


class ThemeUpdate(BaseModel):
    name: Optional[str] = None
    background: Optional[str] = None
    accent: Optional[str] = None
    secondary: Optional[str] = None
    card_opacity: Optional[float] = None
    particles: Optional[ParticleType] = None
    background_image: Optional[str] = None
    is_fixed: Optional[bool] = None
    blur_amount: Optional[int] = None


class PresetIn(BaseModel):
    preset_id: str
    confirm: bool = False


class ConfirmIn(BaseModel):
    confirm: bool = False


class ConfigUpdate(BaseModel):
    title: Optional[str] = None
    subtitle: Optional[str] = None
    version: Optional[str] = None
    credits: Optional[str] = None
    show_icons: Optional[bool] = None
    show_descriptions: Optional[bool] = None
    show_categories: Optional[bool] = None
    show_search: Optional[bool] = None
    show_previews: Optional[bool] = None
    admin_password: Optional[str] = None


class SuggestIn(BaseModel):
    url: str


@app.exception_handler(HubError)
async def hub_error_handler(request: Request, exc: HubError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.on_event("startup")
def startup_event():
    hub.initialize()


@app.on_event("shutdown")
def shutdown_event():
    push_executor.shutdown(wait=False)


def _public_state():
    doc = hub.state.to_document()
    if not hub.is_admin:
        # the shared credential only leaves the server in admin mode
        doc["config"].pop("adminPasswordHash", None)
    return doc


@app.get("/api/state")
def get_state():
    return _public_state()


@app.get("/api/status")
def get_status():
    return {
        "connection": hub.status.value,
        "isAdmin": hub.is_admin,
        "isSyncing": hub.is_syncing,
        "lastSync": hub.last_sync.isoformat() if hub.last_sync else None,
        "roster": hub.roster.value,
        "accent": hub.effective_accent,
    }


@app.post("/api/admin/login")
def admin_login(payload: LoginIn):
    hub.login(payload.password)
    return {"ok": True}


@app.post("/api/admin/logout")
def admin_logout():
    hub.logout()
    return {"ok": True}


@app.post("/api/links")
def add_link(body: LinkIn):
    state = hub.add_link(**body.model_dump())
    return state.links[-1].to_wire()


@app.patch("/api/links/{id}")
def edit_link(id: str, body: LinkPatch):
    state = hub.edit_link(id, **body.model_dump(exclude_none=True))
    return next(l.to_wire() for l in state.links if l.id == id)


@app.delete("/api/links/{id}")
def delete_link(id: str, confirm: bool = False):
    hub.delete_link(id, confirmed=confirm)
    return {"ok": True}


@app.post("/api/links/{id}/move")
def move_link(id: str, body: MoveIn):
    hub.move_link(id, body.direction)
    return [l.to_wire() for l in hub.search()]


@app.get("/api/categories")
def get_categories():
    return hub.categories()


@app.get("/api/search")
def search(q: str = "", category: str = ""):
    res = []
    for l in hub.search(q, category or None):
        entry = l.to_wire()
        if hub.state.config.show_previews:
            entry["preview"] = preview_url(l.url)
        res.append(entry)
    return {"results": res, "count": len(res)}


@app.put("/api/layout")
def set_layout(body: LayoutIn):
    return {"layout": hub.set_layout(body.layout).layout.value}


@app.patch("/api/theme")
def update_theme(body: ThemeUpdate):
    state = hub.update_theme(**body.model_dump(exclude_unset=True))
    return state.theme.to_wire()


@app.get("/api/theme/presets")
def get_presets():
    return [p.to_wire() for p in THEME_PRESETS]


@app.post("/api/theme/preset")
def apply_preset(body: PresetIn):
    return hub.apply_preset(body.preset_id, confirmed=body.confirm).theme.to_wire()


@app.post("/api/theme/reset")
def reset_theme(body: ConfirmIn):
    return hub.reset_theme(confirmed=body.confirm).theme.to_wire()


@app.patch("/api/config")
def update_config(body: ConfigUpdate):
    state = hub.update_config(**body.model_dump(exclude_none=True))
    return state.config.to_wire()


@app.post("/api/sync")
def force_sync():
    ok = hub.force_sync()
    return {"ok": ok, "connection": hub.status.value}


@app.post("/api/suggest")
def suggest(body: SuggestIn):
    meta = suggest_metadata(body.url)
    return meta.model_dump() if meta else None


@app.delete("/api/cache")
def clear_cache(confirm: bool = False):
    hub.clear_local_data(confirmed=confirm)
    return {"ok": True}


@app.get("/api/export/json")
def export_json():
    return _public_state()


@app.get("/api/particles")
def particle_frame(width: int = 1280, height: int = 720, seed: Optional[int] = None):
    theme = hub.state.theme
    field = ParticleField(
        theme.particles, hub.effective_accent, width, height, rng=random.Random(seed)
    )
    return {"particles": theme.particles.value, "sprites": [asdict(s) for s in field.step()]}
