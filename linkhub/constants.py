from datetime import date

from . import settings
from .models import AppConfig, ParticleType, RosterStatus, ThemeSettings

LOAD_TIMEOUT_SECONDS = 15

# Day zero of the three-day roster cycle
ROSTER_EPOCH = date(2026, 1, 1)

ROSTER_COLORS = {
    RosterStatus.GREEN: "#10b981",
    RosterStatus.YELLOW: "#f59e0b",
    RosterStatus.BLUE: "#3b82f6",
}

STORAGE_KEYS = {
    "links": "hub_links",
    "theme": "hub_theme",
    "config": "hub_config",
    "layout": "hub_layout",
}

DEFAULT_CATEGORY = "General"
DEFAULT_ICON = "Link"

THEME_PRESETS = [
    ThemeSettings(
        id="readiness",
        name="Readiness Protocol",
        background="#020617",
        accent="#3b82f6",
        secondary="#1e293b",
        card_opacity=0.12,
        particles=ParticleType.DIGITAL,
        is_fixed=False,
        blur_amount=20,
    ),
    ThemeSettings(
        id="emerald-matrix",
        name="Emerald Matrix",
        background="#010501",
        accent="#10b981",
        secondary="#064e3b",
        card_opacity=0.1,
        particles=ParticleType.DIGITAL,
        is_fixed=True,
        blur_amount=15,
    ),
    ThemeSettings(
        id="crimson-protocol",
        name="Crimson Protocol",
        background="#0a0000",
        accent="#ef4444",
        secondary="#450a0a",
        card_opacity=0.15,
        particles=ParticleType.SPARKS,
        is_fixed=True,
        blur_amount=10,
    ),
    ThemeSettings(
        id="indigo-deep",
        name="Indigo Deep",
        background="#030014",
        accent="#6366f1",
        secondary="#1e1b4b",
        card_opacity=0.1,
        particles=ParticleType.BUBBLES,
        is_fixed=True,
        blur_amount=25,
    ),
    ThemeSettings(
        id="amber-alert",
        name="Amber Alert",
        background="#0f0a00",
        accent="#f59e0b",
        secondary="#451a03",
        card_opacity=0.12,
        particles=ParticleType.FIRE,
        is_fixed=True,
        blur_amount=18,
    ),
    ThemeSettings(
        id="cyberpunk",
        name="Cyberpunk Neon",
        background="#050505",
        accent="#ff00ff",
        secondary="#00ffff",
        card_opacity=0.15,
        particles=ParticleType.DIGITAL,
        is_fixed=True,
        blur_amount=20,
    ),
    ThemeSettings(
        id="obsidian",
        name="Obsidian Tech",
        background="#0a0a0a",
        accent="#ffffff",
        secondary="#404040",
        card_opacity=0.08,
        particles=ParticleType.DIGITAL,
        is_fixed=True,
        blur_amount=25,
    ),
    ThemeSettings(
        id="frost",
        name="Frost Byte",
        background="#f0f9ff",
        accent="#0ea5e9",
        secondary="#ffffff",
        card_opacity=0.4,
        particles=ParticleType.SNOW,
        is_fixed=True,
        blur_amount=30,
    ),
]

DEFAULT_THEME = THEME_PRESETS[0]

INITIAL_CONFIG = AppConfig(
    endpoint_url=settings.ENDPOINT_URL,
    admin_password=settings.ADMIN_PASSWORD,
)
