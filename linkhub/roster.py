from datetime import date, datetime
from typing import Optional

from .constants import ROSTER_COLORS, ROSTER_EPOCH
from .models import RosterStatus, ThemeSettings

_CYCLE = (RosterStatus.GREEN, RosterStatus.YELLOW, RosterStatus.BLUE)


def roster_for(day: date) -> RosterStatus:
    # Python's % is already non-negative for a positive divisor
    return _CYCLE[(day - ROSTER_EPOCH).days % 3]


def current_roster(now: Optional[datetime] = None) -> RosterStatus:
    now = now or datetime.now()
    return roster_for(now.date())


def roster_color(status: RosterStatus) -> str:
    return ROSTER_COLORS[status]


def effective_accent(theme: ThemeSettings, status: Optional[RosterStatus] = None) -> str:
    if theme.is_fixed:
        return theme.accent
    return roster_color(status or current_roster())


def annotate_theme(theme: ThemeSettings, status: Optional[RosterStatus] = None) -> ThemeSettings:
    """Theme copy whose stored accent follows the roster unless the theme is fixed."""
    accent = effective_accent(theme, status)
    if accent == theme.accent:
        return theme
    return theme.model_copy(update={"accent": accent})
