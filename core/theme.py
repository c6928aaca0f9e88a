"""
Color scheme resolution.

The scheme defaults to dark and the visitor's OS preference is ignored
unless enable_system is set. A scheme chosen explicitly is kept in the
session.
"""

from dataclasses import dataclass
from typing import Mapping, MutableMapping

from core.config import DEFAULT_THEME

THEMES = ("light", "dark")
THEME_SESSION_KEY = "theme"

# Client hint sent by browsers that support it
SYSTEM_PREFERENCE_HEADER = "sec-ch-prefers-color-scheme"


@dataclass(frozen=True)
class ThemeSettings:
    default_theme: str = DEFAULT_THEME
    enable_system: bool = False


def resolve_theme(
    session: Mapping,
    headers: Mapping | None = None,
    settings: ThemeSettings = ThemeSettings(),
) -> str:
    """Pick the scheme for this request: session choice, then system (if enabled), then default."""
    chosen = session.get(THEME_SESSION_KEY)
    if chosen in THEMES:
        return chosen
    if settings.enable_system and headers is not None:
        preferred = headers.get(SYSTEM_PREFERENCE_HEADER)
        if preferred in THEMES:
            return preferred
    return settings.default_theme if settings.default_theme in THEMES else "dark"


def set_theme(session: MutableMapping, theme: str) -> bool:
    """Store an explicit choice. Returns False for unknown schemes."""
    if theme not in THEMES:
        return False
    session[THEME_SESSION_KEY] = theme
    return True
