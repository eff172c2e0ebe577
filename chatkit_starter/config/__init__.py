"""Starter configuration: environment settings and widget UI constants."""

from .settings import Settings, settings
from .ui import (
    COLOR_SCHEMES,
    CREATE_SESSION_ENDPOINT,
    GREETING,
    PLACEHOLDER_INPUT,
    STARTER_PROMPTS,
    ColorScheme,
    StarterPrompt,
    ThemeConfig,
    get_theme_config,
    ui_config_dict,
)

__all__ = [
    "COLOR_SCHEMES",
    "CREATE_SESSION_ENDPOINT",
    "ColorScheme",
    "GREETING",
    "PLACEHOLDER_INPUT",
    "STARTER_PROMPTS",
    "Settings",
    "StarterPrompt",
    "ThemeConfig",
    "get_theme_config",
    "settings",
    "ui_config_dict",
]
