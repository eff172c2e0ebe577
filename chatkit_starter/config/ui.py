"""UI customization constants for the ChatKit widget.

Everything the host page needs to configure the widget lives here: the start
screen prompts, the composer placeholder, the greeting, and the theme
parameters for each color scheme. The values are immutable and read at
render time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

ColorScheme = Literal["light", "dark"]

COLOR_SCHEMES: tuple[ColorScheme, ...] = ("light", "dark")

CREATE_SESSION_ENDPOINT = "/api/create-session"


@dataclass(frozen=True)
class StarterPrompt:
    """A suggested prompt shown on the widget's start screen.

    Attributes:
        label: Text shown on the prompt chip.
        prompt: Text submitted when the chip is clicked.
        icon: Name of a ChatKit built-in icon.
    """

    label: str
    prompt: str
    icon: str = "circle-question"

    def to_dict(self) -> dict[str, str]:
        return {"label": self.label, "prompt": self.prompt, "icon": self.icon}


@dataclass(frozen=True)
class ThemeConfig:
    """Visual theme parameters handed to the widget.

    Attributes:
        grayscale_hue: Hue (degrees) of the neutral palette.
        grayscale_tint: Tint step of the neutral palette.
        grayscale_shade: Shade step of the neutral palette; darker schemes
            use a smaller offset.
        accent_primary: Accent color in hex format.
        accent_level: Accent intensity level.
        radius: Corner radius preset.
    """

    grayscale_hue: int = 220
    grayscale_tint: int = 6
    grayscale_shade: int = -4
    accent_primary: str = "#0f172a"
    accent_level: int = 1
    radius: str = "round"

    def __post_init__(self) -> None:
        if not self.accent_primary.startswith("#"):
            raise ValueError("accent_primary must be a hex color (e.g., '#0f172a')")

    def to_dict(self) -> dict[str, Any]:
        """Convert theme to the widget's camelCase option shape."""
        return {
            "color": {
                "grayscale": {
                    "hue": self.grayscale_hue,
                    "tint": self.grayscale_tint,
                    "shade": self.grayscale_shade,
                },
                "accent": {
                    "primary": self.accent_primary,
                    "level": self.accent_level,
                },
            },
            "radius": self.radius,
        }


STARTER_PROMPTS: tuple[StarterPrompt, ...] = (
    StarterPrompt(label="What can you do?", prompt="What can you do?"),
)

PLACEHOLDER_INPUT = "Ask anything..."

GREETING = "How can I help you today?"

_THEMES: dict[str, ThemeConfig] = {
    "light": ThemeConfig(grayscale_shade=-4, accent_primary="#0f172a"),
    "dark": ThemeConfig(grayscale_shade=-1, accent_primary="#f1f5f9"),
}


def get_theme_config(scheme: str) -> ThemeConfig:
    """Return the theme parameters for a color scheme.

    Raises:
        ValueError: If the scheme is not ``light`` or ``dark``.
    """
    try:
        return _THEMES[scheme]
    except KeyError:
        raise ValueError(
            f"Invalid color scheme '{scheme}'. Must be one of: {', '.join(COLOR_SCHEMES)}"
        ) from None


def ui_config_dict() -> dict[str, Any]:
    """Return the whole configuration record as JSON-ready data."""
    return {
        "createSessionEndpoint": CREATE_SESSION_ENDPOINT,
        "greeting": GREETING,
        "placeholder": PLACEHOLDER_INPUT,
        "starterPrompts": [p.to_dict() for p in STARTER_PROMPTS],
        "themes": {scheme: get_theme_config(scheme).to_dict() for scheme in COLOR_SCHEMES},
    }
