"""Tests for the widget UI configuration record."""

import dataclasses

import pytest

from chatkit_starter.config.ui import (
    CREATE_SESSION_ENDPOINT,
    GREETING,
    PLACEHOLDER_INPUT,
    STARTER_PROMPTS,
    StarterPrompt,
    ThemeConfig,
    get_theme_config,
    ui_config_dict,
)


class TestThemeConfig:

    def test_light_theme(self):
        theme = get_theme_config("light").to_dict()
        assert theme["color"]["grayscale"] == {"hue": 220, "tint": 6, "shade": -4}
        assert theme["color"]["accent"] == {"primary": "#0f172a", "level": 1}
        assert theme["radius"] == "round"

    def test_dark_theme(self):
        theme = get_theme_config("dark").to_dict()
        assert theme["color"]["grayscale"]["shade"] == -1
        assert theme["color"]["accent"]["primary"] == "#f1f5f9"

    def test_unknown_scheme_raises(self):
        with pytest.raises(ValueError, match="Invalid color scheme"):
            get_theme_config("sepia")

    def test_non_hex_accent_raises(self):
        with pytest.raises(ValueError, match="hex color"):
            ThemeConfig(accent_primary="navy")

    def test_theme_is_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            get_theme_config("light").radius = "square"


class TestConfigurationRecord:

    def test_starter_prompts(self):
        assert len(STARTER_PROMPTS) >= 1
        assert STARTER_PROMPTS[0].to_dict() == {
            "label": "What can you do?",
            "prompt": "What can you do?",
            "icon": "circle-question",
        }

    def test_starter_prompt_is_immutable(self):
        prompt = StarterPrompt(label="a", prompt="b")
        with pytest.raises(dataclasses.FrozenInstanceError):
            prompt.label = "c"

    def test_ui_config_dict(self):
        data = ui_config_dict()
        assert data["createSessionEndpoint"] == CREATE_SESSION_ENDPOINT == "/api/create-session"
        assert data["greeting"] == GREETING
        assert data["placeholder"] == PLACEHOLDER_INPUT
        assert set(data["themes"]) == {"light", "dark"}
        assert data["starterPrompts"][0]["label"] == "What can you do?"
