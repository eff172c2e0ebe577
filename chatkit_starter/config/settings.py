"""Starter configuration via environment / .env file."""

from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CHATKIT_API_BASE = "https://api.openai.com"
DEFAULT_CHATKIT_SCRIPT_URL = "https://cdn.platform.openai.com/deployments/chatkit/chatkit.js"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Deployment ---
    ENVIRONMENT: Literal["development", "production"] = "development"

    # --- OpenAI (server-held secret) ---
    OPENAI_API_KEY: str = ""

    # --- ChatKit ---
    CHATKIT_WORKFLOW_ID: str = Field(
        default="",
        validation_alias=AliasChoices("CHATKIT_WORKFLOW_ID", "NEXT_PUBLIC_CHATKIT_WORKFLOW_ID"),
    )
    CHATKIT_API_BASE: str = DEFAULT_CHATKIT_API_BASE
    CHATKIT_SCRIPT_URL: str = DEFAULT_CHATKIT_SCRIPT_URL

    # --- Observability ---
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # --- CORS ---
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    @field_validator("CHATKIT_API_BASE", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        if not v:
            return DEFAULT_CHATKIT_API_BASE
        return v.rstrip("/")

    @field_validator("CHATKIT_WORKFLOW_ID", mode="before")
    @classmethod
    def _strip_workflow_id(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v

    @property
    def secure_cookies(self) -> bool:
        return self.ENVIRONMENT == "production"


settings = Settings()
