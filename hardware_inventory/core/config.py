"""Environment-driven configuration for the Hardware Inventory app.

Every knob the service reads lives on ``AppSettings``. Values come from the
process environment first, then ``.env``/``.env.local`` files, then the
defaults below, so a fresh checkout boots without any setup.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ``hardware_inventory/`` (templates and static assets live beside the code)
PACKAGE_DIR = Path(__file__).resolve().parents[1]


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Hardware Inventory"
    BASE_DIR: Path = Field(default_factory=lambda: PACKAGE_DIR.parent)
    DATA_DIR: Path = Field(default_factory=lambda: PACKAGE_DIR.parent / "data")
    TEMPLATES_DIR: Path | None = None
    STATIC_DIR: Path | None = None
    TZ: str = "UTC"
    LOG_LEVEL: str = "INFO"

    # Where the serialized inventory blob is kept. ``sql`` writes one row in a
    # key/value table, ``file`` writes ``<key>.json`` under DATA_DIR and
    # ``memory`` keeps it for the life of the process only.
    STORAGE_BACKEND: Literal["sql", "file", "memory"] = "sql"
    STORAGE_KEY: str = "hardware"
    DB_URL: str = Field(default="", validation_alias=AliasChoices("DB_URL", "DATABASE_URL"))

    HOST: str = "0.0.0.0"
    PORT: int = 8089

    @field_validator("STORAGE_BACKEND", mode="before")
    @classmethod
    def normalize_backend(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper() or "INFO"
        return value

    @field_validator("STORAGE_KEY")
    @classmethod
    def require_storage_key(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("STORAGE_KEY must not be empty")
        return value

    @property
    def templates_dir(self) -> Path:
        return self.TEMPLATES_DIR or PACKAGE_DIR / "templates"

    @property
    def static_dir(self) -> Path:
        return self.STATIC_DIR or PACKAGE_DIR / "static"


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    settings = AppSettings()
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    if settings.TEMPLATES_DIR is None:
        settings.TEMPLATES_DIR = settings.templates_dir
    if settings.STATIC_DIR is None:
        settings.STATIC_DIR = settings.static_dir
    if not settings.DB_URL:
        settings.DB_URL = f"sqlite:///{settings.DATA_DIR / 'inventory.db'}"
    return settings


settings = get_settings()
