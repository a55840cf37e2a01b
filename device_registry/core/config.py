"""Environment-driven configuration for the Device Registry.

Every knob the application reads lives on ``AppSettings``. Values come from
the process environment first and then from ``.env`` / ``.env.local`` so a
developer can boot the app without exporting anything.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Device Registry"

    BASE_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parent.parent)
    DATA_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2] / "data")
    TEMPLATES_DIR: Path | None = None
    STATIC_DIR: Path | None = None
    # Warranty day counts are computed against "today" in this zone.
    TZ: str = "Asia/Bangkok"

    # ---- Admin gate (shared password, not a security boundary)
    APP_SECRET: str = "dev-insecure-secret-change-me"
    ADMIN_PASSWORD: str = "admin123"
    # A bcrypt hash takes precedence over the plain password when set.
    ADMIN_PASSWORD_HASH: str = ""
    SESSION_COOKIE_NAME: str = "device_registry_session"
    SESSION_MAX_AGE: int = 60 * 60 * 8

    # ---- Headless API
    API_KEY: str = ""

    DB_URL: str | None = Field(default=None, validation_alias="DATABASE_URL")

    WARNING_WINDOW_DAYS: int = 30
    SUGGESTION_LIMIT: int = 5

    LOG_LEVEL: str = "INFO"

    HOST: str = "0.0.0.0"
    PORT: int = 8000

    @field_validator("WARNING_WINDOW_DAYS", "SUGGESTION_LIMIT")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must be zero or greater")
        return value

    @property
    def templates_dir(self) -> Path:
        return self.TEMPLATES_DIR or self.BASE_DIR / "templates"

    @property
    def static_dir(self) -> Path:
        return self.STATIC_DIR or self.BASE_DIR / "static"

    @property
    def database_url(self) -> str:
        return self.DB_URL or f"sqlite:///{self.DATA_DIR / 'devices.db'}"


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    settings = AppSettings()
    if settings.database_url.startswith("sqlite:///"):
        settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    return settings


settings = get_settings()
