"""Application settings loaded from environment variables via pydantic-settings."""

from enum import StrEnum
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class LogFormat(StrEnum):
    json = "json"
    console = "console"


class Settings(BaseSettings):
    """Central configuration — all values sourced from env vars or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ── Temperature record store ────────────────────────────────────────────
    database_folder: str = "Data"
    database_file_template: str = "{city}_{year}.db"

    # ── Phase catalog ───────────────────────────────────────────────────────
    crop_catalog_path: str | None = None

    # ── Observability ───────────────────────────────────────────────────────
    log_level: str = "info"
    log_format: LogFormat = LogFormat.json

    @property
    def database_path(self) -> Path:
        """Data folder resolved against the current working directory."""
        return (Path.cwd() / self.database_folder).resolve()


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance (cached after first call)."""
    return Settings()
