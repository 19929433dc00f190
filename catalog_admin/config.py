"""
Configuration settings for the catalog administration tool.

Uses Pydantic Settings to load environment variables for the database
connection, logging, fetch caps, and the locations of the preference file
and export directory.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("catalog_admin", alias="DB_NAME")
    db_statement_timeout_ms: int = Field(30_000, alias="DB_STATEMENT_TIMEOUT_MS")
    db_pool_min_size: int = Field(1, alias="DB_POOL_MIN_SIZE")
    db_pool_max_size: int = Field(5, alias="DB_POOL_MAX_SIZE")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Fetch caps and view defaults
    view_hard_cap: int = Field(10_000, alias="VIEW_HARD_CAP")
    export_hard_cap: int = Field(100_000, alias="EXPORT_HARD_CAP")
    default_fetch_limit: int = Field(1_000, alias="DEFAULT_FETCH_LIMIT")
    default_page_size: int = Field(10, alias="DEFAULT_PAGE_SIZE")

    # Local files
    preferences_path: Path = Field(
        Path.home() / ".catalog_admin" / "preferences.json", alias="PREFERENCES_PATH"
    )
    export_dir: Path = Field(Path("exports"), alias="EXPORT_DIR")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


def build_dsn(settings: Settings | None = None) -> str:
    """Compose a PostgreSQL DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


__all__ = ["Settings", "build_dsn", "get_settings"]
