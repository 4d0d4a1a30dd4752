"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="The Audio Lounge", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    podcast_api_url: HttpUrl = Field(
        default="https://podcast-api.netlify.app", alias="PODCAST_API_URL"
    )
    public_base_url: str = Field(
        default="http://localhost:3000/", alias="PUBLIC_BASE_URL"
    )

    sync_api_url: HttpUrl | None = Field(
        default=None,
        alias="SYNC_API_URL",
        validation_alias=AliasChoices("SYNC_API_URL", "SUPABASE_URL"),
    )
    sync_api_key: str | None = Field(
        default=None,
        alias="SYNC_API_KEY",
        validation_alias=AliasChoices("SYNC_API_KEY", "SUPABASE_KEY"),
    )
    sync_table: str = Field(default="The Audio Lounge", alias="SYNC_TABLE")
    sync_record_key: str = Field(default="showId", alias="SYNC_RECORD_KEY")
    sync_titles_column: str = Field(default="titles", alias="SYNC_TITLES_COLUMN")
    sync_owner_id: str = Field(default="audio-lounge", alias="SYNC_OWNER_ID")

    search_threshold: float = Field(
        default=60.0, alias="SEARCH_THRESHOLD", ge=0, le=100
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./audiolounge.db", alias="DATABASE_URL"
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator(
        "sync_table",
        "sync_record_key",
        "sync_titles_column",
        "sync_owner_id",
        mode="before",
    )
    @classmethod
    def _strip_identifier(cls, value: object) -> str:
        """Reject blank table, column or owner names for the favorites mirror."""

        cleaned = str(value or "").strip()
        if not cleaned:
            raise ValueError("Sync table, columns and owner id must not be blank")
        return cleaned

    @field_validator("public_base_url", mode="before")
    @classmethod
    def _normalise_base_url(cls, value: object) -> str:
        cleaned = str(value or "").strip()
        if not cleaned:
            raise ValueError("PUBLIC_BASE_URL must not be blank")
        return cleaned

    @property
    def sync_enabled(self) -> bool:
        """Return whether favorites should be mirrored remotely."""

        return self.sync_api_url is not None

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
