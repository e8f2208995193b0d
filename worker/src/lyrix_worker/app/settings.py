from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_config_dir() -> Path:
    return Path.home() / ".config" / "lyrix"


def _default_data_dir() -> Path:
    return Path.home() / ".local" / "share" / "lyrix"


class Settings(BaseSettings):
    """Runtime configuration for the Lyrix worker process."""

    model_config = SettingsConfigDict(
        env_prefix="LYRIX_",
        env_nested_delimiter="__",
        extra="ignore",
        populate_by_name=True,
    )

    config_dir: Path = Field(default_factory=_default_config_dir)
    data_dir: Path = Field(default_factory=_default_data_dir)
    library_path: Optional[Path] = Field(
        default=None,
        description="SQLite file backing the song library (defaults to data_dir/library.sqlite3).",
    )
    gemini_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "gemini_api_key",
            "LYRIX_GEMINI_API_KEY",
            "GEMINI_API_KEY",
            "GOOGLE_API_KEY",
        ),
        description="API key for the Gemini generation provider.",
    )
    text_model_id: str = Field(
        default="gemini-3-pro-preview",
        max_length=128,
        description="Model used to stream full songs.",
    )
    section_model_id: str = Field(
        default="gemini-3-flash-preview",
        max_length=128,
        description="Model used to rewrite a single section.",
    )
    artist_model_id: str = Field(
        default="gemini-3-flash-preview",
        max_length=128,
        description="Model used for artist suggestions.",
    )
    image_model_id: str = Field(
        default="gemini-2.5-flash-image",
        max_length=128,
        description="Model used to render cover art.",
    )
    cover_art_enabled: bool = Field(
        default=True,
        description="Request cover art once the song title has streamed in.",
    )
    cover_art_aspect_ratio: str = Field(default="1:1", max_length=8)
    cors_allow_origins: str = Field(
        default="",
        description="Comma-separated origins allowed to call the worker from a browser.",
    )

    @model_validator(mode="after")
    def _resolve_library_path(self) -> "Settings":
        if self.library_path is None:
            self.library_path = self.data_dir / "library.sqlite3"
        return self

    @property
    def allowed_origins(self) -> list[str]:
        parts = [part.strip() for part in self.cors_allow_origins.split(",")]
        return [part for part in parts if part]

    def ensure_directories(self) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        if self.library_path is not None:
            self.library_path.parent.mkdir(parents=True, exist_ok=True)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = Settings()
    settings.ensure_directories()
    return settings
