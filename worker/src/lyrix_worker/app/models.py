from __future__ import annotations

from datetime import UTC, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..services.catalog import (
    AUTO_CHOICE,
    GENRES,
    INSTRUMENTAL_PROFILES,
    LANGUAGES,
    MOODS,
    VOCAL_STYLES,
)


def _require_choice(value: str, options: tuple[str, ...], kind: str) -> str:
    if value not in options:
        raise ValueError(f"unknown {kind}: {value!r}")
    return value


class GenerationParameters(BaseModel):
    topic: str = Field(default="", max_length=2000)
    genre: str = Field(default="Pop")
    mood: str = Field(default="Happy")
    artist: Optional[str] = Field(default=None, max_length=128)
    vocal_style: str = Field(default=AUTO_CHOICE)
    instrumental_profile: str = Field(default=AUTO_CHOICE)
    include_bridge: bool = True
    language: str = Field(default="English")
    is_explicit: bool = False

    @field_validator("genre")
    @classmethod
    def _check_genre(cls, value: str) -> str:
        return _require_choice(value, GENRES, "genre")

    @field_validator("mood")
    @classmethod
    def _check_mood(cls, value: str) -> str:
        return _require_choice(value, MOODS, "mood")

    @field_validator("vocal_style")
    @classmethod
    def _check_vocal_style(cls, value: str) -> str:
        return _require_choice(value, VOCAL_STYLES, "vocal style")

    @field_validator("instrumental_profile")
    @classmethod
    def _check_instrumental_profile(cls, value: str) -> str:
        return _require_choice(value, INSTRUMENTAL_PROFILES, "instrumental profile")

    @field_validator("language")
    @classmethod
    def _check_language(cls, value: str) -> str:
        return _require_choice(value, LANGUAGES, "language")

    @field_validator("artist")
    @classmethod
    def _blank_artist_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class SongSection(BaseModel):
    label: str
    text: str


class ParsedSong(BaseModel):
    title: str = ""
    style_tag: str = ""
    sections: list[SongSection] = Field(default_factory=list)
    explanation: str = ""


class UserIdentity(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=128)
    display_name: Optional[str] = Field(default=None, max_length=128)
    photo_url: Optional[str] = Field(default=None, max_length=2048)


class SongSnapshot(BaseModel):
    """Everything needed to persist a song; the store assigns id and timestamp."""

    user_id: str
    title: str
    lyrics: str
    style_tag: str = ""
    cover_art: Optional[str] = None
    parameters: GenerationParameters


class SavedSong(SongSnapshot):
    id: str
    created_at: int = Field(..., description="Creation time in epoch milliseconds.")


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class SessionCreateRequest(BaseModel):
    parameters: Optional[GenerationParameters] = None


class RedoRequest(BaseModel):
    label: str = Field(..., min_length=1, max_length=128)


class SongUpdate(BaseModel):
    """Snapshot published to subscribers after every change to a session."""

    session_id: str
    revision: int
    streaming: bool
    busy: Optional[str] = None
    song: ParsedSong
    has_cover_art: bool = False
    error: Optional[str] = None
    updated_at: datetime = Field(default_factory=_utc_now)


class SessionSummary(BaseModel):
    session_id: str
    created_at: datetime
    updated_at: datetime
    revision: int = 0
    parameters: GenerationParameters
    transcript: str = ""
    song: ParsedSong = Field(default_factory=ParsedSong)
    streaming: bool = False
    busy: Optional[str] = None
    cover_art: Optional[str] = None
    error: Optional[str] = None
    user: Optional[UserIdentity] = None
    library: list[SavedSong] = Field(default_factory=list)


class CatalogResponse(BaseModel):
    genres: list[str]
    moods: list[str]
    vocal_styles: list[str]
    instrumental_profiles: list[str]
    languages: list[str]


class ArtistSearchResponse(BaseModel):
    matches: list[str] = Field(default_factory=list)
    quick_picks: list[str] = Field(default_factory=list)


class LyricsExport(BaseModel):
    title: str
    style_tag: str
    lyrics: str
