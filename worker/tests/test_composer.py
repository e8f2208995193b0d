from __future__ import annotations

from datetime import UTC, datetime

import pytest

from lyrix_worker.app.models import GenerationParameters
from lyrix_worker.app.settings import Settings
from lyrix_worker.services.composer import (
    EMPTY_SUGGESTION_ARTIST,
    FALLBACK_ARTIST,
    SongComposer,
)
from lyrix_worker.services.exceptions import GenerationFailure, ImageGenerationFailed
from lyrix_worker.services.types import SongSession


def _session() -> SongSession:
    now = datetime.now(tz=UTC)
    return SongSession(session_id="session-compose", created_at=now, updated_at=now)


@pytest.mark.asyncio
async def test_compose_streams_song_and_attaches_cover_art(
    settings: Settings, make_backend, neon_heart_chunks: list[str]
) -> None:
    backend = make_backend(neon_heart_chunks)
    composer = SongComposer(settings, backend)
    session = _session()
    parameters = GenerationParameters(topic="city lights", genre="Synthwave", mood="Dark")
    generation_id = session.begin_generation()

    parsed = await composer.compose(session, parameters, generation_id)
    await composer.drain()

    assert parsed.title == "Neon Heart"
    assert parsed.explanation == "Two verses. Then a hook."
    assert backend.cover_calls == [("Neon Heart", "Synthwave", "Dark")]
    assert session.cover_art == "data:image/png;base64,AAAA"


@pytest.mark.asyncio
async def test_cover_art_failure_is_silent(
    settings: Settings, make_backend, neon_heart_chunks: list[str]
) -> None:
    backend = make_backend(neon_heart_chunks, cover_art=ImageGenerationFailed("quota"))
    composer = SongComposer(settings, backend)
    session = _session()
    generation_id = session.begin_generation()

    await composer.compose(session, GenerationParameters(topic="x"), generation_id)
    await composer.drain()

    assert session.cover_art is None
    assert session.error is None
    assert len(backend.cover_calls) == 1


@pytest.mark.asyncio
async def test_stale_cover_art_is_dropped(
    settings: Settings, make_backend, neon_heart_chunks: list[str]
) -> None:
    backend = make_backend(neon_heart_chunks)
    composer = SongComposer(settings, backend)
    session = _session()
    generation_id = session.begin_generation()

    await composer.compose(session, GenerationParameters(topic="x"), generation_id)
    session.begin_generation()
    await composer.drain()

    assert backend.cover_calls
    assert session.cover_art is None


@pytest.mark.asyncio
async def test_cover_art_can_be_disabled(
    tmp_path, make_backend, neon_heart_chunks: list[str]
) -> None:
    settings = Settings(
        config_dir=tmp_path / "config",
        data_dir=tmp_path / "data",
        cover_art_enabled=False,
    )
    backend = make_backend(neon_heart_chunks)
    composer = SongComposer(settings, backend)
    session = _session()

    await composer.compose(session, GenerationParameters(topic="x"), session.begin_generation())
    await composer.drain()

    assert backend.cover_calls == []
    assert session.cover_art_requested is True


@pytest.mark.asyncio
async def test_suggest_artist_fallbacks(settings: Settings, make_backend) -> None:
    assert await SongComposer(settings, make_backend(artist=" Mitski \n")).suggest_artist(
        "Indie"
    ) == "Mitski"
    assert await SongComposer(settings, make_backend(artist="")).suggest_artist(
        "Pop"
    ) == EMPTY_SUGGESTION_ARTIST
    assert await SongComposer(
        settings, make_backend(artist=GenerationFailure("offline"))
    ).suggest_artist("Pop") == FALLBACK_ARTIST


@pytest.mark.asyncio
async def test_warmup_reports_backend_status(settings: Settings, make_backend) -> None:
    composer = SongComposer(settings, make_backend())
    statuses = await composer.warmup()
    assert statuses["stub"].ready is True
    assert composer.backend_status().keys() >= {"stub"}
