from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

import pytest

from lyrix_worker.app.models import GenerationParameters
from lyrix_worker.app.settings import Settings
from lyrix_worker.services.exceptions import GenerationInterrupted
from lyrix_worker.services.types import BackendStatus

NEON_HEART = (
    "TITLE: Neon Heart\n"
    "STYLE: synthwave, moody\n"
    "[Verse 1]\n"
    "Line one\n"
    "Line two\n"
    "[Chorus]\n"
    "Line three"
)

NEON_HEART_CHUNKS = [
    "TITLE: Neon ",
    "Heart\nSTYLE: synth",
    "wave, moody\n[Verse 1]\nLine one\n",
    "Line two\n[Cho",
    "rus]\nLine three\n",
    "EXPLANATION: Two verses. Then a hook.",
]

Outcome = Union[str, BaseException, None]


class StubBackend:
    """Scripted stand-in for the Gemini service."""

    def __init__(
        self,
        chunks: Sequence[str] = (),
        *,
        fail_after: Optional[int] = None,
        section: Outcome = "New verse line",
        cover_art: Outcome = "data:image/png;base64,AAAA",
        artist: Outcome = "Drake",
        gate: Optional[asyncio.Event] = None,
    ) -> None:
        self.chunks = list(chunks)
        self.fail_after = fail_after
        self.section = section
        self.cover_art = cover_art
        self.artist = artist
        self.gate = gate
        self.stream_calls: List[GenerationParameters] = []
        self.section_calls: List[str] = []
        self.cover_calls: List[tuple[str, str, str]] = []

    async def warmup(self) -> BackendStatus:
        return BackendStatus(name="stub", ready=True, error=None)

    async def stream_song(self, parameters: GenerationParameters):
        self.stream_calls.append(parameters)
        for index, chunk in enumerate(self.chunks):
            if self.fail_after is not None and index >= self.fail_after:
                raise GenerationInterrupted("stream dropped")
            if self.gate is not None:
                await self.gate.wait()
            await asyncio.sleep(0)
            yield chunk

    async def rewrite_section(
        self,
        label: str,
        transcript: str,
        parameters: GenerationParameters,
    ) -> str:
        self.section_calls.append(label)
        if self.gate is not None:
            await self.gate.wait()
        return _resolve(self.section)

    async def generate_cover_art(self, title: str, genre: str, mood: str) -> Optional[str]:
        self.cover_calls.append((title, genre, mood))
        await asyncio.sleep(0)
        return _resolve(self.cover_art)

    async def suggest_artist(self, genre: str) -> str:
        return _resolve(self.artist) or ""


def _resolve(outcome: Outcome):
    if isinstance(outcome, BaseException):
        raise outcome
    return outcome


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    settings = Settings(
        config_dir=tmp_path / "config",
        data_dir=tmp_path / "data",
        gemini_api_key=None,
    )
    settings.ensure_directories()
    return settings


@pytest.fixture
def make_backend() -> Callable[..., StubBackend]:
    return StubBackend


@pytest.fixture
def neon_heart() -> str:
    return NEON_HEART


@pytest.fixture
def neon_heart_chunks() -> List[str]:
    return list(NEON_HEART_CHUNKS)
