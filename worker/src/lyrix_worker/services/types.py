"""Shared service data structures."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, AsyncIterator, Dict, List, Optional, Protocol

from ..app.models import (
    GenerationParameters,
    ParsedSong,
    SavedSong,
    SongUpdate,
    UserIdentity,
)
from .parser import parse_song

# Busy markers for a full-song generation and a library load; redo uses the section label.
GENERATE_MARKER = "__generate__"
LOAD_MARKER = "__load__"


class SongwritingBackend(Protocol):
    def stream_song(self, parameters: GenerationParameters) -> AsyncIterator[str]:
        ...

    async def rewrite_section(
        self,
        label: str,
        transcript: str,
        parameters: GenerationParameters,
    ) -> str:
        ...

    async def generate_cover_art(self, title: str, genre: str, mood: str) -> Optional[str]:
        ...

    async def suggest_artist(self, genre: str) -> str:
        ...

    async def warmup(self) -> "BackendStatus":
        ...


@dataclass
class SongSession:
    """All mutable state of one songwriting session.

    The transcript is the only shared buffer: the stream consumer appends to
    it and the section editor replaces it, never both at once because both
    must hold the ``busy`` marker.
    """

    session_id: str
    created_at: datetime
    updated_at: datetime
    parameters: GenerationParameters = field(default_factory=GenerationParameters)
    transcript: str = ""
    parsed: ParsedSong = field(default_factory=ParsedSong)
    streaming: bool = False
    busy: Optional[str] = None
    generation_id: int = 0
    cover_art_requested: bool = False
    cover_art: Optional[str] = None
    error: Optional[str] = None
    user: Optional[UserIdentity] = None
    library: List[SavedSong] = field(default_factory=list)
    revision: int = 0
    listeners: List["asyncio.Queue[SongUpdate]"] = field(default_factory=list)

    def claim(self, marker: str) -> bool:
        if self.busy is not None:
            return False
        self.busy = marker
        self._touch()
        return True

    def release(self, marker: str) -> None:
        if self.busy == marker:
            self.busy = None
            self._touch()

    def begin_generation(self) -> int:
        self.generation_id += 1
        self.transcript = ""
        self.parsed = ParsedSong()
        self.cover_art = None
        self.cover_art_requested = False
        self.error = None
        self.streaming = True
        self._touch()
        return self.generation_id

    def end_generation(self, generation_id: int) -> None:
        if self.is_current(generation_id):
            self.streaming = False
        self.release(GENERATE_MARKER)
        self._touch()

    def is_current(self, generation_id: int) -> bool:
        return self.generation_id == generation_id

    def append(self, chunk: str) -> ParsedSong:
        return self.replace_transcript(self.transcript + chunk)

    def replace_transcript(self, text: str) -> ParsedSong:
        self.transcript = text
        self.parsed = parse_song(text)
        self._touch()
        return self.parsed

    def load_song(self, song: SavedSong) -> None:
        self.generation_id += 1
        self.parameters = song.parameters.model_copy(deep=True)
        self.cover_art = song.cover_art
        self.cover_art_requested = True
        self.error = None
        self.streaming = False
        self.replace_transcript(song.lyrics)

    def attach_cover_art(self, image: str) -> None:
        self.cover_art = image
        self._touch()

    def fail(self, message: str) -> None:
        self.error = message
        self._touch()

    def subscribe(self) -> "asyncio.Queue[SongUpdate]":
        queue: "asyncio.Queue[SongUpdate]" = asyncio.Queue()
        self.listeners.append(queue)
        return queue

    def unsubscribe(self, queue: "asyncio.Queue[SongUpdate]") -> None:
        if queue in self.listeners:
            self.listeners.remove(queue)

    def snapshot(self) -> SongUpdate:
        return SongUpdate(
            session_id=self.session_id,
            revision=self.revision,
            streaming=self.streaming,
            busy=self.busy,
            song=self.parsed.model_copy(deep=True),
            has_cover_art=self.cover_art is not None,
            error=self.error,
            updated_at=self.updated_at,
        )

    def publish(self) -> None:
        if not self.listeners:
            return
        update = self.snapshot()
        for queue in self.listeners:
            queue.put_nowait(update)

    def _touch(self) -> None:
        self.updated_at = datetime.now(tz=UTC)
        self.revision += 1


@dataclass
class BackendStatus:
    name: str
    ready: bool
    error: Optional[str]
    details: Dict[str, Any] = field(default_factory=dict)
    updated_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "ready": self.ready,
            "updated_at": self.updated_at.isoformat(),
        }
        if self.error is not None:
            payload["error"] = self.error
        if self.details:
            payload["details"] = self.details
        return payload
