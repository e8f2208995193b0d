"""High-level songwriting orchestrator coordinating the generation backend."""

from __future__ import annotations

import asyncio
from typing import Coroutine, Dict, Optional, Set

from loguru import logger

from ..app.models import GenerationParameters, ParsedSong
from ..app.settings import Settings
from .editor import redo_section
from .exceptions import GenerationFailure
from .stream import StreamConsumer
from .types import BackendStatus, SongSession, SongwritingBackend

FALLBACK_ARTIST = "Various Artists"
EMPTY_SUGGESTION_ARTIST = "The Weeknd"


class SongComposer:
    """Runs song streams, section rewrites and cover art against one backend."""

    def __init__(self, settings: Settings, backend: SongwritingBackend) -> None:
        self._settings = settings
        self._backend = backend
        self._backend_status: Dict[str, BackendStatus] = {}
        self._background: Set[asyncio.Task[None]] = set()

    async def warmup(self) -> Dict[str, BackendStatus]:
        status = await self._backend.warmup()
        self._backend_status[status.name] = status
        return dict(self._backend_status)

    def backend_status(self) -> Dict[str, BackendStatus]:
        return dict(self._backend_status)

    async def compose(
        self,
        session: SongSession,
        parameters: GenerationParameters,
        generation_id: int,
    ) -> ParsedSong:
        def on_title(title: str) -> None:
            if not self._settings.cover_art_enabled:
                return
            logger.info("session {} titled {!r}; requesting cover art", session.session_id, title)
            self._spawn(self._render_cover_art(session, title, parameters, generation_id))

        consumer = StreamConsumer(on_title=on_title)
        chunks = self._backend.stream_song(parameters)
        return await consumer.consume(session, chunks, generation_id)

    async def redo(
        self,
        label: str,
        transcript: str,
        parameters: GenerationParameters,
    ) -> str:
        return await redo_section(label, transcript, parameters, self._backend)

    async def suggest_artist(self, genre: str) -> str:
        try:
            suggestion = await self._backend.suggest_artist(genre)
        except GenerationFailure as exc:
            logger.warning("artist suggestion failed for {}: {}", genre, exc)
            return FALLBACK_ARTIST
        return suggestion.strip() or EMPTY_SUGGESTION_ARTIST

    async def drain(self) -> None:
        """Wait for outstanding background work such as cover art."""
        while True:
            pending = [task for task in self._background if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def _render_cover_art(
        self,
        session: SongSession,
        title: str,
        parameters: GenerationParameters,
        generation_id: int,
    ) -> None:
        try:
            image: Optional[str] = await self._backend.generate_cover_art(
                title, parameters.genre, parameters.mood
            )
        except GenerationFailure as exc:
            logger.warning("cover art failed for session {}: {}", session.session_id, exc)
            return
        if image is None:
            logger.info("cover art for session {} returned no image", session.session_id)
            return
        if not session.is_current(generation_id):
            logger.debug("dropping stale cover art for session {}", session.session_id)
            return
        session.attach_cover_art(image)
        session.publish()

    def _spawn(self, coro: Coroutine[None, None, None]) -> None:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._finish_background)

    def _finish_background(self, task: asyncio.Task[None]) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error("background task failed")
