"""Feeds streamed song fragments into a session transcript."""

from __future__ import annotations

from typing import AsyncIterator, Callable, Optional

from loguru import logger

from ..app.models import ParsedSong
from .parser import extract_complete_title
from .types import SongSession

TitleCallback = Callable[[str], None]


class StreamConsumer:
    """Appends chunks in arrival order and re-derives the song after each one.

    ``on_title`` fires at most once per generation, as soon as the transcript
    holds a complete ``TITLE:`` line.
    """

    def __init__(self, on_title: Optional[TitleCallback] = None) -> None:
        self._on_title = on_title

    async def consume(
        self,
        session: SongSession,
        chunks: AsyncIterator[str],
        generation_id: int,
    ) -> ParsedSong:
        received = 0
        async for chunk in chunks:
            if not session.is_current(generation_id):
                logger.info(
                    "session {} moved on; dropping stale stream {}",
                    session.session_id,
                    generation_id,
                )
                break
            session.append(chunk)
            received += 1
            self._maybe_fire_title(session)
            session.publish()
        logger.debug(
            "session {} stream {} consumed {} chunks",
            session.session_id,
            generation_id,
            received,
        )
        return session.parsed

    def _maybe_fire_title(self, session: SongSession) -> None:
        if self._on_title is None or session.cover_art_requested:
            return
        title = extract_complete_title(session.transcript)
        if title is None:
            return
        session.cover_art_requested = True
        self._on_title(title)
