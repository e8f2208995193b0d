from __future__ import annotations

import asyncio
from typing import Dict

from loguru import logger

from ..services.composer import SongComposer
from ..services.exceptions import (
    INTERRUPTED_MESSAGE,
    TOPIC_REQUIRED_MESSAGE,
    GenerationFailure,
    InvalidParametersError,
    SessionBusyError,
)
from ..services.types import GENERATE_MARKER, SongSession
from .models import GenerationParameters, SessionSummary
from .sessions import SessionManager


class JobManager:
    """Coordinates generation and redo jobs for songwriting sessions.

    A session runs at most one job at a time; the job holds the session's
    busy marker until it finishes, successfully or not.
    """

    def __init__(self, composer: SongComposer, sessions: SessionManager) -> None:
        self._composer = composer
        self._sessions = sessions
        self._tasks: Dict[str, asyncio.Task[None]] = {}
        self._lock = asyncio.Lock()

    async def start_generation(self, session_id: str) -> SessionSummary:
        session = await self._sessions.get(session_id)
        if session.busy is not None:
            raise SessionBusyError(session_id, session.busy)
        if not session.parameters.topic.strip():
            session.fail(TOPIC_REQUIRED_MESSAGE)
            session.publish()
            raise InvalidParametersError(TOPIC_REQUIRED_MESSAGE)

        session.claim(GENERATE_MARKER)
        parameters = session.parameters.model_copy(deep=True)
        generation_id = session.begin_generation()
        logger.info(
            "session {} generation {} started (genre={}, mood={})",
            session_id,
            generation_id,
            parameters.genre,
            parameters.mood,
        )
        session.publish()

        task = asyncio.create_task(self._execute_generation(session, parameters, generation_id))
        async with self._lock:
            self._tasks[session_id] = task
        return self._sessions.to_summary(session)

    async def redo_section(self, session_id: str, label: str) -> SessionSummary:
        session = await self._sessions.get(session_id)
        if not session.claim(label):
            raise SessionBusyError(session_id, session.busy)
        session.publish()

        generation_id = session.generation_id
        parameters = session.parameters.model_copy(deep=True)
        try:
            updated = await self._composer.redo(label, session.transcript, parameters)
            if session.is_current(generation_id) and updated != session.transcript:
                session.replace_transcript(updated)
                session.error = None
                logger.info("session {} redid section {!r}", session_id, label)
        except GenerationFailure as exc:
            session.fail(f"Failed to redo section: {exc}")
            logger.error("session {} redo of {!r} failed: {}", session_id, label, exc)
        finally:
            session.release(label)
            session.publish()
        return self._sessions.to_summary(session)

    async def join(self, session_id: str) -> None:
        """Wait until the session's generation job and its follow-ups are done."""
        async with self._lock:
            task = self._tasks.get(session_id)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
        await self._composer.drain()

    async def is_running(self, session_id: str) -> bool:
        async with self._lock:
            task = self._tasks.get(session_id)
        return task is not None and not task.done()

    async def _execute_generation(
        self,
        session: SongSession,
        parameters: GenerationParameters,
        generation_id: int,
    ) -> None:
        try:
            parsed = await self._composer.compose(session, parameters, generation_id)
        except GenerationFailure as exc:
            if session.is_current(generation_id):
                session.fail(str(exc) or INTERRUPTED_MESSAGE)
            logger.error(
                "session {} generation {} interrupted: {}",
                session.session_id,
                generation_id,
                exc,
            )
        except Exception:  # noqa: BLE001
            if session.is_current(generation_id):
                session.fail(INTERRUPTED_MESSAGE)
            logger.exception("unexpected error during generation for {}", session.session_id)
        else:
            logger.info(
                "session {} generation {} complete ({} sections)",
                session.session_id,
                generation_id,
                len(parsed.sections),
            )
        finally:
            session.end_generation(generation_id)
            session.publish()
            async with self._lock:
                if self._tasks.get(session.session_id) is asyncio.current_task():
                    self._tasks.pop(session.session_id, None)
