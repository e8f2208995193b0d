from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import Dict
from uuid import uuid4

from ..services.types import SongSession
from .models import GenerationParameters, SessionCreateRequest, SessionSummary


class UnknownSessionError(Exception):
    """Raised when a session lookup fails."""

    def __init__(self, session_id: str) -> None:
        super().__init__(session_id)
        self.session_id = session_id


class SessionManager:
    """Tracks songwriting sessions owned by the worker."""

    def __init__(self) -> None:
        self._sessions: Dict[str, SongSession] = {}
        self._lock = asyncio.Lock()

    async def create_session(self, payload: SessionCreateRequest) -> SongSession:
        session_id = f"session-{uuid4()}"
        now = datetime.now(tz=UTC)
        parameters = payload.parameters or GenerationParameters()
        record = SongSession(
            session_id=session_id,
            created_at=now,
            updated_at=now,
            parameters=parameters.model_copy(deep=True),
        )
        async with self._lock:
            self._sessions[session_id] = record
        return record

    async def get(self, session_id: str) -> SongSession:
        async with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise UnknownSessionError(session_id)
        return session

    async def all_summaries(self) -> list[SessionSummary]:
        async with self._lock:
            return [self.to_summary(session) for session in self._sessions.values()]

    @staticmethod
    def to_summary(record: SongSession) -> SessionSummary:
        return SessionSummary(
            session_id=record.session_id,
            created_at=record.created_at,
            updated_at=record.updated_at,
            revision=record.revision,
            parameters=record.parameters.model_copy(deep=True),
            transcript=record.transcript,
            song=record.parsed.model_copy(deep=True),
            streaming=record.streaming,
            busy=record.busy,
            cover_art=record.cover_art,
            error=record.error,
            user=record.user.model_copy() if record.user is not None else None,
            library=[song.model_copy(deep=True) for song in record.library],
        )
