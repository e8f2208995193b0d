from __future__ import annotations

from typing import List, Optional

from loguru import logger

from ..services.exceptions import (
    NotSignedInError,
    PersistenceFailed,
    SessionBusyError,
    UnknownSongError,
)
from ..services.library import LibraryStore
from ..services.parser import parse_song
from ..services.types import GENERATE_MARKER, LOAD_MARKER, SongSession
from .models import SavedSong, SongSnapshot, UserIdentity
from .sessions import SessionManager

DEFAULT_TITLE = "Untitled Masterpiece"
SAVE_FAILED_MESSAGE = "Failed to save song to library."
DELETE_FAILED_MESSAGE = "Failed to delete song from library."


class LibraryManager:
    """Identity-scoped access to a session owner's saved songs."""

    def __init__(self, store: LibraryStore, sessions: SessionManager) -> None:
        self._store = store
        self._sessions = sessions

    async def sign_in(self, session_id: str, identity: UserIdentity) -> SongSession:
        session = await self._sessions.get(session_id)
        session.user = identity.model_copy()
        logger.info("session {} signed in as {}", session_id, identity.user_id)
        await self._refresh(session)
        return session

    async def sign_out(self, session_id: str) -> SongSession:
        session = await self._sessions.get(session_id)
        session.user = None
        session.library = []
        session.publish()
        return session

    async def refresh(self, session_id: str) -> List[SavedSong]:
        session = await self._sessions.get(session_id)
        self._require_user(session)
        await self._refresh(session)
        return list(session.library)

    async def save(self, session_id: str) -> Optional[SavedSong]:
        session = await self._sessions.get(session_id)
        user = self._require_user(session)
        if session.streaming:
            raise SessionBusyError(session_id, session.busy or GENERATE_MARKER)
        if not session.transcript:
            logger.debug("session {} has nothing to save", session_id)
            return None

        parsed = parse_song(session.transcript)
        snapshot = SongSnapshot(
            user_id=user.user_id,
            title=parsed.title or DEFAULT_TITLE,
            lyrics=session.transcript,
            style_tag=parsed.style_tag,
            cover_art=session.cover_art,
            parameters=session.parameters.model_copy(deep=True),
        )
        try:
            song = await self._store.save(snapshot)
        except PersistenceFailed as exc:
            logger.error("session {} save failed: {}", session_id, exc)
            session.fail(SAVE_FAILED_MESSAGE)
            session.publish()
            return None
        await self._refresh(session)
        return song

    async def delete(self, session_id: str, song_id: str) -> bool:
        session = await self._sessions.get(session_id)
        user = self._require_user(session)
        try:
            await self._store.delete(song_id, user_id=user.user_id)
        except PersistenceFailed as exc:
            logger.error("session {} delete of {} failed: {}", session_id, song_id, exc)
            session.fail(DELETE_FAILED_MESSAGE)
            session.publish()
            return False
        session.library = [song for song in session.library if song.id != song_id]
        session.publish()
        return True

    async def load(self, session_id: str, song_id: str) -> SongSession:
        session = await self._sessions.get(session_id)
        user = self._require_user(session)
        if not session.claim(LOAD_MARKER):
            raise SessionBusyError(session_id, session.busy)
        try:
            song = await self._store.get(song_id, user_id=user.user_id)
            if song is None:
                raise UnknownSongError(song_id)
            session.load_song(song)
            logger.info("session {} loaded saved song {}", session_id, song_id)
        finally:
            session.release(LOAD_MARKER)
            session.publish()
        return session

    async def _refresh(self, session: SongSession) -> None:
        user = session.user
        if user is None:
            return
        try:
            songs = await self._store.list(user.user_id)
        except PersistenceFailed as exc:
            logger.warning("library refresh failed for {}: {}", user.user_id, exc)
            return
        # Sign-out may have happened while the query was in flight.
        if session.user is not None and session.user.user_id == user.user_id:
            session.library = songs
            session.publish()

    @staticmethod
    def _require_user(session: SongSession) -> UserIdentity:
        if session.user is None:
            raise NotSignedInError("sign in to use the song library")
        return session.user
