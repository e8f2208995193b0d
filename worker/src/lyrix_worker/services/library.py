"""Per-user song library persisted in SQLite."""

from __future__ import annotations

import asyncio
import sqlite3
import time
from pathlib import Path
from typing import List, Optional, Protocol
from uuid import uuid4

from loguru import logger

from ..app.models import GenerationParameters, SavedSong, SongSnapshot
from .exceptions import PersistenceFailed

_SCHEMA = """
CREATE TABLE IF NOT EXISTS songs (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    title TEXT NOT NULL,
    lyrics TEXT NOT NULL,
    style_tag TEXT NOT NULL DEFAULT '',
    cover_art TEXT,
    parameters TEXT NOT NULL,
    created_at INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS songs_by_user ON songs (user_id, created_at DESC);
"""

_COLUMNS = "id, user_id, title, lyrics, style_tag, cover_art, parameters, created_at"


class LibraryStore(Protocol):
    async def save(self, snapshot: SongSnapshot) -> SavedSong:
        ...

    async def list(self, user_id: str) -> List[SavedSong]:
        ...

    async def get(self, song_id: str, *, user_id: str) -> Optional[SavedSong]:
        ...

    async def delete(self, song_id: str, *, user_id: str) -> None:
        ...


def _now_millis() -> int:
    return int(time.time() * 1000)


class SqliteLibraryStore:
    """Document-style song records keyed by generated id and scoped by user."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._initialised = False
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def save(self, snapshot: SongSnapshot) -> SavedSong:
        song = SavedSong(
            id=uuid4().hex,
            created_at=_now_millis(),
            **snapshot.model_dump(),
        )
        await self._run(self._insert, song)
        logger.info("saved song {} for user {}", song.id, song.user_id)
        return song

    async def list(self, user_id: str) -> List[SavedSong]:
        return await self._run(self._select_for_user, user_id)

    async def get(self, song_id: str, *, user_id: str) -> Optional[SavedSong]:
        return await self._run(self._select_one, song_id, user_id)

    async def delete(self, song_id: str, *, user_id: str) -> None:
        await self._run(self._delete, song_id, user_id)
        logger.info("deleted song {} for user {}", song_id, user_id)

    async def _run(self, func, *args):
        async with self._lock:
            try:
                if not self._initialised:
                    await asyncio.to_thread(self._create_schema)
                    self._initialised = True
                return await asyncio.to_thread(func, *args)
            except sqlite3.Error as exc:
                raise PersistenceFailed(f"library store error: {exc}") from exc

    def _connect(self) -> sqlite3.Connection:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(self._path)

    def _create_schema(self) -> None:
        conn = self._connect()
        try:
            conn.executescript(_SCHEMA)
            conn.commit()
        finally:
            conn.close()

    def _insert(self, song: SavedSong) -> None:
        conn = self._connect()
        try:
            conn.execute(
                f"INSERT INTO songs ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    song.id,
                    song.user_id,
                    song.title,
                    song.lyrics,
                    song.style_tag,
                    song.cover_art,
                    song.parameters.model_dump_json(),
                    song.created_at,
                ),
            )
            conn.commit()
        finally:
            conn.close()

    def _select_for_user(self, user_id: str) -> List[SavedSong]:
        conn = self._connect()
        try:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM songs WHERE user_id = ? "
                "ORDER BY created_at DESC, rowid DESC",
                (user_id,),
            ).fetchall()
        finally:
            conn.close()
        return [self._row_to_song(row) for row in rows]

    def _select_one(self, song_id: str, user_id: str) -> Optional[SavedSong]:
        conn = self._connect()
        try:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM songs WHERE id = ? AND user_id = ?",
                (song_id, user_id),
            ).fetchone()
        finally:
            conn.close()
        return self._row_to_song(row) if row is not None else None

    def _delete(self, song_id: str, user_id: str) -> None:
        conn = self._connect()
        try:
            conn.execute(
                "DELETE FROM songs WHERE id = ? AND user_id = ?",
                (song_id, user_id),
            )
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_song(row: tuple) -> SavedSong:
        song_id, user_id, title, lyrics, style_tag, cover_art, parameters, created_at = row
        return SavedSong(
            id=song_id,
            user_id=user_id,
            title=title,
            lyrics=lyrics,
            style_tag=style_tag,
            cover_art=cover_art,
            parameters=GenerationParameters.model_validate_json(parameters),
            created_at=int(created_at),
        )
