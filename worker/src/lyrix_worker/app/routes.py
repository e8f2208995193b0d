from __future__ import annotations

from typing import AsyncIterator, Optional, cast

from fastapi import APIRouter, HTTPException, Request, Response
from fastapi.responses import StreamingResponse

from ..services.catalog import (
    GENRES,
    INSTRUMENTAL_PROFILES,
    LANGUAGES,
    MOODS,
    VOCAL_STYLES,
    quick_artists,
    search_artists,
)
from ..services.composer import SongComposer
from ..services.exceptions import (
    InvalidParametersError,
    NotSignedInError,
    PersistenceFailed,
    SessionBusyError,
    UnknownSongError,
)
from ..services.parser import clean_lyrics, parse_song
from ..services.types import SongSession
from .jobs import JobManager
from .library import LibraryManager
from .models import (
    ArtistSearchResponse,
    CatalogResponse,
    GenerationParameters,
    LyricsExport,
    RedoRequest,
    SavedSong,
    SessionCreateRequest,
    SessionSummary,
    SongUpdate,
    UserIdentity,
)
from .sessions import SessionManager, UnknownSessionError
from .settings import Settings

router = APIRouter()


def get_job_manager(request: Request) -> JobManager:
    return cast(JobManager, request.app.state.job_manager)


def get_session_manager(request: Request) -> SessionManager:
    return cast(SessionManager, request.app.state.session_manager)


def get_library_manager(request: Request) -> LibraryManager:
    return cast(LibraryManager, request.app.state.library_manager)


async def _session_or_404(request: Request, session_id: str) -> SongSession:
    try:
        return await get_session_manager(request).get(session_id)
    except UnknownSessionError as exc:
        raise HTTPException(
            status_code=404, detail=f"session {exc.session_id} not found"
        ) from exc


def _busy_conflict(exc: SessionBusyError) -> HTTPException:
    return HTTPException(status_code=409, detail=f"session busy: {exc.busy}")


@router.get("/health")
async def health(request: Request) -> dict[str, object]:
    settings = cast(Settings, request.app.state.settings)
    composer = cast(Optional[SongComposer], getattr(request.app.state, "composer", None))
    backend_status: dict[str, object] = {}
    if composer is not None:
        for name, status in composer.backend_status().items():
            backend_status[name] = status.as_dict()

    ready = bool(backend_status) and all(
        isinstance(value, dict) and value.get("ready") for value in backend_status.values()
    )
    session_summaries = await get_session_manager(request).all_summaries()
    return {
        "status": "ok",
        "text_model_id": settings.text_model_id,
        "section_model_id": settings.section_model_id,
        "image_model_id": settings.image_model_id,
        "library_path": str(settings.library_path),
        "available_backends": sorted(backend_status.keys()),
        "backend_status": backend_status,
        "backend_ready": ready,
        "session_count": len(session_summaries),
    }


@router.get("/catalog", response_model=CatalogResponse)
async def catalog() -> CatalogResponse:
    return CatalogResponse(
        genres=list(GENRES),
        moods=list(MOODS),
        vocal_styles=list(VOCAL_STYLES),
        instrumental_profiles=list(INSTRUMENTAL_PROFILES),
        languages=list(LANGUAGES),
    )


@router.get("/artists", response_model=ArtistSearchResponse)
async def artists(query: str = "", genre: Optional[str] = None) -> ArtistSearchResponse:
    return ArtistSearchResponse(
        matches=search_artists(query),
        quick_picks=quick_artists(genre) if genre else [],
    )


@router.post("/session", response_model=SessionSummary)
async def create_session(payload: SessionCreateRequest, request: Request) -> SessionSummary:
    manager = get_session_manager(request)
    session = await manager.create_session(payload)
    return manager.to_summary(session)


@router.get("/session/{session_id}", response_model=SessionSummary)
async def fetch_session(session_id: str, request: Request) -> SessionSummary:
    session = await _session_or_404(request, session_id)
    return SessionManager.to_summary(session)


@router.put("/session/{session_id}/parameters", response_model=SessionSummary)
async def update_parameters(
    session_id: str, payload: GenerationParameters, request: Request
) -> SessionSummary:
    session = await _session_or_404(request, session_id)
    if session.busy is not None:
        raise _busy_conflict(SessionBusyError(session_id, session.busy))
    session.parameters = payload.model_copy(deep=True)
    session.publish()
    return SessionManager.to_summary(session)


@router.post("/session/{session_id}/artist", response_model=SessionSummary)
async def suggest_artist(session_id: str, request: Request) -> SessionSummary:
    session = await _session_or_404(request, session_id)
    if session.busy is not None:
        raise _busy_conflict(SessionBusyError(session_id, session.busy))
    composer = cast(SongComposer, request.app.state.composer)
    suggestion = await composer.suggest_artist(session.parameters.genre)
    if session.busy is not None:
        raise _busy_conflict(SessionBusyError(session_id, session.busy))
    session.parameters = session.parameters.model_copy(update={"artist": suggestion})
    session.publish()
    return SessionManager.to_summary(session)


@router.post("/session/{session_id}/generate", response_model=SessionSummary, status_code=202)
async def generate(session_id: str, request: Request) -> SessionSummary:
    await _session_or_404(request, session_id)
    manager = get_job_manager(request)
    try:
        return await manager.start_generation(session_id)
    except SessionBusyError as exc:
        raise _busy_conflict(exc) from exc
    except InvalidParametersError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.post("/session/{session_id}/redo", response_model=SessionSummary)
async def redo(session_id: str, payload: RedoRequest, request: Request) -> SessionSummary:
    await _session_or_404(request, session_id)
    manager = get_job_manager(request)
    try:
        return await manager.redo_section(session_id, payload.label)
    except SessionBusyError as exc:
        raise _busy_conflict(exc) from exc


@router.get("/session/{session_id}/events")
async def events(session_id: str, request: Request) -> StreamingResponse:
    session = await _session_or_404(request, session_id)
    queue = session.subscribe()

    async def _stream() -> AsyncIterator[str]:
        try:
            update = session.snapshot()
            yield _format_event(update)
            while update.streaming or update.busy is not None:
                update = await queue.get()
                yield _format_event(update)
        finally:
            session.unsubscribe(queue)

    return StreamingResponse(_stream(), media_type="text/event-stream")


def _format_event(update: SongUpdate) -> str:
    return f"event: song\ndata: {update.model_dump_json()}\n\n"


@router.get("/session/{session_id}/export", response_model=LyricsExport)
async def export_lyrics(session_id: str, request: Request) -> LyricsExport:
    session = await _session_or_404(request, session_id)
    parsed = parse_song(session.transcript)
    return LyricsExport(
        title=parsed.title,
        style_tag=parsed.style_tag,
        lyrics=clean_lyrics(session.transcript),
    )


@router.post("/session/{session_id}/sign-in", response_model=SessionSummary)
async def sign_in(session_id: str, payload: UserIdentity, request: Request) -> SessionSummary:
    await _session_or_404(request, session_id)
    session = await get_library_manager(request).sign_in(session_id, payload)
    return SessionManager.to_summary(session)


@router.post("/session/{session_id}/sign-out", response_model=SessionSummary)
async def sign_out(session_id: str, request: Request) -> SessionSummary:
    await _session_or_404(request, session_id)
    session = await get_library_manager(request).sign_out(session_id)
    return SessionManager.to_summary(session)


@router.get("/session/{session_id}/library", response_model=list[SavedSong])
async def list_library(session_id: str, request: Request) -> list[SavedSong]:
    await _session_or_404(request, session_id)
    try:
        return await get_library_manager(request).refresh(session_id)
    except NotSignedInError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc


@router.post("/session/{session_id}/library", response_model=SessionSummary)
async def save_song(session_id: str, request: Request) -> SessionSummary:
    session = await _session_or_404(request, session_id)
    try:
        await get_library_manager(request).save(session_id)
    except NotSignedInError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except SessionBusyError as exc:
        raise _busy_conflict(exc) from exc
    return SessionManager.to_summary(session)


@router.delete("/session/{session_id}/library/{song_id}", status_code=204)
async def delete_song(session_id: str, song_id: str, request: Request) -> Response:
    await _session_or_404(request, session_id)
    try:
        deleted = await get_library_manager(request).delete(session_id, song_id)
    except NotSignedInError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    if not deleted:
        raise HTTPException(status_code=502, detail="library delete failed")
    return Response(status_code=204)


@router.post("/session/{session_id}/library/{song_id}/load", response_model=SessionSummary)
async def load_song(session_id: str, song_id: str, request: Request) -> SessionSummary:
    await _session_or_404(request, session_id)
    try:
        session = await get_library_manager(request).load(session_id, song_id)
    except NotSignedInError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except SessionBusyError as exc:
        raise _busy_conflict(exc) from exc
    except UnknownSongError as exc:
        raise HTTPException(status_code=404, detail=f"song {exc.song_id} not found") from exc
    except PersistenceFailed as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return SessionManager.to_summary(session)
