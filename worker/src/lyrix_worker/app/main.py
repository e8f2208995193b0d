from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional, cast

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from ..services.composer import SongComposer
from ..services.gemini import GeminiService
from ..services.library import LibraryStore, SqliteLibraryStore
from ..services.types import SongwritingBackend
from .jobs import JobManager
from .library import LibraryManager
from .routes import router
from .sessions import SessionManager
from .settings import Settings, get_settings


def create_app(
    settings: Optional[Settings] = None,
    *,
    backend: Optional[SongwritingBackend] = None,
    store: Optional[LibraryStore] = None,
) -> FastAPI:
    """Create and configure FastAPI instance."""
    settings = settings or get_settings()
    backend = backend or GeminiService(settings=settings)
    store = store or SqliteLibraryStore(cast(Path, settings.library_path))
    composer = SongComposer(settings, backend)
    sessions = SessionManager()
    job_manager = JobManager(composer, sessions)
    library_manager = LibraryManager(store, sessions)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            statuses = await composer.warmup()
            logger.info(
                "Worker warmup complete: {}",
                {name: status.ready for name, status in statuses.items()},
            )
        except Exception:  # noqa: BLE001
            logger.exception("Worker warmup failed")
        yield
        await composer.drain()
        logger.info("Worker shutting down")

    app = FastAPI(title="Lyrix Worker", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.composer = composer
    app.state.session_manager = sessions
    app.state.job_manager = job_manager
    app.state.library_manager = library_manager

    if settings.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(router)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("lyrix_worker.app.main:app", host="127.0.0.1", port=8000)
