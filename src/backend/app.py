from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from src.shared.clock import Clock, utc_now

from .index import MediaIndex, create_index_router
from .settings.models import MediaFilerSettings
from .sweeper import Sweeper


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def create_app(settings: MediaFilerSettings, *, clock: Clock = utc_now) -> FastAPI:
    """
    Build the web app for the given settings.

    Markers left by a previous run are recovered before the app is returned,
    so an unreadable root directory fails here (ScanError) rather than on the
    first request. The sweeper runs for the lifetime of the app.
    """
    frontend_dir = _repo_root() / "src" / "frontend"

    index = MediaIndex(settings, clock=clock)
    index.recover()
    sweeper = Sweeper(store=index.store, archive_dir=settings.archive_dir, clock=clock)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        sweeper.start()
        try:
            yield
        finally:
            await sweeper.stop()

    app = FastAPI(title="mediafiler", lifespan=lifespan)
    app.include_router(create_index_router(index=index, frontend_dir=frontend_dir))

    app.state.settings = settings
    app.state.index = index
    app.state.sweeper = sweeper

    app.mount("/asset", StaticFiles(directory=str(frontend_dir / "asset")), name="asset")
    return app
