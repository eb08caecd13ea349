"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .config import Settings, settings as default_settings
from .api.router import api_router
from .services.processed_store import ProcessedStore
from .services.triage_manager import TriageManager
from .sources import BaseMediaSource, get_all_sources, get_source_class

# Configure logging for our modules
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(name)s: %(message)s")
logging.getLogger("swipe_cleaner").setLevel(logging.DEBUG)

logger = logging.getLogger(__name__)


def build_source(settings: Settings) -> BaseMediaSource:
    source_cls = get_source_class(settings.media_source)
    if source_cls is None:
        known = ", ".join(sorted(get_all_sources()))
        raise ValueError(f"Unknown media source: {settings.media_source} (available: {known})")
    return source_cls.from_settings(settings)


def build_manager(settings: Settings, source: Optional[BaseMediaSource] = None) -> TriageManager:
    store = ProcessedStore(
        path=settings.state_file,
        limit=settings.processed_limit,
        key=settings.processed_key,
    )
    return TriageManager(
        source or build_source(settings),
        store,
        delete_delay=settings.delete_delay_seconds,
        batch_threshold=settings.delete_batch_threshold,
        notice_dismiss=settings.notice_dismiss_seconds,
    )


def create_app(
    settings: Optional[Settings] = None,
    source: Optional[BaseMediaSource] = None,
) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        manager = build_manager(settings, source)
        app.state.settings = settings
        app.state.triage = manager
        await manager.bootstrap()
        logger.info(f"Serving library from {manager.source.name} ({manager.snapshot().queue_length} queued)")
        try:
            yield
        finally:
            # Same as the client going to background: nothing decided stays uncommitted
            await manager.flush_pending_deletes_if_needed()
            await manager.close()

    app = FastAPI(
        title="swipe-cleaner",
        version="0.1.0",
        description="Swipe-to-triage photo library cleaner",
        lifespan=lifespan,
    )
    app.include_router(api_router, prefix="/api")
    return app
