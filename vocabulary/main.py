from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import Optional

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import Settings
from .logging_config import setup_logging
from .managers.cache import CacheController
from .managers.refresher import RefreshScheduler
from .routers import definitions, lists, words
from .storage import DictionaryStore, JsonDictionaryStore, MemoryDictionaryStore

logger = logging.getLogger(__name__)


def default_store(settings: Settings) -> DictionaryStore:
    if settings.dictionary_path:
        return JsonDictionaryStore(settings.dictionary_path)
    return MemoryDictionaryStore()


def create_app(settings: Optional[Settings] = None, store: Optional[DictionaryStore] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logging(settings)

    # Socket.IO server (ASGI) used to push cache change events
    sio = socketio.AsyncServer(async_mode='asgi', cors_allowed_origins=settings.cors_origins)
    cache = CacheController(store or default_store(settings), sio)
    refresher = RefreshScheduler(cache, settings.refresh_interval_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not await refresher.refresh_now():
            logger.error("Initial dictionary load failed; serving without cache")
        refresher.start()
        yield
        await refresher.stop()
        cache.clear()

    app = FastAPI(title="Vocabulary Server", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.cache = cache
    app.state.refresher = refresher
    app.state.sio = sio

    # CORS for REST
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )
    app.include_router(lists.router)
    app.include_router(words.router)
    app.include_router(definitions.router)

    @app.get('/health')
    async def health():
        snapshot = cache.current()
        return {
            'status': 'ok',
            'environment': settings.app_env,
            'loaded': cache.is_loaded(),
            'version': snapshot.version if snapshot else 0,
            'lastRefresh': refresher.stats.last_ok_ts,
        }

    # Socket.IO Events
    @sio.event
    async def connect(sid, environ, auth=None):
        await sio.emit('pong', to=sid)

    @sio.on('ping')
    async def on_ping(sid):
        await sio.emit('pong', to=sid)

    @sio.on('dictionary:status')
    async def dictionary_status(sid):
        snapshot = cache.current()
        await sio.emit('dictionary:status', {
            'loaded': snapshot is not None,
            'version': snapshot.version if snapshot else 0,
            'total': len(snapshot.entries) if snapshot else 0,
        }, to=sid)

    return app


app = create_app()

# Export ASGI app for uvicorn
application = socketio.ASGIApp(app.state.sio, other_asgi_app=app)

# For local running: uvicorn vocabulary.main:application --reload --host 0.0.0.0 --port 8000
