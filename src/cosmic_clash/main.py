import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.docs import get_redoc_html, get_swagger_ui_html
from starlette.exceptions import HTTPException as StarletteHTTPException

from cosmic_clash import __version__
from cosmic_clash.api.v1.api import api_router
from cosmic_clash.core.config import get_settings
from cosmic_clash.core.error_handler import (
    CorrelationIdMiddleware,
    ExceptionNormalizationMiddleware,
    global_exception_handler,
    setup_logging,
)
from cosmic_clash.crud.app_state import AppStateStore
from cosmic_clash.dependencies.db import build_engine, build_session_factory, init_models
from cosmic_clash.services.arena import Arena
from cosmic_clash.services.history_store import HistoryStore
from cosmic_clash.services.oracle.gemini import GeminiOracle
from cosmic_clash.services.preferences import PreferencesStore


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create storage and the arena on startup; tear both down on shutdown."""
    setup_logging()
    settings = get_settings()

    engine = build_engine()
    await init_models(engine)
    store = AppStateStore(build_session_factory(engine))

    arena = Arena(
        GeminiOracle(settings=settings),
        HistoryStore(store, capacity=settings.HISTORY_CAPACITY),
        PreferencesStore(store),
        settings,
    )
    await arena.load()
    app.state.arena = arena
    logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")
    try:
        yield
    finally:
        arena.cancel_all()
        app.state.arena = None
        await engine.dispose()
        logger.info(f"{settings.APP_NAME} shut down")


settings = get_settings()

app = FastAPI(
    title="Cosmic Clash API",
    description="Entity classification and contest orchestration engine",
    version=__version__,
    docs_url=None,  # We'll mount docs under /api/v1/docs
    redoc_url=None,
    lifespan=lifespan,
)

app.add_middleware(ExceptionNormalizationMiddleware)
app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(StarletteHTTPException, global_exception_handler)
app.add_exception_handler(RequestValidationError, global_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# Include API routes
app.include_router(api_router, prefix="/api/v1")


# Mount OpenAPI docs under /api/v1/docs and /api/v1/redoc
@app.get("/api/v1/docs", include_in_schema=False)
def custom_swagger_ui_html():
    return get_swagger_ui_html(
        openapi_url="/openapi.json", title="Cosmic Clash API Docs"
    )


@app.get("/api/v1/redoc", include_in_schema=False)
def redoc_html():
    return get_redoc_html(openapi_url="/openapi.json", title="Cosmic Clash API Redoc")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("cosmic_clash.main:app", host="0.0.0.0", port=8000, reload=True)
