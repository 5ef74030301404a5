"""FastAPI application factory and lifespan management."""
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from songvault.api.middleware import RequestLoggingMiddleware
from songvault.api.routes import health, songs
from songvault.core.config import Settings, get_settings
from songvault.core.exceptions import SongVaultError
from songvault.core.logging import get_logger, setup_logging
from songvault.services.coordinator import SongCoordinator
from songvault.storage import create_object_store
from songvault.storage.base import ObjectStore
from songvault.storage.keys import PUBLIC_URL_PATH
from songvault.storage.metadata import MetadataStore

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown."""
    settings: Settings = app.state.settings

    # Startup
    setup_logging(settings.log_level, settings.log_json or settings.is_production)
    logger.info(
        "Starting SongVault",
        version=settings.app_version,
        environment=settings.environment.value,
        storage_backend=settings.storage_backend,
    )

    if app.state.object_store is None:
        app.state.object_store = create_object_store(settings)
    if app.state.metadata_store is None:
        app.state.metadata_store = MetadataStore(settings.database_url)
    await app.state.metadata_store.initialize()

    app.state.coordinator = SongCoordinator.from_settings(
        app.state.object_store,
        app.state.metadata_store,
        settings,
    )
    app.state.ready = True

    yield

    # Shutdown
    logger.info("Shutting down SongVault")
    app.state.ready = False
    await app.state.object_store.close()
    await app.state.metadata_store.close()


def create_app(
    settings: Settings | None = None,
    object_store: ObjectStore | None = None,
    metadata_store: MetadataStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Stores not passed in are built from settings at startup.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Song upload and catalogue API over an object store and a metadata store",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.object_store = object_store
    app.state.metadata_store = metadata_store
    app.state.coordinator = None
    app.state.ready = False

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestLoggingMiddleware)

    # Exception handlers
    @app.exception_handler(SongVaultError)
    async def songvault_error_handler(
        request: Request, exc: SongVaultError
    ) -> JSONResponse:
        logger.error("Application error", error=exc.message, details=exc.details)
        content: dict[str, Any] = {"message": exc.message}
        if exc.details:
            content["details"] = exc.details
        return JSONResponse(status_code=exc.status_code, content=content)

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(songs.router, prefix=settings.songs_prefix, tags=["Songs"])

    # Local blobs are served by the app so their public URLs resolve
    if settings.storage_backend == "local":
        app.mount(
            PUBLIC_URL_PATH,
            StaticFiles(directory=settings.storage_path, check_dir=False),
            name="objects",
        )

    return app


# Application instance
app = create_app()


def run() -> None:
    """Run the application with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "songvault.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
