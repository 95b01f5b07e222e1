"""FastAPI application factory."""
from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from filedrop import __version__
from filedrop.config import settings
from filedrop.domain.exceptions import InvalidRequestError, NotFoundError, StorageError
from filedrop.logging import logger
from filedrop.storage.files import ContentStore


def create_app(
    upload_dir: Path | None = None,
    public_base_url: str | None = None,
) -> FastAPI:
    store = ContentStore(upload_dir or settings.upload_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        from filedrop.infra.db import engine as engine_mod
        engine_mod.create_tables(engine_mod.engine, engine_mod.SERVER_TABLES)
        store.ensure()
        logger.info("Serving uploads from %s", store.root)
        yield

    app = FastAPI(
        title="filedrop ingestion API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.content_store = store
    app.state.public_base_url = (public_base_url or settings.PUBLIC_BASE_URL).rstrip("/")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Import routers inside create_app() to avoid circular imports at module load time
    from filedrop.api.routers.upload import router as upload_router
    from filedrop.api.routers.uploads import router as uploads_router

    app.include_router(upload_router)
    app.include_router(uploads_router)

    @app.exception_handler(NotFoundError)
    def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.message})

    @app.exception_handler(InvalidRequestError)
    def _invalid(request: Request, exc: InvalidRequestError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": exc.message})

    @app.exception_handler(StorageError)
    def _storage(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("Storage failure: %s", exc.message)
        return JSONResponse(status_code=500, content={"detail": exc.message})

    @app.get("/health", tags=["ops"])
    def health() -> dict:
        return {"status": "ok"}

    return app
