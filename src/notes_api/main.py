from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .exceptions import NotesError, StorageError
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware
from .repositories import Repository, get_repository
from .routers import notes as notes_router
from .routers import static as static_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "notes", "description": "CRUD operations for notes."},
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    logger.info("Server running at http://localhost:%d", settings.port)
    logger.info("Serving static files from %s", settings.static_dir)
    yield
    logger.info("Server shutting down")


def register_exception_handlers(app: FastAPI) -> None:
    """
    Render every error as {"error": "<message>"}.

    - ValidationError -> 400, NotFoundError -> 404, StorageError -> 500
    - malformed JSON bodies -> 400
    - framework HTTP errors (e.g. 405 for an unrouted method) keep their status
    - anything unexpected -> 500 with a generic message
    Internal details only ever reach the log.
    """

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        logger.error(
            "%s %s: %s | %s",
            request.method,
            request.url.path,
            exc.message,
            exc.context,
            exc_info=exc,
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(NotesError)
    async def notes_error_handler(request: Request, exc: NotesError) -> JSONResponse:
        if exc.context:
            logger.debug("%s %s: %s | %s", request.method, request.url.path, exc.message, exc.context)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.debug("Rejected request body: %s", exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unexpected error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, repository: Optional[Repository] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: configuration; read from the environment when omitted.
        repository: note storage; built from settings when omitted.

    Returns:
        A configured FastAPI instance with the notes API and the static site.
    """
    settings = settings or get_settings()
    if repository is None:
        repository = get_repository(settings)

    app = FastAPI(
        title="Notes API",
        description="Create, read, update and delete notes stored in a local SQLite database.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.repository = repository

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(notes_router.router)
    # Catch-all must come last
    app.include_router(static_router.router)
    return app


# PUBLIC_INTERFACE
def run() -> None:
    """Run the service under uvicorn using settings from the environment."""
    settings = get_settings()
    setup_logging(settings.log_level)
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
