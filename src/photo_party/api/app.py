"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from photo_party.api.game import router as game_router
from photo_party.api.photos import router as photos_router
from photo_party.api.users import router as users_router
from photo_party.app_logging import configure_logging
from photo_party.containers import AppContainer
from photo_party.domain.errors import PhotoPartyError, StorageError, ValidationError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        settings = app.state.container.settings
        logger.info(
            "Serving photos from %s with the %s backend",
            settings.upload_dir.resolve(),
            settings.storage_backend,
        )
        yield

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(PhotoPartyError)
    async def domain_error(_request: Request, exc: PhotoPartyError) -> JSONResponse:
        message = exc.message
        if isinstance(exc, StorageError):
            logger.error("Storage failure", exc_info=exc)
            message = _storage_message(container, exc)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.kind, "message": message},
        )

    @app.exception_handler(RequestValidationError)
    async def request_error(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=ValidationError.status_code,
            content={"error": ValidationError.kind, "message": _first_error(exc)},
        )

    app.include_router(users_router)
    app.include_router(photos_router)
    app.include_router(game_router)

    @app.get("/health")
    async def health() -> dict[str, bool]:
        """Simple health check endpoint."""
        return {"ok": True}

    return app


def _storage_message(container: AppContainer, exc: StorageError) -> str:
    """Hide storage details outside local development."""
    if container.settings.environment == "local":
        cause = exc.__cause__
        detail = f"{type(cause).__name__}: {cause}" if cause else exc.message
        return f"internal error (debug: {detail})"
    return "internal error"


def _first_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid")
    return f"{location}: {message}" if location else message
