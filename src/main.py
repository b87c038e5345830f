"""
Application factory and HTTPS entrypoint.

    lobby-server                      # console script, same as `python -m src.main`
    uvicorn src.main:app --reload     # plain HTTP for local development only
"""

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.routes import router as lobby_router
from src.core.config import Settings, get_settings
from src.core.exceptions import (
    DuplicateLobbyError,
    InvalidRequestError,
    LobbyError,
    LobbyNotFoundError,
    NotJoinableError,
    RepositoryError,
)
from src.core.logging_config import configure_logging
from src.db.database import build_engine, build_session_factory, init_db
from src.services.expiry_sweeper import ExpirySweeper

logger = logging.getLogger(__name__)

# Exception type -> HTTP status. Anything else becomes a 500.
ERROR_STATUS: dict[type[LobbyError], int] = {
    InvalidRequestError: 400,
    LobbyNotFoundError: 404,
    NotJoinableError: 404,
    DuplicateLobbyError: 409,
    RepositoryError: 500,
}
SERVER_ERROR = "Internal server error"
# Empty strings count as missing, like absent keys
MISSING_ERROR_TYPES = {"missing", "string_too_short"}


class TLSConfigurationError(RuntimeError):
    """Certificate or key could not be loaded. The server must not start without them."""


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI app. The engine, session factory and sweeper live on app.state for the app's lifetime."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings)
        engine = build_engine(settings)
        init_db(engine)
        app.state.engine = engine
        app.state.session_factory = build_session_factory(engine)
        logger.info("Connected to database")

        sweeper = ExpirySweeper(
            app.state.session_factory,
            stale_after_seconds=settings.STALE_AFTER_SECONDS,
            interval_seconds=settings.SWEEP_INTERVAL_SECONDS,
        )
        app.state.sweeper = sweeper
        if settings.SWEEPER_ENABLED:
            sweeper.start()

        yield

        sweeper.stop()
        engine.dispose()
        logger.info("Shut down")

    app = FastAPI(title=settings.APP_NAME, version=settings.VERSION, lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log method, path, status and duration of every request."""
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    @app.exception_handler(LobbyError)
    async def lobby_error_handler(request: Request, exc: LobbyError) -> JSONResponse:
        status_code = next(
            (code for kind, code in ERROR_STATUS.items() if isinstance(exc, kind)), 500
        )
        if status_code >= 500:
            # Store failures look the same to callers as any other server error
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
            return JSONResponse(status_code=status_code, content={"error": SERVER_ERROR})
        return JSONResponse(status_code=status_code, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Missing / blank fields are a 400 for our clients, not FastAPI's default 422
        missing = sorted(
            {
                err["loc"][-1]
                for err in exc.errors()
                if err.get("type") in MISSING_ERROR_TYPES
                and err.get("loc")
                and isinstance(err["loc"][-1], str)
            }
        )
        if missing:
            message = f"Missing required fields: {', '.join(missing)}"
        else:
            message = "Invalid request body"
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": SERVER_ERROR})

    @app.get("/health", tags=["system"])
    def health_check() -> dict[str, str]:
        return {"status": "ok", "app": settings.APP_NAME, "version": settings.VERSION}

    app.include_router(lobby_router, prefix=settings.API_PREFIX)
    return app


def load_tls_credentials(settings: Settings) -> tuple[Path, Path]:
    """Return (keyfile, certfile) if both are readable, raise TLSConfigurationError otherwise."""
    keyfile = Path(settings.SSL_KEYFILE)
    certfile = Path(settings.SSL_CERTFILE)
    for path in (keyfile, certfile):
        try:
            with path.open("rb") as handle:
                handle.read(1)
        except OSError as exc:
            raise TLSConfigurationError(
                f"Cannot read {path}: make sure {keyfile} and {certfile} exist."
            ) from exc
    return keyfile, certfile


def run() -> None:
    """Serve the API over HTTPS only. Refuses to start without certificate and key."""
    settings = get_settings()
    configure_logging(settings)
    try:
        keyfile, certfile = load_tls_credentials(settings)
    except TLSConfigurationError as exc:
        logger.error("SSL certificate error: %s", exc)
        raise SystemExit(1) from exc
    logger.info("SSL certificates loaded")
    logger.info("HTTPS server running on port %d", settings.PORT)
    uvicorn.run(
        create_app(settings),
        host=settings.HOST,
        port=settings.PORT,
        ssl_keyfile=str(keyfile),
        ssl_certfile=str(certfile),
        log_config=None,
    )


app = create_app()


if __name__ == "__main__":
    run()
