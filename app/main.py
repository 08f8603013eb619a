"""
Main FastAPI Application

This is the entry point for the web process.

Usage:
    # Development
    uvicorn app.main:app --reload --port 3000

    # Container (see Dockerfile)
    uvicorn app.main:app --host 0.0.0.0 --port 3000
"""

import logging
from typing import Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.main import api_router
from app.config import get_settings
from app.db.connection import Database
from app.db.errors import (
    DatabaseError,
    DatabaseNotConfiguredError,
    DatabaseUnavailableError,
)

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging from LOG_LEVEL."""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _make_lifespan(database: Database):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        Opens the pool on startup and closes it on shutdown. The web process
        is started after the database container but not after it is ready,
        so a failed connect is logged and retried on the first request.
        """
        configure_logging()
        app.state.database = database
        logger.info("Starting web process")

        try:
            await database.connect()
            logger.info("Connected to database")
        except DatabaseError as e:
            logger.warning("Database not available at startup: %s", e)

        yield

        logger.info("Shutting down...")
        await database.close()
        logger.info("Cleanup complete")

    return lifespan


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        database: Handle used by the routers. Defaults to one on the shared pool.

    Returns:
        FastAPI application
    """
    settings = get_settings()
    database = database or Database()

    app = FastAPI(
        title=settings.app_title,
        version="0.1.0",
        lifespan=_make_lifespan(database),
    )
    # Also set here so requests served without running the lifespan see it
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DatabaseNotConfiguredError)
    async def database_not_configured_handler(
        request: Request, exc: DatabaseNotConfiguredError
    ) -> JSONResponse:
        logger.error("Request to %s needs a database: %s", request.url.path, exc)
        return JSONResponse(
            status_code=503,
            content={"detail": "Database is not configured"},
        )

    @app.exception_handler(DatabaseUnavailableError)
    async def database_unavailable_handler(
        request: Request, exc: DatabaseUnavailableError
    ) -> JSONResponse:
        logger.error("Database unavailable on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=503,
            content={"detail": "Database is unavailable"},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unhandled exceptions: log and return 500 with safe message."""
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        detail = "Internal server error"
        if settings.debug:
            detail = f"Internal server error: {exc}"
        return JSONResponse(
            status_code=500,
            content={"detail": detail},
        )

    app.include_router(api_router)

    return app


# Create the app instance
app = create_app()


# Development server entry point
if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
