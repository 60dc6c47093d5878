#!/usr/bin/env python3

"""
Main application entry point for the wrestling roster admin backend.

Architecture: FastAPI application over an injected database client and
storage client; both are created here and owned by the app lifespan.
Key Features: Startup schema/capability probing, storage bucket setup,
database error handling, CORS configuration.
"""

import errno
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.entities import championships_router, factions_router, promotions_router
from app.api.http import router as http_router
from app.api.images import router as images_router
from app.api.wrestlers import router as wrestlers_router
from app.config import Settings, get_settings
from app.db import DatabaseClient
from app.dependencies import AppServices
from app.services.storage_client import StorageClient
from app.utils.logger import setup_logger

logger = setup_logger("main")


def create_app(
    settings: Settings | None = None,
    db_client: DatabaseClient | None = None,
    storage: StorageClient | None = None,
) -> FastAPI:
    """Build the application.

    ``db_client`` and ``storage`` default to clients built from ``settings``;
    tests pass their own.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application startup...")
        client = db_client or DatabaseClient.from_settings(settings)
        storage_client = storage or StorageClient.from_settings(settings)
        try:
            await client.init_db()
            await client.check_connection()
            logger.info("Database connectivity confirmed.")

            services = await AppServices.build(settings, client, storage_client)
            await services.images.ensure_bucket()
        except Exception as e:
            logger.critical(f"Startup error: {e}")
            await client.close()
            if storage_client is not None:
                await storage_client.aclose()
            raise SystemExit(f"Startup failed: {e}") from e

        app.state.services = services
        logger.info("Roster admin API startup successful.")
        yield

        logger.info("Roster admin API shutdown...")
        if storage_client is not None:
            await storage_client.aclose()
        await client.close()
        logger.info("Shutdown complete.")

    app = FastAPI(title="Roster Admin API", lifespan=lifespan)

    @app.exception_handler(OSError)
    async def oserror_exception_handler(request: Request, exc: OSError):
        logger.error(f"OSError caught: {exc}, errno: {exc.errno}")
        if exc.errno in (errno.ETIMEDOUT, errno.ECONNREFUSED):
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"detail": settings.db_unavailable_hint},
            )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": f"An unexpected OS error occurred: {exc}"},
        )

    app.include_router(http_router)
    app.include_router(wrestlers_router)
    app.include_router(promotions_router)
    app.include_router(factions_router)
    app.include_router(championships_router)
    app.include_router(images_router)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return app


def main():
    settings = get_settings()
    host, port = settings.server_host, int(settings.server_port)
    logger.info(f"Starting roster admin API server on {host}:{port}")

    try:
        uvicorn.run(create_app(settings), host=host, port=port)
    except Exception as e:
        logger.error(f"Error starting server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
