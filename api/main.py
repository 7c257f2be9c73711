#!/usr/bin/env python3
"""
Archiver Management API - HTTP layer for PV archive admission.

This FastAPI application accepts archive requests for process variables and
runs them through the admission pipeline:
- name normalization and syntax checks
- dedup against archiving and pending PVs
- sampling policy resolution
- submission to the workflow queue and engine
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from archiving.logging_config import configure_logging

from .dependencies import authenticate_pb, get_archive_service
from .settings import get_settings

# Format: 2026-01-06T14:05:52Z [mgmt] LEVEL message
configure_logging(source="mgmt")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle - startup and shutdown."""
    settings = get_settings()

    if settings.store_backend == "pocketbase":
        if not settings.skip_pb_auth:
            await authenticate_pb()
        else:
            logger.warning("Skipping PocketBase authentication (SKIP_PB_AUTH=true)")
    logger.info(f"Config store backend: {settings.store_backend}")

    service = get_archive_service()
    await asyncio.to_thread(service.restore_pending_requests)

    yield

    engine = service.registrar.engine
    close = getattr(engine, "close", None)
    if close is not None:
        close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Archiver Management API",
        description="Admission control for PV archive requests",
        lifespan=lifespan,
    )

    settings = get_settings()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    from .routers import archive

    app.include_router(archive.router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "service": "archiver-mgmt"}

    return app


# Create app instance for uvicorn
app = create_app()
