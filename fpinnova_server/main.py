# Copyright (C) 2024 FP Innova Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""FP Innova Server - Main FastAPI application."""

import asyncio
import logging
import time
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from fpinnova_server.database import init_db
from fpinnova_server.routers import admin, auth, codes, settings as settings_router

logger = logging.getLogger(__name__)


def _get_cors_origins() -> list[str]:
    from fpinnova_server.config import settings
    raw = (settings.cors_origins or "*").strip()
    if raw == "*":
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


async def code_cleanup_loop(interval_minutes: float) -> None:
    """Retire stale verification codes every interval_minutes."""
    from fpinnova_server.services.verification_codes import get_code_registry

    registry = get_code_registry()
    while True:
        await asyncio.sleep(interval_minutes * 60)
        try:
            await registry.cleanup()
        except Exception as e:
            logger.warning("Scheduled code cleanup failed: %s", e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    from fpinnova_server.config import settings

    await init_db()
    cleanup_task = None
    if settings.code_cleanup_interval_minutes > 0:
        cleanup_task = asyncio.create_task(code_cleanup_loop(settings.code_cleanup_interval_minutes))
        logger.info("Code cleanup scheduled every %s minutes", settings.code_cleanup_interval_minutes)
    yield
    if cleanup_task:
        cleanup_task.cancel()
        with suppress(asyncio.CancelledError):
            await cleanup_task


app = FastAPI(
    title="FP Innova Server",
    description="Administration API for the FP Innova project awards",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status, and duration for each request (no body or auth headers)."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, duration_ms)
    return response

# API v1
app.include_router(auth.router, prefix="/api/v1")
app.include_router(codes.router, prefix="/api/v1")
app.include_router(settings_router.router, prefix="/api/v1")
app.include_router(admin.router, prefix="/api/v1")


@app.get("/")
async def root():
    """Health check / API info."""
    return {
        "name": "FP Innova Server",
        "version": "0.1.0",
        "api": "/api/v1",
        "docs": "/api/docs",
    }


@app.get("/api/v1/health")
async def health():
    """Health check for load balancers."""
    return {"status": "ok"}
