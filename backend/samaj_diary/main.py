"""Samaj Diary API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map SamajError to structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Outbound HTTP clients created on startup and closed on shutdown via lifespan
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from samaj_diary.api.dependencies import close_clients, init_clients
from samaj_diary.api.error_handlers import register_error_handlers
from samaj_diary.api.routes import admin, directory, health, registration
from samaj_diary.config import get_settings
from samaj_diary.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_clients(settings)
    logger.info("Samaj Diary API started")
    yield
    logger.info("Samaj Diary API shutting down")
    await close_clients()


app = FastAPI(
    title="Samaj Diary API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(directory.router)
app.include_router(registration.router)
app.include_router(admin.router)

register_error_handlers(app)

# Mounted after the API routes so /api/v1/* takes precedence
if os.path.isdir("static"):
    app.mount("/", StaticFiles(directory="static", html=True), name="static")
