"""Throwback API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers live in api/error_handlers.py
    - CORS configured from settings (not hardcoded)
    - Database initialized and the shorts dir created on startup via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Stored shorts are served from /uploads so a video's url resolves as-is
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api.error_handlers import register_error_handlers
from app.api.routes import admin_shorts, admin_users, auth, health
from app.config import get_settings
from app.infrastructure import database
from app.infrastructure.observability import setup_logging
from app.infrastructure.upload_storage import ensure_upload_dir

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    ensure_upload_dir(settings.shorts_dir)
    logger.info("Throwback API started")
    yield
    logger.info("Throwback API shutting down")
    if database.db_manager:
        await database.db_manager.dispose()


app = FastAPI(
    title="Throwback API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Routes: explicit registration
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(admin_users.router)
app.include_router(admin_users.api_router)
app.include_router(admin_shorts.router)

app.mount(
    "/uploads",
    StaticFiles(directory=settings.upload_root, check_dir=False),
    name="uploads",
)
