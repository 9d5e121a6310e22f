"""
FastAPI application for Quill.

Users and posts behind role-based access control. This is the HTTP
surface; authorization decisions live in quill.auth.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quill.api.posts import router as posts_router
from quill.api.users import router as users_router
from quill.auth.routes import router as auth_router
from quill.config import get_settings
from quill.integrations.sentry import init_sentry
from quill.seed import seed_demo_data
from quill.storage import create_local_storage

logger = logging.getLogger(__name__)


def configure_logging(level_name: str) -> None:
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO

    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
    logging.getLogger("quill").setLevel(level)


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup app resources."""
    settings = get_settings()
    configure_logging(settings.log_level)

    # Error tracking (Sentry)
    if init_sentry():
        logger.info("Sentry error tracking enabled")

    # Storage
    app.state.storage = create_local_storage()

    if settings.seed_demo_data:
        await seed_demo_data(app.state.storage)

    logger.info(f"Quill API starting in {settings.environment} mode")

    yield

    logger.info("Quill API shutting down")


# =============================================================================
# App Setup
# =============================================================================


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Users and posts with role-based access control",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router, prefix=settings.api_prefix)
app.include_router(posts_router, prefix=settings.api_prefix)
app.include_router(users_router, prefix=settings.api_prefix)


# =============================================================================
# Health Check
# =============================================================================


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "quill-api"}
