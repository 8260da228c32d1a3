"""Main FastAPI application for the auth service."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from unixora.config import get_settings
from unixora.config.database import init_db
from unixora.auth.api.auth import router as auth_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create database tables on startup."""
    logger.info("Auth service starting up")
    init_db()
    yield
    logger.info("Auth service shutting down")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        description=settings.app_description,
        version=settings.app_version,
        lifespan=lifespan
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router, prefix="/api")

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return "Auth service running"

    @app.get("/health")
    async def health() -> dict:
        """Health check."""
        return {"status": "ok"}

    return app


# Create the app instance
app = create_app()
