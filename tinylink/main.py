"""
FastAPI Application Entry Point

This module builds the FastAPI application and configures:
- API routes
- Middleware (logging, CORS)
- Store lifecycle: opened on startup, disposed on shutdown
- Application metadata

Design Decisions:
- create_app() takes explicit Settings so tests can point it at their own database
- The store lives on app.state and is injected into endpoints, never imported as a global
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tinylink.api import endpoints
from tinylink.core.setting import Settings, settings
from tinylink.db.store import SQLModelLinkStore
from tinylink.middleware.logging import add_logging_middleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the link store for the lifetime of the application."""
    app_settings: Settings = app.state.settings

    store = SQLModelLinkStore.from_settings(app_settings)
    if app_settings.AUTO_CREATE_SCHEMA:
        await store.create_schema()
    app.state.store = store
    logger.info(f"Link store opened ({store.adapter.get_dialect_name()})")

    try:
        yield
    finally:
        await store.close()
        logger.info("Link store closed")


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or settings

    logging.basicConfig(
        level=app_settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    # Title and description are used in auto-generated API documentation
    app = FastAPI(
        title="TinyLink",
        description="Short link service with click tracking",
        version="1.0.0",
        docs_url="/docs",  # Swagger UI documentation
        redoc_url="/redoc",  # ReDoc documentation
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    add_logging_middleware(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health endpoints defined before router to match before catch-all route
    @app.get("/", tags=["Health"])
    async def root():
        """Root endpoint for health checks."""
        return {
            "message": "TinyLink",
            "version": "1.0.0",
            "docs": "/docs"
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint for monitoring."""
        return {"status": "healthy"}

    app.include_router(endpoints.router, tags=["Links"])

    return app


app = create_app()
