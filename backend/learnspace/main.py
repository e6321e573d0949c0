"""
FastAPI application for LearnSpace.

Run with: uvicorn learnspace.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from learnspace.core.config import settings
from learnspace.core.database import SessionLocal, create_all_tables, init_db
from learnspace.core.errors import register_exception_handlers
from learnspace.core.logging_config import configure_logging
from learnspace.routers import api_router


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create tables and seed default data on startup."""
    configure_logging()
    create_all_tables()

    db = SessionLocal()
    try:
        init_db(db)
    finally:
        db.close()

    logger.info(f"{settings.PROJECT_NAME} {settings.VERSION} started")
    yield


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured app instance
    """
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description=settings.DESCRIPTION,
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        lifespan=lifespan,
    )

    # An empty origin list allows every origin
    origins = [str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=bool(origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_V1_STR)

    return app


# Default app instance for uvicorn
app = create_app()
