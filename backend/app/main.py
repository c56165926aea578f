"""
FastAPI Application Entry Point.

This is the main application file for the AivoDrive fleet management backend.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError

from backend.app.api.v1.router import router as api_router
from backend.app.core.config import settings
from backend.app.core.exceptions import (
    AppException,
    app_exception_handler,
    generic_exception_handler,
    http_exception_handler,
    integrity_exception_handler,
    validation_exception_handler,
)
from backend.app.core.observability import ObservabilityMiddleware, configure_logging
from backend.app.core.redis_client import close_redis
from backend.app.db.session import Database
from backend.app.services.seeding import seed_database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Connects the database and creates missing tables.
    2. Seeds demo data when SEED_DATABASE is set.
    3. Disposes the engine and closes Redis on shutdown.
    """
    configure_logging()

    database = Database(
        settings.database_url,
        echo=settings.db_echo,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )
    await database.connect()
    await database.create_all()
    app.state.database = database

    if settings.seed_database:
        async with database.session() as session:
            await seed_database(session)

    logger.info("%s started in %s mode", settings.app_name, settings.environment)
    try:
        yield
    finally:
        await database.dispose()
        await close_redis()
        logger.info("%s stopped", settings.app_name)


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    description="Fleet management REST API: vehicles, drivers, trips, maintenance, fuel and alerts",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(IntegrityError, integrity_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        dict: Status and application information
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": "Welcome to AivoDrive API",
        "docs": "/docs",
        "health": "/health",
    }


app.include_router(api_router, prefix=settings.api_prefix)
