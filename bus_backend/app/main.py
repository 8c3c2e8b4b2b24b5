"""
FastAPI Application Entry Point.

This is the main application file for the City Bus Fleet Backend.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from bus_backend.app.core.config import settings
from bus_backend.app.core.observability import ObservabilityMiddleware, configure_logging
from bus_backend.app.core.redis_client import close_redis
from bus_backend.app.api.v1.router import router as api_router
from bus_backend.app.api.v1.endpoints import realtime
from bus_backend.app.db.session import engine, Base, AsyncSessionLocal
from bus_backend.app.services.bootstrap import ensure_default_admin
from bus_backend.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    database_exception_handler,
    generic_exception_handler
)

# Import models to ensure they are registered with Base
from bus_backend.app.models.route import Route, RouteStop
from bus_backend.app.models.stop import Stop
from bus_backend.app.models.bus import Bus
from bus_backend.app.models.driver import Driver
from bus_backend.app.models.admin import Admin
from bus_backend.app.models.schedule import Schedule
from bus_backend.app.models.trip import Trip, TripStopTime
from bus_backend.app.models.announcement import Announcement
from bus_backend.app.models.passenger_report import PassengerReport
from bus_backend.app.models.audit_log import AuditLog


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Configures logging.
    2. Creates database tables on startup.
    3. Seeds the default admin when none exists.
    """
    configure_logging()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with AsyncSessionLocal() as session:
        await ensure_default_admin(session)
    yield
    await close_redis()
    await engine.dispose()


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Fleet management backend for a city bus system",
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
app.add_exception_handler(SQLAlchemyError, database_exception_handler)
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
        "version": settings.api_version,
    }


# REST API and the live-location socket
app.include_router(api_router, prefix=settings.api_prefix)
app.include_router(realtime.router)


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API documentation links
    """
    return {
        "message": "Welcome to City Bus Fleet Backend API",
        "docs": "/docs",
        "health": "/health",
        "realtime": "/ws",
    }
