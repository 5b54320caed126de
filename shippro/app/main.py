"""
FastAPI Application Entry Point.

This is the main application file for the ShipPro Backend.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from shippro.app.core.config import settings
from shippro.app.core.observability import ObservabilityMiddleware, configure_logging
from shippro.app.api.router import router as api_router
from shippro.app.db.session import engine, Base, AsyncSessionLocal
from shippro.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)
from shippro.app.services.demo_data import seed_demo_services

# Import models to ensure they are registered with Base
from shippro.app.models.service import Service  # noqa: F401
from shippro.app.models.shipment import Shipment  # noqa: F401
from shippro.app.models.tracking_event import TrackingEvent  # noqa: F401
from shippro.app.models.email_preferences import EmailPreferences  # noqa: F401
from shippro.app.models.contact_form import ContactForm  # noqa: F401

configure_logging()
logger = logging.getLogger("shippro")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Creates database tables on startup.
    2. Installs the demo catalog when SEED_DEMO_DATA is enabled.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if settings.seed_demo_data:
        async with AsyncSessionLocal() as db:
            await seed_demo_services(db)

    logger.info(f"{settings.app_name} {settings.api_version} started")
    yield
    await engine.dispose()


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Shipment tracking and logistics administration API",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
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


# Include API router
app.include_router(api_router, prefix=settings.api_prefix)
