# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""FastAPI application entry point for StayLedger."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src import __version__
from src.api import bookings, health, ical, listings
from src.config import get_settings
from src.middleware.auth import AuthenticationMiddleware
from src.middleware.error_handler import (
    ErrorHandlerMiddleware,
    register_exception_handlers,
)
from src.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan handler for startup/shutdown events.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    setup_logging()

    settings = get_settings()
    app.state.settings = settings
    if settings.listing_directory_url:
        logger.info("Using remote listing directory at %s", settings.listing_directory_url)
    else:
        logger.info("Using local listing directory")

    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application.
    """
    settings = get_settings()

    app = FastAPI(
        title="StayLedger",
        description="Booking service for a property-rental marketplace",
        version=__version__,
        docs_url="/docs" if settings.standalone_mode else None,
        redoc_url="/redoc" if settings.standalone_mode else None,
        lifespan=lifespan,
    )

    # Add middleware (order matters - last added is outermost)
    app.add_middleware(AuthenticationMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(ical.router)
    app.include_router(bookings.router)
    app.include_router(listings.router)

    return app


# Application instance
app = create_app()
