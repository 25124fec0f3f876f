# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Shared FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db
from src.middleware.auth import get_current_user
from src.services.booking_service import BookingService
from src.services.listing_directory import ListingDirectory, build_listing_directory
from src.utils.clock import Clock, get_clock


def get_current_user_id(request: Request) -> str:
    """Get the authenticated user for an endpoint.

    Args:
        request: Current HTTP request.

    Returns:
        User ID set by the authentication middleware.

    Raises:
        HTTPException: 401 if the request carries no identity.
    """
    user_id = get_current_user(request)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user_id


def get_listing_directory(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ListingDirectory:
    """Get the configured listing directory for this request."""
    return build_listing_directory(db)


def get_booking_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    listing_directory: Annotated[ListingDirectory, Depends(get_listing_directory)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> BookingService:
    """Get a booking service bound to the request's session."""
    return BookingService(db, listing_directory, clock)


CurrentUser = Annotated[str, Depends(get_current_user_id)]
