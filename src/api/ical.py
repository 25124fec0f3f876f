# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""iCal availability feed API endpoint."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_listing_directory
from src.database import get_db
from src.repositories.booking_repository import BookingRepository
from src.services.calendar_service import CalendarService
from src.services.listing_directory import ListingDirectory
from src.utils.clock import Clock, get_clock

logger = logging.getLogger(__name__)

router = APIRouter(tags=["iCal"])


def get_calendar_service(
    clock: Annotated[Clock, Depends(get_clock)],
) -> CalendarService:
    """Get calendar service using the request clock.

    Returns:
        CalendarService instance.
    """
    return CalendarService(clock=clock)


@router.get(
    "/ical/listing-{listing_id}.ics",
    response_class=Response,
    responses={
        200: {
            "content": {"text/calendar": {}},
            "description": "iCal calendar feed of reserved dates",
        },
        404: {"description": "Listing not found"},
    },
)
async def get_ical_feed(
    listing_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    listing_directory: Annotated[ListingDirectory, Depends(get_listing_directory)],
    calendar_service: Annotated[CalendarService, Depends(get_calendar_service)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> Response:
    """Get the iCal feed of a listing's reserved dates.

    Args:
        listing_id: Listing ID.
        db: Database session.
        listing_directory: Listing directory used to confirm the listing exists.
        calendar_service: Calendar service for iCal generation.
        clock: Source of today's date; past stays are omitted.

    Returns:
        iCal calendar as text/calendar response.

    Raises:
        NotFoundError: If the listing does not exist.
    """
    await listing_directory.get_listing(listing_id)

    bookings = await BookingRepository(db).get_active_for_listing(
        listing_id, from_date=clock.today()
    )
    ical_content = calendar_service.generate_ical(listing_id, bookings)
    logger.debug("Serving iCal for listing %d (%d bookings)", listing_id, len(bookings))

    return Response(
        content=ical_content,
        media_type="text/calendar",
        headers={
            "Content-Disposition": f'attachment; filename="listing-{listing_id}.ics"',
        },
    )
