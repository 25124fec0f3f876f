# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Availability checks for booking requests."""

import logging
from datetime import date, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.repositories.booking_repository import BookingRepository
from src.services.errors import BookingValidationError, ConflictError
from src.services.listing_directory import ListingDirectory, ListingSnapshot
from src.utils.clock import Clock

logger = logging.getLogger(__name__)


def as_date(value: date | datetime) -> date:
    """Drop the time of day from a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value


def ranges_overlap(start1: date, end1: date, start2: date, end2: date) -> bool:
    """Check whether two half-open date ranges share a night.

    [start1, end1) and [start2, end2) overlap iff start1 < end2 and
    start2 < end1, so ranges that only touch do not overlap.
    """
    return start1 < end2 and start2 < end1


class AvailabilityChecker:
    """Decides whether a listing can be booked for a date range.

    Reads only: the listing snapshot from the directory and the active
    bookings from the ledger.
    """

    def __init__(
        self,
        session: AsyncSession,
        listing_directory: ListingDirectory,
        clock: Clock,
    ) -> None:
        """Initialize the checker.

        Args:
            session: Async SQLAlchemy session.
            listing_directory: Source of listing snapshots.
            clock: Source of the current date.
        """
        self._bookings = BookingRepository(session)
        self._listings = listing_directory
        self._clock = clock

    async def check_availability(
        self,
        listing_id: int,
        start_date: date | datetime,
        end_date: date | datetime,
        number_of_guests: int,
    ) -> ListingSnapshot:
        """Validate a booking request against the listing and the ledger.

        Args:
            listing_id: Listing to book.
            start_date: Check-in date.
            end_date: Check-out date (exclusive).
            number_of_guests: Party size.

        Returns:
            Snapshot of the listing the request was checked against.

        Raises:
            NotFoundError: If the listing does not exist.
            BookingValidationError: If dates or guest count are invalid.
            ConflictError: If an active booking overlaps the range.
        """
        start = as_date(start_date)
        end = as_date(end_date)
        self.validate_dates(start, end)

        if number_of_guests < 1:
            raise BookingValidationError("At least one guest is required")

        listing = await self._listings.get_listing(listing_id)

        if number_of_guests > listing.max_guests:
            raise BookingValidationError(
                f"Maximum {listing.max_guests} guests allowed for this property"
            )

        overlapping = [
            booking
            for booking in await self._bookings.find_overlapping(listing_id, start, end)
            if booking.is_active
            and ranges_overlap(start, end, booking.start_date, booking.end_date)
        ]
        if overlapping:
            logger.debug(
                "Listing %d %s..%s overlaps booking %d",
                listing_id,
                start,
                end,
                overlapping[0].id,
            )
            raise ConflictError(
                "This property is already booked for the selected dates"
            )

        return listing

    def validate_dates(self, start: date, end: date) -> None:
        """Check that a stay starts today or later and lasts a night or more.

        Args:
            start: Check-in date.
            end: Check-out date (exclusive).

        Raises:
            BookingValidationError: If the range is invalid.
        """
        if start < self._clock.today():
            raise BookingValidationError("Check-in date cannot be in the past")
        if end <= start:
            raise BookingValidationError("Check-out date must be after check-in date")
