# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Booking ledger: creation, lookup and lifecycle of reservations."""

import logging
from collections.abc import Sequence
from datetime import UTC, date, datetime, time, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import Settings, get_settings
from src.models.booking import Booking, BookingStatus, ReservedNight
from src.repositories.booking_repository import BookingRepository
from src.services.authorization import BookingAction, authorize
from src.services.availability_service import AvailabilityChecker, as_date
from src.services.errors import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    TooLateError,
)
from src.services.listing_directory import ListingDirectory
from src.services.pricing import compute_total
from src.utils.clock import Clock

logger = logging.getLogger(__name__)

# Allowed status changes; a status missing from the keys is terminal
TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset(
        {BookingStatus.CONFIRMED, BookingStatus.REJECTED, BookingStatus.CANCELLED}
    ),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED}),
}

# Statuses a host may set through update_status
HOST_DECISIONS = frozenset({BookingStatus.CONFIRMED, BookingStatus.REJECTED})


def can_transition(current: str, target: str) -> bool:
    """Check a status change against the booking state machine.

    Args:
        current: Current booking status.
        target: Requested status.

    Returns:
        True if the change is allowed.
    """
    try:
        allowed = TRANSITIONS.get(BookingStatus(current), frozenset())
        return BookingStatus(target) in allowed
    except ValueError:
        return False


class BookingService:
    """Service owning the booking ledger.

    Every mutation only flushes; the caller's session commits or rolls
    back the transaction.
    """

    def __init__(
        self,
        session: AsyncSession,
        listing_directory: ListingDirectory,
        clock: Clock,
        settings: Settings | None = None,
    ) -> None:
        """Initialize BookingService.

        Args:
            session: Async SQLAlchemy session.
            listing_directory: Source of listing snapshots.
            clock: Source of the current time.
            settings: Application settings. Defaults to cached settings.
        """
        self._session = session
        self._repo = BookingRepository(session)
        self._checker = AvailabilityChecker(session, listing_directory, clock)
        self._clock = clock
        self._settings = settings or get_settings()

    async def create(
        self,
        guest_id: str,
        listing_id: int,
        start_date: date | datetime,
        end_date: date | datetime,
        number_of_guests: int,
    ) -> Booking:
        """Create a pending booking.

        The availability check and the insert share one transaction, and
        the reserved-night uniqueness constraint rejects any overlapping
        booking committed concurrently.

        Args:
            guest_id: Guest making the booking.
            listing_id: Listing to book.
            start_date: Check-in date.
            end_date: Check-out date (exclusive).
            number_of_guests: Party size.

        Returns:
            The created booking.

        Raises:
            NotFoundError: If the listing does not exist.
            BookingValidationError: If dates or guest count are invalid.
            ConflictError: If the dates are already booked.
        """
        start = as_date(start_date)
        end = as_date(end_date)
        listing = await self._checker.check_availability(
            listing_id, start, end, number_of_guests
        )

        booking = Booking(
            listing_id=listing.id,
            guest_id=guest_id,
            host_id=listing.host_id,
            start_date=start,
            end_date=end,
            number_of_guests=number_of_guests,
            total_price=compute_total(listing.price_per_night, start, end),
            status=BookingStatus.PENDING,
            created_at=self._clock.now(),
        )
        booking.reserved_nights = [
            ReservedNight(listing_id=listing.id, night=night)
            for night in booking.night_dates()
        ]

        try:
            booking = await self._repo.create(booking)
        except IntegrityError as e:
            await self._session.rollback()
            logger.info(
                "Concurrent booking won listing %d for %s..%s", listing_id, start, end
            )
            raise ConflictError(
                "This property is already booked for the selected dates"
            ) from e

        logger.info(
            "Booking %d created: listing %d, guest %s, %s..%s, total %s",
            booking.id,
            listing_id,
            guest_id,
            start,
            end,
            booking.total_price,
        )
        return booking

    async def list_for_guest(
        self, guest_id: str, limit: int | None = None, offset: int = 0
    ) -> tuple[Sequence[Booking], int]:
        """List a guest's bookings, most recent first.

        Args:
            guest_id: Guest user ID.
            limit: Page size. Defaults to settings.
            offset: Number of bookings to skip.

        Returns:
            Tuple of (bookings, total count).
        """
        return await self._repo.list_for_guest(
            guest_id, limit or self._settings.default_page_size, offset
        )

    async def list_for_host(
        self, host_id: str, limit: int | None = None, offset: int = 0
    ) -> tuple[Sequence[Booking], int]:
        """List bookings on a host's listings, most recent first.

        Args:
            host_id: Host user ID.
            limit: Page size. Defaults to settings.
            offset: Number of bookings to skip.

        Returns:
            Tuple of (bookings, total count).
        """
        return await self._repo.list_for_host(
            host_id, limit or self._settings.default_page_size, offset
        )

    async def get(self, booking_id: int, requestor_id: str) -> Booking:
        """Get a booking visible to the requestor.

        Args:
            booking_id: Booking ID.
            requestor_id: Authenticated user ID.

        Returns:
            The booking.

        Raises:
            NotFoundError: If the booking does not exist.
            ForbiddenError: If the requestor is neither guest nor host.
        """
        booking = await self._get_or_raise(booking_id)
        authorize(requestor_id, booking, BookingAction.VIEW)
        return booking

    async def update_status(
        self, booking_id: int, requestor_id: str, new_status: str
    ) -> Booking:
        """Confirm or reject a pending booking.

        Args:
            booking_id: Booking ID.
            requestor_id: Authenticated user ID, must be the host.
            new_status: "confirmed" or "rejected".

        Returns:
            The updated booking.

        Raises:
            NotFoundError: If the booking does not exist.
            ForbiddenError: If the requestor is not the host.
            InvalidTransitionError: If the change is not pending to
                confirmed or rejected.
        """
        booking = await self._get_or_raise(booking_id)
        authorize(requestor_id, booking, BookingAction.UPDATE_STATUS)

        msg = f"Cannot change booking status from {booking.status} to {new_status}"
        try:
            target = BookingStatus(new_status)
        except ValueError as e:
            raise InvalidTransitionError(msg) from e
        if target not in HOST_DECISIONS or not can_transition(booking.status, target):
            raise InvalidTransitionError(msg)

        booking.status = target
        if target is BookingStatus.REJECTED:
            await self._repo.release_nights(booking)
        booking = await self._repo.update(booking)

        logger.info("Booking %d %s by host %s", booking.id, target, requestor_id)
        return booking

    async def cancel(self, booking_id: int, requestor_id: str) -> Booking:
        """Cancel a pending or confirmed booking.

        Args:
            booking_id: Booking ID.
            requestor_id: Authenticated user ID, guest or host.

        Returns:
            The cancelled booking.

        Raises:
            NotFoundError: If the booking does not exist.
            ForbiddenError: If the requestor is neither guest nor host.
            InvalidTransitionError: If the booking is rejected or cancelled.
            TooLateError: If check-in is inside the cancellation window.
        """
        booking = await self._get_or_raise(booking_id)
        authorize(requestor_id, booking, BookingAction.CANCEL)

        if not can_transition(booking.status, BookingStatus.CANCELLED):
            raise InvalidTransitionError(
                f"Cannot cancel a booking that is {booking.status}"
            )

        window = timedelta(hours=self._settings.cancellation_window_hours)
        if self.check_in_at(booking) - self._clock.now() < window:
            raise TooLateError(
                "Cannot cancel booking within "
                f"{self._settings.cancellation_window_hours} hours of check-in"
            )

        booking.status = BookingStatus.CANCELLED
        await self._repo.release_nights(booking)
        booking = await self._repo.update(booking)

        logger.info("Booking %d cancelled by %s", booking.id, requestor_id)
        return booking

    def check_in_at(self, booking: Booking) -> datetime:
        """Get the instant a booking's stay begins.

        Args:
            booking: Booking to inspect.

        Returns:
            start_date at the configured check-in hour, in UTC.
        """
        return datetime.combine(
            booking.start_date, time(hour=self._settings.check_in_hour), tzinfo=UTC
        )

    async def _get_or_raise(self, booking_id: int) -> Booking:
        booking = await self._repo.get_by_id(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")
        return booking
