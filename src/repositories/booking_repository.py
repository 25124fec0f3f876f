# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Repository for Booking database operations."""

from collections.abc import Sequence
from datetime import date

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.booking import ACTIVE_STATUSES, Booking


class BookingRepository:
    """Repository for Booking CRUD operations.

    Provides async database operations for Booking entities. Callers own
    the transaction; methods only flush.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self._session = session

    async def get_by_id(self, booking_id: int) -> Booking | None:
        """Get booking by ID.

        Args:
            booking_id: Booking primary key.

        Returns:
            Booking if found, None otherwise.
        """
        result = await self._session.execute(
            select(Booking).where(Booking.id == booking_id)
        )
        return result.scalar_one_or_none()

    async def find_overlapping(
        self,
        listing_id: int,
        start_date: date,
        end_date: date,
    ) -> Sequence[Booking]:
        """Get active bookings overlapping a half-open date range.

        Ranges [s1, e1) and [s2, e2) overlap iff s1 < e2 and s2 < e1.

        Args:
            listing_id: Listing ID to filter by.
            start_date: First night of the range.
            end_date: Exclusive end of the range.

        Returns:
            Pending or confirmed bookings sharing at least one night.
        """
        result = await self._session.execute(
            select(Booking)
            .where(
                Booking.listing_id == listing_id,
                Booking.status.in_(ACTIVE_STATUSES),
                Booking.start_date < end_date,
                start_date < Booking.end_date,
            )
            .order_by(Booking.start_date)
        )
        return result.scalars().all()

    async def get_active_for_listing(
        self, listing_id: int, from_date: date | None = None
    ) -> Sequence[Booking]:
        """Get pending and confirmed bookings for a listing.

        Args:
            listing_id: Listing ID to filter by.
            from_date: Only include stays ending after this date.

        Returns:
            Active bookings ordered by check-in date.
        """
        query = select(Booking).where(
            Booking.listing_id == listing_id,
            Booking.status.in_(ACTIVE_STATUSES),
        )
        if from_date is not None:
            query = query.where(Booking.end_date > from_date)
        result = await self._session.execute(query.order_by(Booking.start_date))
        return result.scalars().all()

    async def list_for_guest(
        self, guest_id: str, limit: int, offset: int = 0
    ) -> tuple[Sequence[Booking], int]:
        """Get a page of a guest's bookings, most recent first.

        Args:
            guest_id: Guest user ID.
            limit: Maximum number of bookings to return.
            offset: Number of bookings to skip.

        Returns:
            Tuple of (bookings, total count).
        """
        return await self._list_page(Booking.guest_id == guest_id, limit, offset)

    async def list_for_host(
        self, host_id: str, limit: int, offset: int = 0
    ) -> tuple[Sequence[Booking], int]:
        """Get a page of bookings on a host's listings, most recent first.

        Args:
            host_id: Host user ID.
            limit: Maximum number of bookings to return.
            offset: Number of bookings to skip.

        Returns:
            Tuple of (bookings, total count).
        """
        return await self._list_page(Booking.host_id == host_id, limit, offset)

    async def _list_page(
        self, condition: ColumnElement[bool], limit: int, offset: int
    ) -> tuple[Sequence[Booking], int]:
        total = await self._session.scalar(
            select(func.count(Booking.id)).where(condition)
        )
        result = await self._session.execute(
            select(Booking)
            .where(condition)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return result.scalars().all(), total or 0

    async def create(self, booking: Booking) -> Booking:
        """Create a new booking.

        The flush inserts the booking and its reserved nights, so a night
        already held by another active booking raises IntegrityError here.

        Args:
            booking: Booking entity to create.

        Returns:
            Created booking with ID.
        """
        self._session.add(booking)
        await self._session.flush()
        await self._session.refresh(booking)
        return booking

    async def update(self, booking: Booking) -> Booking:
        """Flush changes to an existing booking.

        Args:
            booking: Booking entity with updates.

        Returns:
            Updated booking.
        """
        await self._session.flush()
        await self._session.refresh(booking)
        return booking

    async def release_nights(self, booking: Booking) -> None:
        """Free every night held by a booking.

        Args:
            booking: Booking leaving the active states.
        """
        booking.reserved_nights.clear()
        await self._session.flush()
