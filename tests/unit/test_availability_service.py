# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Unit tests for the availability checker."""

from datetime import UTC, date, datetime
from decimal import Decimal

import pytest
from src.models.booking import Booking, BookingStatus
from src.models.listing import Listing
from src.services.availability_service import (
    AvailabilityChecker,
    as_date,
    ranges_overlap,
)
from src.services.errors import BookingValidationError, ConflictError, NotFoundError
from src.services.listing_directory import DatabaseListingDirectory


@pytest.fixture
async def db_listing(async_session, sample_listing_data) -> Listing:
    """Listing flushed into the test session."""
    listing = Listing(**sample_listing_data)
    async_session.add(listing)
    await async_session.flush()
    return listing


@pytest.fixture
def checker(async_session, clock) -> AvailabilityChecker:
    """Availability checker over the local directory."""
    return AvailabilityChecker(
        async_session, DatabaseListingDirectory(async_session), clock
    )


async def _add_booking(session, listing, start, end, status=BookingStatus.PENDING):
    booking = Booking(
        listing_id=listing.id,
        guest_id="guest-0",
        host_id=listing.host_id,
        start_date=start,
        end_date=end,
        number_of_guests=1,
        total_price=Decimal("0"),
        status=status,
    )
    session.add(booking)
    await session.flush()
    return booking


class TestRangesOverlap:
    """Tests for half-open range overlap."""

    def test_overlapping_ranges(self):
        """Test ranges sharing a night overlap."""
        assert ranges_overlap(
            date(2026, 3, 1), date(2026, 3, 5), date(2026, 3, 4), date(2026, 3, 8)
        )

    def test_touching_ranges_do_not_overlap(self):
        """Test checkout day may be the next check-in day."""
        assert not ranges_overlap(
            date(2026, 3, 1), date(2026, 3, 5), date(2026, 3, 5), date(2026, 3, 8)
        )

    def test_contained_range_overlaps(self):
        """Test a range inside another overlaps."""
        assert ranges_overlap(
            date(2026, 3, 1), date(2026, 3, 10), date(2026, 3, 3), date(2026, 3, 4)
        )

    def test_overlap_is_symmetric(self):
        """Test argument order does not matter."""
        a = (date(2026, 3, 4), date(2026, 3, 8))
        b = (date(2026, 3, 1), date(2026, 3, 5))

        assert ranges_overlap(*a, *b) == ranges_overlap(*b, *a)


class TestAsDate:
    """Tests for as_date."""

    def test_datetime_is_truncated(self):
        """Test time of day is dropped."""
        assert as_date(datetime(2026, 3, 5, 23, 59, tzinfo=UTC)) == date(2026, 3, 5)

    def test_date_unchanged(self):
        """Test dates pass through."""
        assert as_date(date(2026, 3, 5)) == date(2026, 3, 5)


class TestCheckAvailability:
    """Tests for AvailabilityChecker.check_availability."""

    async def test_available_returns_snapshot(self, checker, db_listing):
        """Test a free range returns the listing snapshot."""
        snapshot = await checker.check_availability(
            db_listing.id, date(2026, 3, 10), date(2026, 3, 13), 2
        )

        assert snapshot.id == db_listing.id
        assert snapshot.host_id == "host-1"
        assert snapshot.price_per_night == Decimal("100.00")

    async def test_start_today_allowed(self, checker, db_listing):
        """Test a stay may start on the current date."""
        await checker.check_availability(
            db_listing.id, date(2026, 3, 2), date(2026, 3, 3), 1
        )

    async def test_past_start_rejected(self, checker, db_listing):
        """Test check-in before today is rejected."""
        with pytest.raises(BookingValidationError, match="in the past"):
            await checker.check_availability(
                db_listing.id, date(2026, 3, 1), date(2026, 3, 5), 1
            )

    @pytest.mark.parametrize("end", [date(2026, 3, 10), date(2026, 3, 9)])
    async def test_end_not_after_start_rejected(self, checker, db_listing, end):
        """Test zero-length and reversed stays are rejected."""
        with pytest.raises(BookingValidationError, match="after check-in"):
            await checker.check_availability(db_listing.id, date(2026, 3, 10), end, 1)

    async def test_too_many_guests_rejected(self, checker, db_listing):
        """Test one guest over capacity is rejected."""
        with pytest.raises(BookingValidationError, match="Maximum 4 guests"):
            await checker.check_availability(
                db_listing.id, date(2026, 3, 10), date(2026, 3, 12), 5
            )

    async def test_exactly_max_guests_allowed(self, checker, db_listing):
        """Test capacity is inclusive."""
        await checker.check_availability(
            db_listing.id, date(2026, 3, 10), date(2026, 3, 12), 4
        )

    async def test_zero_guests_rejected(self, checker, db_listing):
        """Test an empty party is rejected."""
        with pytest.raises(BookingValidationError):
            await checker.check_availability(
                db_listing.id, date(2026, 3, 10), date(2026, 3, 12), 0
            )

    async def test_missing_listing(self, checker):
        """Test unknown listing raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await checker.check_availability(
                999, date(2026, 3, 10), date(2026, 3, 12), 1
            )

    async def test_overlap_with_pending_booking(self, checker, db_listing, async_session):
        """Test overlapping a pending booking is a conflict."""
        await _add_booking(
            async_session, db_listing, date(2026, 3, 10), date(2026, 3, 14)
        )

        with pytest.raises(ConflictError, match="already booked"):
            await checker.check_availability(
                db_listing.id, date(2026, 3, 13), date(2026, 3, 16), 1
            )

    async def test_overlap_with_confirmed_booking(
        self, checker, db_listing, async_session
    ):
        """Test overlapping a confirmed booking is a conflict."""
        await _add_booking(
            async_session,
            db_listing,
            date(2026, 3, 10),
            date(2026, 3, 14),
            BookingStatus.CONFIRMED,
        )

        with pytest.raises(ConflictError):
            await checker.check_availability(
                db_listing.id, date(2026, 3, 8), date(2026, 3, 11), 1
            )

    @pytest.mark.parametrize(
        "status", [BookingStatus.CANCELLED, BookingStatus.REJECTED]
    )
    async def test_terminal_bookings_do_not_block(
        self, checker, db_listing, async_session, status
    ):
        """Test cancelled and rejected bookings free their dates."""
        await _add_booking(
            async_session, db_listing, date(2026, 3, 10), date(2026, 3, 14), status
        )

        await checker.check_availability(
            db_listing.id, date(2026, 3, 10), date(2026, 3, 14), 1
        )

    async def test_back_to_back_allowed(self, checker, db_listing, async_session):
        """Test a stay may begin on another's checkout day."""
        await _add_booking(
            async_session, db_listing, date(2026, 3, 10), date(2026, 3, 14)
        )

        await checker.check_availability(
            db_listing.id, date(2026, 3, 14), date(2026, 3, 16), 1
        )

    async def test_candidates_rechecked_against_range(
        self, checker, db_listing, monkeypatch
    ):
        """Test only active stays sharing a night produce a conflict."""
        touching = Booking(
            id=1,
            start_date=date(2026, 3, 10),
            end_date=date(2026, 3, 14),
            status=BookingStatus.CONFIRMED,
        )
        cancelled = Booking(
            id=2,
            start_date=date(2026, 3, 14),
            end_date=date(2026, 3, 15),
            status=BookingStatus.CANCELLED,
        )

        async def loose_candidates(self, listing_id, start, end):
            return [touching, cancelled]

        monkeypatch.setattr(
            "src.repositories.booking_repository.BookingRepository.find_overlapping",
            loose_candidates,
        )

        await checker.check_availability(
            db_listing.id, date(2026, 3, 14), date(2026, 3, 16), 1
        )

        touching.end_date = date(2026, 3, 15)
        with pytest.raises(ConflictError):
            await checker.check_availability(
                db_listing.id, date(2026, 3, 14), date(2026, 3, 16), 1
            )

    async def test_datetimes_use_calendar_dates(self, checker, db_listing):
        """Test datetime inputs are compared by date only."""
        snapshot = await checker.check_availability(
            db_listing.id,
            datetime(2026, 3, 2, 8, 0, tzinfo=UTC),
            datetime(2026, 3, 3, 8, 0, tzinfo=UTC),
            1,
        )

        assert snapshot.id == db_listing.id
