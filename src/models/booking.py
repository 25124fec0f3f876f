# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Booking models for guest reservations and their reserved nights."""

from datetime import UTC, date, datetime, timedelta
from decimal import Decimal
from enum import StrEnum

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.database import Base


def _utc_now() -> datetime:
    """Get current UTC datetime for SQLAlchemy defaults."""
    return datetime.now(UTC)


class BookingStatus(StrEnum):
    """Lifecycle states of a booking."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


# Statuses whose nights block the listing calendar
ACTIVE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})


class Booking(Base):
    """A guest's reservation of a listing for a date range.

    ``end_date`` is exclusive: a stay from the 1st to the 4th covers the
    nights of the 1st, 2nd and 3rd.
    """

    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    listing_id: Mapped[int] = mapped_column(Integer, nullable=False)
    guest_id: Mapped[str] = mapped_column(String(100), nullable=False)
    # Copied from the listing when the booking is created
    host_id: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    number_of_guests: Mapped[int] = mapped_column(Integer, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=BookingStatus.PENDING
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_utc_now, onupdate=_utc_now
    )

    reserved_nights: Mapped[list["ReservedNight"]] = relationship(
        "ReservedNight",
        back_populates="booking",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("start_date < end_date", name="ck_booking_dates"),
        CheckConstraint("number_of_guests >= 1", name="ck_booking_guests"),
        Index("idx_booking_listing_dates", "listing_id", "start_date", "end_date"),
        Index("idx_booking_guest", "guest_id", "created_at"),
        Index("idx_booking_host", "host_id", "created_at"),
        Index("idx_booking_status", "status"),
    )

    @property
    def nights(self) -> int:
        """Number of nights covered by the stay."""
        return (self.end_date - self.start_date).days

    @property
    def is_active(self) -> bool:
        """Whether the booking still blocks the listing calendar."""
        return BookingStatus(self.status) in ACTIVE_STATUSES

    def night_dates(self) -> list[date]:
        """List every night of the stay.

        Returns:
            Dates from start_date up to, not including, end_date.
        """
        return [self.start_date + timedelta(days=i) for i in range(self.nights)]

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<Booking(id={self.id}, listing={self.listing_id}, "
            f"{self.start_date}..{self.end_date}, status={self.status})>"
        )


class ReservedNight(Base):
    """One occupied night of a listing.

    The unique constraint on (listing_id, night) is what prevents two
    active bookings from overlapping, even when their availability checks
    run concurrently.
    """

    __tablename__ = "reserved_nights"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False
    )
    listing_id: Mapped[int] = mapped_column(Integer, nullable=False)
    night: Mapped[date] = mapped_column(Date, nullable=False)

    booking: Mapped["Booking"] = relationship(
        "Booking", back_populates="reserved_nights"
    )

    __table_args__ = (
        UniqueConstraint("listing_id", "night", name="uq_reserved_night"),
        Index("idx_reserved_night_booking", "booking_id"),
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<ReservedNight(listing={self.listing_id}, night={self.night})>"
