# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""SQLAlchemy ORM models for StayLedger."""

from src.models.booking import ACTIVE_STATUSES, Booking, BookingStatus, ReservedNight
from src.models.listing import Listing, PropertyType

__all__ = [
    "ACTIVE_STATUSES",
    "Booking",
    "BookingStatus",
    "Listing",
    "PropertyType",
    "ReservedNight",
]
