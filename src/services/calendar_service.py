# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Calendar service for listing availability iCal feeds."""

import hashlib
import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import cast

from icalendar import Calendar, Event

from src.models.booking import Booking, BookingStatus
from src.utils.clock import Clock, SystemClock

logger = logging.getLogger(__name__)

PRODID = "-//StayLedger//stayledger//EN"
EVENT_SUMMARY = "Reserved"


class CalendarService:
    """Service for generating iCal feeds of a listing's reserved dates.

    Events carry only the reserved range; guest identity never appears in
    the public feed.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        """Initialize calendar service.

        Args:
            clock: Source of DTSTAMP values. Defaults to the system clock.
        """
        self._clock = clock or SystemClock()

    def generate_ical(self, listing_id: int, bookings: Sequence[Booking]) -> str:
        """Generate an iCal feed for a listing.

        Args:
            listing_id: Listing the feed describes.
            bookings: Bookings of the listing. Rejected and cancelled
                bookings no longer block the calendar and are skipped.

        Returns:
            iCal string (text/calendar format).
        """
        cal = self._create_calendar(listing_id)
        stamp = self._clock.now()

        reserved = [booking for booking in bookings if booking.is_active]
        for booking in reserved:
            cal.add_component(self._create_event(booking, stamp))

        ical_string = cast("bytes", cal.to_ical()).decode("utf-8")
        logger.debug(
            "Generated iCal for listing %d with %d events", listing_id, len(reserved)
        )
        return ical_string

    def _create_calendar(self, listing_id: int) -> Calendar:
        """Create iCal calendar object with metadata.

        Args:
            listing_id: Listing for calendar metadata.

        Returns:
            Configured Calendar object.
        """
        cal = Calendar()
        cal.add("prodid", PRODID)
        cal.add("version", "2.0")
        cal.add("calscale", "GREGORIAN")
        cal.add("method", "PUBLISH")
        cal.add("x-wr-calname", f"Listing {listing_id} availability")
        return cal

    def _create_event(self, booking: Booking, stamp: datetime) -> Event:
        """Create an all-day iCal event for a booking's stay.

        DTEND is exclusive in iCal, matching the booking's end date.

        Args:
            booking: Booking data for the event.
            stamp: DTSTAMP value.

        Returns:
            Configured Event object.
        """
        event = Event()
        event.add("uid", self._generate_uid(booking))
        event.add("summary", EVENT_SUMMARY)
        event.add("dtstart", booking.start_date)
        event.add("dtend", booking.end_date)
        event.add("dtstamp", stamp.astimezone(UTC))
        event.add(
            "status",
            "CONFIRMED" if booking.status == BookingStatus.CONFIRMED else "TENTATIVE",
        )
        event.add("transp", "OPAQUE")
        return event

    @staticmethod
    def _generate_uid(booking: Booking) -> str:
        """Generate a stable event ID that does not reveal the booking ID.

        Args:
            booking: Booking to generate UID for.

        Returns:
            Unique identifier string.
        """
        unique_str = f"{booking.listing_id}-{booking.id}"
        hash_hex = hashlib.sha256(unique_str.encode()).hexdigest()[:16]
        return f"{hash_hex}@stayledger"
