# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Authorization rules for bookings and listings."""

import logging
from enum import StrEnum

from src.models.booking import Booking
from src.models.listing import Listing
from src.services.errors import ForbiddenError

logger = logging.getLogger(__name__)


class BookingAction(StrEnum):
    """Actions an actor can attempt on a booking."""

    VIEW = "view"
    UPDATE_STATUS = "update_status"
    CANCEL = "cancel"


_MESSAGES = {
    BookingAction.VIEW: "Not authorized to view this booking",
    BookingAction.UPDATE_STATUS: "Not authorized to update this booking",
    BookingAction.CANCEL: "Not authorized to cancel this booking",
}


def is_party(actor_id: str, booking: Booking) -> bool:
    """Whether the actor is the booking's guest or its host."""
    return actor_id in (booking.guest_id, booking.host_id)


def authorize(actor_id: str, booking: Booking, action: BookingAction) -> None:
    """Check that an actor may perform an action on a booking.

    Only the host may change a booking's status; guest and host may both
    view and cancel it. Time-window rules are enforced by the ledger.

    Args:
        actor_id: Authenticated user ID.
        booking: Target booking.
        action: Attempted action.

    Raises:
        ForbiddenError: If the actor lacks the right.
    """
    if action is BookingAction.UPDATE_STATUS:
        allowed = actor_id == booking.host_id
    else:
        allowed = is_party(actor_id, booking)

    if not allowed:
        logger.warning(
            "User %s denied %s on booking %d", actor_id, action.value, booking.id
        )
        raise ForbiddenError(_MESSAGES[action])


def authorize_listing_mutation(actor_id: str, listing: Listing) -> None:
    """Check that an actor owns the listing they are changing.

    Args:
        actor_id: Authenticated user ID.
        listing: Target listing.

    Raises:
        ForbiddenError: If the actor is not the listing's host.
    """
    if actor_id != listing.host_id:
        logger.warning("User %s denied change to listing %d", actor_id, listing.id)
        raise ForbiddenError("Not authorized to modify this listing")
