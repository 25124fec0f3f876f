# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Error taxonomy raised by the booking core.

Every error carries the HTTP status and the machine-readable type used by
the API layer to build the ``{"detail", "type"}`` response body.
"""

from fastapi import status


class BookingServiceError(Exception):
    """Base class for booking core errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    error_type: str = "error"

    def __init__(self, message: str) -> None:
        """Initialize the error.

        Args:
            message: Human-readable explanation for the caller.
        """
        super().__init__(message)
        self.message = message


class BookingValidationError(BookingServiceError):
    """Malformed or out-of-range input; the caller must correct it."""

    error_type = "validation_error"


class NotFoundError(BookingServiceError):
    """Referenced listing or booking does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    error_type = "not_found"


class ForbiddenError(BookingServiceError):
    """Actor lacks rights on the resource."""

    status_code = status.HTTP_403_FORBIDDEN
    error_type = "forbidden"


class ConflictError(BookingServiceError):
    """Requested dates overlap an existing active booking."""

    status_code = status.HTTP_409_CONFLICT
    error_type = "conflict"


class TooLateError(BookingServiceError):
    """Cancellation requested inside the cancellation window."""

    error_type = "too_late"


class InvalidTransitionError(BookingServiceError):
    """Status change not permitted from the booking's current state."""

    status_code = status.HTTP_409_CONFLICT
    error_type = "invalid_transition"


class ListingDirectoryUnavailable(BookingServiceError):  # noqa: N818
    """Listing directory could not be reached after retrying."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_type = "service_unavailable"
