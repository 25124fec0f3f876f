# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Booking API endpoints."""

from collections.abc import Sequence
from datetime import date
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, ConfigDict, Field

from src.api.dependencies import CurrentUser, get_booking_service
from src.config import get_settings
from src.models.booking import Booking
from src.services.booking_service import BookingService

router = APIRouter(prefix="/api/bookings", tags=["Bookings"])

BookingServiceDep = Annotated[BookingService, Depends(get_booking_service)]


class BookingCreateRequest(BaseModel):
    """Request model for creating a booking."""

    model_config = ConfigDict(extra="forbid")

    listing_id: int = Field(gt=0, description="Listing to book")
    start_date: date = Field(description="Check-in date (ISO format)")
    end_date: date = Field(description="Check-out date, exclusive (ISO format)")
    number_of_guests: int = Field(ge=1, le=1000, description="Party size")


class BookingStatusRequest(BaseModel):
    """Request model for a host's decision on a booking."""

    model_config = ConfigDict(extra="forbid")

    status: str = Field(
        min_length=1, max_length=20, description="New status: confirmed or rejected"
    )


class BookingResponse(BaseModel):
    """Response model for a booking."""

    id: int = Field(description="Booking ID")
    listing_id: int = Field(description="Booked listing ID")
    guest_id: str = Field(description="Guest user ID")
    host_id: str = Field(description="Host user ID")
    start_date: date = Field(description="Check-in date (ISO format)")
    end_date: date = Field(description="Check-out date, exclusive (ISO format)")
    nights: int = Field(description="Number of nights")
    number_of_guests: int = Field(description="Party size")
    total_price: str = Field(description="Total price as a decimal string")
    status: str = Field(description="Booking status")
    created_at: str | None = Field(default=None, description="Creation timestamp")
    updated_at: str | None = Field(default=None, description="Last update timestamp")


class BookingsResponse(BaseModel):
    """Response model for a page of bookings."""

    bookings: list[BookingResponse] = Field(description="Bookings, newest first")
    total: int = Field(description="Total count")
    limit: int = Field(description="Page size")
    offset: int = Field(description="Page offset")


def _booking_to_response(booking: Booking) -> dict[str, Any]:
    """Convert booking model to response dict."""
    return {
        "id": booking.id,
        "listing_id": booking.listing_id,
        "guest_id": booking.guest_id,
        "host_id": booking.host_id,
        "start_date": booking.start_date,
        "end_date": booking.end_date,
        "nights": booking.nights,
        "number_of_guests": booking.number_of_guests,
        "total_price": f"{booking.total_price:.2f}",
        "status": str(booking.status),
        "created_at": booking.created_at.isoformat() if booking.created_at else None,
        "updated_at": booking.updated_at.isoformat() if booking.updated_at else None,
    }


def _page(
    bookings: Sequence[Booking], total: int, limit: int, offset: int
) -> dict[str, Any]:
    return {
        "bookings": [_booking_to_response(b) for b in bookings],
        "total": total,
        "limit": limit,
        "offset": offset,
    }


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    request: BookingCreateRequest,
    user_id: CurrentUser,
    service: BookingServiceDep,
) -> dict[str, Any]:
    """Create a pending booking for the current user.

    Returns:
        The created booking.
    """
    booking = await service.create(
        guest_id=user_id,
        listing_id=request.listing_id,
        start_date=request.start_date,
        end_date=request.end_date,
        number_of_guests=request.number_of_guests,
    )
    return _booking_to_response(booking)


@router.get("/user", response_model=BookingsResponse)
async def list_my_bookings(
    user_id: CurrentUser,
    service: BookingServiceDep,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> dict[str, Any]:
    """List the current user's bookings as a guest, newest first."""
    limit = limit or get_settings().default_page_size
    bookings, total = await service.list_for_guest(user_id, limit, offset)
    return _page(bookings, total, limit, offset)


@router.get("/host", response_model=BookingsResponse)
async def list_host_bookings(
    user_id: CurrentUser,
    service: BookingServiceDep,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> dict[str, Any]:
    """List bookings on the current user's listings, newest first."""
    limit = limit or get_settings().default_page_size
    bookings, total = await service.list_for_host(user_id, limit, offset)
    return _page(bookings, total, limit, offset)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: int,
    user_id: CurrentUser,
    service: BookingServiceDep,
) -> dict[str, Any]:
    """Get a booking the current user is a party to."""
    booking = await service.get(booking_id, user_id)
    return _booking_to_response(booking)


@router.post("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: int,
    request: BookingStatusRequest,
    user_id: CurrentUser,
    service: BookingServiceDep,
) -> dict[str, Any]:
    """Confirm or reject a pending booking as its host."""
    booking = await service.update_status(booking_id, user_id, request.status)
    return _booking_to_response(booking)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: int,
    user_id: CurrentUser,
    service: BookingServiceDep,
) -> dict[str, Any]:
    """Cancel a booking as its guest or host."""
    booking = await service.cancel(booking_id, user_id)
    return _booking_to_response(booking)
