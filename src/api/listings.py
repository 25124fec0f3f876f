# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Listings management API endpoints."""

import logging
from datetime import date
from decimal import Decimal
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import CurrentUser, get_listing_directory
from src.config import get_settings
from src.database import get_db
from src.models.listing import Listing, PropertyType
from src.repositories.booking_repository import BookingRepository
from src.repositories.listing_repository import ListingFilters, ListingRepository
from src.services.authorization import authorize_listing_mutation
from src.services.availability_service import AvailabilityChecker
from src.services.errors import ConflictError, NotFoundError
from src.services.listing_directory import ListingDirectory
from src.services.pricing import compute_total, count_nights
from src.utils.clock import Clock, get_clock

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/listings", tags=["Listings"])

Money = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]


class ListingCreateRequest(BaseModel):
    """Request model for creating a listing."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=3, max_length=100, description="Listing title")
    description: str = Field(
        default="", max_length=2000, description="Property description"
    )
    price_per_night: Money = Field(description="Nightly rate")
    max_guests: int = Field(ge=1, le=1000, description="Guest capacity")
    bedrooms: int = Field(default=0, ge=0, description="Number of bedrooms")
    bathrooms: int = Field(default=0, ge=0, description="Number of bathrooms")
    property_type: PropertyType = Field(description="Kind of property")
    city: str = Field(min_length=1, max_length=100, description="City")
    state: str = Field(min_length=1, max_length=100, description="State or region")
    country: str = Field(min_length=1, max_length=100, description="Country")


class ListingUpdateRequest(BaseModel):
    """Request model for updating a listing. Omitted fields are unchanged."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, min_length=3, max_length=100)
    description: str | None = Field(default=None, max_length=2000)
    price_per_night: Money | None = None
    max_guests: int | None = Field(default=None, ge=1, le=1000)
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: int | None = Field(default=None, ge=0)
    property_type: PropertyType | None = None
    city: str | None = Field(default=None, min_length=1, max_length=100)
    state: str | None = Field(default=None, min_length=1, max_length=100)
    country: str | None = Field(default=None, min_length=1, max_length=100)


class ListingResponse(BaseModel):
    """Response model for a listing."""

    id: int = Field(description="Listing ID")
    host_id: str = Field(description="Owning host user ID")
    title: str = Field(description="Listing title")
    description: str = Field(description="Property description")
    price_per_night: str = Field(description="Nightly rate as a decimal string")
    max_guests: int = Field(description="Guest capacity")
    bedrooms: int = Field(description="Number of bedrooms")
    bathrooms: int = Field(description="Number of bathrooms")
    property_type: str = Field(description="Kind of property")
    city: str = Field(description="City")
    state: str = Field(description="State or region")
    country: str = Field(description="Country")
    created_at: str | None = Field(default=None, description="Creation timestamp")
    updated_at: str | None = Field(default=None, description="Last update timestamp")


class ListingsResponse(BaseModel):
    """Response model for listing collection."""

    listings: list[ListingResponse] = Field(description="List of properties")
    total: int = Field(description="Total count")


class AvailabilityResponse(BaseModel):
    """Response model for an availability check."""

    available: bool = Field(description="Whether the dates can be booked")
    nights: int = Field(description="Number of nights")
    total_price: str = Field(description="Price of the stay as a decimal string")


def _listing_to_response(listing: Listing) -> dict[str, Any]:
    """Convert listing model to response dict."""
    return {
        "id": listing.id,
        "host_id": listing.host_id,
        "title": listing.title,
        "description": listing.description,
        "price_per_night": f"{listing.price_per_night:.2f}",
        "max_guests": listing.max_guests,
        "bedrooms": listing.bedrooms,
        "bathrooms": listing.bathrooms,
        "property_type": listing.property_type,
        "city": listing.city,
        "state": listing.state,
        "country": listing.country,
        "created_at": listing.created_at.isoformat() if listing.created_at else None,
        "updated_at": listing.updated_at.isoformat() if listing.updated_at else None,
    }


async def _get_listing_or_404(repo: ListingRepository, listing_id: int) -> Listing:
    listing = await repo.get_by_id(listing_id)
    if listing is None:
        raise NotFoundError("Listing not found")
    return listing


@router.get("", response_model=ListingsResponse)
async def search_listings(
    db: Annotated[AsyncSession, Depends(get_db)],
    city: str | None = None,
    state: str | None = None,
    country: str | None = None,
    property_type: PropertyType | None = None,
    guests: Annotated[int | None, Query(ge=1)] = None,
    min_price: Annotated[Decimal | None, Query(ge=0)] = None,
    max_price: Annotated[Decimal | None, Query(ge=0)] = None,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> dict[str, Any]:
    """Search listings, newest first.

    Returns:
        Matching listings and the total number of matches.
    """
    repo = ListingRepository(db)
    filters = ListingFilters(
        city=city,
        state=state,
        country=country,
        property_type=property_type,
        guests=guests,
        min_price=min_price,
        max_price=max_price,
    )
    listings, total = await repo.search(
        filters, limit or get_settings().default_page_size, offset
    )
    return {
        "listings": [_listing_to_response(listing) for listing in listings],
        "total": total,
    }


@router.get("/mine", response_model=ListingsResponse)
async def list_my_listings(
    user_id: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict[str, Any]:
    """Get the current user's listings."""
    listings = await ListingRepository(db).get_for_host(user_id)
    return {
        "listings": [_listing_to_response(listing) for listing in listings],
        "total": len(listings),
    }


@router.get("/{listing_id}", response_model=ListingResponse)
async def get_listing(
    listing_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict[str, Any]:
    """Get a single listing.

    Raises:
        NotFoundError: If the listing does not exist.
    """
    listing = await _get_listing_or_404(ListingRepository(db), listing_id)
    return _listing_to_response(listing)


@router.post("", response_model=ListingResponse, status_code=status.HTTP_201_CREATED)
async def create_listing(
    request: ListingCreateRequest,
    user_id: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict[str, Any]:
    """Create a listing owned by the current user."""
    listing = await ListingRepository(db).create(
        Listing(host_id=user_id, **request.model_dump())
    )
    logger.info("Listing %d created by host %s", listing.id, user_id)
    return _listing_to_response(listing)


@router.patch("/{listing_id}", response_model=ListingResponse)
async def update_listing(
    listing_id: int,
    request: ListingUpdateRequest,
    user_id: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict[str, Any]:
    """Update a listing owned by the current user.

    Existing bookings keep the price they were created with.

    Raises:
        NotFoundError: If the listing does not exist.
        ForbiddenError: If the current user is not the host.
    """
    repo = ListingRepository(db)
    listing = await _get_listing_or_404(repo, listing_id)
    authorize_listing_mutation(user_id, listing)

    for field, value in request.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(listing, field, value)

    listing = await repo.update(listing)
    logger.info("Listing %d updated by host %s", listing.id, user_id)
    return _listing_to_response(listing)


@router.delete("/{listing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_listing(
    listing_id: int,
    user_id: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> Response:
    """Delete a listing owned by the current user.

    Raises:
        NotFoundError: If the listing does not exist.
        ForbiddenError: If the current user is not the host.
        ConflictError: If pending or confirmed stays have not ended yet.
    """
    repo = ListingRepository(db)
    listing = await _get_listing_or_404(repo, listing_id)
    authorize_listing_mutation(user_id, listing)

    upcoming = await BookingRepository(db).get_active_for_listing(
        listing_id, from_date=clock.today()
    )
    if upcoming:
        raise ConflictError(
            f"Listing has {len(upcoming)} active booking(s) and cannot be deleted"
        )

    await repo.delete(listing)
    logger.info("Listing %d deleted by host %s", listing_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{listing_id}/availability", response_model=AvailabilityResponse)
async def check_listing_availability(
    listing_id: int,
    start_date: date,
    end_date: date,
    db: Annotated[AsyncSession, Depends(get_db)],
    listing_directory: Annotated[ListingDirectory, Depends(get_listing_directory)],
    clock: Annotated[Clock, Depends(get_clock)],
    guests: Annotated[int, Query(ge=1)] = 1,
) -> dict[str, Any]:
    """Check whether a stay can be booked and quote its price.

    Raises:
        NotFoundError: If the listing does not exist.
        BookingValidationError: If dates or guest count are invalid.
        ConflictError: If the dates are already booked.
    """
    checker = AvailabilityChecker(db, listing_directory, clock)
    listing = await checker.check_availability(
        listing_id, start_date, end_date, guests
    )
    total = compute_total(listing.price_per_night, start_date, end_date)
    return {
        "available": True,
        "nights": count_nights(start_date, end_date),
        "total_price": f"{total:.2f}",
    }
