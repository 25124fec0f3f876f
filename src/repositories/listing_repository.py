# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Repository for Listing database operations."""

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.listing import Listing


@dataclass(frozen=True)
class ListingFilters:
    """Search filters for listings. Unset fields do not filter."""

    city: str | None = None
    state: str | None = None
    country: str | None = None
    property_type: str | None = None
    guests: int | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None


class ListingRepository:
    """Repository for Listing CRUD operations.

    Provides async database operations for Listing entities.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self._session = session

    async def get_by_id(self, listing_id: int) -> Listing | None:
        """Get listing by ID.

        Args:
            listing_id: Listing primary key.

        Returns:
            Listing if found, None otherwise.
        """
        result = await self._session.execute(
            select(Listing).where(Listing.id == listing_id)
        )
        return result.scalar_one_or_none()

    async def get_for_host(self, host_id: str) -> Sequence[Listing]:
        """Get all listings owned by a host, newest first.

        Args:
            host_id: Host user ID.

        Returns:
            Sequence of the host's listings.
        """
        result = await self._session.execute(
            select(Listing)
            .where(Listing.host_id == host_id)
            .order_by(Listing.created_at.desc(), Listing.id.desc())
        )
        return result.scalars().all()

    async def search(
        self,
        filters: ListingFilters,
        limit: int,
        offset: int = 0,
    ) -> tuple[Sequence[Listing], int]:
        """Search listings, newest first.

        Location filters are case-insensitive substring matches.

        Args:
            filters: Search filters.
            limit: Maximum number of listings to return.
            offset: Number of listings to skip.

        Returns:
            Tuple of (listings, total matching count).
        """
        conditions = self._build_conditions(filters)

        total = await self._session.scalar(
            select(func.count(Listing.id)).where(*conditions)
        )
        result = await self._session.execute(
            select(Listing)
            .where(*conditions)
            .order_by(Listing.created_at.desc(), Listing.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return result.scalars().all(), total or 0

    @staticmethod
    def _build_conditions(filters: ListingFilters) -> list[ColumnElement[bool]]:
        conditions: list[ColumnElement[bool]] = []
        for column, value in (
            (Listing.city, filters.city),
            (Listing.state, filters.state),
            (Listing.country, filters.country),
        ):
            if value:
                conditions.append(column.ilike(f"%{value}%"))
        if filters.property_type:
            conditions.append(Listing.property_type == filters.property_type)
        if filters.guests is not None:
            conditions.append(Listing.max_guests >= filters.guests)
        if filters.min_price is not None:
            conditions.append(Listing.price_per_night >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Listing.price_per_night <= filters.max_price)
        return conditions

    async def create(self, listing: Listing) -> Listing:
        """Create a new listing.

        Args:
            listing: Listing entity to create.

        Returns:
            Created listing with ID.
        """
        self._session.add(listing)
        await self._session.flush()
        await self._session.refresh(listing)
        return listing

    async def update(self, listing: Listing) -> Listing:
        """Flush changes to an existing listing.

        Args:
            listing: Listing entity with updates.

        Returns:
            Updated listing.
        """
        await self._session.flush()
        await self._session.refresh(listing)
        return listing

    async def delete(self, listing: Listing) -> None:
        """Delete a listing.

        Args:
            listing: Listing entity to delete.
        """
        await self._session.delete(listing)
        await self._session.flush()
