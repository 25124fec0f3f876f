# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Unit tests for ListingRepository."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from src.models.listing import Listing
from src.repositories.listing_repository import ListingFilters, ListingRepository


@pytest.fixture
async def seeded(async_session, sample_listing_data) -> list[Listing]:
    """Three listings in different places and price bands."""
    repo = ListingRepository(async_session)
    rows = [
        {"city": "Portland", "state": "ME", "price_per_night": Decimal("100.00")},
        {
            "city": "Portland",
            "state": "OR",
            "price_per_night": Decimal("180.00"),
            "max_guests": 8,
            "property_type": "house",
        },
        {
            "city": "Bar Harbor",
            "state": "ME",
            "price_per_night": Decimal("250.00"),
            "property_type": "villa",
            "host_id": "host-2",
        },
    ]
    listings = []
    for minute, row in enumerate(rows):
        data = {
            **sample_listing_data,
            **row,
            "created_at": datetime(2026, 1, 1, 0, minute, tzinfo=UTC),
        }
        listings.append(await repo.create(Listing(**data)))
    return listings


class TestListingRepository:
    """Tests for ListingRepository."""

    async def test_create_and_get(self, async_session, sample_listing_data):
        """Test creating and retrieving a listing."""
        repo = ListingRepository(async_session)

        listing = await repo.create(Listing(**sample_listing_data))
        retrieved = await repo.get_by_id(listing.id)

        assert retrieved is not None
        assert retrieved.title == "Harbour View Loft"
        assert retrieved.price_per_night == Decimal("100.00")

    async def test_get_missing(self, async_session):
        """Test missing listing returns None."""
        assert await ListingRepository(async_session).get_by_id(77) is None

    async def test_get_for_host(self, async_session, seeded):
        """Test listings of one host, newest first."""
        listings = await ListingRepository(async_session).get_for_host("host-1")

        assert [listing.id for listing in listings] == [seeded[1].id, seeded[0].id]

    async def test_search_without_filters(self, async_session, seeded):
        """Test empty filters return every listing, newest first."""
        listings, total = await ListingRepository(async_session).search(
            ListingFilters(), limit=10
        )

        assert total == 3
        assert [listing.id for listing in listings] == [s.id for s in reversed(seeded)]

    @pytest.mark.parametrize(
        ("filters", "expected"),
        [
            (ListingFilters(city="portland"), [1, 0]),
            (ListingFilters(city="harb"), [2]),
            (ListingFilters(state="ME"), [2, 0]),
            (ListingFilters(country="us"), [2, 1, 0]),
            (ListingFilters(property_type="house"), [1]),
            (ListingFilters(guests=5), [1]),
            (ListingFilters(min_price=Decimal("150")), [2, 1]),
            (ListingFilters(max_price=Decimal("180")), [1, 0]),
            (ListingFilters(city="Portland", state="OR"), [1]),
            (ListingFilters(city="Nowhere"), []),
        ],
    )
    async def test_search_filters(self, async_session, seeded, filters, expected):
        """Test each filter narrows the results."""
        listings, total = await ListingRepository(async_session).search(
            filters, limit=10
        )

        assert [listing.id for listing in listings] == [seeded[i].id for i in expected]
        assert total == len(expected)

    async def test_search_pagination(self, async_session, seeded):
        """Test limit/offset page through results while total stays whole."""
        listings, total = await ListingRepository(async_session).search(
            ListingFilters(), limit=1, offset=1
        )

        assert total == 3
        assert [listing.id for listing in listings] == [seeded[1].id]

    async def test_update(self, async_session, seeded):
        """Test updating a listing."""
        repo = ListingRepository(async_session)
        listing = seeded[0]
        listing.title = "Renamed Loft"

        updated = await repo.update(listing)

        assert updated.title == "Renamed Loft"

    async def test_delete(self, async_session, seeded):
        """Test deleting a listing."""
        repo = ListingRepository(async_session)

        await repo.delete(seeded[0])

        assert await repo.get_by_id(seeded[0].id) is None
