# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Read-only access to listing snapshots used by the booking core."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from http import HTTPStatus
from typing import Any, Protocol, TypeVar

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import get_settings
from src.models.listing import Listing
from src.repositories.listing_repository import ListingRepository
from src.services.errors import ListingDirectoryUnavailable, NotFoundError

logger = logging.getLogger(__name__)

BASE_DELAY_SECONDS = 0.5
MAX_DELAY_SECONDS = 10.0

T = TypeVar("T")


@dataclass(frozen=True)
class ListingSnapshot:
    """The listing fields a booking depends on, read at booking time."""

    id: int
    host_id: str
    price_per_night: Decimal
    max_guests: int

    @classmethod
    def from_model(cls, listing: Listing) -> "ListingSnapshot":
        """Build a snapshot from a listing row.

        Args:
            listing: Listing model instance.

        Returns:
            Frozen snapshot.
        """
        return cls(
            id=listing.id,
            host_id=listing.host_id,
            price_per_night=Decimal(listing.price_per_night),
            max_guests=listing.max_guests,
        )


class ListingDirectory(Protocol):
    """Port through which the booking core reads listings."""

    async def get_listing(self, listing_id: int) -> ListingSnapshot:
        """Get a listing snapshot.

        Raises:
            NotFoundError: If the listing does not exist.
        """
        ...


class DatabaseListingDirectory:
    """Listing directory backed by the local listings table."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize with the request's database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self._repo = ListingRepository(session)

    async def get_listing(self, listing_id: int) -> ListingSnapshot:
        """Get a listing snapshot from the database.

        Args:
            listing_id: Listing primary key.

        Returns:
            Snapshot of the listing.

        Raises:
            NotFoundError: If no such listing exists.
        """
        listing = await self._repo.get_by_id(listing_id)
        if listing is None:
            raise NotFoundError("Listing not found")
        return ListingSnapshot.from_model(listing)


class TransientDirectoryError(Exception):
    """A listing directory failure that may succeed when retried."""

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        """Initialize TransientDirectoryError.

        Args:
            message: Error message.
            retry_after: Seconds to wait before retry, if the server said so.
        """
        super().__init__(message)
        self.retry_after = retry_after


class HttpListingDirectory:
    """Client for a remote listing directory service.

    Lookups are reads, so timeouts, connection errors, rate limiting and
    5xx responses are retried with exponential backoff.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        max_retries: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize HttpListingDirectory.

        Args:
            base_url: Directory service base URL.
            timeout: Request timeout in seconds. Defaults to settings.
            max_retries: Retries after the first attempt. Defaults to settings.
            transport: Optional httpx transport, used by tests.
        """
        settings = get_settings()
        self._base_url = base_url.rstrip("/")
        self._timeout = (
            timeout if timeout is not None else settings.listing_directory_timeout_seconds
        )
        self._max_retries = (
            max_retries
            if max_retries is not None
            else settings.listing_directory_max_retries
        )
        self._transport = transport

    async def _with_retry(
        self,
        operation: str,
        func: Callable[[], Awaitable[T]],
    ) -> T:
        """Run a read with exponential backoff on transient failures.

        Args:
            operation: Description of operation for logging.
            func: Async callable performing one attempt.

        Returns:
            Result from func.

        Raises:
            ListingDirectoryUnavailable: If every attempt failed.
        """
        last_error: TransientDirectoryError | None = None
        delay = BASE_DELAY_SECONDS

        for attempt in range(self._max_retries + 1):
            try:
                return await func()
            except TransientDirectoryError as e:
                last_error = e
                if attempt == self._max_retries:
                    break

                wait_time = min(e.retry_after or delay, MAX_DELAY_SECONDS)
                logger.warning(
                    "%s failed (%s), retrying in %.1fs (attempt %d/%d)",
                    operation,
                    e,
                    wait_time,
                    attempt + 1,
                    self._max_retries,
                )
                await asyncio.sleep(wait_time)
                delay *= 2

        msg = f"{operation} failed after {self._max_retries} retries: {last_error}"
        raise ListingDirectoryUnavailable(msg) from last_error

    async def get_listing(self, listing_id: int) -> ListingSnapshot:
        """Fetch a listing snapshot from the directory service.

        Args:
            listing_id: Listing ID.

        Returns:
            Snapshot of the listing.

        Raises:
            NotFoundError: If the directory reports no such listing.
            ListingDirectoryUnavailable: If the directory cannot be reached.
        """

        async def fetch() -> ListingSnapshot:
            try:
                async with httpx.AsyncClient(
                    base_url=self._base_url,
                    timeout=self._timeout,
                    transport=self._transport,
                ) as client:
                    response = await client.get(
                        f"/listings/{listing_id}",
                        headers={"Accept": "application/json"},
                    )
            except httpx.TransportError as e:
                raise TransientDirectoryError(f"transport error: {e}") from e

            if response.status_code == HTTPStatus.NOT_FOUND:
                raise NotFoundError("Listing not found")

            if response.status_code == HTTPStatus.TOO_MANY_REQUESTS:
                retry_after = response.headers.get("Retry-After")
                raise TransientDirectoryError(
                    "rate limited",
                    retry_after=float(retry_after) if retry_after else None,
                )

            if response.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
                raise TransientDirectoryError(f"server error {response.status_code}")

            if response.status_code != HTTPStatus.OK:
                msg = f"Listing directory error: {response.status_code}"
                raise ListingDirectoryUnavailable(msg)

            try:
                payload = response.json()
            except ValueError as e:
                msg = "Listing directory returned invalid JSON"
                raise ListingDirectoryUnavailable(msg) from e
            return self._parse_listing(listing_id, payload)

        return await self._with_retry(f"get_listing({listing_id})", fetch)

    @staticmethod
    def _parse_listing(listing_id: int, data: dict[str, Any]) -> ListingSnapshot:
        """Convert a directory payload to a snapshot.

        Accepts both the directory's camelCase and snake_case field names.

        Args:
            listing_id: Requested listing ID.
            data: Decoded JSON payload.

        Returns:
            Snapshot of the listing.

        Raises:
            ListingDirectoryUnavailable: If required fields are missing.
        """
        try:
            host_id = data.get("hostId", data.get("host_id"))
            price = data.get("pricePerNight", data.get("price_per_night"))
            max_guests = data.get("maxGuests", data.get("max_guests"))
            if host_id is None or price is None or max_guests is None:
                raise KeyError("hostId, pricePerNight and maxGuests are required")
            return ListingSnapshot(
                id=listing_id,
                host_id=str(host_id),
                price_per_night=Decimal(str(price)),
                max_guests=int(max_guests),
            )
        except (AttributeError, KeyError, ValueError, InvalidOperation) as e:
            logger.error("Malformed listing %d from directory: %s", listing_id, e)
            msg = f"Listing directory returned a malformed listing: {e}"
            raise ListingDirectoryUnavailable(msg) from e


def build_listing_directory(session: AsyncSession) -> ListingDirectory:
    """Select the listing directory adapter from settings.

    Args:
        session: Request database session for the local adapter.

    Returns:
        HTTP adapter when a directory URL is configured, else the local one.
    """
    settings = get_settings()
    if settings.listing_directory_url:
        return HttpListingDirectory(settings.listing_directory_url)
    return DatabaseListingDirectory(session)
