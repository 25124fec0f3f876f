# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Pytest fixtures for StayLedger tests."""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest
from cryptography.fernet import Fernet
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine


# Set environment variables BEFORE any src imports
# This must happen at module load time
def _setup_env() -> None:
    """Set up test environment variables at module load."""
    if "AUTH_SECRET_KEY" not in os.environ:
        os.environ["AUTH_SECRET_KEY"] = Fernet.generate_key().decode()
    if "DATABASE_URL" not in os.environ:
        os.environ["DATABASE_URL"] = "sqlite:///./test.db"
    if "STANDALONE_MODE" not in os.environ:
        os.environ["STANDALONE_MODE"] = "true"
    if "LOG_LEVEL" not in os.environ:
        os.environ["LOG_LEVEL"] = "DEBUG"


_setup_env()

# Now safe to import from src
from fastapi import FastAPI  # noqa: E402
from src.database import Base, get_db  # noqa: E402
from src.models.listing import Listing  # noqa: E402
from src.utils.clock import FixedClock, get_clock  # noqa: E402

# Monday 2026-03-02 12:00 UTC; bookings in tests start on or after this date
NOW = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)

HOST_ID = "host-1"


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Set up test environment variables."""
    # Already set by _setup_env(), just yield and cleanup
    yield
    test_db_path = Path("test.db")
    if test_db_path.exists():
        test_db_path.unlink()


@pytest.fixture
async def async_engine():
    """Create an async test database engine."""
    from sqlalchemy import event

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
    )

    # Enable foreign key constraint enforcement for SQLite on every connection
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, _connection_record):
        """Enable SQLite FK constraints on each connection."""
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest.fixture
async def async_session(session_factory) -> AsyncGenerator[AsyncSession]:
    """Create an async test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def clock() -> FixedClock:
    """Clock frozen at NOW."""
    return FixedClock(NOW)


@pytest.fixture
def app(session_factory, clock: FixedClock) -> FastAPI:
    """Create a test FastAPI application backed by the test engine."""
    from src.main import create_app

    app = create_app()

    async def override_get_db() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create an async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def sample_listing_data() -> dict[str, Any]:
    """Sample listing data for tests."""
    return {
        "host_id": HOST_ID,
        "title": "Harbour View Loft",
        "description": "Two rooms above the marina",
        "price_per_night": Decimal("100.00"),
        "max_guests": 4,
        "bedrooms": 2,
        "bathrooms": 1,
        "property_type": "apartment",
        "city": "Portland",
        "state": "ME",
        "country": "USA",
    }


@pytest.fixture
def make_listing(
    session_factory, sample_listing_data
) -> Callable[..., Awaitable[Listing]]:
    """Factory persisting a committed listing, overriding sample fields."""

    async def _make(**overrides: Any) -> Listing:
        async with session_factory() as session:
            listing = Listing(**{**sample_listing_data, **overrides})
            session.add(listing)
            await session.commit()
            await session.refresh(listing)
            return listing

    return _make


@pytest.fixture
async def listing(make_listing) -> Listing:
    """A committed listing owned by HOST_ID."""
    return await make_listing()
