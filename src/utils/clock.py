# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Clock abstraction so date rules never read ambient system time."""

from datetime import UTC, date, datetime
from typing import Protocol


class Clock(Protocol):
    """Source of the current instant."""

    def now(self) -> datetime:
        """Return the current timezone-aware UTC datetime."""
        ...

    def today(self) -> date:
        """Return the current UTC calendar date."""
        ...


class SystemClock:
    """Clock backed by the system time."""

    def now(self) -> datetime:
        """Return the current UTC time."""
        return datetime.now(UTC)

    def today(self) -> date:
        """Return today's UTC date."""
        return self.now().date()


class FixedClock:
    """Clock frozen at a given instant, movable by tests."""

    def __init__(self, instant: datetime) -> None:
        """Initialize the clock.

        Args:
            instant: Instant to report. Naive values are taken as UTC.
        """
        self._instant = _as_utc(instant)

    def now(self) -> datetime:
        """Return the frozen instant."""
        return self._instant

    def today(self) -> date:
        """Return the date of the frozen instant."""
        return self._instant.date()

    def set(self, instant: datetime) -> None:
        """Move the clock to a new instant.

        Args:
            instant: New instant. Naive values are taken as UTC.
        """
        self._instant = _as_utc(instant)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


_system_clock = SystemClock()


def get_clock() -> Clock:
    """FastAPI dependency returning the process clock.

    Returns:
        Shared SystemClock instance.
    """
    return _system_clock
