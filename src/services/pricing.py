# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Stay pricing."""

import math
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

SECONDS_PER_DAY = 86400
CENTS = Decimal("0.01")


def count_nights(start: date | datetime, end: date | datetime) -> int:
    """Count the nights between two dates, rounding partial days up.

    Args:
        start: Check-in date or datetime.
        end: Check-out date or datetime (exclusive).

    Returns:
        Number of nights, never negative.
    """
    delta = end - start
    return max(math.ceil(delta.total_seconds() / SECONDS_PER_DAY), 0)


def compute_total(
    price_per_night: Decimal | int | str,
    start: date | datetime,
    end: date | datetime,
) -> Decimal:
    """Compute the total price of a stay.

    Args:
        price_per_night: Nightly rate.
        start: Check-in date.
        end: Check-out date (exclusive).

    Returns:
        nights x rate, rounded half-up to cents.
    """
    rate = Decimal(str(price_per_night))
    total = rate * count_nights(start, end)
    return total.quantize(CENTS, rounding=ROUND_HALF_UP)
