# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Add reserved_nights table enforcing non-overlapping bookings.

Revision ID: 8d4e2b6f0a31
Revises: 3f1c9a7d2b10
Create Date: 2026-09-21 16:40:27.000000+00:00

"""

from collections.abc import Sequence
from datetime import date, timedelta

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8d4e2b6f0a31"
down_revision: str | None = "3f1c9a7d2b10"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    reserved_nights = op.create_table(
        "reserved_nights",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "booking_id",
            sa.Integer(),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("listing_id", sa.Integer(), nullable=False),
        sa.Column("night", sa.Date(), nullable=False),
        sa.UniqueConstraint("listing_id", "night", name="uq_reserved_night"),
    )
    op.create_index("idx_reserved_night_booking", "reserved_nights", ["booking_id"])

    # Backfill nights for bookings that are still pending or confirmed.
    # Fails on the unique constraint if existing data already overlaps.
    connection = op.get_bind()
    rows = connection.execute(
        sa.text(
            "SELECT id, listing_id, start_date, end_date FROM bookings "
            "WHERE status IN ('pending', 'confirmed')"
        )
    ).fetchall()

    nights = []
    for booking_id, listing_id, start, end in rows:
        start_date = start if isinstance(start, date) else date.fromisoformat(start)
        end_date = end if isinstance(end, date) else date.fromisoformat(end)
        nights.extend(
            {
                "booking_id": booking_id,
                "listing_id": listing_id,
                "night": start_date + timedelta(days=i),
            }
            for i in range((end_date - start_date).days)
        )
    if nights:
        op.bulk_insert(reserved_nights, nights)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table("reserved_nights")
