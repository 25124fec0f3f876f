# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Create listings and bookings tables.

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-09-14 10:12:03.000000+00:00

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c9a7d2b10"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        "listings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("host_id", sa.String(length=100), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("price_per_night", sa.Numeric(10, 2), nullable=False),
        sa.Column("max_guests", sa.Integer(), nullable=False),
        sa.Column("bedrooms", sa.Integer(), nullable=False),
        sa.Column("bathrooms", sa.Integer(), nullable=False),
        sa.Column("property_type", sa.String(length=20), nullable=False),
        sa.Column("city", sa.String(length=100), nullable=False),
        sa.Column("state", sa.String(length=100), nullable=False),
        sa.Column("country", sa.String(length=100), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("price_per_night >= 0", name="ck_listing_price"),
        sa.CheckConstraint("max_guests >= 1", name="ck_listing_max_guests"),
    )
    op.create_index("idx_listing_host", "listings", ["host_id"])
    op.create_index("idx_listing_city", "listings", ["city"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("listing_id", sa.Integer(), nullable=False),
        sa.Column("guest_id", sa.String(length=100), nullable=False),
        sa.Column("host_id", sa.String(length=100), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("number_of_guests", sa.Integer(), nullable=False),
        sa.Column("total_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("start_date < end_date", name="ck_booking_dates"),
        sa.CheckConstraint("number_of_guests >= 1", name="ck_booking_guests"),
    )
    op.create_index(
        "idx_booking_listing_dates",
        "bookings",
        ["listing_id", "start_date", "end_date"],
    )
    op.create_index("idx_booking_guest", "bookings", ["guest_id", "created_at"])
    op.create_index("idx_booking_host", "bookings", ["host_id", "created_at"])
    op.create_index("idx_booking_status", "bookings", ["status"])


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table("bookings")
    op.drop_table("listings")
