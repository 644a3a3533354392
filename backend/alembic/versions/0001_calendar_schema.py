"""Profiles, activities, bookings and calendar shares.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

JSONB_TYPE = postgresql.JSONB(astext_type=sa.Text()).with_variant(sa.JSON(), "sqlite")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("legal_name", sa.String(length=255)),
        sa.Column("preferred_first_name", sa.String(length=120)),
        *_timestamps(),
    )

    op.create_table(
        "activities",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "host_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("activity_kind", sa.String(length=16), nullable=False),
        sa.Column("location", sa.String(length=255)),
        sa.Column("image_url", sa.String(length=1024)),
        sa.Column("schedule", JSONB_TYPE),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_activities_host_id", "activities", ["host_id"])

    booking_status_enum = sa.Enum(
        "PENDING",
        "CONFIRMED",
        "DECLINED",
        "WAITLISTED",
        "CANCELLED",
        name="bookingstatus",
    )
    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "activity_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("activities.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("status", booking_status_enum, nullable=False),
        sa.Column("guests_count", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
    )
    op.create_index("ix_bookings_user_id_status", "bookings", ["user_id", "status"])

    share_status_enum = sa.Enum(
        "PENDING", "ACCEPTED", "DECLINED", name="calendarsharestatus"
    )
    op.create_table(
        "calendar_shares",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "sender_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "recipient_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("status", share_status_enum, nullable=False),
        sa.Column("accepted_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index(
        "ix_calendar_shares_recipient_status",
        "calendar_shares",
        ["recipient_id", "status"],
    )


def downgrade() -> None:
    op.drop_index("ix_calendar_shares_recipient_status", table_name="calendar_shares")
    op.drop_table("calendar_shares")
    op.drop_index("ix_bookings_user_id_status", table_name="bookings")
    op.drop_table("bookings")
    op.drop_index("ix_activities_host_id", table_name="activities")
    op.drop_table("activities")
    op.drop_table("profiles")
    sa.Enum(name="calendarsharestatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="bookingstatus").drop(op.get_bind(), checkfirst=True)
