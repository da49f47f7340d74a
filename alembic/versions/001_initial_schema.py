"""Initial schema: events and bookings with their integrity constraints.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Events table
    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("overview", sa.Text(), nullable=False),
        sa.Column("image", sa.String(1024), nullable=False),
        sa.Column("venue", sa.String(255), nullable=False),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("time", sa.String(5), nullable=False),
        sa.Column("mode", sa.String(50), nullable=False),
        sa.Column("audience", sa.String(255), nullable=False),
        sa.Column("agenda", sa.JSON(), nullable=False),
        sa.Column("organizer", sa.String(255), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        # UNIQUE SLUG: the insert decides slug races, so this constraint must exist
        # before any application writer runs.
        sa.UniqueConstraint("slug", name="uq_events_slug"),
    )
    op.create_index("ix_events_id", "events", ["id"])
    op.create_index("ix_events_created_at", "events", ["created_at"])

    # Bookings table
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "event_id",
            sa.Integer(),
            sa.ForeignKey("events.id", name="fk_bookings_event_id"),
            nullable=False,
        ),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        # One booking per attendee email per event
        sa.UniqueConstraint("event_id", "email", name="uq_event_email_booking"),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_event_id", "bookings", ["event_id"])
    op.create_index("ix_bookings_event_created", "bookings", ["event_id", "created_at"])
    op.create_index("ix_bookings_email", "bookings", ["email"])


def downgrade() -> None:
    op.drop_table("bookings")
    op.drop_table("events")
