"""bookings and users

Revision ID: 20260301_01
Revises:
Create Date: 2026-03-01
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20260301_01"
down_revision = None
branch_labels = None
depends_on = None


venue_type_enum = postgresql.ENUM("DOME_TENT", "TRAINING_HALL", name="venue_type", create_type=False)
booking_status_enum = postgresql.ENUM("PENDING", "CONFIRMED", "CANCELLED", name="booking_status", create_type=False)
user_role_enum = postgresql.ENUM("USER", "ADMIN", "ADMIN_TRAINING", "ADMIN_DOME", name="user_role", create_type=False)

ENUMS = {
    "venue_type": ("DOME_TENT", "TRAINING_HALL"),
    "booking_status": ("PENDING", "CONFIRMED", "CANCELLED"),
    "user_role": ("USER", "ADMIN", "ADMIN_TRAINING", "ADMIN_DOME"),
}


def upgrade() -> None:
    for enum_name, values in ENUMS.items():
        value_list = ", ".join(f"'{value}'" for value in values)
        op.execute(
            sa.text(
                "DO $$ BEGIN "
                f"IF NOT EXISTS (SELECT 1 FROM pg_type WHERE typname = '{enum_name}') THEN "
                f"CREATE TYPE \"{enum_name}\" AS ENUM ({value_list}); "
                "END IF; END $$;"
            )
        )

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column("venue_type", venue_type_enum, nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("status", booking_status_enum, nullable=True),
        sa.Column("booking_reference_no", sa.String(length=64)),
        sa.Column("date_of_request", sa.String(length=32)),
        sa.Column("contact_person", sa.String(length=255)),
        sa.Column("requesting_office", sa.String(length=255)),
        sa.Column("mobile_no", sa.String(length=11)),
        sa.Column("client_email", sa.String(length=255)),
        sa.Column("event_title", sa.String(length=255)),
        sa.Column("type_of_event", sa.String(length=255)),
        sa.Column("type_of_activity", postgresql.JSONB(), server_default=sa.text("'{}'::jsonb")),
        sa.Column("preferred_dates", sa.String(length=255)),
        sa.Column("expected_number_of_participants", sa.Integer()),
        sa.Column("room_layout_preference", postgresql.JSONB(), server_default=sa.text("'{}'::jsonb")),
        sa.Column("equipment_needed", postgresql.JSONB(), server_default=sa.text("'{}'::jsonb")),
        sa.Column("additional_notes", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_bookings_venue_type", "bookings", ["venue_type"])
    op.create_index("ix_bookings_date", "bookings", ["date"])

    op.create_table(
        "users",
        sa.Column("uid", sa.String(length=128), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=255)),
        sa.Column("role", user_role_enum, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("last_login", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_users_email", "users", ["email"])


def downgrade() -> None:
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_bookings_date", table_name="bookings")
    op.drop_index("ix_bookings_venue_type", table_name="bookings")
    op.drop_table("bookings")
    for enum_name in reversed(list(ENUMS)):
        op.execute(sa.text(f"DROP TYPE IF EXISTS \"{enum_name}\""))
