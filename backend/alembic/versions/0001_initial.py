"""initial booking schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "locations",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default=sa.text("1")),
    )

    op.create_table(
        "services",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("location_id", sa.Text(), sa.ForeignKey("locations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("duration_in_minutes", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("price", sa.Float()),
        sa.Column("description", sa.Text()),
        sa.CheckConstraint("duration_in_minutes > 0"),
    )

    op.create_table(
        "location_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("location_id", sa.Text(), sa.ForeignKey("locations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("key", sa.Text(), nullable=False),
        sa.Column("active_bays", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("location_id", "key"),
        sa.CheckConstraint("active_bays >= 1"),
    )

    op.create_table(
        "blocked_slots",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("location_id", sa.Text(), sa.ForeignKey("locations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("key", sa.Text(), nullable=False),
        sa.Column("date", sa.Text(), nullable=False),
        sa.Column("time_slot", sa.Text(), nullable=False),
        sa.Column("created_by", sa.Text()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("location_id", "key"),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("name", sa.Text()),
        sa.Column("email", sa.Text()),
        sa.Column("role", sa.Text(), nullable=False, server_default=sa.text("'customer'")),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "rewards",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Text(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("location_id", sa.Text(), nullable=False),
        sa.Column("loyalty_points", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("free_washes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.UniqueConstraint("user_id", "location_id"),
        sa.CheckConstraint("loyalty_points >= 0"),
        sa.CheckConstraint("free_washes >= 0"),
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("location_id", sa.Text(), sa.ForeignKey("locations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("service_id", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False),
        sa.Column("bay_id", sa.Integer(), nullable=False),
        sa.Column("duration_in_minutes", sa.Integer()),
        sa.Column("payment_reference", sa.Text()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("location_id", "start_time", "bay_id"),
        sa.CheckConstraint("bay_id >= 1"),
    )
    op.create_index("ix_bookings_start_time", "bookings", ["start_time"])
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])


def downgrade():
    op.drop_index("ix_bookings_user_id", table_name="bookings")
    op.drop_index("ix_bookings_start_time", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("rewards")
    op.drop_table("users")
    op.drop_table("blocked_slots")
    op.drop_table("location_settings")
    op.drop_table("services")
    op.drop_table("locations")
