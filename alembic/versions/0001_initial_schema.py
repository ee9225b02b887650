"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates the users, recurrence_groups and events tables.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

RULES = ("none", "daily", "weekly", "monthly")


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("external_user_id", sa.String(255), nullable=False, unique=True),
        sa.Column("union_id", sa.String(255), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("avatar", sa.Text, nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("mobile", sa.String(50), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- recurrence_groups ---
    op.create_table(
        "recurrence_groups",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("rule", sa.Enum(*RULES, name="recurrencerule"), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- events ---
    op.create_table(
        "events",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text, nullable=True),
        sa.Column("image_url", sa.Text, nullable=True),
        sa.Column("link", sa.Text, nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("organizer", sa.Text, nullable=True),
        sa.Column("organization_type", sa.Enum("center", "club", "other", name="organizationtype"),
                  nullable=False, server_default="other"),
        sa.Column("event_type", sa.Text, nullable=True),
        sa.Column("tags", sa.Text, nullable=False, server_default=""),
        sa.Column("recurrence_rule", sa.Enum(*RULES, name="recurrencerule", create_type=False),
                  nullable=False, server_default="none"),
        sa.Column("recurrence_end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("date_precision", sa.Enum("exact", "month", name="dateprecision"),
                  nullable=False, server_default="exact"),
        sa.Column("approximate_month", sa.String(7), nullable=True),
        sa.Column("required_attendees", sa.Text, nullable=True),
        sa.Column("creator_id", sa.Integer, sa.ForeignKey("users.id"), nullable=True),
        sa.Column("recurrence_group_id", sa.Integer, sa.ForeignKey("recurrence_groups.id"), nullable=True),
        sa.Column("recurrence_index", sa.Integer, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_events_start_time", "events", ["start_time"])
    op.create_index("ix_events_recurrence_group_id", "events", ["recurrence_group_id"])


def downgrade() -> None:
    op.drop_index("ix_events_recurrence_group_id", table_name="events")
    op.drop_index("ix_events_start_time", table_name="events")
    op.drop_table("events")
    op.drop_table("recurrence_groups")
    op.drop_table("users")
    sa.Enum(name="recurrencerule").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="organizationtype").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="dateprecision").drop(op.get_bind(), checkfirst=True)
