"""Initial schema: users, Garmin connections and activities, workout logs.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("display_name", sa.String(length=100), nullable=True),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # -------------------------------------------------------------------------
    # Garmin connections (at most one active per user)
    # -------------------------------------------------------------------------
    op.create_table(
        "garmin_connections",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("garmin_user_id", sa.String(length=100), nullable=True),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("token_secret", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("last_sync_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_garmin_connections_user_id", "garmin_connections", ["user_id"])
    op.create_index("ix_garmin_connections_access_token", "garmin_connections", ["access_token"])
    op.create_index(
        "uq_garmin_connections_user_active",
        "garmin_connections",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    # -------------------------------------------------------------------------
    # Garmin activities (raw_data holds file_callback_url once announced)
    # -------------------------------------------------------------------------
    op.create_table(
        "garmin_activities",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("garmin_activity_id", sa.String(length=64), nullable=False),
        sa.Column("activity_type", sa.String(length=50), nullable=True),
        sa.Column("raw_data", JSONB(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "garmin_activity_id", name="uq_garmin_activity_user_activity"),
    )
    op.create_index("ix_garmin_activities_user_id", "garmin_activities", ["user_id"])
    op.create_index("ix_garmin_activities_garmin_activity_id", "garmin_activities", ["garmin_activity_id"])

    # -------------------------------------------------------------------------
    # Workout logs and their exercises
    # -------------------------------------------------------------------------
    op.create_table(
        "workout_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("workout_name", sa.String(length=200), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workout_logs_user_id", "workout_logs", ["user_id"])

    op.create_table(
        "exercise_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("workout_log_id", sa.Integer(), nullable=False),
        sa.Column("exercise_name", sa.String(length=100), nullable=False),
        sa.Column("sets_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("reps_completed", sa.String(length=500), nullable=True),  # "5, 5, 3"
        sa.Column("weight_kg", sa.Float(), nullable=True),
        sa.Column("set_details", JSONB(), nullable=True),  # [{set, reps, weight}, ...]
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("garmin_activity_id", sa.String(length=64), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["workout_log_id"], ["workout_logs.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_exercise_logs_workout_log_id", "exercise_logs", ["workout_log_id"])
    op.create_index(
        "ix_exercise_logs_workout_activity",
        "exercise_logs",
        ["workout_log_id", "garmin_activity_id"],
    )


def downgrade() -> None:
    op.drop_table("exercise_logs")
    op.drop_table("workout_logs")
    op.drop_table("garmin_activities")
    op.drop_table("garmin_connections")
    op.drop_table("users")
