"""initial schema

Revision ID: 5c1e2a7d9b30
Revises:
Create Date: 2026-10-19 09:12:44.318204

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1e2a7d9b30"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

REPORT_STATUSES = ("pending", "claimed", "cleared", "verified")
SCORE_EVENT_KINDS = ("report_created", "cleared", "verified", "verification_cast")


def upgrade() -> None:
    """Create users, reports, votes and the scoring tables."""
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("display_name", sa.Text(), nullable=False),
        sa.Column("city", sa.String(length=100), nullable=True),
        sa.Column("country", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_city", "users", ["city"])
    op.create_index("ix_users_country", "users", ["country"])

    op.create_table(
        "litter_reports",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("reporter_id", sa.Uuid(), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("photo_before", sa.Text(), nullable=True),
        sa.Column(
            "status",
            sa.Enum(*REPORT_STATUSES, name="report_status", native_enum=False, length=16),
            nullable=False,
        ),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("claimed_by", sa.Uuid(), nullable=True),
        sa.Column("claimed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cleared_by", sa.Uuid(), nullable=True),
        sa.Column("cleared_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("photo_after", sa.Text(), nullable=True),
        sa.Column("verification_count_positive", sa.Integer(), nullable=False),
        sa.Column("verification_count_negative", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "claimed_by IS NULL OR status IN ('claimed', 'cleared', 'verified')",
            name="ck_litter_reports_claim_status",
        ),
        sa.CheckConstraint(
            "cleared_by IS NULL OR status IN ('cleared', 'verified')",
            name="ck_litter_reports_clear_status",
        ),
        sa.CheckConstraint(
            "latitude BETWEEN -90 AND 90 AND longitude BETWEEN -180 AND 180",
            name="ck_litter_reports_coordinates",
        ),
        sa.ForeignKeyConstraint(["reporter_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["claimed_by"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["cleared_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_litter_reports_status", "litter_reports", ["status"])
    op.create_index("ix_litter_reports_reporter_id", "litter_reports", ["reporter_id"])
    op.create_index("ix_litter_reports_cleared_by", "litter_reports", ["cleared_by"])
    op.create_index("ix_litter_reports_lat_lng", "litter_reports", ["latitude", "longitude"])

    op.create_table(
        "verification_votes",
        sa.Column("report_id", sa.Uuid(), nullable=False),
        sa.Column("voter_id", sa.Uuid(), nullable=False),
        sa.Column("is_positive", sa.Boolean(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["report_id"], ["litter_reports.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["voter_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("report_id", "voter_id"),
    )
    op.create_index("ix_verification_votes_voter_id", "verification_votes", ["voter_id"])

    op.create_table(
        "user_score_aggregates",
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("total_points", sa.Integer(), nullable=False),
        sa.Column("total_reports", sa.Integer(), nullable=False),
        sa.Column("total_clears", sa.Integer(), nullable=False),
        sa.Column("total_verifications", sa.Integer(), nullable=False),
        sa.Column("current_streak", sa.Integer(), nullable=False),
        sa.Column("longest_streak", sa.Integer(), nullable=False),
        sa.Column("last_cleared_date", sa.Date(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id"),
    )

    op.create_table(
        "score_events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column(
            "kind",
            sa.Enum(*SCORE_EVENT_KINDS, name="score_event_kind", native_enum=False, length=32),
            nullable=False,
        ),
        sa.Column("report_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "kind", "report_id", name="uq_score_events_dedup"),
    )
    op.create_index("ix_score_events_created_at", "score_events", ["created_at"])
    op.create_index("ix_score_events_user_time", "score_events", ["user_id", "created_at"])


def downgrade() -> None:
    """Drop every table created by this revision."""
    op.drop_index("ix_score_events_user_time", table_name="score_events")
    op.drop_index("ix_score_events_created_at", table_name="score_events")
    op.drop_table("score_events")
    op.drop_table("user_score_aggregates")
    op.drop_index("ix_verification_votes_voter_id", table_name="verification_votes")
    op.drop_table("verification_votes")
    op.drop_index("ix_litter_reports_lat_lng", table_name="litter_reports")
    op.drop_index("ix_litter_reports_cleared_by", table_name="litter_reports")
    op.drop_index("ix_litter_reports_reporter_id", table_name="litter_reports")
    op.drop_index("ix_litter_reports_status", table_name="litter_reports")
    op.drop_table("litter_reports")
    op.drop_index("ix_users_country", table_name="users")
    op.drop_index("ix_users_city", table_name="users")
    op.drop_table("users")
