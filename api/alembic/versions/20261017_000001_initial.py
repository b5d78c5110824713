"""initial schema

Revision ID: 20261017_000001
Revises:
Create Date: 2026-10-17 00:00:01.000000
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261017_000001"
down_revision = None
branch_labels = None
depends_on = None


json_type = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    """Create vibes, profiles, history, favorites, and monthly metrics."""
    op.create_table(
        "vibes",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("keywords", json_type, nullable=True),
        sa.Column("strength", sa.Float(), nullable=False),
        sa.Column("sentiment", sa.String(length=16), nullable=False, server_default="neutral"),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("first_seen", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_seen", sa.DateTime(timezone=True), nullable=True),
        sa.Column("half_life", sa.Float(), nullable=True),
        sa.Column("current_relevance", sa.Float(), nullable=True),
        sa.Column("sources", json_type, nullable=True),
        sa.Column("related_vibes", json_type, nullable=True),
        sa.Column("domains", json_type, nullable=True),
        sa.Column("geography", json_type, nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_vibes"),
    )
    op.create_index("ix_vibes_name", "vibes", ["name"])
    op.create_index("ix_vibes_category", "vibes", ["category"])
    op.create_index("ix_vibes_timestamp", "vibes", ["timestamp"])

    op.create_table(
        "user_profiles",
        sa.Column("id", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("display_name", sa.String(length=100), nullable=True),
        sa.Column("tier", sa.String(length=16), nullable=False, server_default="free"),
        sa.Column("queries_this_month", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("query_limit", sa.Integer(), nullable=True),
        sa.Column("region", sa.String(length=32), nullable=True),
        sa.Column("interests", json_type, nullable=True),
        sa.Column("avoid_topics", json_type, nullable=True),
        sa.Column("conversation_style", sa.String(length=16), nullable=False, server_default="casual"),
        sa.Column("email_notifications", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("share_data_for_research", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("onboarding_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("last_active", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(
            "query_limit IS NULL OR queries_this_month <= query_limit",
            name="ck_user_profiles_quota",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_user_profiles"),
    )
    op.create_index("ix_user_profiles_email", "user_profiles", ["email"])

    op.create_table(
        "advice_history",
        sa.Column("pk", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("scenario", json_type, nullable=False),
        sa.Column("matched_vibes", json_type, nullable=True),
        sa.Column("advice", json_type, nullable=False),
        sa.Column("region_filter_applied", sa.String(length=32), nullable=True),
        sa.Column("interest_boosts_applied", json_type, nullable=True),
        sa.Column("rating", sa.Integer(), nullable=True),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("was_helpful", sa.Boolean(), nullable=True),
        sa.PrimaryKeyConstraint("pk", name="pk_advice_history"),
        sa.UniqueConstraint("id", name="uq_advice_history_id"),
    )
    op.create_index("ix_advice_history_user_id", "advice_history", ["user_id"])
    op.create_index("ix_advice_history_user_timestamp", "advice_history", ["user_id", "timestamp"])

    op.create_table(
        "favorites",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=16), nullable=False),
        sa.Column("reference_id", sa.String(length=255), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("metadata", json_type, nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_favorites"),
        sa.UniqueConstraint("user_id", "type", "reference_id", name="uq_favorite_per_user_reference"),
    )
    op.create_index("ix_favorites_user_id", "favorites", ["user_id"])

    op.create_table(
        "monthly_metrics",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("month", sa.String(length=7), nullable=False),
        sa.Column("queries_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("top_regions_queried", json_type, nullable=True),
        sa.Column("top_interest_matches", json_type, nullable=True),
        sa.Column("average_rating", sa.Float(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_monthly_metrics"),
        sa.UniqueConstraint("user_id", "month", name="uq_monthly_metric_user_month"),
    )
    op.create_index("ix_monthly_metrics_user_id", "monthly_metrics", ["user_id"])


def downgrade() -> None:
    """Drop every table created by this revision."""
    op.drop_index("ix_monthly_metrics_user_id", table_name="monthly_metrics")
    op.drop_table("monthly_metrics")
    op.drop_index("ix_favorites_user_id", table_name="favorites")
    op.drop_table("favorites")
    op.drop_index("ix_advice_history_user_timestamp", table_name="advice_history")
    op.drop_index("ix_advice_history_user_id", table_name="advice_history")
    op.drop_table("advice_history")
    op.drop_index("ix_user_profiles_email", table_name="user_profiles")
    op.drop_table("user_profiles")
    op.drop_index("ix_vibes_timestamp", table_name="vibes")
    op.drop_index("ix_vibes_category", table_name="vibes")
    op.drop_index("ix_vibes_name", table_name="vibes")
    op.drop_table("vibes")
