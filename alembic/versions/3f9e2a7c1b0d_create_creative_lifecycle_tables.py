"""create creative lifecycle and spec snapshot tables

Revision ID: 3f9e2a7c1b0d
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f9e2a7c1b0d"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(*, updated: bool) -> list[sa.Column]:
    columns = [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        )
    ]
    if updated:
        columns.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                server_default=sa.text("now()"),
                nullable=False,
            )
        )
    return columns


def upgrade() -> None:
    op.create_table(
        "creatives",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("campaign_id", sa.String(length=64), nullable=False),
        sa.Column("headline", sa.Text(), nullable=False),
        sa.Column("thumbnail_url", sa.Text(), nullable=False),
        sa.Column("destination_url", sa.Text(), nullable=False),
        sa.Column("agg_spend", sa.Float(), nullable=False),
        sa.Column("agg_impressions", sa.BigInteger(), nullable=False),
        sa.Column("agg_clicks", sa.BigInteger(), nullable=False),
        sa.Column("agg_conversions", sa.Integer(), nullable=False),
        sa.Column("agg_cpa", sa.Float(), nullable=True),
        sa.Column("agg_roas", sa.Float(), nullable=True),
        sa.Column("features", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("latest_metrics_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(updated=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_creatives_campaign_id", "creatives", ["campaign_id"])

    op.create_table(
        "metric_snapshots",
        sa.Column("id", sa.String(length=48), nullable=False),
        sa.Column("creative_id", sa.String(length=64), nullable=False),
        sa.Column("at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("spend", sa.Float(), nullable=False),
        sa.Column("impressions", sa.BigInteger(), nullable=False),
        sa.Column("clicks", sa.BigInteger(), nullable=False),
        sa.Column("ctr", sa.Float(), nullable=False),
        sa.Column("cpc", sa.Float(), nullable=False),
        sa.Column("conversions", sa.Integer(), nullable=False),
        sa.Column("cpa", sa.Float(), nullable=True),
        sa.Column("roas", sa.Float(), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(["creative_id"], ["creatives.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_metric_snapshots_creative_id", "metric_snapshots", ["creative_id"])
    op.create_index("ix_metric_snapshots_at", "metric_snapshots", ["at"])

    op.create_table(
        "creative_actions",
        sa.Column("id", sa.String(length=48), nullable=False),
        sa.Column("creative_id", sa.String(length=64), nullable=False),
        sa.Column("action_type", sa.String(length=20), nullable=False),
        sa.Column("reason_short", sa.String(length=255), nullable=False),
        sa.Column("reason_detail", sa.Text(), nullable=False),
        sa.Column("decided_by", sa.String(length=20), nullable=False),
        sa.Column(
            "decided_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("inputs", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(["creative_id"], ["creatives.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_creative_actions_creative_id", "creative_actions", ["creative_id"])
    op.create_index("ix_creative_actions_action_type", "creative_actions", ["action_type"])
    op.create_index("ix_creative_actions_decided_by", "creative_actions", ["decided_by"])
    op.create_index("ix_creative_actions_decided_at", "creative_actions", ["decided_at"])

    op.create_table(
        "learning_configs",
        sa.Column("id", sa.String(length=48), nullable=False),
        sa.Column("account_id", sa.String(length=64), nullable=False),
        sa.Column("target_cpa", sa.Float(), nullable=False),
        sa.Column("target_roas", sa.Float(), nullable=False),
        sa.Column("min_spend", sa.Float(), nullable=False),
        sa.Column("min_conversions", sa.Integer(), nullable=False),
        sa.Column("pause_threshold_days", sa.Integer(), nullable=False),
        sa.Column("scale_threshold_days", sa.Integer(), nullable=False),
        *_timestamps(updated=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_learning_configs_account_id", "learning_configs", ["account_id"], unique=True)

    op.create_table(
        "spec_snapshots",
        sa.Column("id", sa.String(length=48), nullable=False),
        sa.Column("version", sa.String(length=32), nullable=False),
        sa.Column("fetched_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("headline_max_chars", sa.Integer(), nullable=False),
        sa.Column("headline_warn_chars", sa.Integer(), nullable=False),
        sa.Column("image_min_width", sa.Integer(), nullable=False),
        sa.Column("image_min_height", sa.Integer(), nullable=False),
        sa.Column("image_max_size", sa.BigInteger(), nullable=False),
        sa.Column("allowed_formats", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("policies", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_spec_snapshots_fetched_at", "spec_snapshots", ["fetched_at"])


def downgrade() -> None:
    op.drop_index("ix_spec_snapshots_fetched_at", table_name="spec_snapshots")
    op.drop_table("spec_snapshots")

    op.drop_index("ix_learning_configs_account_id", table_name="learning_configs")
    op.drop_table("learning_configs")

    op.drop_index("ix_creative_actions_decided_at", table_name="creative_actions")
    op.drop_index("ix_creative_actions_decided_by", table_name="creative_actions")
    op.drop_index("ix_creative_actions_action_type", table_name="creative_actions")
    op.drop_index("ix_creative_actions_creative_id", table_name="creative_actions")
    op.drop_table("creative_actions")

    op.drop_index("ix_metric_snapshots_at", table_name="metric_snapshots")
    op.drop_index("ix_metric_snapshots_creative_id", table_name="metric_snapshots")
    op.drop_table("metric_snapshots")

    op.drop_index("ix_creatives_campaign_id", table_name="creatives")
    op.drop_table("creatives")
