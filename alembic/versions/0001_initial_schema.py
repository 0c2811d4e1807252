"""Initial schema: criteria, portfolio, scoring, recommendation and audit tables.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MONEY = sa.Numeric(20, 4)
QUANTITY = sa.Numeric(28, 8)
PERCENT = sa.Numeric(9, 4)
RATE = sa.Numeric(24, 12)
SCORE = sa.Numeric(12, 4)


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def upgrade() -> None:
    # ------------------------------------------------------------------ #
    # 1. CRITERIA LAYER                                                    #
    # ------------------------------------------------------------------ #

    op.create_table(
        "criteria_versions",
        sa.Column("version_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("target_market", sa.Text, nullable=False),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("criteria", postgresql.JSONB, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        _created_at(),
        sa.CheckConstraint("version >= 1", name="ck_criteria_versions_version_positive"),
    )

    # ------------------------------------------------------------------ #
    # 2. PORTFOLIO LAYER                                                   #
    # ------------------------------------------------------------------ #

    op.create_table(
        "portfolios",
        sa.Column("portfolio_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False, unique=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("base_currency", sa.Text, nullable=False, server_default="USD"),
        _created_at(),
    )

    op.create_table(
        "asset_classes",
        sa.Column("class_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("target_min", PERCENT, nullable=False),
        sa.Column("target_max", PERCENT, nullable=False),
        sa.Column("max_assets", sa.Integer, nullable=True),
        sa.Column("min_allocation_value", MONEY, nullable=True),
        _created_at(),
        sa.CheckConstraint(
            "target_min >= 0 AND target_max <= 100 AND target_min <= target_max",
            name="ck_asset_classes_target_range",
        ),
    )

    op.create_table(
        "portfolio_assets",
        sa.Column("asset_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "portfolio_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("portfolios.portfolio_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("symbol", sa.Text, nullable=False),
        sa.Column("quantity", QUANTITY, nullable=False),
        sa.Column("purchase_price", MONEY, nullable=False),
        sa.Column("current_price", MONEY, nullable=True),
        sa.Column("currency", sa.Text, nullable=False, server_default="USD"),
        sa.Column(
            "asset_class_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("asset_classes.class_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("subclass_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("is_ignored", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.UniqueConstraint("portfolio_id", "symbol", name="uq_portfolio_assets_symbol"),
        sa.CheckConstraint("quantity >= 0", name="ck_portfolio_assets_quantity_non_negative"),
    )

    # ------------------------------------------------------------------ #
    # 3. SCORING LAYER                                                     #
    # ------------------------------------------------------------------ #

    op.create_table(
        "asset_scores",
        sa.Column("score_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "asset_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("portfolio_assets.asset_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("symbol", sa.Text, nullable=False),
        sa.Column(
            "criteria_version_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("criteria_versions.version_id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("score", SCORE, nullable=False),
        sa.Column("breakdown", postgresql.JSONB, nullable=False),
        sa.Column("correlation_id", postgresql.UUID(as_uuid=True), nullable=True),
        _created_at("calculated_at"),
        sa.UniqueConstraint("user_id", "asset_id", name="uq_asset_scores_user_asset"),
        sa.CheckConstraint("score >= 0", name="ck_asset_scores_score_non_negative"),
    )

    op.create_table(
        "score_history",
        sa.Column("history_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("asset_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("symbol", sa.Text, nullable=False),
        sa.Column(
            "criteria_version_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("criteria_versions.version_id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("score", SCORE, nullable=False),
        sa.Column("calculated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("score >= 0", name="ck_score_history_score_non_negative"),
    )

    # ------------------------------------------------------------------ #
    # 4. RECOMMENDATION LAYER                                              #
    # ------------------------------------------------------------------ #

    op.create_table(
        "recommendations",
        sa.Column("recommendation_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "portfolio_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("portfolios.portfolio_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("contribution", MONEY, nullable=False),
        sa.Column("dividends", MONEY, nullable=False),
        sa.Column("total_investable", MONEY, nullable=False),
        sa.Column("base_currency", sa.Text, nullable=False),
        sa.Column("status", sa.Text, nullable=False, server_default="pending"),
        sa.Column("correlation_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("generated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed')", name="ck_recommendations_status"
        ),
        sa.CheckConstraint(
            "total_investable = contribution + dividends",
            name="ck_recommendations_total_investable",
        ),
    )

    op.create_table(
        "recommendation_items",
        sa.Column(
            "recommendation_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("recommendations.recommendation_id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("asset_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("position", sa.Integer, nullable=False),
        sa.Column("symbol", sa.Text, nullable=False),
        sa.Column("asset_class_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("asset_class_name", sa.Text, nullable=False),
        sa.Column("score", SCORE, nullable=False),
        sa.Column("current_allocation", PERCENT, nullable=False),
        sa.Column("target_allocation", PERCENT, nullable=False),
        sa.Column("allocation_gap", PERCENT, nullable=False),
        sa.Column("recommended_amount", MONEY, nullable=False),
        sa.Column("is_over_allocated", sa.Boolean, nullable=False, server_default=sa.false()),
    )

    op.create_table(
        "investments",
        sa.Column("investment_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "portfolio_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("portfolios.portfolio_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "asset_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("portfolio_assets.asset_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("symbol", sa.Text, nullable=False),
        sa.Column("quantity", QUANTITY, nullable=False),
        sa.Column("price_per_unit", MONEY, nullable=False),
        sa.Column("total_amount", MONEY, nullable=False),
        sa.Column("currency", sa.Text, nullable=False),
        sa.Column(
            "recommendation_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("recommendations.recommendation_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("recommended_amount", MONEY, nullable=True),
        sa.Column("invested_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_investments_quantity_positive"),
    )

    # ------------------------------------------------------------------ #
    # 5. MARKET DATA AND AUDIT                                             #
    # ------------------------------------------------------------------ #

    op.create_table(
        "exchange_rates",
        sa.Column("rate_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("base_currency", sa.Text, nullable=False),
        sa.Column("quote_currency", sa.Text, nullable=False),
        sa.Column("rate", RATE, nullable=False),
        sa.Column("rate_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("source", sa.Text, nullable=False),
        _created_at("fetched_at"),
        sa.UniqueConstraint(
            "base_currency", "quote_currency", "rate_date", name="uq_exchange_rates_pair_date"
        ),
        sa.CheckConstraint("rate > 0", name="ck_exchange_rates_rate_positive"),
    )

    op.create_table(
        "calculation_events",
        sa.Column("event_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("correlation_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("event_type", sa.Text, nullable=False),
        sa.Column("payload", postgresql.JSONB, nullable=False),
        _created_at(),
    )

    # ------------------------------------------------------------------ #
    # 6. INDEXES                                                           #
    # ------------------------------------------------------------------ #

    op.create_index(
        "ix_criteria_versions_user_active", "criteria_versions", ["user_id", "is_active"]
    )
    op.create_index("ix_asset_classes_user", "asset_classes", ["user_id"])
    op.create_index(
        "ix_score_history_user_asset_time",
        "score_history",
        ["user_id", "asset_id", "calculated_at"],
    )
    op.create_index(
        "ix_recommendations_user_generated", "recommendations", ["user_id", "generated_at"]
    )
    op.create_index("ix_investments_user_time", "investments", ["user_id", "invested_at"])
    op.create_index(
        "ix_exchange_rates_pair_date",
        "exchange_rates",
        ["base_currency", "quote_currency", "rate_date"],
    )
    op.create_index(
        "ix_calculation_events_correlation", "calculation_events", ["correlation_id"]
    )


def downgrade() -> None:
    # Drop in reverse dependency order (leaves first, roots last).
    op.drop_index("ix_calculation_events_correlation", table_name="calculation_events")
    op.drop_index("ix_exchange_rates_pair_date", table_name="exchange_rates")
    op.drop_index("ix_investments_user_time", table_name="investments")
    op.drop_index("ix_recommendations_user_generated", table_name="recommendations")
    op.drop_index("ix_score_history_user_asset_time", table_name="score_history")
    op.drop_index("ix_asset_classes_user", table_name="asset_classes")
    op.drop_index("ix_criteria_versions_user_active", table_name="criteria_versions")

    op.drop_table("calculation_events")
    op.drop_table("exchange_rates")
    op.drop_table("investments")
    op.drop_table("recommendation_items")
    op.drop_table("recommendations")
    op.drop_table("score_history")
    op.drop_table("asset_scores")
    op.drop_table("portfolio_assets")
    op.drop_table("asset_classes")
    op.drop_table("portfolios")
    op.drop_table("criteria_versions")
