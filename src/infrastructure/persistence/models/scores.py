"""Scoring layer ORM models: asset_scores, score_history."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database import Base

from .types import ScoreValue


class AssetScore(Base):
    """Current score per (user, asset); replaced on every recalculation."""

    __tablename__ = "asset_scores"
    __table_args__ = (
        UniqueConstraint("user_id", "asset_id", name="uq_asset_scores_user_asset"),
        CheckConstraint("score >= 0", name="ck_asset_scores_score_non_negative"),
    )

    score_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    asset_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("portfolio_assets.asset_id", ondelete="CASCADE"),
        nullable=False,
    )
    symbol: Mapped[str] = mapped_column(Text, nullable=False)
    criteria_version_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("criteria_versions.version_id", ondelete="RESTRICT"),
        nullable=False,
    )
    score: Mapped[Decimal] = mapped_column(ScoreValue, nullable=False)
    # list of CriterionResult objects
    breakdown: Mapped[list] = mapped_column(JSONB, nullable=False)
    correlation_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)
    calculated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class ScoreHistory(Base):
    """Append-only score history; one row per asset per calculation.

    No FK to portfolio_assets: history outlives the holding.  The FK to
    criteria_versions is ON DELETE RESTRICT to keep the audit trail intact.
    """

    __tablename__ = "score_history"
    __table_args__ = (
        Index("ix_score_history_user_asset_time", "user_id", "asset_id", "calculated_at"),
        CheckConstraint("score >= 0", name="ck_score_history_score_non_negative"),
    )

    history_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    asset_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    symbol: Mapped[str] = mapped_column(Text, nullable=False)
    criteria_version_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("criteria_versions.version_id", ondelete="RESTRICT"),
        nullable=False,
    )
    score: Mapped[Decimal] = mapped_column(ScoreValue, nullable=False)
    calculated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
