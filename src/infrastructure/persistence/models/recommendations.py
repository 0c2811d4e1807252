"""Recommendation layer ORM models: recommendations, recommendation_items."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database import Base

from .types import Money, Percent, ScoreValue


class Recommendation(Base):
    """Generated contribution plan; status flips to 'confirmed' exactly once."""

    __tablename__ = "recommendations"
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'confirmed')", name="ck_recommendations_status"),
        CheckConstraint(
            "total_investable = contribution + dividends",
            name="ck_recommendations_total_investable",
        ),
        Index("ix_recommendations_user_generated", "user_id", "generated_at"),
    )

    recommendation_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    portfolio_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("portfolios.portfolio_id", ondelete="CASCADE"),
        nullable=False,
    )
    contribution: Mapped[Decimal] = mapped_column(Money, nullable=False)
    dividends: Mapped[Decimal] = mapped_column(Money, nullable=False)
    total_investable: Mapped[Decimal] = mapped_column(Money, nullable=False)
    base_currency: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="pending")
    correlation_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)
    generated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    items: Mapped[list["RecommendationItem"]] = relationship(
        back_populates="recommendation",
        cascade="all, delete-orphan",
        order_by="RecommendationItem.position",
    )


class RecommendationItem(Base):
    """Per-asset line of a recommendation. Composite PK: (recommendation_id, asset_id)."""

    __tablename__ = "recommendation_items"

    recommendation_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("recommendations.recommendation_id", ondelete="CASCADE"),
        primary_key=True,
    )
    asset_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    symbol: Mapped[str] = mapped_column(Text, nullable=False)
    asset_class_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    asset_class_name: Mapped[str] = mapped_column(Text, nullable=False)
    score: Mapped[Decimal] = mapped_column(ScoreValue, nullable=False)
    current_allocation: Mapped[Decimal] = mapped_column(Percent, nullable=False)
    target_allocation: Mapped[Decimal] = mapped_column(Percent, nullable=False)
    allocation_gap: Mapped[Decimal] = mapped_column(Percent, nullable=False)
    recommended_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    is_over_allocated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    recommendation: Mapped["Recommendation"] = relationship(back_populates="items")
